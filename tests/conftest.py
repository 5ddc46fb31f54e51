"""Shared fixtures: small tagged decks built with python-pptx."""

from pathlib import Path

import pytest
from PIL import Image
from pptx import Presentation
from pptx.chart.data import CategoryChartData
from pptx.enum.chart import XL_CHART_TYPE
from pptx.util import Inches

from deck_variants.host import PresentationHost

TAG_A = "test-oriented"
TAG_B = "operations-oriented"
TAG_BOTH = "test-and-operations"

TITLE_ONLY_LAYOUT = 5


def build_deck(path: Path, slides, image_path: Path = None, notes: dict = None, chart: bool = False) -> Path:
    """Write a deck with one slide per entry of ``slides``.

    Each entry is the list of tag texts placed as textboxes on that slide.
    Slides are titled "Slide <n>". Every slide gets ``image_path`` as a
    picture when given, and a column chart with an embedded workbook when
    ``chart`` is set; ``notes`` maps slide numbers to speaker notes.
    """
    prs = Presentation()
    layout = prs.slide_layouts[TITLE_ONLY_LAYOUT]
    for number, tags in enumerate(slides, 1):
        slide = prs.slides.add_slide(layout)
        slide.shapes.title.text = f"Slide {number}"
        for tag in tags:
            box = slide.shapes.add_textbox(Inches(0.2), Inches(0.2), Inches(3), Inches(0.5))
            box.text_frame.text = tag
        if chart:
            data = CategoryChartData()
            data.categories = ['Q1', 'Q2']
            data.add_series('Sessions', (number, number + 1))
            slide.shapes.add_chart(
                XL_CHART_TYPE.COLUMN_CLUSTERED, Inches(1), Inches(3), Inches(4), Inches(3), data
            )
        if image_path is not None:
            slide.shapes.add_picture(str(image_path), Inches(4), Inches(2), Inches(1), Inches(1))
        if notes and number in notes:
            slide.notes_slide.notes_text_frame.text = notes[number]
    prs.save(str(path))
    return path


def slide_titles(path: Path):
    return [slide.shapes.title.text for slide in Presentation(str(path)).slides]


def deck_texts(path: Path):
    """All shape texts in a deck, slide by slide."""
    return [
        [shape.text_frame.text for shape in slide.shapes if shape.has_text_frame]
        for slide in Presentation(str(path)).slides
    ]


@pytest.fixture
def deck_factory(tmp_path):
    def factory(slides, name='master.pptx', **kwargs):
        return build_deck(tmp_path / name, slides, **kwargs)
    return factory


@pytest.fixture
def image_file(tmp_path):
    path = tmp_path / 'logo.png'
    Image.new('RGB', (120, 80), color=(200, 30, 30)).save(path)
    return path


@pytest.fixture
def host():
    with PresentationHost() as running_host:
        yield running_host
