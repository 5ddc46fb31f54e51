"""Tests for the python-pptx presentation host."""

import pytest
from pptx import Presentation
from pptx.enum.shapes import MSO_SHAPE_TYPE

from deck_variants.errors import HostOperationFailed, HostUnavailable
from deck_variants.host import PresentationHost

from conftest import TAG_A, TAG_B, TAG_BOTH, deck_texts, slide_titles


def test_host_must_be_open():
    host = PresentationHost()
    with pytest.raises(HostUnavailable):
        host.open_deck("anything.pptx")


def test_host_cannot_restart_after_quit(deck_factory):
    path = deck_factory([[TAG_A]])
    host = PresentationHost()
    with host:
        deck = host.open_deck(path)
    assert deck.closed
    with pytest.raises(HostUnavailable):
        host.open()


def test_quit_closes_open_decks(deck_factory):
    """Test that releasing the host closes every deck still open."""
    path = deck_factory([[TAG_A], [TAG_B]])
    host = PresentationHost().open()
    first = host.open_deck(path)
    second = host.open_deck(path)
    assert host.open_decks == [first, second]

    host.quit()
    assert first.closed and second.closed
    assert host.open_decks == []
    with pytest.raises(HostOperationFailed):
        first.slide_count


def test_open_deck_missing_file(host, tmp_path):
    with pytest.raises(HostOperationFailed) as exc_info:
        host.open_deck(tmp_path / "missing.pptx")
    assert exc_info.value.operation == "open"


def test_open_deck_not_a_presentation(host, tmp_path):
    path = tmp_path / "broken.pptx"
    path.write_text("not a zip", encoding="utf-8")
    with pytest.raises(HostOperationFailed):
        host.open_deck(path)


def test_slides_are_one_based(host, deck_factory):
    path = deck_factory([[TAG_A], [TAG_B], [TAG_BOTH]])
    with host.open_deck(path) as deck:
        assert deck.slide_count == 3
        assert deck.slide(1).title == "Slide 1"
        assert deck.slide(3).title == "Slide 3"
        assert [slide.index for slide in deck.slides] == [1, 2, 3]
        with pytest.raises(IndexError):
            deck.slide(0)
        with pytest.raises(IndexError):
            deck.slide(4)


def test_shape_text_properties(host, deck_factory):
    path = deck_factory([[TAG_A]])
    with host.open_deck(path) as deck:
        shapes = deck.slide(1).shapes
        tag = [shape for shape in shapes if shape.text == TAG_A][0]
        assert tag.has_text
        assert tag.name.startswith("TextBox")


def test_delete_slide(host, deck_factory, tmp_path):
    """Test that deleting shifts later slides and survives saving."""
    path = deck_factory([[TAG_A], [TAG_B], [TAG_BOTH]])
    out = tmp_path / "out.pptx"
    with host.open_deck(path) as deck:
        deck.slide(2).delete()
        assert deck.slide_count == 2
        assert deck.slide(2).title == "Slide 3"
        deck.save_as(out)

    assert slide_titles(out) == ["Slide 1", "Slide 3"]


def test_delete_shape(host, deck_factory, tmp_path):
    path = deck_factory([[TAG_A]])
    out = tmp_path / "out.pptx"
    with host.open_deck(path) as deck:
        slide = deck.slide(1)
        tag = [shape for shape in slide.shapes if shape.text == TAG_A][0]
        tag.delete()
        with pytest.raises(HostOperationFailed):
            tag.delete()
        deck.save_as(out)

    assert deck_texts(out) == [["Slide 1"]]


def test_strip_slides_keeps_layouts(host, deck_factory, tmp_path):
    """Test that stripping leaves the theme and layouts in place."""
    path = deck_factory([[TAG_A], [TAG_B]])
    out = tmp_path / "empty.pptx"
    with host.open_deck(path) as deck:
        layouts = deck.layout_count
        assert deck.strip_slides() == 2
        assert deck.slide_count == 0
        deck.save_as(out)

    prs = Presentation(str(out))
    assert len(prs.slides) == 0
    assert sum(len(m.slide_layouts) for m in prs.slide_masters) == layouts


def test_copy_slide_between_decks(host, deck_factory, tmp_path):
    """Test that a copied slide keeps layout, shapes and notes."""
    source_path = deck_factory([[TAG_A], [TAG_BOTH]], notes={2: "Remember the demo"})
    target_path = deck_factory([[TAG_B]], name="target.pptx")
    out = tmp_path / "copied.pptx"

    with host.open_deck(source_path) as source, host.open_deck(target_path) as target:
        copied = target.copy_slide(source.slide(2))
        assert copied.index == 2
        assert copied.title == "Slide 2"
        assert copied.layout_name == source.slide(2).layout_name
        target.save_as(out)

    assert deck_texts(out) == [["Slide 1", TAG_B], ["Slide 2", TAG_BOTH]]
    copied_slide = Presentation(str(out)).slides[1]
    assert copied_slide.has_notes_slide
    assert copied_slide.notes_slide.notes_text_frame.text == "Remember the demo"


def test_copy_slide_with_picture(host, deck_factory, image_file, tmp_path):
    """Test that pictures are re-related in the target package."""
    source_path = deck_factory([[TAG_A]], image_path=image_file)
    target_path = tmp_path / "target.pptx"
    out = tmp_path / "copied.pptx"

    host.copy_file(source_path, target_path)
    with host.open_deck(source_path) as source, host.open_deck(target_path) as target:
        target.strip_slides()
        target.copy_slide(source.slide(1))
        target.copy_slide(source.slide(1))
        target.save_as(out)

    original_blob = image_file.read_bytes()
    prs = Presentation(str(out))
    assert len(prs.slides) == 2
    for slide in prs.slides:
        pictures = [s for s in slide.shapes if s.shape_type == MSO_SHAPE_TYPE.PICTURE]
        assert len(pictures) == 1
        assert pictures[0].image.blob == original_blob


def test_copy_from_closed_deck_fails(host, deck_factory):
    source_path = deck_factory([[TAG_A]])
    target_path = deck_factory([[TAG_B]], name="target.pptx")
    source = host.open_deck(source_path)
    slide = source.slide(1)
    source.close()
    with host.open_deck(target_path) as target:
        with pytest.raises(HostOperationFailed):
            target.copy_slide(slide)


def test_save_calls_post_save_hook(deck_factory, tmp_path):
    saved = []
    path = deck_factory([[TAG_A]])
    out = tmp_path / "out.pptx"
    with PresentationHost(post_save=saved.append) as host:
        with host.open_deck(path) as deck:
            deck.save_as(out)
    assert saved == [out]


def test_save_into_missing_directory_fails(host, deck_factory, tmp_path):
    path = deck_factory([[TAG_A]])
    with host.open_deck(path) as deck:
        with pytest.raises(HostOperationFailed) as exc_info:
            deck.save_as(tmp_path / "no" / "such" / "dir.pptx")
    assert exc_info.value.operation == "save"


def test_list_files(host, tmp_path):
    """Test candidate listing: sorted, case-insensitive, no lock files."""
    for name in ["b.pptx", "a.PPTX", "~$a.pptx", "notes.txt", "c.ppt"]:
        (tmp_path / name).write_bytes(b"")
    (tmp_path / "folder.pptx").mkdir()

    names = [p.name for p in host.list_files(tmp_path, ".pptx")]
    assert names == ["a.PPTX", "b.pptx"]


def test_copy_file_missing_source(host, tmp_path):
    with pytest.raises(HostOperationFailed) as exc_info:
        host.copy_file(tmp_path / "missing.pptx", tmp_path / "copy.pptx")
    assert exc_info.value.operation == "copy file"
