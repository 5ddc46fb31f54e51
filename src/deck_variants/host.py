"""
Presentation Host

Adapter between the partitioning core and the presentation object model.
The core only talks to PresentationHost, Deck, Slide and Shape; the
python-pptx specifics stay in this module and in pptx_utils.

The host and every deck it opens are context managers, so decks are
closed and the host is released on every exit path:

    with PresentationHost() as host:
        with host.open_deck('master.pptx') as deck:
            for slide in deck.slides:
                ...
"""

import logging
import shutil
import zipfile
from pathlib import Path
from typing import Callable, List, Optional, Union

from pptx import Presentation
from pptx.exc import PackageNotFoundError

from .errors import HostOperationFailed, HostUnavailable
from .pptx_utils import (
    PartCache,
    copy_slide,
    remove_shape,
    remove_slide,
    shape_text,
    strip_slides,
)

logger = logging.getLogger(__name__)

PostSaveHook = Callable[[Path], None]


class Shape:
    """A shape on a slide."""

    def __init__(self, slide: "Slide", pptx_shape):
        self._slide = slide
        self._shape = pptx_shape

    @property
    def name(self) -> str:
        return self._shape.name

    @property
    def has_text(self) -> bool:
        """True when the shape has a text frame holding non-empty text."""
        return bool(shape_text(self._shape))

    @property
    def text(self) -> str:
        return shape_text(self._shape) or ''

    def delete(self) -> None:
        try:
            remove_shape(self._shape)
        except ValueError as e:
            raise HostOperationFailed('delete shape', slide_index=self._slide.index, reason=str(e)) from e

    def __repr__(self) -> str:
        return f"Shape(name={self.name!r}, slide={self._slide.index})"


class Slide:
    """A slide at a fixed 1-based position of an open deck.

    The position is only valid until slides before it are deleted.
    """

    def __init__(self, deck: "Deck", index: int, pptx_slide):
        self.deck = deck
        self.index = index
        self._slide = pptx_slide

    @property
    def shapes(self) -> List[Shape]:
        return [Shape(self, shape) for shape in self._slide.shapes]

    @property
    def title(self) -> str:
        title_shape = self._slide.shapes.title
        if title_shape is not None and title_shape.has_text_frame:
            return title_shape.text_frame.text.strip()
        return ''

    @property
    def layout_name(self) -> str:
        return self._slide.slide_layout.name

    def delete(self) -> None:
        self.deck._delete_slide(self.index)

    def __repr__(self) -> str:
        return f"Slide(index={self.index}, deck={self.deck.path.name!r})"


class Deck:
    """An open presentation."""

    def __init__(self, host: "PresentationHost", path: Path, prs):
        self.host = host
        self.path = path
        self._prs = prs
        self._part_cache: PartCache = {}
        self.closed = False

    def _require_open(self, operation: str) -> None:
        if self.closed:
            raise HostOperationFailed(operation, path=self.path, reason="deck is closed")

    @property
    def slide_count(self) -> int:
        self._require_open('slide count')
        return len(self._prs.slides)

    def slide(self, index: int) -> Slide:
        """Get the slide at 1-based ``index``."""
        self._require_open('get slide')
        if not 1 <= index <= len(self._prs.slides):
            raise IndexError(f"Slide {index} out of range for {self.path.name} ({len(self._prs.slides)} slides)")
        return Slide(self, index, self._prs.slides[index - 1])

    @property
    def slides(self) -> List[Slide]:
        """Slides first to last, as positioned now."""
        self._require_open('list slides')
        return [Slide(self, position + 1, pptx_slide) for position, pptx_slide in enumerate(self._prs.slides)]

    @property
    def layout_count(self) -> int:
        self._require_open('count layouts')
        return sum(len(master.slide_layouts) for master in self._prs.slide_masters)

    def _delete_slide(self, index: int) -> None:
        self._require_open('delete slide')
        try:
            remove_slide(self._prs, index - 1)
        except (IndexError, KeyError) as e:
            raise HostOperationFailed('delete slide', slide_index=index, path=self.path, reason=str(e)) from e

    def copy_slide(self, slide: Slide) -> Slide:
        """Append a copy of a slide from another open deck to this one."""
        self._require_open('copy slide')
        slide.deck._require_open('copy slide')
        try:
            copy_slide(slide._slide, slide.deck._prs, self._prs, self._part_cache)
        except (ValueError, KeyError) as e:
            raise HostOperationFailed('copy slide', slide_index=slide.index, path=self.path, reason=str(e)) from e
        return self.slide(len(self._prs.slides))

    def strip_slides(self) -> int:
        """Remove every slide, keeping masters, layouts and theme."""
        self._require_open('strip slides')
        removed = strip_slides(self._prs)
        logger.info(f"Stripped {removed} slides from {self.path.name}")
        return removed

    def save_as(self, path: Union[str, Path]) -> Path:
        self._require_open('save')
        path = Path(path)
        try:
            self._prs.save(str(path))
        except OSError as e:
            raise HostOperationFailed('save', path=path, reason=str(e)) from e
        logger.info(f"Saved {path}")
        self.host._after_save(path)
        return path

    def save(self) -> Path:
        return self.save_as(self.path)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._prs = None
        self._part_cache.clear()
        self.host._forget(self)
        logger.debug(f"Closed {self.path.name}")

    def __enter__(self) -> "Deck":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = 'closed' if self.closed else 'open'
        return f"Deck({str(self.path)!r}, {state})"


class PresentationHost:
    """Handle on the presentation application.

    Args:
        post_save: Optional callback run with the saved path after every
            save, for environment-specific follow-up (e.g. dismissing a
            compatibility dialog of a desktop application).
    """

    def __init__(self, post_save: Optional[PostSaveHook] = None):
        self.post_save = post_save
        self._open_decks: List[Deck] = []
        self._running = False
        self._released = False

    @property
    def running(self) -> bool:
        return self._running

    def open(self) -> "PresentationHost":
        if self._released:
            raise HostUnavailable("Presentation host was already released")
        self._running = True
        logger.debug("Presentation host started")
        return self

    def quit(self) -> None:
        """Close every deck still open and release the host."""
        for deck in list(self._open_decks):
            deck.close()
        if self._running:
            logger.debug("Presentation host released")
        self._running = False
        self._released = True

    def __enter__(self) -> "PresentationHost":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.quit()

    def _require_running(self) -> None:
        if not self._running:
            raise HostUnavailable("Presentation host is not running")

    @property
    def open_decks(self) -> List[Deck]:
        return list(self._open_decks)

    def list_files(self, directory: Union[str, Path], extension: str = '.pptx') -> List[Path]:
        """List presentation files in a directory, sorted by name.

        Office lock files (``~$name.pptx``) are skipped.
        """
        directory = Path(directory)
        extension = extension.lower()
        return sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix.lower() == extension and not p.name.startswith('~$')
        )

    def copy_file(self, source: Union[str, Path], dest: Union[str, Path]) -> Path:
        source, dest = Path(source), Path(dest)
        try:
            shutil.copyfile(source, dest)
        except OSError as e:
            raise HostOperationFailed('copy file', path=source, reason=str(e)) from e
        logger.info(f"Copied {source.name} -> {dest}")
        return dest

    def open_deck(self, path: Union[str, Path]) -> Deck:
        self._require_running()
        path = Path(path)
        try:
            prs = Presentation(str(path))
        except (PackageNotFoundError, zipfile.BadZipFile, OSError, KeyError, ValueError) as e:
            raise HostOperationFailed('open', path=path, reason=str(e)) from e
        deck = Deck(self, path, prs)
        self._open_decks.append(deck)
        logger.debug(f"Opened {path.name} ({deck.slide_count} slides)")
        return deck

    def _forget(self, deck: Deck) -> None:
        if deck in self._open_decks:
            self._open_decks.remove(deck)

    def _after_save(self, path: Path) -> None:
        if self.post_save is not None:
            self.post_save(path)
