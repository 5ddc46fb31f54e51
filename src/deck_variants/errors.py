"""
Error Types for Deck Variants

Every failure the split run can report derives from DeckVariantsError so
callers can catch the whole family at the top level.
"""

from pathlib import Path
from typing import Optional, Sequence, Union


class DeckVariantsError(Exception):
    """Base class for all deck-variants errors."""


class HostUnavailable(DeckVariantsError):
    """The presentation host could not be started or was already released."""


class NoCandidateFiles(DeckVariantsError):
    """No input presentation was found to process."""

    def __init__(self, directory: Union[str, Path], extension: str):
        self.directory = Path(directory)
        self.extension = extension
        super().__init__(f"No *{extension} files found in {self.directory}")


class InvalidSelection(DeckVariantsError, ValueError):
    """User input does not name one of the offered candidates."""


class ClassificationError(DeckVariantsError):
    """A slide's tag markers do not resolve to a single classification."""

    def __init__(self, slide_index: int, message: str):
        self.slide_index = slide_index
        super().__init__(message)


class MissingTagError(ClassificationError):
    """A slide carries no tag textbox at all."""

    def __init__(self, slide_index: int):
        super().__init__(
            slide_index,
            f"Slide {slide_index} has no tag textbox. "
            f"Add one of the tag labels to it in the master deck."
        )


class AmbiguousTagError(ClassificationError):
    """A slide carries more than one tag textbox."""

    def __init__(self, slide_index: int, labels: Sequence[str]):
        self.labels = list(labels)
        found = ', '.join(repr(label) for label in self.labels)
        super().__init__(
            slide_index,
            f"Slide {slide_index} has {len(self.labels)} tag textboxes ({found}). "
            f"Keep exactly one of them in the master deck."
        )


class HostOperationFailed(DeckVariantsError):
    """A single call against the presentation host failed."""

    def __init__(
        self,
        operation: str,
        slide_index: Optional[int] = None,
        path: Optional[Union[str, Path]] = None,
        reason: Optional[str] = None,
    ):
        self.operation = operation
        self.slide_index = slide_index
        self.path = Path(path) if path is not None else None

        message = f"Host operation '{operation}' failed"
        if slide_index is not None:
            message += f" on slide {slide_index}"
        if self.path is not None:
            message += f" ({self.path})"
        if reason:
            message += f": {reason}"
        super().__init__(message)
