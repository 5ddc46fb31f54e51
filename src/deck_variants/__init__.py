"""
Deck Variants

Splits a master PowerPoint deck into two variant decks, using a tag
textbox on each slide to decide which variant(s) the slide belongs to.
"""

__version__ = "0.1.0"

from .config import (
    SplitConfig,
    TagLabels,
    Variant,
    PartitionMode,
    AmbiguityPolicy,
    load_config,
    save_config,
)

from .errors import (
    DeckVariantsError,
    HostUnavailable,
    NoCandidateFiles,
    InvalidSelection,
    ClassificationError,
    MissingTagError,
    AmbiguousTagError,
    HostOperationFailed,
)

from .host import PresentationHost

from .classify import (
    Outcome,
    Disposition,
    find_tag_shapes,
    classify_slide,
    resolve_disposition,
)

from .partition import (
    split_presentation,
    output_paths,
    PartitionReport,
)

from .analyze import (
    check_presentation,
    get_check_json,
)

__all__ = [
    # Config
    'SplitConfig',
    'TagLabels',
    'Variant',
    'PartitionMode',
    'AmbiguityPolicy',
    'load_config',
    'save_config',
    # Errors
    'DeckVariantsError',
    'HostUnavailable',
    'NoCandidateFiles',
    'InvalidSelection',
    'ClassificationError',
    'MissingTagError',
    'AmbiguousTagError',
    'HostOperationFailed',
    # Host
    'PresentationHost',
    # Classification
    'Outcome',
    'Disposition',
    'find_tag_shapes',
    'classify_slide',
    'resolve_disposition',
    # Partitioning
    'split_presentation',
    'output_paths',
    'PartitionReport',
    # Check
    'check_presentation',
    'get_check_json',
]
