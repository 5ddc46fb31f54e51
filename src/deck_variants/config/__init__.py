"""Configuration module for Deck Variants."""

from .schema import (
    SplitConfig,
    TagLabels,
    VariantConfig,
    Variant,
    PartitionMode,
    AmbiguityPolicy,
)
from .loader import load_config, save_config, parse_config

__all__ = [
    'SplitConfig',
    'TagLabels',
    'VariantConfig',
    'Variant',
    'PartitionMode',
    'AmbiguityPolicy',
    'load_config',
    'save_config',
    'parse_config',
]
