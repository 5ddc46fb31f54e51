"""
Configuration Loader for Deck Variants

Loads split configuration from YAML or JSON files.
"""

import json
from pathlib import Path
from typing import Union

import yaml

from .schema import SplitConfig, TagLabels, VariantConfig


def load_config(config_path: Union[str, Path]) -> SplitConfig:
    """Load split configuration from YAML or JSON file.

    Args:
        config_path: Path to configuration file (.yaml, .yml, or .json)

    Returns:
        SplitConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config format is unsupported or invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    suffix = config_path.suffix.lower()

    with open(config_path, 'r', encoding='utf-8') as f:
        if suffix in ['.yaml', '.yml']:
            data = yaml.safe_load(f)
        elif suffix == '.json':
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config format: {suffix}. Use .yaml, .yml, or .json")

    return parse_config(data or {})


def parse_config(data: dict) -> SplitConfig:
    """Parse configuration data into SplitConfig model.

    Accepts the shorthand forms written by hand:
    ``tags`` as a three-item list ``[a, b, both]`` and ``variants`` as a
    mapping ``{a: "Test deck", b: {...}}``.

    Args:
        data: Raw configuration dictionary

    Returns:
        SplitConfig instance
    """
    data = dict(data)

    # Process tags
    if 'tags' in data:
        tags_data = data['tags']
        if isinstance(tags_data, (list, tuple)):
            if len(tags_data) != 3:
                raise ValueError(f"tags list must have 3 entries (a, b, both), got {len(tags_data)}")
            data['tags'] = TagLabels(a=tags_data[0], b=tags_data[1], both=tags_data[2])
        elif isinstance(tags_data, dict):
            data['tags'] = TagLabels(**tags_data)

    # Process variants - handle mapping form
    if 'variants' in data and isinstance(data['variants'], dict):
        variants = []
        for key, value in data['variants'].items():
            if isinstance(value, dict):
                variants.append(VariantConfig(variant=key, **value))
            elif isinstance(value, str):
                variants.append(VariantConfig(variant=key, name=value))
            elif value is None:
                variants.append(VariantConfig(variant=key))
            else:
                raise ValueError(f"Unsupported variant entry for {key!r}: {value!r}")
        data['variants'] = variants

    return SplitConfig(**data)


def save_config(config: SplitConfig, output_path: Union[str, Path]) -> None:
    """Save split configuration to YAML or JSON file.

    Args:
        config: SplitConfig instance to save
        output_path: Path for output file
    """
    output_path = Path(output_path)
    suffix = output_path.suffix.lower()

    data = config.model_dump(mode='json', exclude_none=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        if suffix in ['.yaml', '.yml']:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
        elif suffix == '.json':
            json.dump(data, f, indent=2)
        else:
            raise ValueError(f"Unsupported config format: {suffix}")
