"""
Configuration Schema for Deck Variants

Pydantic models defining the split configuration: the tag labels written on
the slides, the two target variants, and how the partition run behaves.
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator


class Variant(str, Enum):
    """The two target decks produced from a master."""
    A = "a"
    B = "b"

    @property
    def other(self) -> "Variant":
        return Variant.B if self is Variant.A else Variant.A


class PartitionMode(str, Enum):
    """How target decks are built from the master."""
    PRUNE = "prune"   # clone the master per target, delete foreign slides
    COPY = "copy"     # clone once, strip slides, copy tagged slides in


class AmbiguityPolicy(str, Enum):
    """What to do with a slide carrying more than one tag."""
    STRICT = "strict"           # abort the run
    PERMISSIVE = "permissive"   # drop the slide from every target and continue


class TagLabels(BaseModel):
    """Exact text of the tag textboxes placed on master slides."""
    a: str = Field("test-oriented", description="Label for slides that belong to variant A only")
    b: str = Field("operations-oriented", description="Label for slides that belong to variant B only")
    both: str = Field("test-and-operations", description="Label for slides that belong to both variants")

    @field_validator('a', 'b', 'both')
    @classmethod
    def non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("tag labels must not be empty")
        return v

    @model_validator(mode='after')
    def distinct_labels(self) -> "TagLabels":
        if len({self.a, self.b, self.both}) != 3:
            raise ValueError(f"tag labels must be distinct, got {self.a!r}, {self.b!r}, {self.both!r}")
        return self

    def all_labels(self) -> List[str]:
        return [self.a, self.b, self.both]

    def label_for(self, variant: Variant) -> str:
        """Get the label that marks slides exclusive to a variant."""
        return self.a if variant is Variant.A else self.b


class VariantConfig(BaseModel):
    """One target deck."""
    variant: Variant = Field(description="Which tag this deck collects")
    name: Optional[str] = Field(None, description="Display name used in reports")
    output_name: Optional[str] = Field(
        None,
        description="File name (without extension) for the output; defaults to the tag label"
    )


def _default_variants() -> List[VariantConfig]:
    return [VariantConfig(variant=Variant.A), VariantConfig(variant=Variant.B)]


class SplitConfig(BaseModel):
    """Complete configuration for splitting a master deck into two variants."""

    version: str = Field("1.0", description="Configuration schema version")

    tags: TagLabels = Field(default_factory=TagLabels, description="Tag textbox labels")

    variants: List[VariantConfig] = Field(
        default_factory=_default_variants,
        description="The two target decks, one per variant"
    )

    mode: PartitionMode = Field(PartitionMode.COPY, description="Partitioning algorithm")

    ambiguity_policy: AmbiguityPolicy = Field(
        AmbiguityPolicy.STRICT,
        description="Handling of slides with more than one tag"
    )

    prefix_with_source: bool = Field(
        True,
        description="Prefix output file names with the master file's base name"
    )

    input_extension: str = Field(".pptx", description="Extension of candidate master files")

    pause_on_error: bool = Field(
        True,
        description="Wait for Enter before releasing the host after a tagging error"
    )

    @field_validator('input_extension')
    @classmethod
    def normalize_extension(cls, v: str) -> str:
        """Normalize to lowercase with a leading dot."""
        v = v.strip().lower()
        return v if v.startswith('.') else f'.{v}'

    @field_validator('variants')
    @classmethod
    def one_per_variant(cls, v: List[VariantConfig]) -> List[VariantConfig]:
        if sorted(item.variant.value for item in v) != ['a', 'b']:
            raise ValueError("variants must list exactly one entry for 'a' and one for 'b'")
        return sorted(v, key=lambda item: item.variant.value)

    def get_variant(self, variant: Variant) -> VariantConfig:
        for item in self.variants:
            if item.variant is variant:
                return item
        raise KeyError(variant)

    def label_for(self, variant: Variant) -> str:
        return self.tags.label_for(variant)

    def display_name(self, variant: Variant) -> str:
        """Name shown in reports: configured name, else the tag label."""
        return self.get_variant(variant).name or self.label_for(variant)

    def output_name(self, variant: Variant) -> str:
        """Base file name for a variant's output: configured, else the tag label."""
        return self.get_variant(variant).output_name or self.label_for(variant)
