"""
Slide Classification

Reads the tag textbox on each slide and decides which target deck the
slide belongs to.

Two steps:
- classify_slide() runs once per slide and yields an Outcome
  (A, B, BOTH, MISSING, MULTIPLE) plus the matched tag shapes.
- resolve_disposition() turns that outcome into the action for one target
  variant (KEEP, EXCLUDE, KEEP_BOTH), raising or returning AMBIGUOUS
  according to the ambiguity policy.

Tags match by exact, case-sensitive equality of the shape's full text.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from .config import AmbiguityPolicy, TagLabels, Variant
from .errors import AmbiguousTagError, MissingTagError


class Outcome(Enum):
    """Per-slide classification, independent of any target."""
    ASSIGN_A = "a"
    ASSIGN_B = "b"
    ASSIGN_BOTH = "both"
    MISSING = "missing"
    MULTIPLE = "multiple"

    @property
    def is_valid(self) -> bool:
        return self not in (Outcome.MISSING, Outcome.MULTIPLE)


class Disposition(Enum):
    """Action for one slide in one target deck."""
    KEEP = "keep"
    EXCLUDE = "exclude"
    KEEP_BOTH = "keep_both"
    AMBIGUOUS = "ambiguous"

    @property
    def keeps(self) -> bool:
        return self in (Disposition.KEEP, Disposition.KEEP_BOTH)


@dataclass
class SlideClassification:
    """Result of classifying one slide."""
    slide_index: int
    outcome: Outcome
    labels: List[str] = field(default_factory=list)
    shape_names: List[str] = field(default_factory=list)

    def targets(self) -> List[Variant]:
        """Variants this slide lands in; empty for invalid outcomes."""
        if self.outcome is Outcome.ASSIGN_A:
            return [Variant.A]
        if self.outcome is Outcome.ASSIGN_B:
            return [Variant.B]
        if self.outcome is Outcome.ASSIGN_BOTH:
            return [Variant.A, Variant.B]
        return []


def find_tag_shapes(slide, tags: TagLabels) -> list:
    """Return the shapes on a slide whose text is exactly a tag label.

    Args:
        slide: Host slide (anything with a ``shapes`` sequence)
        tags: Configured tag labels

    Returns:
        Matching shapes in enumeration order, possibly empty
    """
    labels = set(tags.all_labels())
    return [shape for shape in slide.shapes if shape.has_text and shape.text in labels]


def outcome_for_labels(labels: List[str], tags: TagLabels) -> Outcome:
    """Map the labels found on a slide to its outcome."""
    if not labels:
        return Outcome.MISSING
    if len(labels) > 1:
        return Outcome.MULTIPLE
    label = labels[0]
    if label == tags.a:
        return Outcome.ASSIGN_A
    if label == tags.b:
        return Outcome.ASSIGN_B
    if label == tags.both:
        return Outcome.ASSIGN_BOTH
    raise ValueError(f"{label!r} is not a configured tag label")


def classify_slide(slide, tags: TagLabels) -> SlideClassification:
    """Classify one slide from the tag shapes found on it."""
    matches = find_tag_shapes(slide, tags)
    labels = [shape.text for shape in matches]
    return SlideClassification(
        slide_index=slide.index,
        outcome=outcome_for_labels(labels, tags),
        labels=labels,
        shape_names=[shape.name for shape in matches],
    )


def classify_deck(deck, tags: TagLabels) -> List[SlideClassification]:
    """Classify every slide of a deck, first to last. Read only."""
    return [classify_slide(slide, tags) for slide in deck.slides]


def resolve_disposition(
    classification: SlideClassification,
    variant: Variant,
    policy: AmbiguityPolicy = AmbiguityPolicy.STRICT,
) -> Disposition:
    """Decide what happens to a classified slide in one target deck.

    Args:
        classification: Result of classify_slide()
        variant: The target deck being built or pruned
        policy: Handling of slides with more than one tag

    Returns:
        KEEP, EXCLUDE or KEEP_BOTH; AMBIGUOUS only under the permissive policy

    Raises:
        MissingTagError: The slide has no tag (under every policy)
        AmbiguousTagError: The slide has several tags and policy is strict
    """
    outcome = classification.outcome

    if outcome is Outcome.MISSING:
        raise MissingTagError(classification.slide_index)

    if outcome is Outcome.MULTIPLE:
        if policy is AmbiguityPolicy.STRICT:
            raise AmbiguousTagError(classification.slide_index, classification.labels)
        return Disposition.AMBIGUOUS

    if outcome is Outcome.ASSIGN_BOTH:
        return Disposition.KEEP_BOTH

    own = Outcome.ASSIGN_A if variant is Variant.A else Outcome.ASSIGN_B
    return Disposition.KEEP if outcome is own else Disposition.EXCLUDE


def validate_classifications(
    classifications: List[SlideClassification],
    policy: AmbiguityPolicy = AmbiguityPolicy.STRICT,
) -> List[int]:
    """Check a whole deck's classifications before anything is written.

    Raises on the first slide the policy does not tolerate.

    Returns:
        Indices of ambiguous slides tolerated under the permissive policy
    """
    ambiguous = []
    for classification in classifications:
        # errors do not depend on the variant
        disposition = resolve_disposition(classification, Variant.A, policy)
        if disposition is Disposition.AMBIGUOUS:
            ambiguous.append(classification.slide_index)
    return ambiguous
