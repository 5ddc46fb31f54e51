"""
Deck Partitioner

Builds the two target decks from a master deck:

- Copy mode: clone the master once, strip its slides to get an empty
  deck carrying the master's theme and layouts, duplicate that for the
  second target, then walk the master forward and copy each slide into
  the target(s) its tag names.
- Prune mode: clone the master once per target and delete, from the
  last slide to the first, every slide the target does not own.

Tag textboxes are removed from every slide that ends up in a target.
The whole master is classified before any output file is written, so a
tagging error under the strict policy leaves no output behind.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from .classify import (
    SlideClassification,
    classify_deck,
    classify_slide,
    find_tag_shapes,
    resolve_disposition,
    validate_classifications,
)
from .config import AmbiguityPolicy, PartitionMode, SplitConfig, TagLabels, Variant
from .errors import ClassificationError, HostOperationFailed
from .host import Deck, PresentationHost, Slide

logger = logging.getLogger(__name__)

VARIANT_ORDER = (Variant.A, Variant.B)

# Characters not allowed in file names on common filesystems
_ILLEGAL_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')

Acknowledge = Callable[[ClassificationError], None]


@dataclass
class VariantResult:
    """What ended up in one target deck."""
    variant: Variant
    label: str
    name: str
    output_path: Path
    slides: List[int] = field(default_factory=list)  # master slide numbers, in order
    undeleted: List[int] = field(default_factory=list)  # foreign slides the host failed to delete


@dataclass
class PartitionReport:
    """Summary of one split run."""
    master_path: Path
    mode: PartitionMode
    policy: AmbiguityPolicy
    slide_count: int
    results: Dict[Variant, VariantResult] = field(default_factory=dict)
    ambiguous_slides: List[int] = field(default_factory=list)
    failed_tag_deletions: int = 0
    failures: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'master': str(self.master_path),
            'mode': self.mode.value,
            'policy': self.policy.value,
            'slide_count': self.slide_count,
            'variants': {
                variant.value: {
                    'label': result.label,
                    'name': result.name,
                    'output': str(result.output_path),
                    'slides': result.slides,
                    'undeleted': result.undeleted,
                }
                for variant, result in self.results.items()
            },
            'ambiguous_slides': self.ambiguous_slides,
            'failed_tag_deletions': self.failed_tag_deletions,
            'failures': self.failures,
        }


def output_paths(
    master_path: Union[str, Path],
    config: SplitConfig,
    output_dir: Optional[Union[str, Path]] = None,
) -> Dict[Variant, Path]:
    """Compute the output file of each variant.

    ``<dir>/<master stem>_<name>.pptx``, or ``<dir>/<name>.pptx`` without
    the source prefix, where ``name`` is the variant's output name (the tag
    label unless configured).

    Raises:
        ValueError: If two outputs collide or an output would overwrite the master
    """
    master_path = Path(master_path)
    directory = Path(output_dir) if output_dir is not None else master_path.parent
    suffix = master_path.suffix or '.pptx'

    paths = {}
    for variant in VARIANT_ORDER:
        name = _ILLEGAL_FILENAME_CHARS.sub('_', config.output_name(variant)).strip()
        if config.prefix_with_source:
            name = f"{master_path.stem}_{name}"
        paths[variant] = directory / f"{name}{suffix}"

    if paths[Variant.A] == paths[Variant.B]:
        raise ValueError(f"Both variants would be written to {paths[Variant.A]}")
    for path in paths.values():
        if path.resolve() == master_path.resolve():
            raise ValueError(f"Output {path} would overwrite the master deck")
    return paths


def strip_tag_shapes(slide: Slide, tags: TagLabels, report: PartitionReport) -> int:
    """Delete the tag textboxes of a slide; failures are logged and counted.

    Returns:
        Number of tag shapes removed
    """
    removed = 0
    for shape in find_tag_shapes(slide, tags):
        try:
            shape.delete()
            removed += 1
        except HostOperationFailed as e:
            report.failed_tag_deletions += 1
            report.failures.append(str(e))
            logger.warning(f"Could not remove tag '{shape.text}' from slide {slide.index}: {e}")
    return removed


def prune_in_place(
    host: PresentationHost,
    master_path: Path,
    targets: Dict[Variant, Path],
    config: SplitConfig,
    report: PartitionReport,
) -> None:
    """Prune mode: clone the master per target and delete foreign slides.

    Slides are visited from last to first so deletions never shift the
    index of a slide still to be visited. A slide that cannot be deleted
    stays in the target with its tags stripped and is reported as
    undeleted.
    """
    for variant in VARIANT_ORDER:
        host.copy_file(master_path, targets[variant])

    with host.open_deck(targets[Variant.A]) as deck_a, host.open_deck(targets[Variant.B]) as deck_b:
        for variant, deck in ((Variant.A, deck_a), (Variant.B, deck_b)):
            kept = []
            for index in range(deck.slide_count, 0, -1):
                slide = deck.slide(index)
                disposition = resolve_disposition(
                    classify_slide(slide, config.tags), variant, config.ambiguity_policy
                )
                logger.debug(f"{deck.path.name}: slide {index} -> {disposition.value}")

                if disposition.keeps:
                    strip_tag_shapes(slide, config.tags, report)
                    kept.append(index)
                    continue

                try:
                    slide.delete()
                except HostOperationFailed as e:
                    report.failures.append(str(e))
                    logger.warning(f"Could not delete slide {index} from {deck.path.name}: {e}")
                    strip_tag_shapes(slide, config.tags, report)
                    kept.append(index)
                    report.results[variant].undeleted.insert(0, index)

            kept.reverse()
            report.results[variant].slides = kept
            deck.save()


def create_empty_targets(
    host: PresentationHost,
    master_path: Path,
    targets: Dict[Variant, Path],
) -> None:
    """Clone the master once, strip its slides, and duplicate the empty deck.

    Both targets keep the master's slide masters, layouts and theme.
    """
    first, second = targets[Variant.A], targets[Variant.B]
    host.copy_file(master_path, first)
    with host.open_deck(first) as empty:
        empty.strip_slides()
        empty.save()
    host.copy_file(first, second)


def copy_into_empty(
    host: PresentationHost,
    master: Deck,
    targets: Dict[Variant, Path],
    config: SplitConfig,
    classifications: List[SlideClassification],
    report: PartitionReport,
) -> None:
    """Copy mode: copy each master slide into the target(s) its tag names.

    Uses the classification computed for each slide once; the master is
    never modified.
    """
    create_empty_targets(host, master.path, targets)

    with host.open_deck(targets[Variant.A]) as deck_a, host.open_deck(targets[Variant.B]) as deck_b:
        decks = {Variant.A: deck_a, Variant.B: deck_b}

        for classification in classifications:
            source = None
            for variant in VARIANT_ORDER:
                disposition = resolve_disposition(classification, variant, config.ambiguity_policy)
                logger.debug(f"Slide {classification.slide_index} -> {variant.value}: {disposition.value}")
                if not disposition.keeps:
                    continue

                if source is None:
                    source = master.slide(classification.slide_index)
                copied = decks[variant].copy_slide(source)
                strip_tag_shapes(copied, config.tags, report)
                report.results[variant].slides.append(classification.slide_index)

        for variant in VARIANT_ORDER:
            decks[variant].save()


def split_presentation(
    host: PresentationHost,
    master_path: Union[str, Path],
    config: Optional[SplitConfig] = None,
    output_dir: Optional[Union[str, Path]] = None,
    acknowledge: Optional[Acknowledge] = None,
) -> PartitionReport:
    """Split a tagged master deck into its two variants.

    Args:
        host: Running presentation host
        master_path: The tagged master deck
        config: Split configuration (defaults apply when omitted)
        output_dir: Directory for the outputs (default: the master's directory)
        acknowledge: Called with a tagging error before host resources are
            released, e.g. to let the operator read which slide to fix

    Returns:
        PartitionReport describing both outputs

    Raises:
        MissingTagError: A slide has no tag
        AmbiguousTagError: A slide has several tags under the strict policy
        HostOperationFailed: Cloning, opening or saving a deck failed
    """
    config = config or SplitConfig()
    master_path = Path(master_path)
    targets = output_paths(master_path, config, output_dir)

    with host.open_deck(master_path) as master:
        classifications = classify_deck(master, config.tags)
        try:
            ambiguous = validate_classifications(classifications, config.ambiguity_policy)
        except ClassificationError as e:
            logger.error(str(e))
            if acknowledge is not None:
                acknowledge(e)
            raise

        for index in ambiguous:
            logger.warning(f"Slide {index} has several tags; left out of both variants")

        report = PartitionReport(
            master_path=master_path,
            mode=config.mode,
            policy=config.ambiguity_policy,
            slide_count=len(classifications),
            ambiguous_slides=ambiguous,
        )
        for variant in VARIANT_ORDER:
            report.results[variant] = VariantResult(
                variant=variant,
                label=config.label_for(variant),
                name=config.display_name(variant),
                output_path=targets[variant],
            )

        logger.info(f"Splitting {master_path.name} ({len(classifications)} slides, mode={config.mode.value})")
        if config.mode is PartitionMode.COPY:
            copy_into_empty(host, master, targets, config, classifications, report)
        else:
            master.close()
            prune_in_place(host, master_path, targets, config, report)

    return report


def print_partition_report(report: PartitionReport) -> None:
    """Print a summary of a split run."""
    print("\n" + "=" * 60)
    print("SPLIT REPORT")
    print("=" * 60)
    print(f"Master: {report.master_path} ({report.slide_count} slides)")
    print(f"Mode: {report.mode.value}   Ambiguity policy: {report.policy.value}")

    for result in report.results.values():
        slides = ', '.join(str(n) for n in result.slides) or '(none)'
        print(f"\n{result.name} [{result.label}]")
        print(f"  Output: {result.output_path}")
        print(f"  {len(result.slides)} slides: {slides}")
        if result.undeleted:
            print(f"  Could not remove: {', '.join(str(n) for n in result.undeleted)}")

    if report.ambiguous_slides:
        print(f"\nLeft out (several tags): {', '.join(str(n) for n in report.ambiguous_slides)}")

    if report.failures:
        print(f"\n{len(report.failures)} host operations failed:")
        for failure in report.failures:
            print(f"  - {failure}")
