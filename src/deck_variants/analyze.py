"""
Tagging Check

Scans a master deck without modifying it and reports where each slide
would go, and which slides need their tag textbox fixed before a split.
"""

from pathlib import Path
from typing import Any, Dict, List, Union

from .classify import Outcome, classify_slide
from .config import AmbiguityPolicy, SplitConfig, Variant
from .host import PresentationHost


def get_slide_title(slide) -> str:
    """Extract slide title if present, shortened for reports."""
    title = slide.title
    if title:
        return title[:50] + "..." if len(title) > 50 else title
    return "(No title)"


def check_presentation(
    host: PresentationHost,
    pptx_path: Union[str, Path],
    config: SplitConfig,
    verbose: bool = True
) -> List[Dict[str, Any]]:
    """Classify every slide of a master deck.

    Args:
        host: Running presentation host
        pptx_path: Path to the master PPTX
        config: Split configuration
        verbose: Print detailed output

    Returns:
        List of dicts, one per slide, with 'num', 'title', 'labels',
        'outcome' and 'variants'
    """
    if verbose:
        print(f"\nChecking: {pptx_path}")
        print("=" * 70)

    slides = []
    with host.open_deck(pptx_path) as deck:
        for slide in deck.slides:
            classification = classify_slide(slide, config.tags)
            slides.append({
                'num': slide.index,
                'title': get_slide_title(slide),
                'labels': classification.labels,
                'outcome': classification.outcome.value,
                'variants': [v.value for v in classification.targets()],
            })

    if verbose:
        _print_check_results(slides, config)

    return slides


def _problem_slides(slides: List[Dict[str, Any]]):
    missing = [s for s in slides if s['outcome'] == Outcome.MISSING.value]
    multiple = [s for s in slides if s['outcome'] == Outcome.MULTIPLE.value]
    return missing, multiple


def _print_check_results(slides: List[Dict[str, Any]], config: SplitConfig) -> None:
    """Print formatted check results."""
    missing, multiple = _problem_slides(slides)

    for variant in (Variant.A, Variant.B):
        members = [s for s in slides if variant.value in s['variants']]
        print(f"\n{config.display_name(variant)} [{config.label_for(variant)}]: {len(members)} slides")
        if members:
            print("  " + ', '.join(str(s['num']) for s in members))

    if missing:
        print(f"\n{'='*70}")
        print(f"NO TAG ({len(missing)} slides)")
        print("-" * 50)
        for slide in missing:
            print(f"  Slide {slide['num']}: {slide['title']}")

    if multiple:
        print(f"\n{'='*70}")
        print(f"SEVERAL TAGS ({len(multiple)} slides)")
        print("-" * 50)
        for slide in multiple:
            print(f"  Slide {slide['num']}: {slide['title']} -> {', '.join(slide['labels'])}")

    print(f"\n{'='*70}")
    print("SUMMARY")
    print("=" * 70)
    print(f"Total slides: {len(slides)}")
    print(f"Missing tag: {len(missing)}")
    print(f"Several tags: {len(multiple)}")

    if missing or (multiple and config.ambiguity_policy is AmbiguityPolicy.STRICT):
        print("\nFix the slides above in the master deck before splitting.")
    elif multiple:
        print("\nSlides with several tags will be left out of both variants.")
    else:
        print("\nAll slides tagged. Ready to split.")


def is_splittable(slides: List[Dict[str, Any]], policy: AmbiguityPolicy) -> bool:
    """True when a split would not abort on tagging."""
    missing, multiple = _problem_slides(slides)
    if missing:
        return False
    return not multiple or policy is AmbiguityPolicy.PERMISSIVE


def get_check_json(slides: List[Dict[str, Any]], config: SplitConfig) -> Dict[str, Any]:
    """Convert check results to JSON-serializable format.

    Args:
        slides: Per-slide dicts from check_presentation()
        config: Split configuration

    Returns:
        JSON-serializable dict
    """
    missing, multiple = _problem_slides(slides)

    return {
        'total_slides': len(slides),
        'variants': {
            variant.value: {
                'label': config.label_for(variant),
                'name': config.display_name(variant),
                'slides': [s['num'] for s in slides if variant.value in s['variants']],
            }
            for variant in (Variant.A, Variant.B)
        },
        'missing_tag': [s['num'] for s in missing],
        'multiple_tags': [s['num'] for s in multiple],
        'splittable': is_splittable(slides, config.ambiguity_policy),
        'slides': slides,
    }
