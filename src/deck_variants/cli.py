"""
Command Line Interface for Deck Variants

Provides entry points for:
- deck-split: Split a tagged master deck into its two variants
- deck-check: Report how each slide of a master deck is tagged
"""

import sys
import json
import logging
import argparse
from pathlib import Path
from typing import Callable, List, Optional

from .config import load_config, SplitConfig, PartitionMode, AmbiguityPolicy
from .errors import ClassificationError, DeckVariantsError, InvalidSelection, NoCandidateFiles
from .host import PresentationHost
from .partition import split_presentation, print_partition_report
from .analyze import check_presentation, get_check_json, is_splittable


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )


def build_config(args: argparse.Namespace) -> SplitConfig:
    """Load the configuration file (if any) and apply command-line overrides."""
    config = load_config(args.config) if args.config else SplitConfig()

    updates = {}
    if getattr(args, 'mode', None):
        updates['mode'] = PartitionMode(args.mode)
    if getattr(args, 'policy', None):
        updates['ambiguity_policy'] = AmbiguityPolicy(args.policy)
    if getattr(args, 'no_prefix', False):
        updates['prefix_with_source'] = False
    if getattr(args, 'no_pause', False):
        updates['pause_on_error'] = False

    return config.model_copy(update=updates) if updates else config


def parse_selection(raw: str, count: int) -> int:
    """Turn a typed answer into a 1-based candidate number.

    Raises:
        InvalidSelection: If the answer is not a number between 1 and count
    """
    raw = raw.strip()
    try:
        number = int(raw)
    except ValueError:
        raise InvalidSelection(f"'{raw}' is not a number. Enter 1-{count}.") from None
    if not 1 <= number <= count:
        raise InvalidSelection(f"{number} is out of range. Enter 1-{count}.")
    return number


def select_candidate(candidates: List[Path], prompt: Callable[[str], str] = input) -> Path:
    """Pick the master deck among candidate files.

    A single candidate is selected without asking. Otherwise the user is
    asked for a number until the answer is valid.

    Raises:
        EOFError: If input ends before a valid answer
    """
    if len(candidates) == 1:
        print(f"Using {candidates[0].name}")
        return candidates[0]

    print("Presentations found:")
    for number, candidate in enumerate(candidates, 1):
        print(f"  {number}. {candidate.name}")

    while True:
        answer = prompt(f"Select a file (1-{len(candidates)}): ")
        try:
            return candidates[parse_selection(answer, len(candidates)) - 1]
        except InvalidSelection as e:
            print(e)


def resolve_input(args: argparse.Namespace, config: SplitConfig, host: PresentationHost) -> Path:
    """Return the input given on the command line, or ask among files in the working directory."""
    if args.input:
        return Path(args.input)

    directory = Path.cwd()
    candidates = host.list_files(directory, config.input_extension)
    if not candidates:
        raise NoCandidateFiles(directory, config.input_extension)
    return select_candidate(candidates)


def pause_for_operator(error: ClassificationError) -> None:
    """Show a tagging error and wait for Enter so the slide number can be noted."""
    print(f"\nSlide {error.slide_index} needs fixing in the master deck.")
    if sys.stdin.isatty():
        input("Press Enter to continue...")


def split_command(args: argparse.Namespace) -> int:
    """Execute split command."""
    print("=" * 60)
    print("Deck Split")
    print("=" * 60)

    try:
        config = build_config(args)
        acknowledge = pause_for_operator if config.pause_on_error else None

        with PresentationHost() as host:
            master_path = resolve_input(args, config, host)
            print(f"Master: {master_path}")
            print(f"Mode: {config.mode.value}")

            report = split_presentation(
                host,
                master_path,
                config,
                output_dir=args.output_dir,
                acknowledge=acknowledge,
            )

        print_partition_report(report)
        return 0

    except EOFError:
        print("\nNo selection made.")
        return 1

    except (DeckVariantsError, OSError, ValueError) as e:
        print(f"\nError: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


def check_command(args: argparse.Namespace) -> int:
    """Execute check command."""
    if not args.json:
        print("=" * 60)
        print("Tagging Check")
        print("=" * 60)

    try:
        config = build_config(args)

        with PresentationHost() as host:
            master_path = resolve_input(args, config, host)
            slides = check_presentation(host, master_path, config, verbose=not args.json)

        if args.json:
            print(json.dumps(get_check_json(slides, config), indent=2))

        return 0 if is_splittable(slides, config.ambiguity_policy) else 1

    except EOFError:
        print("\nNo selection made.")
        return 1

    except (DeckVariantsError, OSError, ValueError) as e:
        print(f"\nError: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description='Deck Variants - Split a tagged master deck into two variant decks',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s split master.pptx
  %(prog)s split --mode prune --policy permissive -o out/
  %(prog)s check master.pptx --json
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Split command
    split_parser = subparsers.add_parser('split', help='Split a master deck into its variants')
    split_parser.add_argument('input', nargs='?', help='Master PPTX (default: choose from the working directory)')
    split_parser.add_argument('--config', '-c', help='Split configuration file (YAML/JSON)')
    split_parser.add_argument('--output-dir', '-o', help='Directory for the variant decks (default: next to the master)')
    split_parser.add_argument('--mode', choices=[m.value for m in PartitionMode], help='Partitioning mode (overrides config)')
    split_parser.add_argument('--policy', choices=[p.value for p in AmbiguityPolicy], help='Handling of slides with several tags (overrides config)')
    split_parser.add_argument('--no-prefix', action='store_true', help='Do not prefix output names with the master file name')
    split_parser.add_argument('--no-pause', action='store_true', help='Do not wait for Enter after a tagging error')
    split_parser.add_argument('-v', '--verbose', action='store_true', help='Show detailed output')

    # Check command
    check_parser = subparsers.add_parser('check', help='Report how each slide is tagged')
    check_parser.add_argument('input', nargs='?', help='Master PPTX (default: choose from the working directory)')
    check_parser.add_argument('--config', '-c', help='Split configuration file (YAML/JSON)')
    check_parser.add_argument('--policy', choices=[p.value for p in AmbiguityPolicy], help='Handling of slides with several tags (overrides config)')
    check_parser.add_argument('--json', action='store_true', help='Output results as JSON')
    check_parser.add_argument('-v', '--verbose', action='store_true', help='Show detailed output')

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    setup_logging(args.verbose)

    if args.command == 'split':
        return split_command(args)
    elif args.command == 'check':
        return check_command(args)
    else:
        parser.print_help()
        return 1


# Entry points for direct script execution
def deck_split():
    """Entry point for deck-split command."""
    return main(['split'] + sys.argv[1:])


def deck_check():
    """Entry point for deck-check command."""
    return main(['check'] + sys.argv[1:])


if __name__ == '__main__':
    sys.exit(main())
