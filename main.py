"""
Library Recap - Main Module
===========================

Turns a building-access swipe export into a "library recap": total time,
visits, streaks, peak hours and weekday/month/term breakdowns.

Key Design Decisions:
1. Sessions are IN->OUT pairs only; unpaired swipes are counted, never guessed
2. Total time always uses raw (unmerged) sessions
3. Visits merge sessions separated by short gaps, without counting the gap
4. All times are read in UTC; sessions crossing midnight are split per day

This module serves as the CLI entry point and orchestrates the workflow by
importing functions and classes from the library_recap package.
"""

import argparse
import logging

from library_recap.aggregator import InvariantViolation, process_library_stats
from library_recap.config import DEFAULT_TERMS, EngineConfig, load_terms_yaml
from library_recap.data_loader import load_swipe_file
from library_recap.reporter import (
    print_summary,
    print_breakdowns,
    print_highlights,
    generate_json_output,
    save_json_output
)


# =============================================================================
# CLI INTERFACE
# =============================================================================

def create_parser():
    """Create and return the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog='Library Recap',
        description='Builds library visit statistics from entry/exit swipe data.',
        epilog='Example: python main.py --swipes data/swipes.json --config config.yaml --output recap.json --verbose',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        '--swipes',
        type=str,
        default='data/swipes.json',
        help='Path to swipe data JSON or CSV file (default: data/swipes.json)'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Optional YAML file with "engine" settings and "terms" (default: built-in terms)'
    )

    parser.add_argument(
        '--output',
        type=str,
        default='library_recap.json',
        help='Output file path for JSON stats (default: library_recap.json)'
    )

    parser.add_argument(
        '--no-seat-max',
        type=float,
        default=None,
        help='Raw sessions at or under this many minutes count as "no seat" (default: 15)'
    )

    parser.add_argument(
        '--merge-gap',
        type=float,
        default=None,
        help='Merge sessions separated by at most this many minutes (default: 60)'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Cross-check totals and enable debug logging (default: False)'
    )

    parser.add_argument(
        '--show-summary',
        action='store_true',
        help='Print headline summary to console (default: False)'
    )

    parser.add_argument(
        '--show-breakdowns',
        action='store_true',
        help='Print weekday, month and term breakdowns (default: False)'
    )

    parser.add_argument(
        '--show-highlights',
        action='store_true',
        help='Print visit types, top sessions, streaks and peak hours (default: False)'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Show all outputs (summary, breakdowns, highlights)'
    )

    return parser


def build_config(args) -> tuple:
    """Resolve engine config and terms from the YAML file and CLI overrides."""
    if args.config:
        config = EngineConfig.from_yaml(args.config)
        terms = load_terms_yaml(args.config)
    else:
        config = EngineConfig()
        terms = DEFAULT_TERMS

    overrides = config.as_dict()
    if args.no_seat_max is not None:
        overrides['no_seat_max_minutes'] = args.no_seat_max
    if args.merge_gap is not None:
        overrides['merge_gap_minutes'] = args.merge_gap
    if args.debug:
        overrides['debug'] = True
    return EngineConfig(**overrides), terms


def main(argv=None):
    """Main entry point for the application."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(levelname)s %(name)s: %(message)s'
    )

    print("\nLibrary Recap")
    print("=" * 70)

    try:
        config, terms = build_config(args)

        # Load data
        print("\nLoading swipes...")
        records = load_swipe_file(args.swipes)
        print(f"  Loaded {len(records)} swipe records")

        # Process
        print("\nBuilding sessions and statistics...")
        stats = process_library_stats(records, config, terms)
        print(f"  {stats.orphan_filtering.raw_sessions} raw sessions, {stats.total_sessions} visits")

        if args.verbose or args.show_summary:
            print_summary(stats)

        if args.verbose or args.show_breakdowns:
            print_breakdowns(stats)

        if args.verbose or args.show_highlights:
            print_highlights(stats)

        # Generate and save JSON output
        print("\nGenerating JSON output...")
        save_json_output(generate_json_output(stats), args.output)

        print("\n" + "=" * 70)
        print("Recap complete!")
        print("=" * 70 + "\n")

    except FileNotFoundError as e:
        print(f"\nFile Error: {e}", flush=True)
        print("   Check that the input files exist and paths are correct.\n", flush=True)
        return 1
    except (KeyError, TypeError) as e:
        print(f"\nData Structure Error: {e}", flush=True)
        print("   The input file structure is invalid.", flush=True)
        print("   Swipe JSON must contain a 'swipes' list; CSV needs a date,time,direction header.\n", flush=True)
        return 1
    except InvariantViolation as e:
        print(f"\nInvariant Error: {e}", flush=True)
        print("   Independently computed totals disagree; please report this with the input data.\n", flush=True)
        return 1
    except ValueError as e:
        print(f"\nData Validation Error: {e}", flush=True)
        print("   Check your configuration and input data for invalid values or formats.\n", flush=True)
        return 1

    return 0


if __name__ == '__main__':
    exit(main())
