"""Command line entry point for collapsing populations by distance threshold."""

import argparse
import sys

from rich.console import Console
from rich.markup import escape

from popcollapse.collapse import CollapseConfig, run_collapse
from popcollapse.core.distances import DEFAULT_EPSILON
from popcollapse.errors import PopCollapseError

console = Console()


def build_parser():
    parser = argparse.ArgumentParser(
        prog="popcollapse",
        description="Amalgamate populations whose pairwise distance is at or below a threshold",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  popcollapse fd_matrix.csv individuals.csv
  popcollapse fd_matrix.csv individuals.csv --threshold 1 --recode-table recode.csv
  popcollapse fd_matrix.csv individuals.csv --output recoded.csv -v 2
        """,
    )

    parser.add_argument(
        "distance_matrix",
        type=str,
        help="Distance matrix between populations (CSV/TSV, names in first column and header)",
    )
    parser.add_argument(
        "dataset",
        type=str,
        help="Entity table (CSV/TSV) with a population column",
    )
    parser.add_argument(
        "--group-col",
        type=str,
        default="pop",
        help="Name of the population column (default: pop)",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=0.0,
        help="Maximum distance for amalgamating populations (default: 0)",
    )
    parser.add_argument(
        "--recode-table",
        type=str,
        default="tmp.csv",
        help="File to receive the population reassignment table (default: tmp.csv)",
    )
    parser.add_argument(
        "--iteration",
        type=str,
        default="1",
        help="Round tag used in new group names, Group_<iteration>.<n> (default: 1)",
    )
    parser.add_argument(
        "--epsilon",
        type=float,
        default=DEFAULT_EPSILON,
        help=f"Tolerance used in place of a zero threshold (default: {DEFAULT_EPSILON})",
    )
    parser.add_argument(
        "--epsilon-below-threshold",
        action="store_true",
        help="Also raise nonzero thresholds smaller than epsilon to epsilon",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write the recoded dataset to this CSV file",
    )
    parser.add_argument(
        "-v", "--verbose",
        type=int,
        choices=[0, 1, 2],
        default=1,
        help="Verbosity: 0 silent, 1 brief, 2 verbose (default: 1)",
    )
    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    config = CollapseConfig(
        threshold=args.threshold,
        epsilon=args.epsilon,
        epsilon_below_threshold=args.epsilon_below_threshold,
        iteration=args.iteration,
        recode_table=args.recode_table,
        group_col=args.group_col,
        distance_matrix=args.distance_matrix,
        dataset=args.dataset,
        output=args.output,
        verbose=args.verbose,
    )

    try:
        run_collapse(config)
        return 0
    except (PopCollapseError, ValueError) as e:
        console.print(f"\n✗ Collapse failed: {escape(str(e))}", style="bold red")
        return 1


if __name__ == "__main__":
    sys.exit(main())
