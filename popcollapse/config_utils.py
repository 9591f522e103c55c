"""Configuration validation and helper utilities for the collapse pipeline."""

import math
from pathlib import Path

from rich.console import Console
from rich.markup import escape

console = Console()


def validate_config(config, require_files=False):
    """Validate a CollapseConfig object.

    Parameters:
        config: CollapseConfig instance
        require_files: Also check the input file paths (command line use)

    Raises:
        ValueError: If configuration is invalid
    """
    errors = []

    if require_files:
        if not config.distance_matrix:
            errors.append("distance_matrix is required")
        elif not Path(config.distance_matrix).exists():
            errors.append(f"Distance matrix file not found: {config.distance_matrix}")

        if not config.dataset:
            errors.append("dataset is required")
        elif not Path(config.dataset).exists():
            errors.append(f"Dataset file not found: {config.dataset}")

    # Check numeric parameters
    if config.threshold is None or math.isnan(config.threshold):
        errors.append("threshold must be a number")
    elif config.threshold < 0:
        errors.append("threshold must be >= 0")

    if config.epsilon < 0:
        errors.append("epsilon must be >= 0")

    if config.max_rounds is not None and config.max_rounds < 1:
        errors.append("max_rounds must be >= 1")

    if config.verbose not in (0, 1, 2):
        errors.append("verbose must be 0, 1 or 2")

    if not config.recode_table:
        errors.append("recode_table is required")

    if not str(config.iteration):
        errors.append("iteration tag must not be empty")

    if not config.group_col:
        errors.append("group_col is required")

    if errors:
        console.print("[bold red]Configuration Errors:[/bold red]")
        for error in errors:
            console.print(f"  ✗ {escape(error)}")
        raise ValueError(f"Invalid configuration: {len(errors)} error(s)")

    if config.verbose >= 2:
        console.print("[green]✓[/green] Configuration validated")


def print_config_summary(config):
    """Print a summary of the configuration."""
    console.print("\n[bold]Configuration Summary:[/bold]")
    console.print(f"  Distance matrix: {escape(str(config.distance_matrix))}")
    console.print(f"  Dataset: {escape(str(config.dataset))} (group column '{escape(config.group_col)}')")
    console.print("\n  [bold]Linking:[/bold]")
    console.print(f"    threshold: {config.threshold}")
    console.print(f"    epsilon: {config.epsilon} ({'below threshold' if config.epsilon_below_threshold else 'zero threshold only'})")
    console.print("\n  [bold]Output:[/bold]")
    console.print(f"    recode table: {escape(config.recode_table)}")
    console.print(f"    iteration tag: {escape(str(config.iteration))}")
    console.print(f"    recoded dataset: {escape(config.output) if config.output else 'not written'}")


__all__ = [
    'validate_config',
    'print_config_summary',
]
