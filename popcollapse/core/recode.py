"""Reassignment table I/O and recoding of dataset group labels.

The table is a headerless two-column CSV::

    Pop_A,Group_1.1
    Pop_B,Group_1.1
    Pop_C,Pop_C

one row per original group, in the original group order.
"""

import csv
from pathlib import Path

import pandas as pd

from popcollapse.errors import ReassignmentTableWriteError


def write_reassignment_table(table, path):
    """Write (original, new) pairs as a headerless two-column CSV.

    Raises:
        ReassignmentTableWriteError: The file could not be written
    """
    df = pd.DataFrame(list(table), columns=['original', 'new'], dtype=str)
    try:
        df.to_csv(path, header=False, index=False, quoting=csv.QUOTE_MINIMAL)
    except OSError as e:
        raise ReassignmentTableWriteError(path, e) from e
    return str(path)


def read_reassignment_table(path):
    """Read a reassignment table back as a list of (original, new) pairs."""
    try:
        df = pd.read_csv(path, header=None, dtype=str, keep_default_na=False)
    except pd.errors.EmptyDataError:
        return []
    if df.shape[1] < 2:
        raise ValueError(f"Reassignment table {path} needs two columns, found {df.shape[1]}")
    return list(zip(df.iloc[:, 0].tolist(), df.iloc[:, 1].tolist()))


def recode_labels(labels, table):
    """Replace each label found in the table's first column; others pass through."""
    mapping = dict(table)
    return [mapping.get(label, label) for label in labels]


def recode_dataset(dataset, table):
    """Return a copy of dataset with group labels reassigned.

    Parameters:
        dataset: Any object with group_labels() and with_group_labels()
        table: list of (original, new) pairs, or a path to a table file

    Returns:
        A new dataset of the same kind; the input is not modified.
    """
    if isinstance(table, (str, Path)):
        table = read_reassignment_table(table)
    return dataset.with_group_labels(recode_labels(dataset.group_labels(), table))


__all__ = [
    'write_reassignment_table',
    'read_reassignment_table',
    'recode_labels',
    'recode_dataset',
]
