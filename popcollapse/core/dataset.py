"""Collaborator datasets whose entities carry a group (population) label.

The collapse pipeline only needs three things from a dataset: the current
group label of every entity, the distinct groups, and a way to get a copy with
new labels. Anything offering ``group_labels()``, ``groups()`` and
``with_group_labels(labels)`` works; two adapters are provided here:

- DataFrameDataset: a pandas table with one row per entity (id, pop, lat, ...)
- LabelledMatrixDataset: an entity-by-locus numpy matrix plus labels
"""

from typing import List, Optional, Protocol, Sequence

import numpy as np
import pandas as pd
from rich.console import Console
from rich.markup import escape

console = Console()

DEFAULT_GROUP = 'pop1'


class GroupedDataset(Protocol):
    def group_labels(self) -> List[str]:
        ...

    def groups(self) -> List[str]:
        ...

    def with_group_labels(self, labels: Sequence[str]) -> 'GroupedDataset':
        ...


def _unique_in_order(labels):
    return list(dict.fromkeys(labels))


def _check_length(n_expected, labels):
    if len(labels) != n_expected:
        raise ValueError(f"Expected {n_expected} group labels, got {len(labels)}")


class DataFrameDataset:
    """Entity table with a group label column.

    Entities without a group assignment (missing column or blank cells) are
    put in a single default group on construction.
    """

    def __init__(self, df: pd.DataFrame, group_col: str = 'pop', default_group: str = DEFAULT_GROUP, verbose: int = 1):
        df = df.copy()
        if group_col not in df.columns:
            if verbose >= 1:
                console.print(f"  [yellow]⚠[/yellow] No '{escape(group_col)}' column, assigning all entities to '{escape(default_group)}'")
            df[group_col] = default_group
        else:
            blank = df[group_col].isna() | (df[group_col].astype(str).str.strip() == '')
            if blank.any():
                if verbose >= 1:
                    console.print(f"  [yellow]⚠[/yellow] {int(blank.sum())} entities without a group, assigning to '{escape(default_group)}'")
                df.loc[blank, group_col] = default_group
        df[group_col] = df[group_col].astype(str)
        self.df = df
        self.group_col = group_col
        self.verbose = verbose

    def __len__(self):
        return len(self.df)

    def group_labels(self) -> List[str]:
        return self.df[self.group_col].tolist()

    def groups(self) -> List[str]:
        return _unique_in_order(self.group_labels())

    def with_group_labels(self, labels: Sequence[str]) -> 'DataFrameDataset':
        _check_length(len(self.df), labels)
        df = self.df.copy()
        df[self.group_col] = [str(x) for x in labels]
        return DataFrameDataset(df, group_col=self.group_col, verbose=self.verbose)

    def to_csv(self, path):
        self.df.to_csv(path, index=False)


class LabelledMatrixDataset:
    """Entity-by-attribute matrix (e.g. genotypes) with entity names and group labels."""

    def __init__(self, values, entity_names: Optional[Sequence[str]] = None, group_labels: Optional[Sequence[str]] = None,
                 default_group: str = DEFAULT_GROUP):
        self.values = np.asarray(values)
        n = self.values.shape[0]
        self.entity_names = [str(x) for x in entity_names] if entity_names is not None else [str(i + 1) for i in range(n)]
        _check_length(n, self.entity_names)
        if group_labels is None:
            group_labels = [default_group] * n
        _check_length(n, group_labels)
        self._labels = [str(x) for x in group_labels]

    def __len__(self):
        return self.values.shape[0]

    def group_labels(self) -> List[str]:
        return list(self._labels)

    def groups(self) -> List[str]:
        return _unique_in_order(self._labels)

    def with_group_labels(self, labels: Sequence[str]) -> 'LabelledMatrixDataset':
        _check_length(len(self), labels)
        return LabelledMatrixDataset(self.values.copy(), self.entity_names, labels)


def read_dataset(path, group_col='pop', default_group=DEFAULT_GROUP, verbose=1):
    """Read an entity table (CSV or TSV) into a DataFrameDataset.

    All columns are read as strings so group names like ``01`` survive.
    """
    path = str(path)
    sep = '\t' if path.endswith(('.tsv', '.tsv.gz', '.txt')) else ','
    df = pd.read_csv(path, sep=sep, dtype=str, keep_default_na=False, na_values=[''])
    return DataFrameDataset(df, group_col=group_col, default_group=default_group, verbose=verbose)


__all__ = [
    'DEFAULT_GROUP',
    'GroupedDataset',
    'DataFrameDataset',
    'LabelledMatrixDataset',
    'read_dataset',
]
