"""Distance matrix loading and normalization.

Handles labelled population distance matrices as produced by fixed-difference
or genetic distance analyses:
- CSV/TSV files with group names as the first column and the header
- pandas DataFrames indexed by group name
- raw numpy arrays with a separate list of names

Only one triangle needs to be populated. The matrix is mirrored into a full
symmetric matrix with a zero diagonal before thresholding.
"""

import numpy as np
import pandas as pd

from popcollapse.errors import ShapeMismatchError

# Substituted for a threshold of exactly 0, since computed distances are rarely exactly 0
DEFAULT_EPSILON = 1e-4

# Cell values read as absent distances; group labels are never coerced
MISSING_VALUES = ('', 'NA', 'NaN', 'nan', 'NULL', 'null')


def _read_table(path, sep):
    # Labels stay strings, so names like 01 or NA survive
    return pd.read_csv(path, sep=sep, index_col=0, dtype=str, keep_default_na=False, skipinitialspace=True)


def read_distance_matrix(path):
    """Read a labelled distance matrix from a delimited text file.

    Parameters:
        path (str): Path to a CSV or TSV file. The first column holds row
            labels and the header holds column labels. Empty or NA cells
            are read as NaN (absent).

    Returns:
        pandas.DataFrame: Float matrix indexed by group name on both axes.
    """
    path = str(path)
    # Try tab first, then comma
    df = _read_table(path, '\t')
    if df.shape[1] == 0:
        df = _read_table(path, ',')

    df.index = df.index.map(str)
    df.columns = df.columns.map(str)
    df = df.apply(lambda col: col.str.strip())
    df = df.where(~df.isin(MISSING_VALUES))
    try:
        df = df.apply(pd.to_numeric, errors='raise').astype(float)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Distance matrix {path} contains non-numeric values: {e}") from e
    return df


def as_labelled_matrix(matrix, names=None):
    """Wrap a DataFrame or a numpy array (plus names) as a float DataFrame."""
    if isinstance(matrix, pd.DataFrame):
        df = matrix.copy()
        if names is not None:
            df.index = list(names)
            df.columns = list(names)
    else:
        arr = np.asarray(matrix, dtype=float)
        if arr.ndim != 2:
            raise ShapeMismatchError(f"Distance matrix must be 2-dimensional, got {arr.ndim} dimension(s)")
        if names is None:
            names = [str(i + 1) for i in range(arr.shape[0])]
        names = list(names)
        if arr.shape[0] != len(names) or arr.shape[1] != len(names):
            raise ShapeMismatchError(
                f"Distance matrix shape {arr.shape} does not match {len(names)} group names"
            )
        df = pd.DataFrame(arr, index=names, columns=names)
    df.index = df.index.map(str)
    df.columns = df.columns.map(str)
    return df.astype(float)


def _check_labels(df, groups=None):
    n_rows, n_cols = df.shape
    if n_rows != n_cols:
        raise ShapeMismatchError(f"Distance matrix is not square ({n_rows} rows x {n_cols} columns)")

    rows = list(df.index)
    cols = list(df.columns)
    if len(set(rows)) != len(rows) or len(set(cols)) != len(cols):
        raise ShapeMismatchError("Distance matrix has duplicated group labels")
    if set(rows) != set(cols):
        missing = sorted(set(rows) ^ set(cols))
        raise ShapeMismatchError(f"Row and column labels differ: {missing}")

    if groups is not None:
        groups = list(groups)
        if set(groups) != set(rows) or len(groups) != len(rows):
            only_matrix = sorted(set(rows) - set(groups))
            only_data = sorted(set(groups) - set(rows))
            raise ShapeMismatchError(
                "Distance matrix labels do not match dataset groups "
                f"(only in matrix: {only_matrix}; only in dataset: {only_data})"
            )


def normalize_distance_matrix(matrix, groups=None, names=None):
    """Validate a distance matrix and make it full and symmetric.

    Parameters:
        matrix: pandas.DataFrame or 2D array of distances
        groups: Optional ordered group names of the dataset. The result is
            reordered to this order; without it the row order is kept.
        names: Group names for a bare array (ignored for DataFrames unless given)

    Returns:
        pandas.DataFrame: Symmetric float matrix with a zero diagonal.

    Raises:
        ShapeMismatchError: Non-square matrix or mismatched labels
        ValueError: Negative distances

    Notes:
        - For each pair the lower-triangle value wins when present; otherwise
          the upper-triangle value is mirrored down. Lower-only and upper-only
          inputs therefore give the same matrix.
        - A pair absent from both triangles stays NaN and is never linked.
    """
    df = as_labelled_matrix(matrix, names)
    _check_labels(df, groups)

    order = list(groups) if groups is not None else list(df.index)
    df = df.loc[order, order]

    values = df.to_numpy(dtype=float, copy=True)
    lower_mask = np.tril(np.ones_like(values, dtype=bool), k=-1)
    present = lower_mask & ~np.isnan(values)

    # Start from the upper triangle mirrored down, then let present lower values win
    sym = values.T.copy()
    sym[present] = values[present]
    sym = np.where(lower_mask, sym, 0.0)
    sym = sym + sym.T
    np.fill_diagonal(sym, 0.0)

    if np.any(sym[~np.isnan(sym)] < 0):
        raise ValueError("Distance matrix contains negative distances")

    return pd.DataFrame(sym, index=order, columns=order)


def resolve_threshold(threshold, epsilon=DEFAULT_EPSILON, epsilon_below_threshold=False):
    """Return the threshold actually used for linking groups.

    A threshold of exactly 0 is replaced by ``epsilon``. With
    ``epsilon_below_threshold`` every threshold smaller than ``epsilon`` is
    raised to it as well.
    """
    if threshold is None or np.isnan(threshold):
        raise ValueError("threshold must be a number")
    if threshold < 0:
        raise ValueError(f"threshold must be >= 0, got {threshold}")
    if epsilon < 0:
        raise ValueError(f"epsilon must be >= 0, got {epsilon}")

    if threshold == 0:
        return float(epsilon)
    if epsilon_below_threshold:
        return float(max(threshold, epsilon))
    return float(threshold)


__all__ = [
    'DEFAULT_EPSILON',
    'read_distance_matrix',
    'as_labelled_matrix',
    'normalize_distance_matrix',
    'resolve_threshold',
]
