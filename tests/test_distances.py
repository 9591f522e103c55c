import numpy as np
import pandas as pd
import pytest

from popcollapse.core.distances import (
    normalize_distance_matrix,
    read_distance_matrix,
    resolve_threshold,
)
from popcollapse.errors import ShapeMismatchError


def _lower(values, names):
    arr = np.array(values, dtype=float)
    arr[np.triu_indices_from(arr, k=1)] = np.nan
    return pd.DataFrame(arr, index=names, columns=names)


def test_lower_triangle_is_mirrored():
    df = _lower([[0, 0, 0], [2, 0, 0], [3, 4, 0]], ["A", "B", "C"])
    sym = normalize_distance_matrix(df)
    assert sym.loc["A", "B"] == 2
    assert sym.loc["B", "A"] == 2
    assert sym.loc["A", "C"] == 3
    assert sym.loc["C", "B"] == 4
    assert (np.diag(sym.to_numpy()) == 0).all()


def test_upper_triangle_values_are_ignored_when_lower_present():
    df = pd.DataFrame(
        [[0, 99, 99], [2, 0, 99], [3, 4, 0]],
        index=["A", "B", "C"], columns=["A", "B", "C"], dtype=float,
    )
    sym = normalize_distance_matrix(df)
    assert sym.loc["A", "B"] == 2
    assert sym.loc["B", "C"] == 4


def test_upper_only_matches_lower_only():
    names = ["A", "B", "C"]
    lower = _lower([[0, 0, 0], [2, 0, 0], [3, 4, 0]], names)
    upper = lower.T.copy()
    pd.testing.assert_frame_equal(normalize_distance_matrix(lower), normalize_distance_matrix(upper))


def test_nan_diagonal_becomes_zero():
    df = pd.DataFrame([[np.nan, np.nan], [1.5, np.nan]], index=["A", "B"], columns=["A", "B"])
    sym = normalize_distance_matrix(df)
    assert sym.loc["A", "A"] == 0
    assert sym.loc["B", "B"] == 0
    assert sym.loc["A", "B"] == 1.5


def test_reordered_to_dataset_groups():
    df = _lower([[0, 0, 0], [2, 0, 0], [3, 4, 0]], ["A", "B", "C"])
    sym = normalize_distance_matrix(df, groups=["C", "A", "B"])
    assert list(sym.index) == ["C", "A", "B"]
    assert list(sym.columns) == ["C", "A", "B"]
    assert sym.loc["C", "A"] == 3
    assert sym.loc["A", "B"] == 2


def test_numpy_array_with_names():
    sym = normalize_distance_matrix(np.array([[0, 0], [1, 0]]), names=["x", "y"])
    assert sym.loc["y", "x"] == 1
    assert sym.loc["x", "y"] == 1


def test_not_square_raises():
    df = pd.DataFrame([[0.0, 1.0, 2.0], [1.0, 0.0, 3.0]], index=["A", "B"], columns=["A", "B", "C"])
    with pytest.raises(ShapeMismatchError):
        normalize_distance_matrix(df)


def test_row_and_column_labels_differ_raises():
    df = pd.DataFrame([[0.0, 1.0], [1.0, 0.0]], index=["A", "B"], columns=["A", "C"])
    with pytest.raises(ShapeMismatchError):
        normalize_distance_matrix(df)


def test_labels_not_matching_dataset_raises():
    df = _lower([[0, 0], [1, 0]], ["A", "B"])
    with pytest.raises(ShapeMismatchError):
        normalize_distance_matrix(df, groups=["A", "Z"])
    with pytest.raises(ShapeMismatchError):
        normalize_distance_matrix(df, groups=["A", "B", "C"])


def test_duplicate_labels_raise():
    df = pd.DataFrame(np.zeros((2, 2)), index=["A", "A"], columns=["A", "A"])
    with pytest.raises(ShapeMismatchError):
        normalize_distance_matrix(df)


def test_negative_distance_raises():
    df = _lower([[0, 0], [-1, 0]], ["A", "B"])
    with pytest.raises(ValueError):
        normalize_distance_matrix(df)


def test_empty_matrix_is_valid():
    sym = normalize_distance_matrix(pd.DataFrame(dtype=float))
    assert sym.shape == (0, 0)


def test_read_distance_matrix_csv_and_tsv(tmp_path):
    csv = tmp_path / "fd.csv"
    csv.write_text(",A,B,C\nA,0,,\nB,2,0,\nC,3,4,0\n")
    tsv = tmp_path / "fd.tsv"
    tsv.write_text("\tA\tB\tC\nA\t0\t\t\nB\t2\t0\t\nC\t3\t4\t0\n")
    for path in (csv, tsv):
        df = read_distance_matrix(path)
        assert list(df.index) == ["A", "B", "C"]
        assert list(df.columns) == ["A", "B", "C"]
        assert df.loc["C", "B"] == 4
        assert np.isnan(df.loc["A", "B"])


def test_resolve_threshold():
    assert resolve_threshold(0) == pytest.approx(1e-4)
    assert resolve_threshold(0, epsilon=0.01) == pytest.approx(0.01)
    assert resolve_threshold(0.5) == 0.5
    # Small nonzero thresholds are left alone unless asked
    assert resolve_threshold(1e-6) == 1e-6
    assert resolve_threshold(1e-6, epsilon_below_threshold=True) == pytest.approx(1e-4)
    assert resolve_threshold(2.0, epsilon_below_threshold=True) == 2.0


def test_resolve_threshold_rejects_bad_values():
    with pytest.raises(ValueError):
        resolve_threshold(-1)
    with pytest.raises(ValueError):
        resolve_threshold(float("nan"))
    with pytest.raises(ValueError):
        resolve_threshold(0, epsilon=-1)


def test_read_distance_matrix_keeps_zero_padded_and_na_labels(tmp_path):
    path = tmp_path / "fd.csv"
    path.write_text(",01,NA,null\n01,0,,\nNA,2,0,\nnull,NA,4,0\n")
    df = read_distance_matrix(path)
    assert list(df.index) == ["01", "NA", "null"]
    assert list(df.columns) == ["01", "NA", "null"]
    assert df.loc["NA", "01"] == 2
    # NA as a cell value is an absent distance
    assert np.isnan(df.loc["null", "01"])
    sym = normalize_distance_matrix(df, groups=["NA", "01", "null"])
    assert sym.loc["01", "NA"] == 2
