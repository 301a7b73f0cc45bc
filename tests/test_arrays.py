import numpy as np
import pytest

from pompkit.arrays import LabeledArray, PompError, match_names


def test_vector_becomes_single_column_matrix():
    a = LabeledArray([1.0, 2.0, 3.0], rownames=["a", "b", "c"])
    m = a.as_matrix()
    assert m.values.shape == (3, 1)
    assert m.rownames == ("a", "b", "c")
    assert m.values[:, 0].tolist() == [1.0, 2.0, 3.0]


def test_matrix_is_kept_with_labels():
    a = LabeledArray(np.ones((2, 3)), ["x", "y"], ["p", "q", "r"], ["name", ".id"])
    m = a.as_matrix()
    assert m.values.shape == (2, 3)
    assert m.colnames == ("p", "q", "r")
    assert m.dimlabels == ("name", ".id")


def test_three_dimensional_folds_column_major():
    values = np.arange(24.0).reshape(2, 3, 4)
    m = LabeledArray(values, ["u", "v"]).as_matrix()
    assert m.values.shape == (2, 12)
    for j in range(3):
        for k in range(4):
            assert np.array_equal(m.values[:, j + 3 * k], values[:, j, k])
    assert m.rownames == ("u", "v")
    assert m.dimlabels is None


def test_as_matrix_returns_a_copy():
    a = LabeledArray([[1.0, 2.0], [3.0, 4.0]])
    m = a.as_matrix()
    m.values[0, 0] = 99.0
    assert a.values[0, 0] == 1.0


def test_state_array_from_vector():
    s = LabeledArray([5.0, 6.0], ["a", "b"]).as_state_array()
    assert s.values.shape == (2, 1, 1)
    assert s.rownames == ("a", "b")


def test_state_array_from_matrix_puts_columns_on_time_axis():
    values = np.arange(6.0).reshape(2, 3)
    s = LabeledArray(values, ["a", "b"]).as_state_array()
    assert s.values.shape == (2, 1, 3)
    assert np.array_equal(s.values[:, 0, :], values)


def test_state_array_from_four_dimensions():
    values = np.arange(48.0).reshape(2, 3, 4, 2)
    s = LabeledArray(values).as_state_array()
    assert s.values.shape == (2, 3, 8)
    for k in range(4):
        for m in range(2):
            assert np.array_equal(s.values[:, :, k + 4 * m], values[:, :, k, m])


def test_short_rownames_are_padded():
    a = LabeledArray(np.zeros((3, 2)), ["a"])
    assert a.rownames == ("a", "", "")


def test_too_many_rownames_rejected():
    with pytest.raises(ValueError):
        LabeledArray(np.zeros((1, 2)), ["a", "b"])


def test_wrong_colnames_rejected():
    with pytest.raises(ValueError):
        LabeledArray(np.zeros((2, 2)), colnames=["a", "b", "c"])


def test_match_names_positions():
    idx = match_names(["a", "b", "c"], ["c", "a"], "parameters")
    assert idx.tolist() == [2, 0]


def test_match_names_missing():
    with pytest.raises(PompError, match="variable 'z' not found among the state variables"):
        match_names(["a", "b"], ["z"], "state variables")


def test_match_names_without_names():
    with pytest.raises(PompError, match="invalid variable names among the parameters"):
        match_names(None, ["a"], "parameters")