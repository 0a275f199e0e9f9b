# tests/test_matrix.py
import numpy as np
import pytest

from dense.activations import RELU, SIGMOID
from dense.errors import CellIndexError, DimensionMismatchError, InvalidArgumentError
from dense.matrix import DenseMatrix, outer_product


def test_zero_filled_construction():
    m = DenseMatrix(2, 3, RELU)
    assert m.shape == (2, 3)
    assert m.to_array().tolist() == [0.0] * 6
    assert m.activation is RELU

@pytest.mark.parametrize("cells", [[], [[]], [1.0, 2.0]])
def test_from_array_rejects_empty_or_1d(cells):
    with pytest.raises(InvalidArgumentError):
        DenseMatrix.from_array(cells, RELU)

def test_from_array_takes_over_float64_storage():
    arr = np.array([[1.0, 2.0], [3.0, 4.0]])
    m = DenseMatrix.from_array(arr, RELU)
    m.put(0, 0, 9.0)
    assert arr[0, 0] == 9.0

def test_dot_shape_and_values(matrix_factory):
    a = matrix_factory([[1, 2, 3], [4, 5, 6]])
    b = matrix_factory([[7, 8], [9, 10], [11, 12]])
    c = a.dot(b)
    assert c.shape == (2, 2)
    for i in range(2):
        for j in range(2):
            expected = sum(a.get(i, k) * b.get(k, j) for k in range(3))
            assert c.get(i, j) == pytest.approx(expected)
    # operands untouched
    assert a.to_array().tolist() == [1, 2, 3, 4, 5, 6]

def test_dot_dimension_mismatch(matrix_factory):
    a = matrix_factory([[1, 2], [3, 4]])
    b = matrix_factory([[1, 2, 3]])
    with pytest.raises(DimensionMismatchError):
        a.dot(b)

def test_activate_is_pure_pointwise(matrix_factory):
    a = matrix_factory([[-1.5, 0.0], [2.0, -0.1]], activation=RELU)
    out = a.activate()
    assert out.to_array().tolist() == [0.0, 0.0, 2.0, 0.0]
    assert a.to_array().tolist() == [-1.5, 0.0, 2.0, -0.1]

def test_activate_sigmoid(matrix_factory):
    a = matrix_factory([[0.0, 2.0]], activation=SIGMOID)
    out = a.activate()
    assert out.get(0, 0) == pytest.approx(0.5)
    assert out.get(0, 1) == pytest.approx(1.0 / (1.0 + np.exp(-2.0)))

def test_to_array_is_row_major(matrix_factory):
    m = matrix_factory([[1, 2], [3, 4], [5, 6]])
    assert m.to_array().tolist() == [1, 2, 3, 4, 5, 6]

def test_single_column_round_trip(matrix_factory):
    m = matrix_factory([[0.5, -1.25, 3.0], [7.0, 0.0, -2.0]], activation=SIGMOID)
    flat = m.to_array()
    col = m.single_column_matrix_from_array(flat)
    assert col.shape == (6, 1)
    assert col.activation is SIGMOID
    assert col.to_array().tolist() == flat.tolist()

def test_add_bias(matrix_factory):
    col = matrix_factory([[2.0], [3.0]])
    b = col.add_bias()
    assert b.shape == (3, 1)
    assert b.to_array().tolist() == [2.0, 3.0, 1.0]

def test_add_bias_requires_single_column(matrix_factory):
    with pytest.raises(DimensionMismatchError):
        matrix_factory([[1, 2]]).add_bias()

def test_get_put_bounds_checked():
    m = DenseMatrix(2, 2, RELU)
    m.put(1, 1, 4.5)
    assert m.get(1, 1) == 4.5
    for i, j in [(2, 0), (0, 2), (-1, 0), (0, -1)]:
        with pytest.raises(CellIndexError):
            m.get(i, j)
        with pytest.raises(IndexError):
            m.put(i, j, 1.0)

def test_clone_is_deep(matrix_factory):
    m = matrix_factory([[1, 2], [3, 4]], activation=SIGMOID)
    c = m.clone()
    c.put(0, 0, 100.0)
    assert m.get(0, 0) == 1.0
    assert c.activation is SIGMOID
    assert c.shape == m.shape

def test_subtract_inplace(matrix_factory):
    m = matrix_factory([[1, 2], [3, 4]])
    m.subtract_([[1, 1], [1, 1]])
    assert m.to_array().tolist() == [0, 1, 2, 3]
    with pytest.raises(DimensionMismatchError):
        m.subtract_([[1, 1, 1]])

def test_outer_product():
    out = outer_product([1.0, 2.0], [3.0, 4.0, 5.0])
    assert out.tolist() == [[3, 4, 5], [6, 8, 10]]

def test_repr_mentions_activation(matrix_factory):
    assert "relu" in repr(matrix_factory([[1.0]]))
