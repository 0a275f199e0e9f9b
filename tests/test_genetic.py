# tests/test_genetic.py
import numpy as np
import pytest

from dense.activations import RELU, SIGMOID
from dense.errors import DimensionMismatchError, InvalidArgumentError
from dense.matrix import DenseMatrix


def _seeded(rows, cols, seed, activation=RELU):
    m = DenseMatrix(rows, cols, activation, np.random.default_rng(seed))
    m.randomize()
    return m

def test_randomize_range_and_in_place():
    m = DenseMatrix(20, 30, RELU, np.random.default_rng(0))
    cells = m.cells
    m.randomize()
    assert m.cells is cells
    assert np.all(m.cells >= -1.0) and np.all(m.cells <= 1.0)
    assert np.unique(m.cells).size > 1

def test_randomize_deterministic_under_seed():
    a, b = _seeded(4, 5, seed=7), _seeded(4, 5, seed=7)
    assert np.array_equal(a.cells, b.cells)

def test_mutate_zero_rate_leaves_matrix_unchanged():
    m = _seeded(6, 6, seed=3)
    before = m.cells.copy()
    assert m.mutate(0.0) == 0
    assert np.array_equal(m.cells, before)

def test_mutate_full_rate_replaces_every_cell():
    m = DenseMatrix(5, 5, RELU, np.random.default_rng(3))
    m.cells[...] = 5.0  # outside the mutation range, so every replaced cell is visible
    assert m.mutate(1.0) == 25
    assert np.all(m.cells >= -1.0) and np.all(m.cells <= 1.0)

def test_mutate_partial_rate_is_cellwise():
    m = DenseMatrix(50, 50, RELU, np.random.default_rng(11))
    m.cells[...] = 5.0
    hits = m.mutate(0.2)
    assert hits == int(np.sum(m.cells != 5.0))
    assert 0.1 * 2500 < hits < 0.3 * 2500

@pytest.mark.parametrize("rate", [-0.1, 1.5])
def test_mutate_rejects_bad_rate(rate):
    with pytest.raises(InvalidArgumentError):
        DenseMatrix(2, 2, RELU).mutate(rate)

def test_crossover_alpha_extremes():
    a, b = _seeded(3, 4, seed=1), _seeded(3, 4, seed=2)
    assert np.array_equal(a.crossover(b, alpha=1.0).cells, a.cells)
    assert np.array_equal(a.crossover(b, alpha=0.0).cells, b.cells)

def test_crossover_child_lies_between_parents():
    a, b = _seeded(8, 9, seed=4), _seeded(8, 9, seed=5)
    child = a.crossover(b)
    lo = np.minimum(a.cells, b.cells) - 1e-12
    hi = np.maximum(a.cells, b.cells) + 1e-12
    assert np.all(child.cells >= lo) and np.all(child.cells <= hi)

def test_crossover_uses_single_global_alpha():
    a, b = _seeded(6, 6, seed=8), _seeded(6, 6, seed=9)
    child = a.crossover(b)
    diff = a.cells - b.cells
    mask = np.abs(diff) > 1e-6
    alphas = (child.cells[mask] - b.cells[mask]) / diff[mask]
    assert np.allclose(alphas, alphas[0])

def test_crossover_keeps_parents_and_activation():
    a, b = _seeded(2, 3, seed=1, activation=SIGMOID), _seeded(2, 3, seed=2, activation=SIGMOID)
    a_before, b_before = a.cells.copy(), b.cells.copy()
    child = a.crossover(b, alpha=0.5)
    assert child.activation is SIGMOID
    assert child.shape == a.shape
    assert np.array_equal(a.cells, a_before) and np.array_equal(b.cells, b_before)

def test_crossover_dimension_mismatch():
    with pytest.raises(DimensionMismatchError):
        _seeded(2, 3, seed=1).crossover(_seeded(3, 2, seed=2))

def test_crossover_rejects_bad_alpha():
    a, b = _seeded(2, 2, seed=1), _seeded(2, 2, seed=2)
    with pytest.raises(InvalidArgumentError):
        a.crossover(b, alpha=1.5)

def test_crossover_deterministic_under_seed():
    c1 = _seeded(3, 3, seed=1).crossover(_seeded(3, 3, seed=2))
    c2 = _seeded(3, 3, seed=1).crossover(_seeded(3, 3, seed=2))
    assert np.array_equal(c1.cells, c2.cells)
