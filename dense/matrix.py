# dense/matrix.py
from __future__ import annotations
from typing import Optional, Sequence
import numpy as np

from core.interfaces import Activation
from .errors import CellIndexError, DimensionMismatchError, InvalidArgumentError


def outer_product(u: Sequence[float], v: Sequence[float]) -> np.ndarray:
    """u * v^T as an (len(u), len(v)) array."""
    return np.outer(np.asarray(u, dtype=np.float64), np.asarray(v, dtype=np.float64))


class DenseMatrix:
    """
    Dense float64 grid bound to one activation function.

    Organised as (layer+1 nodes) rows by (layer nodes + bias) columns: cell
    (i, j) is the weight from input j to output node i. The same storage is
    read as a genome by randomize / mutate / crossover / clone, which draw from
    the matrix's generator so a seeded generator gives repeatable results.

    Shape never changes after construction.
    """

    def __init__(self, rows: int, cols: int, activation: Activation,
                 rng: Optional[np.random.Generator] = None):
        if rows <= 0 or cols <= 0:
            raise InvalidArgumentError(f"Matrix dimensions must be positive, got {rows}x{cols}")
        self.rows = int(rows)
        self.cols = int(cols)
        self.cells = np.zeros((self.rows, self.cols), dtype=np.float64)
        self.activation = activation
        self.rng = rng if rng is not None else np.random.default_rng()

    @classmethod
    def from_array(cls, cells, activation: Activation,
                   rng: Optional[np.random.Generator] = None) -> "DenseMatrix":
        """Wrap an existing 2-D array. float64 arrays are taken over, not copied."""
        arr = np.asarray(cells, dtype=np.float64)
        if arr.ndim != 2 or arr.shape[0] == 0 or arr.shape[1] == 0:
            raise InvalidArgumentError(f"Expected a non-empty 2-D array, got shape {arr.shape}")
        m = cls.__new__(cls)
        m.rows, m.cols = arr.shape
        m.cells = arr
        m.activation = activation
        m.rng = rng if rng is not None else np.random.default_rng()
        return m

    @property
    def shape(self) -> tuple[int, int]:
        return (self.rows, self.cols)

    # ---------- Cell access ----------
    def _check_index(self, i: int, j: int) -> None:
        if not (0 <= i < self.rows and 0 <= j < self.cols):
            raise CellIndexError(f"Cell ({i}, {j}) outside {self.rows}x{self.cols} matrix")

    def get(self, i: int, j: int) -> float:
        self._check_index(i, j)
        return float(self.cells[i, j])

    def put(self, i: int, j: int, value: float) -> None:
        self._check_index(i, j)
        self.cells[i, j] = value

    # ---------- Inference primitives ----------
    def dot(self, other: "DenseMatrix") -> "DenseMatrix":
        """
        Weighted sum of this matrix against `other`: result is rows x other.cols.
        Rows of `other` must equal columns of this matrix.
        """
        if self.cols != other.rows:
            raise DimensionMismatchError(
                f"Source columns {self.cols} not equal to target rows {other.rows} for matrix dot product"
            )
        return DenseMatrix.from_array(self.cells @ other.cells, self.activation, self.rng)

    def activate(self) -> "DenseMatrix":
        return DenseMatrix.from_array(
            np.asarray(self.activation.apply(self.cells), dtype=np.float64).copy(),
            self.activation, self.rng,
        )

    def single_column_matrix_from_array(self, values: Sequence[float]) -> "DenseMatrix":
        col = np.array(values, dtype=np.float64).reshape(-1, 1)
        return DenseMatrix.from_array(col, self.activation, self.rng)

    def to_array(self) -> np.ndarray:
        return self.cells.reshape(-1).copy()

    def add_bias(self) -> "DenseMatrix":
        """(n x 1) -> (n+1 x 1) with the extra row fixed at 1."""
        if self.cols != 1:
            raise DimensionMismatchError(f"add_bias expects a single-column matrix, got {self.rows}x{self.cols}")
        col = np.empty((self.rows + 1, 1), dtype=np.float64)
        col[:-1, 0] = self.cells[:, 0]
        col[-1, 0] = 1.0
        return DenseMatrix.from_array(col, self.activation, self.rng)

    def subtract_(self, other_cells) -> "DenseMatrix":
        """In-place cells -= other_cells."""
        other = np.asarray(other_cells, dtype=np.float64)
        if other.shape != self.cells.shape:
            raise DimensionMismatchError(f"Cannot subtract {other.shape} from {self.cells.shape}")
        self.cells -= other
        return self

    # ---------- Genome operators ----------
    def _rand_cell_values(self, size) -> np.ndarray:
        # between -1.0 and 1.0
        return 2.0 * self.rng.random(size) - 1.0

    def randomize(self) -> None:
        self.cells[...] = self._rand_cell_values(self.cells.shape)

    def mutate(self, mutation_rate: float) -> int:
        """
        Each cell independently gets a fresh value in [-1, 1] with probability
        `mutation_rate`. Returns the number of replaced cells.
        """
        if not 0.0 <= mutation_rate <= 1.0:
            raise InvalidArgumentError(f"Mutation rate must be in [0, 1], got {mutation_rate}")
        mask = self.rng.random(self.cells.shape) < mutation_rate
        hits = int(mask.sum())
        if hits:
            self.cells[mask] = self._rand_cell_values(hits)
        return hits

    def crossover(self, partner: "DenseMatrix", alpha: Optional[float] = None) -> "DenseMatrix":
        """
        Arithmetic crossover: child = alpha * self + (1 - alpha) * partner.
        alpha 1 favours this parent, 0 the partner, .5 blends evenly. One alpha
        for the whole matrix, drawn from [0, 1) unless given.
        """
        if self.shape != partner.shape:
            raise DimensionMismatchError(f"Cannot cross {self.rows}x{self.cols} with {partner.rows}x{partner.cols}")
        if alpha is None:
            alpha = float(self.rng.random())
        elif not 0.0 <= alpha <= 1.0:
            raise InvalidArgumentError(f"Crossover alpha must be in [0, 1], got {alpha}")
        child = self.cells * alpha + partner.cells * (1.0 - alpha)
        return DenseMatrix.from_array(child, self.activation, self.rng)

    def clone(self) -> "DenseMatrix":
        return DenseMatrix.from_array(self.cells.copy(), self.activation, self.rng)

    # ---------- Misc ----------
    def allclose(self, other: "DenseMatrix", atol: float = 1e-12) -> bool:
        return self.shape == other.shape and bool(np.allclose(self.cells, other.cells, atol=atol))

    def __repr__(self) -> str:
        lines = [f"DenseMatrix({self.rows}x{self.cols}, activation={self.activation.describe()}):"]
        for i, row in enumerate(self.cells):
            lines.append(f"[{i}] " + " ".join(repr(float(v)) for v in row))
        return "\n".join(lines)
