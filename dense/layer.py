# dense/layer.py
from __future__ import annotations
import logging
from typing import Any, Dict, Optional, Sequence
import numpy as np

from core.interfaces import ReductionExecutor
from core.parallel import SerialExecutor
from .activations import get_activation
from .errors import DimensionMismatchError, InvalidArgumentError, LengthMismatchError
from .matrix import DenseMatrix, outer_product

logger = logging.getLogger(__name__)

# Value of the synthetic bias input. Set once per layer, never overwritten.
BIAS_INPUT = -1.0

_SERIAL = SerialExecutor()


class Layer:
    """
    Fully-connected layer.

    Stores the weights between inputs and nodes (rows = nodes, columns =
    inputs + 1 bias column) and provides the forward pass and error
    back-propagation. `last_input` / `last_output` are overwritten by every
    forward pass, so one instance must not be driven from two threads.

    Build through LayerBuilder or Layer.from_state.
    """

    def __init__(self, weights: DenseMatrix):
        if weights.cols < 2:
            raise InvalidArgumentError(
                f"Weight matrix needs at least one input column plus the bias column, got {weights.cols}"
            )
        self.weights = weights
        self.last_input = np.zeros(weights.cols, dtype=np.float64)
        self.last_input[-1] = BIAS_INPUT
        self.last_output = np.zeros(weights.rows, dtype=np.float64)

    # ---------- Shape ----------
    @property
    def num_inputs(self) -> int:
        return self.weights.cols - 1

    @property
    def num_nodes(self) -> int:
        return self.weights.rows

    @property
    def activation(self):
        return self.weights.activation

    def get_weights(self) -> np.ndarray:
        return self.weights.cells

    # ---------- Forward ----------
    def compute_output(self, vec: Sequence[float]) -> np.ndarray:
        """Compute the output of the given input vector."""
        x = np.asarray(vec, dtype=np.float64).reshape(-1)
        if x.shape[0] != self.num_inputs:
            raise LengthMismatchError(
                f"Input length in fully connected layer was {x.shape[0]}, should be {self.num_inputs}."
            )
        self.last_input[: self.num_inputs] = x
        column = self.weights.single_column_matrix_from_array(self.last_input)
        self.last_output = self.weights.dot(column).activate().to_array()
        return self.last_output

    # ---------- Backward ----------
    def propagate_error(
        self,
        upstream_error: Sequence[float],
        learning_rate: float,
        executor: Optional[ReductionExecutor] = None,
    ) -> np.ndarray:
        """
        Given the error from the layer above, return the error for the layer
        below and update the weights.

        downstream[i] = sum_j up[j] * w[j, i] * f'(last_input[i]) for every
        non-bias input i; each index is one unit of work for `executor`.
        The weight update runs only after every unit is collected.
        """
        up = np.asarray(upstream_error, dtype=np.float64).reshape(-1)
        if up.shape[0] != self.num_nodes:
            raise LengthMismatchError(
                f"Got length {up.shape[0]} delta, expected length {self.num_nodes}!"
            )

        # NOTE: derivative taken at the raw input value, not the node's pre-activation sum
        derivs = np.asarray(self.activation.apply_derivative(self.last_input), dtype=np.float64)
        w = self.weights.cells

        def _delta_at(i: int) -> float:
            return float(np.sum(up * w[:, i] * derivs[i]))

        executor = executor if executor is not None else _SERIAL
        downstream = executor.map_indices(_delta_at, self.num_inputs)

        self.weights.subtract_(learning_rate * outer_product(up, self.last_input))
        return downstream

    # ---------- Genome / persistence boundary ----------
    def clone(self) -> "Layer":
        return Layer(self.weights.clone())

    def get_state(self) -> Dict[str, Any]:
        return {
            "activation": self.activation.describe(),
            "weights": self.weights.cells.tolist(),
        }

    def set_state(self, state: Dict[str, Any]) -> None:
        cells = np.asarray(state["weights"], dtype=np.float64)
        if cells.shape != self.weights.shape:
            raise DimensionMismatchError(
                f"Stored weights {cells.shape} do not fit layer {self.weights.shape}"
            )
        activation = get_activation(state["activation"])
        self.weights = DenseMatrix.from_array(cells, activation, self.weights.rng)

    @classmethod
    def from_state(cls, state: Dict[str, Any], rng: Optional[np.random.Generator] = None) -> "Layer":
        activation = get_activation(state["activation"])
        layer = cls(DenseMatrix.from_array(np.asarray(state["weights"], dtype=np.float64), activation, rng))
        logger.debug("Restored layer %dx%d (%s)", layer.num_nodes, layer.num_inputs, activation.describe())
        return layer

    def __str__(self) -> str:
        return "\n".join([
            "------\tFully Connected Layer\t------",
            f"Number of inputs: {self.num_inputs} (plus a bias)",
            f"Number of nodes: {self.num_nodes}",
            f"Activation function: {self.activation.describe()}",
        ])
