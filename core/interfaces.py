# core/interfaces.py
from __future__ import annotations
from typing import Any, Callable, Dict, Protocol, Sequence
import numpy as np

# (num_inputs, num_nodes) -> initial weight for one cell
WeightInitializer = Callable[[int, int], float]


class Activation(Protocol):
    def apply(self, x: Any) -> Any: ...
    def apply_derivative(self, x: Any) -> Any: ...
    def describe(self) -> str: ...


class ReductionExecutor(Protocol):
    """Runs fn(i) for every i in range(n) and returns the results in index order."""
    def map_indices(self, fn: Callable[[int], float], n: int) -> np.ndarray: ...


class LayerInterface(Protocol):
    def compute_output(self, vec: Sequence[float]) -> np.ndarray: ...
    def propagate_error(
        self,
        upstream_error: Sequence[float],
        learning_rate: float,
        executor: ReductionExecutor | None = None,
    ) -> np.ndarray: ...


class Checkpointable(Protocol):
    """Objects that can round-trip their state as pure-Python/JSON-serializable dicts."""
    def get_state(self) -> Dict[str, Any]: ...
    def set_state(self, state: Dict[str, Any]) -> None: ...
