# dense/activations.py
from __future__ import annotations
from typing import Dict
import numpy as np

from .errors import InvalidArgumentError


class ReLU:
    """Identity for x > 0, else 0. Works on scalars and numpy arrays."""
    tag = "relu"

    def apply(self, x):
        return np.maximum(0.0, x)

    def apply_derivative(self, x):
        return np.where(np.asarray(x) > 0.0, 1.0, 0.0)

    def describe(self) -> str:
        return self.tag

    def __repr__(self) -> str:
        return "ReLU()"


class Sigmoid:
    tag = "sigmoid"

    def apply(self, x):
        return 1.0 / (1.0 + np.exp(-np.asarray(x, dtype=np.float64)))

    def apply_derivative(self, x):
        s = self.apply(x)
        return s * (1.0 - s)

    def describe(self) -> str:
        return self.tag

    def __repr__(self) -> str:
        return "Sigmoid()"


class Tanh:
    tag = "tanh"

    def apply(self, x):
        return np.tanh(x)

    def apply_derivative(self, x):
        t = np.tanh(x)
        return 1.0 - t * t

    def describe(self) -> str:
        return self.tag

    def __repr__(self) -> str:
        return "Tanh()"


class Linear:
    tag = "linear"

    def apply(self, x):
        return np.asarray(x, dtype=np.float64) * 1.0

    def apply_derivative(self, x):
        return np.ones_like(np.asarray(x, dtype=np.float64))

    def describe(self) -> str:
        return self.tag

    def __repr__(self) -> str:
        return "Linear()"


RELU = ReLU()
SIGMOID = Sigmoid()
TANH = Tanh()
LINEAR = Linear()

ACTIVATIONS: Dict[str, object] = {a.tag: a for a in (RELU, SIGMOID, TANH, LINEAR)}


def get_activation(tag: str):
    """Resolve a persisted activation tag back to its shared instance."""
    try:
        return ACTIVATIONS[str(tag).lower()]
    except KeyError:
        raise InvalidArgumentError(
            f"Unknown activation {tag!r}, expected one of {sorted(ACTIVATIONS)}"
        ) from None
