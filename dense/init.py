# dense/init.py
from __future__ import annotations
from typing import Optional
import numpy as np

from core.interfaces import WeightInitializer


def uniform_initializer(rng: Optional[np.random.Generator] = None,
                        low: float = -1.0, high: float = 1.0) -> WeightInitializer:
    rng = rng if rng is not None else np.random.default_rng()

    def _init(num_inputs: int, num_nodes: int) -> float:
        return float(rng.uniform(low, high))
    return _init


def xavier_uniform(rng: Optional[np.random.Generator] = None) -> WeightInitializer:
    """
    Glorot/Xavier uniform: U(-limit, limit), limit = sqrt(6 / (fan_in + fan_out)).
    """
    rng = rng if rng is not None else np.random.default_rng()

    def _init(num_inputs: int, num_nodes: int) -> float:
        limit = np.sqrt(6 / (num_inputs + num_nodes))
        return float(rng.uniform(-limit, limit))
    return _init


def constant_initializer(value: float) -> WeightInitializer:
    def _init(num_inputs: int, num_nodes: int) -> float:
        return float(value)
    return _init
