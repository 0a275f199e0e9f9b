# dense/builder.py
from __future__ import annotations
import logging
import numbers
from dataclasses import dataclass
from typing import Optional
import numpy as np

from core.interfaces import Activation, WeightInitializer
from .errors import DenseLayerError, InvalidArgumentError, MissingConfigurationError
from .init import xavier_uniform
from .layer import Layer
from .matrix import DenseMatrix

logger = logging.getLogger(__name__)


def _is_count(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


@dataclass(frozen=True)
class LayerConfig:
    """Everything needed to allocate a Layer. Checked as a whole before any storage is created."""
    activation: Optional[Activation] = None
    num_inputs: int = 0
    num_nodes: int = 0

    def validate(self) -> Optional[DenseLayerError]:
        """Return the first problem found, or None when the config can be built."""
        if self.activation is None:
            return MissingConfigurationError("Fully connected activation function was not set!")
        if not _is_count(self.num_inputs) or self.num_inputs <= 0:
            return InvalidArgumentError(f"Number of fully connected inputs must be a positive integer, got {self.num_inputs!r}")
        if not _is_count(self.num_nodes) or self.num_nodes <= 0:
            return InvalidArgumentError(f"Number of fully connected nodes must be a positive integer, got {self.num_nodes!r}")
        return None


def build_layer(
    cfg: LayerConfig,
    initializer: Optional[WeightInitializer] = None,
    rng: Optional[np.random.Generator] = None,
) -> Layer:
    err = cfg.validate()
    if err is not None:
        raise err
    rng = rng if rng is not None else np.random.default_rng()
    init = initializer if initializer is not None else xavier_uniform(rng)

    weights = DenseMatrix(cfg.num_nodes, cfg.num_inputs + 1, cfg.activation, rng)
    for i in range(weights.rows):
        for j in range(weights.cols):
            weights.put(i, j, init(cfg.num_inputs, cfg.num_nodes))

    logger.debug("Built layer %d -> %d (%s)", cfg.num_inputs, cfg.num_nodes, cfg.activation.describe())
    return Layer(weights)


class LayerBuilder:
    """Fluent front end for LayerConfig."""

    def __init__(self):
        self._activation: Optional[Activation] = None
        self._num_inputs = 0
        self._num_nodes = 0
        self._initializer: Optional[WeightInitializer] = None
        self._rng: Optional[np.random.Generator] = None

    def set_activation_function(self, activation: Activation) -> "LayerBuilder":
        if activation is None:
            raise MissingConfigurationError("Fully connected activation function was None!")
        self._activation = activation
        return self

    def set_num_inputs(self, num_inputs: int) -> "LayerBuilder":
        if not _is_count(num_inputs):
            raise InvalidArgumentError(f"Number of fully connected inputs must be an integer, got {num_inputs!r}")
        if num_inputs <= 0:
            raise InvalidArgumentError("Number of fully connected inputs must be positive!")
        self._num_inputs = int(num_inputs)
        return self

    def set_num_nodes(self, num_nodes: int) -> "LayerBuilder":
        if not _is_count(num_nodes):
            raise InvalidArgumentError(f"Number of fully connected nodes must be an integer, got {num_nodes!r}")
        if num_nodes <= 0:
            raise InvalidArgumentError("Number of fully connected nodes must be positive!")
        self._num_nodes = int(num_nodes)
        return self

    def set_weight_initializer(self, initializer: WeightInitializer) -> "LayerBuilder":
        self._initializer = initializer
        return self

    def set_rng(self, rng: np.random.Generator) -> "LayerBuilder":
        self._rng = rng
        return self

    def config(self) -> LayerConfig:
        return LayerConfig(self._activation, self._num_inputs, self._num_nodes)

    def build(self) -> Layer:
        return build_layer(self.config(), self._initializer, self._rng)


def new_builder() -> LayerBuilder:
    return LayerBuilder()
