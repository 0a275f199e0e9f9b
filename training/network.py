# training/network.py
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Sequence
import numpy as np

from core.interfaces import Activation, ReductionExecutor, WeightInitializer
from dense.builder import LayerBuilder
from dense.errors import DimensionMismatchError, InvalidArgumentError, LengthMismatchError
from dense.layer import Layer

logger = logging.getLogger(__name__)


class DenseNetwork:
    """
    Ordered stack of Layers, where layer k's node count equals layer k+1's
    input count. Usable for backprop (forward/backward) or as a genome
    (clone/mutate/crossover over every layer's weight matrix).
    """

    def __init__(self, layers: Sequence[Layer]):
        if not layers:
            raise InvalidArgumentError("A network requires at least one layer")
        for k, (a, b) in enumerate(zip(layers, layers[1:])):
            if a.num_nodes != b.num_inputs:
                raise LengthMismatchError(
                    f"Layer {k} emits {a.num_nodes} values but layer {k + 1} expects {b.num_inputs}"
                )
        self.layers: List[Layer] = list(layers)

    @property
    def shape(self) -> List[int]:
        """[inputs, layer1 nodes, ..., output nodes]"""
        return [self.layers[0].num_inputs] + [layer.num_nodes for layer in self.layers]

    @property
    def num_inputs(self) -> int:
        return self.layers[0].num_inputs

    @property
    def num_outputs(self) -> int:
        return self.layers[-1].num_nodes

    # ---------- Backprop ----------
    def forward(self, x: Sequence[float]) -> np.ndarray:
        a = np.asarray(x, dtype=np.float64)
        for layer in self.layers:
            a = layer.compute_output(a)
        return a

    def activations(self, x: Sequence[float]) -> List[np.ndarray]:
        """[input, layer1 output, ..., final output], one entry per value in `shape`."""
        a = np.asarray(x, dtype=np.float64).reshape(-1)
        acts = [a.copy()]
        for layer in self.layers:
            a = layer.compute_output(a)
            acts.append(a.copy())
        return acts

    def backward(
        self,
        output_error: Sequence[float],
        learning_rate: float,
        executor: Optional[ReductionExecutor] = None,
    ) -> np.ndarray:
        """Propagate from the last layer down; returns the error at the network input."""
        err = np.asarray(output_error, dtype=np.float64)
        for layer in reversed(self.layers):
            err = layer.propagate_error(err, learning_rate, executor)
        return err

    def train_sample(
        self,
        x: Sequence[float],
        target: Sequence[float],
        learning_rate: float,
        executor: Optional[ReductionExecutor] = None,
    ) -> float:
        """One forward/backward cycle. Returns the squared-error loss before the update."""
        y = np.asarray(target, dtype=np.float64).reshape(-1)
        if y.shape[0] != self.num_outputs:
            raise LengthMismatchError(f"Target length {y.shape[0]} != network outputs {self.num_outputs}")
        out = self.forward(x)
        err = out - y
        self.backward(err, learning_rate, executor)
        return float(0.5 * np.sum(err * err))

    # ---------- Genome ----------
    def clone(self) -> "DenseNetwork":
        return DenseNetwork([layer.clone() for layer in self.layers])

    def mutate(self, mutation_rate: float) -> int:
        return sum(layer.weights.mutate(mutation_rate) for layer in self.layers)

    def randomize(self) -> None:
        for layer in self.layers:
            layer.weights.randomize()

    def crossover(self, partner: "DenseNetwork", alpha: Optional[float] = None) -> "DenseNetwork":
        """
        Layer-wise arithmetic crossover; each layer draws its own alpha unless
        one is given. Parents must agree on shape and on every layer's activation.
        """
        if self.shape != partner.shape:
            raise DimensionMismatchError(f"Cannot cross network {self.shape} with {partner.shape}")
        for k, (mine, theirs) in enumerate(zip(self.layers, partner.layers)):
            if mine.activation.describe() != theirs.activation.describe():
                raise InvalidArgumentError(
                    f"Layer {k} activations differ: {mine.activation.describe()} vs {theirs.activation.describe()}"
                )
        return DenseNetwork([
            Layer(mine.weights.crossover(theirs.weights, alpha))
            for mine, theirs in zip(self.layers, partner.layers)
        ])

    # ---------- Persistence boundary ----------
    def get_state(self) -> Dict[str, Any]:
        return {"layers": [layer.get_state() for layer in self.layers]}

    def set_state(self, state: Dict[str, Any]) -> None:
        stored = state["layers"]
        if len(stored) != len(self.layers):
            raise LengthMismatchError(f"State holds {len(stored)} layers, network has {len(self.layers)}")
        for layer, s in zip(self.layers, stored):
            layer.set_state(s)

    @classmethod
    def from_state(cls, state: Dict[str, Any], rng: Optional[np.random.Generator] = None) -> "DenseNetwork":
        return cls([Layer.from_state(s, rng) for s in state["layers"]])

    def __str__(self) -> str:
        desc = ["Dense Network:"]
        for layer in self.layers:
            desc.append(f"  Dense({layer.num_inputs} -> {layer.num_nodes}, {layer.activation.describe()})")
        return "\n".join(desc)


def build_network(
    layer_sizes: Sequence[int],
    activation: Activation,
    initializer: Optional[WeightInitializer] = None,
    rng: Optional[np.random.Generator] = None,
    output_activation: Optional[Activation] = None,
) -> DenseNetwork:
    """
    layer_sizes like [in, h1, h2, out]. Every layer uses `activation` except the
    last, which uses `output_activation` when given.
    """
    sizes = list(layer_sizes)
    if len(sizes) < 2:
        raise InvalidArgumentError(f"layer_sizes needs at least input and output sizes, got {sizes}")
    rng = rng if rng is not None else np.random.default_rng()
    last = len(sizes) - 2
    layers = []
    for idx, (inp, out) in enumerate(zip(sizes, sizes[1:])):
        act = output_activation if (idx == last and output_activation is not None) else activation
        builder = LayerBuilder().set_activation_function(act).set_num_inputs(inp).set_num_nodes(out).set_rng(rng)
        if initializer is not None:
            builder.set_weight_initializer(initializer)
        layers.append(builder.build())
    net = DenseNetwork(layers)
    logger.debug("Built network %s", net.shape)
    return net


def network_from_config(layer_sizes: Sequence[int], cfg) -> DenseNetwork:
    """build_network driven by AppConfig.activation / weight_init / seed."""
    from dense.activations import get_activation
    from dense.init import uniform_initializer, xavier_uniform

    rng = np.random.default_rng(cfg.seed)
    inits = {"xavier": xavier_uniform, "uniform": uniform_initializer}
    if cfg.weight_init not in inits:
        raise InvalidArgumentError(f"Unknown weight_init {cfg.weight_init!r}, expected one of {sorted(inits)}")
    return build_network(layer_sizes, get_activation(cfg.activation), inits[cfg.weight_init](rng), rng)
