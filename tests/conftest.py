# tests/conftest.py
import os
import sys

# Headless SDL so view tests don't open a window
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

# Ensure project root is importable (so dense.*, core.*, training.* imports work from repo root)
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import numpy as np
import pytest

@pytest.fixture
def rng():
    return np.random.default_rng(1234)

@pytest.fixture
def matrix_factory(rng):
    from dense.activations import RELU
    from dense.matrix import DenseMatrix
    def make(cells, activation=RELU, gen=None):
        return DenseMatrix.from_array(np.array(cells, dtype=np.float64), activation, gen or rng)
    return make

@pytest.fixture
def layer_factory(rng):
    from dense.activations import SIGMOID
    from dense.builder import LayerBuilder
    def make(num_inputs=3, num_nodes=2, activation=SIGMOID, initializer=None):
        b = (LayerBuilder()
             .set_activation_function(activation)
             .set_num_inputs(num_inputs)
             .set_num_nodes(num_nodes)
             .set_rng(rng))
        if initializer is not None:
            b.set_weight_initializer(initializer)
        return b.build()
    return make

@pytest.fixture
def counting_initializer():
    """Deterministic initializer: 0.1, -0.2, 0.3, -0.4, ... in fill order."""
    def make():
        state = {"n": 0}
        def _init(num_inputs, num_nodes):
            state["n"] += 1
            k = state["n"]
            return (0.1 * k) * (1 if k % 2 else -1)
        return _init
    return make
