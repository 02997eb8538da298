"""
Feed-forward network built from scalar autograd nodes.

Neuron -> Layer -> NeuralNet. Every weight and bias is a leaf Node, so a
loss built from forward() outputs can be differentiated back to them with
compute_gradients() and stepped with update().
"""

import logging
import random
import sys
from typing import Optional, Sequence, TextIO

from scalargrad.config import ScalargradConfig
from scalargrad.core.autograd import Node, add, constant, multiply, relu
from scalargrad.protocols import ParameterInitializer

logger = logging.getLogger(__name__)


# ============================================================================
# INITIALIZATION
# ============================================================================

class UniformInitializer:
    """Uniform draws in [low, high) from a private RNG."""

    def __init__(self, low: float = -1.0, high: float = 1.0, seed: Optional[int] = None):
        if low >= high:
            raise ValueError(f"Empty init range: low={low} must be below high={high}")
        self.low = low
        self.high = high
        self._rng = random.Random(seed)

    def sample(self) -> float:
        return self._rng.uniform(self.low, self.high)


# ============================================================================
# MODEL
# ============================================================================

class Neuron:
    """Weighted sum of inputs plus bias, optionally through relu."""

    def __init__(self, n_inputs: int, initializer: ParameterInitializer, activation: bool = False):
        if n_inputs < 1:
            raise ValueError(f"Neuron needs at least one input, got {n_inputs}")
        self.weights = [constant(initializer.sample()) for _ in range(n_inputs)]
        self.bias = constant(initializer.sample())
        self.activation = activation

    def forward(self, inputs: Sequence[Node]) -> Node:
        if len(inputs) != len(self.weights):
            raise ValueError(
                f"Neuron expects {len(self.weights)} inputs, got {len(inputs)}"
            )
        s = None
        for w, x in zip(self.weights, inputs):
            term = multiply(w, x)
            s = term if s is None else add(s, term)
        out = add(s, self.bias)
        return relu(out) if self.activation else out

    def parameters(self) -> list[Node]:
        return [*self.weights, self.bias]


class Layer:
    """n_outputs neurons that all read the same inputs."""

    def __init__(
        self,
        n_inputs: int,
        n_outputs: int,
        initializer: ParameterInitializer,
        activation: bool = False,
    ):
        if n_outputs < 1:
            raise ValueError(f"Layer needs at least one neuron, got {n_outputs}")
        self.neurons = [Neuron(n_inputs, initializer, activation) for _ in range(n_outputs)]

    def forward(self, inputs: Sequence[Node]) -> list[Node]:
        return [neuron.forward(inputs) for neuron in self.neurons]

    def parameters(self) -> list[Node]:
        params = []
        for neuron in self.neurons:
            params.extend(neuron.parameters())
        return params


class NeuralNet:
    """Stack of fully-connected layers. Hidden layers may use relu; the output layer is linear."""

    def __init__(
        self,
        layer_sizes: Sequence[int],
        initializer: Optional[ParameterInitializer] = None,
        hidden_activation: bool = False,
    ):
        if len(layer_sizes) < 2:
            raise ValueError(
                f"layer_sizes needs an input and an output width, got {list(layer_sizes)!r}"
            )
        if initializer is None:
            initializer = UniformInitializer()

        self.layer_sizes = list(layer_sizes)
        n_layers = len(layer_sizes) - 1
        self.layers = [
            Layer(
                layer_sizes[i],
                layer_sizes[i + 1],
                initializer,
                activation=hidden_activation and i < n_layers - 1,
            )
            for i in range(n_layers)
        ]
        logger.debug(
            "Built network %s (%d parameters)", self.layer_sizes, len(self.parameters())
        )

    @classmethod
    def from_config(cls, config: ScalargradConfig) -> "NeuralNet":
        initializer = UniformInitializer(config.init_low, config.init_high, seed=config.seed)
        return cls(config.layer_sizes, initializer, hidden_activation=config.hidden_activation)

    def forward(self, inputs: Sequence) -> list[Node]:
        """Forward pass. Plain numbers are wrapped as constants."""
        output = [x if isinstance(x, Node) else constant(x) for x in inputs]
        for layer in self.layers:
            output = layer.forward(output)
        return output

    def parameters(self) -> list[Node]:
        """All trainable weights and biases, layer by layer."""
        params = []
        for layer in self.layers:
            params.extend(layer.parameters())
        return params

    def state_dict(self) -> dict:
        """Serialize weights to JSON-friendly dict."""
        return {
            "layer_sizes": list(self.layer_sizes),
            "layers": [
                [
                    {"weights": [w.value for w in n.weights], "bias": n.bias.value}
                    for n in layer.neurons
                ]
                for layer in self.layers
            ],
        }

    def load_state_dict(self, d: dict):
        """Load weights from dict. The shape must match this network."""
        if list(d.get("layer_sizes", [])) != self.layer_sizes:
            raise ValueError(
                f"State dict is for layers {d.get('layer_sizes')!r}, network is {self.layer_sizes!r}"
            )
        for layer, layer_state in zip(self.layers, d["layers"]):
            for neuron, neuron_state in zip(layer.neurons, layer_state):
                for w, val in zip(neuron.weights, neuron_state["weights"]):
                    w.value = float(val)
                neuron.bias.value = float(neuron_state["bias"])

    def dump(self, file: Optional[TextIO] = None):
        """Print weights and bias of every neuron. Debug only."""
        out = file if file is not None else sys.stdout
        for layer in self.layers:
            print("layer", file=out)
            for neuron in layer.neurons:
                ws = [w.value for w in neuron.weights]
                print(f"w={ws}, b={neuron.bias.value}", file=out)
