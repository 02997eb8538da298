"""
Provider protocols for dependency injection.

Callers that want a different parameter initialization policy implement
these and pass them to NeuralNet. The engine itself never draws random
numbers.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class ParameterInitializer(Protocol):
    """Source of starting values for trainable weights and biases."""

    def sample(self) -> float:
        """
        Draw the initial value for one parameter.

        Called once per weight and once per bias, in construction order
        (neuron by neuron, weights before bias).
        """
        ...
