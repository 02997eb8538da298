"""
Gradient-descent training loop for NeuralNet.

Each iteration rebuilds the whole expression graph from fresh constants:
forward pass, mean-squared-error loss, compute_gradients() on the loss,
then update() on every weight and bias. Derived node values are frozen at
construction, so the graph of the previous iteration is simply dropped.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from scalargrad.config import ScalargradConfig
from scalargrad.core.autograd import (
    Node,
    add,
    compute_gradients,
    constant,
    multiply,
    squared,
    subtract,
    update,
)
from scalargrad.core.nn import NeuralNet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Sample:
    """One training pair: network inputs and the expected scalar output."""

    inputs: tuple[float, ...]
    target: float


# targets follow y = x0 + x1
DEFAULT_DATASET = (
    Sample((5.0, 5.0), 10.0),
    Sample((4.0, 3.0), 7.0),
    Sample((10.0, 3.0), 13.0),
    Sample((-15.0, 3.0), -12.0),
    Sample((-5.0, 3.0), -2.0),
)


# ============================================================================
# LOSS
# ============================================================================

def mean_squared_error(predicted: Sequence[Node], targets: Sequence[Node]) -> Node:
    """mean((p - t) ** 2) as a single graph node."""
    if len(predicted) != len(targets):
        raise ValueError(
            f"Got {len(predicted)} predictions for {len(targets)} targets"
        )
    if not predicted:
        raise ValueError("Cannot average an empty set of predictions")

    total = None
    for p, t in zip(predicted, targets):
        err = squared(subtract(p, t))
        total = err if total is None else add(total, err)

    return multiply(total, constant(1.0 / len(predicted)))


def _build_loss(net: NeuralNet, dataset: Sequence[Sample]) -> Node:
    predicted = []
    targets = []
    for sample in dataset:
        out = net.forward([constant(x) for x in sample.inputs])
        if len(out) != 1:
            raise ValueError(
                f"Training expects a single-output network, got {len(out)} outputs"
            )
        predicted.append(out[0])
        targets.append(constant(sample.target))
    return mean_squared_error(predicted, targets)


# ============================================================================
# TRAINING
# ============================================================================

def train(
    net: NeuralNet,
    dataset: Sequence[Sample] = DEFAULT_DATASET,
    config: Optional[ScalargradConfig] = None,
    cancel_check: Optional[Callable[[], bool]] = None,
) -> dict:
    """
    Train net on dataset by full-batch gradient descent.

    Runs config.iterations steps at config.learning_rate. The loss recorded
    for an iteration is the one computed before that iteration's update.

    Returns training stats dict.
    """
    if not dataset:
        raise ValueError("Cannot train on an empty dataset")

    if config is None:
        import scalargrad
        config = scalargrad.get_config()

    params = net.parameters()
    losses = []

    for step in range(config.iterations):
        if cancel_check is not None and cancel_check():
            logger.info("[Train] Cancelled after %d iterations", step)
            break

        loss = _build_loss(net, dataset)
        losses.append(loss.value)
        logger.debug("[Train] step=%d loss=%f", step, loss.value)
        if config.log_every and step % config.log_every == 0:
            logger.info("[Train] step=%d loss=%f", step, loss.value)

        compute_gradients(loss)
        for p in params:
            update(p, config.learning_rate)

    stats = {
        "iterations": len(losses),
        "initial_loss": losses[0] if losses else None,
        "final_loss": losses[-1] if losses else None,
        "mean_loss": sum(losses) / len(losses) if losses else None,
        "losses": losses,
    }

    if losses:
        logger.info(
            "[Train] Done: %d iterations, loss %.6f -> %.6f (mean %.6f)",
            stats["iterations"], stats["initial_loss"], stats["final_loss"], stats["mean_loss"],
        )
    else:
        logger.info("[Train] Training cancelled before any steps")

    return stats
