"""
scalargrad — scalar reverse-mode autodiff with a tiny neural net on top.

Usage:
    import scalargrad
    from scalargrad.config import ScalargradConfig

    scalargrad.init(ScalargradConfig(layer_sizes=[2, 1], seed=0))

    from scalargrad.core.nn import NeuralNet
    from scalargrad.core.training import train

    net = NeuralNet.from_config(scalargrad.get_config())
    stats = train(net)
"""

import logging
import threading

from scalargrad.config import ScalargradConfig

__version__ = "0.1.0"

_log = logging.getLogger(__name__)

_config: ScalargradConfig | None = None
_initialized: bool = False
_init_lock = threading.Lock()


def init(config: ScalargradConfig) -> None:
    """
    Install the process-wide configuration.

    Components that are not handed a config explicitly fall back to this one.

    Args:
        config: Network shape, initialization range, training tuning
    """
    global _config, _initialized

    if len(config.layer_sizes) < 2:
        raise ValueError(
            f"layer_sizes needs an input and an output width, got {config.layer_sizes!r}"
        )

    with _init_lock:
        _config = config
        _initialized = True

    _log.debug(
        "scalargrad initialized: layers=%s, lr=%g, iterations=%d",
        config.layer_sizes, config.learning_rate, config.iterations,
    )


def get_config() -> ScalargradConfig:
    """Get the current config. Raises if not initialized."""
    if not _initialized or _config is None:
        raise RuntimeError("scalargrad not initialized. Call scalargrad.init() first.")
    return _config
