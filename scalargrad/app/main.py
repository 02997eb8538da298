"""scalargrad-train: train the demo network on the built-in dataset."""

import logging
from typing import Optional

from scalargrad.app.config import Settings, settings

logger = logging.getLogger("scalargrad_train")


def _init_scalargrad(app_settings: Settings):
    """Initialize scalargrad from settings and return the installed config."""
    import scalargrad
    from scalargrad.config import ScalargradConfig

    config = ScalargradConfig(
        layer_sizes=app_settings.layer_sizes_list,
        hidden_activation=app_settings.hidden_activation,
        init_low=app_settings.init_low,
        init_high=app_settings.init_high,
        seed=app_settings.seed,
        learning_rate=app_settings.learning_rate,
        iterations=app_settings.iterations,
        log_every=app_settings.log_every,
    )

    scalargrad.init(config)
    logger.info(
        "scalargrad initialized: layers=%s, lr=%g, iterations=%d, seed=%s",
        config.layer_sizes, config.learning_rate, config.iterations, config.seed,
    )
    return config


def train_and_report(app_settings: Settings) -> dict:
    """Train on DEFAULT_DATASET, dump the network, print the query prediction."""
    from scalargrad.core.nn import NeuralNet
    from scalargrad.core.training import DEFAULT_DATASET, train

    config = _init_scalargrad(app_settings)
    net = NeuralNet.from_config(config)
    stats = train(net, DEFAULT_DATASET, config)

    net.dump()

    query = app_settings.query_values
    prediction = net.forward(query)
    print(f"f({', '.join(f'{q:g}' for q in query)}) = {[p.value for p in prediction]}")

    return stats


def run(app_settings: Optional[Settings] = None):
    """Entry point for `scalargrad-train` CLI command."""
    app_settings = app_settings or settings

    logging.basicConfig(
        level=getattr(logging, app_settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    train_and_report(app_settings)


if __name__ == "__main__":
    run()
