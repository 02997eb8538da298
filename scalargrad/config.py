"""
scalargrad configuration.

Network shape, initialization range, and training-loop tuning are set here.
No hardcoded values in the rest of the package.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class ScalargradConfig:
    """Configuration for network construction and the training loop."""

    # Network topology: input width, hidden widths..., output width
    layer_sizes: list[int] = field(default_factory=lambda: [2, 1])
    hidden_activation: bool = False  # relu on hidden layers; output layer is always linear

    # Parameter initialization (uniform in [init_low, init_high))
    init_low: float = -1.0
    init_high: float = 1.0
    seed: Optional[int] = None  # None = nondeterministic

    # Training loop
    learning_rate: float = 1e-4
    iterations: int = 1000
    log_every: int = 100  # INFO loss line every N iterations; 0 disables
