"""Command-line training configuration via environment variables."""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """scalargrad-train configuration. All values from env vars or .env file."""

    log_level: str = "info"

    # Network
    layer_sizes: str = "2,1"  # comma-separated widths, input first
    hidden_activation: bool = False
    init_low: float = -1.0
    init_high: float = 1.0
    seed: Optional[int] = None

    # Training
    learning_rate: float = 1e-4
    iterations: int = 1000
    log_every: int = 100

    # Input evaluated with the trained network after training
    query: str = "9,4"  # comma-separated

    model_config = {"env_prefix": "SCALARGRAD_", "env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def layer_sizes_list(self) -> list[int]:
        return [int(s.strip()) for s in self.layer_sizes.split(",") if s.strip()]

    @property
    def query_values(self) -> list[float]:
        return [float(s.strip()) for s in self.query.split(",") if s.strip()]


# Singleton — import this everywhere instead of creating new Settings()
settings = Settings()
