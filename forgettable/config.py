"""
Configuration management for forgettable.

Provides centralized configuration for:
- Store connection (Redis)
- Decay parameters
"""

from pathlib import Path

from pydantic import BaseModel, Field


# Time multiplier between the primary and secondary set of a delta
NORM_TIME_MULT = 2

# Members whose decayed score falls below this are removed
SCRUB_THRESHOLD = 0.0001


class StoreConfig(BaseModel):
    """Configuration for the Redis store connection."""

    host: str = Field(
        default="localhost",
        description="Redis server hostname",
    )
    port: int = Field(
        default=6379,
        description="Redis server port",
        ge=1,
        le=65535,
    )
    password: str | None = Field(
        default=None,
        description="Redis password (None for no AUTH)",
    )
    db: int = Field(
        default=0,
        description="Redis logical database index",
        ge=0,
    )

    # Pool settings
    max_connections: int | None = Field(
        default=None,
        description="Maximum number of pooled connections (None for unbounded)",
        ge=1,
    )
    health_check_interval_seconds: int = Field(
        default=30,
        description="Ping borrowed connections idle for longer than this (0 disables)",
        ge=0,
    )
    socket_timeout_seconds: float | None = Field(
        default=None,
        description="Socket timeout for store commands (None blocks)",
    )

    def to_url(self) -> str:
        """Build a redis:// URL for this configuration."""
        auth = f":{self.password}@" if self.password else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"


class DecayConfig(BaseModel):
    """Configuration for counter decay behavior."""

    scrub_threshold: float = Field(
        default=SCRUB_THRESHOLD,
        description="Scores below this are scrubbed after a decay pass",
        gt=0.0,
    )
    norm_time_mult: int = Field(
        default=NORM_TIME_MULT,
        description="Secondary lifetime multiplier (also names the secondary set)",
        ge=1,
    )


class ForgettableConfig(BaseModel):
    """Master configuration for forgettable."""

    store: StoreConfig = Field(default_factory=StoreConfig)
    decay: DecayConfig = Field(default_factory=DecayConfig)

    debug: bool = Field(
        default=False,
        description="Enable debug logging",
    )

    @classmethod
    def from_file(cls, path: Path) -> "ForgettableConfig":
        """Load configuration from a JSON file."""
        import json

        if path.suffix == ".json":
            with open(path) as f:
                data = json.load(f)
            return cls.model_validate(data)
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")

    def to_file(self, path: Path) -> None:
        """Save configuration to a JSON file."""
        import json

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2, default=str)
