"""Application settings loaded from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Calculator configuration from EVVAT_* environment variables."""

    default_base_price: float = 500_000
    default_year: int = 2026
    animation_duration_ms: int = 500
    frame_interval_ms: int = 16
    log_level: str = "INFO"

    @property
    def animation_duration(self) -> float:
        """Counter animation length in seconds."""
        return self.animation_duration_ms / 1000

    @property
    def frame_interval(self) -> float:
        return self.frame_interval_ms / 1000

    model_config = {"env_prefix": "EVVAT_", "env_file": ".env", "extra": "ignore"}


settings = Settings()
