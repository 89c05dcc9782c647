from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Engine constants, owned by the deployment rather than the caller
    automated_cost_per_invoice: float = 0.20
    error_rate_auto: float = 0.001
    roi_boost_factor: float = 1.10

    # Simulated latency for the loading indicators
    calculation_delay_seconds: float = 0.5
    report_delay_seconds: float = 1.5

    cors_origins: list[str] = ["http://localhost:8080", "http://localhost:3000"]
    log_level: str = "INFO"

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, overridable in tests via dependency_overrides."""
    return Settings()
