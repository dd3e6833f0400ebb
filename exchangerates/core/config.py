from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., DATA_DIR, PORT,
    DATASET_SOURCE, UPDATE_HOUR_UTC, LOG_LEVEL).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Exchange rate API"
    version: str = "1.0"
    debug: bool = False
    log_level: str = "info"
    log_json: bool = True

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 8000

    # Dataset cache (mount a volume here to survive restarts)
    data_dir: Path = Path("data")
    cache_enabled: bool = True
    cache_filename: str = "eurofxref-hist.xml"

    # Dataset source
    # Allowed: 'ecb-hist' (full history), 'ecb-hist-90d', 'ecb-daily'
    dataset_source: str = "ecb-hist"
    dataset_url: Optional[str] = None  # overrides the source's default URL
    http_timeout_seconds: float = 30.0
    http_retries: int = 2
    http_backoff_seconds: float = 1.0

    # Scheduled refresh; ECB publishes around 16:00 CET
    update_enabled: bool = True
    update_hour_utc: int = 15
    update_minute_utc: int = 30
    update_retry_seconds: float = 600.0
    update_max_retries: int = 5

    def init_post_load(self) -> None:
        """Validate cross-field constraints after loading."""
        from exchangerates.services.rates.providers import DATASET_SOURCE_URLS

        if self.dataset_source not in DATASET_SOURCE_URLS:
            raise ValueError(
                f"Unsupported dataset_source '{self.dataset_source}'. Allowed: {sorted(DATASET_SOURCE_URLS)}"
            )
        if not 0 <= self.update_hour_utc <= 23:
            raise ValueError("update_hour_utc must be within 0..23")
        if not 0 <= self.update_minute_utc <= 59:
            raise ValueError("update_minute_utc must be within 0..59")
        if self.http_retries < 0 or self.update_max_retries < 0:
            raise ValueError("retry counts must not be negative")

    @property
    def cache_path(self) -> Path:
        return self.data_dir / self.cache_filename


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
