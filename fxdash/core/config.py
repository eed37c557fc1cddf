from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG, DATA_DIR,
    EXCHANGE_RATES_API_KEY, RATES_MAX_AGE_SECONDS).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "FX Dashboard"
    debug: bool = True
    version: str = "0.1.0"

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "fxdash.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided

    # Upstream exchange rate provider
    exchange_rates_api_key: Optional[str] = Field(default=None, repr=False)
    exchange_rates_api_url: str = "http://api.exchangeratesapi.io/v1"
    http_timeout_seconds: float = 10.0

    # Rate synchronization
    rates_max_age_seconds: int = 86400  # 24 hours
    default_base_currency: str = "EUR"
    history_days: int = 7
    history_base_currency: str = "EUR"

    # Client-side cache in front of the /exchange-rates endpoint
    client_cache_ttl_seconds: int = 86400
    dashboard_api_url: str = "http://localhost:8000"

    # External ledger (exchange_currency / transfer_money remote procedures)
    ledger_rpc_url: Optional[str] = None
    ledger_api_key: Optional[str] = Field(default=None, repr=False)

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        self.db_path = Path(self.db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.default_base_currency = self.default_base_currency.strip().upper()
        self.history_base_currency = self.history_base_currency.strip().upper()
        if self.rates_max_age_seconds <= 0:
            raise ValueError("rates_max_age_seconds must be positive")
        if self.client_cache_ttl_seconds <= 0:
            raise ValueError("client_cache_ttl_seconds must be positive")
        if self.history_days < 1:
            raise ValueError("history_days must be at least 1")


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
