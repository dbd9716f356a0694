"""Configuration management for the HR payroll service."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment."""

    database_url: str
    host: str
    port: int
    debug: bool
    log_level: str
    payment_currency: str
    company_name: str
    company_address: str
    api_base_url: str
    api_token: str | None
    http_timeout: float

    @property
    def HOST(self) -> str:
        """Alias for host."""
        return self.host

    @property
    def PORT(self) -> int:
        """Alias for port."""
        return self.port

    @property
    def DEBUG(self) -> bool:
        """Alias for debug."""
        return self.debug

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        return cls(
            database_url=os.getenv(
                "DATABASE_URL",
                "sqlite+aiosqlite:///./hr_payroll.db",
            ),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            payment_currency=os.getenv("PAYMENT_CURRENCY", "INR"),
            company_name=os.getenv("COMPANY_NAME", "Paarsiv Technologies"),
            company_address=os.getenv("COMPANY_ADDRESS", ""),
            api_base_url=os.getenv("API_BASE_URL", "http://localhost:8000/api/v1"),
            api_token=os.getenv("API_TOKEN") or None,
            http_timeout=float(os.getenv("HTTP_TIMEOUT", "30")),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
