"""
Application configuration management.
"""
from pathlib import Path
from typing import Dict

from pydantic_settings import BaseSettings


PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    """Gateway settings."""

    # Listening address
    HOST: str = "127.0.0.1"
    PORT: int = 3000

    # Monitoring backends
    TRANSLATOR_URL: str = "http://127.0.0.1:9092"
    JDC_URL: str = "http://127.0.0.1:9091"

    # Application
    NO_OPEN: bool = False
    LOG_LEVEL: str = "INFO"
    ASSETS_DIR: str = ""

    # Outbound HTTP (seconds)
    PROXY_TIMEOUT: float = 5.0
    CHECK_TIMEOUT: float = 5.0

    # Outbound connection pool
    PROXY_MAX_CONNECTIONS: int = 100
    PROXY_MAX_KEEPALIVE: int = 20

    class Config:
        env_file = ".env"
        env_prefix = "SV2_UI_"
        extra = "ignore"

    def backend_urls(self) -> Dict[str, str]:
        """Get the route prefix to base URL mapping, in registration order."""
        return {
            "translator": self.TRANSLATOR_URL,
            "jdc": self.JDC_URL,
        }

    @property
    def assets_path(self) -> Path:
        """Directory holding the built UI bundle."""
        if self.ASSETS_DIR:
            return Path(self.ASSETS_DIR)
        return PACKAGE_DIR / "dist"


# Global settings instance
settings = Settings()
