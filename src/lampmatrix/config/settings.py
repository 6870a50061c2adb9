"""
Application settings using Pydantic.

Settings are loaded from environment variables with .env file support.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="YEELIGHT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Lamp address, host:port
    addr: str = ""

    # HTTP listen address; setting it switches to HTTP mode
    http: str = ""

    # Folder with <name>.txt scripts
    scripts: Path = Path("./scripts")

    debug: bool = False
    mock: bool = False

    # Device link
    connect_timeout: float = Field(default=3.0, gt=0)
    response_timeout: float = Field(default=0.5, gt=0)
    smooth: int = Field(default=200, ge=30)  # ms, lamp minimum is 30

    # Playback defaults
    default_interval_ms: int = Field(default=500, ge=0)

    @property
    def http_mode(self) -> bool:
        """Check if HTTP mode was requested via environment."""
        return bool(self.http)

    def http_host_port(self, default_port: int = 3048) -> tuple[str, int]:
        """Split `[host]:port` into a bindable host and port."""
        address = self.http or f":{default_port}"
        host, _, port = address.rpartition(":")
        return host or "0.0.0.0", int(port) if port else default_port


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
