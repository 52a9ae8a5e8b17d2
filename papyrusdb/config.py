"""Configuration settings for PapyrusDB."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Shared secret gating the whole API
    server_key: str  # Required - no default for security

    # Storage
    db_type: str = "json"  # Only "json" is implemented
    db_dir: str = "papyrusdb"
    db_file: str = "papyrus-data.json"

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    # App
    debug: bool = False
    log_level: str = "INFO"
    # CORS: the Papyrus client runs on another origin, so this is on by default
    cors: bool = True
    cors_origins: list[str] = ["*"]

    # Rate limiting
    rate_limit: str = "300/minute"
    rate_limit_enabled: bool = True

    class Config:
        env_prefix = "PAPYRUS_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra env vars not in model

    @property
    def db_path(self) -> Path:
        """Full path of the JSON store file."""
        return Path(self.db_dir) / self.db_file

    def masked_key(self) -> str:
        """Server key with everything but a short prefix hidden, for logs."""
        return f"{self.server_key[:4]}{'*' * 8}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
