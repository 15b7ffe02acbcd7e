"""Configuration settings for the resilient SQL access layer."""

from typing import FrozenSet, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..database.models import ConnectionConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database Configuration
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=3306)
    db_name: str = Field(default="resilient_sql_db")
    db_user: str = Field(default="root")
    db_password: str = Field(default="")
    db_charset: str = Field(default="utf8mb4")
    db_collation: Optional[str] = Field(default=None)
    db_connect_timeout: int = Field(default=10)

    # Comma-separated hosts that may receive INSERT/UPDATE/DELETE; empty allows any
    db_allowed_write_hosts: str = Field(default="")

    # Application Configuration
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # CLI Configuration
    default_output_format: str = Field(default="table")

    @property
    def write_hosts(self) -> FrozenSet[str]:
        """Parsed write-host allowlist."""
        return frozenset(h.strip() for h in self.db_allowed_write_hosts.split(",") if h.strip())

    def connection_config(self) -> ConnectionConfig:
        """Build the immutable connection parameters."""
        return ConnectionConfig(
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
            user=self.db_user,
            password=self.db_password,
            charset=self.db_charset,
            collation=self.db_collation,
            connect_timeout=self.db_connect_timeout,
        )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
