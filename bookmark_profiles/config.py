"""
Configuration module for the bookmark profile export/import subsystem.

This module uses Pydantic Settings to load and validate environment variables
from a .env file. It provides type-safe, validated configuration with clear
error messages if values are invalid.

Architecture:
    - Each concern (database, transfer rules, environment metadata) has its own config class
    - All config classes inherit from BaseSettings for automatic env var loading
    - Nested configs are initialized in AppConfig.__init__ to ensure .env is loaded first
    - `get_settings()` provides lazy singleton access throughout the package

Usage:
    ```python
    from bookmark_profiles.config import get_settings

    settings = get_settings()
    db_url = settings.database.url
    max_name = settings.transfer.file_name_max_length
    browser = settings.environment.browser_name
    ```
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Load .env file from project root
project_root: Path = Path(__file__).parent.parent
env_path: Path = project_root / ".env"
if env_path.exists():
    load_dotenv(env_path)


class DatabaseConfig(BaseSettings):
    """
    Profile store database configuration.

    Attributes:
        url: SQLAlchemy connection string (SQLite by default)
        echo: Enable SQLAlchemy query logging (useful for debugging)
        pool_size: Connections kept in the pool (ignored for SQLite)
        max_overflow: Extra connections beyond pool_size (ignored for SQLite)
        pool_recycle: Seconds before a pooled connection is recycled
        pool_timeout: Seconds to wait for a pooled connection
    """

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_prefix="", case_sensitive=True, populate_by_name=True
    )

    url: str = Field(
        default="sqlite:///bookmark_profiles.db",
        alias="DATABASE_URL",
        description="SQLAlchemy connection string",
    )
    echo: bool = Field(default=False, alias="DATABASE_ECHO", description="SQLAlchemy echo mode")
    pool_size: int = Field(default=5, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(default=10, alias="DATABASE_MAX_OVERFLOW")
    pool_recycle: int = Field(default=3600, alias="DATABASE_POOL_RECYCLE")
    pool_timeout: int = Field(default=30, alias="DATABASE_POOL_TIMEOUT")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")


class TransferConfig(BaseSettings):
    """
    Rules applied to exported and imported artifacts.

    Environment variables are prefixed with "TRANSFER_", so:
    - TRANSFER_FILE_NAME_MAX_LENGTH maps to file_name_max_length
    - TRANSFER_EXTENSION maps to extension

    Attributes:
        file_name_max_length: Longest allowed artifact name after stripping
        forbidden_file_name_chars: Characters removed from artifact names
        extension: File extension of written artifacts
        encrypted_marker: Leading character of encrypted artifacts
        bookmark_id_length: Length of ids generated for imported bookmarks
        profile_id_length: Length of ids generated for imported profiles
        import_title_prefix: Prefix of the folder title that receives imported bookmarks
        title_time_format: strftime format of the timestamp in that title
    """

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_prefix="TRANSFER_", case_sensitive=False
    )

    file_name_max_length: int = Field(default=150, description="Maximum artifact name length")
    forbidden_file_name_chars: str = Field(default="<>:{}'\"/\\|?*")
    extension: str = Field(default="txt", description="Artifact file extension")
    encrypted_marker: str = Field(default="U", description="Leading character of encrypted artifacts")
    bookmark_id_length: int = Field(default=12)
    profile_id_length: int = Field(default=20)
    import_title_prefix: str = Field(default="Import")
    title_time_format: str = Field(default="%m/%d/%Y, %I:%M:%S %p")

    @field_validator("file_name_max_length", "bookmark_id_length", "profile_id_length")
    @classmethod
    def validate_positive_int(cls, v: int) -> int:
        """
        Validate that lengths are positive integers.

        Raises:
            ValueError: If value is not positive
        """
        if v <= 0:
            raise ValueError("Value must be a positive integer")
        return v

    @field_validator("encrypted_marker")
    @classmethod
    def validate_marker(cls, v: str) -> str:
        if len(v) != 1:
            raise ValueError("Encrypted marker must be a single character")
        return v

    @field_validator("extension")
    @classmethod
    def strip_extension_dot(cls, v: str) -> str:
        return v.lstrip(".") or "txt"


class EnvironmentConfig(BaseSettings):
    """
    Environment metadata stamped into every export's details block.

    Attributes:
        browser_name: Browser the extension runs in
        browser_version: Browser version string
        user_agent: Browser user agent string
        os_name: Operating system name
        os_platform: Operating system platform
        extension_version: Version of the bookmark manager itself
    """

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_prefix="ENV_", case_sensitive=False
    )

    browser_name: str = Field(default="unknown")
    browser_version: str = Field(default="unknown")
    user_agent: str = Field(default="unknown")
    os_name: str = Field(default="unknown")
    os_platform: str = Field(default="unknown")
    extension_version: str = Field(default="unknown")


class AppConfig(BaseSettings):
    """
    Main application configuration.

    Aggregates the domain-specific configurations into a single settings
    object. Each nested config reads its own environment variables; passing
    one in kwargs overrides it, which keeps tests free of env setup.

    Attributes:
        database: Profile store database configuration
        transfer: Artifact naming, format and import rules
        environment: Metadata copied into export details
    """

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_file=str(env_path) if env_path.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    database: DatabaseConfig
    transfer: TransferConfig
    environment: EnvironmentConfig

    def __init__(self, **kwargs: Any) -> None:
        if env_path.exists():
            load_dotenv(env_path)
        else:
            load_dotenv()

        if "database" not in kwargs:
            kwargs["database"] = DatabaseConfig()
        if "transfer" not in kwargs:
            kwargs["transfer"] = TransferConfig()
        if "environment" not in kwargs:
            kwargs["environment"] = EnvironmentConfig()

        super().__init__(**kwargs)


@lru_cache(maxsize=1)
def get_settings() -> AppConfig:
    """Return the process-wide settings instance, created on first use."""
    return AppConfig()
