import logging
import os
import sys
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource
from typing_extensions import Self


# =============================================================================
# Application Configuration
# =============================================================================


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from YAML file specified by TESSERA_CONFIG_FILE env var."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Get the value for a field from the YAML config."""
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all settings from YAML file."""
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load config from YAML file if specified."""
        config_file = os.environ.get("TESSERA_CONFIG_FILE")
        if config_file:
            path = Path(config_file)
            if path.exists():
                return yaml.safe_load(path.read_text()) or {}
        return {}


class Server(BaseModel):
    """Server configuration (nested in Config, uses env_nested_delimiter)."""

    name: str = "Tessera"
    version: str = "0.1.0"
    description: str = "Passwordless sessions and conditional responses"
    base_url: str = "http://localhost:8000"  # Used to build links in outgoing mail


class DatabaseConfig(BaseModel):
    """Database configuration (nested in Config, uses env_nested_delimiter)."""

    url: str = "sqlite+aiosqlite:///./tessera.db"
    echo: bool = False
    auto_migrate: bool = True  # Create tables at startup for SQLite, manual for PostgreSQL

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")


class LoggingConfig(BaseModel):
    """Logging configuration (nested in Config, uses env_nested_delimiter)."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Get log file path from TESSERA_LOG_FILE env var."""
        return os.environ.get("TESSERA_LOG_FILE")


# =============================================================================
# Authentication Configuration
# =============================================================================


class JwtConfig(BaseModel):
    """Signing configuration shared by link tokens and session cookies."""

    secret: str = ""  # Must be set in production
    algorithm: str = "HS256"


class MagicLinkConfig(BaseModel):
    """Magic-link issuance settings."""

    expire_minutes: int = 15
    rate_limit_requests: int = 10
    rate_limit_window_minutes: int = 15


class EmailVerificationConfig(BaseModel):
    expire_hours: int = 24


class SessionConfig(BaseModel):
    """Session cookie settings."""

    cookie_name: str = "session_token"
    secure: bool = True  # Disable only for plain-HTTP local development
    max_age_days: int = 30


class AuthConfig(BaseModel):
    """Authentication configuration."""

    jwt: JwtConfig = JwtConfig()
    magic_link: MagicLinkConfig = MagicLinkConfig()
    email_verification: EmailVerificationConfig = EmailVerificationConfig()
    session: SessionConfig = SessionConfig()


class MailConfig(BaseModel):
    """Outgoing mail configuration.

    backend "log" writes messages to the log (development); "http" posts them
    as JSON to `http_url` (a relay such as a transactional mail API).
    """

    backend: Literal["log", "http"] = "log"
    http_url: str = ""
    sender: str = "Tessera <noreply@localhost>"
    queue_size: int = 1000


class CacheConfig(BaseModel):
    fragment_max_entries: int = 10_000


class Config(BaseSettings):
    # These are BaseModel, so env_nested_delimiter handles their env vars
    server: Server = Server()
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    auth: AuthConfig = AuthConfig()
    mail: MailConfig = MailConfig()
    cache: CacheConfig = CacheConfig()

    model_config = {
        "env_prefix": "TESSERA_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # Allows TESSERA_AUTH__JWT__SECRET override
    }

    @model_validator(mode="after")
    def check_mail_backend(self) -> Self:
        """The http mail backend needs somewhere to post to."""
        if self.mail.backend == "http" and not self.mail.http_url:
            raise ValueError("mail.http_url is required when mail.backend is 'http'")
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML config.

        Priority (highest to lowest):
        1. init_settings - values passed to Config()
        2. env_settings - environment variables
        3. dotenv_settings - .env file
        4. yaml_settings - TESSERA_CONFIG_FILE yaml
        5. file_secret_settings - secrets from files
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging based on config.

    Should be called early in application startup, before other modules
    are imported to ensure all loggers pick up the configuration.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(config.format, datefmt=config.date_format)

    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(config.level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(config.level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
