"""
Configuration for the Pickup Schedule Service
=============================================
Main application runtime settings loaded from ``PICKUP_*`` environment
variables. Sets up the logging configuration as well.
"""

import os
from contextlib import suppress
from dataclasses import dataclass, field, fields
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_DEFAULT_SECRET_KEY = "PickupDevSecretKey"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer.") from None


@dataclass
class AppConfig:
    """Runtime configuration loaded from environment variables."""

    environment: str = field(default_factory=lambda: os.getenv("PICKUP_ENV", "development"))
    secret_key: str = field(default_factory=lambda: os.getenv("PICKUP_SECRET_KEY", _DEFAULT_SECRET_KEY))
    database_path: str = field(default_factory=lambda: os.getenv("PICKUP_DATABASE_PATH", "database/pickup.db"))

    # Calendar used to decide what "today" is when a bulk request has no date
    timezone: str = field(default_factory=lambda: os.getenv("PICKUP_TIMEZONE", "Europe/Berlin"))
    bulk_max_students: int = field(default_factory=lambda: _env_int("PICKUP_BULK_MAX_STUDENTS", 500))

    debug: bool = field(default_factory=lambda: _env_bool("PICKUP_DEBUG", False))
    log_level: str = field(default_factory=lambda: os.getenv("PICKUP_LOG_LEVEL", "INFO"))
    log_file: str = field(default_factory=lambda: os.getenv("PICKUP_LOG_FILE", ""))
    audit_log_path: str = field(default_factory=lambda: os.getenv("PICKUP_AUDIT_LOG_PATH", ""))

    # Server
    host: str = field(default_factory=lambda: os.getenv("PICKUP_HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: _env_int("PICKUP_PORT", 8080))

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.validate()

    def validate(self) -> None:
        # SECURITY: Fail fast if using default secret key in production
        if self.environment == "production" and self.secret_key == _DEFAULT_SECRET_KEY:
            raise RuntimeError(
                "SECURITY ERROR: Cannot use default secret key in production!\n"
                "Set PICKUP_SECRET_KEY environment variable to a secure random value.\n"
                'Generate one with: python -c "import secrets; print(secrets.token_hex(32))"'
            )
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"PICKUP_TIMEZONE {self.timezone!r} is not a known timezone.") from None
        if self.bulk_max_students <= 0:
            raise ValueError("PICKUP_BULK_MAX_STUDENTS must be positive.")

    def apply_overrides(self, overrides: dict[str, Any]) -> None:
        """Set fields by name (case-insensitive), then re-validate.

        Raises:
            ValueError: A key does not name a configuration field
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(key for key in overrides if key.lower() not in known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        for key, value in overrides.items():
            setattr(self, key.lower(), value)
        self.validate()

    def as_flask_config(self) -> dict[str, Any]:
        """Render configuration values for Flask application."""
        if not self.secret_key:
            raise RuntimeError(
                "Missing PICKUP_SECRET_KEY environment variable. "
                "Production systems must set an explicit secret key."
            )

        return {
            "ENV": self.environment,
            "SECRET_KEY": self.secret_key,
            "DATABASE_PATH": self.database_path,
            "PICKUP_TIMEZONE": self.timezone,
            "BULK_MAX_STUDENTS": self.bulk_max_students,
            "DEBUG": self.debug,
        }


def setup_logging(debug: bool = False, log_file: str | None = None, level: str = "INFO") -> None:
    """Setup logging configuration. ``debug`` overrides ``level``."""
    import logging
    import sys
    from logging.handlers import RotatingFileHandler

    log_level = logging.DEBUG if debug else logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    # Root logger
    root = logging.getLogger()
    root.setLevel(log_level)

    # Keep existing handlers but avoid adding duplicates when create_app is called multiple times
    has_console = any(getattr(h, "name", "") == "pickup_console" for h in root.handlers)
    has_file = any(getattr(h, "name", "") == "pickup_file" for h in root.handlers)
    added_handler = False

    stream = sys.stdout
    with suppress(AttributeError, ValueError):
        stream.reconfigure(encoding="utf-8", errors="replace")
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if not has_console:
        console_handler = logging.StreamHandler(stream=stream)
        console_handler.name = "pickup_console"
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)
        added_handler = True

    if log_file and not has_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.name = "pickup_file"
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        added_handler = True

    # Ensure handler levels follow the desired log level
    for handler in root.handlers:
        if getattr(handler, "name", "") in {"pickup_console", "pickup_file"}:
            handler.setLevel(log_level)

    if added_handler:
        root.info("Logging initialized at level: %s", logging.getLevelName(log_level))

    if _env_bool("PICKUP_SILENCE_WERKZEUG", True):
        logging.getLogger("werkzeug").setLevel(logging.WARNING)


def load_config() -> AppConfig:
    """Helper for callers to load and validate configuration."""
    return AppConfig()
