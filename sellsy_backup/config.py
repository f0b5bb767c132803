"""Configuration management from environment variables."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

TRUTHY = ("true", "1", "yes")


def _as_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in TRUTHY


@dataclass
class Config:
    """Application configuration.

    Built once at startup (see `from_env`) and handed to every component.
    """

    # Sellsy
    API_URL: str = "https://api.sellsy.com"
    LOGIN_URL: str = "https://login.sellsy.com"
    CLIENT_ID: Optional[str] = None
    CLIENT_SECRET: Optional[str] = None

    # Storage
    LOCAL_PATH: Path = field(default_factory=lambda: Path("data"))
    MAXIMUM_HOLD_IN_DAYS: int = 30
    KEEP_SNAPSHOTS: bool = False

    # Scheduling
    IS_SCHEDULED: bool = False
    SCHEDULE_PATTERN: str = "0 3 * * *"

    # Fetching
    PAGE_LIMIT: int = 100
    MAX_PAGES: int = 10_000
    DOWNLOAD_CONCURRENCY: int = 5
    MAX_REDIRECTS: int = 10
    TIMEOUT: float = 30.0

    # Logging
    LOG_LEVEL: str = "INFO"

    @property
    def backups_dir(self) -> Path:
        return self.LOCAL_PATH / "backups"

    @property
    def invoices_dir(self) -> Path:
        return self.LOCAL_PATH / "invoices"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """Build a configuration from the process environment (and `.env`)."""
        if environ is None:
            load_dotenv()
            environ = os.environ
        get = environ.get
        defaults = cls()
        errors = []

        def number(name: str, convert=int):
            raw = get(name)
            if raw is None:
                return getattr(defaults, name)
            try:
                return convert(raw)
            except ValueError:
                errors.append(f"{name} must be a number, got {raw!r}")
                return getattr(defaults, name)

        config = cls(
            API_URL=get("SELLSY_API_URL", defaults.API_URL).rstrip("/"),
            LOGIN_URL=get("SELLSY_LOGIN_URL", defaults.LOGIN_URL).rstrip("/"),
            CLIENT_ID=get("SELLSY_CLIENT_ID"),
            CLIENT_SECRET=get("SELLSY_CLIENT_SECRET"),
            LOCAL_PATH=Path(get("LOCAL_PATH", str(defaults.LOCAL_PATH))),
            MAXIMUM_HOLD_IN_DAYS=number("MAXIMUM_HOLD_IN_DAYS"),
            KEEP_SNAPSHOTS=_as_bool(get("KEEP_SNAPSHOTS")),
            IS_SCHEDULED=_as_bool(get("IS_SCHEDULED")),
            SCHEDULE_PATTERN=get("SCHEDULE_PATTERN", defaults.SCHEDULE_PATTERN),
            PAGE_LIMIT=number("PAGE_LIMIT"),
            MAX_PAGES=number("MAX_PAGES"),
            DOWNLOAD_CONCURRENCY=number("DOWNLOAD_CONCURRENCY"),
            MAX_REDIRECTS=number("MAX_REDIRECTS"),
            TIMEOUT=number("TIMEOUT", float),
            LOG_LEVEL=get("LOG_LEVEL", defaults.LOG_LEVEL),
        )
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")
        return config

    def validate(self) -> None:
        """Validate required configuration."""
        errors = []
        if not self.CLIENT_ID:
            errors.append("SELLSY_CLIENT_ID is required")
        if not self.CLIENT_SECRET:
            errors.append("SELLSY_CLIENT_SECRET is required")
        if self.MAXIMUM_HOLD_IN_DAYS < 0:
            errors.append("MAXIMUM_HOLD_IN_DAYS must be >= 0")
        for name in ("PAGE_LIMIT", "MAX_PAGES", "DOWNLOAD_CONCURRENCY", "MAX_REDIRECTS", "TIMEOUT"):
            if getattr(self, name) <= 0:
                errors.append(f"{name} must be > 0")
        if self.IS_SCHEDULED and not self.SCHEDULE_PATTERN.strip():
            errors.append("SCHEDULE_PATTERN is required when IS_SCHEDULED is true")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")
