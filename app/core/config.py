# app/core/config.py
from __future__ import annotations

import os
from typing import Optional

from app.core.errors import ConfigError

DEFAULT_DATABASE_URL = "sqlite:///./fleet.db"
DEFAULT_ELORA_BASE_URL = "https://www.elora.com.au"
DEFAULT_REPORTS_TIMEZONE = "Australia/Sydney"


def _flag(name: str, default: str = "1") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def database_url() -> str:
    return os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL


def elora_api_key() -> str:
    """Elora API key; missing key is a configuration error (fail fast)."""
    key = os.getenv("ELORA_API_KEY")
    if not key:
        raise ConfigError("API key not configured")
    return key


def elora_base_url() -> str:
    return (os.getenv("ELORA_BASE_URL") or DEFAULT_ELORA_BASE_URL).rstrip("/")


def elora_timeout() -> float:
    return float(os.getenv("ELORA_TIMEOUT", "30"))


def service_role_key() -> Optional[str]:
    return os.getenv("SERVICE_ROLE_KEY") or None


def reports_api_url() -> str:
    url = os.getenv("REPORTS_API_URL")
    if not url:
        raise ConfigError("REPORTS_API_URL is not set")
    return url.rstrip("/")


def reports_timezone() -> str:
    return os.getenv("REPORTS_TIMEZONE") or DEFAULT_REPORTS_TIMEZONE


def mail_from_notifications() -> str:
    return os.getenv("MAIL_FROM_NOTIFICATIONS", "noreply@elora.com.au")


def mail_from_reports() -> str:
    return os.getenv("MAIL_FROM_REPORTS", "Elora Reports <reports@elora.com.au>")


def scheduler_enabled() -> bool:
    return _flag("ENABLE_SCHEDULER", "1")


def create_all_enabled() -> bool:
    return _flag("ENABLE_CREATE_ALL", "1")
