from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Mapping, Optional

_DB_PATH_ENV = "GLUCOTRACK_DB_PATH"
_BOT_TOKEN_ENV = "TELEGRAM_BOT_TOKEN"
_API_BASE_ENV = "TELEGRAM_API_BASE"
_TIMEOUT_ENV = "TELEGRAM_TIMEOUT_SECONDS"
_LOG_LEVEL_ENV = "LOG_LEVEL"


class MissingCredentialError(RuntimeError):
    """Raised when the Telegram bot token has not been configured."""


@dataclass(frozen=True)
class Settings:
    db_path: Path
    telegram_bot_token: Optional[str]
    telegram_api_base: str
    request_timeout: float
    log_level: str


def _read_raw(name: str, secrets: Mapping[str, object] | None) -> Optional[str]:
    value = os.getenv(name)
    if value is None and secrets is not None:
        secret = secrets.get(name)
        value = None if secret is None else str(secret)
    if value is None:
        return None
    candidate = value.strip()
    return candidate or None


def _read_timeout(secrets: Mapping[str, object] | None, default: float) -> float:
    candidate = _read_raw(_TIMEOUT_ENV, secrets)
    if candidate is None:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def load_settings(secrets: Mapping[str, object] | None = None) -> Settings:
    """Build settings from environment variables, then the optional secrets mapping."""
    return Settings(
        db_path=Path(_read_raw(_DB_PATH_ENV, secrets) or "data/glucotrack.db"),
        telegram_bot_token=_read_raw(_BOT_TOKEN_ENV, secrets),
        telegram_api_base=(_read_raw(_API_BASE_ENV, secrets) or "https://api.telegram.org").rstrip("/"),
        request_timeout=_read_timeout(secrets, 10.0),
        log_level=(_read_raw(_LOG_LEVEL_ENV, secrets) or "INFO").upper(),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()


def require_bot_token(settings: Settings) -> str:
    if not settings.telegram_bot_token:
        raise MissingCredentialError(
            f"Telegram notifications need a bot token; set {_BOT_TOKEN_ENV} in the environment or Streamlit secrets."
        )
    return settings.telegram_bot_token
