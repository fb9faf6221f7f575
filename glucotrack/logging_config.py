import logging
from logging.config import dictConfig

from glucotrack.config import get_settings

CONTEXT_KEYS = ("reading_id", "chat_id", "status_code", "reason")

_configured = False


class ContextualFormatter(logging.Formatter):
    """Appends any known `extra` fields as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = [f"{key}={getattr(record, key)}" for key in CONTEXT_KEYS if getattr(record, key, None) is not None]
        if not context:
            return message
        return f"{message} | {' '.join(context)}"


def configure_logging(level: str | int | None = None) -> None:
    global _configured
    if _configured:
        return

    log_level = level or get_settings().log_level
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "contextual": {
                    "()": ContextualFormatter,
                    "fmt": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                }
            },
            "handlers": {"default": {"class": "logging.StreamHandler", "formatter": "contextual"}},
            "root": {"handlers": ["default"], "level": log_level},
        }
    )
    _configured = True
