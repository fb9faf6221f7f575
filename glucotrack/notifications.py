from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

import requests

from glucotrack.analytics import classify_status
from glucotrack.config import MissingCredentialError, Settings, require_bot_token
from glucotrack.models import GlucoseStatus, Reading

logger = logging.getLogger(__name__)

STATUS_EMOJI = {
    GlucoseStatus.LOW: "⚠️ 📉",
    GlucoseStatus.NORMAL: "✅",
    GlucoseStatus.ELEVATED: "🩸",
    GlucoseStatus.HIGH: "⚠️ 📈",
}

TEST_MESSAGE = (
    "🔔 *GlucoTrack Connection Test*\n\n"
    "If you are reading this, your notifications are set up correctly! ✅"
)


def format_reading_message(reading: Reading) -> str:
    status = classify_status(reading.value, reading.type)
    return (
        f"*New Glucose Reading* {STATUS_EMOJI[status]}\n\n"
        f"*Level:* {reading.value} mg/dL\n"
        f"*Status:* {status.value}\n"
        f"*Type:* {reading.type.value}\n"
        f"*Time:* {reading.date} {reading.time}"
    )


class TelegramNotifier:
    """Best-effort delivery of reading alerts through the Telegram Bot API."""

    def __init__(
        self,
        bot_token: str,
        chat_id_lookup: Callable[[], Optional[str]],
        api_base: str = "https://api.telegram.org",
        timeout: float = 10.0,
    ) -> None:
        if not bot_token or not bot_token.strip():
            raise MissingCredentialError("A Telegram bot token is required to send notifications.")
        self._bot_token = bot_token.strip()
        self._chat_id_lookup = chat_id_lookup
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings, chat_id_lookup: Callable[[], Optional[str]]) -> "TelegramNotifier":
        return cls(
            require_bot_token(settings),
            chat_id_lookup,
            api_base=settings.telegram_api_base,
            timeout=settings.request_timeout,
        )

    @property
    def endpoint(self) -> str:
        return f"{self._api_base}/bot{self._bot_token}/sendMessage"

    def _post(self, chat_id: str, text: str) -> requests.Response:
        return requests.post(
            self.endpoint,
            json={"chat_id": chat_id, "text": text, "parse_mode": "Markdown"},
            timeout=self._timeout,
        )

    def notify_reading(self, reading: Reading) -> None:
        chat_id = self._chat_id_lookup()
        if not chat_id:
            return

        try:
            response = self._post(chat_id, format_reading_message(reading))
        except requests.RequestException as exc:
            logger.warning(
                "Failed to send Telegram notification",
                extra={"reading_id": reading.id, "chat_id": chat_id, "reason": str(exc)},
            )
            return

        if not response.ok:
            logger.warning(
                "Telegram rejected notification",
                extra={"reading_id": reading.id, "chat_id": chat_id, "status_code": response.status_code},
            )

    def notify_reading_in_background(self, reading: Reading) -> threading.Thread:
        worker = threading.Thread(
            target=self.notify_reading,
            args=(reading,),
            name=f"telegram-notify-{reading.id}",
            daemon=True,
        )
        worker.start()
        return worker

    def send_test_message(self, chat_id: str) -> bool:
        if not chat_id or not chat_id.strip():
            return False

        try:
            response = self._post(chat_id.strip(), TEST_MESSAGE)
        except requests.RequestException as exc:
            logger.warning("Telegram test message failed", extra={"chat_id": chat_id, "reason": str(exc)})
            return False
        return bool(response.ok)
