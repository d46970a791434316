# pricewatch/notifiers/telegram_notifier.py
"""
Telegram Bot API notifier.

Setup:
1. Create a bot via @BotFather and copy its token
2. Add to .env:
   TELEGRAM_BOT_TOKEN=your_bot_token
"""
from typing import Optional

import httpx

from pricewatch.config.settings import TELEGRAM_API_URL
from pricewatch.errors import SendError
from pricewatch.logger import logger, redact_sensitive
from pricewatch.models import SendErrorKind
from .notifier import Notifier


def classify_refusal(code: Optional[int], description: str) -> SendErrorKind:
    """Bot API 400 covers both unknown chats and text it cannot parse"""
    if code == 403 or (code == 400 and "chat" in description.lower()):
        return SendErrorKind.INVALID_DESTINATION
    if code == 400:
        return SendErrorKind.MALFORMED_MESSAGE
    return SendErrorKind.TRANSPORT


class TelegramNotifier(Notifier):
    def __init__(self, bot_token: str, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        if not bot_token:
            raise ValueError("Telegram bot token is required")
        self.base_url = f"{TELEGRAM_API_URL}/bot{bot_token}"
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def call(self, method: str, payload: dict, timeout: Optional[float] = None) -> dict:
        """POST a Bot API method and return its decoded JSON body"""
        kwargs = {"json": payload}
        if timeout is not None:
            kwargs["timeout"] = timeout
        response = await self._client.post(f"{self.base_url}/{method}", **kwargs)
        try:
            return response.json()
        except ValueError:
            return {"ok": False, "error_code": response.status_code, "description": response.text[:200]}

    async def send(self, destination: int, text: str) -> None:
        payload = {
            "chat_id": destination,
            "text": text,
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }
        try:
            data = await self.call("sendMessage", payload)
        except httpx.HTTPError as e:
            raise SendError(SendErrorKind.TRANSPORT, redact_sensitive(f"sendMessage to {destination} failed: {e}")) from e

        if data.get("ok"):
            logger.debug(f"[Telegram] Message delivered to {destination}")
            return

        code = data.get("error_code")
        description = data.get("description", "unknown error")
        kind = classify_refusal(code, str(description))
        raise SendError(kind, f"Telegram refused message to {destination}: {code} {description}")

    async def close(self) -> None:
        await self._client.aclose()
