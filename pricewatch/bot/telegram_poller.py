# pricewatch/bot/telegram_poller.py
import asyncio
from typing import Set

import httpx

from pricewatch.config.settings import TELEGRAM_POLL_TIMEOUT_SECONDS
from pricewatch.errors import SendError
from pricewatch.logger import logger, redact_sensitive
from pricewatch.notifiers.telegram_notifier import TelegramNotifier
from .commands import CommandHandler


class TelegramPoller:
    """Long-polls getUpdates and answers every message in its own task"""

    def __init__(self, client: TelegramNotifier, handler: CommandHandler,
                 poll_timeout: int = TELEGRAM_POLL_TIMEOUT_SECONDS, retry_delay: float = 5.0):
        self.client = client
        self.handler = handler
        self.poll_timeout = poll_timeout
        self.retry_delay = retry_delay
        self.offset = 0
        self._tasks: Set[asyncio.Task] = set()

    def start(self) -> asyncio.Task:
        return asyncio.create_task(self.run(), name="telegram-poller")

    async def run(self):
        logger.info("[Telegram] Polling for messages")
        while True:
            try:
                await self.poll_once()
            except httpx.HTTPError as e:
                logger.warning(redact_sensitive(f"[Telegram] getUpdates failed: {e}"))
                await asyncio.sleep(self.retry_delay)
            except Exception:
                logger.exception("[Telegram] Unexpected polling error")
                await asyncio.sleep(self.retry_delay)

    async def poll_once(self) -> int:
        """Fetch one batch of updates and dispatch them, returns how many messages were dispatched"""
        data = await self.client.call(
            "getUpdates",
            {"offset": self.offset, "timeout": self.poll_timeout, "allowed_updates": ["message"]},
            timeout=self.poll_timeout + 10,
        )
        if not data.get("ok"):
            logger.warning(f"[Telegram] getUpdates refused: {data.get('description')}")
            await asyncio.sleep(self.retry_delay)
            return 0

        dispatched = 0
        for update in data.get("result", []):
            self.offset = max(self.offset, update.get("update_id", 0) + 1)
            message = update.get("message") or {}
            text = message.get("text")
            chat_id = (message.get("chat") or {}).get("id")
            if text is None or chat_id is None:
                continue
            task = asyncio.create_task(self._answer(chat_id, text))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            dispatched += 1
        return dispatched

    async def _answer(self, chat_id: int, text: str):
        try:
            reply = await self.handler.handle(chat_id, text)
            await self.client.send(chat_id, reply)
        except SendError as e:
            logger.error(f"[Telegram] Reply to {chat_id} failed: {e}")
        except Exception:
            logger.exception(f"[Telegram] Handling message from {chat_id} failed")

    async def drain(self):
        """Wait for replies that are still in flight"""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
