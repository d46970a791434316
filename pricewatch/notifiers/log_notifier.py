# pricewatch/notifiers/log_notifier.py
from pricewatch.logger import logger
from .notifier import Notifier

class LogNotifier(Notifier):
    """Dry-run notifier: every message ends up in the log only"""

    async def send(self, destination: int, text: str) -> None:
        logger.info(f"[DRY RUN] Message to {destination}: {text}")
