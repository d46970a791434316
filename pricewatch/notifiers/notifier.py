# pricewatch/notifiers/notifier.py
from abc import ABC, abstractmethod

class Notifier(ABC):
    @abstractmethod
    async def send(self, destination: int, text: str) -> None:
        """Deliver text to destination or raise SendError"""
        pass

    async def close(self) -> None:
        pass
