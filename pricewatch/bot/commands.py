# pricewatch/bot/commands.py
from decimal import Decimal, InvalidOperation
from html import escape

from pricewatch.alerts.registry import TargetAlertRegistry
from pricewatch.errors import FetchError, RequestError
from pricewatch.logger import logger
from pricewatch.models import RequestErrorKind
from pricewatch.price_services.price_service import PriceService
from pricewatch.symbols.catalog import list_symbols, lookup

HELP_TEXT = (
    "Привет! Введите тикер акции (например, LKOH или AEROFLOT) для запроса цены.\n"
    "Чтобы установить оповещение, отправьте сообщение в формате: ТИКЕР ЦЕНА\n"
    "Например: LKOH 7100.0\n"
    "Чтобы получить список доступных тикеров, нажмите кнопку /list"
)
FORMAT_HINT = "Неизвестный формат сообщения. Попробуйте ввести тикер или 'ТИКЕР ЦЕНА'."


def parse_target(text: str) -> Decimal:
    try:
        target = Decimal(text.replace(",", "."))
    except InvalidOperation as e:
        raise RequestError(RequestErrorKind.INVALID_PRICE, "Неверный формат цены. Попробуйте еще раз.") from e
    if not target.is_finite() or target <= 0:
        raise RequestError(RequestErrorKind.INVALID_PRICE, "Неверный формат цены. Попробуйте еще раз.")
    return target


class CommandHandler:
    """Turns one inbound chat message into one reply text (Telegram HTML)"""

    def __init__(self, source: PriceService, registry: TargetAlertRegistry):
        self.source = source
        self.registry = registry

    async def handle(self, chat_id: int, text: str) -> str:
        text = (text or "").strip()
        if text.startswith("/"):
            return self._command(text)

        tokens = text.split()
        try:
            if len(tokens) == 2:
                return await self._create_alert(chat_id, tokens[0], tokens[1])
            if len(tokens) == 1:
                return await self._quote(tokens[0])
        except RequestError as e:
            logger.info(f"[Bot] Rejected {text!r} from {chat_id}: {e.kind.value}")
            return escape(str(e))
        except FetchError as e:
            logger.warning(f"[Bot] Fetch for {text!r} failed: {e}")
            return f"Ошибка получения данных для {escape(tokens[0].upper())}: {escape(str(e))}"
        return FORMAT_HINT

    def _command(self, text: str) -> str:
        # "/list@SomeBot" is how commands arrive in group chats
        command = text.split()[0][1:].split("@")[0].lower()
        if command == "start":
            return HELP_TEXT
        if command == "list":
            lines = ["Доступные тикеры:"]
            lines += [f"<b>{escape(s.ticker)}</b> – {escape(s.name)}" for s in list_symbols()]
            return "\n".join(lines)
        return "Неизвестная команда."

    async def _quote(self, ticker: str) -> str:
        quote = await self.source.fetch(lookup(ticker))
        return f"Название: {escape(quote.name)}\nАктуальная цена: {quote.price:.2f}"

    async def _create_alert(self, chat_id: int, ticker: str, price_text: str) -> str:
        target = parse_target(price_text)
        alert = await self.registry.submit(ticker, target, chat_id)
        name = lookup(alert.symbol).name
        return (
            f"Оповещение установлено для {escape(name)}: когда цена достигнет {alert.target_price:.2f}, "
            f"вы получите уведомление."
        )
