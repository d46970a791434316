# pricewatch/config/settings.py

# Scraper settings
INVESTING_BASE_URL = "https://ru.investing.com"
PRICE_SELECTOR = 'div[data-test="instrument-price-last"]'
NAME_SELECTOR = "h1"

USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/112.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Ubuntu; Linux x86_64; rv:94.0) Gecko/20100101 Firefox/94.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/14.0.3 Safari/605.1.15",
]
REFERERS = [
    "https://ru.investing.com/",
    "https://www.google.com/",
    "https://yandex.ru/",
]
BASE_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "ru-RU,ru;q=0.9,en-US;q=0.8,en;q=0.7",
    "Origin": INVESTING_BASE_URL,
    "Upgrade-Insecure-Requests": "1",
}

# Telegram Bot API
TELEGRAM_API_URL = "https://api.telegram.org"
TELEGRAM_POLL_TIMEOUT_SECONDS = 60
