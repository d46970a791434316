# pricewatch/logger.py
import logging
import re

_BOT_TOKEN_RE = re.compile(r"bot\d+:[A-Za-z0-9_-]{20,}")

def setup_logger(debug=False):
    """Configure logger with optional debug mode"""
    level = logging.DEBUG if debug else logging.INFO
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    logging.basicConfig(
        level=level,
        format=log_format,
        handlers=[
            logging.StreamHandler()
        ],
        force=True
    )
    # httpx logs every request URL at INFO, and Bot API URLs embed the token
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return logging.getLogger("pricewatch")

def redact_sensitive(text: str) -> str:
    if not text:
        return text

    # Telegram Bot API URLs carry the token in the path
    text = _BOT_TOKEN_RE.sub("bot<REDACTED>", text)

    # Redact standalone tokens
    if len(text) in range(20, 100) and " " not in text:
        if text.isalnum() or '-' in text or '_' in text or ':' in text:
            return f"{text[:4]}...{text[-4:]}"

    # Redact tokens in key=value pairs
    sensitive_keys = ['token=', 'apikey=', 'password=', 'secret=']
    for key in sensitive_keys:
        if key in text.lower():
            start = text.lower().find(key) + len(key)
            text = text[:start] + 'REDACTED' + text[start+20:]
    return text

# Initialize with debug=False by default
logger = setup_logger()
