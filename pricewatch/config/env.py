# pricewatch/config/env.py
import os
from dotenv import load_dotenv
from pricewatch.storage.db import DEFAULT_DB_PATH

load_dotenv()

def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")

TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN", "")
DB_PATH = os.getenv("PRICEWATCH_DB_PATH", DEFAULT_DB_PATH)
DEBUG = _env_flag("PRICEWATCH_DEBUG")
