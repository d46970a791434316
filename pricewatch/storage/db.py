# pricewatch/storage/db.py
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path

from pricewatch.logger import logger

SCHEMA_PATH = Path(__file__).parent / 'schema.sql'
DEFAULT_DB_PATH = 'data/prices.db'

class PriceDB:
    def __init__(self, db_path=DEFAULT_DB_PATH):
        self.db_path = str(db_path)
        self._ensure_data_dir()
        self._init_db()

    def _ensure_data_dir(self):
        """Create the data directory if needed"""
        directory = os.path.dirname(self.db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

    def _init_db(self):
        """Idempotent database initialization"""
        with self._get_conn() as conn:
            conn.execute("PRAGMA journal_mode = WAL")
            table_check = conn.execute("""
                SELECT count(*) FROM sqlite_master
                WHERE type='table' AND name='stock_prices'
            """).fetchone()[0]

            with open(SCHEMA_PATH) as f:
                conn.executescript(f.read())

            if table_check == 0:
                logger.info(f"Database tables created in {self.db_path}")
            else:
                logger.debug("Database already initialized")

    @contextmanager
    def _get_conn(self):
        """Get a database connection, committed on success and always closed"""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=10)
            conn.row_factory = sqlite3.Row
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Database operation failed on {self.db_path}: {e}")
            if conn:
                conn.rollback()
            raise
        finally:
            if conn:
                conn.close()
