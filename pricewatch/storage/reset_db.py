# pricewatch/storage/reset_db.py
import argparse
import sqlite3
import sys
from pathlib import Path

from pricewatch.config.env import DB_PATH
from pricewatch.config.manager import ConfigManager
from pricewatch.logger import logger
from .db import PriceDB

def reset_database(db_path=DB_PATH) -> bool:
    """Drop the database file and recreate schema plus config defaults"""
    path = Path(db_path)
    try:
        for suffix in ("", "-wal", "-shm"):
            candidate = Path(f"{path}{suffix}")
            if candidate.exists():
                candidate.unlink()
                logger.info(f"Removed {candidate}")

        db = PriceDB(str(path))
        ConfigManager(db).initialize_defaults()

        with db._get_conn() as conn:
            tables = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
        logger.info(f"Created {len(tables)} tables")
        return True

    except (OSError, sqlite3.Error) as e:
        logger.critical(f"Could not reset database {path}: {e}")
        return False

def main(argv=None):
    parser = argparse.ArgumentParser(description="Recreate the price database")
    parser.add_argument('--db-path', default=DB_PATH)
    args = parser.parse_args(argv)

    logger.info("Starting database reset process...")
    if reset_database(args.db_path):
        logger.info("Database reset completed successfully")
        return 0
    logger.error("Database reset failed")
    return 1

if __name__ == "__main__":
    sys.exit(main())
