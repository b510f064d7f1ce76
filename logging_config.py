# logging_config.py

import logging
import sqlite3
import sys
from datetime import datetime, timezone
from typing import Optional

MAX_LOG_ENTRIES = 10000  # Maximum number of log entries to keep

SCHEMA = """
    CREATE TABLE IF NOT EXISTS hook_log (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        logged_at TEXT NOT NULL,
        level TEXT NOT NULL,
        ref_name TEXT,
        message TEXT NOT NULL,
        logger TEXT,
        exception TEXT
    )
"""


class SQLiteHandler(logging.Handler):
    """
    Keeps a rolling history of hook runs in SQLite.

    Records logged with extra={"ref_name": ...} are tagged with the ref they describe,
    so the history of one branch can be queried on its own.
    """

    def __init__(self, db_path: str, max_entries: int = MAX_LOG_ENTRIES):
        super().__init__()
        self.db_path = db_path
        self.max_entries = max_entries
        conn = self._connect()
        try:
            conn.execute(SCHEMA)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_hook_log_ref ON hook_log (ref_name)")
            conn.commit()
        finally:
            conn.close()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def _prune(self, conn: sqlite3.Connection):
        # Only the newest max_entries rows survive.
        conn.execute(
            "DELETE FROM hook_log WHERE id <= (SELECT MAX(id) FROM hook_log) - ?",
            (self.max_entries,)
        )

    def emit(self, record):
        conn = None
        try:
            conn = self._connect()
            conn.execute(
                "INSERT INTO hook_log (logged_at, level, ref_name, message, logger, exception) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    datetime.now(timezone.utc).isoformat(),
                    record.levelname,
                    getattr(record, "ref_name", None),
                    record.getMessage(),
                    record.name,
                    record.exc_text,
                )
            )
            self._prune(conn)
            conn.commit()
        except Exception:
            self.handleError(record)
        finally:
            if conn is not None:
                conn.close()


def setup_logging(debug: bool = False, log_db_path: Optional[str] = None):
    """
    Route log records to stderr, which git relays to the pushing client,
    and optionally to a SQLite database.

    An unusable database only costs the persistent history; notifications still go out.
    """
    level = logging.DEBUG if debug else logging.INFO
    logger = logging.getLogger()
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, "_git_slack_hook", False):
            logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    console_handler._git_slack_hook = True
    logger.addHandler(console_handler)

    if log_db_path:
        try:
            sqlite_handler = SQLiteHandler(db_path=log_db_path, max_entries=MAX_LOG_ENTRIES)
        except sqlite3.Error as e:
            logging.getLogger(__name__).warning(f"*** Cannot use log database '{log_db_path}': {e}")
            return
        sqlite_handler.setLevel(logging.DEBUG)
        sqlite_handler._git_slack_hook = True
        logger.addHandler(sqlite_handler)
