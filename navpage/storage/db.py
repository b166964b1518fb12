"""SQLite connection helpers for the local key-value table."""
import sqlite3
from pathlib import Path

_SCHEMA_PATH = Path(__file__).parent / "schema.sql"

def get_connection(db_path: Path) -> sqlite3.Connection:
    """Open a connection to ``db_path``.

    The path is passed in rather than read from settings so each
    SqliteKeyValueStore owns its file, including the temp files tests use.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    return conn

def init_db(db_path: Path) -> None:
    schema_sql = _SCHEMA_PATH.read_text(encoding="utf-8")
    conn = get_connection(db_path)
    try:
        conn.executescript(schema_sql)
        conn.commit()
    finally:
        conn.close()
