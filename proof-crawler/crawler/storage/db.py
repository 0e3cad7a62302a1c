"""
Database connection and initialization for the crawler.
One SQLite file holds every logical store as its own table.
"""

import re
import sqlite3
from pathlib import Path
from crawler.core import DATA_DIR

DB_PATH = DATA_DIR / "crawler.db"

_TABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def get_connection(db_path=None):
    """
    Create and return a SQLite database connection.
    """
    path = Path(db_path or DB_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.execute("PRAGMA journal_mode = WAL;")
    return conn


def check_table_name(name):
    if not _TABLE_NAME.match(name or ""):
        raise ValueError(f"invalid store name: {name!r}")
    return name


def initialize_table(name, db_path=None):
    """
    Create the key-value table for a logical store if missing.
    Rows are (id, body) where body is the JSON document.
    """
    check_table_name(name)
    conn = get_connection(db_path)
    cursor = conn.cursor()
    cursor.execute(f"""
    CREATE TABLE IF NOT EXISTS {name} (
        id TEXT PRIMARY KEY,
        body TEXT NOT NULL,      -- JSON document
        created_at TEXT NOT NULL -- timestamp
    );
    """)
    conn.commit()
    conn.close()
