import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from config import load_config
from .schema import SCHEMA_SQL, SCHEMA_VERSION
from .store import Stores, build_stores

CONFIG_DIR = Path.home() / ".learningmate"
DB_PATH = CONFIG_DIR / "learningmate.db"

logger = logging.getLogger(__name__)

def resolve_db_path(db_path: Optional[Path] = None) -> Path:
    """Explicit path first, then [storage] db_path from config, then the default."""
    if db_path is not None:
        return Path(db_path)
    configured = load_config().get("storage", {}).get("db_path")
    return Path(configured) if configured else DB_PATH

def init_db(db_path: Optional[Path] = None) -> Path:
    """Create the record-store tables if they don't exist and stamp the schema version."""
    path = resolve_db_path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with get_conn(path) as conn:
        conn.executescript(SCHEMA_SQL)
        ensure_schema_version(conn)
        conn.commit()
    logger.debug("Initialized record stores at %s", path)
    return path

def get_schema_version(conn: sqlite3.Connection) -> int:
    """Read the SQLite schema version from PRAGMA user_version."""
    cursor = conn.cursor()
    cursor.execute("PRAGMA user_version")
    row = cursor.fetchone()
    return int(row[0]) if row else 0

def set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    """Set the SQLite schema version via PRAGMA user_version."""
    conn.execute(f"PRAGMA user_version = {int(version)}")

def ensure_schema_version(conn: sqlite3.Connection) -> None:
    """Ensure the current schema version is written to the database."""
    current = get_schema_version(conn)
    if current != SCHEMA_VERSION:
        set_schema_version(conn, SCHEMA_VERSION)

@contextmanager
def get_conn(db_path: Optional[Path] = None):
    """Context manager for SQLite connection, using row_factory for dict-like rows."""
    conn = sqlite3.connect(db_path or DB_PATH, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()

def get_stores(db_path: Optional[Path] = None) -> Stores:
    """Initialize the database and return the four record stores bound to it."""
    path = init_db(db_path)
    return build_stores(path)
