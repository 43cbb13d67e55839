"""Key-value record stores over SQLite.

Each store is one table of ``key -> JSON value``. Every call opens its own
connection and commits before returning, so a call is durable on its own and
nothing spans more than one key. Stores know nothing about each other;
cross-store consistency is kept by ``utils.integrity``.
"""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterator, List, Optional, Tuple, Type

from pydantic import BaseModel

from models import FileRecord, ProblemRecord, ProgressRecord, Settings


class KeyValueStore:
    """One named collection of JSON documents, optionally bound to a pydantic model."""

    def __init__(self, db_path: Path, table: str, model: Optional[Type[BaseModel]] = None):
        self.db_path = Path(db_path)
        self.table = table
        self.model = model

    @contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _dump(self, value: Any) -> str:
        if isinstance(value, BaseModel):
            return value.model_dump_json(by_alias=True)
        return json.dumps(value, ensure_ascii=False)

    def _load(self, raw: str) -> Any:
        if self.model is not None:
            return self.model.model_validate_json(raw)
        return json.loads(raw)

    def get(self, key: str) -> Any:
        """Return the stored value, or None when the key is absent."""
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT value FROM {self.table} WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            return None
        return self._load(row["value"])

    def set(self, key: str, value: Any) -> Any:
        with self._conn() as conn:
            conn.execute(
                f"""
                INSERT INTO {self.table} (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, self._dump(value)),
            )
            conn.commit()
        return value

    def remove(self, key: str) -> None:
        """Delete a key; deleting an absent key does nothing."""
        with self._conn() as conn:
            conn.execute(f"DELETE FROM {self.table} WHERE key = ?", (key,))
            conn.commit()

    def items(self) -> List[Tuple[str, Any]]:
        with self._conn() as conn:
            rows = conn.execute(f"SELECT key, value FROM {self.table}").fetchall()
        return [(row["key"], self._load(row["value"])) for row in rows]

    def iterate(self, visitor: Callable[[Any, str], None]) -> None:
        """Call ``visitor(value, key)`` for every record.

        Rows are read up front, so the visitor may write to any store.
        """
        for key, value in self.items():
            visitor(value, key)

    def values(self) -> List[Any]:
        return [value for _, value in self.items()]

    def keys(self) -> List[str]:
        with self._conn() as conn:
            rows = conn.execute(f"SELECT key FROM {self.table}").fetchall()
        return [row["key"] for row in rows]

    def clear(self) -> None:
        with self._conn() as conn:
            conn.execute(f"DELETE FROM {self.table}")
            conn.commit()

    def __len__(self) -> int:
        with self._conn() as conn:
            return int(conn.execute(f"SELECT COUNT(*) FROM {self.table}").fetchone()[0])


@dataclass
class Stores:
    files: KeyValueStore
    problems: KeyValueStore
    progress: KeyValueStore
    settings: KeyValueStore


def build_stores(db_path: Path) -> Stores:
    db_path = Path(db_path)
    return Stores(
        files=KeyValueStore(db_path, "files", FileRecord),
        problems=KeyValueStore(db_path, "problems", ProblemRecord),
        progress=KeyValueStore(db_path, "progress", ProgressRecord),
        settings=KeyValueStore(db_path, "settings", Settings),
    )
