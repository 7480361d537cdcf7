"""Key/value blob stores backing the catalog."""

from __future__ import annotations

import os
import re
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path
from threading import Lock
from typing import Dict

from ..exceptions import PersistenceError


class SQLiteManager:
    """Manage SQLite connections with basic schema guarantees."""

    def __init__(self) -> None:
        self._connections: Dict[Path, sqlite3.Connection] = {}
        self._lock = Lock()

    def connect(self, path: Path) -> sqlite3.Connection:
        path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            if path not in self._connections:
                conn = sqlite3.connect(path, check_same_thread=False)
                conn.row_factory = sqlite3.Row
                self._connections[path] = conn
                self._ensure_schema(conn)
            return self._connections[path]

    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT
            )
            """
        )
        conn.commit()

    def reset(self, path: Path) -> None:
        with self._lock:
            if path in self._connections:
                self._connections[path].close()
                del self._connections[path]
        if path.exists():
            path.unlink()

    def close_all(self) -> None:
        with self._lock:
            for conn in self._connections.values():
                conn.close()
            self._connections.clear()


class BlobStore(ABC):
    """Text blobs addressed by a fixed key."""

    @abstractmethod
    def read(self, key: str) -> str | None:
        """Return the blob stored under ``key`` or ``None`` when absent."""

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """Durably store ``value`` under ``key``; raise PersistenceError on failure."""

    def close(self) -> None:
        """Release underlying resources."""


class SQLiteBlobStore(BlobStore):
    """Blob store on a single SQLite table."""

    def __init__(self, manager: SQLiteManager, db_path: Path) -> None:
        self.manager = manager
        self.db_path = db_path
        self._conn = self.manager.connect(db_path)

    def read(self, key: str) -> str | None:
        try:
            row = self._conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot read {key!r} from {self.db_path}: {exc}") from exc
        return row["value"] if row is not None else None

    def write(self, key: str, value: str) -> None:
        try:
            self._conn.execute(
                "INSERT OR REPLACE INTO kv_store(key, value, updated_at) VALUES (?, ?, datetime('now'))",
                (key, value),
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot write {key!r} to {self.db_path}: {exc}") from exc


class FileBlobStore(BlobStore):
    """One JSON file per key inside a directory."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        slug = re.sub(r"[^0-9A-Za-z_-]+", "_", key.strip()) or "catalog"
        return self.directory / f"{slug}.json"

    def read(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Cannot read {path}: {exc}") from exc

    def write(self, key: str, value: str) -> None:
        path = self.path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            tmp_path.write_text(value, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as exc:
            raise PersistenceError(f"Cannot write {path}: {exc}") from exc


__all__ = ["BlobStore", "FileBlobStore", "SQLiteBlobStore", "SQLiteManager"]
