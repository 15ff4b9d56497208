"""Key-value storage backends used to persist calculator state.

Values are opaque strings (JSON documents written by the stores in
``compound_calc.core.history``), mirroring the browser's localStorage API.
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

from compound_calc.domain.errors import StorageError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class KeyValueStorage(ABC):
    @abstractmethod
    def get_item(self, key: str) -> Optional[str]: ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None: ...

    @abstractmethod
    def remove_item(self, key: str) -> None: ...


class InMemoryStorage(KeyValueStorage):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage(KeyValueStorage):
    """
    All keys live in a single JSON object on disk.

    An unreadable or malformed file reads as empty; writes replace the file
    atomically so a crash mid-write never leaves a truncated document.
    """

    def __init__(self, path: PathLike):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError:
            logger.warning("Could not read storage file %s", self.path, exc_info=True)
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Storage file %s is not valid JSON; treating it as empty", self.path)
            return {}

        if not isinstance(data, dict):
            logger.warning("Storage file %s does not hold a JSON object; treating it as empty", self.path)
            return {}
        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    def _dump(self, items: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.name, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(items, handle, ensure_ascii=False)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"could not write {self.path}: {exc}") from exc

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._dump(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if items.pop(key, None) is not None:
            self._dump(items)


class SqliteStorage(KeyValueStorage):
    def __init__(self, path: PathLike):
        self.path = Path(path)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(self.path)
        except sqlite3.Error as exc:
            raise StorageError(f"could not open {self.path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        conn = self._connect()
        try:
            conn.execute(
                """
                create table if not exists kv_store (
                    key text primary key,
                    value text not null
                )
                """
            )
            conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"could not initialise {self.path}: {exc}") from exc
        finally:
            conn.close()

    def get_item(self, key: str) -> Optional[str]:
        conn = self._connect()
        try:
            row = conn.execute("select value from kv_store where key = ?", (key,)).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"could not read key {key!r} from {self.path}: {exc}") from exc
        finally:
            conn.close()
        return None if row is None else row["value"]

    def set_item(self, key: str, value: str) -> None:
        conn = self._connect()
        try:
            conn.execute(
                """
                insert into kv_store (key, value) values (?, ?)
                on conflict(key) do update set value = excluded.value
                """,
                (key, value),
            )
            conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"could not write key {key!r} to {self.path}: {exc}") from exc
        finally:
            conn.close()

    def remove_item(self, key: str) -> None:
        conn = self._connect()
        try:
            conn.execute("delete from kv_store where key = ?", (key,))
            conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"could not delete key {key!r} from {self.path}: {exc}") from exc
        finally:
            conn.close()


def build_storage(backend: str, path: Optional[PathLike] = None) -> KeyValueStorage:
    """Create the storage backend named by configuration."""
    backend = backend.lower()
    if backend == "memory":
        return InMemoryStorage()
    if backend == "json":
        return JsonFileStorage(path or "calculator_data.json")
    if backend == "sqlite":
        return SqliteStorage(path or "calculator_data.db")
    raise ValueError(f"unknown storage backend {backend!r}; expected memory, json or sqlite")
