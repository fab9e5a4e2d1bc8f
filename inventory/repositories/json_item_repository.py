"""JSON-document backend: the whole collection lives in one file."""

from __future__ import annotations

import json
import logging
import os
import threading
from collections.abc import Callable, Mapping, Sequence
from dataclasses import replace
from pathlib import Path
from typing import Any

from inventory.errors import StorageError
from inventory.repositories.item_repository import PATCHABLE_FIELDS, ItemRecord

logger = logging.getLogger(__name__)


def atomic_write_text(path: Path, data: str) -> None:
    """Atomically write *data* into *path*."""

    tmp_path = path.with_suffix(path.suffix + ".tmp")
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with tmp_path.open("w", encoding="utf-8") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        tmp_path.replace(path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


class JsonItemRepository:
    """Items stored as a JSON array, rewritten wholesale on every mutation.

    Read-modify-write cycles are serialized with a lock, so concurrent
    requests in one process never lose each other's updates. Separate
    processes sharing the file still race (last write wins).
    """

    def __init__(self, file_path: str | Path) -> None:
        self._file_path = Path(file_path)
        self._lock = threading.Lock()

    @property
    def file_path(self) -> Path:
        return self._file_path

    # --- ItemRepository interface ---------------------------------------------

    def add(self, record: ItemRecord) -> ItemRecord:
        with self._lock:
            records = self._load()
            if any(r.id == record.id for r in records):
                raise StorageError("Duplicate item id")
            records.append(record)
            self._persist(records)
        return record

    def list_all(self) -> Sequence[ItemRecord]:
        with self._lock:
            return self._load()

    def get(self, item_id: str) -> ItemRecord | None:
        with self._lock:
            return self._find(self._load(), item_id)[1]

    def update_fields(self, item_id: str, changes: Mapping[str, str]) -> ItemRecord | None:
        patch = {k: v for k, v in changes.items() if k in PATCHABLE_FIELDS}
        return self._mutate(item_id, lambda r: replace(r, **patch))

    def set_photo(self, item_id: str, photo: str | None) -> ItemRecord | None:
        return self._mutate(item_id, lambda r: replace(r, photo=photo))

    def remove(self, item_id: str) -> ItemRecord | None:
        with self._lock:
            records = self._load()
            idx, current = self._find(records, item_id)
            if current is None:
                return None
            del records[idx]
            self._persist(records)
            return current

    # --- File helpers -----------------------------------------------------------

    def _mutate(self, item_id: str, change: Callable[[ItemRecord], ItemRecord]) -> ItemRecord | None:
        with self._lock:
            records = self._load()
            idx, current = self._find(records, item_id)
            if current is None:
                return None
            updated = change(current)
            records[idx] = updated
            self._persist(records)
            return updated

    @staticmethod
    def _find(records: list[ItemRecord], item_id: str) -> tuple[int, ItemRecord | None]:
        for i, record in enumerate(records):
            if record.id == item_id:
                return i, record
        return -1, None

    def _load(self) -> list[ItemRecord]:
        try:
            raw: Any = json.loads(self._file_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Cannot read %s: %s", self._file_path, exc)
            raise StorageError("Item store unavailable") from exc
        except json.JSONDecodeError as exc:
            logger.error("Invalid JSON data in %s: %s", self._file_path, exc)
            raise StorageError("Item store is corrupt") from exc

        if not isinstance(raw, list):
            logger.error("Expected a JSON array in %s, got %s", self._file_path, type(raw).__name__)
            raise StorageError("Item store is corrupt")
        try:
            return [ItemRecord.from_dict(doc) for doc in raw]
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("Malformed item in %s: %s", self._file_path, exc)
            raise StorageError("Item store is corrupt") from exc

    def _persist(self, records: list[ItemRecord]) -> None:
        payload = json.dumps([r.to_dict() for r in records], ensure_ascii=False, indent=2)
        try:
            atomic_write_text(self._file_path, payload + "\n")
        except OSError as exc:
            logger.error("Cannot write %s: %s", self._file_path, exc)
            raise StorageError("Item store unavailable") from exc
