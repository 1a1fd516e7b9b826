from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any

from backoffice.application.exceptions import DuplicateKeyError
from backoffice.application.ports.record_store import Filter, RecordStorePort, RecordStores, Sort
from backoffice.infrastructure.store.query import UNIQUE_FIELDS, apply_patch, apply_sort, find_clash, matches
from backoffice.infrastructure.store.record_codec import CODECS


class JsonRecordStore(RecordStorePort):
    """
    One collection persisted as a JSON array in <data_dir>/<collection>.json.
    Every operation reads the file and writes it back atomically under a lock.
    """

    def __init__(self, collection: str, data_dir: str = "./data/records", unique_fields: tuple[str, ...] = ()) -> None:
        self._collection = collection
        self._serialize, self._deserialize = CODECS[collection]
        self._unique_fields = unique_fields
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._file_path = self._data_dir / f"{collection}.json"
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def _load(self) -> list[Any]:
        """Load every record, returning an empty collection if the file is missing or corrupted."""
        if not self._file_path.exists():
            return []
        try:
            with open(self._file_path, "r", encoding="utf-8") as f:
                rows = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            self._logger.warning(
                "Record file unreadable, starting empty",
                extra={"collection": self._collection, "error": str(e)},
            )
            return []
        return [self._deserialize(row) for row in rows]

    def _save(self, records: list[Any]) -> None:
        """Save the collection atomically via a temp file."""
        temp_path = self._file_path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump([self._serialize(r) for r in records], f, indent=2, ensure_ascii=False)
            temp_path.replace(self._file_path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise

    def find(self, filter: Filter | None = None, sort: Sort | None = None, limit: int | None = None) -> list[Any]:
        with self._lock:
            found = [r for r in self._load() if matches(r, filter)]
        found = apply_sort(found, sort)
        return found[:limit] if limit is not None else found

    def find_one(self, filter: Filter) -> Any | None:
        with self._lock:
            for record in self._load():
                if matches(record, filter):
                    return record
        return None

    def insert(self, record: Any) -> Any:
        with self._lock:
            records = self._load()
            clash = find_clash(records, record, self._unique_fields)
            if clash:
                raise DuplicateKeyError(self._collection, clash, getattr(record, clash))
            records.append(record)
            self._save(records)
        return record

    def update_one(self, filter: Filter, patch: dict[str, Any]) -> bool:
        with self._lock:
            records = self._load()
            for index, record in enumerate(records):
                if not matches(record, filter):
                    continue
                updated = apply_patch(record, patch)
                clash = find_clash(records, updated, self._unique_fields, skip=record)
                if clash:
                    raise DuplicateKeyError(self._collection, clash, getattr(updated, clash))
                records[index] = updated
                self._save(records)
                return True
        return False

    def delete_one(self, filter: Filter) -> bool:
        with self._lock:
            records = self._load()
            for index, record in enumerate(records):
                if matches(record, filter):
                    del records[index]
                    self._save(records)
                    return True
        return False


def json_record_stores(data_dir: str) -> RecordStores:
    return RecordStores(
        bookings=JsonRecordStore("bookings", data_dir, UNIQUE_FIELDS["bookings"]),
        clients=JsonRecordStore("clients", data_dir, UNIQUE_FIELDS["clients"]),
        staff=JsonRecordStore("staff", data_dir, UNIQUE_FIELDS["staff"]),
        expenses=JsonRecordStore("expenses", data_dir, UNIQUE_FIELDS["expenses"]),
    )
