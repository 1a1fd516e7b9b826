from __future__ import annotations

import threading
from typing import Any

from backoffice.application.exceptions import DuplicateKeyError
from backoffice.application.ports.record_store import Filter, RecordStorePort, RecordStores, Sort
from backoffice.infrastructure.store.query import UNIQUE_FIELDS, apply_patch, apply_sort, find_clash, matches


class MemoryRecordStore(RecordStorePort):
    def __init__(self, collection: str, unique_fields: tuple[str, ...] = ()) -> None:
        self._collection = collection
        self._unique_fields = unique_fields
        self._records: list[Any] = []
        self._lock = threading.Lock()

    def find(self, filter: Filter | None = None, sort: Sort | None = None, limit: int | None = None) -> list[Any]:
        with self._lock:
            found = [r for r in self._records if matches(r, filter)]
        found = apply_sort(found, sort)
        return found[:limit] if limit is not None else found

    def find_one(self, filter: Filter) -> Any | None:
        with self._lock:
            for record in self._records:
                if matches(record, filter):
                    return record
        return None

    def insert(self, record: Any) -> Any:
        with self._lock:
            clash = find_clash(self._records, record, self._unique_fields)
            if clash:
                raise DuplicateKeyError(self._collection, clash, getattr(record, clash))
            self._records.append(record)
        return record

    def update_one(self, filter: Filter, patch: dict[str, Any]) -> bool:
        with self._lock:
            for index, record in enumerate(self._records):
                if matches(record, filter):
                    updated = apply_patch(record, patch)
                    clash = find_clash(self._records, updated, self._unique_fields, skip=record)
                    if clash:
                        raise DuplicateKeyError(self._collection, clash, getattr(updated, clash))
                    self._records[index] = updated
                    return True
        return False

    def delete_one(self, filter: Filter) -> bool:
        with self._lock:
            for index, record in enumerate(self._records):
                if matches(record, filter):
                    del self._records[index]
                    return True
        return False


def memory_record_stores() -> RecordStores:
    return RecordStores(
        bookings=MemoryRecordStore("bookings", UNIQUE_FIELDS["bookings"]),
        clients=MemoryRecordStore("clients", UNIQUE_FIELDS["clients"]),
        staff=MemoryRecordStore("staff", UNIQUE_FIELDS["staff"]),
        expenses=MemoryRecordStore("expenses", UNIQUE_FIELDS["expenses"]),
    )
