from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

# Filters map field names to a value (equality) or to an operator dict using
# "$in", "$ne", "$gte" and "$lte". Sort is a list of (field, 1 | -1) pairs.
Filter = dict[str, Any]
Sort = list[tuple[str, int]]


class RecordStorePort(ABC):
    """One collection of durable records (bookings, clients, staff or expenses)."""

    @abstractmethod
    def find(self, filter: Filter | None = None, sort: Sort | None = None, limit: int | None = None) -> list[Any]:
        raise NotImplementedError

    @abstractmethod
    def find_one(self, filter: Filter) -> Any | None:
        raise NotImplementedError

    @abstractmethod
    def insert(self, record: Any) -> Any:
        """Insert a record. Raises DuplicateKeyError on a unique field clash."""
        raise NotImplementedError

    @abstractmethod
    def update_one(self, filter: Filter, patch: dict[str, Any]) -> bool:
        """Apply patch to the first match. Returns False when nothing matched."""
        raise NotImplementedError

    @abstractmethod
    def delete_one(self, filter: Filter) -> bool:
        """Delete the first match. Returns False when nothing matched."""
        raise NotImplementedError


@dataclass(frozen=True)
class RecordStores:
    bookings: RecordStorePort
    clients: RecordStorePort
    staff: RecordStorePort
    expenses: RecordStorePort
