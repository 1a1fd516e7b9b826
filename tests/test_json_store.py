"""
Tests for JSON file persistence of records.
"""

from __future__ import annotations

import json
import tempfile
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pytest
from conftest import make_booking

from backoffice.application.exceptions import DuplicateKeyError
from backoffice.domain.entities.booking import BookingStatus
from backoffice.domain.entities.client import Client
from backoffice.domain.entities.expense import Expense
from backoffice.domain.entities.staff import Staff, StaffDocuments
from backoffice.infrastructure.store.json_store import JsonRecordStore, json_record_stores


@pytest.fixture
def data_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


def test_booking_survives_a_new_store_instance(data_dir):
    """Records written by one store are read back by a fresh one."""
    booking = make_booking("BK0001", amount="350.50", shared=True, created_at=datetime(2025, 3, 1, 9, 0))
    JsonRecordStore("bookings", data_dir, ("booking_id",)).insert(booking)

    loaded = JsonRecordStore("bookings", data_dir, ("booking_id",)).find_one({"booking_id": "BK0001"})

    assert loaded == booking
    assert loaded.amount == Decimal("350.50")
    assert loaded.status == BookingStatus.COMPLETED


def test_staff_and_expense_codecs(data_dir):
    stores = json_record_stores(data_dir)
    staff = Staff(name="Praw", phone="0501", salary=Decimal("2500"), documents=StaffDocuments(passport="P1"))
    expense = Expense(category="Fuel", description="Car", amount=Decimal("99.90"), expense_id="e1")
    stores.staff.insert(staff)
    stores.expenses.insert(expense)

    reloaded = json_record_stores(data_dir)
    assert reloaded.staff.find_one({"phone": "0501"}) == staff
    assert reloaded.expenses.find_one({"expense_id": "e1"}) == expense


def test_unique_field_is_enforced(data_dir):
    store = JsonRecordStore("clients", data_dir, ("phone",))
    store.insert(Client(phone="1", address="a"))

    with pytest.raises(DuplicateKeyError) as exc:
        store.insert(Client(phone="1", address="b"))
    assert exc.value.field == "phone"

    store.insert(Client(phone="2", address="b"))
    with pytest.raises(DuplicateKeyError):
        store.update_one({"phone": "2"}, {"phone": "1"})
    assert store.find_one({"phone": "2"}).address == "b"


def test_update_and_delete(data_dir):
    store = JsonRecordStore("clients", data_dir, ("phone",))
    store.insert(Client(phone="1", address="a"))

    assert store.update_one({"phone": "1"}, {"address": "z"}) is True
    assert store.update_one({"phone": "9"}, {"address": "z"}) is False
    assert store.find_one({"phone": "1"}).address == "z"

    assert store.delete_one({"phone": "1"}) is True
    assert store.delete_one({"phone": "1"}) is False
    assert store.find() == []


def test_unknown_patch_field_is_refused(data_dir):
    store = JsonRecordStore("clients", data_dir, ("phone",))
    store.insert(Client(phone="1", address="a"))

    with pytest.raises(ValueError):
        store.update_one({"phone": "1"}, {"nickname": "x"})


def test_find_with_operators_sort_and_limit(data_dir):
    store = JsonRecordStore("bookings", data_dir, ("booking_id",))
    for i, status in enumerate([BookingStatus.PENDING, BookingStatus.COMPLETED, BookingStatus.CONFIRMED]):
        store.insert(make_booking(f"BK000{i}", status=status, created_at=datetime(2025, 1, 1 + i)))

    found = store.find(
        {"status": {"$in": [BookingStatus.COMPLETED, BookingStatus.CONFIRMED]}},
        sort=[("created_at", -1)],
        limit=1,
    )
    assert [b.booking_id for b in found] == ["BK0002"]
    assert len(store.find({"status": {"$ne": BookingStatus.PENDING}})) == 2
    assert len(store.find({"created_at": {"$gte": datetime(2025, 1, 2), "$lte": datetime(2025, 1, 2)}})) == 1


def test_file_layout(data_dir):
    store = JsonRecordStore("clients", data_dir, ("phone",))
    store.insert(Client(phone="1", address="a"))

    rows = json.loads((Path(data_dir) / "clients.json").read_text(encoding="utf-8"))
    assert rows[0]["phone"] == "1"
    assert not (Path(data_dir) / "clients.json.tmp").exists()


def test_corrupt_file_reads_as_empty(data_dir):
    (Path(data_dir) / "clients.json").write_text("{not json", encoding="utf-8")
    store = JsonRecordStore("clients", data_dir, ("phone",))

    assert store.find() == []
    store.insert(Client(phone="1", address="a"))
    assert len(store.find()) == 1
