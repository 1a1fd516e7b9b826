from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Callable

from backoffice.domain.entities.booking import Booking, BookingSource, BookingStatus, TimeSlot
from backoffice.domain.entities.client import Client
from backoffice.domain.entities.expense import Expense
from backoffice.domain.entities.staff import Staff, StaffDocuments


def _dt(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_dt(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except (ValueError, TypeError):
        return None


def _now_if_missing(value: str | None) -> datetime:
    return _parse_dt(value) or datetime.now()


def serialize_booking(booking: Booking) -> dict[str, Any]:
    return {
        "booking_id": booking.booking_id,
        "client_phone": booking.client_phone,
        "service_type": booking.service_type,
        "duration": booking.duration,
        "requested_date": _dt(booking.requested_date),
        "requested_time_slot": {
            "start": _dt(booking.requested_time_slot.start),
            "end": _dt(booking.requested_time_slot.end),
        },
        "amount": str(booking.amount),
        "shared": booking.shared,
        "payment_method": booking.payment_method,
        "profit_share": booking.profit_share,
        "status": booking.status.value,
        "assigned_staff": booking.assigned_staff,
        "source": booking.source.value,
        "mirror_chat_id": booking.mirror_chat_id,
        "mirror_message_id": booking.mirror_message_id,
        "created_at": _dt(booking.created_at),
        "updated_at": _dt(booking.updated_at),
    }


def deserialize_booking(data: dict[str, Any]) -> Booking:
    slot = data.get("requested_time_slot") or {}
    requested = _now_if_missing(data.get("requested_date"))
    return Booking(
        booking_id=data["booking_id"],
        client_phone=data.get("client_phone", ""),
        service_type=data.get("service_type"),
        duration=int(data.get("duration") or 0),
        requested_date=requested,
        requested_time_slot=TimeSlot(
            start=_parse_dt(slot.get("start")) or requested,
            end=_parse_dt(slot.get("end")) or requested,
        ),
        amount=Decimal(data.get("amount") or "0"),
        shared=bool(data.get("shared", False)),
        payment_method=data.get("payment_method"),
        profit_share=data.get("profit_share"),
        status=BookingStatus(data.get("status", BookingStatus.PENDING.value)),
        assigned_staff=data.get("assigned_staff"),
        source=BookingSource(data.get("source", BookingSource.STAFF.value)),
        mirror_chat_id=data.get("mirror_chat_id"),
        mirror_message_id=data.get("mirror_message_id"),
        created_at=_now_if_missing(data.get("created_at")),
        updated_at=_now_if_missing(data.get("updated_at")),
    )


def serialize_client(client: Client) -> dict[str, Any]:
    return {
        "phone": client.phone,
        "address": client.address,
        "name": client.name,
        "email": client.email,
        "gender": client.gender,
        "map_link": client.map_link,
        "created_at": _dt(client.created_at),
        "updated_at": _dt(client.updated_at),
    }


def deserialize_client(data: dict[str, Any]) -> Client:
    return Client(
        phone=data["phone"],
        address=data.get("address", ""),
        name=data.get("name", ""),
        email=data.get("email", ""),
        gender=data.get("gender", ""),
        map_link=data.get("map_link", ""),
        created_at=_now_if_missing(data.get("created_at")),
        updated_at=_now_if_missing(data.get("updated_at")),
    )


def serialize_staff(staff: Staff) -> dict[str, Any]:
    docs = staff.documents
    return {
        "name": staff.name,
        "phone": staff.phone,
        "role": staff.role,
        "availability_status": staff.availability_status,
        "salary": str(staff.salary),
        "joining_date": _dt(staff.joining_date),
        "documents": {
            "emirates_id": docs.emirates_id,
            "passport": docs.passport,
            "visa": docs.visa,
            "labour_card": docs.labour_card,
        },
        "created_at": _dt(staff.created_at),
        "updated_at": _dt(staff.updated_at),
    }


def deserialize_staff(data: dict[str, Any]) -> Staff:
    docs = data.get("documents") or {}
    return Staff(
        name=data.get("name", ""),
        phone=data["phone"],
        role=data.get("role", ""),
        availability_status=data.get("availability_status", "free"),
        salary=Decimal(data.get("salary") or "0"),
        joining_date=_now_if_missing(data.get("joining_date")),
        documents=StaffDocuments(
            emirates_id=docs.get("emirates_id"),
            passport=docs.get("passport"),
            visa=docs.get("visa"),
            labour_card=docs.get("labour_card"),
        ),
        created_at=_now_if_missing(data.get("created_at")),
        updated_at=_now_if_missing(data.get("updated_at")),
    )


def serialize_expense(expense: Expense) -> dict[str, Any]:
    return {
        "expense_id": expense.expense_id,
        "category": expense.category,
        "description": expense.description,
        "amount": str(expense.amount),
        "date": _dt(expense.date),
        "created_at": _dt(expense.created_at),
        "updated_at": _dt(expense.updated_at),
    }


def deserialize_expense(data: dict[str, Any]) -> Expense:
    return Expense(
        expense_id=data["expense_id"],
        category=data.get("category", ""),
        description=data.get("description", ""),
        amount=Decimal(data.get("amount") or "0"),
        date=_now_if_missing(data.get("date")),
        created_at=_now_if_missing(data.get("created_at")),
        updated_at=_now_if_missing(data.get("updated_at")),
    )


Codec = tuple[Callable[[Any], dict[str, Any]], Callable[[dict[str, Any]], Any]]

CODECS: dict[str, Codec] = {
    "bookings": (serialize_booking, deserialize_booking),
    "clients": (serialize_client, deserialize_client),
    "staff": (serialize_staff, deserialize_staff),
    "expenses": (serialize_expense, deserialize_expense),
}
