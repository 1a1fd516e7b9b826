from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum


class BookingStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    COMPLETED = "Completed"
    CANCELED = "Canceled"


class BookingSource(str, Enum):
    STAFF = "staff"
    CLIENT = "client"


@dataclass(frozen=True)
class TimeSlot:
    start: datetime
    end: datetime


@dataclass(frozen=True)
class Booking:
    booking_id: str
    client_phone: str
    service_type: str | None
    duration: int  # minutes
    requested_date: datetime
    requested_time_slot: TimeSlot
    amount: Decimal = Decimal("0")
    shared: bool = False
    payment_method: str | None = None
    profit_share: str | None = None
    status: BookingStatus = BookingStatus.PENDING
    assigned_staff: str | None = None
    source: BookingSource = BookingSource.STAFF
    # reference to the summary message in the receiver channel
    mirror_chat_id: str | None = None
    mirror_message_id: str | None = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def has_mirror(self) -> bool:
        return bool(self.mirror_chat_id and self.mirror_message_id)
