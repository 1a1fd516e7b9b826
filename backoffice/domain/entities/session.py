from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum, IntEnum

from backoffice.domain.entities.booking import BookingSource


class FlowKind(str, Enum):
    NONE = "none"
    BOOKING = "booking"
    CLIENT_ADD = "client_add"
    CLIENT_UPDATE = "client_update"
    CLIENT_DELETE = "client_delete"
    EXPENSE_ADD = "expense_add"
    EXPENSE_UPDATE = "expense_update"
    EXPENSE_DELETE = "expense_delete"
    STAFF_ADD = "staff_add"
    STAFF_UPDATE = "staff_update"
    STAFF_DELETE = "staff_delete"
    STAFF_PERFORMANCE = "staff_performance"
    BOOKING_CANCEL = "booking_cancel"
    BOOKING_EDIT = "booking_edit"


class PendingInput(str, Enum):
    """What the next free-text message from the chat answers."""

    NONE = "none"
    AMOUNT = "amount"
    DATE = "date"
    TIME = "time"
    CLIENT_PHONE = "client_phone"
    NAME = "name"
    ADDRESS = "address"
    MAP_LINK = "map_link"
    PHONE = "phone"
    ROLE = "role"
    SALARY = "salary"
    CATEGORY = "category"
    DESCRIPTION = "description"
    FIELD_VALUE = "field_value"


class BookingStep(IntEnum):
    AMOUNT = 1
    DURATION = 2
    PAYMENT = 3
    PROFIT = 4
    STAFF = 5
    SERVICE = 6
    DATE = 7
    TIME = 8
    CLIENT_PHONE = 9
    ADDRESS_REUSE = 10
    NAME = 11
    GENDER = 12
    ADDRESS = 13
    MAP_LINK = 14
    SUMMARY = 15


class EditStep(IntEnum):
    SELECT_BOOKING = 1
    ACTION = 2
    FIELD = 3
    STAFF = 4
    DATE = 5
    TIME = 6
    STATUS = 7
    VALUE = 8


class RecordStep(IntEnum):
    SELECT = 1
    CONFIRM = 2
    FIELD = 3
    VALUE = 4
    DATE_OPTION = 5


@dataclass
class BookingDraft:
    amount: Decimal | None = None
    duration: int | None = None
    payment_method: str | None = None
    profit_share: str | None = None
    staff: str | None = None
    service: str | None = None
    date: str | None = None  # YYYY-MM-DD
    time: str | None = None  # h:mm AM/PM
    client_phone: str | None = None
    name: str | None = None
    gender: str | None = None
    address: str | None = None
    map_link: str | None = None
    existing_client: bool = False
    source: BookingSource = BookingSource.STAFF


@dataclass
class RecordDraft:
    """Scratch fields for the short CRUD and edit flows."""

    key: str | None = None  # selected record key (phone, booking id, expense id)
    field_name: str | None = None  # field picked for update
    new_date: str | None = None  # edit flow timeslot date
    values: dict[str, str] = field(default_factory=dict)
    candidates: list[str] = field(default_factory=list)  # keys offered by the last picker


@dataclass
class Session:
    chat_id: str
    flow: FlowKind = FlowKind.NONE
    step: int = 0
    pending_input: PendingInput = PendingInput.NONE
    booking: BookingDraft = field(default_factory=BookingDraft)
    record: RecordDraft = field(default_factory=RecordDraft)
    generation: int = 0

    def expects(self, pending: PendingInput) -> bool:
        return self.pending_input == pending

    def close(self) -> None:
        """Mark the flow finished. The session lingers only until its cleanup runs."""
        self.flow = FlowKind.NONE
        self.step = 0
        self.pending_input = PendingInput.NONE
