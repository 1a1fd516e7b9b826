from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Action(str, Enum):
    # global commands
    CLEAR_CHAT = "clear_chat"
    MAIN_BOOKINGS = "main_bookings"
    MAIN_CLIENTS = "main_clients"
    MAIN_EXPENSES = "main_expenses"
    MAIN_STAFF = "main_staff"
    BOOKING_NEW = "booking_new"
    BOOKING_UPDATE = "booking_update"
    BOOKING_CANCEL = "booking_cancel"
    BOOKING_EARNINGS = "booking_earnings"
    EARNINGS_CURRENT_MONTH = "earnings_current_month"
    EARNINGS_PREV_15 = "earnings_prev_15"
    CLIENT_VIEW_ALL = "client_viewall"
    CLIENT_ADD = "client_add"
    CLIENT_DELETE = "client_delete"
    CLIENT_UPDATE = "client_update"
    EXPENSE_VIEW = "expense_view"
    EXPENSE_ADD = "expense_add"
    EXPENSE_DELETE = "expense_delete"
    EXPENSE_UPDATE = "expense_update"
    STAFF_VIEW = "staff_view"
    STAFF_ADD = "staff_add"
    STAFF_DELETE = "staff_delete"
    STAFF_UPDATE = "staff_update"
    STAFF_PERFORMANCE = "staff_performance"

    # booking creation
    AMOUNT = "amount"
    DURATION = "duration"
    PAYMENT = "payment"
    PROFIT = "profit"
    STAFF_PICK = "staff"
    SERVICE = "service"
    DATE = "date"
    TIME = "time"
    USE_EXISTING_ADDRESS = "use_existing_address"
    NAME_SKIP = "name_skip"
    GENDER = "gender"
    MAP_SKIP = "map_skip"
    FINAL_CONFIRM = "final_confirm"
    CANCEL_BOOKING_FLOW = "cancel_booking_flow"

    # booking cancel-selection
    CANCEL_SELECT = "cancel_select"
    CANCEL_CONFIRM = "cancel_confirm"
    CANCEL_ABORT = "cancel_abort"

    # booking edit
    EDIT_SELECT = "edit"
    EDIT_CANCEL_BOOKING = "cancel_booking"
    EDIT_UPDATE_BOOKING = "update_booking"
    UPDATE_STAFF = "upd_staff"
    UPDATE_TIMESLOT = "upd_timeslot"
    UPDATE_ADDRESS = "upd_address"
    UPDATE_MAP = "upd_map"
    UPDATE_STATUS = "upd_status"
    NEW_STAFF = "staffsel"
    NEW_DATE = "upd_timeslot_date"
    NEW_TIME = "upd_timeslot_time"
    NEW_STATUS = "status"

    # client / staff / expense records
    PICK_DELETE = "delete"
    CONFIRM_DELETE = "confirm_delete"
    ABORT_DELETE = "cancel_delete"
    PICK_UPDATE = "select_update"
    PICK_FIELD = "update_field"
    PICK_PERFORMANCE = "select_performance"
    EXPENSE_DATE_TODAY = "expense_date_today"
    EXPENSE_DATE_CUSTOM = "expense_date_custom"

    UNKNOWN = "unknown"


class RecordKind(str, Enum):
    CLIENT = "client"
    STAFF = "staff"
    EXPENSE = "expense"


CUSTOM = "custom"


@dataclass(frozen=True)
class Choice:
    action: Action
    arg: str | None = None
    record: RecordKind | None = None
    raw: str = ""

    @property
    def is_custom(self) -> bool:
        return self.arg == CUSTOM
