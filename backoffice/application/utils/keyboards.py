"""Button layouts for every menu and prompt. Tokens are built with tokens.encode()."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from backoffice.application.utils.date_parser import today_and_tomorrow
from backoffice.application.utils.message_rules import format_amount
from backoffice.application.utils.tokens import encode, record_token
from backoffice.domain.entities.booking import BookingStatus
from backoffice.domain.entities.choice import CUSTOM, Action, RecordKind
from backoffice.domain.entities.event import ChoiceButton, ChoiceRows
from backoffice.domain.entities.service_catalog import (
    DURATION_OPTIONS,
    GENDERS,
    PAYMENT_OPTIONS,
    PRESET_AMOUNTS,
    PRESET_TIMES,
    PROFIT_OPTIONS,
    SERVICES,
)


def column(buttons: Iterable[tuple[str, str]]) -> ChoiceRows:
    """One button per row."""
    return [[ChoiceButton(label, token)] for label, token in buttons]


def row(*buttons: tuple[str, str]) -> ChoiceRows:
    """All buttons side by side on a single row."""
    return [[ChoiceButton(label, token) for label, token in buttons]]


def main_menu() -> ChoiceRows:
    return column(
        [
            ("Bookings", Action.MAIN_BOOKINGS.value),
            ("Clients", Action.MAIN_CLIENTS.value),
            ("Expenses", Action.MAIN_EXPENSES.value),
            ("Staff", Action.MAIN_STAFF.value),
        ]
    )


def booking_menu() -> ChoiceRows:
    return column(
        [
            ("Create New Booking", Action.BOOKING_NEW.value),
            ("Update Booking", Action.BOOKING_UPDATE.value),
            ("Delete Booking", Action.BOOKING_CANCEL.value),
            ("Earnings/Profits", Action.BOOKING_EARNINGS.value),
        ]
    )


def client_menu() -> ChoiceRows:
    return column(
        [
            ("View All Clients", Action.CLIENT_VIEW_ALL.value),
            ("Add New Client", Action.CLIENT_ADD.value),
            ("Delete Client", Action.CLIENT_DELETE.value),
            ("Update Client", Action.CLIENT_UPDATE.value),
        ]
    )


def expense_menu() -> ChoiceRows:
    return column(
        [
            ("View Expenses", Action.EXPENSE_VIEW.value),
            ("Add Expense", Action.EXPENSE_ADD.value),
            ("Delete Expense", Action.EXPENSE_DELETE.value),
            ("Update Expense", Action.EXPENSE_UPDATE.value),
        ]
    )


def staff_menu() -> ChoiceRows:
    return column(
        [
            ("View Staff", Action.STAFF_VIEW.value),
            ("Add Staff", Action.STAFF_ADD.value),
            ("Delete Staff", Action.STAFF_DELETE.value),
            ("Update Staff", Action.STAFF_UPDATE.value),
            ("Performance", Action.STAFF_PERFORMANCE.value),
        ]
    )


def earnings_menu() -> ChoiceRows:
    return column(
        [
            ("Start of Current Month", Action.EARNINGS_CURRENT_MONTH.value),
            ("From 15th of Previous Month", Action.EARNINGS_PREV_15.value),
        ]
    )


def clear_chat() -> ChoiceRows:
    return row(("Clear Chat", Action.CLEAR_CHAT.value))


# booking creation


def amounts() -> ChoiceRows:
    rows = column((format_amount(a), encode(Action.AMOUNT, format_amount(a))) for a in PRESET_AMOUNTS)
    return rows + column([("Custom", encode(Action.AMOUNT, CUSTOM))])


def durations() -> ChoiceRows:
    return column((f"{d} mins", encode(Action.DURATION, str(d))) for d in DURATION_OPTIONS)


def payments() -> ChoiceRows:
    return column((label, encode(Action.PAYMENT, key)) for key, label in PAYMENT_OPTIONS.items())


def profit_shares() -> ChoiceRows:
    return column((label, encode(Action.PROFIT, key)) for key, label in PROFIT_OPTIONS.items())


def staff(options: list[str], action: Action = Action.STAFF_PICK) -> ChoiceRows:
    return column((name, encode(action, name.lower())) for name in options)


def services() -> ChoiceRows:
    return column((s.name, encode(Action.SERVICE, s.id)) for s in SERVICES)


def dates(now: datetime, action: Action = Action.DATE) -> ChoiceRows:
    today, tomorrow = today_and_tomorrow(now)
    return row(("Today", encode(action, today)), ("Tomorrow", encode(action, tomorrow))) + column(
        [("Custom Date", encode(action, CUSTOM))]
    )


def times(action: Action = Action.TIME) -> ChoiceRows:
    return column((t, encode(action, t)) for t in PRESET_TIMES) + column([("Custom Time", encode(action, CUSTOM))])


def yes_no(yes_token: str, no_token: str) -> ChoiceRows:
    return row(("Yes", yes_token), ("No", no_token))


def skip(token: str) -> ChoiceRows:
    return column([("Skip", token)])


def genders() -> ChoiceRows:
    return row(*((label or "Skip", encode(Action.GENDER, key)) for key, label in GENDERS.items()))


def booking_summary() -> ChoiceRows:
    return row(("Confirm", Action.FINAL_CONFIRM.value), ("Cancel", Action.CANCEL_BOOKING_FLOW.value))


# booking administration


def booking_picker(labels: list[tuple[str, str]], action: Action) -> ChoiceRows:
    """labels: (booking_id, label) pairs."""
    return column((label, encode(action, booking_id)) for booking_id, label in labels)


def cancel_confirmation() -> ChoiceRows:
    return row(("Confirm", Action.CANCEL_CONFIRM.value), ("Abort", Action.CANCEL_ABORT.value))


def edit_actions() -> ChoiceRows:
    return row(("Cancel Booking", Action.EDIT_CANCEL_BOOKING.value), ("Update Booking", Action.EDIT_UPDATE_BOOKING.value))


def edit_fields() -> ChoiceRows:
    return column(
        [
            ("Change Staff", Action.UPDATE_STAFF.value),
            ("Change Timeslot", Action.UPDATE_TIMESLOT.value),
            ("Change Address", Action.UPDATE_ADDRESS.value),
            ("Change Map Link", Action.UPDATE_MAP.value),
            ("Change Status", Action.UPDATE_STATUS.value),
        ]
    )


def statuses() -> ChoiceRows:
    return column((status.value, encode(Action.NEW_STATUS, status.value.lower())) for status in BookingStatus)


# client / staff / expense records


def record_picker(kind: RecordKind, action: Action, entries: list[tuple[str, str]]) -> ChoiceRows:
    """entries: (key, label) pairs."""
    return column((label, record_token(action, kind, key)) for key, label in entries)


def record_fields(kind: RecordKind, fields: tuple[tuple[str, str], ...]) -> ChoiceRows:
    return column((label, record_token(Action.PICK_FIELD, kind, name)) for label, name in fields)


def delete_confirmation(kind: RecordKind) -> ChoiceRows:
    return yes_no(record_token(Action.CONFIRM_DELETE, kind), record_token(Action.ABORT_DELETE, kind))


def expense_date_options() -> ChoiceRows:
    return row(("Today", Action.EXPENSE_DATE_TODAY.value), ("Custom Date", Action.EXPENSE_DATE_CUSTOM.value))
