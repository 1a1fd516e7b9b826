"""
Button token codec.

Raw callback tokens are decoded exactly once, when an event enters the flow
engine, into a typed Choice. Keyboards build their tokens through encode()
and record_token() so the two directions stay in step.
"""

from __future__ import annotations

import re

from backoffice.domain.entities.choice import Action, Choice, RecordKind

_EXACT: dict[str, Action] = {
    action.value: action
    for action in (
        Action.CLEAR_CHAT,
        Action.MAIN_BOOKINGS,
        Action.MAIN_CLIENTS,
        Action.MAIN_EXPENSES,
        Action.MAIN_STAFF,
        Action.BOOKING_NEW,
        Action.BOOKING_UPDATE,
        Action.BOOKING_CANCEL,
        Action.BOOKING_EARNINGS,
        Action.EARNINGS_CURRENT_MONTH,
        Action.EARNINGS_PREV_15,
        Action.CLIENT_VIEW_ALL,
        Action.CLIENT_ADD,
        Action.CLIENT_DELETE,
        Action.CLIENT_UPDATE,
        Action.EXPENSE_VIEW,
        Action.EXPENSE_ADD,
        Action.EXPENSE_DELETE,
        Action.EXPENSE_UPDATE,
        Action.STAFF_VIEW,
        Action.STAFF_ADD,
        Action.STAFF_DELETE,
        Action.STAFF_UPDATE,
        Action.STAFF_PERFORMANCE,
        Action.NAME_SKIP,
        Action.MAP_SKIP,
        Action.FINAL_CONFIRM,
        Action.CANCEL_BOOKING_FLOW,
        Action.CANCEL_CONFIRM,
        Action.CANCEL_ABORT,
        Action.EDIT_CANCEL_BOOKING,
        Action.EDIT_UPDATE_BOOKING,
        Action.UPDATE_STAFF,
        Action.UPDATE_TIMESLOT,
        Action.UPDATE_ADDRESS,
        Action.UPDATE_MAP,
        Action.UPDATE_STATUS,
        Action.EXPENSE_DATE_TODAY,
        Action.EXPENSE_DATE_CUSTOM,
    )
}

# Longer prefixes first: "upd_timeslot_date_" must win over "date_".
_PREFIXES: tuple[tuple[str, Action], ...] = (
    ("upd_timeslot_date_", Action.NEW_DATE),
    ("upd_timeslot_time_", Action.NEW_TIME),
    ("use_existing_address_", Action.USE_EXISTING_ADDRESS),
    ("cancel_select_", Action.CANCEL_SELECT),
    ("staffsel_", Action.NEW_STAFF),
    ("status_", Action.NEW_STATUS),
    ("edit_", Action.EDIT_SELECT),
    ("amount_", Action.AMOUNT),
    ("duration_", Action.DURATION),
    ("payment_", Action.PAYMENT),
    ("profit_", Action.PROFIT),
    ("staff_", Action.STAFF_PICK),
    ("service_", Action.SERVICE),
    ("date_", Action.DATE),
    ("time_", Action.TIME),
    ("gender_", Action.GENDER),
)

_SPACED_ARGS = {Action.TIME, Action.NEW_TIME}

_KINDS = "|".join(kind.value for kind in RecordKind)
_RECORD_PATTERNS: tuple[tuple[re.Pattern[str], Action], ...] = (
    (re.compile(rf"^confirm_delete_({_KINDS})$"), Action.CONFIRM_DELETE),
    (re.compile(rf"^cancel_delete_({_KINDS})$"), Action.ABORT_DELETE),
    (re.compile(rf"^delete_({_KINDS})_(.+)$"), Action.PICK_DELETE),
    (re.compile(rf"^select_update_({_KINDS})_(.+)$"), Action.PICK_UPDATE),
    (re.compile(rf"^update_({_KINDS})_field_(.+)$"), Action.PICK_FIELD),
    (re.compile(r"^select_performance_(staff)_(.+)$"), Action.PICK_PERFORMANCE),
)


def decode_token(raw: str) -> Choice:
    """Decode a raw button token. Unrecognised tokens map to Action.UNKNOWN."""
    token = (raw or "").strip()

    action = _EXACT.get(token)
    if action is not None:
        return Choice(action=action, raw=token)

    for pattern, action in _RECORD_PATTERNS:
        match = pattern.match(token)
        if match:
            groups = match.groups()
            return Choice(
                action=action,
                arg=groups[1] if len(groups) > 1 else None,
                record=RecordKind(groups[0]),
                raw=token,
            )

    for prefix, action in _PREFIXES:
        if token.startswith(prefix):
            arg = token[len(prefix):]
            if action in _SPACED_ARGS:
                arg = arg.replace("_", " ")
            return Choice(action=action, arg=arg, raw=token)

    return Choice(action=Action.UNKNOWN, arg=token, raw=token)


def encode(action: Action, arg: str | None = None) -> str:
    if arg is None:
        return action.value
    return f"{action.value}_{arg.replace(' ', '_')}"


def record_token(action: Action, kind: RecordKind, key: str | None = None) -> str:
    if action == Action.PICK_DELETE:
        return f"delete_{kind.value}_{key}"
    if action == Action.CONFIRM_DELETE:
        return f"confirm_delete_{kind.value}"
    if action == Action.ABORT_DELETE:
        return f"cancel_delete_{kind.value}"
    if action == Action.PICK_UPDATE:
        return f"select_update_{kind.value}_{key}"
    if action == Action.PICK_FIELD:
        return f"update_{kind.value}_field_{key}"
    if action == Action.PICK_PERFORMANCE:
        return f"select_performance_{kind.value}_{key}"
    raise ValueError(f"{action} is not a record action")
