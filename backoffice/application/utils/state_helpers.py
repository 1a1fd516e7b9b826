from __future__ import annotations

from typing import Any

from backoffice.application.ports.session_store import SessionStorePort
from backoffice.domain.entities.session import PendingInput, Session


def advance(
    sessions: SessionStorePort,
    chat_id: str,
    step: int | None = None,
    pending: PendingInput = PendingInput.NONE,
    **booking_fields: Any,
) -> Session | None:
    """Move the session to step, set the expected free text and store booking draft fields."""

    def mutate(session: Session) -> None:
        if step is not None:
            session.step = step
        session.pending_input = pending
        for name, value in booking_fields.items():
            setattr(session.booking, name, value)

    return sessions.update(chat_id, mutate)


def advance_record(
    sessions: SessionStorePort,
    chat_id: str,
    step: int | None = None,
    pending: PendingInput = PendingInput.NONE,
    values: dict[str, str] | None = None,
    **record_fields: Any,
) -> Session | None:
    """Same as advance() for the CRUD and edit flows' RecordDraft."""

    def mutate(session: Session) -> None:
        if step is not None:
            session.step = step
        session.pending_input = pending
        for name, value in record_fields.items():
            setattr(session.record, name, value)
        if values:
            session.record.values.update(values)

    return sessions.update(chat_id, mutate)
