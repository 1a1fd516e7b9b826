from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable

from backoffice.application.exceptions import RecordNotFoundError
from backoffice.application.ports.record_store import RecordStorePort
from backoffice.application.use_cases.flow_base import FlowHandler
from backoffice.application.utils import keyboards
from backoffice.application.utils.state_helpers import advance_record
from backoffice.domain.entities.choice import Action, Choice, RecordKind
from backoffice.domain.entities.session import FlowKind, PendingInput, RecordStep, Session

NEWEST_FIRST = [("created_at", -1)]


@dataclass(frozen=True)
class FieldSpec:
    """An updatable field: button label, attribute name and text coercion."""

    label: str
    name: str
    coerce: Callable[[str], Any] = str


class RecordFlow(FlowHandler, ABC):
    """
    Shared list / delete / update handling for clients, staff and expenses.

    Subclasses declare the collection, the key field used in button tokens
    and the updatable fields, and implement their own add flow through
    _on_add_text and _on_add_choice.
    """

    kind: RecordKind
    entity: str
    plural: str
    key_field: str
    add_flow: FlowKind
    update_flow: FlowKind
    delete_flow: FlowKind
    fields: tuple[FieldSpec, ...] = ()
    picker_limit: int | None = None

    @property
    @abstractmethod
    def store(self) -> RecordStorePort:
        raise NotImplementedError

    @abstractmethod
    def label(self, record: Any) -> str:
        raise NotImplementedError

    def flows(self) -> tuple[FlowKind, ...]:
        return (self.add_flow, self.update_flow, self.delete_flow)

    # entry points, called by the engine for the section menu buttons

    def start_delete(self, chat_id: str) -> None:
        self._offer(chat_id, self.delete_flow, Action.PICK_DELETE, f"Select a {self.entity.lower()} to delete:", "delete")

    def start_update(self, chat_id: str) -> None:
        self._offer(chat_id, self.update_flow, Action.PICK_UPDATE, f"Select a {self.entity.lower()} to update:", "update")

    @abstractmethod
    def start_add(self, chat_id: str) -> None:
        raise NotImplementedError

    # dispatch

    def on_choice(self, session: Session, choice: Choice) -> bool:
        if choice.record is not None and choice.record != self.kind:
            return False
        if session.flow == self.delete_flow:
            return self._on_delete_choice(session, choice)
        if session.flow == self.update_flow:
            return self._on_update_choice(session, choice)
        if session.flow == self.add_flow:
            return self._on_add_choice(session, choice)
        return False

    def on_text(self, session: Session, text: str) -> bool:
        text = text.strip()
        if session.flow == self.update_flow and session.expects(PendingInput.FIELD_VALUE):
            self._apply_update(session, text)
            return True
        if session.flow == self.add_flow:
            return self._on_add_text(session, text)
        return False

    def _on_add_text(self, session: Session, text: str) -> bool:
        return False

    def _on_add_choice(self, session: Session, choice: Choice) -> bool:
        return False

    # pickers

    def _recent(self) -> list[Any]:
        return self.store.find(sort=NEWEST_FIRST, limit=self.picker_limit)

    def _entries(self, records: list[Any]) -> list[tuple[str, str]]:
        return [(getattr(r, self.key_field), self.label(r)) for r in records]

    def _offer(self, chat_id: str, flow: FlowKind, action: Action, prompt: str, verb: str) -> bool:
        records = self._recent()
        if not records:
            self._finish(chat_id, f"No {self.plural} to {verb}.")
            return False
        self._sessions.create(chat_id, flow)
        self._say(chat_id, prompt, keyboards.record_picker(self.kind, action, self._entries(records)))
        advance_record(
            self._sessions, chat_id, step=RecordStep.SELECT,
            candidates=[getattr(r, self.key_field) for r in records],
        )
        return True

    def _require(self, key: str | None) -> Any:
        record = self.store.find_one({self.key_field: key})
        if record is None:
            raise RecordNotFoundError(self.entity, key or "")
        return record

    def _picked(self, session: Session, choice: Choice) -> Any | None:
        if choice.arg not in session.record.candidates:
            return None
        return self._require(choice.arg)

    # list view

    def view_all(self, chat_id: str) -> None:
        records = self.store.find(sort=NEWEST_FIRST)
        if not records:
            self._finish(chat_id, f"No {self.plural} found.")
            return
        self._say(chat_id, self.list_text(records), keyboards.clear_chat())

    @abstractmethod
    def list_text(self, records: list[Any]) -> str:
        raise NotImplementedError

    # delete

    def _on_delete_choice(self, session: Session, choice: Choice) -> bool:
        chat_id = session.chat_id
        if choice.action == Action.PICK_DELETE and session.step == RecordStep.SELECT:
            record = self._picked(session, choice)
            if record is None:
                return False
            key = getattr(record, self.key_field)
            self._say(chat_id, self.delete_prompt(record), keyboards.delete_confirmation(self.kind))
            advance_record(self._sessions, chat_id, step=RecordStep.CONFIRM, key=key)
            return True

        if choice.action == Action.CONFIRM_DELETE and session.step == RecordStep.CONFIRM:
            key = session.record.key
            if not self.store.delete_one({self.key_field: key}):
                raise RecordNotFoundError(self.entity, key or "")
            self._logger.info(f"{self.entity} deleted", extra={"chat_id": chat_id, "key": key})
            self._finish(chat_id, f"{self.entity} deleted successfully!")
            return True

        if choice.action == Action.ABORT_DELETE and session.step == RecordStep.CONFIRM:
            self._finish(chat_id, f"{self.entity} deletion canceled.")
            return True

        return False

    def delete_prompt(self, record: Any) -> str:
        return f"Are you sure you want to delete {self.entity.lower()} {getattr(record, self.key_field)}?"

    # update

    def _field(self, name: str | None) -> FieldSpec | None:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None

    def _on_update_choice(self, session: Session, choice: Choice) -> bool:
        chat_id = session.chat_id
        if choice.action == Action.PICK_UPDATE and session.step == RecordStep.SELECT:
            record = self._picked(session, choice)
            if record is None:
                return False
            self._say(
                chat_id,
                "Which field do you want to update?",
                keyboards.record_fields(self.kind, tuple((f.label, f.name) for f in self.fields)),
            )
            advance_record(self._sessions, chat_id, step=RecordStep.FIELD, key=getattr(record, self.key_field))
            return True

        if choice.action == Action.PICK_FIELD and session.step == RecordStep.FIELD:
            spec = self._field(choice.arg)
            if spec is None:
                return False
            self._say(chat_id, f"Enter new value for {spec.label}:")
            advance_record(
                self._sessions, chat_id, step=RecordStep.VALUE, pending=PendingInput.FIELD_VALUE, field_name=spec.name
            )
            return True

        return False

    def _apply_update(self, session: Session, text: str) -> None:
        spec = self._field(session.record.field_name)
        if spec is None:
            raise RecordNotFoundError("Field", session.record.field_name or "")
        key = session.record.key
        if not self.store.update_one({self.key_field: key}, {spec.name: spec.coerce(text)}):
            raise RecordNotFoundError(self.entity, key or "")
        self._logger.info(f"{self.entity} updated", extra={"chat_id": session.chat_id, "key": key, "field": spec.name})
        self._finish(session.chat_id, f"{self.entity} updated successfully!")

    def _created(self, chat_id: str, record: Any) -> None:
        self.store.insert(record)
        self._logger.info(f"{self.entity} added", extra={"chat_id": chat_id, "key": getattr(record, self.key_field)})
        self._finish(chat_id, f"{self.entity} added successfully!")
