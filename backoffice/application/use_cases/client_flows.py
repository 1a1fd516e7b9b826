from __future__ import annotations

from backoffice.application.exceptions import InvalidInputError
from backoffice.application.ports.record_store import RecordStorePort
from backoffice.application.use_cases.record_flows import FieldSpec, RecordFlow
from backoffice.application.utils.message_rules import is_skip, normalize_phone_number
from backoffice.application.utils.state_helpers import advance_record
from backoffice.domain.entities.choice import RecordKind
from backoffice.domain.entities.client import Client
from backoffice.domain.entities.session import FlowKind, PendingInput, Session


def coerce_phone(text: str) -> str:
    phone = normalize_phone_number(text)
    if not phone:
        raise InvalidInputError("phone", text)
    return phone


class ClientFlows(RecordFlow):
    kind = RecordKind.CLIENT
    entity = "Client"
    plural = "clients"
    key_field = "phone"
    add_flow = FlowKind.CLIENT_ADD
    update_flow = FlowKind.CLIENT_UPDATE
    delete_flow = FlowKind.CLIENT_DELETE
    fields = (
        FieldSpec("Name", "name"),
        FieldSpec("Email", "email"),
        FieldSpec("Phone", "phone", coerce_phone),
        FieldSpec("Address", "address"),
        FieldSpec("Map Link", "map_link"),
    )

    @property
    def store(self) -> RecordStorePort:
        return self._stores.clients

    def label(self, client: Client) -> str:
        return f"{client.name or 'No Name'} - {client.phone}"

    def list_text(self, clients: list[Client]) -> str:
        lines = ["All Clients:"]
        lines += [f"{i}. {self.label(c)}" for i, c in enumerate(clients, start=1)]
        return "\n".join(lines)

    def start_add(self, chat_id: str) -> None:
        self._sessions.create(chat_id, self.add_flow)
        self._say(chat_id, "Enter Client Phone Number:")
        advance_record(self._sessions, chat_id, pending=PendingInput.PHONE)

    def _on_add_text(self, session: Session, text: str) -> bool:
        chat_id = session.chat_id
        pending = session.pending_input

        if pending == PendingInput.PHONE:
            phone = coerce_phone(text)
            if self.store.find_one({"phone": phone}) is not None:
                self._finish(chat_id, f"A client with phone {phone} already exists.")
                return True
            self._say(chat_id, "Enter Client Address:")
            advance_record(self._sessions, chat_id, pending=PendingInput.ADDRESS, values={"phone": phone})
            return True

        if pending == PendingInput.ADDRESS:
            if not text:
                raise InvalidInputError("address", text)
            self._say(chat_id, "Enter Client Name (optional, or type 'skip'):")
            advance_record(self._sessions, chat_id, pending=PendingInput.NAME, values={"address": text})
            return True

        if pending == PendingInput.NAME:
            values = session.record.values
            client = Client(
                phone=values["phone"],
                address=values["address"],
                name="" if is_skip(text) else text,
            )
            self._created(chat_id, client)
            return True

        return False
