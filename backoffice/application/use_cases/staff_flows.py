from __future__ import annotations

from decimal import Decimal

from backoffice.application.ports.record_store import RecordStorePort
from backoffice.application.use_cases.client_flows import coerce_phone
from backoffice.application.use_cases.record_flows import FieldSpec, RecordFlow
from backoffice.application.utils import keyboards
from backoffice.application.utils.message_rules import is_skip, parse_amount
from backoffice.application.utils.state_helpers import advance_record
from backoffice.domain.entities.choice import Action, Choice, RecordKind
from backoffice.domain.entities.session import FlowKind, PendingInput, RecordStep, Session
from backoffice.domain.entities.staff import Staff


def coerce_salary(text: str) -> Decimal:
    return parse_amount(text, "salary")


class StaffFlows(RecordFlow):
    """Staff records plus the per-staff performance report."""

    kind = RecordKind.STAFF
    entity = "Staff"
    plural = "staff"
    key_field = "phone"
    add_flow = FlowKind.STAFF_ADD
    update_flow = FlowKind.STAFF_UPDATE
    delete_flow = FlowKind.STAFF_DELETE
    fields = (
        FieldSpec("Name", "name"),
        FieldSpec("Phone", "phone", coerce_phone),
        FieldSpec("Role", "role"),
        FieldSpec("Salary", "salary", coerce_salary),
        FieldSpec("Availability Status", "availability_status"),
    )

    @property
    def store(self) -> RecordStorePort:
        return self._stores.staff

    def flows(self) -> tuple[FlowKind, ...]:
        return super().flows() + (FlowKind.STAFF_PERFORMANCE,)

    def label(self, staff: Staff) -> str:
        return f"{staff.name or 'No Name'} - {staff.phone}"

    def list_text(self, staff: list[Staff]) -> str:
        lines = ["All Staff:"]
        lines += [f"{i}. {self.label(s)}" for i, s in enumerate(staff, start=1)]
        return "\n".join(lines)

    def delete_prompt(self, staff: Staff) -> str:
        return f"Are you sure you want to delete staff with phone {staff.phone}?"

    # add

    def start_add(self, chat_id: str) -> None:
        self._sessions.create(chat_id, self.add_flow)
        self._say(chat_id, "Enter Staff Name:")
        advance_record(self._sessions, chat_id, pending=PendingInput.NAME)

    def _on_add_text(self, session: Session, text: str) -> bool:
        chat_id = session.chat_id
        pending = session.pending_input

        if pending == PendingInput.NAME:
            self._say(chat_id, "Enter Staff Phone:")
            advance_record(self._sessions, chat_id, pending=PendingInput.PHONE, values={"name": text})
            return True

        if pending == PendingInput.PHONE:
            phone = coerce_phone(text)
            self._say(chat_id, "Enter Staff Role (optional, 'skip' to ignore):")
            advance_record(self._sessions, chat_id, pending=PendingInput.ROLE, values={"phone": phone})
            return True

        if pending == PendingInput.ROLE:
            self._say(chat_id, "Enter Staff Salary (optional, 'skip' to ignore):")
            role = "" if is_skip(text) else text
            advance_record(self._sessions, chat_id, pending=PendingInput.SALARY, values={"role": role})
            return True

        if pending == PendingInput.SALARY:
            values = session.record.values
            staff = Staff(
                name=values["name"],
                phone=values["phone"],
                role=values.get("role", ""),
                salary=Decimal("0") if is_skip(text) else coerce_salary(text),
            )
            self._created(chat_id, staff)
            return True

        return False

    # performance

    def start_performance(self, chat_id: str) -> None:
        staff = self.store.find(sort=[("created_at", -1)])
        if not staff:
            self._finish(chat_id, "No staff available.")
            return
        self._sessions.create(chat_id, FlowKind.STAFF_PERFORMANCE)
        entries = [(s.phone, self.label(s)) for s in staff]
        self._say(
            chat_id,
            "Select a staff to view performance:",
            keyboards.record_picker(self.kind, Action.PICK_PERFORMANCE, entries),
        )
        advance_record(self._sessions, chat_id, step=RecordStep.SELECT, candidates=[s.phone for s in staff])

    def on_choice(self, session: Session, choice: Choice) -> bool:
        if session.flow != FlowKind.STAFF_PERFORMANCE:
            return super().on_choice(session, choice)
        if choice.action != Action.PICK_PERFORMANCE or session.step != RecordStep.SELECT:
            return False
        staff = self._picked(session, choice)
        if staff is None:
            return False
        report = self._ctx.reports.performance_text(staff.name, self._ctx.clock())
        self._finish(session.chat_id, report, parse_mode="Markdown")
        return True
