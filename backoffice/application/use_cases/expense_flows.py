from __future__ import annotations

from datetime import datetime, time
from decimal import Decimal

from backoffice.application.ports.record_store import RecordStorePort
from backoffice.application.use_cases.record_flows import FieldSpec, RecordFlow
from backoffice.application.utils import keyboards
from backoffice.application.utils.date_parser import format_date_for_display, parse_date
from backoffice.application.utils.message_rules import format_amount, parse_amount
from backoffice.application.utils.state_helpers import advance_record
from backoffice.domain.entities.choice import Action, Choice, RecordKind
from backoffice.domain.entities.expense import Expense
from backoffice.domain.entities.session import FlowKind, PendingInput, RecordStep, Session


def coerce_amount(text: str) -> Decimal:
    return parse_amount(text)


def coerce_date(text: str) -> datetime:
    return datetime.combine(parse_date(text), time())


class ExpenseFlows(RecordFlow):
    kind = RecordKind.EXPENSE
    entity = "Expense"
    plural = "expenses"
    key_field = "expense_id"
    add_flow = FlowKind.EXPENSE_ADD
    update_flow = FlowKind.EXPENSE_UPDATE
    delete_flow = FlowKind.EXPENSE_DELETE
    fields = (
        FieldSpec("Category", "category"),
        FieldSpec("Description", "description"),
        FieldSpec("Amount", "amount", coerce_amount),
        FieldSpec("Date", "date", coerce_date),
    )
    picker_limit = 10

    @property
    def store(self) -> RecordStorePort:
        return self._stores.expenses

    def label(self, expense: Expense) -> str:
        return f"{expense.category} - {format_amount(expense.amount)} {self._ctx.currency}"

    def list_text(self, expenses: list[Expense]) -> str:
        lines = ["Expenses:"]
        for e in expenses:
            lines.append(
                f"{e.category}: {format_amount(e.amount)} {self._ctx.currency} "
                f"on {format_date_for_display(e.date)} - {e.description}"
            )
        return "\n".join(lines)

    def delete_prompt(self, expense: Expense) -> str:
        return "Are you sure you want to delete this expense?"

    def start_add(self, chat_id: str) -> None:
        self._sessions.create(chat_id, self.add_flow)
        self._say(chat_id, "Enter expense category:")
        advance_record(self._sessions, chat_id, pending=PendingInput.CATEGORY)

    def _on_add_text(self, session: Session, text: str) -> bool:
        chat_id = session.chat_id
        pending = session.pending_input

        if pending == PendingInput.CATEGORY:
            self._say(chat_id, "Enter expense description:")
            advance_record(self._sessions, chat_id, pending=PendingInput.DESCRIPTION, values={"category": text})
            return True

        if pending == PendingInput.DESCRIPTION:
            self._say(chat_id, "Enter expense amount:")
            advance_record(self._sessions, chat_id, pending=PendingInput.AMOUNT, values={"description": text})
            return True

        if pending == PendingInput.AMOUNT:
            amount = coerce_amount(text)
            self._say(chat_id, "Choose date option:", keyboards.expense_date_options())
            advance_record(
                self._sessions, chat_id, step=RecordStep.DATE_OPTION, values={"amount": str(amount)}
            )
            return True

        if pending == PendingInput.DATE:
            self._create(session, coerce_date(text))
            return True

        return False

    def _on_add_choice(self, session: Session, choice: Choice) -> bool:
        if session.step != RecordStep.DATE_OPTION:
            return False
        if choice.action == Action.EXPENSE_DATE_TODAY:
            self._create(session, self._ctx.clock())
            return True
        if choice.action == Action.EXPENSE_DATE_CUSTOM:
            self._say(session.chat_id, "Enter custom date (YYYY-MM-DD):")
            advance_record(self._sessions, session.chat_id, pending=PendingInput.DATE)
            return True
        return False

    def _create(self, session: Session, when: datetime) -> None:
        values = session.record.values
        expense = Expense(
            category=values["category"],
            description=values["description"],
            amount=Decimal(values["amount"]),
            date=when,
        )
        self._created(session.chat_id, expense)
