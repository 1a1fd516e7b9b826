from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from backoffice.application.exceptions import (
    DuplicateKeyError,
    GatewayError,
    InvalidInputError,
    RecordNotFoundError,
)
from backoffice.application.ports.chat_gateway import ChatGatewayPort
from backoffice.application.use_cases.booking_admin import CancelSelectionFlow, EditFlow
from backoffice.application.use_cases.booking_flow import BookingFlow
from backoffice.application.use_cases.client_flows import ClientFlows
from backoffice.application.use_cases.expense_flows import ExpenseFlows
from backoffice.application.use_cases.flow_base import (
    NO_ACTIVE_PROCESS,
    OPTION_UNAVAILABLE,
    USE_BUTTONS,
    FlowContext,
    FlowHandler,
)
from backoffice.application.use_cases.staff_flows import StaffFlows
from backoffice.application.utils import keyboards
from backoffice.application.utils.date_parser import fifteenth_of_previous_month, start_of_month
from backoffice.application.utils.tokens import decode_token
from backoffice.domain.entities.choice import Action, Choice
from backoffice.domain.entities.event import ChatEvent, ChoiceRows, EventKind
from backoffice.domain.entities.session import FlowKind, PendingInput, Session

Command = Callable[[str], None]


class FlowEngine:
    """
    Entry point for every inbound chat event of one channel.

    Events for the same chat are handled one at a time under the session
    store's per-chat lock, so a flow never sees two events interleave and a
    scheduled cleanup never tears a chat down halfway through a step.
    """

    def __init__(self, ctx: FlowContext, gateway: ChatGatewayPort) -> None:
        self._ctx = ctx
        self._gateway = gateway
        self._sessions = ctx.sessions
        self._logger = logging.getLogger(__name__)

        self.booking = BookingFlow(ctx)
        self.cancel_selection = CancelSelectionFlow(ctx)
        self.edit = EditFlow(ctx)
        self.clients = ClientFlows(ctx)
        self.staff = StaffFlows(ctx)
        self.expenses = ExpenseFlows(ctx)

        self._handlers: dict[FlowKind, FlowHandler] = {
            FlowKind.BOOKING: self.booking,
            FlowKind.BOOKING_CANCEL: self.cancel_selection,
            FlowKind.BOOKING_EDIT: self.edit,
        }
        for records in (self.clients, self.staff, self.expenses):
            for flow in records.flows():
                self._handlers[flow] = records

        # commands that act regardless of the chat's current session
        self._commands: dict[Action, Command] = {
            Action.CLEAR_CHAT: self._clear_chat,
            Action.MAIN_BOOKINGS: self._menu("Booking Options:", keyboards.booking_menu),
            Action.MAIN_CLIENTS: self._menu("Client Options:", keyboards.client_menu),
            Action.MAIN_EXPENSES: self._menu("Expense Options:", keyboards.expense_menu),
            Action.MAIN_STAFF: self._menu("Staff Options:", keyboards.staff_menu),
            Action.BOOKING_NEW: self.booking.start,
            Action.BOOKING_UPDATE: self.edit.start,
            Action.BOOKING_CANCEL: self.cancel_selection.start,
            Action.BOOKING_EARNINGS: self._menu("Select date range:", keyboards.earnings_menu),
            Action.EARNINGS_CURRENT_MONTH: self._earnings(start_of_month, "Start of Current Month"),
            Action.EARNINGS_PREV_15: self._earnings(fifteenth_of_previous_month, "From 15th of Previous Month"),
            Action.CLIENT_VIEW_ALL: self.clients.view_all,
            Action.CLIENT_ADD: self.clients.start_add,
            Action.CLIENT_DELETE: self.clients.start_delete,
            Action.CLIENT_UPDATE: self.clients.start_update,
            Action.EXPENSE_VIEW: self.expenses.view_all,
            Action.EXPENSE_ADD: self.expenses.start_add,
            Action.EXPENSE_DELETE: self.expenses.start_delete,
            Action.EXPENSE_UPDATE: self.expenses.start_update,
            Action.STAFF_VIEW: self.staff.view_all,
            Action.STAFF_ADD: self.staff.start_add,
            Action.STAFF_DELETE: self.staff.start_delete,
            Action.STAFF_UPDATE: self.staff.start_update,
            Action.STAFF_PERFORMANCE: self.staff.start_performance,
        }

    def handle_event(self, event: ChatEvent) -> None:
        chat_id = event.chat_id
        with self._sessions.lock(chat_id):
            self._gateway.acknowledge(event)
            if event.message_id:
                self._sessions.track(chat_id, event.message_id)
            try:
                self._dispatch(event)
            except RecordNotFoundError as e:
                self._logger.info("Record not found", extra={"chat_id": chat_id, "error": str(e)})
                self._terminate(chat_id, f"{e.entity} not found.")
            except InvalidInputError as e:
                self._logger.info("Invalid input", extra={"chat_id": chat_id, "error": str(e)})
                self._terminate(chat_id, f"Invalid {e.label}: {e.raw}. Please use /start to begin again.")
            except DuplicateKeyError as e:
                self._logger.info("Duplicate key", extra={"chat_id": chat_id, "error": str(e)})
                self._terminate(chat_id, f"That {e.field.replace('_', ' ')} is already in use.")
            except GatewayError as e:
                # the session stays as it was before the failed prompt; the user restarts the flow
                self._logger.exception("Gateway failure, step aborted", extra={"chat_id": chat_id, "error": str(e)})
            except Exception as e:
                self._logger.exception("Event handling failed", extra={"chat_id": chat_id, "error": str(e)})

    def _dispatch(self, event: ChatEvent) -> None:
        chat_id = event.chat_id
        session = self._sessions.get(chat_id)
        if event.kind == EventKind.START and not self._answers_prompt(session, event):
            self._ctx.reply.execute(chat_id, "Please choose an option:", keyboards.main_menu())
            return

        if event.kind == EventKind.CHOICE:
            self._on_choice(chat_id, session, decode_token(event.token or ""))
            return

        if session is None or session.flow == FlowKind.NONE:
            self._logger.debug("Text without a session ignored", extra={"chat_id": chat_id})
            return
        handler = self._handlers.get(session.flow)
        if handler is None or not handler.on_text(session, event.body or ""):
            self._ctx.reply.execute(chat_id, USE_BUTTONS)

    @staticmethod
    def _answers_prompt(session: Session | None, event: ChatEvent) -> bool:
        # a greeting word ("hi", "menu") typed while a prompt is open is the answer, not a restart;
        # slash commands always restart
        body = (event.body or "").strip()
        return bool(body) and not body.startswith("/") and session is not None and not session.expects(PendingInput.NONE)

    def _on_choice(self, chat_id: str, session: Session | None, choice: Choice) -> None:
        command = self._commands.get(choice.action)
        if command is not None:
            self._logger.info("Command", extra={"chat_id": chat_id, "action": choice.action.value})
            command(chat_id)
            return

        if session is None:
            self._ctx.reply.execute(chat_id, NO_ACTIVE_PROCESS)
            return

        handler = self._handlers.get(session.flow)
        if handler is None or not handler.on_choice(session, choice):
            self._logger.info(
                "Stale choice",
                extra={"chat_id": chat_id, "flow": session.flow.value, "action": choice.action.value},
            )
            self._ctx.reply.execute(chat_id, OPTION_UNAVAILABLE)

    def _terminate(self, chat_id: str, text: str) -> None:
        """Report a failed step and schedule the chat's cleanup."""
        self._sessions.update(chat_id, Session.close)
        try:
            self._ctx.reply.execute(chat_id, text)
        except GatewayError as e:
            self._logger.exception("Failure notice not delivered", extra={"chat_id": chat_id, "error": str(e)})
        self._sessions.schedule_destroy(chat_id, self._ctx.cleanup_delay)

    # global commands

    def _menu(self, text: str, build: Callable[[], ChoiceRows]) -> Command:
        def show(chat_id: str) -> None:
            self._ctx.reply.execute(chat_id, text, build())

        return show

    def _earnings(self, range_start: Callable[[datetime], datetime], label: str) -> Command:
        def report(chat_id: str) -> None:
            text = self._ctx.reports.earnings_text(range_start(self._ctx.clock()), label)
            self._ctx.reply.execute(chat_id, text, parse_mode="Markdown")
            self._sessions.schedule_destroy(chat_id, self._ctx.earnings_cleanup_delay)

        return report

    def _clear_chat(self, chat_id: str) -> None:
        self._ctx.reply.execute(chat_id, "Clearing chat...")
        self._sessions.schedule_destroy(chat_id, 0)
