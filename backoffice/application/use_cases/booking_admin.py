from __future__ import annotations

from backoffice.application.exceptions import RecordNotFoundError
from backoffice.application.use_cases.flow_base import FlowHandler
from backoffice.application.utils import keyboards
from backoffice.application.utils.date_parser import combine, compute_slot, format_time, parse_date, parse_time
from backoffice.application.utils.message_rules import capitalize, is_none
from backoffice.application.utils.state_helpers import advance_record
from backoffice.application.utils.summaries import booking_label, cancel_details
from backoffice.domain.entities.booking import Booking, BookingStatus, TimeSlot
from backoffice.domain.entities.choice import Action, Choice
from backoffice.domain.entities.service_catalog import find_staff
from backoffice.domain.entities.session import EditStep, FlowKind, PendingInput, RecordStep, Session

RECENT_LIMIT = 10
NEWEST_FIRST = [("created_at", -1)]


class _BookingPicker(FlowHandler):
    def _require(self, booking_id: str | None) -> Booking:
        booking = self._stores.bookings.find_one({"booking_id": booking_id})
        if booking is None:
            raise RecordNotFoundError("Booking", booking_id or "")
        return booking

    def _offer(
        self, chat_id: str, flow: FlowKind, step: int, bookings: list[Booking], prompt: str, action: Action
    ) -> None:
        self._sessions.create(chat_id, flow)
        labels = [(b.booking_id, booking_label(b)) for b in bookings]
        self._say(chat_id, prompt, keyboards.booking_picker(labels, action))
        advance_record(self._sessions, chat_id, step=step, candidates=[b.booking_id for b in bookings])


class CancelSelectionFlow(_BookingPicker):
    """Hard-delete one of the most recent bookings, whatever its status."""

    def start(self, chat_id: str) -> None:
        bookings = self._stores.bookings.find(sort=NEWEST_FIRST, limit=RECENT_LIMIT)
        if not bookings:
            self._finish(chat_id, "No recent bookings found.")
            return
        self._offer(
            chat_id, FlowKind.BOOKING_CANCEL, RecordStep.SELECT, bookings,
            "Select a booking to cancel:", Action.CANCEL_SELECT,
        )

    def on_choice(self, session: Session, choice: Choice) -> bool:
        chat_id = session.chat_id
        if choice.action == Action.CANCEL_SELECT and session.step == RecordStep.SELECT:
            if choice.arg not in session.record.candidates:
                return False
            booking = self._require(choice.arg)
            self._say(chat_id, cancel_details(booking), keyboards.cancel_confirmation())
            advance_record(self._sessions, chat_id, step=RecordStep.CONFIRM, key=booking.booking_id)
            return True

        if choice.action == Action.CANCEL_CONFIRM and session.step == RecordStep.CONFIRM:
            booking = self._require(session.record.key)
            self._ctx.mirror.retract(booking.booking_id)
            if not self._stores.bookings.delete_one({"booking_id": booking.booking_id}):
                raise RecordNotFoundError("Booking", booking.booking_id)
            self._logger.info("Booking deleted", extra={"chat_id": chat_id, "booking_id": booking.booking_id})
            self._finish(chat_id, f"Booking {booking.booking_id} has been deleted.")
            return True

        if choice.action == Action.CANCEL_ABORT and session.step == RecordStep.CONFIRM:
            self._finish(chat_id, "Cancellation aborted.")
            return True

        return False


class EditFlow(_BookingPicker):
    """
    Cancel or update a pending booking. Every update changes one field and
    then replaces the booking's mirror message.
    """

    def start(self, chat_id: str) -> None:
        # only Pending bookings are offered, Confirmed and Completed ones are not editable here
        bookings = self._stores.bookings.find(
            {"status": BookingStatus.PENDING}, sort=NEWEST_FIRST, limit=RECENT_LIMIT
        )
        if not bookings:
            self._finish(chat_id, "No pending bookings found.")
            return
        self._offer(
            chat_id, FlowKind.BOOKING_EDIT, EditStep.SELECT_BOOKING, bookings,
            "Select a booking to update/cancel:", Action.EDIT_SELECT,
        )

    def on_choice(self, session: Session, choice: Choice) -> bool:
        chat_id = session.chat_id
        step = session.step
        action = choice.action

        if action == Action.EDIT_SELECT and step == EditStep.SELECT_BOOKING:
            if choice.arg not in session.record.candidates:
                return False
            booking = self._require(choice.arg)
            self._say(chat_id, f"Booking {booking.booking_id} selected.", keyboards.edit_actions())
            advance_record(self._sessions, chat_id, step=EditStep.ACTION, key=booking.booking_id)
            return True

        if step == EditStep.ACTION:
            if action == Action.EDIT_CANCEL_BOOKING:
                self._cancel(session)
                return True
            if action == Action.EDIT_UPDATE_BOOKING:
                self._say(chat_id, "What would you like to update?", keyboards.edit_fields())
                advance_record(self._sessions, chat_id, step=EditStep.FIELD)
                return True
            return False

        if step == EditStep.FIELD:
            return self._on_field(session, action)

        if action == Action.NEW_STAFF and step == EditStep.STAFF:
            staff = find_staff(self._ctx.staff_options, choice.arg or "")
            if staff is None:
                return False
            booking_id = self._update(session, {"assigned_staff": staff})
            self._republish_and_finish(chat_id, booking_id, f"Booking {booking_id} staff changed to {staff}.")
            return True

        if action == Action.NEW_DATE and step == EditStep.DATE:
            if choice.is_custom:
                self._say(chat_id, "Enter new date (YYYY-MM-DD):")
                advance_record(self._sessions, chat_id, pending=PendingInput.DATE)
                return True
            self._ask_time(chat_id, parse_date(choice.arg or "").isoformat())
            return True

        if action == Action.NEW_TIME and step == EditStep.TIME:
            if choice.is_custom:
                self._say(chat_id, "Enter new time (e.g. 4:30 PM):")
                advance_record(self._sessions, chat_id, pending=PendingInput.TIME)
                return True
            self._apply_timeslot(session, choice.arg or "")
            return True

        if action == Action.NEW_STATUS and step == EditStep.STATUS:
            try:
                status = BookingStatus(capitalize(choice.arg or ""))
            except ValueError:
                return False
            booking_id = self._update(session, {"status": status})
            self._republish_and_finish(chat_id, booking_id, f"Booking {booking_id} status is now {status.value}.")
            return True

        return False

    def on_text(self, session: Session, text: str) -> bool:
        text = text.strip()
        pending = session.pending_input
        if pending == PendingInput.DATE:
            self._ask_time(session.chat_id, parse_date(text).isoformat())
            return True
        if pending == PendingInput.TIME:
            self._apply_timeslot(session, text)
            return True
        if pending == PendingInput.ADDRESS:
            booking = self._update_client(session, {"address": text})
            self._republish_and_finish(
                session.chat_id, booking.booking_id, f"Booking {booking.booking_id} client address updated."
            )
            return True
        if pending == PendingInput.MAP_LINK:
            booking = self._update_client(session, {"map_link": "" if is_none(text) else text})
            self._republish_and_finish(
                session.chat_id, booking.booking_id, f"Booking {booking.booking_id} map link updated."
            )
            return True
        return False

    def _on_field(self, session: Session, action: Action) -> bool:
        chat_id = session.chat_id
        if action == Action.UPDATE_STAFF:
            self._say(chat_id, "Select new staff:", keyboards.staff(self._ctx.staff_options, Action.NEW_STAFF))
            advance_record(self._sessions, chat_id, step=EditStep.STAFF)
        elif action == Action.UPDATE_TIMESLOT:
            self._say(chat_id, "Select new date:", keyboards.dates(self._ctx.clock(), Action.NEW_DATE))
            advance_record(self._sessions, chat_id, step=EditStep.DATE)
        elif action == Action.UPDATE_ADDRESS:
            self._say(chat_id, "Enter new address:")
            advance_record(self._sessions, chat_id, step=EditStep.VALUE, pending=PendingInput.ADDRESS)
        elif action == Action.UPDATE_MAP:
            self._say(chat_id, "Enter new map link or type none to clear:")
            advance_record(self._sessions, chat_id, step=EditStep.VALUE, pending=PendingInput.MAP_LINK)
        elif action == Action.UPDATE_STATUS:
            self._say(chat_id, "Select new status:", keyboards.statuses())
            advance_record(self._sessions, chat_id, step=EditStep.STATUS)
        else:
            return False
        return True

    def _ask_time(self, chat_id: str, new_date: str) -> None:
        self._say(chat_id, "Select new time:", keyboards.times(Action.NEW_TIME))
        advance_record(self._sessions, chat_id, step=EditStep.TIME, new_date=new_date)

    def _cancel(self, session: Session) -> None:
        booking_id = self._update(session, {"status": BookingStatus.CANCELED})
        self._ctx.mirror.retract(booking_id)
        self._logger.info("Booking canceled", extra={"chat_id": session.chat_id, "booking_id": booking_id})
        self._finish(session.chat_id, f"Booking {booking_id} is now canceled.")

    def _apply_timeslot(self, session: Session, time_text: str) -> None:
        booking = self._require(session.record.key)
        start = combine(session.record.new_date or "", format_time(parse_time(time_text)))
        start, end = compute_slot(start, booking.duration)
        self._update(session, {"requested_date": start, "requested_time_slot": TimeSlot(start=start, end=end)})
        self._republish_and_finish(session.chat_id, booking.booking_id, f"Booking {booking.booking_id} timeslot updated.")

    def _update(self, session: Session, patch: dict) -> str:
        booking_id = session.record.key or ""
        if not self._stores.bookings.update_one({"booking_id": booking_id}, patch):
            raise RecordNotFoundError("Booking", booking_id)
        return booking_id

    def _update_client(self, session: Session, patch: dict) -> Booking:
        booking = self._require(session.record.key)
        if not self._stores.clients.update_one({"phone": booking.client_phone}, patch):
            raise RecordNotFoundError("Client", booking.client_phone)
        return booking

    def _republish_and_finish(self, chat_id: str, booking_id: str, text: str) -> None:
        self._ctx.mirror.republish(booking_id)
        self._logger.info("Booking updated", extra={"chat_id": chat_id, "booking_id": booking_id})
        self._finish(chat_id, text)
