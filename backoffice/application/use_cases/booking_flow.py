from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable

from backoffice.application.exceptions import DuplicateKeyError, InvalidInputError, RecordNotFoundError
from backoffice.application.use_cases.flow_base import FlowContext, FlowHandler
from backoffice.application.utils import keyboards
from backoffice.application.utils.date_parser import combine, compute_slot, format_time, parse_date, parse_time
from backoffice.application.utils.message_rules import (
    generate_booking_id,
    is_skip,
    normalize_phone_number,
    parse_amount,
)
from backoffice.application.utils.state_helpers import advance
from backoffice.application.utils.summaries import confirmed_booking, draft_summary
from backoffice.domain.entities.booking import Booking, BookingSource, BookingStatus, TimeSlot
from backoffice.domain.entities.choice import Action, Choice
from backoffice.domain.entities.client import Client
from backoffice.domain.entities.service_catalog import (
    GENDERS,
    PAYMENT_OPTIONS,
    PROFIT_OPTIONS,
    SHARED_PROFIT,
    find_service,
    find_staff,
)
from backoffice.domain.entities.session import BookingStep, FlowKind, PendingInput, Session

ChoiceHandler = Callable[[Session, Choice], bool]
TextHandler = Callable[[Session, str], bool]


class BookingFlow(FlowHandler):
    """
    New booking: eight collection steps, then the client lookup branch,
    then a summary with confirm/cancel.
    """

    def __init__(self, ctx: FlowContext) -> None:
        super().__init__(ctx)
        self._choice_handlers: dict[tuple[int, Action], ChoiceHandler] = {
            (BookingStep.AMOUNT, Action.AMOUNT): self._on_amount,
            (BookingStep.DURATION, Action.DURATION): self._on_duration,
            (BookingStep.PAYMENT, Action.PAYMENT): self._on_payment,
            (BookingStep.PROFIT, Action.PROFIT): self._on_profit,
            (BookingStep.STAFF, Action.STAFF_PICK): self._on_staff,
            (BookingStep.SERVICE, Action.SERVICE): self._on_service,
            (BookingStep.DATE, Action.DATE): self._on_date,
            (BookingStep.TIME, Action.TIME): self._on_time,
            (BookingStep.ADDRESS_REUSE, Action.USE_EXISTING_ADDRESS): self._on_use_existing_address,
            (BookingStep.NAME, Action.NAME_SKIP): self._on_name_skip,
            (BookingStep.GENDER, Action.GENDER): self._on_gender,
            (BookingStep.MAP_LINK, Action.MAP_SKIP): self._on_map_skip,
            (BookingStep.SUMMARY, Action.FINAL_CONFIRM): self._on_final_confirm,
        }
        self._text_handlers: dict[PendingInput, TextHandler] = {
            PendingInput.AMOUNT: self._text_amount,
            PendingInput.DATE: self._text_date,
            PendingInput.TIME: self._text_time,
            PendingInput.CLIENT_PHONE: self._text_client_phone,
            PendingInput.NAME: self._text_name,
            PendingInput.ADDRESS: self._text_address,
            PendingInput.MAP_LINK: self._text_map_link,
        }

    def start(self, chat_id: str) -> None:
        self._sessions.create(chat_id, FlowKind.BOOKING)
        self._ask_amount(chat_id, source=self._ctx.source)

    def on_choice(self, session: Session, choice: Choice) -> bool:
        if choice.action == Action.CANCEL_BOOKING_FLOW:
            self._finish(session.chat_id, "Booking flow canceled.")
            return True
        handler = self._choice_handlers.get((session.step, choice.action))
        if handler is None:
            return False
        return handler(session, choice)

    def on_text(self, session: Session, text: str) -> bool:
        handler = self._text_handlers.get(session.pending_input)
        if handler is None:
            return False
        return handler(session, text.strip())

    # prompts: send first, then move the session forward

    def _ask_amount(self, chat_id: str, **fields: Any) -> None:
        self._say(chat_id, "Step 1/8: Please select or enter the booking amount.", keyboards.amounts())
        advance(self._sessions, chat_id, step=BookingStep.AMOUNT, **fields)

    def _ask_duration(self, chat_id: str, **fields: Any) -> None:
        self._say(chat_id, "Step 2/8: Choose a duration.", keyboards.durations())
        advance(self._sessions, chat_id, step=BookingStep.DURATION, **fields)

    def _ask_payment(self, chat_id: str, **fields: Any) -> None:
        self._say(chat_id, "Step 3/8: Choose a payment method.", keyboards.payments())
        advance(self._sessions, chat_id, step=BookingStep.PAYMENT, **fields)

    def _ask_profit(self, chat_id: str, **fields: Any) -> None:
        self._say(chat_id, "Step 4/8: Choose profit sharing option.", keyboards.profit_shares())
        advance(self._sessions, chat_id, step=BookingStep.PROFIT, **fields)

    def _ask_staff(self, chat_id: str, **fields: Any) -> None:
        self._say(chat_id, "Step 5/8: Select staff.", keyboards.staff(self._ctx.staff_options))
        advance(self._sessions, chat_id, step=BookingStep.STAFF, **fields)

    def _ask_service(self, chat_id: str, **fields: Any) -> None:
        self._say(chat_id, "Step 6/8: Select a service.", keyboards.services())
        advance(self._sessions, chat_id, step=BookingStep.SERVICE, **fields)

    def _ask_date(self, chat_id: str, **fields: Any) -> None:
        self._say(chat_id, "Step 7/8: Choose a date", keyboards.dates(self._ctx.clock()))
        advance(self._sessions, chat_id, step=BookingStep.DATE, **fields)

    def _ask_time(self, chat_id: str, **fields: Any) -> None:
        self._say(chat_id, "Step 8/8: Select a time", keyboards.times())
        advance(self._sessions, chat_id, step=BookingStep.TIME, **fields)

    def _ask_client_phone(self, chat_id: str, **fields: Any) -> None:
        self._say(chat_id, "Please type the client's phone number:")
        advance(self._sessions, chat_id, step=BookingStep.CLIENT_PHONE, pending=PendingInput.CLIENT_PHONE, **fields)

    def _ask_name(self, chat_id: str, **fields: Any) -> None:
        self._say(
            chat_id,
            "What is the client's name? Type the name or click Skip.",
            keyboards.skip(Action.NAME_SKIP.value),
        )
        advance(self._sessions, chat_id, step=BookingStep.NAME, pending=PendingInput.NAME, **fields)

    def _ask_gender(self, chat_id: str, **fields: Any) -> None:
        self._say(chat_id, "Select client's gender or skip:", keyboards.genders())
        advance(self._sessions, chat_id, step=BookingStep.GENDER, **fields)

    def _ask_address(self, chat_id: str, prompt: str = "Please enter the client's address:", **fields: Any) -> None:
        self._say(chat_id, prompt)
        advance(self._sessions, chat_id, step=BookingStep.ADDRESS, pending=PendingInput.ADDRESS, **fields)

    def _ask_map_link(self, chat_id: str, **fields: Any) -> None:
        self._say(
            chat_id,
            "Does the client have a Google Map location link? Type it or press Skip.",
            keyboards.skip(Action.MAP_SKIP.value),
        )
        advance(self._sessions, chat_id, step=BookingStep.MAP_LINK, pending=PendingInput.MAP_LINK, **fields)

    def _show_summary(self, session: Session, **fields: Any) -> None:
        draft = replace(session.booking, **fields)
        self._say(session.chat_id, draft_summary(draft, self._ctx.currency), keyboards.booking_summary())
        advance(self._sessions, session.chat_id, step=BookingStep.SUMMARY, **fields)

    # button choices

    def _on_amount(self, session: Session, choice: Choice) -> bool:
        if choice.is_custom:
            self._say(session.chat_id, "Please type the booking amount:")
            advance(self._sessions, session.chat_id, pending=PendingInput.AMOUNT)
            return True
        self._ask_duration(session.chat_id, amount=parse_amount(choice.arg or ""))
        return True

    def _on_duration(self, session: Session, choice: Choice) -> bool:
        try:
            duration = int(choice.arg or "")
        except ValueError:
            raise InvalidInputError("duration", choice.arg or "") from None
        if duration <= 0:
            raise InvalidInputError("duration", choice.arg or "")
        self._ask_payment(session.chat_id, duration=duration)
        return True

    def _on_payment(self, session: Session, choice: Choice) -> bool:
        method = PAYMENT_OPTIONS.get(choice.arg or "")
        if method is None:
            return False
        self._ask_profit(session.chat_id, payment_method=method)
        return True

    def _on_profit(self, session: Session, choice: Choice) -> bool:
        share = PROFIT_OPTIONS.get(choice.arg or "")
        if share is None:
            return False
        self._ask_staff(session.chat_id, profit_share=share)
        return True

    def _on_staff(self, session: Session, choice: Choice) -> bool:
        # an unknown name means "no staff", not an error
        self._ask_service(session.chat_id, staff=find_staff(self._ctx.staff_options, choice.arg or ""))
        return True

    def _on_service(self, session: Session, choice: Choice) -> bool:
        service = find_service(choice.arg or "")
        self._ask_date(session.chat_id, service=service.name if service else None)
        return True

    def _on_date(self, session: Session, choice: Choice) -> bool:
        if choice.is_custom:
            self._say(session.chat_id, "Please enter the date (format: YYYY-MM-DD)")
            advance(self._sessions, session.chat_id, pending=PendingInput.DATE)
            return True
        self._ask_time(session.chat_id, date=parse_date(choice.arg or "").isoformat())
        return True

    def _on_time(self, session: Session, choice: Choice) -> bool:
        if choice.is_custom:
            self._say(session.chat_id, "Please enter the time (e.g. 4:30 PM):")
            advance(self._sessions, session.chat_id, pending=PendingInput.TIME)
            return True
        self._ask_client_phone(session.chat_id, time=format_time(parse_time(choice.arg or "")))
        return True

    def _on_use_existing_address(self, session: Session, choice: Choice) -> bool:
        if choice.arg == "yes":
            self._show_summary(session)
            return True
        if choice.arg == "no":
            self._ask_address(session.chat_id, prompt="Enter new address:")
            return True
        return False

    def _on_name_skip(self, session: Session, choice: Choice) -> bool:
        self._ask_gender(session.chat_id, name="")
        return True

    def _on_gender(self, session: Session, choice: Choice) -> bool:
        if choice.arg not in GENDERS:
            return False
        self._ask_address(session.chat_id, gender=GENDERS[choice.arg])
        return True

    def _on_map_skip(self, session: Session, choice: Choice) -> bool:
        self._complete_client(session, None)
        return True

    def _on_final_confirm(self, session: Session, choice: Choice) -> bool:
        self._confirm(session)
        return True

    # free text

    def _text_amount(self, session: Session, text: str) -> bool:
        self._ask_duration(session.chat_id, amount=parse_amount(text))
        return True

    def _text_date(self, session: Session, text: str) -> bool:
        self._ask_time(session.chat_id, date=parse_date(text).isoformat())
        return True

    def _text_time(self, session: Session, text: str) -> bool:
        self._ask_client_phone(session.chat_id, time=format_time(parse_time(text)))
        return True

    def _text_client_phone(self, session: Session, text: str) -> bool:
        phone = normalize_phone_number(text)
        if not phone:
            raise InvalidInputError("phone", text)
        client = self._stores.clients.find_one({"phone": phone})
        if client is None:
            self._ask_name(session.chat_id, client_phone=phone, existing_client=False)
            return True

        self._say(
            session.chat_id,
            f"Client exists. Current address on file:\n{client.address}\nUse this address?",
            keyboards.yes_no("use_existing_address_yes", "use_existing_address_no"),
        )
        advance(
            self._sessions,
            session.chat_id,
            step=BookingStep.ADDRESS_REUSE,
            client_phone=phone,
            existing_client=True,
            name=client.name,
            gender=client.gender,
            address=client.address,
            map_link=client.map_link,
        )
        return True

    def _text_name(self, session: Session, text: str) -> bool:
        self._ask_gender(session.chat_id, name="" if is_skip(text) else text)
        return True

    def _text_address(self, session: Session, text: str) -> bool:
        if not text:
            raise InvalidInputError("address", text)
        draft = session.booking
        if draft.existing_client:
            # a known client who declined the stored address gets it replaced in place
            if not self._stores.clients.update_one({"phone": draft.client_phone}, {"address": text}):
                raise RecordNotFoundError("Client", draft.client_phone or "")
        self._ask_map_link(session.chat_id, address=text)
        return True

    def _text_map_link(self, session: Session, text: str) -> bool:
        self._complete_client(session, None if is_skip(text) else text)
        return True

    def _complete_client(self, session: Session, map_link: str | None) -> None:
        """map_link None means skipped: known clients keep theirs, new clients get none."""
        draft = session.booking
        clients = self._stores.clients
        if draft.existing_client:
            if map_link:
                clients.update_one({"phone": draft.client_phone}, {"map_link": map_link})
            self._show_summary(session, map_link=map_link or draft.map_link or "")
            return

        client = Client(
            phone=draft.client_phone or "",
            address=draft.address or "",
            name=draft.name or "",
            gender=draft.gender or "",
            map_link=map_link or "",
        )
        try:
            clients.insert(client)
        except DuplicateKeyError:
            self._logger.info("Client created concurrently, updating", extra={"chat_id": session.chat_id})
            clients.update_one(
                {"phone": client.phone},
                {"address": client.address, "name": client.name, "gender": client.gender, "map_link": client.map_link},
            )
        self._show_summary(session, map_link=client.map_link)

    def _confirm(self, session: Session) -> None:
        chat_id = session.chat_id
        draft = session.booking
        start, end = compute_slot(combine(draft.date or "", draft.time or ""), draft.duration or 0)
        status = BookingStatus.COMPLETED if draft.source == BookingSource.STAFF else BookingStatus.PENDING

        for _ in range(max(1, self._ctx.booking_id_attempts)):
            booking = Booking(
                booking_id=generate_booking_id(),
                client_phone=draft.client_phone or "",
                service_type=draft.service,
                duration=draft.duration or 0,
                requested_date=start,
                requested_time_slot=TimeSlot(start=start, end=end),
                amount=draft.amount,
                shared=draft.profit_share == SHARED_PROFIT,
                payment_method=draft.payment_method,
                profit_share=draft.profit_share,
                status=status,
                assigned_staff=draft.staff,
                source=draft.source,
            )
            try:
                self._stores.bookings.insert(booking)
                break
            except DuplicateKeyError:
                self._logger.warning(
                    "Booking id collision, regenerating", extra={"chat_id": chat_id, "booking_id": booking.booking_id}
                )
        else:
            self._logger.error("No free booking id", extra={"chat_id": chat_id})
            self._finish(chat_id, "Could not generate a unique booking ID. Please start the booking again.")
            return

        self._logger.info("Booking created", extra={"chat_id": chat_id, "booking_id": booking.booking_id})
        self._ctx.mirror.publish(booking)
        client = self._stores.clients.find_one({"phone": booking.client_phone})
        self._finish(chat_id, confirmed_booking(booking, client, self._ctx.currency), parse_mode="Markdown")
