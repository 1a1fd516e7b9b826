"""
Global commands, menus and the engine's error handling.
"""

from __future__ import annotations

from datetime import datetime

from conftest import CHAT, ChatDriver, make_booking

from backoffice.application.use_cases.flow_base import NO_ACTIVE_PROCESS, OPTION_UNAVAILABLE
from backoffice.domain.entities.booking import BookingStatus
from backoffice.domain.entities.event import ChatEvent, EventKind


def test_section_menus(chat):
    chat.press("main_bookings")
    assert chat.last.text == "Booking Options:"
    assert chat.last.tokens == ["booking_new", "booking_update", "booking_cancel", "booking_earnings"]

    chat.press("main_clients")
    assert chat.last.text == "Client Options:"
    assert chat.last.tokens == ["client_viewall", "client_add", "client_delete", "client_update"]

    chat.press("main_expenses")
    assert chat.last.text == "Expense Options:"

    chat.press("main_staff")
    assert chat.last.text == "Staff Options:"
    assert chat.last.tokens[-1] == "staff_performance"


def test_callbacks_are_acknowledged_and_inbound_messages_tracked(chat, gateway, sessions):
    chat.press("main_bookings")
    chat.press("booking_new")
    chat.type("hello")

    assert gateway.acknowledged == ["cb-main_bookings", "cb-booking_new"]
    assert "in-1" in sessions.tracked(CHAT)


def test_earnings_for_current_month(chat, stores, scheduler):
    stores.bookings.insert(make_booking("A00001", amount="300"))
    stores.bookings.insert(make_booking("A00002", amount="200", shared=True, staff="Jenny"))
    stores.bookings.insert(make_booking("A00003", amount="900", status=BookingStatus.PENDING))
    stores.bookings.insert(make_booking("A00004", amount="100", when=datetime(2025, 2, 20, 12, 0)))

    chat.press("booking_earnings")
    assert chat.last.text == "Select date range:"
    assert chat.last.tokens == ["earnings_current_month", "earnings_prev_15"]

    chat.press("earnings_current_month")
    text = chat.last.text
    assert chat.last.parse_mode == "Markdown"
    assert text.startswith("*Earnings Report (Start of Current Month)*")
    assert "*Total Bookings Amount:* 500 AED" in text
    assert "*Ranjeet's Earnings:* -5600 AED" in text
    assert "*Nora's Earnings:* -3900 AED" in text
    assert "Praw: 1 bookings, 300 AED" in text
    assert "Jenny: 1 bookings, 200 AED" in text
    assert scheduler.delay(CHAT) == 30.0


def test_earnings_from_fifteenth_of_previous_month(chat, stores):
    stores.bookings.insert(make_booking("A00001", amount="300"))
    stores.bookings.insert(make_booking("A00004", amount="100", when=datetime(2025, 2, 20, 12, 0)))
    stores.bookings.insert(make_booking("A00005", amount="700", when=datetime(2025, 2, 10, 12, 0)))

    chat.press("earnings_prev_15")

    assert chat.last.text.startswith("*Earnings Report (From 15th of Previous Month)*")
    assert "*Total Bookings Amount:* 400 AED" in chat.last.text


def test_clear_chat_deletes_everything_tracked(chat, gateway, scheduler):
    chat.start()
    chat.press("booking_new")
    chat.press("clear_chat")

    assert chat.last.text == "Clearing chat..."
    assert scheduler.delay(CHAT) == 0
    scheduler.run_all()

    assert chat.session is None
    assert gateway.live_messages(CHAT) == []


def test_cleanup_is_skipped_when_a_new_flow_started(chat, gateway, scheduler):
    chat.press("client_delete")  # no clients: finishes and schedules cleanup
    pending = scheduler.tasks[CHAT][1]
    chat.press("booking_new")

    assert CHAT not in scheduler.tasks
    pending()
    assert chat.session is not None
    assert gateway.live_messages(CHAT)


def test_unknown_token(chat):
    chat.press("bogus")
    assert chat.last.text == NO_ACTIVE_PROCESS

    chat.press("booking_new")
    chat.press("bogus")
    assert chat.last.text == OPTION_UNAVAILABLE


def test_text_without_session_is_ignored(chat, gateway):
    chat.type("anyone there?")
    assert gateway.messages_for(CHAT) == []


def test_unexpected_failure_is_contained(chat, stores, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(stores.bookings, "find", broken)
    chat.press("booking_cancel")

    assert chat.session is None


def test_chats_are_independent(engine, gateway, sessions, chat):
    other = ChatDriver(engine, gateway, sessions, "200")
    chat.press("booking_new")
    other.press("client_add")
    chat.press("amount_300")

    assert chat.session.booking.amount is not None
    assert other.session.record.key is None
    assert other.last.text == "Enter Client Phone Number:"


def test_failure_notice_still_schedules_cleanup(chat, gateway, scheduler):
    chat.press("booking_new")
    chat.press("amount_custom")
    gateway.fail_sends = True
    chat.type("a lot")

    assert CHAT in scheduler.tasks


def test_start_event_body_is_not_needed(engine, gateway):
    engine.handle_event(ChatEvent(chat_id="300", kind=EventKind.START))
    assert gateway.last_message("300").text == "Please choose an option:"


def _greet(engine, text):
    engine.handle_event(ChatEvent(chat_id=CHAT, kind=EventKind.START, body=text, channel="whatsapp"))


def test_greeting_word_answers_an_open_prompt(chat, engine, stores):
    chat.press("client_add")
    chat.type("0501112222")
    chat.type("Marina 2")
    _greet(engine, "Hi")

    assert chat.last.text == "Client added successfully!"
    assert stores.clients.find_one({"phone": "0501112222"}).name == "Hi"


def test_greeting_without_open_prompt_shows_menu(chat, engine):
    _greet(engine, "menu")
    assert chat.last.text == "Please choose an option:"

    chat.press("booking_new")  # waits for a button, not text
    _greet(engine, "hello")
    assert chat.last.text == "Please choose an option:"


def test_slash_start_always_restarts(chat, engine):
    chat.press("client_add")
    _greet(engine, "/start")

    assert chat.last.text == "Please choose an option:"
