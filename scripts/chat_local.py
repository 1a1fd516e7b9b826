#!/usr/bin/env python3
"""
Interactive local chat harness (no HTTP, no Telegram).

Usage:
  python3 scripts/chat_local.py

What it does:
- Drives the same FlowEngine the webhooks use, with in-memory records and a
  console gateway
- Prints every outbound message with its buttons numbered; type a number to
  press a button, or any other text to send it as a message
- Cleanup is real: after a flow ends the chat's messages are "deleted" after
  the configured delay
"""

from __future__ import annotations

import os
import sys
from decimal import Decimal
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backoffice.application.use_cases.flow_base import FlowContext
from backoffice.application.use_cases.flow_engine import FlowEngine
from backoffice.application.use_cases.mirror_publisher import MirrorPublisher
from backoffice.application.use_cases.reports import ReportsUseCase
from backoffice.application.use_cases.send_reply import SendReplyUseCase
from backoffice.core.config import settings
from backoffice.domain.entities.booking import BookingSource
from backoffice.domain.entities.event import ChatEvent, EventKind
from backoffice.infrastructure.gateway.mock_gateway import MockChatGateway
from backoffice.infrastructure.scheduling.timer_scheduler import TimerScheduler
from backoffice.infrastructure.store.memory_store import memory_record_stores
from backoffice.infrastructure.store.session_store import InMemorySessionStore

MIRROR_CHAT_ID = "mirror"


def _print_header(chat_id: str) -> None:
    print("\nLocal Back Office Harness")
    print("-" * 60)
    print(f"chat_id: {chat_id}")
    print("Type a button number to press it, or free text to send it.")
    print("Commands: /start, /mirror (show mirror chat), /quit, /help")
    print("-" * 60)


def _build_engine(source: BookingSource) -> tuple[FlowEngine, MockChatGateway]:
    gateway = MockChatGateway()
    stores = memory_record_stores()
    sessions = InMemorySessionStore(gateway=gateway, scheduler=TimerScheduler())
    ctx = FlowContext(
        stores=stores,
        sessions=sessions,
        reply=SendReplyUseCase(gateway=gateway, sessions=sessions),
        mirror=MirrorPublisher(gateway, stores.bookings, stores.clients, MIRROR_CHAT_ID, settings.CURRENCY),
        reports=ReportsUseCase(
            bookings=stores.bookings,
            currency=settings.CURRENCY,
            party_a=settings.PROFIT_PARTY_A,
            party_b=settings.PROFIT_PARTY_B,
            party_a_deduction=Decimal(settings.PARTY_A_DEDUCTION),
            party_b_deduction=Decimal(settings.PARTY_B_DEDUCTION),
            party_a_deduction_label=settings.PARTY_A_DEDUCTION_LABEL,
            party_b_deduction_label=settings.PARTY_B_DEDUCTION_LABEL,
        ),
        staff_options=list(settings.STAFF_OPTIONS),
        currency=settings.CURRENCY,
        cleanup_delay=settings.CLEANUP_DELAY_SECONDS,
        earnings_cleanup_delay=settings.EARNINGS_CLEANUP_DELAY_SECONDS,
        booking_id_attempts=settings.BOOKING_ID_ATTEMPTS,
        source=source,
    )
    return FlowEngine(ctx, gateway), gateway


def _show_new(gateway: MockChatGateway, chat_id: str, seen: int) -> tuple[int, list[str]]:
    """Print messages sent since `seen`; return the new count and the latest buttons."""
    tokens: list[str] = []
    messages = gateway.messages_for(chat_id)
    for message in messages[seen:]:
        print(f"\n[{message.message_id}] {message.text}")
        tokens = message.tokens
        number = 1
        for row in message.choices:
            labels = []
            for button in row:
                labels.append(f"({number}) {button.label}")
                number += 1
            print("   " + "  ".join(labels))
    return len(messages), tokens


def main() -> None:
    chat_id = os.getenv("CHAT_ID", "local_user_1")
    source = BookingSource(os.getenv("BOOKING_SOURCE", BookingSource.STAFF.value))
    engine, gateway = _build_engine(source)
    _print_header(chat_id)

    seen = 0
    tokens: list[str] = []
    while True:
        try:
            user_text = input("\n> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            return

        if not user_text:
            continue

        cmd = user_text.lower()
        if cmd in ("/quit", "/exit"):
            print("Bye!")
            return
        if cmd == "/help":
            print("Commands:")
            print("  /start  -> main menu")
            print("  /mirror -> show the live messages of the mirror chat")
            print("  /quit   -> exit")
            continue
        if cmd == "/mirror":
            print("\n--- Mirror ---")
            for message in gateway.live_messages(MIRROR_CHAT_ID):
                print(f"[{message.message_id}] {message.text}\n")
            continue

        if cmd.startswith("/start"):
            event = ChatEvent(chat_id=chat_id, kind=EventKind.START, body=user_text)
        elif user_text.isdigit() and 1 <= int(user_text) <= len(tokens):
            event = ChatEvent(chat_id=chat_id, kind=EventKind.CHOICE, token=tokens[int(user_text) - 1])
        else:
            event = ChatEvent(chat_id=chat_id, kind=EventKind.TEXT, body=user_text)

        engine.handle_event(event)
        seen, new_tokens = _show_new(gateway, chat_id, seen)
        if new_tokens:
            tokens = new_tokens
        print("-" * 60)


if __name__ == "__main__":
    main()
