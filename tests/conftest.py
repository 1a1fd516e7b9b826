"""
Shared fixtures: in-memory records, the mock gateway, a scheduler that only
runs when told to, and a flow engine wired to all of them with a fixed clock.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable

import pytest

from backoffice.application.ports.scheduler import SchedulerPort
from backoffice.application.use_cases.flow_base import FlowContext
from backoffice.application.use_cases.flow_engine import FlowEngine
from backoffice.application.use_cases.mirror_publisher import MirrorPublisher
from backoffice.application.use_cases.reports import ReportsUseCase
from backoffice.application.use_cases.send_reply import SendReplyUseCase
from backoffice.domain.entities.booking import Booking, BookingSource, BookingStatus, TimeSlot
from backoffice.domain.entities.event import ChatEvent, EventKind
from backoffice.infrastructure.gateway.mock_gateway import MockChatGateway, SentMessage
from backoffice.infrastructure.store.memory_store import memory_record_stores
from backoffice.infrastructure.store.session_store import InMemorySessionStore

FIXED_NOW = datetime(2025, 3, 14, 10, 0)  # a Friday
MIRROR_CHAT = "mirror"
CHAT = "100"


class ManualScheduler(SchedulerPort):
    def __init__(self) -> None:
        self.tasks: dict[str, tuple[float, Callable[[], None]]] = {}

    def schedule(self, key: str, delay_seconds: float, callback: Callable[[], None]) -> None:
        self.tasks[key] = (delay_seconds, callback)

    def cancel(self, key: str) -> bool:
        return self.tasks.pop(key, None) is not None

    def delay(self, key: str) -> float:
        return self.tasks[key][0]

    def fire(self, key: str) -> None:
        _, callback = self.tasks.pop(key)
        callback()

    def run_all(self) -> None:
        for key in list(self.tasks):
            self.fire(key)


class ChatDriver:
    """Sends events into the engine as one chat and reads back what it was sent."""

    def __init__(self, engine: FlowEngine, gateway: MockChatGateway, sessions: InMemorySessionStore, chat_id: str) -> None:
        self.engine = engine
        self.gateway = gateway
        self.sessions = sessions
        self.chat_id = chat_id
        self._inbound = 0

    def _next_id(self) -> str:
        self._inbound += 1
        return f"in-{self._inbound}"

    def start(self) -> None:
        self.engine.handle_event(
            ChatEvent(chat_id=self.chat_id, kind=EventKind.START, body="/start", message_id=self._next_id())
        )

    def press(self, token: str) -> None:
        self.engine.handle_event(
            ChatEvent(chat_id=self.chat_id, kind=EventKind.CHOICE, token=token, callback_id=f"cb-{token}")
        )

    def type(self, text: str) -> None:
        self.engine.handle_event(
            ChatEvent(chat_id=self.chat_id, kind=EventKind.TEXT, body=text, message_id=self._next_id())
        )

    @property
    def last(self) -> SentMessage:
        return self.gateway.last_message(self.chat_id)

    @property
    def session(self):
        return self.sessions.get(self.chat_id)


def make_booking(
    booking_id: str = "BK0001",
    phone: str = "971500000001",
    amount: str = "300",
    status: BookingStatus = BookingStatus.COMPLETED,
    shared: bool = False,
    staff: str | None = "Praw",
    when: datetime | None = None,
    duration: int = 60,
    created_at: datetime | None = None,
) -> Booking:
    start = when or FIXED_NOW - timedelta(hours=1)
    return Booking(
        booking_id=booking_id,
        client_phone=phone,
        service_type="Thai",
        duration=duration,
        requested_date=start,
        requested_time_slot=TimeSlot(start=start, end=start + timedelta(minutes=duration)),
        amount=Decimal(amount),
        shared=shared,
        payment_method="Cash",
        profit_share="Shared" if shared else "Only Ranjeet",
        status=status,
        assigned_staff=staff,
        created_at=created_at or datetime.now(),
    )


@pytest.fixture
def gateway() -> MockChatGateway:
    return MockChatGateway()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def stores():
    return memory_record_stores()


@pytest.fixture
def sessions(gateway, scheduler) -> InMemorySessionStore:
    return InMemorySessionStore(gateway=gateway, scheduler=scheduler)


@pytest.fixture
def mirror(gateway, stores) -> MirrorPublisher:
    return MirrorPublisher(gateway, stores.bookings, stores.clients, MIRROR_CHAT, "AED")


@pytest.fixture
def reports(stores) -> ReportsUseCase:
    return ReportsUseCase(
        bookings=stores.bookings,
        currency="AED",
        party_a="Ranjeet",
        party_b="Nora",
        party_a_deduction=Decimal("6000"),
        party_b_deduction=Decimal("4000"),
        party_a_deduction_label="Jenny & Praw salary",
        party_b_deduction_label="driver salary",
    )


@pytest.fixture
def ctx(stores, sessions, gateway, mirror, reports) -> FlowContext:
    return FlowContext(
        stores=stores,
        sessions=sessions,
        reply=SendReplyUseCase(gateway=gateway, sessions=sessions),
        mirror=mirror,
        reports=reports,
        staff_options=["Praw", "Jenny"],
        currency="AED",
        cleanup_delay=3.0,
        earnings_cleanup_delay=30.0,
        booking_id_attempts=5,
        source=BookingSource.STAFF,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def engine(ctx, gateway) -> FlowEngine:
    return FlowEngine(ctx, gateway)


@pytest.fixture
def chat(engine, gateway, sessions) -> ChatDriver:
    return ChatDriver(engine, gateway, sessions, CHAT)
