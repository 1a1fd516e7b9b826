from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from backoffice.application.ports.record_store import RecordStores
from backoffice.application.ports.session_store import SessionStorePort
from backoffice.application.use_cases.mirror_publisher import MirrorPublisher
from backoffice.application.use_cases.reports import ReportsUseCase
from backoffice.application.use_cases.send_reply import SendReplyUseCase
from backoffice.domain.entities.booking import BookingSource
from backoffice.domain.entities.choice import Choice
from backoffice.domain.entities.event import ChoiceRows
from backoffice.domain.entities.session import Session

NO_ACTIVE_PROCESS = "No active process. Please use /start to begin."
OPTION_UNAVAILABLE = "That option is no longer available. Please use /start to begin again."
USE_BUTTONS = "Please choose one of the options above."


@dataclass
class FlowContext:
    """Collaborators and settings shared by every flow of one chat channel."""

    stores: RecordStores
    sessions: SessionStorePort
    reply: SendReplyUseCase
    mirror: MirrorPublisher
    reports: ReportsUseCase
    staff_options: list[str] = field(default_factory=lambda: ["Praw", "Jenny"])
    currency: str = "AED"
    cleanup_delay: float = 3.0
    earnings_cleanup_delay: float = 30.0
    booking_id_attempts: int = 5
    source: BookingSource = BookingSource.STAFF
    clock: Callable[[], datetime] = datetime.now


class FlowHandler:
    """
    Base for the per-flow state machines. on_choice/on_text return False
    when the event does not fit the session's current step; the engine then
    answers with a stale-option message and leaves the session untouched.
    """

    def __init__(self, ctx: FlowContext) -> None:
        self._ctx = ctx
        self._stores = ctx.stores
        self._sessions = ctx.sessions
        self._logger = logging.getLogger(type(self).__module__)

    def on_choice(self, session: Session, choice: Choice) -> bool:
        return False

    def on_text(self, session: Session, text: str) -> bool:
        return False

    def _say(self, chat_id: str, text: str, choices: ChoiceRows | None = None, parse_mode: str | None = None) -> str:
        return self._ctx.reply.execute(chat_id, text, choices=choices, parse_mode=parse_mode)

    def _finish(self, chat_id: str, text: str, parse_mode: str | None = None, delay: float | None = None) -> None:
        """
        Terminal outcome: one closing message, then deferred cleanup of the chat.
        The session is closed first so a repeated press of the same button
        falls through to the stale-option path.
        """
        self._sessions.update(chat_id, Session.close)
        self._say(chat_id, text, parse_mode=parse_mode)
        self._sessions.schedule_destroy(chat_id, self._ctx.cleanup_delay if delay is None else delay)
