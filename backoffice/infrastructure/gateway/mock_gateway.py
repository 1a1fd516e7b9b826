from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass, field

from backoffice.application.exceptions import GatewayError
from backoffice.application.ports.chat_gateway import ChatGatewayPort
from backoffice.domain.entities.event import ChatEvent, ChoiceRows


@dataclass
class SentMessage:
    chat_id: str
    message_id: str
    text: str
    choices: ChoiceRows = field(default_factory=list)
    parse_mode: str | None = None

    @property
    def tokens(self) -> list[str]:
        return [button.token for row in self.choices for button in row]


class MockChatGateway(ChatGatewayPort):
    """
    In-memory gateway for local runs and tests. Message ids increase
    monotonically across chats; fail_sends and fail_deletes inject failures.
    """

    def __init__(self) -> None:
        self.sent: list[SentMessage] = []
        self.deleted: list[tuple[str, str]] = []
        self.acknowledged: list[str] = []
        self.fail_sends = False
        self.fail_deletes = False
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def _record(self, chat_id: str, text: str, choices: ChoiceRows, parse_mode: str | None) -> str:
        if self.fail_sends:
            raise GatewayError(f"Mock send failure for chat {chat_id}")
        with self._lock:
            message_id = str(next(self._ids))
            self.sent.append(SentMessage(chat_id, message_id, text, choices, parse_mode))
        self._logger.info("Mock send", extra={"chat_id": chat_id, "message_id": message_id})
        return message_id

    def send_text(self, chat_id: str, text: str, parse_mode: str | None = None) -> str:
        return self._record(chat_id, text, [], parse_mode)

    def send_choices(self, chat_id: str, text: str, choices: ChoiceRows) -> str:
        return self._record(chat_id, text, choices, None)

    def delete_message(self, chat_id: str, message_id: str) -> bool:
        if self.fail_deletes:
            return False
        with self._lock:
            self.deleted.append((chat_id, message_id))
        return True

    def acknowledge(self, event: ChatEvent) -> None:
        if event.callback_id:
            self.acknowledged.append(event.callback_id)

    def messages_for(self, chat_id: str) -> list[SentMessage]:
        return [m for m in self.sent if m.chat_id == chat_id]

    def last_message(self, chat_id: str) -> SentMessage:
        return self.messages_for(chat_id)[-1]

    def live_messages(self, chat_id: str) -> list[SentMessage]:
        gone = {mid for cid, mid in self.deleted if cid == chat_id}
        return [m for m in self.messages_for(chat_id) if m.message_id not in gone]
