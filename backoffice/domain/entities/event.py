from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EventKind(str, Enum):
    START = "start"
    CHOICE = "choice"
    TEXT = "text"


@dataclass(frozen=True)
class ChatEvent:
    chat_id: str
    kind: EventKind
    token: str | None = None  # raw button token for CHOICE events
    body: str | None = None  # free text for TEXT events
    message_id: str | None = None  # inbound message id, tracked for cleanup
    callback_id: str | None = None  # platform acknowledgement handle
    channel: str = "telegram"


@dataclass(frozen=True)
class ChoiceButton:
    label: str
    token: str


# ordered rows of buttons, as rendered by the chat client
ChoiceRows = list[list[ChoiceButton]]
