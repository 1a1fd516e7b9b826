from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from backoffice.domain.entities.event import ChatEvent, EventKind

START_WORDS = {"/start", "start", "hi", "hello", "menu"}


class WhatsAppWebhookDTO(BaseModel):
    object: str | None = None
    entry: list[dict[str, Any]] = Field(default_factory=list)

    def extract_events(self) -> list[ChatEvent]:
        events: list[ChatEvent] = []
        for entry in self.entry or []:
            for change in entry.get("changes", []) or []:
                value = change.get("value") or {}
                for msg in value.get("messages", []) or []:
                    event = _to_event(msg)
                    if event is not None:
                        events.append(event)
        return events


def _to_event(msg: dict[str, Any]) -> ChatEvent | None:
    sender = msg.get("from")
    mid = msg.get("id")
    if not sender:
        return None
    msg_type = msg.get("type")

    if msg_type == "text":
        body = str((msg.get("text") or {}).get("body") or "")
        kind = EventKind.START if body.strip().lower() in START_WORDS else EventKind.TEXT
        return ChatEvent(chat_id=str(sender), kind=kind, body=body, message_id=mid, channel="whatsapp")

    if msg_type == "interactive":
        interactive = msg.get("interactive") or {}
        reply = interactive.get("button_reply") or interactive.get("list_reply") or {}
        token = reply.get("id")
        if not token:
            return None
        return ChatEvent(chat_id=str(sender), kind=EventKind.CHOICE, token=str(token), message_id=mid, channel="whatsapp")

    return None
