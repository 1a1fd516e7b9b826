from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from backoffice.domain.entities.event import ChatEvent, EventKind


class TelegramUpdateDTO(BaseModel):
    update_id: int | None = None
    message: dict[str, Any] | None = None
    callback_query: dict[str, Any] | None = None

    def extract_event(self) -> ChatEvent | None:
        if self.callback_query:
            query = self.callback_query
            message = query.get("message") or {}
            chat_id = (message.get("chat") or {}).get("id")
            data = query.get("data")
            if chat_id is None or not data:
                return None
            return ChatEvent(
                chat_id=str(chat_id),
                kind=EventKind.CHOICE,
                token=str(data),
                callback_id=str(query["id"]) if query.get("id") is not None else None,
                channel="telegram",
            )

        if self.message:
            message = self.message
            chat_id = (message.get("chat") or {}).get("id")
            text = message.get("text")
            if chat_id is None or text is None:
                return None
            message_id = message.get("message_id")
            text = str(text)
            return ChatEvent(
                chat_id=str(chat_id),
                kind=EventKind.START if text.strip().startswith("/start") else EventKind.TEXT,
                body=text,
                message_id=str(message_id) if message_id is not None else None,
                channel="telegram",
            )

        return None
