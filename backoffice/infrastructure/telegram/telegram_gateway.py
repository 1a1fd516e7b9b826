from __future__ import annotations

import logging

import httpx

from backoffice.application.exceptions import GatewayError
from backoffice.application.ports.chat_gateway import ChatGatewayPort
from backoffice.domain.entities.event import ChatEvent, ChoiceRows
from backoffice.infrastructure.telegram.telegram_client import TelegramClient


class TelegramGateway(ChatGatewayPort):
    def __init__(self, client: TelegramClient) -> None:
        self._client = client
        self._logger = logging.getLogger(__name__)

    def send_text(self, chat_id: str, text: str, parse_mode: str | None = None) -> str:
        try:
            message = self._client.send_message(chat_id, text, parse_mode=parse_mode)
        except httpx.HTTPError as e:
            raise GatewayError(f"Telegram sendMessage failed for chat {chat_id}: {e}") from e
        return str(message["message_id"])

    def send_choices(self, chat_id: str, text: str, choices: ChoiceRows) -> str:
        keyboard = [[{"text": b.label, "callback_data": b.token} for b in row] for row in choices]
        try:
            message = self._client.send_message(chat_id, text, inline_keyboard=keyboard)
        except httpx.HTTPError as e:
            raise GatewayError(f"Telegram sendMessage failed for chat {chat_id}: {e}") from e
        return str(message["message_id"])

    def delete_message(self, chat_id: str, message_id: str) -> bool:
        try:
            return self._client.delete_message(chat_id, message_id)
        except (httpx.HTTPError, ValueError) as e:
            self._logger.warning(
                "Telegram delete failed", extra={"chat_id": chat_id, "message_id": message_id, "error": str(e)}
            )
            return False

    def acknowledge(self, event: ChatEvent) -> None:
        if not event.callback_id:
            return
        try:
            self._client.answer_callback_query(event.callback_id)
        except httpx.HTTPError as e:
            self._logger.warning("Callback acknowledge failed", extra={"chat_id": event.chat_id, "error": str(e)})
