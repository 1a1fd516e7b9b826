from __future__ import annotations

import logging

import httpx

from backoffice.application.exceptions import GatewayError
from backoffice.application.ports.chat_gateway import ChatGatewayPort
from backoffice.domain.entities.event import ChatEvent, ChoiceRows
from backoffice.infrastructure.whatsapp.whatsapp_client import WhatsAppClient

MAX_REPLY_BUTTONS = 3
MAX_BUTTON_TITLE = 20
MAX_LIST_ROWS = 10


class WhatsAppGateway(ChatGatewayPort):
    """
    WhatsApp has no inline keyboards: up to three short choices go out as
    reply buttons, anything larger as list messages of ten rows each.
    Sent messages cannot be deleted through the Cloud API.
    """

    def __init__(self, client: WhatsAppClient) -> None:
        self._client = client
        self._logger = logging.getLogger(__name__)

    def send_text(self, chat_id: str, text: str, parse_mode: str | None = None) -> str:
        try:
            return self._client.send_text(chat_id, text)
        except httpx.HTTPError as e:
            raise GatewayError(f"WhatsApp send failed for {chat_id}: {e}") from e

    def send_choices(self, chat_id: str, text: str, choices: ChoiceRows) -> str:
        options = [(button.label, button.token) for row in choices for button in row]
        try:
            if len(options) <= MAX_REPLY_BUTTONS and all(len(label) <= MAX_BUTTON_TITLE for label, _ in options):
                return self._client.send_buttons(chat_id, text, options)

            chunks = [options[i : i + MAX_LIST_ROWS] for i in range(0, len(options), MAX_LIST_ROWS)]
            message_id = ""
            for index, chunk in enumerate(chunks, start=1):
                body = text if len(chunks) == 1 else f"{text} ({index}/{len(chunks)})"
                message_id = self._client.send_list(chat_id, body, chunk)
            return message_id
        except httpx.HTTPError as e:
            raise GatewayError(f"WhatsApp interactive send failed for {chat_id}: {e}") from e

    def delete_message(self, chat_id: str, message_id: str) -> bool:
        self._logger.debug("WhatsApp messages cannot be deleted", extra={"chat_id": chat_id, "message_id": message_id})
        return False

    def acknowledge(self, event: ChatEvent) -> None:
        if not event.message_id:
            return
        try:
            self._client.mark_read(event.message_id)
        except httpx.HTTPError as e:
            self._logger.warning("WhatsApp mark-read failed", extra={"chat_id": event.chat_id, "error": str(e)})
