from __future__ import annotations

import logging
from typing import Any

import httpx


class WhatsAppClient:
    """WhatsApp Cloud API messages endpoint for one business phone number."""

    def __init__(self, token: str, phone_number_id: str, api_version: str = "v16.0") -> None:
        self._endpoint = f"https://graph.facebook.com/{api_version}/{phone_number_id}/messages"
        self._client = httpx.Client(timeout=10.0, headers={"Authorization": f"Bearer {token}"})
        self._logger = logging.getLogger(__name__)

    def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        body = {"messaging_product": "whatsapp", **payload}
        resp = self._client.post(self._endpoint, json=body)
        if resp.status_code >= 400:
            try:
                error = resp.json().get("error", {})
                error_code = error.get("code")
                error_message = error.get("message")
            except ValueError:
                error_code = None
                error_message = resp.text

            self._logger.error(
                "WhatsApp send failed",
                extra={
                    "status": resp.status_code,
                    "error_code": error_code,
                    "error": error_message,
                    "chat_id": payload.get("to"),
                },
            )
            resp.raise_for_status()
        return resp.json()

    @staticmethod
    def _message_id(response: dict[str, Any]) -> str:
        messages = response.get("messages") or [{}]
        return str(messages[0].get("id", ""))

    def send_text(self, to: str, text: str) -> str:
        response = self._post({"to": to, "type": "text", "text": {"body": text}})
        return self._message_id(response)

    def send_buttons(self, to: str, text: str, buttons: list[tuple[str, str]]) -> str:
        """Reply buttons: at most three, titles up to 20 characters."""
        interactive = {
            "type": "button",
            "body": {"text": text},
            "action": {
                "buttons": [
                    {"type": "reply", "reply": {"id": token, "title": label[:20]}} for label, token in buttons
                ]
            },
        }
        response = self._post({"to": to, "type": "interactive", "interactive": interactive})
        return self._message_id(response)

    def send_list(self, to: str, text: str, rows: list[tuple[str, str]], button_label: str = "Options") -> str:
        """List message: at most ten rows, titles up to 24 characters."""
        interactive = {
            "type": "list",
            "body": {"text": text},
            "action": {
                "button": button_label[:20],
                "sections": [
                    {"title": "Options", "rows": [{"id": token, "title": label[:24]} for label, token in rows]}
                ],
            },
        }
        response = self._post({"to": to, "type": "interactive", "interactive": interactive})
        return self._message_id(response)

    def mark_read(self, message_id: str) -> None:
        self._post({"status": "read", "message_id": message_id})
