from __future__ import annotations

import logging
from typing import Any

import httpx


class TelegramClient:
    """Thin wrapper over the Bot API methods the back-office uses."""

    def __init__(self, bot_token: str, api_base: str = "https://api.telegram.org") -> None:
        self._base_url = f"{api_base.rstrip('/')}/bot{bot_token}"
        self._client = httpx.Client(timeout=10.0)
        self._logger = logging.getLogger(__name__)

    def _call(self, method: str, payload: dict[str, Any]) -> Any:
        resp = self._client.post(f"{self._base_url}/{method}", json=payload)
        if resp.status_code >= 400:
            try:
                error_json = resp.json()
                error_code = error_json.get("error_code")
                description = error_json.get("description")
            except ValueError:
                error_code = None
                description = resp.text

            self._logger.error(
                "Telegram call failed",
                extra={
                    "method": method,
                    "status": resp.status_code,
                    "error_code": error_code,
                    "error": description,
                    "chat_id": payload.get("chat_id"),
                },
            )
            resp.raise_for_status()
        return resp.json().get("result")

    def send_message(
        self,
        chat_id: str,
        text: str,
        parse_mode: str | None = None,
        inline_keyboard: list[list[dict[str, str]]] | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if parse_mode:
            payload["parse_mode"] = parse_mode
        if inline_keyboard is not None:
            payload["reply_markup"] = {"inline_keyboard": inline_keyboard}
        return self._call("sendMessage", payload)

    def delete_message(self, chat_id: str, message_id: str) -> bool:
        return bool(self._call("deleteMessage", {"chat_id": chat_id, "message_id": int(message_id)}))

    def answer_callback_query(self, callback_query_id: str) -> None:
        self._call("answerCallbackQuery", {"callback_query_id": callback_query_id})
