from __future__ import annotations

import logging

from backoffice.application.ports.chat_gateway import ChatGatewayPort
from backoffice.application.ports.session_store import SessionStorePort
from backoffice.domain.entities.event import ChoiceRows


class SendReplyUseCase:
    def __init__(self, gateway: ChatGatewayPort, sessions: SessionStorePort) -> None:
        self._gateway = gateway
        self._sessions = sessions
        self._logger = logging.getLogger(__name__)

    def execute(
        self,
        chat_id: str,
        text: str,
        choices: ChoiceRows | None = None,
        parse_mode: str | None = None,
    ) -> str:
        """Send a reply and track it for cleanup. Returns the outbound message id."""
        if choices:
            message_id = self._gateway.send_choices(chat_id, text, choices)
        else:
            message_id = self._gateway.send_text(chat_id, text, parse_mode=parse_mode)
        self._sessions.track(chat_id, message_id)
        self._logger.debug("Reply sent", extra={"chat_id": chat_id, "message_id": message_id})
        return message_id
