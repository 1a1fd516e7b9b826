from __future__ import annotations

from abc import ABC, abstractmethod

from backoffice.domain.entities.event import ChatEvent, ChoiceRows


class ChatGatewayPort(ABC):
    @abstractmethod
    def send_text(self, chat_id: str, text: str, parse_mode: str | None = None) -> str:
        """Send a plain text message. Returns the outbound message id."""
        raise NotImplementedError

    @abstractmethod
    def send_choices(self, chat_id: str, text: str, choices: ChoiceRows) -> str:
        """Send a message with button rows. Returns the outbound message id."""
        raise NotImplementedError

    @abstractmethod
    def delete_message(self, chat_id: str, message_id: str) -> bool:
        """
        Delete a previously sent message.
        Must never raise: returns False when the platform refuses or fails.
        """
        raise NotImplementedError

    def acknowledge(self, event: ChatEvent) -> None:
        """Acknowledge a button press where the platform requires it."""
        return None
