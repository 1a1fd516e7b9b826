from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Callable

from backoffice.domain.entities.session import FlowKind, Session


class SessionStorePort(ABC):
    @abstractmethod
    def get(self, chat_id: str) -> Session | None:
        raise NotImplementedError

    @abstractmethod
    def create(self, chat_id: str, flow: FlowKind) -> Session:
        """
        Start a fresh session for chat_id, replacing any existing one.
        Any pending deferred teardown for the chat is cancelled.
        """
        raise NotImplementedError

    @abstractmethod
    def update(self, chat_id: str, mutator: Callable[[Session], None]) -> Session | None:
        raise NotImplementedError

    @abstractmethod
    def destroy(self, chat_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def schedule_destroy(self, chat_id: str, delay_seconds: float) -> None:
        """
        Tear the chat down after a delay: delete every tracked outbound
        message (best effort) and drop the session.
        """
        raise NotImplementedError

    @abstractmethod
    def track(self, chat_id: str, message_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def tracked(self, chat_id: str) -> set[str]:
        raise NotImplementedError

    @abstractmethod
    def lock(self, chat_id: str) -> AbstractContextManager:
        """Per-chat lock; events and teardown for one chat never interleave."""
        raise NotImplementedError
