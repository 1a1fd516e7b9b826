from __future__ import annotations

import itertools
import logging
import threading
import weakref
from typing import Callable

from backoffice.application.ports.chat_gateway import ChatGatewayPort
from backoffice.application.ports.scheduler import SchedulerPort
from backoffice.application.ports.session_store import SessionStorePort
from backoffice.domain.entities.session import FlowKind, Session


class InMemorySessionStore(SessionStorePort):
    """
    Process-local sessions. Nothing here survives a restart: a chat that was
    mid-flow simply has to start again from the menu.
    """

    def __init__(self, gateway: ChatGatewayPort, scheduler: SchedulerPort) -> None:
        self._gateway = gateway
        self._scheduler = scheduler
        self._sessions: dict[str, Session] = {}
        self._tracked: dict[str, set[str]] = {}
        self._generations: dict[str, int] = {}
        self._locks: weakref.WeakValueDictionary[str, threading.RLock] = weakref.WeakValueDictionary()
        self._next_generation = itertools.count(1)
        self._lock_lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def lock(self, chat_id: str) -> threading.RLock:
        # entries live only while some caller holds or waits on the lock
        with self._lock_lock:
            lock = self._locks.get(chat_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[chat_id] = lock
            return lock

    def get(self, chat_id: str) -> Session | None:
        with self.lock(chat_id):
            return self._sessions.get(chat_id)

    def create(self, chat_id: str, flow: FlowKind) -> Session:
        with self.lock(chat_id):
            if self._scheduler.cancel(chat_id):
                self._logger.info("Pending cleanup cancelled", extra={"chat_id": chat_id, "flow": flow.value})
            generation = next(self._next_generation)
            self._generations[chat_id] = generation
            session = Session(chat_id=chat_id, flow=flow, generation=generation)
            self._sessions[chat_id] = session
            return session

    def update(self, chat_id: str, mutator: Callable[[Session], None]) -> Session | None:
        with self.lock(chat_id):
            session = self._sessions.get(chat_id)
            if session is None:
                return None
            mutator(session)
            return session

    def destroy(self, chat_id: str) -> None:
        with self.lock(chat_id):
            self._scheduler.cancel(chat_id)
            self._sessions.pop(chat_id, None)
            self._generations.pop(chat_id, None)

    def schedule_destroy(self, chat_id: str, delay_seconds: float) -> None:
        with self.lock(chat_id):
            generation = self._generations.get(chat_id, 0)
        self._scheduler.schedule(chat_id, delay_seconds, lambda: self._teardown(chat_id, generation))

    def track(self, chat_id: str, message_id: str) -> None:
        if not message_id:
            return
        with self.lock(chat_id):
            self._tracked.setdefault(chat_id, set()).add(str(message_id))

    def tracked(self, chat_id: str) -> set[str]:
        with self.lock(chat_id):
            return set(self._tracked.get(chat_id, set()))

    def _teardown(self, chat_id: str, generation: int) -> None:
        with self.lock(chat_id):
            if self._generations.get(chat_id, 0) != generation:
                # a newer flow started after the cleanup was scheduled
                self._logger.info("Stale cleanup skipped", extra={"chat_id": chat_id})
                return
            message_ids = self._tracked.pop(chat_id, set())
            failed = 0
            for message_id in sorted(message_ids):
                if not self._gateway.delete_message(chat_id, message_id):
                    failed += 1
            self._sessions.pop(chat_id, None)
            self._generations.pop(chat_id, None)
        self._logger.info(
            "Chat cleaned up",
            extra={"chat_id": chat_id, "deleted": len(message_ids) - failed, "failed": failed},
        )
