from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable


class SchedulerPort(ABC):
    @abstractmethod
    def schedule(self, key: str, delay_seconds: float, callback: Callable[[], None]) -> None:
        """Run callback after delay. Replaces any task already scheduled under key."""
        raise NotImplementedError

    @abstractmethod
    def cancel(self, key: str) -> bool:
        """Cancel the task scheduled under key. Returns True if one was pending."""
        raise NotImplementedError
