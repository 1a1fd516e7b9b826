from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Client:
    phone: str  # normalized, digits only
    address: str
    name: str = ""
    email: str = ""
    gender: str = ""  # "Male", "Female" or ""
    map_link: str = ""
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
