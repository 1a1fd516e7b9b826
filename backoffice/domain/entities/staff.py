from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class StaffDocuments:
    emirates_id: str | None = None
    passport: str | None = None
    visa: str | None = None
    labour_card: str | None = None


@dataclass(frozen=True)
class Staff:
    name: str
    phone: str
    role: str = ""
    availability_status: str = "free"  # "free" or "busy"
    salary: Decimal = Decimal("0")
    joining_date: datetime = field(default_factory=datetime.now)
    documents: StaffDocuments = StaffDocuments()
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
