from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


def new_expense_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class Expense:
    category: str
    description: str
    amount: Decimal
    date: datetime = field(default_factory=datetime.now)
    expense_id: str = field(default_factory=new_expense_id)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
