"""
Immutable views of stored ledger rows.

The store converts ORM rows into these before returning them so callers can
hand them to worker threads or keep them after the session is gone.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_KINDS = (INCOME, EXPENSE)

USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"
CHAT_ROLES = (USER_ROLE, ASSISTANT_ROLE)


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class TransactionEntry:
    id: Optional[int]
    owner: str
    kind: str
    amount: Decimal
    category: str
    occurred_on: date
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.kind,
            "amount": float(self.amount),
            "category": self.category,
            "description": self.description,
            "date": _iso(self.occurred_on),
            "created_at": _iso(self.created_at),
        }


@dataclass(frozen=True)
class ChatTurn:
    role: str
    content: str
    id: Optional[int] = None
    owner: Optional[str] = None
    created_at: Optional[datetime] = None

    def line(self) -> str:
        return f"{self.role}: {self.content}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "created_at": _iso(self.created_at),
        }


@dataclass(frozen=True)
class CategoryEntry:
    id: int
    owner: str
    name: str
    monthly_limit: Decimal
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "monthly_limit": float(self.monthly_limit),
            "created_at": _iso(self.created_at),
        }


@dataclass(frozen=True)
class GoalEntry:
    id: int
    owner: str
    name: str
    target_amount: Decimal
    current_amount: Decimal
    target_date: Optional[date] = None
    created_at: Optional[datetime] = None

    @property
    def progress(self) -> int:
        """Percent of the target reached, rounded and capped at 100."""
        if not self.target_amount:
            return 0
        pct = self.current_amount / self.target_amount * 100
        return min(100, int(round(pct)))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "target_amount": float(self.target_amount),
            "current_amount": float(self.current_amount),
            "target_date": _iso(self.target_date),
            "progress": self.progress,
            "created_at": _iso(self.created_at),
        }
