"""
Owner-scoped access to the financial data store.

Every method takes the owner identity first and filters on it; there is no
way to read or change another user's rows through this class. Each call runs
inside its own app context so it gets its own SQLAlchemy session, which lets
the copilot fan reads out to worker threads.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import List, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from errors import InvalidRequestError, PersistenceError
from models import db
from models.budget_models import BudgetCategory, SavingsGoal
from models.chat_model import ChatMessage
from models.transaction_model import TransactionRecord
from .records import (
    CHAT_ROLES,
    TRANSACTION_KINDS,
    CategoryEntry,
    ChatTurn,
    GoalEntry,
    TransactionEntry,
)

logger = logging.getLogger(__name__)

GOAL_FIELDS = ("name", "target_amount", "current_amount", "target_date")


def _require_owner(owner: str) -> str:
    if not owner or not str(owner).strip():
        raise InvalidRequestError("An owner id is required for every data access")
    return str(owner)


class FinanceStore:
    def __init__(self, app=None):
        self._app = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        self._app = app
        app.extensions["finance_store"] = self

    @contextmanager
    def _session(self, action: str):
        with self._app.app_context():
            try:
                yield db.session
            except SQLAlchemyError as e:
                db.session.rollback()
                logger.error("data store failed to %s: %s", action, e)
                raise PersistenceError(f"Could not {action}") from e

    # -------------------------
    # Transactions
    # -------------------------

    def list_transactions(
        self,
        owner: str,
        *,
        kind: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[TransactionEntry]:
        """Owner's transactions, most recent date first."""
        owner = _require_owner(owner)
        with self._session("load transactions"):
            q = TransactionRecord.query.filter_by(user_id=owner)
            if kind:
                q = q.filter_by(type=kind)
            if start:
                q = q.filter(TransactionRecord.date >= start)
            if end:
                q = q.filter(TransactionRecord.date <= end)
            rows = q.order_by(
                TransactionRecord.date.desc(),
                TransactionRecord.created_at.desc(),
                TransactionRecord.id.desc(),
            ).all()
            return [r.to_entry() for r in rows]

    def add_transaction(
        self,
        owner: str,
        *,
        kind: str,
        amount: Decimal,
        category: str,
        occurred_on: date,
        description: Optional[str] = None,
    ) -> TransactionEntry:
        owner = _require_owner(owner)
        if kind not in TRANSACTION_KINDS:
            raise InvalidRequestError(f"Unknown transaction type: {kind}")
        with self._session("save transaction") as session:
            row = TransactionRecord(
                user_id=owner,
                type=kind,
                amount=amount,
                category=category,
                description=description,
                date=occurred_on,
            )
            session.add(row)
            session.commit()
            return row.to_entry()

    def delete_transaction(self, owner: str, transaction_id: int) -> bool:
        owner = _require_owner(owner)
        with self._session("delete transaction") as session:
            deleted = TransactionRecord.query.filter_by(
                id=transaction_id, user_id=owner
            ).delete()
            session.commit()
            return deleted > 0

    # -------------------------
    # Chat messages
    # -------------------------

    def recent_messages(self, owner: str, limit: int = 10) -> List[ChatTurn]:
        """Up to ``limit`` turns, newest first."""
        owner = _require_owner(owner)
        with self._session("load chat history"):
            rows = (
                ChatMessage.query.filter_by(user_id=owner)
                .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
                .limit(limit)
                .all()
            )
            return [r.to_turn() for r in rows]

    def save_message(self, owner: str, role: str, content: str) -> ChatTurn:
        owner = _require_owner(owner)
        if role not in CHAT_ROLES:
            raise InvalidRequestError(f"Unknown chat role: {role}")
        with self._session("save chat message") as session:
            row = ChatMessage(user_id=owner, role=role, content=content)
            session.add(row)
            session.commit()
            return row.to_turn()

    # -------------------------
    # Budget categories
    # -------------------------

    def list_categories(self, owner: str) -> List[CategoryEntry]:
        owner = _require_owner(owner)
        with self._session("load budget categories"):
            rows = (
                BudgetCategory.query.filter_by(user_id=owner)
                .order_by(BudgetCategory.name)
                .all()
            )
            return [r.to_entry() for r in rows]

    def add_category(self, owner: str, *, name: str, monthly_limit: Decimal) -> CategoryEntry:
        owner = _require_owner(owner)
        with self._session("save budget category") as session:
            row = BudgetCategory(user_id=owner, name=name, monthly_limit=monthly_limit)
            session.add(row)
            session.commit()
            return row.to_entry()

    def delete_category(self, owner: str, category_id: int) -> bool:
        owner = _require_owner(owner)
        with self._session("delete budget category") as session:
            deleted = BudgetCategory.query.filter_by(id=category_id, user_id=owner).delete()
            session.commit()
            return deleted > 0

    # -------------------------
    # Savings goals
    # -------------------------

    def list_goals(self, owner: str) -> List[GoalEntry]:
        owner = _require_owner(owner)
        with self._session("load savings goals"):
            rows = SavingsGoal.query.filter_by(user_id=owner).order_by(SavingsGoal.id).all()
            return [r.to_entry() for r in rows]

    def add_goal(
        self,
        owner: str,
        *,
        name: str,
        target_amount: Decimal,
        current_amount: Decimal = Decimal("0"),
        target_date: Optional[date] = None,
    ) -> GoalEntry:
        owner = _require_owner(owner)
        with self._session("save savings goal") as session:
            row = SavingsGoal(
                user_id=owner,
                name=name,
                target_amount=target_amount,
                current_amount=current_amount,
                target_date=target_date,
            )
            session.add(row)
            session.commit()
            return row.to_entry()

    def update_goal(self, owner: str, goal_id: int, **changes) -> Optional[GoalEntry]:
        """Apply a partial update; returns None when the goal is not the owner's."""
        owner = _require_owner(owner)
        unknown = set(changes) - set(GOAL_FIELDS)
        if unknown:
            raise InvalidRequestError(f"Cannot update goal fields: {', '.join(sorted(unknown))}")
        with self._session("update savings goal") as session:
            row = SavingsGoal.query.filter_by(id=goal_id, user_id=owner).first()
            if row is None:
                return None
            for field, value in changes.items():
                setattr(row, field, value)
            session.commit()
            return row.to_entry()

    def delete_goal(self, owner: str, goal_id: int) -> bool:
        owner = _require_owner(owner)
        with self._session("delete savings goal") as session:
            deleted = SavingsGoal.query.filter_by(id=goal_id, user_id=owner).delete()
            session.commit()
            return deleted > 0


def get_store() -> FinanceStore:
    return current_app.extensions["finance_store"]
