from decimal import Decimal

from models import db
from ledger.records import CategoryEntry, GoalEntry


class BudgetCategory(db.Model):
    __tablename__ = "budget_categories"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), index=True, nullable=False)
    name = db.Column(db.String(120), nullable=False)
    monthly_limit = db.Column(db.Numeric(12, 2), nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    def to_entry(self) -> CategoryEntry:
        return CategoryEntry(
            id=self.id,
            owner=self.user_id,
            name=self.name,
            monthly_limit=Decimal(str(self.monthly_limit)),
            created_at=self.created_at,
        )


class SavingsGoal(db.Model):
    __tablename__ = "savings_goals"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), index=True, nullable=False)
    name = db.Column(db.String(120), nullable=False)
    target_amount = db.Column(db.Numeric(12, 2), nullable=False)
    current_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    target_date = db.Column(db.Date, nullable=True)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    def to_entry(self) -> GoalEntry:
        return GoalEntry(
            id=self.id,
            owner=self.user_id,
            name=self.name,
            target_amount=Decimal(str(self.target_amount)),
            current_amount=Decimal(str(self.current_amount or 0)),
            target_date=self.target_date,
            created_at=self.created_at,
        )
