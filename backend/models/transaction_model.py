from decimal import Decimal

from models import db
from ledger.records import TransactionEntry


class TransactionRecord(db.Model):
    """
    A single income or expense entry owned by one user.
    The owner is the JWT identity string, so rows created through an
    external identity provider fit without a users row.
    """

    __tablename__ = "transactions"

    id = db.Column(db.Integer, primary_key=True)

    # Ownership
    user_id = db.Column(db.String(64), index=True, nullable=False)

    # Core transaction data
    type = db.Column(db.String(10), nullable=False)  # income | expense
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    category = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)
    date = db.Column(db.Date, nullable=False)

    created_at = db.Column(db.DateTime, server_default=db.func.now())

    __table_args__ = (
        db.CheckConstraint("amount >= 0", name="ck_transaction_amount_non_negative"),
        db.Index("ix_transactions_user_date", "user_id", "date"),
    )

    def to_entry(self) -> TransactionEntry:
        return TransactionEntry(
            id=self.id,
            owner=self.user_id,
            kind=self.type,
            amount=Decimal(str(self.amount)),
            category=self.category,
            description=self.description,
            occurred_on=self.date,
            created_at=self.created_at,
        )
