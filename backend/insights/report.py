from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple

from errors import InvalidRequestError
from ledger.records import TransactionEntry
from .analysis import (
    LedgerSummary,
    breakdown_to_json,
    monthly_series,
    period_bounds,
    summarize_ledger,
    summary_to_json,
)

PERIODS = ("month", "year", "custom", "all")


@dataclass(frozen=True)
class PeriodReport:
    period: str
    start: Optional[date]
    end: Optional[date]
    summary: LedgerSummary
    transactions: Tuple[TransactionEntry, ...]

    @property
    def label(self) -> str:
        if self.start is None:
            return "All time"
        return f"{self.start.isoformat()} to {self.end.isoformat()}"

    def to_dict(self) -> dict:
        return {
            "period": self.period,
            "from": self.start.isoformat() if self.start else None,
            "to": self.end.isoformat() if self.end else None,
            "totals": summary_to_json(self.summary),
            "by_month": monthly_series(self.transactions),
            "expense_categories": breakdown_to_json(self.summary.category_breakdown),
            "transactions": [t.to_dict() for t in self.transactions],
        }


def build_period_report(
    store,
    owner: str,
    period: str = "month",
    *,
    start: Optional[date] = None,
    end: Optional[date] = None,
    today: Optional[date] = None,
) -> PeriodReport:
    """Owner's transactions within a report period, with totals."""
    try:
        lo, hi = period_bounds(period, today=today, start=start, end=end)
    except ValueError as e:
        raise InvalidRequestError(str(e), hint=f"period is one of: {', '.join(PERIODS)}")

    txns: List[TransactionEntry] = store.list_transactions(owner, start=lo, end=hi)
    return PeriodReport(
        period=period,
        start=lo,
        end=hi,
        summary=summarize_ledger(txns),
        transactions=tuple(txns),
    )
