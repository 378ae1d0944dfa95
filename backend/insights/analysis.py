from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from ledger.records import EXPENSE, INCOME, CategoryEntry, GoalEntry, TransactionEntry

ZERO = Decimal("0")
RECENT_LIMIT = 5

# Savings-rate thresholds (percent of income) used by the dashboard insights.
LOW_SAVINGS_RATE = 20
EXCELLENT_SAVINGS_RATE = 30
# A single expense category above this share of income is flagged.
HIGH_CATEGORY_SHARE = Decimal("0.3")

FORECAST_MONTHS = 12


@dataclass(frozen=True)
class LedgerSummary:
    total_income: Decimal = ZERO
    total_expenses: Decimal = ZERO
    category_breakdown: Dict[str, Decimal] = field(default_factory=dict)
    recent: Tuple[TransactionEntry, ...] = ()
    count: int = 0

    @property
    def net_balance(self) -> Decimal:
        return self.total_income - self.total_expenses

    @property
    def savings_rate(self) -> float:
        if self.total_income <= 0:
            return 0.0
        return float(self.net_balance / self.total_income * 100)


def _recency_key(t: TransactionEntry):
    return (t.occurred_on, t.created_at or datetime.min, t.id or 0)


def summarize_ledger(
    transactions: Iterable[TransactionEntry], recent_limit: int = RECENT_LIMIT
) -> LedgerSummary:
    """
    Reduce a set of transactions to income/expense totals, an expense-only
    category breakdown and the most recent entries by date.
    Totals do not depend on the input order.
    """
    txns = list(transactions)
    income = ZERO
    expenses = ZERO
    by_category: Dict[str, Decimal] = defaultdict(lambda: ZERO)

    for t in txns:
        if t.kind == INCOME:
            income += t.amount
        elif t.kind == EXPENSE:
            expenses += t.amount
            by_category[t.category] += t.amount

    recent = sorted(txns, key=_recency_key, reverse=True)[:recent_limit]
    return LedgerSummary(
        total_income=income,
        total_expenses=expenses,
        category_breakdown=dict(by_category),
        recent=tuple(recent),
        count=len(txns),
    )


def breakdown_to_json(breakdown: Dict[str, Decimal]) -> List[dict]:
    """Largest category first, for pie charts."""
    items = [{"category": k, "total": round(float(v), 2)} for k, v in breakdown.items()]
    items.sort(key=lambda x: x["total"], reverse=True)
    return items


def summary_to_json(summary: LedgerSummary) -> dict:
    return {
        "total_income": round(float(summary.total_income), 2),
        "total_expenses": round(float(summary.total_expenses), 2),
        "net_balance": round(float(summary.net_balance), 2),
        "savings_rate": round(summary.savings_rate, 1),
        "transaction_count": summary.count,
        "category_breakdown": breakdown_to_json(summary.category_breakdown),
    }


def generate_insights(summary: LedgerSummary) -> List[dict]:
    """Rule-based dashboard insights. No transactions means no insights."""
    if summary.total_income == 0 and summary.total_expenses == 0:
        return []

    insights = []
    rate = summary.savings_rate

    if rate < LOW_SAVINGS_RATE:
        insights.append(
            {
                "id": "savings-rate",
                "title": "Low Savings Rate",
                "description": (
                    "Your savings rate is below the recommended 20%. "
                    "Consider reducing expenses or increasing income."
                ),
                "type": "warning",
            }
        )

    if summary.total_expenses > summary.total_income:
        insights.append(
            {
                "id": "overspending",
                "title": "Overspending Detected",
                "description": "Your expenses exceed your income. Review your spending habits.",
                "type": "warning",
            }
        )

    if rate >= EXCELLENT_SAVINGS_RATE:
        insights.append(
            {
                "id": "good-savings",
                "title": "Excellent Savings Rate",
                "description": "Great job! You're saving more than 30% of your income.",
                "type": "success",
            }
        )

    for category, amount in summary.category_breakdown.items():
        if amount > summary.total_income * HIGH_CATEGORY_SHARE:
            insights.append(
                {
                    "id": f"category-{category}",
                    "title": "High Category Spending",
                    "description": (
                        f"{category} expenses are over 30% of your income. "
                        "Consider reducing spending in this category."
                    ),
                    "type": "warning",
                }
            )

    return insights


def _add_months(d: date, months: int) -> date:
    month_index = d.month - 1 + months
    return date(d.year + month_index // 12, month_index % 12 + 1, 1)


def forecast_savings(
    summary: LedgerSummary,
    reduction_pct: float = 20,
    *,
    months: int = FORECAST_MONTHS,
    start: Optional[date] = None,
) -> List[dict]:
    """
    Project savings month by month from the current net balance.

    ``current`` keeps today's income/expense pattern; ``potential`` assumes
    expenses shrink by ``reduction_pct`` percent. Both are floored at zero.
    """
    start = start or date.today()
    income = float(summary.total_income)
    expenses = float(summary.total_expenses)
    current_savings = income - expenses
    potential_expenses = expenses * (1 - reduction_pct / 100)

    out = []
    for i in range(months):
        month = _add_months(start, i)
        current = current_savings + (income - expenses) * i
        potential = current_savings + (income - potential_expenses) * i
        out.append(
            {
                "month": month.strftime("%b %Y"),
                "current": round(max(0.0, current), 2),
                "potential": round(max(0.0, potential), 2),
            }
        )
    return out


def _month_key(d: date) -> str:
    return d.strftime("%Y-%m")


def monthly_series(transactions: Iterable[TransactionEntry]) -> List[dict]:
    """Income and expense totals per YYYY-MM, oldest month first."""
    by_month = defaultdict(lambda: {"income": 0.0, "expenses": 0.0, "count": 0})
    for t in transactions:
        bucket = by_month[_month_key(t.occurred_on)]
        if t.kind == INCOME:
            bucket["income"] += float(t.amount)
        else:
            bucket["expenses"] += float(t.amount)
        bucket["count"] += 1

    out = []
    for period, v in by_month.items():
        out.append(
            {
                "period": period,
                "income": round(v["income"], 2),
                "expenses": round(v["expenses"], 2),
                "count": v["count"],
            }
        )
    out.sort(key=lambda x: x["period"])
    return out


def budget_utilization(
    categories: Iterable[CategoryEntry],
    transactions: Iterable[TransactionEntry],
    month: Optional[date] = None,
) -> List[dict]:
    """Spent vs monthly limit per budget category for the month of ``month``."""
    month_key = _month_key(month or date.today())
    spent: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    for t in transactions:
        if t.kind == EXPENSE and _month_key(t.occurred_on) == month_key:
            spent[t.category.strip().lower()] += t.amount

    out = []
    for c in categories:
        used = spent.get(c.name.strip().lower(), ZERO)
        pct = float(used / c.monthly_limit * 100) if c.monthly_limit else 0.0
        out.append(
            {
                "category": c.name,
                "monthly_limit": float(c.monthly_limit),
                "spent": round(float(used), 2),
                "used_pct": round(pct, 1),
                "over_budget": used > c.monthly_limit,
            }
        )
    return out


def goal_totals(goals: Iterable[GoalEntry]) -> dict:
    goals = list(goals)
    target = sum((g.target_amount for g in goals), ZERO)
    current = sum((g.current_amount for g in goals), ZERO)
    progress = min(100, int(round(current / target * 100))) if target else 0
    return {
        "goal_count": len(goals),
        "target_total": round(float(target), 2),
        "current_total": round(float(current), 2),
        "progress": progress,
    }


def period_bounds(
    period: str,
    *,
    today: Optional[date] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> Tuple[Optional[date], Optional[date]]:
    """
    Resolve a report period to inclusive date bounds.
    period: month | year | custom | all
    """
    today = today or date.today()
    if period == "month":
        first = today.replace(day=1)
        last = date.fromordinal(_add_months(first, 1).toordinal() - 1)
        return first, last
    if period == "year":
        return date(today.year, 1, 1), date(today.year, 12, 31)
    if period == "custom":
        if start is None or end is None:
            raise ValueError("custom period needs both 'from' and 'to'")
        if start > end:
            raise ValueError("'from' must not be after 'to'")
        return start, end
    if period == "all":
        return None, None
    raise ValueError(f"Unknown period: {period}")
