from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Tuple

from errors import PersistenceError
from insights.analysis import RECENT_LIMIT, ZERO, LedgerSummary, summarize_ledger
from ledger.records import ChatTurn, TransactionEntry

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 10


@dataclass(frozen=True)
class FinancialContext:
    """What the copilot knows about one user when it builds a prompt."""

    total_income: Decimal = ZERO
    total_expenses: Decimal = ZERO
    category_breakdown: Dict[str, Decimal] = field(default_factory=dict)
    recent_transactions: Tuple[TransactionEntry, ...] = ()
    recent_turns: Tuple[ChatTurn, ...] = ()

    @property
    def net_balance(self) -> Decimal:
        return self.total_income - self.total_expenses

    def transcript(self) -> str:
        return "\n".join(turn.line() for turn in self.recent_turns)


class ContextAggregator:
    """
    Gathers a user's ledger totals and recent chat turns.

    The transaction read and the history read are independent, so they run
    side by side and are joined before the context is assembled. Either read
    failing leaves its half empty; the conversation still goes ahead.
    """

    def __init__(self, store, *, history_limit: int = DEFAULT_HISTORY_LIMIT, recent_limit: int = RECENT_LIMIT):
        self._store = store
        self.history_limit = history_limit
        self.recent_limit = recent_limit

    def gather(self, owner: str) -> FinancialContext:
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="copilot-context") as pool:
            txn_future = pool.submit(self._load_summary, owner)
            turns_future = pool.submit(self._load_turns, owner)
            summary = txn_future.result()
            turns = turns_future.result()

        return FinancialContext(
            total_income=summary.total_income,
            total_expenses=summary.total_expenses,
            category_breakdown=summary.category_breakdown,
            recent_transactions=summary.recent,
            recent_turns=tuple(turns),
        )

    def _load_summary(self, owner: str) -> LedgerSummary:
        try:
            transactions = self._store.list_transactions(owner)
        except PersistenceError as e:
            logger.warning("transactions unavailable for %s, using empty totals: %s", owner, e)
            return LedgerSummary()
        return summarize_ledger(transactions, recent_limit=self.recent_limit)

    def _load_turns(self, owner: str) -> List[ChatTurn]:
        try:
            newest_first = self._store.recent_messages(owner, limit=self.history_limit)
        except PersistenceError as e:
            logger.warning("chat history unavailable for %s: %s", owner, e)
            return []
        # store hands back newest first; prompts read oldest to newest
        return list(reversed(newest_first))
