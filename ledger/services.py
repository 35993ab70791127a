"""Framework-agnostic business services for the ledger."""

from __future__ import annotations

import atexit
import logging
import signal
import sys
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from .codec import LedgerCodec
from .models import Account, Budget, Transaction, TransactionKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IncomeExpenseReport:
    total_income: Decimal
    total_expense: Decimal

    @property
    def net(self) -> Decimal:
        return self.total_income - self.total_expense

    def to_dict(self) -> Dict[str, str]:
        return {
            "total_income": f"{self.total_income:.2f}",
            "total_expense": f"{self.total_expense:.2f}",
            "net": f"{self.net:.2f}",
        }


class LedgerService:
    """Owns accounts and budgets, allocates transaction ids and aggregates totals."""

    def __init__(self, codec: LedgerCodec) -> None:
        self._codec = codec
        state = codec.load()  # Hydrate in-memory state from persistence on construction.
        self._accounts: List[Account] = state.accounts
        self._budgets: List[Budget] = state.budgets
        self._next_transaction_id = max((t.id for t in state.transactions), default=0) + 1

    # Public API -----------------------------------------------------------
    @property
    def next_transaction_id(self) -> int:
        return self._next_transaction_id

    def add_transaction(
        self,
        account_id: int,
        description: str,
        amount: Decimal,
        category: str,
        on: date,
        kind: TransactionKind,
    ) -> Optional[Transaction]:
        """Record a transaction against ``account_id``.

        The id is consumed even when no account matches; in that case the
        transaction is dropped and ``None`` is returned. Expenses also count
        towards the first budget whose category matches ignoring case.
        """
        transaction = Transaction(
            id=self._allocate_id(),
            date=on,
            description=description,
            amount=amount,
            category=category,
            kind=kind,
        )
        account = self.get_account_by_id(account_id)
        if account is None:
            logger.debug("No account %s, discarding transaction %d", account_id, transaction.id)
            return None

        account.apply(transaction)
        if kind is TransactionKind.EXPENSE:
            budget = self._find_budget(category)
            if budget is not None:
                budget.accumulate(amount)
        return transaction

    def get_account_by_id(self, account_id: int) -> Optional[Account]:
        return next((account for account in self._accounts if account.id == account_id), None)

    def get_accounts(self) -> List[Account]:
        return list(self._accounts)

    def get_budgets(self) -> List[Budget]:
        return list(self._budgets)

    def add_budget(self, category: str, limit: Decimal) -> Budget:
        # Duplicate categories are allowed; expenses only reach the first one.
        budget = Budget(category=category, limit=limit, current_spending=Decimal("0.00"))
        self._budgets.append(budget)
        return budget

    def get_all_transactions(self) -> List[Transaction]:
        """Every transaction across all accounts, newest date first."""
        transactions = [t for account in self._accounts for t in account.transactions]
        # sorted() is stable, so equal dates keep their account/insertion order.
        return sorted(transactions, key=lambda t: t.date, reverse=True)

    def get_total_balance(self) -> Decimal:
        return sum((account.balance for account in self._accounts), start=Decimal("0.00"))

    def get_category_spending(self) -> Dict[str, Decimal]:
        # Keys are exact-case, unlike budget matching in add_transaction.
        spending: Dict[str, Decimal] = {}
        for account in self._accounts:
            for transaction in account.transactions:
                if transaction.kind is TransactionKind.EXPENSE:
                    spending[transaction.category] = (
                        spending.get(transaction.category, Decimal("0.00")) + transaction.amount
                    )
        return spending

    def get_income_expense_report(self) -> IncomeExpenseReport:
        income = Decimal("0.00")
        expense = Decimal("0.00")
        for account in self._accounts:
            for transaction in account.transactions:
                if transaction.kind is TransactionKind.INCOME:
                    income += transaction.amount
                else:
                    expense += transaction.amount
        return IncomeExpenseReport(total_income=income, total_expense=expense)

    def save_data(self) -> List[str]:
        """Rewrite all ledger files; returns the resources that could not be written."""
        failed = self._codec.save(self._accounts, self._budgets)
        if failed:
            logger.error("Ledger saved with failures: %s", ", ".join(failed))
        else:
            logger.info("Ledger saved to %s", self._codec.storage.base_path)
        return failed

    # Internal helpers -----------------------------------------------------
    def _allocate_id(self) -> int:
        transaction_id = self._next_transaction_id
        self._next_transaction_id += 1
        return transaction_id

    def _find_budget(self, category: str) -> Optional[Budget]:
        canonical = category.lower()
        return next((b for b in self._budgets if b.category.lower() == canonical), None)


def install_exit_save(service: LedgerService) -> None:
    """Save ``service`` once when the process exits or receives SIGTERM/SIGHUP."""
    saved = False

    def _save_once() -> None:
        nonlocal saved
        if saved:
            return
        saved = True
        try:
            service.save_data()
        except Exception:  # pragma: no cover - last-chance save must not mask exit
            logger.exception("Exit save failed")

    def _on_signal(signum, frame) -> None:
        logger.info("Received signal %d, saving ledger", signum)
        _save_once()
        sys.exit(128 + signum)

    atexit.register(_save_once)
    for name in ("SIGTERM", "SIGHUP"):
        signum = getattr(signal, name, None)
        if signum is not None:
            signal.signal(signum, _on_signal)
