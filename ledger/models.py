"""Data models for the personal finance ledger domain."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List

__all__ = ["Account", "Budget", "Transaction", "TransactionKind", "format_amount"]


def format_amount(amount: Decimal) -> str:
    """Render an amount with exactly two fraction digits."""
    return f"{amount:.2f}"


class TransactionKind(str, Enum):
    INCOME = "Income"
    EXPENSE = "Expense"

    @classmethod
    def parse(cls, value: str) -> "TransactionKind":
        """Resolve a persisted or typed label such as ``Expense`` or ``income``."""
        canonical = value.strip().lower()
        for kind in cls:
            if kind.value.lower() == canonical:
                return kind
        raise ValueError(f"Unknown transaction kind: {value!r}")


@dataclass(frozen=True)
class Transaction:
    id: int
    date: date
    description: str
    amount: Decimal
    category: str
    kind: TransactionKind

    @property
    def signed_amount(self) -> Decimal:
        """Effect of this transaction on an account balance."""
        if self.kind is TransactionKind.INCOME:
            return self.amount
        return -self.amount

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "description": self.description,
            "amount": format_amount(self.amount),
            "category": self.category,
            "kind": self.kind.value,
        }


@dataclass
class Account:
    id: int
    name: str
    balance: Decimal = Decimal("0.00")
    transactions: List[Transaction] = field(default_factory=list)

    def apply(self, transaction: Transaction) -> None:
        """Take ownership of ``transaction`` and move the balance by its amount.

        Income raises the balance and expense lowers it. The amount is used as
        given, so a negative amount moves the balance the other way.
        """
        self.transactions.append(transaction)
        self.balance += transaction.signed_amount

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "balance": format_amount(self.balance),
            "transaction_ids": [transaction.id for transaction in self.transactions],
        }


@dataclass
class Budget:
    category: str
    limit: Decimal
    current_spending: Decimal = Decimal("0.00")

    @property
    def remaining(self) -> Decimal:
        # Goes negative once spending passes the limit; nothing is enforced.
        return self.limit - self.current_spending

    def accumulate(self, amount: Decimal) -> None:
        self.current_spending += amount

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "limit": format_amount(self.limit),
            "current_spending": format_amount(self.current_spending),
            "remaining": format_amount(self.remaining),
        }
