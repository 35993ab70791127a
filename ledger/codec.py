"""Row codec and three-file load/save for the ledger state."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .exceptions import PersistenceError
from .models import Account, Budget, Transaction, TransactionKind, format_amount
from .storage import FlatFileStorage

logger = logging.getLogger(__name__)

TRANSACTIONS_FILE = "transactions.csv"
ACCOUNTS_FILE = "accounts.csv"
BUDGETS_FILE = "budgets.csv"

TRANSACTION_ID_DELIMITER = ";"

DEFAULT_ACCOUNT_ID = 1
DEFAULT_ACCOUNT_NAME = "Default Account"


@dataclass
class LedgerState:
    accounts: List[Account] = field(default_factory=list)
    budgets: List[Budget] = field(default_factory=list)
    transactions: List[Transaction] = field(default_factory=list)


def default_account() -> Account:
    return Account(id=DEFAULT_ACCOUNT_ID, name=DEFAULT_ACCOUNT_NAME, balance=Decimal("0.00"))


def _finite_decimal(raw: str) -> Decimal:
    value = Decimal(raw.strip())
    if not value.is_finite():
        raise InvalidOperation(f"Non-finite amount: {raw!r}")
    return value


# Row encoding ---------------------------------------------------------------
def encode_transaction(transaction: Transaction) -> List[str]:
    return [
        str(transaction.id),
        transaction.date.isoformat(),
        transaction.description,
        format_amount(transaction.amount),
        transaction.category,
        transaction.kind.value,
    ]


def decode_transaction(fields: Sequence[str]) -> Optional[Transaction]:
    """Build a Transaction from a row, or ``None`` if the row is malformed."""
    if len(fields) != 6:
        return None
    raw_id, raw_date, description, raw_amount, category, raw_kind = fields
    try:
        return Transaction(
            id=int(raw_id),
            date=date.fromisoformat(raw_date.strip()),
            description=description,
            amount=_finite_decimal(raw_amount),
            category=category,
            kind=TransactionKind.parse(raw_kind),
        )
    except (ValueError, InvalidOperation):
        return None


def encode_account(account: Account) -> List[str]:
    row = [str(account.id), account.name, format_amount(account.balance)]
    if account.transactions:
        row.append(
            TRANSACTION_ID_DELIMITER.join(str(transaction.id) for transaction in account.transactions)
        )
    return row


def decode_account(fields: Sequence[str], transactions: Sequence[Transaction]) -> Optional[Account]:
    """Rebuild an Account and rejoin the transactions its row references.

    The persisted balance already includes the referenced transactions. The
    account opens at that balance less their net effect and each transaction
    is replayed through ``Account.apply``, which lands back on the persisted
    value.
    """
    if len(fields) < 3:
        return None
    try:
        account_id = int(fields[0])
        persisted_balance = _finite_decimal(fields[2])
    except (ValueError, InvalidOperation):
        return None

    owned: List[Transaction] = []
    if len(fields) > 3:
        for raw_id in fields[3].split(TRANSACTION_ID_DELIMITER):
            try:
                transaction_id = int(raw_id)
            except ValueError:
                continue
            match = next((t for t in transactions if t.id == transaction_id), None)
            if match is not None:
                owned.append(match)

    try:
        opening = persisted_balance - sum((t.signed_amount for t in owned), Decimal("0"))
        account = Account(id=account_id, name=fields[1], balance=opening)
        for transaction in owned:
            account.apply(transaction)
    except ArithmeticError:
        return None
    return account


def encode_budget(budget: Budget) -> List[str]:
    return [budget.category, format_amount(budget.limit), format_amount(budget.current_spending)]


def decode_budget(fields: Sequence[str]) -> Optional[Budget]:
    if len(fields) != 3:
        return None
    try:
        return Budget(
            category=fields[0],
            limit=_finite_decimal(fields[1]),
            current_spending=_finite_decimal(fields[2]),
        )
    except InvalidOperation:
        return None


class LedgerCodec:
    """Loads and saves the full ledger state across the three flat files."""

    def __init__(self, storage: FlatFileStorage) -> None:
        self._storage = storage

    @property
    def storage(self) -> FlatFileStorage:
        return self._storage

    def load(self) -> LedgerState:
        # Transactions first: account rows reference them by id.
        transactions = self.load_transactions()
        accounts = self.load_accounts(transactions)
        budgets = self.load_budgets()
        logger.info(
            "Loaded %d transactions, %d accounts, %d budgets from %s",
            len(transactions),
            len(accounts),
            len(budgets),
            self._storage.base_path,
        )
        return LedgerState(accounts=accounts, budgets=budgets, transactions=transactions)

    def load_transactions(self) -> List[Transaction]:
        rows = self._storage.load_rows(TRANSACTIONS_FILE)
        if rows is None:
            return []
        return self._decode_rows(TRANSACTIONS_FILE, rows, decode_transaction)

    def load_accounts(self, transactions: Sequence[Transaction]) -> List[Account]:
        rows = self._storage.load_rows(ACCOUNTS_FILE)
        if rows is None:
            logger.info("No %s found, seeding %s", ACCOUNTS_FILE, DEFAULT_ACCOUNT_NAME)
            return [default_account()]
        return self._decode_rows(ACCOUNTS_FILE, rows, lambda fields: decode_account(fields, transactions))

    def load_budgets(self) -> List[Budget]:
        rows = self._storage.load_rows(BUDGETS_FILE)
        if rows is None:
            return []
        return self._decode_rows(BUDGETS_FILE, rows, decode_budget)

    def save(self, accounts: Sequence[Account], budgets: Sequence[Budget]) -> List[str]:
        """Rewrite every file from the given state and return the resources that failed."""
        encoders: List[Tuple[str, Callable[[], List[List[str]]]]] = [
            # One row per occurrence, across all accounts.
            (TRANSACTIONS_FILE, lambda: [
                encode_transaction(transaction)
                for account in accounts
                for transaction in account.transactions
            ]),
            (ACCOUNTS_FILE, lambda: [encode_account(account) for account in accounts]),
            (BUDGETS_FILE, lambda: [encode_budget(budget) for budget in budgets]),
        ]
        failed: List[str] = []
        for resource, encode in encoders:
            try:
                self._storage.save_rows(resource, encode())
            except (PersistenceError, ArithmeticError, ValueError) as exc:
                logger.error("Failed to save %s: %s", resource, exc)
                failed.append(resource)
        return failed

    @staticmethod
    def _decode_rows(resource: str, rows: Iterable[Sequence[str]], decode) -> list:
        records = []
        for line_number, fields in enumerate(rows, start=1):
            record = decode(fields)
            if record is None:
                logger.debug("Skipping malformed row %d in %s", line_number, resource)
                continue
            records.append(record)
        return records
