"""Core business logic package for the personal finance ledger."""

from .models import Account, Budget, Transaction, TransactionKind
from .codec import LedgerCodec, LedgerState
from .services import IncomeExpenseReport, LedgerService, install_exit_save
from .storage import FlatFileStorage
from .exceptions import PersistenceError, ValidationError, RecordNotFoundError

__all__ = [
    "Account",
    "Budget",
    "Transaction",
    "TransactionKind",
    "LedgerCodec",
    "LedgerState",
    "IncomeExpenseReport",
    "LedgerService",
    "install_exit_save",
    "FlatFileStorage",
    "PersistenceError",
    "ValidationError",
    "RecordNotFoundError",
]
