"""Console interface for the personal finance ledger."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Callable, Dict, List, Optional, TextIO

from ledger.codec import LedgerCodec
from ledger.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from ledger.models import Account, Budget, Transaction, TransactionKind
from ledger.services import LedgerService, install_exit_save
from ledger.storage import FlatFileStorage
from ledger.validators import (
    parse_account_id,
    parse_amount,
    parse_date,
    parse_kind,
    parse_limit,
    validate_text,
)


def _argument(parser: Callable[[object, str], object], field: str) -> Callable[[str], object]:
    """Adapt a ledger validator into an argparse ``type`` callable."""

    def convert(value: str) -> object:
        try:
            return parser(value, field)
        except ValidationError as exc:
            raise argparse.ArgumentTypeError(str(exc)) from exc

    return convert


def _load_service(data_dir: Path) -> LedgerService:
    return LedgerService(LedgerCodec(FlatFileStorage(data_dir)))


def _format_transaction(transaction: Transaction) -> str:
    sign = "+" if transaction.kind is TransactionKind.INCOME else "-"
    return (
        f"[{transaction.id}] {transaction.date.isoformat()} {sign}{transaction.amount:.2f}"
        f" {transaction.category} | {transaction.description}"
    )


def _format_account(account: Account) -> str:
    return f"[{account.id}] {account.name}: {account.balance:.2f} ({len(account.transactions)} transactions)"


def _format_budget(budget: Budget) -> str:
    return (
        f"{budget.category}: spent {budget.current_spending:.2f} of {budget.limit:.2f}"
        f" (remaining {budget.remaining:.2f})"
    )


def _save(service: LedgerService) -> None:
    failed = service.save_data()
    if failed:
        raise PersistenceError(f"Could not write {', '.join(failed)}")


def handle_accounts(args: argparse.Namespace, service: LedgerService) -> None:
    if args.id is not None:
        account = service.get_account_by_id(args.id)
        if account is None:
            raise RecordNotFoundError(f"Account {args.id} not found")
        print(_format_account(account))
        for transaction in account.transactions:
            print("  " + _format_transaction(transaction))
        return
    for account in service.get_accounts():
        print(_format_account(account))


def handle_transactions(args: argparse.Namespace, service: LedgerService) -> None:
    transactions = service.get_all_transactions()
    if not transactions:
        print("No transactions found.")
        return
    for transaction in transactions:
        print(_format_transaction(transaction))


def handle_add_transaction(args: argparse.Namespace, service: LedgerService) -> None:
    transaction = service.add_transaction(
        args.account_id,
        args.description,
        args.amount,
        args.category,
        args.date or date.today(),
        args.kind,
    )
    if transaction is None:
        raise RecordNotFoundError(f"Account {args.account_id} not found")
    _save(service)
    print("Transaction added: " + _format_transaction(transaction))


def handle_budgets(args: argparse.Namespace, service: LedgerService) -> None:
    budgets = service.get_budgets()
    if not budgets:
        print("No budgets found.")
        return
    for budget in budgets:
        print(_format_budget(budget))


def handle_add_budget(args: argparse.Namespace, service: LedgerService) -> None:
    budget = service.add_budget(args.category, args.limit)
    _save(service)
    print("Budget added: " + _format_budget(budget))


def handle_balance(args: argparse.Namespace, service: LedgerService) -> None:
    print(f"Total balance: {service.get_total_balance():.2f}")


def handle_spending(args: argparse.Namespace, service: LedgerService) -> None:
    spending = service.get_category_spending()
    if not spending:
        print("No expenses recorded.")
        return
    for category, amount in spending.items():
        print(f"{category}: {amount:.2f}")


def handle_report(args: argparse.Namespace, service: LedgerService) -> None:
    report = service.get_income_expense_report()
    print(f"Income:  {report.total_income:.2f}")
    print(f"Expense: {report.total_expense:.2f}")
    print(f"Net:     {report.net:.2f}")


HANDLERS: Dict[str, Callable[[argparse.Namespace, LedgerService], None]] = {
    "accounts": handle_accounts,
    "transactions": handle_transactions,
    "add-transaction": handle_add_transaction,
    "budgets": handle_budgets,
    "add-budget": handle_add_budget,
    "balance": handle_balance,
    "spending": handle_spending,
    "report": handle_report,
}


class LedgerShell:
    """Line-oriented menu over a ledger service; saves on exit."""

    MENU = (
        "1) Add transaction",
        "2) Add budget",
        "3) List accounts",
        "4) List transactions",
        "5) List budgets",
        "6) Spending by category",
        "7) Income/expense report",
        "8) Save",
        "0) Exit",
    )

    def __init__(self, service: LedgerService, stdin: TextIO = sys.stdin, stdout: TextIO = sys.stdout) -> None:
        self._service = service
        self._stdin = stdin
        self._stdout = stdout

    def run(self) -> None:
        actions: Dict[str, Callable[[], None]] = {
            "1": self._add_transaction,
            "2": self._add_budget,
            "3": lambda: self._each(_format_account, self._service.get_accounts()),
            "4": lambda: self._each(_format_transaction, self._service.get_all_transactions()),
            "5": lambda: self._each(_format_budget, self._service.get_budgets()),
            "6": self._spending,
            "7": self._report,
            "8": self._save,
        }
        while True:
            self._write("\n".join(self.MENU))
            choice = self._prompt("Choose an option")
            if choice is None or choice == "0":
                self._save()
                return
            action = actions.get(choice)
            if action is None:
                self._write("Unknown option.")
                continue
            try:
                action()
            except ValidationError as exc:
                self._write(f"Validation error: {exc}")

    def _add_transaction(self) -> None:
        account_id = parse_account_id(self._prompt("Account id"), "account id")
        description = validate_text(self._prompt("Description"), "description", 200)
        amount = parse_amount(self._prompt("Amount"), "amount")
        category = validate_text(self._prompt("Category"), "category", 50)
        raw_date = self._prompt("Date (YYYY-MM-DD, blank for today)")
        on = parse_date(raw_date, "date") if raw_date else date.today()
        kind = parse_kind(self._prompt("Kind (Income/Expense)"), "kind")
        transaction = self._service.add_transaction(account_id, description, amount, category, on, kind)
        if transaction is None:
            self._write(f"Account {account_id} not found.")
        else:
            self._write("Transaction added: " + _format_transaction(transaction))

    def _add_budget(self) -> None:
        category = validate_text(self._prompt("Category"), "category", 50)
        limit = parse_limit(self._prompt("Limit"), "limit")
        self._write("Budget added: " + _format_budget(self._service.add_budget(category, limit)))

    def _spending(self) -> None:
        for category, amount in self._service.get_category_spending().items():
            self._write(f"{category}: {amount:.2f}")

    def _report(self) -> None:
        report = self._service.get_income_expense_report()
        self._write(f"Income {report.total_income:.2f} | Expense {report.total_expense:.2f} | Net {report.net:.2f}")

    def _save(self) -> None:
        failed = self._service.save_data()
        if failed:
            self._write(f"Storage error: could not write {', '.join(failed)}")
        else:
            self._write("Saved.")

    def _each(self, formatter: Callable[[object], str], items: List[object]) -> None:
        if not items:
            self._write("Nothing to show.")
        for item in items:
            self._write(formatter(item))

    def _prompt(self, label: str) -> Optional[str]:
        self._stdout.write(f"{label}: ")
        self._stdout.flush()
        line = self._stdin.readline()
        if not line:
            return None
        return line.strip()

    def _write(self, text: str) -> None:
        print(text, file=self._stdout)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Personal Finance Ledger CLI")
    parser.add_argument(
        "--data-dir",
        default="data",
        type=Path,
        help="Directory holding the ledger CSV files (default: ./data)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    accounts = subparsers.add_parser("accounts", help="List accounts or show one")
    accounts.add_argument("--id", type=_argument(parse_account_id, "id"))

    subparsers.add_parser("transactions", help="List all transactions, newest first")

    add_transaction = subparsers.add_parser("add-transaction", help="Record a transaction")
    add_transaction.add_argument("account_id", type=_argument(parse_account_id, "account_id"))
    add_transaction.add_argument("kind", type=_argument(parse_kind, "kind"))
    add_transaction.add_argument("amount", type=_argument(parse_amount, "amount"))
    add_transaction.add_argument("category", type=_argument(lambda v, f: validate_text(v, f, 50), "category"))
    add_transaction.add_argument(
        "description", type=_argument(lambda v, f: validate_text(v, f, 200), "description")
    )
    add_transaction.add_argument("--date", type=_argument(parse_date, "date"))

    subparsers.add_parser("budgets", help="List budgets")

    add_budget = subparsers.add_parser("add-budget", help="Create a category budget")
    add_budget.add_argument("category", type=_argument(lambda v, f: validate_text(v, f, 50), "category"))
    add_budget.add_argument("limit", type=_argument(parse_limit, "limit"))

    subparsers.add_parser("balance", help="Show the total balance across accounts")
    subparsers.add_parser("spending", help="Show expense totals per category")
    subparsers.add_parser("report", help="Show the income/expense report")
    subparsers.add_parser("shell", help="Start the interactive menu")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    service = _load_service(args.data_dir)

    try:
        if args.command == "shell":
            install_exit_save(service)
            LedgerShell(service).run()
        else:
            HANDLERS[args.command](args, service)
    except ValidationError as exc:
        print(f"Validation error: {exc}", file=sys.stderr)
        return 1
    except RecordNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
