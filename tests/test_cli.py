"""Tests for the console interface."""

import io
from decimal import Decimal

import pytest

from ledger_cli.cli import LedgerShell, main


def run(data_dir, *argv):
    return main(["--data-dir", str(data_dir), *argv])


class TestCommands:

    def test_add_transaction_saves_and_lists(self, data_dir, capsys, make_service):
        assert run(data_dir, "add-transaction", "1", "expense", "4.50", "Food", "Coffee", "--date", "2024-01-05") == 0
        assert "Transaction added: [1] 2024-01-05 -4.50 Food | Coffee" in capsys.readouterr().out

        assert make_service().get_total_balance() == Decimal("-4.50")

        assert run(data_dir, "transactions") == 0
        assert "[1] 2024-01-05 -4.50 Food | Coffee" in capsys.readouterr().out

    def test_unknown_account_is_reported(self, data_dir, capsys):
        assert run(data_dir, "add-transaction", "9", "income", "10", "Work", "Pay") == 1
        assert "Account 9 not found" in capsys.readouterr().err

    def test_description_with_delimiter_is_rejected(self, data_dir, capsys):
        with pytest.raises(SystemExit):
            run(data_dir, "add-transaction", "1", "expense", "4.50", "Food", "Coffee, large")
        assert "cannot contain" in capsys.readouterr().err

    def test_budget_report_and_spending(self, data_dir, capsys):
        run(data_dir, "add-budget", "food", "100")
        run(data_dir, "add-transaction", "1", "expense", "30", "Food", "Groceries", "--date", "2024-01-02")
        run(data_dir, "add-transaction", "1", "income", "500", "Work", "Pay", "--date", "2024-01-01")
        capsys.readouterr()

        run(data_dir, "budgets")
        assert "food: spent 30.00 of 100.00 (remaining 70.00)" in capsys.readouterr().out

        run(data_dir, "spending")
        assert capsys.readouterr().out.strip() == "Food: 30.00"

        run(data_dir, "balance")
        assert "Total balance: 470.00" in capsys.readouterr().out

        run(data_dir, "report")
        out = capsys.readouterr().out
        assert "Income:  500.00" in out
        assert "Net:     470.00" in out

    def test_show_missing_account(self, data_dir, capsys):
        assert run(data_dir, "accounts", "--id", "5") == 1
        assert "Account 5 not found" in capsys.readouterr().err


class TestShell:

    def test_menu_adds_and_saves_on_exit(self, make_service):
        service = make_service()
        stdin = io.StringIO("\n".join([
            "2", "food", "50",
            "1", "1", "Lunch", "12.5", "Food", "2024-01-05", "Expense",
            "9",
            "0",
        ]) + "\n")
        stdout = io.StringIO()

        LedgerShell(service, stdin=stdin, stdout=stdout).run()

        output = stdout.getvalue()
        assert "Budget added: food" in output
        assert "Transaction added: [1] 2024-01-05 -12.50 Food | Lunch" in output
        assert "Unknown option." in output
        assert "Saved." in output
        reloaded = make_service()
        assert reloaded.get_budgets()[0].current_spending == Decimal("12.50")

    def test_invalid_input_keeps_menu_running(self, make_service):
        stdin = io.StringIO("1\nabc\n0\n")
        stdout = io.StringIO()

        LedgerShell(make_service(), stdin=stdin, stdout=stdout).run()

        assert "Validation error: account id must be an integer" in stdout.getvalue()

    def test_end_of_input_exits(self, make_service, data_dir):
        LedgerShell(make_service(), stdin=io.StringIO(""), stdout=io.StringIO()).run()
        assert (data_dir / "accounts.csv").read_text() == "1,Default Account,0.00\n"
