"""Flask REST API exposing the ledger service."""

from __future__ import annotations

import os
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from ledger.codec import LedgerCodec
from ledger.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from ledger.services import LedgerService
from ledger.storage import FlatFileStorage
from ledger.validators import (
    parse_account_id,
    parse_amount,
    parse_date,
    parse_kind,
    parse_limit,
    validate_text,
)


def create_app(data_dir: Optional[Path] = None) -> Flask:
    app = Flask(__name__)

    env_name = os.getenv("LEDGER_ENV", "prod").lower()
    if env_name in {"dev", "development"}:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    else:
        allowed_origins = os.getenv("LEDGER_ALLOWED_ORIGINS")
        if allowed_origins:
            origins = [origin.strip() for origin in allowed_origins.split(",") if origin.strip()]
            CORS(app, resources={r"/*": {"origins": origins}}, supports_credentials=True)
        else:
            CORS(app)

    root = Path(data_dir or os.getenv("LEDGER_DATA_DIR", "data"))
    ledger = LedgerService(LedgerCodec(FlatFileStorage(root)))

    def _success(payload: Any, status: int = 200):
        return jsonify(payload), status

    def _handle_error(exc: Exception, status: int, message: str):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"error": message, "details": str(exc)}), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error")

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc: RecordNotFoundError):
        return _handle_error(exc, 404, "Record not found")

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        return _handle_error(exc, 500, "Persistence error")

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Malformed JSON body")
        return data

    @app.get("/accounts")
    def list_accounts():
        return _success({"items": [account.to_dict() for account in ledger.get_accounts()]})

    @app.get("/accounts/<int:account_id>")
    def get_account(account_id: int):
        account = ledger.get_account_by_id(account_id)
        if account is None:
            raise RecordNotFoundError(f"Account {account_id} not found")
        payload = account.to_dict()
        payload["transactions"] = [transaction.to_dict() for transaction in account.transactions]
        return _success(payload)

    @app.get("/transactions")
    def list_transactions():
        transactions = ledger.get_all_transactions()
        return _success({"items": [transaction.to_dict() for transaction in transactions]})

    @app.post("/transactions")
    def create_transaction():
        payload = _json_body()
        account_id = parse_account_id(payload.get("account_id"), "account_id")
        raw_date = payload.get("date")
        transaction = ledger.add_transaction(
            account_id,
            validate_text(payload.get("description"), "description", 200),
            parse_amount(payload.get("amount"), "amount"),
            validate_text(payload.get("category"), "category", 50),
            parse_date(raw_date, "date") if raw_date is not None else date.today(),
            parse_kind(payload.get("kind"), "kind"),
        )
        if transaction is None:
            raise RecordNotFoundError(f"Account {account_id} not found")
        return _success(transaction.to_dict(), 201)

    @app.get("/budgets")
    def list_budgets():
        return _success({"items": [budget.to_dict() for budget in ledger.get_budgets()]})

    @app.post("/budgets")
    def create_budget():
        payload = _json_body()
        budget = ledger.add_budget(
            validate_text(payload.get("category"), "category", 50),
            parse_limit(payload.get("limit"), "limit"),
        )
        return _success(budget.to_dict(), 201)

    @app.get("/summary")
    def summary():
        spending = ledger.get_category_spending()
        return _success({
            "balance": f"{ledger.get_total_balance():.2f}",
            "category_spending": {category: f"{amount:.2f}" for category, amount in spending.items()},
            "report": ledger.get_income_expense_report().to_dict(),
        })

    @app.post("/save")
    def save():
        failed = ledger.save_data()
        if failed:
            raise PersistenceError(f"Could not write {', '.join(failed)}")
        return _success({"saved": True})

    return app
