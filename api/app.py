"""Flask REST API exposing the Money Track services."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from money_track.config import open_tracker
from money_track.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from money_track.exchange import apply_import, export_filename, export_payload, parse_import
from money_track.models import local_now
from money_track.validators import parse_optional_record_id
from money_track.views import View, render


class ConfirmationRequired(Exception):
    """Raised when a destructive request lacks ``?confirm=true``."""


def create_app(
    data_dir: Optional[Path] = None,
    *,
    clock: Callable[[], datetime] = local_now,
) -> Flask:
    app = Flask(__name__)

    env_name = os.getenv("MONEY_TRACK_ENV", "prod").lower()
    if env_name in {"dev", "development"}:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    else:
        allowed_origins = os.getenv("MONEY_TRACK_ALLOWED_ORIGINS")
        if allowed_origins:
            origins = [origin.strip() for origin in allowed_origins.split(",") if origin.strip()]
            CORS(app, resources={r"/*": {"origins": origins}}, supports_credentials=True)
        else:
            CORS(app)

    tracker = open_tracker(data_dir, clock=clock)
    store = tracker.store
    service = tracker.service
    notifier = tracker.notifier
    app.extensions["money_track"] = tracker

    def _success(payload: Any, status: int = 200):
        if status == 204:
            return ("", status)
        return jsonify(payload), status

    def _handle_error(exc: Exception, status: int, message: str):
        app.logger.error("%s: %s", message, exc)
        notifier.error(str(exc))
        return jsonify({"error": message, "details": str(exc)}), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error")

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc: RecordNotFoundError):
        return _handle_error(exc, 404, "Record not found")

    @app.errorhandler(ConfirmationRequired)
    def handle_unconfirmed(exc: ConfirmationRequired):
        return jsonify({"error": "Confirmation required", "details": str(exc)}), 409

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

    def _confirm(prompt: str) -> bool:
        return request.args.get("confirm", "").lower() in {"1", "true", "yes"}

    def _deleted(done: bool, what: str):
        if not done:
            raise ConfirmationRequired(f"Pass confirm=true to {what}")
        return _success({}, 204)

    def _view(view: View, **filters: Any) -> Dict[str, Any]:
        return render(view, store, clock(), **filters)

    @app.get("/views/<name>")
    def get_view(name: str):
        try:
            view = View(name)
        except ValueError as exc:
            raise RecordNotFoundError(f"View {name} not found") from exc
        filters: Dict[str, Any] = {}
        if view is View.TRANSACTIONS:
            filters = {
                "search": request.args.get("search"),
                "category_id": parse_optional_record_id(request.args.get("category"), "category"),
                "type": request.args.get("type") or None,
            }
        elif view is View.ANALYTICS:
            filters = {"months": request.args.get("months", "6")}
        return _success(_view(view, **filters))

    @app.get("/transactions")
    def list_transactions():
        return get_view(View.TRANSACTIONS.value)

    @app.post("/transactions")
    def create_transaction():
        payload = _json_body()
        transaction = service.add_transaction(
            payload.get("type"),
            payload.get("amount"),
            payload.get("description"),
            payload.get("categoryId"),
            payload.get("date"),
        )
        return _success(transaction.to_dict(), 201)

    @app.delete("/transactions/<int:transaction_id>")
    def delete_transaction(transaction_id: int):
        return _deleted(service.delete_transaction(transaction_id, _confirm), "delete a transaction")

    @app.get("/budgets")
    def list_budgets():
        return _success(_view(View.BUDGET))

    @app.post("/budgets")
    def set_budget():
        payload = _json_body()
        budget = service.add_or_update_budget(
            payload.get("categoryId"), payload.get("amount"), payload.get("period", "monthly")
        )
        return _success(budget.to_dict(), 201)

    @app.delete("/budgets/<int:budget_id>")
    def delete_budget(budget_id: int):
        return _deleted(service.delete_budget(budget_id, _confirm), "delete a budget")

    @app.get("/goals")
    def list_goals():
        return _success(_view(View.GOALS))

    @app.post("/goals")
    def create_goal():
        payload = _json_body()
        goal = service.add_goal(
            payload.get("title"),
            payload.get("targetAmount"),
            payload.get("targetDate"),
            current_amount=payload.get("currentAmount", 0),
            description=payload.get("description", ""),
        )
        return _success(goal.to_dict(), 201)

    @app.post("/goals/<int:goal_id>/progress")
    def update_goal_progress(goal_id: int):
        payload = _json_body()
        goal = service.update_goal_progress(goal_id, payload.get("amount"))
        if goal is None:
            raise RecordNotFoundError(f"Goal {goal_id} not found")
        return _success(goal.to_dict())

    @app.delete("/goals/<int:goal_id>")
    def delete_goal(goal_id: int):
        return _deleted(service.delete_goal(goal_id, _confirm), "delete a goal")

    @app.get("/categories")
    def list_categories():
        return _success({"items": [category.to_dict() for category in store.categories]})

    @app.post("/categories")
    def create_category():
        payload = _json_body()
        category = service.add_category(payload.get("name"), payload.get("type"))
        return _success(category.to_dict(), 201)

    @app.delete("/categories/<int:category_id>")
    def delete_category(category_id: int):
        return _deleted(service.delete_category(category_id, _confirm), "delete a category")

    @app.get("/settings")
    def get_settings():
        return _success(store.settings.to_dict())

    @app.put("/settings")
    def update_settings():
        payload = _json_body()
        settings = service.update_settings(
            currency=payload.get("currency"),
            date_format=payload.get("dateFormat"),
            theme=payload.get("theme"),
        )
        return _success(settings.to_dict())

    @app.get("/export")
    def export_data():
        now = clock()
        response = jsonify(export_payload(store, now))
        response.headers["Content-Disposition"] = f'attachment; filename="{export_filename(now)}"'
        notifier.success("Data exported successfully!")
        return response

    @app.post("/import")
    def import_data():
        result = parse_import(request.get_data(as_text=True))
        if not apply_import(store, result, notifier, tracker.refresher):
            return jsonify({"error": result.error}), 400
        return _success(store.to_snapshot())

    @app.post("/clear")
    def clear_data():
        return _deleted(service.clear_all_data(_confirm), "clear all data")

    @app.get("/notifications")
    def list_notifications():
        return _success({"items": [item.to_dict() for item in notifier.active(clock())]})

    @app.delete("/notifications/<int:notification_id>")
    def dismiss_notification(notification_id: int):
        notifier.dismiss(notification_id)
        return _success({}, 204)

    return app
