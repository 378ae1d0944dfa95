from __future__ import annotations

from datetime import date

from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required
from pydantic import ValidationError

from errors import InvalidRequestError, NotFoundError, validation_error_response
from .records import TRANSACTION_KINDS
from .schemas import (
    CategoryCreateSchema,
    GoalCreateSchema,
    GoalUpdateSchema,
    TransactionCreateSchema,
)
from .store import get_store

ledger_bp = Blueprint("ledger", __name__)


def _json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def parse_date_arg(name: str):
    raw = request.args.get(name)
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise InvalidRequestError(f"'{name}' must be a YYYY-MM-DD date")


# -------------------------
# Transactions
# -------------------------


@ledger_bp.route("/transactions", methods=["GET"])
@jwt_required()
def list_transactions():
    """
    Caller's transactions, most recent first.

    Query parameters (all optional):
    - type: income | expense
    - from, to: inclusive YYYY-MM-DD bounds
    """
    kind = request.args.get("type")
    if kind and kind not in TRANSACTION_KINDS:
        raise InvalidRequestError("type must be 'income' or 'expense'")

    txns = get_store().list_transactions(
        get_jwt_identity(),
        kind=kind,
        start=parse_date_arg("from"),
        end=parse_date_arg("to"),
    )
    return jsonify({"transactions": [t.to_dict() for t in txns], "count": len(txns)})


@ledger_bp.route("/transactions", methods=["POST"])
@jwt_required()
def add_transaction():
    try:
        data = TransactionCreateSchema(**_json_body())
    except ValidationError as e:
        return validation_error_response(e)

    entry = get_store().add_transaction(
        get_jwt_identity(),
        kind=data.type,
        amount=data.amount,
        category=data.category,
        description=(data.description or None),
        occurred_on=data.date,
    )
    return jsonify(entry.to_dict()), 201


@ledger_bp.route("/transactions/<int:transaction_id>", methods=["DELETE"])
@jwt_required()
def delete_transaction(transaction_id: int):
    if not get_store().delete_transaction(get_jwt_identity(), transaction_id):
        raise NotFoundError("transaction not found")
    return "", 204


# -------------------------
# Budget categories
# -------------------------


@ledger_bp.route("/categories", methods=["GET"])
@jwt_required()
def list_categories():
    categories = get_store().list_categories(get_jwt_identity())
    return jsonify({"categories": [c.to_dict() for c in categories]})


@ledger_bp.route("/categories", methods=["POST"])
@jwt_required()
def add_category():
    try:
        data = CategoryCreateSchema(**_json_body())
    except ValidationError as e:
        return validation_error_response(e)

    entry = get_store().add_category(
        get_jwt_identity(), name=data.name, monthly_limit=data.monthly_limit
    )
    return jsonify(entry.to_dict()), 201


@ledger_bp.route("/categories/<int:category_id>", methods=["DELETE"])
@jwt_required()
def delete_category(category_id: int):
    if not get_store().delete_category(get_jwt_identity(), category_id):
        raise NotFoundError("budget category not found")
    return "", 204


# -------------------------
# Savings goals
# -------------------------


@ledger_bp.route("/goals", methods=["GET"])
@jwt_required()
def list_goals():
    goals = get_store().list_goals(get_jwt_identity())
    return jsonify({"goals": [g.to_dict() for g in goals]})


@ledger_bp.route("/goals", methods=["POST"])
@jwt_required()
def add_goal():
    try:
        data = GoalCreateSchema(**_json_body())
    except ValidationError as e:
        return validation_error_response(e)

    entry = get_store().add_goal(get_jwt_identity(), **data.model_dump())
    return jsonify(entry.to_dict()), 201


@ledger_bp.route("/goals/<int:goal_id>", methods=["PATCH"])
@jwt_required()
def update_goal(goal_id: int):
    """Partial update, e.g. {"current_amount": 250} to record progress."""
    try:
        data = GoalUpdateSchema(**_json_body())
    except ValidationError as e:
        return validation_error_response(e)

    # only target_date may be cleared with null
    changes = {
        k: v
        for k, v in data.model_dump(exclude_unset=True).items()
        if v is not None or k == "target_date"
    }
    if not changes:
        raise InvalidRequestError("Nothing to update")

    entry = get_store().update_goal(get_jwt_identity(), goal_id, **changes)
    if entry is None:
        raise NotFoundError("savings goal not found")
    return jsonify(entry.to_dict())


@ledger_bp.route("/goals/<int:goal_id>", methods=["DELETE"])
@jwt_required()
def delete_goal(goal_id: int):
    if not get_store().delete_goal(get_jwt_identity(), goal_id):
        raise NotFoundError("savings goal not found")
    return "", 204
