from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from errors import InvalidRequestError
from ledger.routes import parse_date_arg
from ledger.store import get_store
from .analysis import (
    budget_utilization,
    forecast_savings,
    generate_insights,
    goal_totals,
    summarize_ledger,
    summary_to_json,
)
from .report import build_period_report

insights_bp = Blueprint("insights", __name__, url_prefix="/insights")


@insights_bp.route("/overview", methods=["GET"])
@jwt_required()
def overview():
    """Dashboard headline figures: totals, category split, budgets and goals."""
    owner = get_jwt_identity()
    store = get_store()
    txns = store.list_transactions(owner)
    summary = summarize_ledger(txns)

    body = summary_to_json(summary)
    body["budgets"] = budget_utilization(store.list_categories(owner), txns)
    body["goals"] = goal_totals(store.list_goals(owner))
    return jsonify(body)


@insights_bp.route("/tips", methods=["GET"])
@jwt_required()
def tips():
    txns = get_store().list_transactions(get_jwt_identity())
    return jsonify({"insights": generate_insights(summarize_ledger(txns))})


@insights_bp.route("/forecast", methods=["GET"])
@jwt_required()
def forecast():
    """
    12-month savings projection.

    Query parameters:
    - reduction: percent cut applied to expenses for the "potential" line (default 20)
    """
    raw = request.args.get("reduction", "20")
    try:
        reduction = float(raw)
    except ValueError:
        reduction = None
    if reduction is None or not 0 <= reduction <= 100:
        raise InvalidRequestError("reduction must be a number between 0 and 100")

    summary = summarize_ledger(get_store().list_transactions(get_jwt_identity()))
    points = forecast_savings(summary, reduction)
    return jsonify(
        {
            "reduction": reduction,
            "forecast": points,
            "difference": round(points[-1]["potential"] - points[0]["current"], 2),
        }
    )


@insights_bp.route("/report", methods=["GET"])
@jwt_required()
def report():
    """
    Period report for charts and tables.

    Query parameters:
    - period: month | year | custom | all (default month)
    - from, to: YYYY-MM-DD, required for custom
    """
    period = (request.args.get("period") or "month").lower()
    rep = build_period_report(
        get_store(),
        get_jwt_identity(),
        period,
        start=parse_date_arg("from"),
        end=parse_date_arg("to"),
    )
    return jsonify(rep.to_dict())
