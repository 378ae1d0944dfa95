from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required
from pydantic import ValidationError

from errors import AppError, ConfigurationError, ForbiddenError, validation_error_response
from ledger.store import get_store
from .completion import CompletionClient
from .context import ContextAggregator
from .errors import AuthError, CompletionError
from .handler import CopilotHandler, CopilotRequest, validate_request
from .schemas import CopilotRequestSchema

logger = logging.getLogger(__name__)

copilot_bp = Blueprint("copilot", __name__, url_prefix="/copilot")

MAX_HISTORY = 100


def get_copilot_handler() -> CopilotHandler:
    """
    The process-wide handler, built on first use. Building it checks the
    provider credentials, so a missing key fails here before any request
    leaves the server.
    """
    handler = current_app.extensions.get("copilot_handler")
    if handler is None:
        if not current_app.config.get("SQLALCHEMY_DATABASE_URI"):
            raise ConfigurationError(
                "Server configuration error: database is not configured",
                hint="Set DB_HOST/DB_USER/DB_PASSWORD/DB_NAME in backend/.env",
            )
        store = get_store()
        completion = CompletionClient.from_config(current_app.config)
        aggregator = ContextAggregator(
            store, history_limit=current_app.config.get("COPILOT_HISTORY_LIMIT", 10)
        )
        handler = CopilotHandler(store, completion, aggregator)
        current_app.extensions["copilot_handler"] = handler
    return handler


@copilot_bp.route("", methods=["POST"])
@jwt_required()
def ask_copilot():
    """
    Ask the financial copilot a question, or summarise a conversation.

    JSON body: {"message": "...", "context": "...", "userId": "..."?}
    The owner is the token identity; userId, when sent, must match it.
    """
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        body = {}
    try:
        data = CopilotRequestSchema(**body)
    except ValidationError as e:
        return validation_error_response(e, "Request body is malformed")

    identity = str(get_jwt_identity())
    if data.user_id and data.user_id != identity:
        raise ForbiddenError("Token does not belong to this user")

    req = CopilotRequest(owner=identity, message=data.message, context=data.context)
    validate_request(req)

    handler = get_copilot_handler()
    try:
        reply = handler.handle(req)
    except AppError:
        raise
    except Exception:
        logger.exception("unexpected copilot failure for %s", req.owner)
        return (
            jsonify({"error": "internal_error", "message": "An unexpected error occurred. Please try again."}),
            500,
        )

    return jsonify(reply.to_dict())


@copilot_bp.route("/history", methods=["GET"])
@jwt_required()
def chat_history():
    """Recent chat turns for the caller, oldest first."""
    default = current_app.config.get("COPILOT_HISTORY_LIMIT", 10)
    limit = request.args.get("limit", default=default, type=int)
    limit = max(1, min(limit, MAX_HISTORY))

    newest_first = get_store().recent_messages(get_jwt_identity(), limit=limit)
    return jsonify({"messages": [t.to_dict() for t in reversed(newest_first)]})


@copilot_bp.route("/test", methods=["GET"])
def test_connection():
    """Checks the provider key and makes one tiny completion."""
    try:
        completion = get_copilot_handler().completion
    except ConfigurationError as e:
        return (
            jsonify({"status": "error", "message": "API key not configured", "details": e.hint or e.message}),
            500,
        )

    try:
        result = completion.ping()
    except AuthError as e:
        return (
            jsonify({"status": "error", "message": "Invalid API key", "details": e.hint or e.message}),
            401,
        )
    except CompletionError as e:
        return (
            jsonify({"status": "error", "message": "API test failed", "details": e.message}),
            e.status_code,
        )

    return jsonify(
        {
            "status": "success",
            "message": "API connection successful",
            "model": completion.model,
            "response": result.text,
            "usage": result.usage.to_dict(),
        }
    )
