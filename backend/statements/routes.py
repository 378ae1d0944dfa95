from __future__ import annotations

import base64
import binascii
from io import BytesIO

from flask import Blueprint, current_app, jsonify, request, send_file
from flask_jwt_extended import get_jwt_identity, jwt_required
from pydantic import ValidationError

from auth.services import find_user
from errors import InvalidRequestError, validation_error_response
from insights.report import build_period_report
from ledger.routes import parse_date_arg
from ledger.store import get_store
from .mailer import ATTACHMENT_NAME, StatementMailer
from .pdf_export import render_statement_pdf
from .schemas import SendStatementSchema

statements_bp = Blueprint("statements", __name__, url_prefix="/statements")


def _render_for(owner: str, period: str, start=None, end=None) -> bytes:
    report = build_period_report(get_store(), owner, period, start=start, end=end)
    user = find_user(owner)
    return render_statement_pdf(
        report,
        owner_name=user.name if user else None,
        currency=user.currency if user else "USD",
    )


@statements_bp.route("/pdf", methods=["GET"])
@jwt_required()
def download_statement():
    """
    Download a PDF statement.

    Query parameters:
    - period: month | year | custom | all (default month)
    - from, to: YYYY-MM-DD, required for custom
    """
    pdf = _render_for(
        get_jwt_identity(),
        (request.args.get("period") or "month").lower(),
        parse_date_arg("from"),
        parse_date_arg("to"),
    )
    return send_file(
        BytesIO(pdf),
        mimetype="application/pdf",
        as_attachment=True,
        download_name=ATTACHMENT_NAME,
    )


@statements_bp.route("/send", methods=["POST"])
@jwt_required()
def send_statement():
    """
    Email a statement PDF to the given address.

    JSON body: {"email": "...", "pdfBase64": "..."?, "period": "month"?, "from"?, "to"?}
    """
    mailer = StatementMailer.from_config(current_app.config)

    body = request.get_json(silent=True)
    try:
        data = SendStatementSchema(**(body if isinstance(body, dict) else {}))
    except ValidationError as e:
        return validation_error_response(e)

    if data.pdf_base64:
        try:
            pdf = base64.b64decode(data.pdf_base64, validate=True)
        except (binascii.Error, ValueError):
            raise InvalidRequestError("pdfBase64 is not valid base64")
        if not pdf:
            raise InvalidRequestError("pdfBase64 is empty")
    else:
        pdf = _render_for(get_jwt_identity(), data.period.lower(), data.start, data.end)

    mailer.send_statement(data.email, pdf)
    return jsonify({"success": True})
