from __future__ import annotations

import logging

import resend

from errors import AppError, ConfigurationError

logger = logging.getLogger(__name__)

SUBJECT = "Your Good Money Statement"
BODY = "Attached is your requested Good Money statement (PDF)."
ATTACHMENT_NAME = "statement.pdf"


class EmailDeliveryError(AppError):
    status_code = 500
    error = "email_failed"


class StatementMailer:
    """Sends statement PDFs through Resend."""

    def __init__(self, api_key: str, sender: str):
        self._api_key = api_key
        self.sender = sender

    @classmethod
    def from_config(cls, config) -> "StatementMailer":
        api_key = config.get("RESEND_API_KEY")
        if not api_key:
            raise ConfigurationError(
                "Server configuration error: email service key is not set",
                hint="Set RESEND_API_KEY in backend/.env (create one at https://resend.com/api-keys)",
            )
        return cls(api_key, config.get("STATEMENT_FROM_EMAIL"))

    def send_statement(self, to: str, pdf: bytes) -> None:
        params = {
            "from": self.sender,
            "to": [to],
            "subject": SUBJECT,
            "text": BODY,
            "attachments": [
                {
                    "filename": ATTACHMENT_NAME,
                    "content": list(pdf),
                    "content_type": "application/pdf",
                }
            ],
        }
        try:
            resend.api_key = self._api_key
            resend.Emails.send(params)
        except Exception as e:
            logger.error("statement email to %s failed: %s", to, e)
            raise EmailDeliveryError("Failed to send email.") from e
        logger.info("statement emailed to %s (%d bytes)", to, len(pdf))
