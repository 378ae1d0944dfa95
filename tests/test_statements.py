import base64
from datetime import date

import pytest
import resend

from insights.analysis import summarize_ledger
from insights.report import PeriodReport
from fakes import txn
from statements.pdf_export import render_statement_pdf


@pytest.fixture
def sent(monkeypatch):
    calls = []

    def fake_send(params):
        calls.append(params)
        return {"id": "email_123"}

    monkeypatch.setattr(resend.Emails, "send", fake_send)
    return calls


def test_render_statement_pdf():
    txns = (
        txn("income", 1000, "2024-01-01", "Salary", id=1),
        txn("expense", 200, "2024-01-02", "Food", description="Groceries & <snacks>", id=2),
    )
    report = PeriodReport(
        period="custom",
        start=date(2024, 1, 1),
        end=date(2024, 1, 31),
        summary=summarize_ledger(txns),
        transactions=txns,
    )
    pdf = render_statement_pdf(report, owner_name="Ada <Lovelace>", currency="EUR", generated_on=date(2024, 2, 1))
    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 1000


def test_render_empty_statement():
    report = PeriodReport(period="all", start=None, end=None, summary=summarize_ledger([]), transactions=())
    assert render_statement_pdf(report).startswith(b"%PDF")


def test_download_statement(client, user):
    headers, _ = user
    client.post(
        "/transactions",
        json={"type": "income", "amount": 1000, "category": "Salary", "date": date.today().isoformat()},
        headers=headers,
    )
    resp = client.get("/statements/pdf?period=month", headers=headers)
    assert resp.status_code == 200
    assert resp.mimetype == "application/pdf"
    assert "statement.pdf" in resp.headers["Content-Disposition"]
    assert resp.data.startswith(b"%PDF")


def test_download_rejects_bad_period(client, user):
    headers, _ = user
    assert client.get("/statements/pdf?period=fortnight", headers=headers).status_code == 400


def test_send_client_rendered_pdf(client, user, sent):
    headers, _ = user
    pdf = b"%PDF-1.4 fake statement"
    resp = client.post(
        "/statements/send",
        json={"email": "ada@example.com", "pdfBase64": base64.b64encode(pdf).decode()},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True}

    params = sent[0]
    assert params["to"] == ["ada@example.com"]
    assert params["from"] == "Good Money <noreply@resend.dev>"
    assert params["subject"] == "Your Good Money Statement"
    attachment = params["attachments"][0]
    assert attachment["filename"] == "statement.pdf"
    assert bytes(attachment["content"]) == pdf


def test_send_renders_pdf_when_none_given(client, user, sent):
    headers, _ = user
    resp = client.post("/statements/send", json={"email": "ada@example.com", "period": "year"}, headers=headers)
    assert resp.status_code == 200
    assert bytes(sent[0]["attachments"][0]["content"]).startswith(b"%PDF")


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "not-an-email"},
        {"email": "ada@example.com", "pdfBase64": "%%% not base64 %%%"},
        {},
    ],
)
def test_send_rejects_bad_input(client, user, sent, payload):
    headers, _ = user
    resp = client.post("/statements/send", json=payload, headers=headers)
    assert resp.status_code == 400
    assert sent == []


def test_send_without_email_key(app, client, user, sent):
    headers, _ = user
    app.config["RESEND_API_KEY"] = None
    resp = client.post("/statements/send", json={"email": "ada@example.com"}, headers=headers)
    assert resp.status_code == 500
    assert resp.get_json()["error"] == "configuration_error"
    assert sent == []


def test_send_reports_delivery_failure(client, user, monkeypatch):
    headers, _ = user

    def boom(params):
        raise RuntimeError("resend is down")

    monkeypatch.setattr(resend.Emails, "send", boom)
    resp = client.post("/statements/send", json={"email": "ada@example.com"}, headers=headers)
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "email_failed", "message": "Failed to send email."}
