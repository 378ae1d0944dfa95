"""Render a period statement as a PDF with reportlab."""
from __future__ import annotations

from datetime import date
from io import BytesIO
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from insights.report import PeriodReport

TITLE = "Good Money Statement"

_TABLE_STYLE = TableStyle(
    [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#4F46E5")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("ALIGN", (-1, 1), (-1, -1), "RIGHT"),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#F3F4F6")]),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#D1D5DB")),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]
)


def _money(value, currency: str) -> str:
    return f"{currency} {float(value):,.2f}"


def render_statement_pdf(
    report: PeriodReport,
    *,
    owner_name: Optional[str] = None,
    currency: str = "USD",
    generated_on: Optional[date] = None,
) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        title=TITLE,
        leftMargin=15 * mm,
        rightMargin=15 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
    )
    styles = getSampleStyleSheet()
    summary = report.summary
    flow = []

    flow.append(Paragraph(TITLE, styles["Title"]))
    if owner_name:
        flow.append(Paragraph(f"<b>Account:</b> {escape(owner_name)}", styles["Normal"]))
    flow.append(Paragraph(f"<b>Period:</b> {escape(report.label)}", styles["Normal"]))
    flow.append(
        Paragraph(
            f"<b>Generated:</b> {(generated_on or date.today()).isoformat()}", styles["Normal"]
        )
    )
    flow.append(Spacer(1, 6 * mm))

    flow.append(Paragraph("Summary", styles["Heading2"]))
    totals = Table(
        [
            ["", "Amount"],
            ["Total income", _money(summary.total_income, currency)],
            ["Total expenses", _money(summary.total_expenses, currency)],
            ["Net balance", _money(summary.net_balance, currency)],
            ["Savings rate", f"{summary.savings_rate:.1f}%"],
        ],
        colWidths=[60 * mm, 50 * mm],
        hAlign="LEFT",
    )
    totals.setStyle(_TABLE_STYLE)
    flow.append(totals)
    flow.append(Spacer(1, 6 * mm))

    if summary.category_breakdown:
        flow.append(Paragraph("Spending by category", styles["Heading2"]))
        rows = [["Category", "Spent"]]
        for name, total in sorted(
            summary.category_breakdown.items(), key=lambda kv: kv[1], reverse=True
        ):
            rows.append([name, _money(total, currency)])
        cats = Table(rows, colWidths=[60 * mm, 50 * mm], hAlign="LEFT", repeatRows=1)
        cats.setStyle(_TABLE_STYLE)
        flow.append(cats)
        flow.append(Spacer(1, 6 * mm))

    flow.append(Paragraph("Transactions", styles["Heading2"]))
    if not report.transactions:
        flow.append(Paragraph("<i>No transactions in this period.</i>", styles["Italic"]))
    else:
        rows = [["Date", "Type", "Category", "Description", "Amount"]]
        for t in report.transactions:
            sign = "-" if t.kind == "expense" else "+"
            rows.append(
                [
                    t.occurred_on.isoformat(),
                    t.kind.capitalize(),
                    t.category,
                    (t.description or "")[:60],
                    f"{sign}{_money(t.amount, currency)}",
                ]
            )
        table = Table(
            rows,
            colWidths=[24 * mm, 20 * mm, 32 * mm, 68 * mm, 36 * mm],
            repeatRows=1,
        )
        table.setStyle(_TABLE_STYLE)
        flow.append(table)

    doc.build(flow)
    return buffer.getvalue()
