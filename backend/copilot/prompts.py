"""
Prompt templates for the copilot.

A caller-supplied transcript selects summarisation; otherwise the prompt is
built from the user's aggregated finances and recent conversation.
"""
from __future__ import annotations

from decimal import Decimal
from textwrap import dedent

from .context import FinancialContext


def money(value: Decimal) -> str:
    return f"${value:.2f}"


SUMMARY_TEMPLATE = dedent(
    """\
    You are a financial assistant helping to summarize a conversation.
    Here is the conversation history:
    {context}

    Please provide a concise summary of the key points discussed, focusing on:
    1. Main financial topics covered
    2. Important advice or recommendations given
    3. Any action items or next steps mentioned

    Format your response using markdown:
    - Use # for main headings
    - Use ## for subheadings
    - Use bullet points (-) for lists
    - Use paragraphs for detailed explanations
    - Use **bold** for emphasis on important points

    Make sure to include line breaks between sections for better readability.
    """
)

CONVERSATION_TEMPLATE = dedent(
    """\
    You are a personal financial copilot. Use the user's own data below.

    Financial Overview:
    - Total Income: {income}
    - Total Expenses: {expenses}
    - Net Balance: {net}

    Spending by Category:
    {categories}

    Recent Transactions:
    {transactions}

    Recent Conversation:
    {transcript}

    User's Question: {message}

    Format your response using markdown:
    - Start with a # heading that names the topic
    - Follow with a bulleted list of the key insights
    - Explain your reasoning in one or two short paragraphs
    - Finish with a ## Action Items section listing concrete next steps
    - Use **bold** for the most important figures

    Base every recommendation on the figures above and refer to the user's
    actual categories and amounts; do not invent numbers. If the data is empty,
    say so and give general guidance on getting started.
    """
)


def _category_lines(ctx: FinancialContext) -> str:
    if not ctx.category_breakdown:
        return "- No expenses recorded"
    items = sorted(ctx.category_breakdown.items(), key=lambda kv: kv[1], reverse=True)
    return "\n".join(f"- {name}: {money(total)}" for name, total in items)


def _transaction_lines(ctx: FinancialContext) -> str:
    if not ctx.recent_transactions:
        return "- No transactions recorded"
    lines = []
    for t in ctx.recent_transactions:
        line = f"- {t.occurred_on.isoformat()}: {t.kind} of {money(t.amount)} ({t.category})"
        if t.description:
            line += f" - {t.description}"
        lines.append(line)
    return "\n".join(lines)


def build_summary_prompt(context: str) -> str:
    return SUMMARY_TEMPLATE.format(context=context)


def build_conversation_prompt(ctx: FinancialContext, message: str) -> str:
    return CONVERSATION_TEMPLATE.format(
        income=money(ctx.total_income),
        expenses=money(ctx.total_expenses),
        net=money(ctx.net_balance),
        categories=_category_lines(ctx),
        transactions=_transaction_lines(ctx),
        transcript=ctx.transcript() or "(no previous messages)",
        message=message,
    )
