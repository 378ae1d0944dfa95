from copilot.context import ContextAggregator, FinancialContext
from copilot.prompts import build_conversation_prompt, build_summary_prompt
from fakes import FakeStore, turns, txn


def test_conversation_prompt_embeds_figures():
    store = FakeStore(
        transactions=[
            txn("income", 1000, "2024-01-01", "Salary"),
            txn("expense", 200, "2024-01-02", "Food", description="Groceries"),
        ],
        messages=turns("u1", ("user", "hello"), ("assistant", "hi there")),
    )
    ctx = ContextAggregator(store).gather("u1")
    prompt = build_conversation_prompt(ctx, "Can I afford a holiday?")

    assert "Total Income: $1000.00" in prompt
    assert "Total Expenses: $200.00" in prompt
    assert "Net Balance: $800.00" in prompt
    assert "Food: $200.00" in prompt
    assert "2024-01-02: expense of $200.00 (Food) - Groceries" in prompt
    assert "User's Question: Can I afford a holiday?" in prompt
    assert prompt.index("user: hello") < prompt.index("assistant: hi there")
    assert "Action Items" in prompt


def test_conversation_prompt_with_no_data():
    prompt = build_conversation_prompt(FinancialContext(), "Where do I start?")
    assert "Total Income: $0.00" in prompt
    assert "No expenses recorded" in prompt
    assert "No transactions recorded" in prompt
    assert "(no previous messages)" in prompt


def test_summary_prompt_inserts_transcript_verbatim():
    transcript = "user: should I pay off my card?\nassistant: yes, the **APR** is high"
    prompt = build_summary_prompt(transcript)
    assert transcript in prompt
    assert "summarize a conversation" in prompt
    assert "Use **bold**" in prompt
    assert "Total Income" not in prompt
