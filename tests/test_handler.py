import pytest

from copilot.completion import CompletionClient
from copilot.context import ContextAggregator
from copilot.errors import AuthError, ServiceError
from copilot.handler import CopilotHandler, CopilotRequest
from errors import InvalidRequestError
from fakes import FakeLLM, FakeStore, completion_response, status_error, turns, txn


def make_handler(store, *outcomes, sleeps=None, log=None):
    llm = FakeLLM(*outcomes, log=log)
    sleep = sleeps.append if sleeps is not None else (lambda _s: None)
    completion = CompletionClient(llm, "test-model", sleep=sleep)
    return CopilotHandler(store, completion, ContextAggregator(store)), llm


@pytest.mark.parametrize(
    "message, context",
    [(None, None), ("", ""), ("   ", None), (None, "\n\t")],
)
def test_requires_message_or_context(message, context):
    store = FakeStore()
    handler, llm = make_handler(store)
    with pytest.raises(InvalidRequestError, match="No message or context provided"):
        handler.handle(CopilotRequest(owner="u1", message=message, context=context))
    assert llm.calls == []
    assert store.log == []


def test_requires_owner():
    store = FakeStore()
    handler, llm = make_handler(store)
    with pytest.raises(InvalidRequestError, match="User ID is required"):
        handler.handle(CopilotRequest(owner="  ", message="hi"))
    assert llm.calls == []
    assert store.log == []


def test_conversation_saves_both_turns(sleeps):
    store = FakeStore(
        transactions=[
            txn("income", 1000, "2024-01-01", "Salary"),
            txn("expense", 200, "2024-01-02", "Food"),
        ]
    )
    handler, llm = make_handler(store, completion_response("Cut back on takeaway."), sleeps=sleeps)

    reply = handler.handle(CopilotRequest(owner="u1", message="How am I doing?"))

    assert reply.text == "Cut back on takeaway."
    assert reply.to_dict()["usage"]["totalTokens"] == 150
    assert [(m.role, m.content) for m in store.messages] == [
        ("user", "How am I doing?"),
        ("assistant", "Cut back on takeaway."),
    ]
    prompt = llm.last_prompt()
    assert "Total Income: $1000.00" in prompt
    assert "Food: $200.00" in prompt
    assert "User's Question: How am I doing?" in prompt


def test_user_turn_is_saved_before_the_completion_runs():
    log = []
    store = FakeStore(log=log)
    handler, _ = make_handler(store, log=log)
    handler.handle(CopilotRequest(owner="u1", message="hi"))
    assert log == [("save", "user"), ("complete", None), ("save", "assistant")]


def test_user_turn_is_kept_when_completion_fails():
    store = FakeStore()
    handler, llm = make_handler(store, status_error(401))
    with pytest.raises(AuthError):
        handler.handle(CopilotRequest(owner="u1", message="hi"))
    assert [m.role for m in store.messages] == ["user"]
    assert len(llm.calls) == 1


def test_exhausted_retries_save_no_reply(sleeps):
    store = FakeStore()
    handler, llm = make_handler(store, *[status_error(503)] * 4, sleeps=sleeps)
    with pytest.raises(ServiceError):
        handler.handle(CopilotRequest(owner="u1", message="hi"))
    assert len(llm.calls) == 4
    assert [m.role for m in store.messages] == ["user"]


def test_save_failures_do_not_block_the_reply():
    store = FakeStore()
    store.fail_writes = True
    handler, _ = make_handler(store, completion_response("still here"))
    reply = handler.handle(CopilotRequest(owner="u1", message="hi"))
    assert reply.text == "still here"
    assert store.log == [("save", "user"), ("save", "assistant")]


def test_read_failures_still_produce_a_reply():
    store = FakeStore(transactions=[txn("income", 500, "2024-01-01")])
    store.fail_reads = True
    store.fail_history = True
    handler, llm = make_handler(store)
    handler.handle(CopilotRequest(owner="u1", message="hi"))
    assert "Total Income: $0.00" in llm.last_prompt()


def test_history_reaches_the_prompt_in_order():
    store = FakeStore(messages=turns("u1", ("user", "first question"), ("assistant", "first answer")))
    handler, llm = make_handler(store)
    handler.handle(CopilotRequest(owner="u1", message="second question"))
    prompt = llm.last_prompt()
    assert prompt.index("user: first question") < prompt.index("assistant: first answer")


def test_summary_mode_uses_the_given_transcript():
    store = FakeStore(transactions=[txn("income", 1000, "2024-01-01")])
    handler, llm = make_handler(store, completion_response("# Summary"))
    transcript = "user: can I save more?\nassistant: yes, trim dining out"

    reply = handler.handle(CopilotRequest(owner="u1", context=transcript))

    assert reply.text == "# Summary"
    prompt = llm.last_prompt()
    assert transcript in prompt
    assert "Total Income" not in prompt
    # no user message to store, only the reply
    assert store.log == [("save", "assistant")]
    assert store.history_limits == []
