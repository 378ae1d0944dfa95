"""Stand-ins for the LLM SDK and the data store used across the tests."""
from datetime import date, datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

import httpx
import openai

from errors import PersistenceError
from ledger.records import ChatTurn, TransactionEntry

COMPLETIONS_URL = "https://api.together.xyz/v1/chat/completions"


def completion_response(text="Here is your answer.", prompt_tokens=120, completion_tokens=30):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=text))],
        usage=SimpleNamespace(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        ),
    )


def status_error(status: int) -> openai.APIStatusError:
    request = httpx.Request("POST", COMPLETIONS_URL)
    response = httpx.Response(status, request=request, json={"error": {"message": f"status {status}"}})
    return openai.APIStatusError(f"status {status}", response=response, body=None)


def connection_error() -> openai.APIConnectionError:
    return openai.APIConnectionError(request=httpx.Request("POST", COMPLETIONS_URL))


class FakeCompletions:
    def __init__(self, outcomes, log=None):
        self._outcomes = list(outcomes)
        self.calls = []
        self._log = log

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self._log is not None:
            self._log.append(("complete", None))
        outcome = self._outcomes.pop(0) if self._outcomes else completion_response()
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class FakeLLM:
    """Mimics ``client.chat.completions.create`` of the openai/groq SDKs."""

    def __init__(self, *outcomes, log=None):
        self.completions = FakeCompletions(outcomes, log=log)
        self.chat = SimpleNamespace(completions=self.completions)

    @property
    def calls(self):
        return self.completions.calls

    def last_prompt(self) -> str:
        return self.calls[-1]["messages"][-1]["content"]


class FakeStore:
    """In-memory store with switchable failures."""

    def __init__(self, transactions=(), messages=(), log=None):
        self.transactions = list(transactions)
        self.messages = list(messages)  # oldest first
        self.fail_reads = False
        self.fail_history = False
        self.fail_writes = False
        self.history_limits = []
        self.log = log if log is not None else []

    def list_transactions(self, owner, **_filters):
        if self.fail_reads:
            raise PersistenceError("Could not load transactions")
        return [t for t in self.transactions if t.owner == owner]

    def recent_messages(self, owner, limit=10):
        self.history_limits.append(limit)
        if self.fail_history:
            raise PersistenceError("Could not load chat history")
        mine = [m for m in self.messages if m.owner == owner]
        return list(reversed(mine))[:limit]

    def save_message(self, owner, role, content):
        self.log.append(("save", role))
        if self.fail_writes:
            raise PersistenceError("Could not save chat message")
        turn = ChatTurn(role=role, content=content, owner=owner, id=len(self.messages) + 1)
        self.messages.append(turn)
        return turn


def txn(kind, amount, on, category="General", owner="u1", description=None, id=None):
    return TransactionEntry(
        id=id,
        owner=owner,
        kind=kind,
        amount=Decimal(str(amount)),
        category=category,
        occurred_on=on if isinstance(on, date) else date.fromisoformat(on),
        description=description,
    )


def turns(owner, *pairs):
    start = datetime(2024, 1, 1, 9, 0, 0)
    return [
        ChatTurn(role=role, content=content, owner=owner, id=i + 1, created_at=start + timedelta(minutes=i))
        for i, (role, content) in enumerate(pairs)
    ]


def register(client, email="ada@example.com", name="Ada", password="correct-horse"):
    """Register through the API; returns (auth headers, owner id)."""
    resp = client.post(
        "/auth/register",
        json={"name": name, "email": email, "password": password},
    )
    assert resp.status_code == 201, resp.get_json()
    body = resp.get_json()
    return {"Authorization": f"Bearer {body['token']}"}, str(body["id"])
