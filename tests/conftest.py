import pytest

from app import create_app
from copilot.completion import CompletionClient
from copilot.context import ContextAggregator
from copilot.handler import CopilotHandler
from fakes import FakeLLM, register


@pytest.fixture
def app(tmp_path):
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'test.db'}",
            "JWT_SECRET_KEY": "test-jwt-secret-that-is-long-enough-for-hs256",
            "COPILOT_PROVIDER": "together",
            "TOGETHER_API_KEY": "test-together-key",
            "RESEND_API_KEY": "re_test_key",
            "STATEMENT_FROM_EMAIL": "Good Money <noreply@resend.dev>",
        }
    )
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def install_llm(app, sleeps):
    """Wire a FakeLLM behind the app's copilot handler."""

    def _install(*outcomes):
        llm = FakeLLM(*outcomes)
        store = app.extensions["finance_store"]
        completion = CompletionClient(llm, "test-model", sleep=sleeps.append)
        app.extensions["copilot_handler"] = CopilotHandler(
            store, completion, ContextAggregator(store)
        )
        return llm

    return _install


@pytest.fixture
def user(client):
    """(auth headers, owner id) for a freshly registered user."""
    return register(client)
