from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from errors import InvalidRequestError, PersistenceError
from ledger.records import ASSISTANT_ROLE, USER_ROLE
from .completion import SYSTEM_PROMPT, CompletionClient, TokenUsage
from .context import ContextAggregator
from .prompts import build_conversation_prompt, build_summary_prompt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CopilotRequest:
    owner: str
    message: Optional[str] = None
    context: Optional[str] = None


@dataclass(frozen=True)
class CopilotReply:
    text: str
    usage: TokenUsage

    def to_dict(self) -> dict:
        return {"response": self.text, "usage": self.usage.to_dict()}


def _blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


def validate_request(req: CopilotRequest) -> None:
    """Raises InvalidRequestError unless there is a message or transcript and an owner."""
    if _blank(req.message) and _blank(req.context):
        raise InvalidRequestError("No message or context provided")
    if _blank(req.owner):
        raise InvalidRequestError("User ID is required")


class CopilotHandler:
    """
    Runs one copilot request end to end:
    validate, save the user's message, build the prompt (summary of a given
    transcript, or the user's finances plus recent chat), complete, save the
    reply, respond.

    Saving either message is best effort. Completion errors propagate to the
    caller unchanged.
    """

    def __init__(self, store, completion: CompletionClient, aggregator: Optional[ContextAggregator] = None):
        self._store = store
        self._completion = completion
        self._aggregator = aggregator or ContextAggregator(store)

    @property
    def completion(self) -> CompletionClient:
        return self._completion

    def handle(self, req: CopilotRequest) -> CopilotReply:
        validate_request(req)

        if not _blank(req.message):
            self._save(req.owner, USER_ROLE, req.message)

        if not _blank(req.context):
            logger.info("summarising %d chars of conversation for %s", len(req.context), req.owner)
            prompt = build_summary_prompt(req.context)
        else:
            financial_context = self._aggregator.gather(req.owner)
            prompt = build_conversation_prompt(financial_context, req.message)

        result = self._completion.complete(SYSTEM_PROMPT, prompt)

        self._save(req.owner, ASSISTANT_ROLE, result.text)
        logger.info(
            "copilot reply for %s (%d tokens)", req.owner, result.usage.total_tokens
        )
        return CopilotReply(text=result.text, usage=result.usage)

    def _save(self, owner: str, role: str, content: str) -> None:
        try:
            self._store.save_message(owner, role, content)
        except PersistenceError as e:
            logger.error("could not save %s message for %s: %s", role, owner, e)
