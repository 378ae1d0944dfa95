"""
Chat-completion client with a bounded retry policy.

One call to ``complete`` sends the request, and on 429/500/503 or a
connection failure tries again after base_delay, 2*base_delay, 4*base_delay
seconds, up to ``max_retries`` extra attempts. A 401 or any other 4xx fails on
the first response. When retries run out the last typed error propagates.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

import groq
import openai
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from .errors import CompletionError, ServiceError, error_for_status
from .providers import CONNECTION_ERRORS, build_sdk_client, provider_settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a helpful financial assistant."

STATUS_ERRORS = (openai.APIStatusError, groq.APIStatusError)


def retrying(
    max_attempts: int,
    base_delay: float,
    retryable: Callable[[BaseException], bool],
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> Retrying:
    """
    Build a retry controller: at most ``max_attempts`` calls in total,
    exponential waits starting at ``base_delay`` seconds, retrying only the
    exceptions ``retryable`` accepts. The last exception is re-raised.
    """
    return Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=base_delay, exp_base=2),
        retry=retry_if_exception(retryable),
        sleep=sleep,
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


def is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, CompletionError) and exc.retryable


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def to_dict(self) -> dict:
        return {
            "promptTokens": self.prompt_tokens,
            "completionTokens": self.completion_tokens,
            "totalTokens": self.total_tokens,
        }


@dataclass(frozen=True)
class CompletionResult:
    text: str
    usage: TokenUsage


def _to_result(resp) -> CompletionResult:
    choices = getattr(resp, "choices", None) or []
    if not choices:
        raise CompletionError("AI service returned an empty completion")
    text = (choices[0].message.content or "").strip()

    usage = getattr(resp, "usage", None)
    if usage is None:
        return CompletionResult(text=text, usage=TokenUsage())
    return CompletionResult(
        text=text,
        usage=TokenUsage(
            prompt_tokens=usage.prompt_tokens or 0,
            completion_tokens=usage.completion_tokens or 0,
            total_tokens=usage.total_tokens or 0,
        ),
    )


class CompletionClient:
    def __init__(
        self,
        sdk_client,
        model: str,
        *,
        temperature: float = 0.7,
        max_tokens: int = 1000,
        top_p: float = 0.95,
        frequency_penalty: float = 0.0,
        presence_penalty: float = 0.0,
        max_retries: int = 3,
        base_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        key_hint: Optional[str] = None,
    ):
        self._client = sdk_client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.top_p = top_p
        self.frequency_penalty = frequency_penalty
        self.presence_penalty = presence_penalty
        self.max_retries = max(0, max_retries)
        self.base_delay = base_delay
        self._sleep = sleep
        self._key_hint = key_hint

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        *,
        sdk_client=None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> "CompletionClient":
        """Raises ConfigurationError when the provider key is missing."""
        settings = provider_settings(config)
        return cls(
            sdk_client if sdk_client is not None else build_sdk_client(settings),
            settings.model,
            temperature=config.get("COPILOT_TEMPERATURE", 0.7),
            max_tokens=config.get("COPILOT_MAX_TOKENS", 1000),
            top_p=config.get("COPILOT_TOP_P", 0.95),
            frequency_penalty=config.get("COPILOT_FREQUENCY_PENALTY", 0.0),
            presence_penalty=config.get("COPILOT_PRESENCE_PENALTY", 0.0),
            max_retries=config.get("COPILOT_MAX_RETRIES", 3),
            base_delay=config.get("COPILOT_RETRY_BASE_DELAY", 1.0),
            sleep=sleep,
            key_hint=settings.key_hint,
        )

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: Optional[int] = None,
    ) -> CompletionResult:
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        controller = retrying(
            self.max_retries + 1, self.base_delay, is_retryable, sleep=self._sleep
        )
        try:
            return controller(self._request_once, messages, max_tokens or self.max_tokens)
        except CompletionError as e:
            logger.error(
                "completion failed (%s, upstream status %s): %s",
                e.kind.value,
                e.upstream_status,
                e.message,
            )
            raise

    def ping(self) -> CompletionResult:
        """Tiny request used by the connectivity check."""
        return self.complete(
            "You are a helpful assistant.",
            "Say 'API connection successful' if you can read this.",
            max_tokens=50,
        )

    def _request_once(self, messages: list, max_tokens: int) -> CompletionResult:
        try:
            resp = self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=max_tokens,
                top_p=self.top_p,
                frequency_penalty=self.frequency_penalty,
                presence_penalty=self.presence_penalty,
            )
        except CONNECTION_ERRORS as e:
            raise ServiceError(f"Could not reach the AI service: {e}") from e
        except STATUS_ERRORS as e:
            detail = getattr(e, "message", "") or str(e)
            raise error_for_status(e.status_code, detail, key_hint=self._key_hint) from e
        return _to_result(resp)
