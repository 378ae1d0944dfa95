"""
Provider selection for the copilot.

Together AI and DeepSeek speak the OpenAI chat-completions protocol, so both
go through the openai SDK with a different base URL; Groq has its own SDK
with the same surface. SDK-level retries are switched off because the
completion client applies its own policy.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

import groq
import openai

from errors import ConfigurationError

PROVIDERS = {
    "together": {
        "key": "TOGETHER_API_KEY",
        "model": "lgai/exaone-deep-32b",
        "console": "https://api.together.xyz/settings/api-keys",
    },
    "groq": {
        "key": "GROQ_API_KEY",
        "model": "llama-3.3-70b-versatile",
        "console": "https://console.groq.com/keys",
    },
    "deepseek": {
        "key": "DEEPSEEK_API_KEY",
        "model": "deepseek-chat",
        "console": "https://platform.deepseek.com/api_keys",
    },
}

# Connection-level failures from either SDK: the request never got an HTTP answer.
CONNECTION_ERRORS = (openai.APIConnectionError, groq.APIConnectionError)


@dataclass(frozen=True)
class ProviderSettings:
    name: str
    api_key: str
    model: str
    base_url: Optional[str] = None
    timeout: float = 60.0

    @property
    def key_hint(self) -> str:
        spec = PROVIDERS[self.name]
        return f"Check {spec['key']} in your .env file; a new key can be created at {spec['console']}"


def provider_settings(config: Mapping[str, Any]) -> ProviderSettings:
    """
    Read the provider block of the app config. Raises ConfigurationError when
    the provider is unknown or its key is missing, before any client exists.
    """
    name = (config.get("COPILOT_PROVIDER") or "together").strip().lower()
    spec = PROVIDERS.get(name)
    if spec is None:
        raise ConfigurationError(
            f"Unknown COPILOT_PROVIDER '{name}'",
            hint=f"Use one of: {', '.join(sorted(PROVIDERS))}",
        )
    api_key = config.get(spec["key"])
    if not api_key:
        raise ConfigurationError(
            "Server configuration error: AI provider key is not set",
            hint=f"Set {spec['key']} in backend/.env (get one at {spec['console']})",
        )
    base_url = None
    if name == "together":
        base_url = config.get("TOGETHER_BASE_URL")
    elif name == "deepseek":
        base_url = config.get("DEEPSEEK_BASE_URL")
    return ProviderSettings(
        name=name,
        api_key=api_key,
        model=config.get("COPILOT_MODEL") or spec["model"],
        base_url=base_url,
        timeout=float(config.get("COPILOT_TIMEOUT") or 60.0),
    )


def build_sdk_client(settings: ProviderSettings):
    """Construct the SDK client for ``settings.name``."""
    if settings.name == "groq":
        return groq.Groq(api_key=settings.api_key, max_retries=0, timeout=settings.timeout)

    return openai.OpenAI(
        api_key=settings.api_key,
        base_url=settings.base_url,
        max_retries=0,
        timeout=settings.timeout,
    )

