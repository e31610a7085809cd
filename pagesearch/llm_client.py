"""OpenRouter-backed text completion through the OpenAI-compatible SDK."""
from __future__ import annotations

import time
from typing import Any

from pagesearch.config import settings
from pagesearch.services import logger as log_service


class OpenRouterCompleter:
    """Single-prompt completion client: prompt in, text out."""

    def __init__(
        self,
        openai_client: Any,
        *,
        model: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
        caller: str = "pagesearch",
    ):
        self._client = openai_client
        self.model = model
        self.temperature = settings.llm_temperature if temperature is None else temperature
        self.max_tokens = max(int(max_tokens or settings.llm_max_tokens), 1)
        self.caller = caller

    @staticmethod
    def _temperature_for_model(model: str, temperature: float) -> float:
        # Some OpenAI GPT-5-compatible gateways reject any temperature but 1.
        lowered = (model or "").lower()
        if "gpt-5" in lowered:
            return 1
        return temperature

    @staticmethod
    def _extract_text(response: Any) -> str:
        choices = getattr(response, "choices", None) or []
        if not choices:
            return ""
        message = getattr(choices[0], "message", None)
        text = getattr(message, "content", None)
        return text if isinstance(text, str) else ""

    async def invoke(self, prompt: str) -> str:
        t0 = time.monotonic()
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self.max_tokens,
                temperature=self._temperature_for_model(self.model, self.temperature),
            )
        except Exception as e:
            log_service.log_llm_call(
                model=self.model,
                caller=self.caller,
                duration_ms=int((time.monotonic() - t0) * 1000),
                status="error",
                error=str(e),
            )
            raise

        usage = getattr(response, "usage", None)
        log_service.log_llm_call(
            model=self.model,
            caller=self.caller,
            input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            output_tokens=getattr(usage, "completion_tokens", 0) or 0,
            duration_ms=int((time.monotonic() - t0) * 1000),
        )
        return self._extract_text(response)


def get_model() -> str:
    """Get the active OpenRouter model id."""
    if settings.openrouter_model:
        return settings.openrouter_model
    return settings.default_model


def get_client(model: str | None = None) -> OpenRouterCompleter:
    """Get an OpenRouter completer via the OpenAI-compatible SDK."""
    from openai import AsyncOpenAI

    base_url = settings.openrouter_base_url.strip() or "https://openrouter.ai/api/v1"
    openai_client = AsyncOpenAI(
        api_key=settings.openrouter_api_key,
        base_url=base_url,
    )
    return OpenRouterCompleter(openai_client, model=model or get_model())


_client: OpenRouterCompleter | None = None


def client() -> OpenRouterCompleter:
    """Get or create the LLM client."""
    global _client
    if _client is None:
        _client = get_client()
    return _client
