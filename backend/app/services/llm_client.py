"""Thin wrapper around the OpenAI chat completions API.

The client forces JSON-object output, applies a token budget and a per-call
timeout, and turns every SDK failure into ``ModelCallError``. It neither
retries nor repairs; see ``resilient_invoker`` and ``response_repair``.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Any, Optional

import openai

from app.core.config import Settings, settings as default_settings
from app.core.errors import ModelCallError
from app.observability.tracing import trace

logger = logging.getLogger(__name__)

# Client-side faults a retry cannot fix.
NON_RETRYABLE_ERRORS = (
    openai.AuthenticationError,
    openai.PermissionDeniedError,
    openai.BadRequestError,
    openai.NotFoundError,
)


class ModelClient:
    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        default_model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        client: Any = None,
    ) -> None:
        self.api_key = api_key
        self.default_model = default_model
        self.temperature = temperature
        self._client = client
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "ModelClient":
        config = config or default_settings
        return cls(
            api_key=config.openai_api_key,
            default_model=config.overview_model,
            temperature=config.model_temperature,
        )

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int,
        timeout: float,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """Return the raw completion text, expected to be one JSON object."""
        if not system_prompt or not system_prompt.strip():
            raise ValueError("system_prompt must not be empty")
        if not user_prompt or not user_prompt.strip():
            raise ValueError("user_prompt must not be empty")
        if max_tokens <= 0:
            raise ValueError("max_tokens must be positive")
        if timeout <= 0:
            raise ValueError("timeout must be positive")

        client = self._get_client()
        model_name = model or self.default_model
        metadata = {"model": model_name, "max_tokens": max_tokens, "timeout_s": timeout}
        started = time.perf_counter()
        with trace("model.complete", metadata=metadata):
            try:
                completion = client.chat.completions.create(
                    model=model_name,
                    response_format={"type": "json_object"},
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                    max_tokens=max_tokens,
                    temperature=self.temperature if temperature is None else temperature,
                    timeout=timeout,
                )
            except NON_RETRYABLE_ERRORS as exc:
                raise ModelCallError(f"Model request rejected: {exc}", retryable=False) from exc
            except openai.APIError as exc:
                raise ModelCallError(f"Model request failed: {exc}") from exc

        elapsed_ms = (time.perf_counter() - started) * 1000
        choices = getattr(completion, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content:
            raise ModelCallError("Model returned no content")
        logger.debug("Model %s completed in %.0fms (%s chars)", model_name, elapsed_ms, len(content))
        return content

    def _get_client(self) -> Any:
        if self._client is not None:
            return self._client
        if not self.api_key:
            raise ModelCallError("OPENAI_API_KEY is not configured", retryable=False)
        with self._lock:
            if self._client is None:
                # Retries are owned by invoke_with_retry.
                self._client = openai.OpenAI(api_key=self.api_key, max_retries=0)
        return self._client
