"""OpenAI chat-completion client for answer grading."""

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

import httpx

from paperbuddy.settings import is_configured, settings

logger = logging.getLogger(__name__)


class AiFailureKind(str, Enum):
    NOT_CONFIGURED = "not_configured"
    EMPTY_RESPONSE = "empty_response"
    TRANSPORT_ERROR = "transport_error"
    RATE_LIMITED = "rate_limited"


@dataclass
class AiFailure(Exception):
    kind: AiFailureKind
    message: str
    status_code: int | None = None

    def __str__(self) -> str:
        return self.message


class AiClient(Protocol):
    async def complete(self, prompt: str) -> str:
        """Return the model's raw JSON text for `prompt` or raise AiFailure."""


def build_grading_request(model: str, prompt: str, temperature: float) -> dict[str, Any]:
    return {
        "model": model,
        "messages": [{"role": "user", "content": prompt}],
        "response_format": {"type": "json_object"},
        "temperature": temperature,
    }


def _failure_from_exception(exc: Exception) -> AiFailure:
    status_code = getattr(exc, "status_code", None)
    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        status_code = 504
    if status_code == 429:
        return AiFailure(AiFailureKind.RATE_LIMITED, f"OpenAI rate limit reached: {exc}", status_code=status_code)
    return AiFailure(AiFailureKind.TRANSPORT_ERROR, f"OpenAI request failed: {exc}", status_code=status_code)


class OpenAIGradingClient:
    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        timeout_seconds: float | None = None,
        client: Any | None = None,
    ) -> None:
        self._model = model or settings.ai_model
        self._temperature = settings.ai_temperature if temperature is None else temperature
        if client is not None:
            self._client = client
            return

        api_key = api_key if api_key is not None else settings.openai_api_key
        if not is_configured(api_key):
            raise AiFailure(AiFailureKind.NOT_CONFIGURED, "AI service is not configured.")

        from openai import AsyncOpenAI

        self._client = AsyncOpenAI(
            api_key=(api_key or "").strip(),
            timeout=settings.ai_timeout_seconds if timeout_seconds is None else timeout_seconds,
            max_retries=0,
        )

    @property
    def model(self) -> str:
        return self._model

    async def complete(self, prompt: str) -> str:
        request_payload = build_grading_request(self._model, prompt, self._temperature)
        started = time.perf_counter()
        try:
            response = await self._client.chat.completions.create(**request_payload)
        except Exception as exc:  # noqa: BLE001
            failure = _failure_from_exception(exc)
            logger.warning(
                "ai/grade openai request failed",
                extra={"stage": "call_openai", "model": self._model, "kind": failure.kind.value, "status_code": failure.status_code},
            )
            raise failure from exc

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        logger.info(
            "ai/grade openai timing",
            extra={
                "stage": "call_openai",
                "model": self._model,
                "prompt_chars": len(prompt),
                "openai_ms": int((time.perf_counter() - started) * 1000),
            },
        )
        if not content or not content.strip():
            raise AiFailure(AiFailureKind.EMPTY_RESPONSE, "OpenAI response content is empty.")
        return content


class MockGradingClient:
    """Offline client returning a fixed, well-formed grading response."""

    model = "mock"

    async def complete(self, prompt: str) -> str:
        _ = prompt
        return json.dumps(
            {
                "score": 42,
                "totalMarks": 60,
                "grade": "B",
                "feedback": "Clear structure and accurate use of theory. Evaluation needs more depth.",
                "outline": "- Define the key terms\n- Apply a diagram\n- Evaluate with a justified judgement",
                "highlightReferences": [
                    {
                        "studentPhrase": "price elasticity of demand",
                        "significance": "Correct use of terminology.",
                        "msMatchLevel": "Level 2",
                    }
                ],
                "sectionScores": {"sectionA": {"score": 20, "max": 30}, "sectionB": {"score": 22, "max": 30}},
            }
        )


def get_ai_client() -> AiClient:
    """Return the configured client; raises AiFailure(NOT_CONFIGURED) when no key is set."""
    if os.getenv("OPENAI_MOCK", "").strip() == "1":
        return MockGradingClient()
    return OpenAIGradingClient()
