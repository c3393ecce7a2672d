from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx


class OpenAIError(Exception):
    """Base error for OpenAI client failures."""


class OpenAIRequestError(OpenAIError):
    """Raised when the request never produced a response (network failure, timeout)."""


class OpenAIStatusError(OpenAIError):
    """Raised when OpenAI answers with a non-2xx status.

    The upstream error fields are kept as attributes; the raw body may echo
    request details and must not reach callers.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        error_type: str | None = None,
        error_code: str | None = None,
        error_message: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error_type = error_type
        self.error_code = error_code
        # Upstream text, kept off `str(exc)`; only logged when explicitly enabled.
        self.error_message = error_message


class OpenAIResponseError(OpenAIError):
    """Raised when a 2xx response body is not a usable chat completion."""


@dataclass(frozen=True)
class OpenAIConfig:
    api_key: str
    base_url: str
    model: str
    timeout_seconds: float


def _extract_error_details(resp: httpx.Response) -> dict[str, str | None]:
    """Best-effort read of `{"error": {"type", "code", "message"}}` from an error body."""

    details: dict[str, str | None] = {
        "error_type": None,
        "error_code": None,
        "error_message": None,
    }
    try:
        data = resp.json()
    except ValueError:
        return details
    error = data.get("error") if isinstance(data, dict) else None
    if not isinstance(error, dict):
        return details
    for key in ("type", "code", "message"):
        value = error.get(key)
        details[f"error_{key}"] = str(value) if value is not None else None
    return details


class OpenAIClient:
    """
    Minimal OpenAI chat-completions client returning the first choice's text.

    Design notes:
    - No logging in this module (prompts/outputs may contain PHI).
    - One request per call: no retries, no streaming.
    - Every failure surfaces as an `OpenAIError` subclass.
    """

    def __init__(
        self,
        *,
        config: OpenAIConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._config = config
        # Tests inject an httpx.MockTransport; production uses the default network transport.
        self._transport = transport

    async def complete_text(self, *, prompt: str, temperature: float, max_tokens: int) -> str:
        url = f"{self._config.base_url.rstrip('/')}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
        }
        payload: dict[str, Any] = {
            "model": self._config.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout_seconds, transport=self._transport
            ) as client:
                resp = await client.post(url, headers=headers, json=payload)
        except httpx.TimeoutException as exc:
            raise OpenAIRequestError("LLM request timed out") from exc
        except httpx.HTTPError as exc:
            raise OpenAIRequestError("LLM request failed") from exc

        if not resp.is_success:
            raise OpenAIStatusError(
                f"LLM service returned status {resp.status_code}",
                status_code=resp.status_code,
                **_extract_error_details(resp),
            )

        try:
            data = resp.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise OpenAIResponseError("LLM response was not a valid chat completion") from exc

        if not isinstance(content, str):
            raise OpenAIResponseError("LLM response content must be a string")

        return content
