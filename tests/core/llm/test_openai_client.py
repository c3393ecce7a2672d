from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from app.core.llm.openai_client import (
    OpenAIClient,
    OpenAIConfig,
    OpenAIRequestError,
    OpenAIResponseError,
    OpenAIStatusError,
)

_CONFIG = OpenAIConfig(
    api_key="sk-test",
    base_url="https://llm.example.test/v1/",
    model="gpt-4o-mini",
    timeout_seconds=5.0,
)


def _completion(content: object) -> dict:
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


def _run(handler) -> str:
    client = OpenAIClient(config=_CONFIG, transport=httpx.MockTransport(handler))
    return asyncio.run(client.complete_text(prompt="PROMPT", temperature=0.3, max_tokens=4000))


def test_complete_text_sends_chat_completion_request() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_completion("PLAN TEXT"))

    assert _run(handler) == "PLAN TEXT"

    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://llm.example.test/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer sk-test"
    assert json.loads(request.content) == {
        "model": "gpt-4o-mini",
        "messages": [{"role": "user", "content": "PROMPT"}],
        "temperature": 0.3,
        "max_tokens": 4000,
    }


def test_status_error_keeps_upstream_classification() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            429,
            json={
                "error": {
                    "message": "Rate limit reached",
                    "type": "requests",
                    "code": "rate_limit_exceeded",
                }
            },
        )

    with pytest.raises(OpenAIStatusError) as excinfo:
        _run(handler)

    assert excinfo.value.status_code == 429
    assert excinfo.value.error_type == "requests"
    assert excinfo.value.error_code == "rate_limit_exceeded"
    assert excinfo.value.error_message == "Rate limit reached"
    assert "Rate limit reached" not in str(excinfo.value)


def test_status_error_with_non_json_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, content=b"<html>Bad Gateway</html>")

    with pytest.raises(OpenAIStatusError) as excinfo:
        _run(handler)

    assert excinfo.value.status_code == 502
    assert excinfo.value.error_type is None
    assert excinfo.value.error_code is None
    assert excinfo.value.error_message is None


@pytest.mark.parametrize(
    "exc",
    [
        httpx.ConnectError("connection refused"),
        httpx.ReadTimeout("timed out"),
    ],
)
def test_transport_failures_raise_request_error(exc: httpx.HTTPError) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc

    with pytest.raises(OpenAIRequestError):
        _run(handler)


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, content=b"not json"),
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, json={"object": "chat.completion"}),
        httpx.Response(200, json=[]),
        httpx.Response(200, json=_completion(None)),
    ],
)
def test_malformed_success_body_raises_response_error(response: httpx.Response) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return response

    with pytest.raises(OpenAIResponseError):
        _run(handler)
