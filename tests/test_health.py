from __future__ import annotations


def test_health_ok(client) -> None:
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


def test_health_does_not_need_api_key(client, monkeypatch) -> None:
    from app.core.settings import get_settings

    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    get_settings.cache_clear()

    res = client.get("/health")
    assert res.status_code == 200
    assert "x-request-id" in res.headers
