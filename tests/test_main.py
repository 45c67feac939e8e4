from __future__ import annotations

import importlib

from fastapi.testclient import TestClient
import pytest

from roadmap_chat.client.results import ChatResultOk
from roadmap_chat.client.stream_reader import ChatStreamReader
from roadmap_chat.core.settings import get_settings


@pytest.fixture
def mock_app(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("CHAT_USE_MOCK", "true")
    monkeypatch.setenv("APP_ENV", "local")
    monkeypatch.delenv("CHAT_MOCK_MESSAGES_FILE", raising=False)
    get_settings.cache_clear()
    main = importlib.reload(importlib.import_module("roadmap_chat.main"))
    yield main.app
    get_settings.cache_clear()


def test_lifespan_wires_container_and_streams_mock_reply(mock_app) -> None:
    with TestClient(mock_app) as client:
        assert client.get("/healthz").json() == {"status": "ok"}
        response = client.post("/api/chat", json={"messages": [{"role": "user", "content": "hi"}]})

    assert response.status_code == 200
    reader = ChatStreamReader()
    reader.feed(response.content)
    reader.finish()
    result = reader.result()
    assert isinstance(result, ChatResultOk)
    assert result.content.startswith("This is an offline mock answer.")
