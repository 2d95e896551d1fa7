import base64
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from langchain_core.messages import AIMessageChunk
from langchain_core.messages.tool import tool_call_chunk

from kairos_chat import agent_service
from kairos_chat.api import app, get_chat_model, get_image_client

HAN_RIVER_PAYLOAD = {"status": "ok", "temp": "12.3", "station": "노량진"}
PNG_B64 = base64.b64encode(b"\x89PNG\r\n\x1a\nfake").decode("ascii")


def usage(input_tokens: int, output_tokens: int) -> dict[str, int]:
    return {"input_tokens": input_tokens, "output_tokens": output_tokens, "total_tokens": input_tokens + output_tokens}


def text_turn(*deltas: str, tokens: tuple[int, int] = (10, 5)) -> list[AIMessageChunk]:
    chunks = [AIMessageChunk(content=delta) for delta in deltas]
    chunks.append(AIMessageChunk(content="", usage_metadata=usage(*tokens), response_metadata={"finish_reason": "stop"}))
    return chunks


def tool_turn(call_id: str = "call_1", name: str = "getHanRiverTemp", tokens: tuple[int, int] = (8, 2)) -> list[AIMessageChunk]:
    return [
        AIMessageChunk(
            content="",
            tool_call_chunks=[tool_call_chunk(name=name, args="{}", id=call_id, index=0)],
            usage_metadata=usage(*tokens),
        )
    ]


class FakeChatModel:
    """Replays scripted turns; one turn per ``stream`` call."""

    def __init__(self, turns):
        self.turns = list(turns)
        self.calls = []
        self.bound_tools = []

    def bind_tools(self, tools):
        self.bound_tools = [item.name for item in tools]
        return self

    def stream(self, messages):
        self.calls.append(list(messages))
        turn = self.turns.pop(0)
        if isinstance(turn, Exception):
            raise turn
        yield from turn


class FakeImages:
    def __init__(self, data=None, error=None):
        self.data = data
        self.error = error
        self.requests = []

    def generate(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        if self.data is not None:
            return SimpleNamespace(data=self.data)
        return SimpleNamespace(data=[SimpleNamespace(b64_json=PNG_B64) for _ in range(kwargs.get("n", 1))])


class FakeImageClient:
    def __init__(self, **kwargs):
        self.images = FakeImages(**kwargs)


@pytest.fixture
def han_river(monkeypatch):
    calls = []

    def fake_fetch():
        calls.append(True)
        return HAN_RIVER_PAYLOAD

    monkeypatch.setattr(agent_service, "fetch_han_river_temperature", fake_fetch)
    return calls


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def use_chat_model():
    def install(model):
        app.dependency_overrides[get_chat_model] = lambda: model
        return model

    return install


@pytest.fixture
def use_image_client():
    def install(image_client):
        app.dependency_overrides[get_image_client] = lambda: image_client
        return image_client

    return install
