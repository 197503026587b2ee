"""
Shared fixtures for the AI gateway tests.
"""
import json

import httpx
import pytest

from blog_ai_gateway.core.policy import GatewayPolicy


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingHandler:
    """MockTransport handler that records requests and replays a response factory."""

    def __init__(self, respond):
        self.respond = respond
        self.requests = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    def last_json(self):
        return json.loads(self.requests[-1].content)

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        result = self.respond(request)
        if hasattr(result, "__await__"):
            result = await result
        return result


def openai_response(text: str) -> httpx.Response:
    return httpx.Response(200, json={
        "id": "chatcmpl-1",
        "model": "deepseek-chat",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": text}}],
        "usage": {"prompt_tokens": 5, "completion_tokens": 7, "total_tokens": 12},
    })


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def policy():
    """Default policy without the delay between retries."""
    return GatewayPolicy(retry_delay=0)


@pytest.fixture
def recording_handler():
    """Factory for recording MockTransport handlers."""
    return RecordingHandler


@pytest.fixture
def chat_response():
    return openai_response
