"""
Test configuration and fixtures
"""

import json
import os
import sys
import tempfile

import httpx
import pytest

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Keep test logs out of the project tree
os.environ.setdefault("LOGS_DIR", tempfile.mkdtemp(prefix="grader-logs-"))

from math_grader.core.config import AISettings  # noqa: E402

AI_ENV_PREFIX = AISettings.model_config["env_prefix"].upper()


@pytest.fixture(autouse=True)
def clean_ai_env(monkeypatch):
    """Environment variables take precedence over explicit settings; clear them."""
    for name in list(os.environ):
        if not name.upper().startswith(AI_ENV_PREFIX):
            continue
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_settings():
    """Factory for AI settings with a valid-looking key and no .env lookup."""

    def _make(**overrides):
        values = {"api_key": "sk-test-key", "base_url": "https://ai.local/v1"}
        values.update(overrides)
        return AISettings(_env_file=None, **values)

    return _make


@pytest.fixture
def grading_payload():
    """A well-formed grading reply from the model."""
    return {
        "summary": "Học sinh giải đúng nhưng thiếu bước kiểm tra nghiệm.",
        "score": 7,
        "mistakes": ["Thiếu bước thay nghiệm vào phương trình gốc"],
        "nextSteps": ["Kiểm tra lại nghiệm bằng cách thay vào phương trình gốc"],
        "practiceSets": {
            "similar": [
                {"problem": "$x^2 - 7x + 12 = 0$", "solution": "$x = 3$ hoặc $x = 4$"},
                {"problem": "$x^2 - 9x + 20 = 0$", "solution": "$x = 4$ hoặc $x = 5$"},
                {"problem": "$x^2 - 6x + 8 = 0$", "solution": "$x = 2$ hoặc $x = 4$"},
                {"problem": "$x^2 - 8x + 15 = 0$", "solution": "$x = 3$ hoặc $x = 5$"},
            ],
            "remedial": [
                {"problem": "$x^2 - 4 = 0$", "solution": "$x = 2$ hoặc $x = -2$"},
                {"problem": "$x^2 - 9 = 0$", "solution": "$x = 3$ hoặc $x = -3$"},
                {"problem": "$x^2 - 16 = 0$", "solution": "$x = 4$ hoặc $x = -4$"},
                {"problem": "$x^2 - 25 = 0$", "solution": "$x = 5$ hoặc $x = -5$"},
            ],
        },
    }


def chat_body(content):
    """Chat completion response body wrapping the given message content."""
    if not isinstance(content, str):
        content = json.dumps(content, ensure_ascii=False)
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class ScriptedTransport:
    """
    Records outgoing requests and answers them from a fixed list of responses.

    Each item is an httpx.Response or an exception to raise.
    """

    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError("Unexpected extra request")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    @property
    def bodies(self):
        return [json.loads(r.content) for r in self.requests]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def recorded_sleeps():
    """Fake sleep that records requested delays (seconds) instead of waiting."""
    delays = []

    async def _sleep(seconds):
        delays.append(seconds)

    _sleep.delays = delays
    return _sleep
