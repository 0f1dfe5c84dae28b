"""
Tests for the grading API endpoint.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import ScriptedTransport, chat_body
from main import app
from math_grader.api.grading import get_grading_service
from math_grader.core.config import get_config
from math_grader.core.exceptions import TransportError
from math_grader.services.ai_grading import AIGradingService
from math_grader.services.ai_providers import OpenAIChatProvider

GRADE_URL = "/api/v1/grading/grade"

REQUEST_BODY = {
    "question_text": "$x^2 - 5x + 6 = 0$",
    "model_solution_text": "$x = 2$ hoặc $x = 3$",
    "student_images": ["https://grader.s3.amazonaws.com/submissions/1.png"],
}


class FailingService:
    def __init__(self, error):
        self.error = error

    async def grade(self, request, max_retries=None):
        raise self.error


@pytest.fixture
def client():
    """Test client; dependency overrides are cleared afterwards."""
    yield TestClient(app)
    app.dependency_overrides.clear()


async def _no_sleep(seconds):
    return None


class TestHealth:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestGradeEndpoint:
    """Tests for POST /api/v1/grading/grade."""

    def test_successful_grading(self, client, make_settings, grading_payload):
        transport = ScriptedTransport([httpx.Response(200, json=chat_body(grading_payload))])
        settings = make_settings()
        service = AIGradingService(
            settings, OpenAIChatProvider(settings, transport.client(), sleep=_no_sleep)
        )
        app.dependency_overrides[get_grading_service] = lambda: service

        response = client.post(GRADE_URL, json=REQUEST_BODY)

        assert response.status_code == 200
        data = response.json()
        assert data["degraded"] is False
        assert data["error"] is None
        assert data["ai_result"]["score"] == 7
        assert data["ai_result"]["nextSteps"] == grading_payload["nextSteps"]
        assert len(data["ai_result"]["practiceSets"]["similar"]) == 4
        assert len(transport.requests) == 1

    def test_not_configured_returns_stub(self, client, make_settings):
        service = AIGradingService(make_settings(api_key=""))
        app.dependency_overrides[get_grading_service] = lambda: service

        response = client.post(GRADE_URL, json=REQUEST_BODY)

        assert response.status_code == 200
        assert response.json()["ai_result"]["score"] == 0
        assert "not configured" in response.json()["ai_result"]["summary"]

    def test_empty_request_is_rejected(self, client, make_settings):
        transport = ScriptedTransport([])
        settings = make_settings()
        service = AIGradingService(settings, OpenAIChatProvider(settings, transport.client()))
        app.dependency_overrides[get_grading_service] = lambda: service

        response = client.post(GRADE_URL, json={"student_images": []})

        assert response.status_code == 400
        assert transport.requests == []

    def test_failure_returns_degraded_result(self, client):
        app.dependency_overrides[get_grading_service] = lambda: FailingService(
            TransportError("HTTP 401", status_code=401)
        )

        response = client.post(GRADE_URL, json=REQUEST_BODY)

        assert response.status_code == 200
        data = response.json()
        assert data["degraded"] is True
        assert data["ai_result"]["score"] == 0
        assert data["ai_result"]["mistakes"] == []
        assert "API key" in data["ai_result"]["summary"]
        assert data["error"] is None

    def test_rate_limit_exhaustion_degrades(self, client, make_settings):
        transport = ScriptedTransport([httpx.Response(429) for _ in range(4)])
        settings = make_settings(max_retries=3)
        service = AIGradingService(
            settings, OpenAIChatProvider(settings, transport.client(), sleep=_no_sleep)
        )
        app.dependency_overrides[get_grading_service] = lambda: service

        response = client.post(GRADE_URL, json=REQUEST_BODY)

        assert response.status_code == 200
        assert response.json()["degraded"] is True
        assert "quá tải" in response.json()["ai_result"]["summary"]
        assert len(transport.requests) == 4

    def test_debug_mode_exposes_error(self, client, monkeypatch):
        monkeypatch.setattr(get_config().server, "debug", True)
        app.dependency_overrides[get_grading_service] = lambda: FailingService(
            TransportError("HTTP 503", status_code=503, code="Service Unavailable")
        )

        response = client.post(GRADE_URL, json=REQUEST_BODY)

        error = response.json()["error"]
        assert error == {
            "status": 503,
            "message": "HTTP 503",
            "type": "Service Unavailable",
        }

    def test_unexpected_exception_degrades(self, client):
        app.dependency_overrides[get_grading_service] = lambda: FailingService(
            RuntimeError("boom")
        )

        response = client.post(GRADE_URL, json=REQUEST_BODY)

        assert response.status_code == 200
        assert response.json()["ai_result"]["summary"] == "AI grading failed"
