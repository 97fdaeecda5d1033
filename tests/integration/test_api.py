"""Integration tests for the HTTP API.

Routes are exercised through FastAPI's TestClient with the bundled survey
content, an in-memory result store and AI services that never touch the
network.
"""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from pulse.config import Settings
from pulse.main import app
from pulse.services.ai import (
    AnswerExtractionService,
    InsightService,
    get_extraction_service,
    get_insight_service,
)
from pulse.services.result_repository import InMemoryResultRepository, get_result_repository
from pulse.services.risk import EMPTY_HISTORY_MESSAGE
from pulse.services.seed import seed_demo_history
from pulse.services.survey_loader import SurveyLoader, get_survey_loader
from pulse.services.survey_session import SurveySessionService, get_session_service

S1_ANSWERS = {"q1": 5, "q2": 4, "q3": 2, "q4": 3, "q5": 4, "q6": 4, "q7": "Bien"}


def ai_client(content):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    ))
    client.__aenter__.return_value = client
    client.__aexit__.return_value = False
    return client


@pytest.fixture
def repository():
    return InMemoryResultRepository()


@pytest.fixture
def loader():
    return SurveyLoader()


@pytest.fixture
def ai_settings():
    """Settings without AI credentials; tests swap in configured ones as needed."""
    return Settings(openai_api_key=None)


@pytest.fixture
def client(repository, loader, ai_settings):
    sessions = SurveySessionService(loader=loader, repository=repository)

    app.dependency_overrides[get_result_repository] = lambda: repository
    app.dependency_overrides[get_survey_loader] = lambda: loader
    app.dependency_overrides[get_session_service] = lambda: sessions
    app.dependency_overrides[get_insight_service] = lambda: InsightService(settings=ai_settings)
    app.dependency_overrides[get_extraction_service] = lambda: AnswerExtractionService(settings=ai_settings)

    yield TestClient(app)

    app.dependency_overrides.clear()


class TestServiceEndpoints:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["service"] == "Psychosocial Pulse"
        assert response.json()["status"] == "operational"

    def test_health(self, client, repository, make_result):
        repository.append(make_result())

        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["results"] == 1
        assert data["surveys"] == 3
        assert data["ai"] == "not_configured"

    def test_health_store_failure(self, client):
        broken = MagicMock()
        broken.count.side_effect = RuntimeError("db down")
        app.dependency_overrides[get_result_repository] = lambda: broken

        assert client.get("/health").status_code == 503

    def test_unhandled_error_is_generic_500(self):
        broken = MagicMock()
        broken.load_all.side_effect = RuntimeError("disk on fire")
        app.dependency_overrides[get_survey_loader] = lambda: broken
        try:
            response = TestClient(app, raise_server_exceptions=False).get("/api/surveys")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"
        assert "disk on fire" not in response.text


class TestSurveyEndpoints:

    def test_list_surveys(self, client):
        response = client.get("/api/surveys")
        assert response.status_code == 200
        assert [survey["id"] for survey in response.json()] == ["s1", "s2", "s3"]

    def test_get_survey(self, client):
        response = client.get("/api/surveys/s2")
        assert response.status_code == 200
        assert response.json()["title"] == "Inventario de Riesgo de Burnout"

    def test_unknown_survey(self, client):
        assert client.get("/api/surveys/s9").status_code == 404

    def test_submit_results(self, client, repository):
        response = client.post("/api/surveys/s1/results", json={"userId": "user_9", "answers": S1_ANSWERS})

        assert response.status_code == 201
        data = response.json()
        assert data["surveyId"] == "s1"
        assert data["userId"] == "user_9"
        assert data["scores"]["Carga de Trabajo"] == 5.0
        assert data["totalScore"] == 3.7
        assert repository.count() == 1

    def test_submit_incomplete_results(self, client, repository):
        response = client.post(
            "/api/surveys/s1/results",
            json={"user_id": "user_9", "answers": {"q1": 9, "zz": 1}}
        )

        assert response.status_code == 422
        errors = response.json()["detail"]["errors"]
        assert "entre 1 y 5" in errors["q1"]
        assert errors["q2"] == "Esta pregunta es obligatoria."
        assert "zz" in errors
        assert "q7" not in errors
        assert repository.count() == 0

    def test_boolean_answer_rejected(self, client, repository):
        answers = {**S1_ANSWERS, "q1": True}
        response = client.post("/api/surveys/s1/results", json={"userId": "user_9", "answers": answers})

        assert response.status_code == 422
        assert repository.count() == 0

    def test_extract_without_credentials(self, client):
        response = client.post(
            "/api/surveys/s1/extract",
            files={"image": ("survey.jpg", b"\xff\xd8\xff", "image/jpeg")}
        )

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["message"].startswith("No se pudieron detectar respuestas")
        assert detail["reason"] == "missing_credentials"

    def test_extract_answers(self, client):
        fake = ai_client(json.dumps({"b1": 4, "b6": "a veces", "bogus": 1}))
        service = AnswerExtractionService(
            settings=Settings(openai_api_key="sk-test"),
            client_factory=lambda settings: fake,
        )
        app.dependency_overrides[get_extraction_service] = lambda: service

        response = client.post(
            "/api/surveys/s2/extract",
            files={"image": ("survey.png", b"\x89PNG", "image/png")}
        )

        assert response.status_code == 200
        assert response.json() == {"survey_id": "s2", "answers": {"b1": 4, "b6": "A veces"}}


class TestSessionEndpoints:

    def start(self, client, survey_id="s3", **extra):
        response = client.post("/api/sessions", json={"survey_id": survey_id, "user_id": "user_5", **extra})
        assert response.status_code == 201
        return response.json()

    def test_start_session(self, client):
        state = self.start(client)
        assert state["current_step"] == 0
        assert state["total_steps"] == 5
        assert state["progress"] == 20.0
        assert state["current_question"]["id"] == "r1"
        assert state["can_proceed"] is False
        assert state["view"] == "taking_survey"

    def test_start_unknown_survey(self, client):
        response = client.post("/api/sessions", json={"survey_id": "s9", "user_id": "user_5"})
        assert response.status_code == 404

    def test_answer_and_advance(self, client):
        session_id = self.start(client)["session_id"]

        response = client.put(f"/api/sessions/{session_id}/answers/r1", json={"value": "4"})
        assert response.status_code == 200
        assert response.json()["answers"] == {"r1": 4}
        assert response.json()["can_proceed"] is True

        response = client.post(f"/api/sessions/{session_id}/advance")
        assert response.status_code == 200
        assert response.json()["current_step"] == 1

    def test_invalid_answer(self, client):
        session_id = self.start(client)["session_id"]

        response = client.put(f"/api/sessions/{session_id}/answers/r1", json={"value": 8})

        assert response.status_code == 422
        assert response.json()["detail"]["message"] == "El valor debe estar entre 1 y 5."

    def test_boolean_session_answer_rejected(self, client):
        session_id = self.start(client)["session_id"]

        response = client.put(f"/api/sessions/{session_id}/answers/r1", json={"value": True})

        assert response.status_code == 422
        assert client.get(f"/api/sessions/{session_id}").json()["answers"] == {}

    def test_answer_unknown_question(self, client):
        session_id = self.start(client)["session_id"]
        response = client.put(f"/api/sessions/{session_id}/answers/q1", json={"value": 3})
        assert response.status_code == 409

    def test_advance_requires_answer(self, client):
        session_id = self.start(client)["session_id"]
        assert client.post(f"/api/sessions/{session_id}/advance").status_code == 409

    def test_prefilled_session_completes(self, client, repository):
        state = self.start(client, initial_answers={"r1": 5, "r2": 4, "r3": 2, "r4": 4, "r5": 9})
        session_id = state["session_id"]
        assert "r5" not in state["answers"]

        for _ in range(4):
            client.post(f"/api/sessions/{session_id}/advance")
        client.put(f"/api/sessions/{session_id}/answers/r5", json={"value": 5})

        response = client.post(f"/api/sessions/{session_id}/advance")

        assert response.status_code == 200
        data = response.json()
        assert data["completed"] is True
        assert data["view"] == "dashboard"
        assert data["result"]["totalScore"] == 4.0
        assert data["result"]["scores"]["Ergonomía"] == 5.0
        assert repository.count() == 1
        assert client.get(f"/api/sessions/{session_id}").status_code == 404

    def test_cancel_session(self, client, repository):
        session_id = self.start(client)["session_id"]

        response = client.delete(f"/api/sessions/{session_id}")
        assert response.status_code == 200
        assert response.json()["view"] == "surveys"
        assert response.json()["completed"] is False
        assert client.get(f"/api/sessions/{session_id}").status_code == 404
        assert client.delete(f"/api/sessions/{session_id}").status_code == 404
        assert repository.count() == 0


class TestUserEndpoints:

    def test_results_history(self, client, repository, make_result):
        repository.append(make_result("b", days=3))
        repository.append(make_result("a", days=1))

        response = client.get("/api/users/user_1/results")

        assert response.status_code == 200
        assert [result["id"] for result in response.json()] == ["a", "b"]

    def test_empty_dashboard(self, client):
        response = client.get("/api/users/nobody/dashboard")

        assert response.status_code == 200
        assert response.json() == {"has_results": False, "message": EMPTY_HISTORY_MESSAGE}

    def test_dashboard_metrics(self, client, repository, make_result):
        repository.append(make_result("first", scores={"Carga de Trabajo": 3.0}, total_score=3.0))
        repository.append(make_result(
            "second",
            scores={"Carga de Trabajo": 5.0, "Liderazgo": 2.0, "eNPS": 4.0},
            total_score=3.6,
            days=30,
        ))

        response = client.get("/api/users/user_1/dashboard")

        assert response.status_code == 200
        data = response.json()
        assert data["has_results"] is True
        assert data["latest_result_id"] == "second"
        assert data["burnout_risk"]["value"] == pytest.approx(92.0)
        assert data["burnout_risk"]["level"] == "High Risk"
        assert data["wellbeing"]["change"] == pytest.approx(20.0)
        assert data["enps"]["value"] == pytest.approx(70.0)
        assert len(data["trend"]) == 2
        benchmark = {point["name"]: point["company"] for point in data["benchmark"]}
        assert benchmark == {"Carga de Trabajo": 3.2, "Liderazgo": 3.5, "eNPS": 3.9}

    def test_seeded_demo_user_dashboard(self, client, repository):
        seed_demo_history(repository, "user_1")

        data = client.get("/api/users/user_1/dashboard").json()

        assert data["has_results"] is True
        assert len(data["trend"]) == 6
        assert len(data["benchmark"]) == 5

    def test_insight_without_results(self, client):
        response = client.post("/api/users/nobody/insight")

        assert response.status_code == 200
        assert response.json()["available"] is False
        assert response.json()["reason"] == "no_results"

    def test_insight_without_credentials(self, client, repository, make_result):
        repository.append(make_result())

        response = client.post("/api/users/user_1/insight")

        assert response.status_code == 200
        assert response.json() == {
            "available": False,
            "text": "Insights de IA no disponibles. Configura tu API_KEY.",
            "reason": "missing_credentials",
        }

    def test_insight_generated(self, client, repository, make_result):
        repository.append(make_result(scores={"Liderazgo": 4.0}, total_score=4.0))
        fake = ai_client("1. **Análisis Personal:** Estable.")
        service = InsightService(settings=Settings(openai_api_key="sk-test"), client_factory=lambda s: fake)
        app.dependency_overrides[get_insight_service] = lambda: service

        response = client.post("/api/users/user_1/insight")

        assert response.json() == {
            "available": True,
            "text": "1. **Análisis Personal:** Estable.",
            "reason": None,
        }
