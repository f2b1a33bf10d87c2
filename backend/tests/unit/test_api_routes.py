"""Unit tests for the HTTP API, using a scripted recipe generator."""

import pytest
from fastapi.testclient import TestClient

from recipe_ai.config import FallbackPolicy, OrchestratorSettings, Settings
from recipe_ai.main import create_app
from recipe_ai.models import UpstreamError
from tests.fakes import PLAN_JSON, RECIPE_JSON, ScriptedGenerator


def _client(generator, policy=FallbackPolicy.TOLERANT) -> TestClient:
    settings = Settings(
        fallback_policy=policy,
        orchestrator=OrchestratorSettings(max_retries=0),
    )
    return TestClient(create_app(settings, generator=generator))


@pytest.fixture
def generator() -> ScriptedGenerator:
    return ScriptedGenerator(default=RECIPE_JSON)


class TestRecipeRoutes:
    def test_health(self, generator) -> None:
        with _client(generator) as client:
            response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_generate_then_cached(self, generator) -> None:
        with _client(generator) as client:
            first = client.post(
                "/api/recipes/generate",
                json={"prompt": "Create a vegan pasta recipe"},
                headers={"X-User-Id": "user-42"},
            ).json()
            second = client.post("/api/recipes/generate", json={"prompt": "create a vegan pasta recipe"}).json()

        assert first["success"] is True
        assert first["source"] == "ai"
        assert first["degraded"] is False
        assert first["cached"] is False
        assert first["recipe"]["title"] == "Vegan Pasta Primavera"
        assert first["recipe"]["cooking_time"] == 25
        assert second["cached"] is True
        assert second["recipe"]["id"] == first["recipe"]["id"]
        assert generator.calls == 1

    def test_blank_prompt_is_invalid_input(self, generator) -> None:
        with _client(generator) as client:
            body = client.post("/api/recipes/generate", json={"prompt": "   "}).json()
        assert body["success"] is False
        assert body["error"]["code"] == "INVALID_INPUT"
        assert generator.calls == 0

    def test_missing_prompt_is_rejected(self, generator) -> None:
        with _client(generator) as client:
            response = client.post("/api/recipes/generate", json={})
        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "VALIDATION_ERROR"
        assert body["error"]["user_message"]

    def test_tolerant_failure_is_degraded(self) -> None:
        generator = ScriptedGenerator(default=UpstreamError(503, "unavailable"))
        with _client(generator) as client:
            body = client.post("/api/recipes/generate", json={"prompt": "quinoa bowl"}).json()
        assert body["success"] is True
        assert body["source"] == "fallback"
        assert body["degraded"] is True
        assert body["recipe"]["title"] == "Mediterranean Quinoa Power Bowl"

    def test_strict_failure_is_an_error(self) -> None:
        generator = ScriptedGenerator(default=UpstreamError(503, "unavailable"))
        with _client(generator, FallbackPolicy.STRICT) as client:
            body = client.post("/api/recipes/generate", json={"prompt": "quinoa bowl"}).json()
        assert body["success"] is False
        assert body["recipe"] is None
        assert body["error"]["code"] == "GENERATION_FAILED"


class TestMealPlanRoutes:
    def test_generate_with_constraints(self) -> None:
        generator = ScriptedGenerator(default=PLAN_JSON)
        with _client(generator) as client:
            body = client.post(
                "/api/meal-plans/generate",
                json={
                    "prompt": "vegetarian week",
                    "constraints": {"days": 2, "meal_types": ["lunch", "dinner"], "budget": 40},
                },
            ).json()
        assert body["success"] is True
        assert [r["title"] for r in body["recipes"]] == ["Overnight Oats", "Lentil Curry"]
        assert "Create 4 different recipes" in generator.prompts[0]

    def test_invalid_constraints_are_rejected(self, generator) -> None:
        with _client(generator) as client:
            response = client.post(
                "/api/meal-plans/generate",
                json={"prompt": "week", "constraints": {"days": 30}},
            )
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        assert generator.calls == 0

    def test_adjust(self) -> None:
        generator = ScriptedGenerator(default=PLAN_JSON)
        plan = [
            {"id": "r1", "title": "Overnight Oats"},
            {"id": "r2", "title": "Pork Chops"},
        ]
        with _client(generator) as client:
            body = client.post(
                "/api/meal-plans/adjust",
                json={
                    "current_plan": plan,
                    "feedback": [{"recipe_id": "r2", "rating": "dislike", "feedback": "no pork"}],
                    "adjustment_request": "more vegetables",
                },
            ).json()
        assert body["success"] is True
        assert body["cached"] is False
        assert len(body["recipes"]) == 2

    def test_adjust_requires_a_plan(self, generator) -> None:
        with _client(generator) as client:
            response = client.post("/api/meal-plans/adjust", json={"current_plan": []})
        assert response.status_code == 422


class TestImageAndCacheRoutes:
    def test_image_then_cached(self, generator) -> None:
        payload = {"title": "Lentil Curry", "ingredients": ["1 cup red lentils", "1 can coconut milk"]}
        with _client(generator) as client:
            first = client.post("/api/images/recipe", json=payload).json()
            second = client.post("/api/images/recipe", json=payload).json()
        assert first["success"] is True
        assert first["url"].startswith("https://image.pollinations.ai/prompt/")
        assert first["cached"] is False
        assert second["cached"] is True
        assert second["url"] == first["url"]

    def test_stats_and_clear(self, generator) -> None:
        with _client(generator) as client:
            client.post("/api/recipes/generate", json={"prompt": "soup"})
            client.post("/api/images/recipe", json={"title": "Soup", "ingredients": []})

            stats = client.get("/api/cache/stats").json()
            assert stats == {"responses": {"size": 1}, "images": {"size": 1, "max_size": 100}}

            assert client.delete("/api/cache").json() == {"success": True}
            stats = client.get("/api/cache/stats").json()
            assert stats["responses"]["size"] == 0
            assert stats["images"]["size"] == 0
