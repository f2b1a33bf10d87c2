"""Unit tests for environment-driven settings."""

import pytest

from recipe_ai.config import FallbackPolicy, Settings

ENV_VARS = (
    "GROQ_API_KEY",
    "GROQ_MODEL",
    "GEMINI_API_KEY",
    "GEMINI_MODEL",
    "AI_TIMEOUT_SECONDS",
    "RECIPE_FALLBACK_POLICY",
    "RECIPE_CACHE_TTL",
    "RECIPE_FALLBACK_TTL",
    "MEALPLAN_CACHE_TTL",
    "MEALPLAN_FALLBACK_TTL",
    "AI_MAX_RETRIES",
    "AI_RETRY_BASE_DELAY",
    "COALESCE_INFLIGHT",
    "RESPONSE_CACHE_KEY_LENGTH",
    "IMAGE_CACHE_MAX_ENTRIES",
    "IMAGE_CACHE_TTL",
    "IMAGE_VERIFY_URLS",
    "CORS_ORIGINS",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettings:
    def test_defaults(self, clean_env) -> None:
        settings = Settings.from_env()

        assert settings.groq_api_key is None
        assert settings.fallback_policy is FallbackPolicy.TOLERANT
        assert settings.orchestrator.recipe_ttl == 300
        assert settings.orchestrator.recipe_fallback_ttl == 120
        assert settings.orchestrator.mealplan_ttl == 600
        assert settings.orchestrator.mealplan_fallback_ttl == 180
        assert settings.orchestrator.max_retries == 3
        assert not settings.orchestrator.coalesce_inflight
        assert settings.response_cache_key_length == 20
        assert settings.image_cache_max_entries == 100
        assert settings.image_cache_ttl == 86400

    def test_overrides(self, clean_env) -> None:
        clean_env.setenv("GROQ_API_KEY", "gsk_test")
        clean_env.setenv("RECIPE_FALLBACK_POLICY", " Strict ")
        clean_env.setenv("RECIPE_CACHE_TTL", "60")
        clean_env.setenv("AI_MAX_RETRIES", "1")
        clean_env.setenv("COALESCE_INFLIGHT", "true")
        clean_env.setenv("RESPONSE_CACHE_KEY_LENGTH", "128")
        clean_env.setenv("IMAGE_VERIFY_URLS", "yes")
        clean_env.setenv("CORS_ORIGINS", "https://recipes.example.com, http://localhost:5173")

        settings = Settings.from_env()

        assert settings.groq_api_key == "gsk_test"
        assert settings.fallback_policy is FallbackPolicy.STRICT
        assert settings.orchestrator.recipe_ttl == 60
        assert settings.orchestrator.max_retries == 1
        assert settings.orchestrator.coalesce_inflight
        assert settings.response_cache_key_length == 128
        assert settings.image_verify_urls
        assert settings.cors_origins == ["https://recipes.example.com", "http://localhost:5173"]

    def test_unknown_policy(self, clean_env) -> None:
        clean_env.setenv("RECIPE_FALLBACK_POLICY", "optimistic")
        with pytest.raises(ValueError):
            Settings.from_env()
