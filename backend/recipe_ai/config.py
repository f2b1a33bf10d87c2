"""Runtime configuration for Recipe AI, read from the environment (.env supported)."""

import os
from dataclasses import dataclass, field
from enum import Enum

from dotenv import load_dotenv


class FallbackPolicy(str, Enum):
    """What the orchestrator does once the AI call has failed for good.

    TOLERANT serves a recipe from the built-in repertoire (flagged as a
    fallback); STRICT returns nothing and lets the UI show an error.
    """

    TOLERANT = "tolerant"
    STRICT = "strict"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: list[str]) -> list[str]:
    value = os.getenv(name)
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class OrchestratorSettings:
    """TTLs and retry budget for the generation orchestrator (seconds)."""

    recipe_ttl: float = 5 * 60
    recipe_fallback_ttl: float = 2 * 60
    mealplan_ttl: float = 10 * 60
    mealplan_fallback_ttl: float = 3 * 60
    max_retries: int = 3
    retry_base_delay: float = 1.0
    coalesce_inflight: bool = False


@dataclass
class Settings:
    groq_api_key: str | None = None
    groq_model: str = "llama-3.1-8b-instant"
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-1.5-flash"
    ai_timeout_seconds: float = 20.0
    fallback_policy: FallbackPolicy = FallbackPolicy.TOLERANT
    orchestrator: OrchestratorSettings = field(default_factory=OrchestratorSettings)
    response_cache_key_length: int = 20
    image_cache_max_entries: int = 100
    image_cache_ttl: float = 24 * 60 * 60
    image_verify_urls: bool = False
    cors_origins: list[str] = field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:3001"]
    )

    @classmethod
    def from_env(cls) -> "Settings":
        try:
            load_dotenv()
        except Exception:
            pass  # Python 3.14+ compat

        defaults = cls()
        orch = OrchestratorSettings(
            recipe_ttl=float(os.getenv("RECIPE_CACHE_TTL", defaults.orchestrator.recipe_ttl)),
            recipe_fallback_ttl=float(
                os.getenv("RECIPE_FALLBACK_TTL", defaults.orchestrator.recipe_fallback_ttl)
            ),
            mealplan_ttl=float(os.getenv("MEALPLAN_CACHE_TTL", defaults.orchestrator.mealplan_ttl)),
            mealplan_fallback_ttl=float(
                os.getenv("MEALPLAN_FALLBACK_TTL", defaults.orchestrator.mealplan_fallback_ttl)
            ),
            max_retries=int(os.getenv("AI_MAX_RETRIES", defaults.orchestrator.max_retries)),
            retry_base_delay=float(
                os.getenv("AI_RETRY_BASE_DELAY", defaults.orchestrator.retry_base_delay)
            ),
            coalesce_inflight=_env_bool("COALESCE_INFLIGHT", defaults.orchestrator.coalesce_inflight),
        )
        return cls(
            groq_api_key=os.getenv("GROQ_API_KEY") or None,
            groq_model=os.getenv("GROQ_MODEL", defaults.groq_model),
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            gemini_model=os.getenv("GEMINI_MODEL", defaults.gemini_model),
            ai_timeout_seconds=float(os.getenv("AI_TIMEOUT_SECONDS", defaults.ai_timeout_seconds)),
            fallback_policy=FallbackPolicy(
                os.getenv("RECIPE_FALLBACK_POLICY", defaults.fallback_policy.value).strip().lower()
            ),
            orchestrator=orch,
            response_cache_key_length=int(
                os.getenv("RESPONSE_CACHE_KEY_LENGTH", defaults.response_cache_key_length)
            ),
            image_cache_max_entries=int(
                os.getenv("IMAGE_CACHE_MAX_ENTRIES", defaults.image_cache_max_entries)
            ),
            image_cache_ttl=float(os.getenv("IMAGE_CACHE_TTL", defaults.image_cache_ttl)),
            image_verify_urls=_env_bool("IMAGE_VERIFY_URLS", defaults.image_verify_urls),
            cors_origins=_env_list("CORS_ORIGINS", defaults.cors_origins),
        )
