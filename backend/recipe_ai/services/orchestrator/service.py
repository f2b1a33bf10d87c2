"""Generation orchestrator: the single entry point for recipes and meal plans.

Per request:

    cache lookup ── hit ─────────────────────────────────▶ return cached result
        │
        └─ miss ─▶ retry_with_backoff(AI call) ── ok ───▶ cache (long TTL) ─▶ return
                                │
                                └─ failed ─▶ TOLERANT: repertoire result, cache (short TTL)
                                             STRICT:   return None

Fallback results are cached for less time than AI results so a user who
retries shortly afterwards gets a fresh AI attempt. The fallback policy is
fixed per deployment.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable

from recipe_ai.config import FallbackPolicy, OrchestratorSettings
from recipe_ai.models import (
    FeedbackRating,
    GenerationResult,
    GenerationSource,
    PlanConstraints,
    PlanFeedback,
    Recipe,
)
from recipe_ai.services.cache import CacheCategory, ResponseCache
from recipe_ai.services.orchestrator.fallbacks import (
    fallback_meal_plan,
    fallback_recipe,
    replacement_recipes,
)
from recipe_ai.services.recipe_generator import RecipeGenerator
from recipe_ai.utils.retry import retry_with_backoff

logger = logging.getLogger(__name__)


class GenerationOrchestrator:
    """Composes the response cache, the retry wrapper and a recipe generator.

    Concurrent misses for the same key each call the provider unless
    ``settings.coalesce_inflight`` is on, in which case they share a single
    in-flight task.
    """

    def __init__(
        self,
        generator: RecipeGenerator,
        cache: ResponseCache,
        policy: FallbackPolicy = FallbackPolicy.TOLERANT,
        settings: OrchestratorSettings | None = None,
        *,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._generator = generator
        self._cache = cache
        self._policy = policy
        self._settings = settings or OrchestratorSettings()
        self._rng = rng or random.Random()
        self._sleep = sleep
        self._inflight: dict[str, asyncio.Task] = {}
        logger.info(
            f"[ORCH] Ready: provider={generator.provider_name}, policy={policy.value}, "
            f"coalesce={self._settings.coalesce_inflight}"
        )

    @property
    def policy(self) -> FallbackPolicy:
        return self._policy

    async def generate_recipe(self, prompt: str, user_id: str | None = None) -> GenerationResult | None:
        async def call() -> list[Recipe]:
            return [await self._generator.generate_recipe(prompt)]

        return await self._generate(
            prompt,
            CacheCategory.RECIPE,
            call,
            lambda: [fallback_recipe(prompt, self._rng)],
            self._settings.recipe_ttl,
            self._settings.recipe_fallback_ttl,
            user_id,
        )

    async def generate_meal_plan(
        self,
        prompt: str,
        constraints: PlanConstraints | None = None,
        user_id: str | None = None,
    ) -> GenerationResult | None:
        return await self._generate(
            prompt,
            CacheCategory.MEALPLAN,
            lambda: self._generator.generate_meal_plan(prompt, constraints),
            fallback_meal_plan,
            self._settings.mealplan_ttl,
            self._settings.mealplan_fallback_ttl,
            user_id,
            variant=constraints.fingerprint() if constraints is not None else None,
        )

    async def adjust_meal_plan(
        self,
        current_plan: list[Recipe],
        feedback: list[PlanFeedback],
        adjustment_request: str,
        user_id: str | None = None,
    ) -> GenerationResult | None:
        """Rework an existing plan. Adjustments are one-off edits and never cached."""
        try:
            recipes = await self._call_with_retry(
                lambda: self._generator.adjust_meal_plan(current_plan, feedback, adjustment_request)
            )
            return GenerationResult(recipes=recipes, source=GenerationSource.AI)
        except Exception as e:
            logger.warning(f"[ORCH] Meal plan adjustment failed for {user_id or 'anonymous'}: {e}")
            if self._policy is FallbackPolicy.STRICT:
                return None
            disliked = {f.recipe_id for f in feedback if f.rating is FeedbackRating.DISLIKE}
            return GenerationResult(
                recipes=replacement_recipes(current_plan, disliked, self._rng),
                source=GenerationSource.FALLBACK,
            )

    # ── Internals ─────────────────────────────────────────────────────

    async def _call_with_retry(self, call: Callable[[], Awaitable[list[Recipe]]]) -> list[Recipe]:
        return await retry_with_backoff(
            call,
            self._settings.max_retries,
            base_delay=self._settings.retry_base_delay,
            sleep=self._sleep,
        )

    async def _generate(
        self,
        cache_text: str,
        category: CacheCategory,
        call: Callable[[], Awaitable[list[Recipe]]],
        fallback: Callable[[], list[Recipe]],
        ttl: float,
        fallback_ttl: float,
        user_id: str | None,
        variant: str | None = None,
    ) -> GenerationResult | None:
        cached = self._cache.get(cache_text, category, variant)
        if cached is not None:
            return cached.model_copy(update={"cached": True})

        async def miss() -> GenerationResult | None:
            return await self._on_miss(
                cache_text, category, call, fallback, ttl, fallback_ttl, user_id, variant
            )

        if not self._settings.coalesce_inflight:
            return await miss()
        return await self._coalesce(self._cache.make_key(cache_text, category, variant), miss)

    async def _on_miss(
        self,
        cache_text: str,
        category: CacheCategory,
        call: Callable[[], Awaitable[list[Recipe]]],
        fallback: Callable[[], list[Recipe]],
        ttl: float,
        fallback_ttl: float,
        user_id: str | None,
        variant: str | None = None,
    ) -> GenerationResult | None:
        who = user_id or "anonymous"
        logger.info(f"[ORCH] Cache miss for {category.value} ({who}), calling {self._generator.provider_name}")
        try:
            recipes = await self._call_with_retry(call)
        except Exception as e:
            logger.warning(f"[ORCH] {category.value} generation failed ({who}): {type(e).__name__}: {e}")
            if self._policy is FallbackPolicy.STRICT:
                return None
            result = GenerationResult(recipes=fallback(), source=GenerationSource.FALLBACK)
            self._cache.set(cache_text, result, category, fallback_ttl, variant)
            logger.info(f"[ORCH] Serving fallback {category.value} ({who})")
            return result

        result = GenerationResult(recipes=recipes, source=GenerationSource.AI)
        self._cache.set(cache_text, result, category, ttl, variant)
        return result

    async def _coalesce(
        self, key: str, factory: Callable[[], Awaitable[GenerationResult | None]]
    ) -> GenerationResult | None:
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._inflight[key] = task

            def forget(done: asyncio.Task) -> None:
                if self._inflight.get(key) is done:
                    del self._inflight[key]

            task.add_done_callback(forget)
        else:
            logger.info(f"[ORCH] Joining in-flight request for {key}")
        # Shielded so one cancelled caller does not cancel the shared call.
        return await asyncio.shield(task)
