"""Recipe generation service: Groq (primary) + Gemini (secondary).

Provider-agnostic base class with two concrete implementations:
- GroqRecipeGenerator:   Groq LPU, llama-3.1-8b-instant
- GeminiRecipeGenerator: Google Gemini, gemini-1.5-flash

The base class owns every prompt and all JSON parsing; subclasses only send
text to their API. Provider status errors are re-raised as ``UpstreamError``
so the retry wrapper can tell transient failures from permanent ones, and
unusable replies raise ``MalformedResponseError``. Nothing here caches,
retries or falls back; that is the orchestrator's job.
"""

import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any
from uuid import uuid4

from recipe_ai.config import Settings
from recipe_ai.models import (
    Difficulty,
    FeedbackRating,
    MalformedResponseError,
    PlanConstraints,
    PlanFeedback,
    Recipe,
    UpstreamError,
)

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a professional chef, recipe creator and meal planner. "
    "Your recipes are delicious, achievable at home, and precise: every ingredient "
    "has a quantity and every step is clear enough for a beginner to follow. "
    "Respond ONLY with valid JSON. No explanations, no markdown, no extra text."
)

RECIPE_JSON_SHAPE = (
    '{"title": "Recipe Name", '
    '"description": "Brief appetizing description (1-2 sentences)", '
    '"ingredients": ["1 lb chicken breast", "2 tbsp olive oil"], '
    '"instructions": ["Step 1 with details", "Step 2 with details"], '
    '"cookingTime": 25, "servings": 4, "difficulty": "easy", '
    '"tags": ["chicken", "healthy", "dinner"]}'
)

PLAN_JSON_SHAPE = (
    '[{"title": "Recipe Name", "description": "Brief description", '
    '"ingredients": ["ingredient with quantity"], "instructions": ["detailed step"], '
    '"cookingTime": 30, "servings": 4, "difficulty": "easy", '
    '"tags": ["tag1", "tag2"], "estimatedCost": 12.50}]'
)

WEEKLY_PLAN_SIZE = 7


class RecipeGenerator(ABC):
    """Base class for AI recipe generators.

    Subclasses only implement ``_generate()`` for their specific API client.
    """

    _timeout: float

    @abstractmethod
    async def _generate(
        self,
        prompt: str,
        timeout: float | None = None,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> str:
        """Send prompt to the AI provider and return raw text."""
        ...

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Human-readable provider name for logging."""
        ...

    # ── Utilities ─────────────────────────────────────────────────────

    @staticmethod
    def _sanitize_input(text: str, max_length: int = 1000) -> str:
        """Strip control characters and cap length before prompting."""
        cleaned = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', '', text)
        return cleaned[:max_length].strip()

    @staticmethod
    def _extract_json(text: str, opener: str) -> Any:
        """Pull the first JSON object (``{``) or array (``[``) out of model text."""
        if "```json" in text:
            text = text.split("```json")[1].split("```")[0]
        elif "```" in text:
            text = text.split("```")[1].split("```")[0]
        closer = "}" if opener == "{" else "]"
        match = re.search(re.escape(opener) + r"[\s\S]*" + re.escape(closer), text)
        if not match:
            raise MalformedResponseError(f"No JSON {'object' if opener == '{' else 'array'} in response")
        try:
            return json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise MalformedResponseError(f"Invalid JSON in response: {e}") from e

    @staticmethod
    def _to_recipe(
        data: dict,
        id_prefix: str,
        index: int = 0,
        default_tags: list[str] | None = None,
        default_cost: float | None = None,
    ) -> Recipe:
        """Map one loosely-typed recipe object from the model onto ``Recipe``."""

        def number(value: Any, default: float) -> float:
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return value
            return default

        title = str(data.get("title") or f"Recipe {index + 1}").strip()
        ingredients = data.get("ingredients")
        instructions = data.get("instructions")
        tags = data.get("tags")
        difficulty = data.get("difficulty")
        cost = data.get("estimatedCost")
        return Recipe(
            id=f"{id_prefix}_{uuid4().hex[:12]}",
            title=title,
            description=str(data.get("description") or "A delicious AI-generated recipe"),
            ingredients=[str(i) for i in ingredients] if isinstance(ingredients, list) else ["Various ingredients"],
            instructions=[str(s) for s in instructions] if isinstance(instructions, list) else ["Follow cooking instructions"],
            cooking_time=max(0, int(number(data.get("cookingTime"), 30))),
            servings=max(1, int(number(data.get("servings"), 4))),
            difficulty=Difficulty(difficulty) if difficulty in ("easy", "medium", "hard") else Difficulty.EASY,
            tags=[str(t) for t in tags] if isinstance(tags, list) else list(default_tags or ["ai-generated"]),
            estimated_cost=float(cost) if number(cost, -1) >= 0 else default_cost,
        )

    def _parse_plan(
        self,
        text: str,
        id_prefix: str,
        default_cost: float | None = None,
    ) -> list[Recipe]:
        data = self._extract_json(text, "[")
        if not isinstance(data, list) or not data:
            raise MalformedResponseError("Meal plan response is not a non-empty array")
        recipes = [
            self._to_recipe(item, id_prefix, i, ["meal-plan"], default_cost)
            for i, item in enumerate(data)
            if isinstance(item, dict)
        ]
        if not recipes:
            raise MalformedResponseError("Meal plan response contains no recipe objects")
        return recipes

    # ── Shared implementations ────────────────────────────────────────

    async def generate_recipe(self, prompt: str) -> Recipe:
        """Create one recipe for a free-text request.

        Raises:
            UpstreamError: The provider returned an error status.
            MalformedResponseError: The reply is not a usable recipe.
            asyncio.TimeoutError: The provider did not answer in time.
        """
        request = self._sanitize_input(prompt)
        text = await self._generate(
            f'Create a detailed, delicious recipe based on this request: "{request}".\n\n'
            f"Respond with ONLY a JSON object in this exact format:\n{RECIPE_JSON_SHAPE}\n\n"
            f"Requirements:\n"
            f"- Include specific quantities for all ingredients\n"
            f"- Write clear, detailed cooking instructions\n"
            f"- Use realistic cooking times\n"
            f'- Difficulty must be "easy", "medium", or "hard"\n'
            f"- Include 3-5 relevant tags\n"
            f"- Make it sound delicious and achievable",
            temperature=0.7,
            max_tokens=1000,
        )
        data = self._extract_json(text, "{")
        if not isinstance(data, dict):
            raise MalformedResponseError("Recipe response is not an object")
        missing = [f for f in ("title", "ingredients", "instructions") if not data.get(f)]
        if missing:
            raise MalformedResponseError(f"Recipe response missing fields: {', '.join(missing)}")
        recipe = self._to_recipe(data, "ai")
        logger.info(f"[{self.provider_name}] Created recipe: {recipe.title}")
        return recipe

    async def generate_meal_plan(
        self, prompt: str, constraints: PlanConstraints | None = None
    ) -> list[Recipe]:
        """Create a meal plan: a weekly set of 7, or ``days x meal types`` with constraints."""
        request = self._sanitize_input(prompt)
        if constraints is None:
            text = await self._generate(
                f'Create {WEEKLY_PLAN_SIZE} different recipes for a weekly meal plan based on: "{request}".\n\n'
                f"Respond with ONLY a JSON array of recipe objects:\n{PLAN_JSON_SHAPE}\n\n"
                f"Make sure to include variety in cuisines, cooking methods, and meal types. "
                f"Each recipe should be complete and different from the others.",
                temperature=0.8,
                max_tokens=2000,
            )
            recipes = self._parse_plan(text, "meal_plan")
        else:
            total = constraints.total_meals
            per_meal = constraints.budget / total if constraints.budget > 0 else None
            budget_note = f" (total budget ${constraints.budget:g})" if per_meal else ""
            text = await self._generate(
                f"Create {total} different recipes for a {constraints.days}-day meal plan based on: "
                f'"{request}".\n\nConstraints: {constraints.to_prompt_text()}\n\n'
                f"Respond with ONLY a JSON array of recipe objects:\n{PLAN_JSON_SHAPE}\n\n"
                f"Requirements:\n"
                f"- Create exactly {total} different recipes\n"
                f"- Include variety in cuisines, cooking methods, and meal types\n"
                f"- Include specific quantities for all ingredients\n"
                f"- Use realistic cooking times (max {constraints.max_cooking_time} minutes each)\n"
                f'- Difficulty must be "easy", "medium", or "hard"\n'
                f"- Include 3-5 relevant tags per recipe\n"
                f"- Add estimated cost per recipe{budget_note}\n"
                f"- Dietary restrictions: {', '.join(constraints.dietary_restrictions) or 'none'}\n"
                f"- Preferred proteins: {', '.join(constraints.preferred_proteins) or 'any'}\n"
                f"- Avoid ingredients: {', '.join(constraints.avoid_ingredients) or 'none'}\n"
                f"- Cuisine preferences: {', '.join(constraints.cuisine_preferences) or 'any'}\n"
                f"- Skill level: {constraints.skill_level.value}",
                temperature=0.8,
                max_tokens=3000,
            )
            recipes = self._parse_plan(text, "meal_plan", per_meal)
        logger.info(f"[{self.provider_name}] Created meal plan with {len(recipes)} recipes")
        return recipes

    async def adjust_meal_plan(
        self,
        current_plan: list[Recipe],
        feedback: list[PlanFeedback],
        adjustment_request: str,
    ) -> list[Recipe]:
        """Rework a plan from like/dislike feedback, keeping its size."""
        titles = {r.id: r.title for r in current_plan}
        feedback_text = "\n".join(
            f'Recipe "{titles.get(f.recipe_id, f.recipe_id)}": {f.rating.value} - '
            f"{self._sanitize_input(f.feedback, 300)}"
            for f in feedback
        ) or "none"
        plan_summary = json.dumps(
            [{"title": r.title, "description": r.description, "tags": r.tags} for r in current_plan],
            indent=2,
        )
        disliked = sum(1 for f in feedback if f.rating is FeedbackRating.DISLIKE)
        text = await self._generate(
            f"Adjust the following meal plan based on user feedback and requests.\n\n"
            f"Current meal plan:\n{plan_summary}\n\n"
            f"User feedback:\n{feedback_text}\n\n"
            f'Adjustment request: "{self._sanitize_input(adjustment_request, 500)}"\n\n'
            f"Create an improved meal plan with the same number of recipes ({len(current_plan)}). "
            f"Replace the {disliked} disliked recipe(s) and keep liked recipes similar.\n\n"
            f"Respond with ONLY a JSON array of recipe objects:\n{PLAN_JSON_SHAPE}",
            temperature=0.8,
            max_tokens=3000,
        )
        recipes = self._parse_plan(text, "adjusted")
        logger.info(f"[{self.provider_name}] Adjusted meal plan: {len(recipes)} recipes")
        return recipes


# ═══════════════════════════════════════════════════════════════════════
# Provider: Groq  (primary, fast LPU inference)
# ═══════════════════════════════════════════════════════════════════════

class GroqRecipeGenerator(RecipeGenerator):
    """Groq LPU with Llama 3.1 8B Instant."""

    def __init__(
        self,
        api_key: str | None = None,
        model_name: str = "llama-3.1-8b-instant",
        timeout_seconds: float = 20.0,
    ) -> None:
        from groq import AsyncGroq

        if not api_key:
            raise ValueError("GROQ_API_KEY not provided")
        self._client = AsyncGroq(api_key=api_key)
        self._model_name = model_name
        self._timeout = timeout_seconds
        logger.info(f"[AI] Groq ready: {self._model_name}")

    @property
    def provider_name(self) -> str:
        return "Groq"

    async def _generate(
        self,
        prompt: str,
        timeout: float | None = None,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> str:
        from groq import APIStatusError

        t = timeout or self._timeout
        try:
            resp = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self._model_name,
                    messages=[
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": prompt},
                    ],
                    temperature=temperature,
                    max_tokens=max_tokens,
                    top_p=0.9,
                ),
                timeout=t,
            )
            return (resp.choices[0].message.content or "").strip()
        except asyncio.TimeoutError:
            logger.warning(f"[Groq] Timeout after {t}s")
            raise
        except APIStatusError as e:
            logger.warning(f"[Groq] HTTP {e.status_code}: {e.message}")
            raise UpstreamError(e.status_code, e.message, self.provider_name) from e


# ═══════════════════════════════════════════════════════════════════════
# Provider: Gemini  (secondary)
# ═══════════════════════════════════════════════════════════════════════

class GeminiRecipeGenerator(RecipeGenerator):
    """Google Gemini via the google-genai async client."""

    def __init__(
        self,
        api_key: str | None = None,
        model_name: str = "gemini-1.5-flash",
        timeout_seconds: float = 30.0,
    ) -> None:
        from google import genai

        if not api_key:
            raise ValueError("GEMINI_API_KEY not provided")
        self._client = genai.Client(api_key=api_key)
        self._model_name = model_name
        self._timeout = timeout_seconds
        logger.info(f"[AI] Gemini ready: {self._model_name}")

    @property
    def provider_name(self) -> str:
        return "Gemini"

    async def _generate(
        self,
        prompt: str,
        timeout: float | None = None,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> str:
        from google.genai import errors, types

        t = timeout or self._timeout
        try:
            resp = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self._model_name,
                    contents=prompt,
                    config=types.GenerateContentConfig(
                        system_instruction=SYSTEM_PROMPT,
                        temperature=temperature,
                        top_k=40,
                        top_p=0.95,
                        max_output_tokens=max_tokens,
                        response_mime_type="application/json",
                    ),
                ),
                timeout=t,
            )
            return (resp.text or "").strip()
        except asyncio.TimeoutError:
            logger.warning(f"[Gemini] Timeout after {t}s")
            raise
        except errors.APIError as e:
            logger.warning(f"[Gemini] HTTP {e.code}: {e.message}")
            raise UpstreamError(e.code, e.message or str(e), self.provider_name) from e


# ═══════════════════════════════════════════════════════════════════════
# Factory: Groq → Gemini
# ═══════════════════════════════════════════════════════════════════════

def create_recipe_generator(settings: Settings) -> RecipeGenerator:
    """Create the best available generator.  Groq first, Gemini second."""
    if settings.groq_api_key:
        try:
            return GroqRecipeGenerator(
                settings.groq_api_key, settings.groq_model, settings.ai_timeout_seconds
            )
        except Exception as e:
            logger.info(f"[AI] Groq init failed: {e}")

    if settings.gemini_api_key:
        try:
            return GeminiRecipeGenerator(
                settings.gemini_api_key, settings.gemini_model, settings.ai_timeout_seconds
            )
        except Exception as e:
            logger.info(f"[AI] Gemini init failed: {e}")

    raise ValueError("No AI provider available. Set GROQ_API_KEY or GEMINI_API_KEY in .env")
