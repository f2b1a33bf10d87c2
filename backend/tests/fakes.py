"""Test doubles shared by the unit tests."""

import json

from recipe_ai.services.recipe_generator import RecipeGenerator

RECIPE_JSON = json.dumps(
    {
        "title": "Vegan Pasta Primavera",
        "description": "Bright spring vegetables tossed with penne",
        "ingredients": ["200g penne pasta", "1 zucchini", "2 tbsp olive oil"],
        "instructions": ["Boil the pasta", "Saute the zucchini", "Toss together"],
        "cookingTime": 25,
        "servings": 2,
        "difficulty": "easy",
        "tags": ["vegan", "pasta", "quick"],
    }
)

PLAN_JSON = json.dumps(
    [
        {
            "title": "Overnight Oats",
            "ingredients": ["1 cup oats", "1 cup almond milk"],
            "instructions": ["Mix", "Refrigerate overnight"],
            "cookingTime": 5,
            "servings": 1,
            "difficulty": "easy",
            "tags": ["breakfast"],
            "estimatedCost": 2.5,
        },
        {
            "title": "Lentil Curry",
            "ingredients": ["1 cup red lentils", "1 can coconut milk"],
            "instructions": ["Simmer lentils", "Stir in coconut milk"],
            "cookingTime": 35,
            "servings": 4,
            "difficulty": "medium",
            "tags": ["dinner", "vegan"],
        },
    ]
)


class ScriptedGenerator(RecipeGenerator):
    """Recipe generator whose raw replies are scripted.

    Each ``_generate`` call pops the next outcome; exceptions are raised,
    strings are returned as model text. When the script runs out,
    ``default`` is used.
    """

    def __init__(self, outcomes=None, default=None) -> None:
        self.outcomes = list(outcomes or [])
        self.default = default
        self.prompts: list[str] = []
        self._timeout = 1.0

    @property
    def provider_name(self) -> str:
        return "Scripted"

    @property
    def calls(self) -> int:
        return len(self.prompts)

    async def _generate(self, prompt, timeout=None, temperature=0.7, max_tokens=1000) -> str:
        self.prompts.append(prompt)
        outcome = self.outcomes.pop(0) if self.outcomes else self.default
        if isinstance(outcome, BaseException):
            raise outcome
        if outcome is None:
            raise AssertionError("ScriptedGenerator ran out of outcomes")
        return outcome


class FakeClock:
    """Manually advanced time source, in seconds."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Awaitable sleep that returns immediately and records each delay."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
