"""Core data models for Recipe AI.

Pydantic models for recipes, meal-plan constraints and feedback, and the
result envelope the orchestrator hands back to the API layer.
"""

import hashlib
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class MealType(str, Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"


class SkillLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class FeedbackRating(str, Enum):
    LIKE = "like"
    DISLIKE = "dislike"


class GenerationSource(str, Enum):
    """Where a generation result came from.

    ``FALLBACK`` results are synthesized locally from the built-in repertoire
    and must be shown to the user as degraded.
    """

    AI = "ai"
    FALLBACK = "fallback"


class Recipe(BaseModel):
    """A single recipe, AI-generated or taken from the local repertoire."""

    id: str = Field(..., min_length=1, description="Unique recipe identifier")
    title: str = Field(..., min_length=1, description="Display name of the dish")
    description: str = Field(default="", description="Short appetizing description")
    ingredients: list[str] = Field(default_factory=list, description="Ingredients with quantities")
    instructions: list[str] = Field(default_factory=list, description="Ordered cooking steps")
    cooking_time: int = Field(default=30, ge=0, description="Total cooking time in minutes")
    servings: int = Field(default=4, ge=1, description="Number of servings")
    difficulty: Difficulty = Field(default=Difficulty.EASY)
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
    image_url: Optional[str] = Field(None, description="Resolved dish image URL")
    estimated_cost: Optional[float] = Field(
        None, ge=0, description="Estimated cost in USD (meal plans only)"
    )


class PlanConstraints(BaseModel):
    """User constraints for a dynamic meal plan."""

    budget: float = Field(default=0, ge=0, description="Total budget in USD, 0 for no limit")
    max_cooking_time: int = Field(default=120, ge=1, description="Max minutes per recipe")
    days: int = Field(default=7, ge=1, le=14)
    dietary_restrictions: list[str] = Field(default_factory=list)
    preferred_proteins: list[str] = Field(default_factory=list)
    avoid_ingredients: list[str] = Field(default_factory=list)
    skill_level: SkillLevel = Field(default=SkillLevel.INTERMEDIATE)
    meal_types: list[MealType] = Field(default_factory=lambda: [MealType.DINNER], min_length=1)
    cuisine_preferences: list[str] = Field(default_factory=list)

    @property
    def total_meals(self) -> int:
        return self.days * len(self.meal_types)

    def to_prompt_text(self) -> str:
        """Render the constraints as a compact, comma-separated prompt clause."""
        parts = []
        if self.budget > 0:
            parts.append(f"Budget: ${self.budget:g}")
        if self.max_cooking_time < 120:
            parts.append(f"Max cooking time: {self.max_cooking_time} minutes")
        if self.dietary_restrictions:
            parts.append(f"Dietary restrictions: {', '.join(self.dietary_restrictions)}")
        if self.preferred_proteins:
            parts.append(f"Preferred proteins: {', '.join(self.preferred_proteins)}")
        if self.avoid_ingredients:
            parts.append(f"Avoid: {', '.join(self.avoid_ingredients)}")
        if self.cuisine_preferences:
            parts.append(f"Cuisine preferences: {', '.join(self.cuisine_preferences)}")
        parts.append(f"Skill level: {self.skill_level.value}")
        parts.append(f"Meal types: {', '.join(m.value for m in self.meal_types)}")
        return ", ".join(parts)

    def fingerprint(self) -> str:
        """Short stable digest of every constraint field, for cache keys."""
        return hashlib.sha256(self.model_dump_json().encode("utf-8")).hexdigest()[:16]


class PlanFeedback(BaseModel):
    """User reaction to one recipe of an existing meal plan."""

    recipe_id: str = Field(..., min_length=1)
    rating: FeedbackRating
    feedback: str = Field(default="")


class GenerationResult(BaseModel):
    """Outcome of one orchestrated generation request."""

    recipes: list[Recipe] = Field(..., min_length=1)
    source: GenerationSource
    cached: bool = Field(default=False, description="True when served from the response cache")

    @property
    def recipe(self) -> Recipe:
        return self.recipes[0]

    @property
    def degraded(self) -> bool:
        return self.source is GenerationSource.FALLBACK
