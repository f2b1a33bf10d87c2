"""Recipe generation with Groq (primary) and Gemini (secondary)."""

from .service import (
    GeminiRecipeGenerator,
    GroqRecipeGenerator,
    RecipeGenerator,
    create_recipe_generator,
)

__all__ = [
    "GeminiRecipeGenerator",
    "GroqRecipeGenerator",
    "RecipeGenerator",
    "create_recipe_generator",
]
