"""Recipe AI Services.

Service layer components:
- Cache: in-memory response cache (TTL) and bounded image URL cache
- Recipe Generator: Groq (primary) + Gemini (secondary) recipe/meal-plan prompts
- Orchestrator: cache lookup → retry with backoff → store, with fallback policy
- Images: dish image URL resolution (Pollinations → Unsplash → themed photo)
"""

from .cache import CacheCategory, ImageCache, ResponseCache
from .images import RecipeImageService
from .orchestrator import GenerationOrchestrator
from .recipe_generator import (
    GeminiRecipeGenerator,
    GroqRecipeGenerator,
    RecipeGenerator,
    create_recipe_generator,
)

__all__ = [
    # Cache
    "CacheCategory",
    "ImageCache",
    "ResponseCache",
    # Images
    "RecipeImageService",
    # Orchestrator
    "GenerationOrchestrator",
    # Recipe generator
    "GeminiRecipeGenerator",
    "GroqRecipeGenerator",
    "RecipeGenerator",
    "create_recipe_generator",
]
