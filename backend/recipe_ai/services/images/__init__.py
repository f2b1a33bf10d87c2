"""Recipe image URL service."""

from .service import RecipeImageService, themed_fallback_image

__all__ = ["RecipeImageService", "themed_fallback_image"]
