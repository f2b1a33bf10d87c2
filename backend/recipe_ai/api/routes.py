"""API routes for Recipe AI.

Thin HTTP layer over the generation orchestrator and the image service. The
browser UI calls these endpoints; every generation response says whether the
result came from the AI, from the cache, or from the local fallback
repertoire (``degraded``), so the UI can flag degraded mode and offer a retry.

Services are built once in the app lifespan and read from ``app.state``.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from pydantic import BaseModel, Field

from recipe_ai.models import (
    AppError,
    ErrorCode,
    GenerationResult,
    GenerationSource,
    PlanConstraints,
    PlanFeedback,
    Recipe,
)
from recipe_ai.services import (
    GenerationOrchestrator,
    ImageCache,
    RecipeImageService,
    ResponseCache,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ─── Dependencies ───

def get_orchestrator(request: Request) -> GenerationOrchestrator:
    return request.app.state.orchestrator


def get_image_service(request: Request) -> RecipeImageService:
    return request.app.state.image_service


def get_response_cache(request: Request) -> ResponseCache:
    return request.app.state.response_cache


def get_image_cache(request: Request) -> ImageCache:
    return request.app.state.image_cache


# ─── Request / response models ───

class GenerateRecipeRequest(BaseModel):
    prompt: str = Field(..., min_length=1, max_length=1000, description="What the user wants to cook")


class GenerateMealPlanRequest(BaseModel):
    prompt: str = Field(..., min_length=1, max_length=1000)
    constraints: Optional[PlanConstraints] = None


class AdjustMealPlanRequest(BaseModel):
    current_plan: list[Recipe] = Field(..., min_length=1)
    feedback: list[PlanFeedback] = Field(default_factory=list)
    adjustment_request: str = Field(default="", max_length=500)


class GenerateRecipeResponse(BaseModel):
    success: bool
    recipe: Optional[Recipe] = None
    source: Optional[GenerationSource] = None
    degraded: bool = False
    cached: bool = False
    error: Optional[AppError] = None


class GenerateMealPlanResponse(BaseModel):
    success: bool
    recipes: list[Recipe] = Field(default_factory=list)
    source: Optional[GenerationSource] = None
    degraded: bool = False
    cached: bool = False
    error: Optional[AppError] = None


class RecipeImageRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    ingredients: list[str] = Field(default_factory=list)


class RecipeImageResponse(BaseModel):
    success: bool
    url: str
    cached: bool = False


def _invalid_prompt() -> AppError:
    return AppError(
        code=ErrorCode.INVALID_INPUT,
        message="Prompt is empty",
        user_message="Tell us what you'd like to cook.",
    )


def _generation_failed(what: str) -> AppError:
    return AppError(
        code=ErrorCode.GENERATION_FAILED,
        message=f"AI {what} generation failed",
        user_message=f"We couldn't create your {what} right now. Please try again.",
    )


def _plan_response(result: GenerationResult | None, what: str) -> GenerateMealPlanResponse:
    if result is None:
        return GenerateMealPlanResponse(success=False, error=_generation_failed(what))
    return GenerateMealPlanResponse(
        success=True,
        recipes=result.recipes,
        source=result.source,
        degraded=result.degraded,
        cached=result.cached,
    )


# ─── Generation ───

@router.post("/recipes/generate", response_model=GenerateRecipeResponse)
async def generate_recipe(
    request: GenerateRecipeRequest,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
    x_user_id: Optional[str] = Header(None),
) -> GenerateRecipeResponse:
    """Generate a single recipe from a free-text prompt."""
    if not request.prompt.strip():
        return GenerateRecipeResponse(success=False, error=_invalid_prompt())

    result = await orchestrator.generate_recipe(request.prompt, x_user_id)
    if result is None:
        return GenerateRecipeResponse(success=False, error=_generation_failed("recipe"))
    return GenerateRecipeResponse(
        success=True,
        recipe=result.recipe,
        source=result.source,
        degraded=result.degraded,
        cached=result.cached,
    )


@router.post("/meal-plans/generate", response_model=GenerateMealPlanResponse)
async def generate_meal_plan(
    request: GenerateMealPlanRequest,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
    x_user_id: Optional[str] = Header(None),
) -> GenerateMealPlanResponse:
    """Generate a weekly plan, or a constrained plan of ``days x meal types`` recipes."""
    if not request.prompt.strip():
        return GenerateMealPlanResponse(success=False, error=_invalid_prompt())

    result = await orchestrator.generate_meal_plan(request.prompt, request.constraints, x_user_id)
    return _plan_response(result, "meal plan")


@router.post("/meal-plans/adjust", response_model=GenerateMealPlanResponse)
async def adjust_meal_plan(
    request: AdjustMealPlanRequest,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
    x_user_id: Optional[str] = Header(None),
) -> GenerateMealPlanResponse:
    """Rework an existing plan from like/dislike feedback."""
    result = await orchestrator.adjust_meal_plan(
        request.current_plan, request.feedback, request.adjustment_request, x_user_id
    )
    return _plan_response(result, "meal plan")


# ─── Images ───

@router.post("/images/recipe", response_model=RecipeImageResponse)
async def recipe_image(
    request: RecipeImageRequest,
    image_service: RecipeImageService = Depends(get_image_service),
) -> RecipeImageResponse:
    url, cached = await image_service.resolve_image(request.title, request.ingredients)
    return RecipeImageResponse(success=True, url=url, cached=cached)


# ─── Cache administration ───

@router.get("/cache/stats")
async def cache_stats(
    response_cache: ResponseCache = Depends(get_response_cache),
    image_cache: ImageCache = Depends(get_image_cache),
) -> dict:
    stats = image_cache.get_cache_stats()
    return {
        "responses": {"size": response_cache.size()},
        "images": {"size": stats.size, "max_size": stats.max_size},
    }


@router.delete("/cache")
async def clear_caches(
    response_cache: ResponseCache = Depends(get_response_cache),
    image_cache: ImageCache = Depends(get_image_cache),
) -> dict:
    response_cache.clear()
    image_cache.clear_cache()
    logger.info("[API] Response and image caches cleared")
    return {"success": True}
