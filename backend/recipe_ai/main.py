"""Recipe AI FastAPI Application.

Main entry point for the backend API server. ``create_app`` wires the caches,
the recipe generator and the orchestrator once per process; tests call it
with their own settings and generator.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from recipe_ai.api import router
from recipe_ai.config import Settings
from recipe_ai.models import ErrorCode
from recipe_ai.services import (
    GenerationOrchestrator,
    ImageCache,
    RecipeGenerator,
    RecipeImageService,
    ResponseCache,
    create_recipe_generator,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)


def create_app(
    settings: Settings | None = None,
    generator: RecipeGenerator | None = None,
) -> FastAPI:
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Build process-wide services on startup, release them on shutdown."""
        response_cache = ResponseCache(key_length=settings.response_cache_key_length)
        image_cache = ImageCache(
            max_entries=settings.image_cache_max_entries,
            ttl_seconds=settings.image_cache_ttl,
        )
        app.state.settings = settings
        app.state.response_cache = response_cache
        app.state.image_cache = image_cache
        app.state.image_service = RecipeImageService(image_cache, verify_urls=settings.image_verify_urls)
        app.state.orchestrator = GenerationOrchestrator(
            generator or create_recipe_generator(settings),
            response_cache,
            settings.fallback_policy,
            settings.orchestrator,
        )
        yield
        await app.state.image_service.close()

    app = FastAPI(
        title="Recipe AI API",
        description="AI-generated recipes and meal plans",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handlers
    @app.exception_handler(RequestValidationError)
    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError | ValidationError):
        """Handle request body and Pydantic validation errors."""
        return JSONResponse(
            status_code=422,
            content={
                "success": False,
                "error": {
                    "code": ErrorCode.VALIDATION_ERROR.value,
                    "message": str(exc),
                    "user_message": "Invalid request format. Please check your input.",
                },
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors."""
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": {
                    "code": ErrorCode.API_ERROR.value,
                    "message": str(exc),
                    "user_message": "Something went wrong. Please try again.",
                },
            },
        )

    app.include_router(router, prefix="/api")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
