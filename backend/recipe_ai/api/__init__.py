"""HTTP API for Recipe AI."""

from .routes import router

__all__ = ["router"]
