"""Generation orchestrator: cache, retry and fallback around the AI call."""

from .service import GenerationOrchestrator

__all__ = ["GenerationOrchestrator"]
