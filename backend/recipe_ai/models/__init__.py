"""Recipe AI data models."""

from .core import (
    Difficulty,
    FeedbackRating,
    GenerationResult,
    GenerationSource,
    MealType,
    PlanConstraints,
    PlanFeedback,
    Recipe,
    SkillLevel,
)
from .errors import (
    RETRYABLE_STATUS_CODES,
    AppError,
    ErrorCode,
    MalformedResponseError,
    UpstreamError,
)

__all__ = [
    "Difficulty",
    "FeedbackRating",
    "GenerationResult",
    "GenerationSource",
    "MealType",
    "PlanConstraints",
    "PlanFeedback",
    "Recipe",
    "SkillLevel",
    "RETRYABLE_STATUS_CODES",
    "AppError",
    "ErrorCode",
    "MalformedResponseError",
    "UpstreamError",
]
