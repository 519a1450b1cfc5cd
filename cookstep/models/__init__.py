"""Pydantic models."""

from cookstep.models.instruction import (
    ANIMATION_TYPES,
    AnimationType,
    ProcessedInstructionStep,
    ProcessRecipeResponse,
)
from cookstep.models.recipe import (
    ExtractRecipeRequest,
    Ingredient,
    Nutrition,
    Recipe,
)

__all__ = [
    "ANIMATION_TYPES",
    "AnimationType",
    "ExtractRecipeRequest",
    "Ingredient",
    "Nutrition",
    "ProcessedInstructionStep",
    "ProcessRecipeResponse",
    "Recipe",
]
