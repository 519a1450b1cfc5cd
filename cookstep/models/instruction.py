"""Processed cooking step models."""

from typing import List, Literal, Optional, Union, get_args

from pydantic import BaseModel, Field

from cookstep.models.recipe import Ingredient

AnimationType = Literal[
    "cutting",
    "stirring",
    "waiting",
    "heating",
    "mixing",
    "pouring",
    "seasoning",
    "whisking",
    "kneading",
    "rolling",
    "grating",
    "peeling",
    "folding",
    "sauteing",
    "cooling",
    "blending",
    "steaming",
    "mashing",
    "straining",
    "measuring",
    "sifting",
    "beating",
    "crushing",
    "shredding",
    "juicing",
    "serving",
]

ANIMATION_TYPES = get_args(AnimationType)

DurationUnit = Literal["seconds", "minutes", "hours"]
TemperatureUnit = Literal["C", "F"]


class ProcessedInstructionStep(BaseModel):
    """One structured cooking step."""

    stepNumber: int = Field(..., ge=1, description="1-based position in the recipe")
    totalSteps: int = Field(..., ge=1, description="Number of steps in the recipe")
    action: str = Field(..., min_length=1, description="What to do in this step")
    ingredients: List[Ingredient] = Field(default_factory=list, description="Ingredients used in this step")
    duration: Optional[Union[int, float]] = Field(None, description="Duration amount")
    durationUnit: Optional[DurationUnit] = None
    temperature: Optional[Union[int, float]] = Field(None, description="Temperature amount")
    temperatureUnit: Optional[TemperatureUnit] = None
    animationType: Optional[AnimationType] = Field(None, description="Dominant physical action, used by the UI")
    notes: Optional[str] = Field(None, description="Tips from the LLM tier")


class ProcessRecipeResponse(BaseModel):
    """Response body for the process endpoint."""

    processedInstructions: List[ProcessedInstructionStep] = Field(default_factory=list)
