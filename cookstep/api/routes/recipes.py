"""Recipe extraction and instruction processing endpoints."""

import json
import logging

from fastapi import APIRouter, Depends, Request

from cookstep.api.dependencies import get_instruction_decomposer, get_recipe_extractor
from cookstep.middleware.rate_limit import rate_limit_dependency
from cookstep.models.instruction import ProcessRecipeResponse
from cookstep.models.recipe import ExtractRecipeRequest, Recipe
from cookstep.services.instruction_service import InstructionDecomposer
from cookstep.services.recipe_extractor import RecipeExtractor
from cookstep.utils.exceptions import CookStepException, ValidationError
from cookstep.utils.validators import validate_process_payload, validate_url

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["recipes"])


@router.post("/extract-recipe", response_model=Recipe)
async def extract_recipe(
    request: Request,
    body: ExtractRecipeRequest,
    _: None = Depends(rate_limit_dependency),
    recipe_extractor: RecipeExtractor = Depends(get_recipe_extractor),
) -> Recipe:
    """
    Extract a recipe from a public recipe URL.

    With `servings`, ingredient amounts are rescaled from the page's yield.
    """
    logger.info(
        "Route /api/extract-recipe called",
        extra={
            "request_id": getattr(request.state, "request_id", None),
            "route": "/api/extract-recipe",
            "params": {"url": body.url[:200], "servings": body.servings},
        },
    )

    try:
        validated_url = validate_url(body.url)
        return await recipe_extractor.extract_from_url(validated_url, servings=body.servings)
    except CookStepException as e:
        logger.warning(
            f"extract-recipe failed: {e}",
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "url": body.url[:200],
                "status_code": e.status_code,
                "upstream_status": getattr(e, "upstream_status", None),
            },
        )
        raise


@router.post(
    "/process-recipe",
    response_model=ProcessRecipeResponse,
    response_model_exclude_none=True,
)
async def process_recipe(
    request: Request,
    _: None = Depends(rate_limit_dependency),
    decomposer: InstructionDecomposer = Depends(get_instruction_decomposer),
) -> ProcessRecipeResponse:
    """
    Break recipe instructions into structured cooking steps.

    Body: `{"instructions": [str, ...], "ingredients": [Ingredient | str, ...]}`.
    Always answers with one step per instruction; if the LLM is unavailable
    the steps come from the rule-based extractor.
    """
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError(f"Request body is not valid JSON: {e}") from e

    instructions, ingredients = validate_process_payload(payload)

    logger.info(
        "Route /api/process-recipe called",
        extra={
            "request_id": getattr(request.state, "request_id", None),
            "route": "/api/process-recipe",
            "params": {"instructions": len(instructions), "ingredients": len(ingredients)},
        },
    )

    steps = await decomposer.decompose(instructions, ingredients)
    return ProcessRecipeResponse(processedInstructions=steps)
