"""
Instruction decomposition: free-text instructions to structured cooking steps.

Two tiers, one transition. The LLM tier runs first; if anything about it
fails (no API key, SDK error, timeout, non-JSON, wrong shape) it raises
InstructionParsingError and the rule-based tier produces the whole answer
instead. Callers never see an LLM error.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from cookstep.config import settings
from cookstep.models.instruction import ANIMATION_TYPES, ProcessedInstructionStep
from cookstep.models.recipe import Ingredient
from cookstep.services.gemini_service import GeminiService
from cookstep.services.prompt_service import create_instruction_prompt
from cookstep.utils.exceptions import InstructionParsingError
from cookstep.utils.gemini_helpers import safe_json_loads
from cookstep.utils.quantity import parse_quantity
from cookstep.utils.step_extraction import decompose_with_rules

logger = logging.getLogger(__name__)

_DURATION_UNITS = {
    "s": "seconds", "sec": "seconds", "secs": "seconds", "second": "seconds", "seconds": "seconds",
    "m": "minutes", "min": "minutes", "mins": "minutes", "minute": "minutes", "minutes": "minutes",
    "h": "hours", "hr": "hours", "hrs": "hours", "hour": "hours", "hours": "hours",
}


def _text_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _number(value: Any) -> Optional[float]:
    amount = parse_quantity(value)
    if amount is None:
        return None
    return int(amount) if amount.is_integer() else amount


def _duration_unit(value: Any) -> Optional[str]:
    text = _text_or_none(value)
    return _DURATION_UNITS.get(text.lower()) if text else None


def _temperature_unit(value: Any) -> Optional[str]:
    text = _text_or_none(value)
    if not text:
        return None
    letter = text.lstrip("°º ").upper()[:1]
    return letter if letter in ("C", "F") else None


def _coerce_ingredient(item: Any) -> Optional[Ingredient]:
    if isinstance(item, str):
        item = {"name": item}
    if not isinstance(item, dict):
        return None
    name = _text_or_none(item.get("name"))
    if not name:
        return None
    return Ingredient(
        name=name,
        quantity=parse_quantity(item.get("quantity")),
        unit=_text_or_none(item.get("unit")),
        preparation=_text_or_none(item.get("preparation")),
    )


def coerce_llm_step(item: Dict[str, Any], step_number: int, total_steps: int) -> ProcessedInstructionStep:
    """
    Build a step from one element of the model's array.

    stepNumber/totalSteps come from the position, never from the model.
    Unknown animation types and unusable units are dropped rather than rejected.
    """
    raw_ingredients = item.get("ingredients")
    if not isinstance(raw_ingredients, list):
        raw_ingredients = []
    ingredients = [
        ingredient
        for ingredient in (_coerce_ingredient(i) for i in raw_ingredients)
        if ingredient is not None
    ]

    fields: Dict[str, Any] = {
        "duration": _number(item.get("duration")),
        "durationUnit": _duration_unit(item.get("durationUnit")),
        "temperature": _number(item.get("temperature")),
        "temperatureUnit": _temperature_unit(item.get("temperatureUnit")),
        "notes": _text_or_none(item.get("notes")),
    }
    animation = _text_or_none(item.get("animationType"))
    if animation and animation.lower() in ANIMATION_TYPES:
        fields["animationType"] = animation.lower()

    return ProcessedInstructionStep(
        stepNumber=step_number,
        totalSteps=total_steps,
        action=item["action"].strip(),
        ingredients=ingredients,
        **{key: value for key, value in fields.items() if value is not None},
    )


def parse_llm_steps(text: str, expected: int) -> List[ProcessedInstructionStep]:
    """
    Validate the model's answer and turn it into steps.

    Raises:
        InstructionParsingError: not JSON, not an array, wrong length, or an
            element without a non-empty string action
    """
    try:
        data = safe_json_loads(text)
    except json.JSONDecodeError as e:
        raise InstructionParsingError(f"Response is not valid JSON: {e}") from e

    # {"steps": [...]} style wrappers
    if isinstance(data, dict) and len(data) == 1 and isinstance(next(iter(data.values())), list):
        data = next(iter(data.values()))

    if not isinstance(data, list):
        raise InstructionParsingError(f"Expected a JSON array, got {type(data).__name__}")
    if len(data) != expected:
        raise InstructionParsingError(f"Expected {expected} steps, got {len(data)}")

    steps: List[ProcessedInstructionStep] = []
    for index, item in enumerate(data, start=1):
        if not isinstance(item, dict):
            raise InstructionParsingError(f"Step {index} is not an object")
        action = item.get("action")
        if not isinstance(action, str) or not action.strip():
            raise InstructionParsingError(f"Step {index} has no action")
        try:
            steps.append(coerce_llm_step(item, index, expected))
        except PydanticValidationError as e:
            raise InstructionParsingError(f"Step {index} failed validation: {e}") from e
    return steps


class InstructionDecomposer:
    """Turns recipe instructions into ProcessedInstructionStep lists."""

    def __init__(self, llm: Optional[GeminiService] = None, timeout: Optional[float] = None):
        self.llm = llm if llm is not None else GeminiService()
        self.timeout = settings.gemini_timeout_seconds if timeout is None else timeout

    async def decompose(
        self,
        instructions: Sequence[str],
        ingredients: Optional[Sequence[Ingredient]] = None,
    ) -> List[ProcessedInstructionStep]:
        """
        One step per instruction, in input order, whichever tier answers.
        """
        instructions = list(instructions)
        ingredients = list(ingredients or [])
        if not instructions:
            return []

        try:
            steps = await self.decompose_with_llm(instructions, ingredients)
            logger.info("Instructions decomposed by LLM", extra={"steps": len(steps), "tier": "llm"})
            return steps
        except InstructionParsingError as e:
            logger.warning(f"LLM step breakdown unusable, using rule-based steps: {e}")

        steps = decompose_with_rules(instructions, ingredients)
        logger.info("Instructions decomposed by rules", extra={"steps": len(steps), "tier": "rules"})
        return steps

    async def decompose_with_llm(
        self,
        instructions: Sequence[str],
        ingredients: Sequence[Ingredient],
    ) -> List[ProcessedInstructionStep]:
        """
        LLM tier only.

        Raises:
            InstructionParsingError: for every kind of failure
        """
        prompt = create_instruction_prompt(instructions, ingredients)
        try:
            text = await asyncio.wait_for(
                self.llm.generate_structured_completion(prompt), timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            raise InstructionParsingError(f"LLM call timed out after {self.timeout}s") from e
        except Exception as e:
            raise InstructionParsingError(f"LLM call failed: {e}") from e

        try:
            return parse_llm_steps(text, len(instructions))
        except InstructionParsingError:
            raise
        except Exception as e:
            raise InstructionParsingError(f"Unusable LLM response: {type(e).__name__}: {e}") from e
