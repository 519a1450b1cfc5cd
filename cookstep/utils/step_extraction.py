"""Deterministic instruction breakdown used when the LLM tier is unavailable."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from cookstep.models.instruction import AnimationType, ProcessedInstructionStep
from cookstep.models.recipe import Ingredient
from cookstep.utils.ingredient_parser import extract_step_ingredients

DURATION_PATTERN = re.compile(r"(\d+)\s*(minute|hour|second)s?", re.IGNORECASE)
TEMPERATURE_PATTERN = re.compile(
    r"(\d+)\s*(?:°\s*|degrees?\s*)?([CF])(?:elsius|ahrenheit)?\b", re.IGNORECASE
)

DEFAULT_ANIMATION: AnimationType = "waiting"

# Ordered: the first category with a keyword in the text wins.
ANIMATION_KEYWORDS: Tuple[Tuple[AnimationType, Tuple[str, ...]], ...] = (
    ("cutting", ("cut", "chop", "slice", "dice", "mince")),
    ("stirring", ("stir", "mix")),
    ("heating", ("heat", "preheat", "cook", "boil", "simmer", "bake", "roast")),
    ("pouring", ("pour", "add")),
    ("seasoning", ("season", "salt", "pepper")),
    ("whisking", ("whisk", "beat")),
    ("kneading", ("knead", "dough")),
    ("rolling", ("roll", "pastry")),
    ("grating", ("grate", "shred")),
    ("peeling", ("peel", "skin")),
    ("folding", ("fold", "incorporate")),
    ("sauteing", ("saute", "sauté", "fry", "pan-fry")),
    ("cooling", ("cool", "chill", "refrigerate")),
    ("blending", ("blend", "puree", "purée")),
    ("steaming", ("steam",)),
    ("mashing", ("mash",)),
    ("straining", ("strain", "drain")),
    ("measuring", ("measure",)),
    ("sifting", ("sift",)),
    ("crushing", ("crush",)),
    ("juicing", ("juice", "squeeze")),
    ("serving", ("serve", "garnish", "plate")),
)

# Keywords match at word starts: "stirring" hits "stir", "padded" does not hit "add"
_ANIMATION_MATCHERS: Tuple[Tuple[AnimationType, "re.Pattern[str]"], ...] = tuple(
    (category, re.compile(r"\b(?:" + "|".join(re.escape(k) for k in keywords) + r")"))
    for category, keywords in ANIMATION_KEYWORDS
)

_DURATION_UNITS: Dict[str, str] = {"second": "seconds", "minute": "minutes", "hour": "hours"}


def extract_duration(instruction: str) -> Dict[str, object]:
    """First "<n> minute(s)/hour(s)/second(s)" in the text, as {duration, durationUnit}."""
    match = DURATION_PATTERN.search(instruction)
    if not match:
        return {}
    return {
        "duration": int(match.group(1)),
        "durationUnit": _DURATION_UNITS[match.group(2).lower()],
    }


def extract_temperature(instruction: str) -> Dict[str, object]:
    """First "<n> F", "<n>°C" or "<n> degrees F" in the text, as {temperature, temperatureUnit}."""
    match = TEMPERATURE_PATTERN.search(instruction)
    if not match:
        return {}
    return {
        "temperature": int(match.group(1)),
        "temperatureUnit": match.group(2).upper(),
    }


def determine_animation_type(instruction: str) -> AnimationType:
    """Classify the dominant action by keyword, in ANIMATION_KEYWORDS order."""
    lowered = instruction.lower()
    for category, matcher in _ANIMATION_MATCHERS:
        if matcher.search(lowered):
            return category
    return DEFAULT_ANIMATION


def build_rule_based_step(
    instruction: str,
    step_number: int,
    total_steps: int,
    known_ingredients: Sequence[Ingredient] = (),
) -> ProcessedInstructionStep:
    text = instruction if isinstance(instruction, str) else str(instruction)
    # action is required; a blank instruction still yields a usable step
    action = text.strip() or f"Step {step_number}"

    return ProcessedInstructionStep(
        stepNumber=step_number,
        totalSteps=total_steps,
        action=action,
        ingredients=extract_step_ingredients(text, known_ingredients),
        animationType=determine_animation_type(text),
        **extract_duration(text),
        **extract_temperature(text),
    )


def decompose_with_rules(
    instructions: Sequence[str],
    ingredients: Optional[Iterable[Ingredient]] = None,
) -> List[ProcessedInstructionStep]:
    """
    Break instructions into steps with regexes and keyword tables only.

    Always returns exactly one step per instruction, in input order.
    """
    known = list(ingredients or [])
    total = len(instructions)
    return [
        build_rule_based_step(instruction, index, total, known)
        for index, instruction in enumerate(instructions, start=1)
    ]
