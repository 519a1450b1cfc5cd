"""Recipe normalization shared by the structured-data and heuristic extractors."""

import html
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from cookstep.models.recipe import Ingredient, Nutrition, Recipe
from cookstep.utils.ingredient_parser import parse_ingredient_line
from cookstep.utils.quantity import scale_ingredient_text

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"\d+")
_WHITESPACE = re.compile(r"\s+")

NUTRITION_FIELDS = ("calories", "proteinContent", "fatContent", "carbohydrateContent")


@dataclass
class RawRecipeFields:
    """Recipe fields as found on the page, before servings scaling."""

    name: str = ""
    description: str = ""
    image: str = ""
    ingredients: List[str] = field(default_factory=list)
    instructions: List[str] = field(default_factory=list)
    total_time: str = ""
    cook_time: str = ""
    prep_time: str = ""
    recipe_yield: str = ""
    category: str = ""
    cuisine: str = ""
    keywords: List[str] = field(default_factory=list)
    nutrition: Dict[str, str] = field(default_factory=dict)

    def has_content(self) -> bool:
        return bool(self.ingredients or self.instructions)


def safe_strip(v: Any) -> str:
    """Safely strip whitespace from a value."""
    return "" if v is None else str(v).strip()


def clean_text(v: Any) -> str:
    """Unescape HTML entities and collapse whitespace."""
    return _WHITESPACE.sub(" ", html.unescape(safe_strip(v))).strip()


def ensure_list(value: Any) -> list:
    """Ensure value is a list."""
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    return [value] if value else []


def remove_exact_duplicates(seq: List[str]) -> List[str]:
    """Remove exact duplicates while preserving order."""
    seen = set()
    out: List[str] = []
    for item in seq:
        if item and item not in seen:
            seen.add(item)
            out.append(item)
    return out


def parse_servings(recipe_yield: Any) -> int:
    """First run of digits in the yield text; 1 when there is none."""
    match = _DIGITS.search(safe_strip(recipe_yield))
    if not match:
        return 1
    return max(int(match.group(0)), 1)


def _parse_ingredients(lines: List[str]) -> List[Ingredient]:
    parsed: List[Ingredient] = []
    for line in lines:
        ingredient = parse_ingredient_line(line)
        if ingredient is not None:
            parsed.append(ingredient)
    return parsed


def normalize_recipe(
    raw: RawRecipeFields,
    requested_servings: Optional[int] = None,
    source: Optional[str] = None,
) -> Recipe:
    """
    Build the public Recipe from extracted fields.

    When requested_servings is given every quantity in the ingredient lines is
    multiplied by requested_servings / original servings and the yield text is
    rewritten. Without it the lines are passed through untouched. The input is
    never modified, so normalizing the same fields twice gives equal recipes.
    """
    original_servings = parse_servings(raw.recipe_yield)
    ingredients = [clean_text(line) for line in raw.ingredients if clean_text(line)]

    if requested_servings:
        factor = requested_servings / original_servings
        ingredients = [scale_ingredient_text(line, factor) for line in ingredients]
        scaled_servings = requested_servings
        yield_text = f"{requested_servings} servings"
        logger.debug(
            "Scaled ingredients",
            extra={"original_servings": original_servings, "scaled_servings": scaled_servings},
        )
    else:
        scaled_servings = original_servings
        yield_text = clean_text(raw.recipe_yield)

    nutrition = Nutrition(**{key: clean_text(raw.nutrition.get(key)) for key in NUTRITION_FIELDS})

    return Recipe(
        name=clean_text(raw.name),
        description=clean_text(raw.description),
        image=safe_strip(raw.image),
        source=source,
        ingredients=ingredients,
        parsedIngredients=_parse_ingredients(ingredients),
        instructions=[clean_text(step) for step in raw.instructions if clean_text(step)],
        totalTime=safe_strip(raw.total_time),
        cookTime=safe_strip(raw.cook_time),
        prepTime=safe_strip(raw.prep_time),
        yieldText=yield_text,
        originalServings=original_servings,
        scaledServings=scaled_servings,
        category=clean_text(raw.category),
        cuisine=clean_text(raw.cuisine),
        keywords=remove_exact_duplicates([clean_text(k) for k in raw.keywords]),
        nutrition=nutrition,
    )
