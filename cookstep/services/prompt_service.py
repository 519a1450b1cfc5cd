"""Prompt generation for instruction breakdown."""

import json
from typing import Dict, Iterable, Sequence

from cookstep.models.instruction import ANIMATION_TYPES
from cookstep.models.recipe import Ingredient
from cookstep.utils.quantity import format_display_quantity

ANIMATION_DESCRIPTIONS: Dict[str, str] = {
    "cutting": "chopping, slicing, dicing",
    "stirring": "mixing, stirring",
    "waiting": "resting, marinating",
    "heating": "cooking, boiling, simmering",
    "mixing": "combining ingredients",
    "pouring": "adding liquids",
    "seasoning": "adding spices, salt, etc.",
    "whisking": "beating, whisking",
    "kneading": "working with dough",
    "rolling": "pastry, pasta",
    "grating": "cheese, vegetables",
    "peeling": "fruits, vegetables",
    "folding": "batter, dough",
    "sauteing": "stir-frying, pan-frying",
    "cooling": "cooling down food, chilling",
    "blending": "pureeing, smoothies",
    "steaming": "vegetables, dumplings",
    "mashing": "potatoes, beans",
    "straining": "pasta, liquids",
    "measuring": "measuring ingredients",
    "sifting": "flour, dry ingredients",
    "beating": "eggs, cream",
    "crushing": "garlic, nuts, cookies",
    "shredding": "vegetables, meat",
    "juicing": "citrus fruits",
    "serving": "plating, garnishing",
}

STEP_TEMPLATE = {
    "action": "string (concise action instruction)",
    "duration": "number (optional)",
    "durationUnit": "seconds | minutes | hours (optional)",
    "ingredients": [
        {
            "name": "string",
            "quantity": "number or null",
            "unit": "string or null",
            "preparation": "string or null",
        }
    ],
    "temperature": "number (optional)",
    "temperatureUnit": "C | F (optional)",
    "animationType": " | ".join(ANIMATION_TYPES) + " (optional)",
    "notes": "string (optional)",
}


def format_ingredient(ingredient: Ingredient) -> str:
    """Human line for an ingredient: "1 1/2 cups flour, sifted", "salt to taste"."""
    quantity = format_display_quantity(ingredient.quantity)
    unit = ingredient.unit or ""
    if not quantity and unit and not unit.endswith(" of"):
        line = f"{ingredient.name} {unit}"
    else:
        line = " ".join(p for p in (quantity, unit, ingredient.name) if p)
    if ingredient.preparation:
        line += f", {ingredient.preparation}"
    return line


def _animation_lines() -> str:
    return "\n".join(f"- {name}: for {ANIMATION_DESCRIPTIONS[name]}" for name in ANIMATION_TYPES)


def create_instruction_prompt(instructions: Sequence[str], ingredients: Iterable[Ingredient]) -> str:
    """Create the prompt that turns numbered instructions into structured steps."""
    numbered = "\n".join(f"{i}. {text}" for i, text in enumerate(instructions, start=1))
    known = "\n".join(f"- {format_ingredient(ing)}" for ing in ingredients) or "- (none provided)"

    return f"""
You are a recipe instruction parser. Break each cooking instruction into one concise, structured step.

For each instruction, extract:
1. The main action, as a short imperative sentence
2. Duration if mentioned (in seconds, minutes, or hours)
3. Every ingredient used in the step
4. Temperature if mentioned (C or F)
5. The animation type that best matches the dominant physical action
6. Any additional notes or tips

Ingredient extraction rules:
- Use the recipe ingredient list below to fill in quantities and units when the step does not state them
- quantity is a number: "1/2" -> 0.5, "1 1/2" -> 1.5, "a" or "an" -> 1
- Indeterminate amounts ("to taste", "as needed", "a pinch of", "a dash of"): quantity null, unit is the phrase
- Put preparation methods in preparation, not in the name ("finely chopped", "roughly diced", "thinly sliced", "minced", "grated", "peeled")
- Split grouped ingredients ("salt and pepper" -> "salt", "pepper")

Timing and temperature rules:
- "for X minutes/hours/seconds" sets duration and durationUnit
- "at X degrees C/F" or "to X F" sets temperature and temperatureUnit
- Leave duration/temperature out when the step gives no number ("until golden brown", "on medium heat")

Available animation types:
{_animation_lines()}

Recipe ingredients:
{known}

Instructions:
{numbered}

Return ONLY a JSON array with exactly {len(instructions)} objects, one per instruction, in the same order.
No Markdown, no ``` fences, no text before or after the JSON.
Each object has this structure:
{json.dumps(STEP_TEMPLATE, indent=2)}
""".strip()
