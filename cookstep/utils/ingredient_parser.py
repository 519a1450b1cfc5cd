"""Rule-based ingredient parsing for ingredient lines and instruction clauses.

Patterns live in one ordered table. A clause is tried against each entry in
turn and the first entry that yields an ingredient wins, so the table order
is also the tie-break order:

    fraction   "1/2 cup milk", "1 1/2 cups flour"
    number     "2 cups of sauce", "1.5 lb beef", "3 eggs"
    article    "a cup of milk", "an onion"
    special    "salt to taste", "oil as needed", "a pinch of salt", "a dash of vinegar"
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from cookstep.models.recipe import Ingredient
from cookstep.utils.quantity import replace_vulgar_fractions

MEASUREMENT_UNITS = frozenset(
    {
        "cup", "cups",
        "tablespoon", "tablespoons", "tbsp", "tbsps", "tbs", "tbl",
        "teaspoon", "teaspoons", "tsp", "tsps",
        "ounce", "ounces", "oz",
        "pound", "pounds", "lb", "lbs",
        "gram", "grams", "g",
        "kilogram", "kilograms", "kg",
        "milliliter", "milliliters", "millilitre", "millilitres", "ml",
        "liter", "liters", "litre", "litres", "l",
        "pint", "pints", "pt",
        "quart", "quarts", "qt",
        "gallon", "gallons", "gal",
        "clove", "cloves",
        "can", "cans",
        "package", "packages", "pkg",
        "stick", "sticks",
        "slice", "slices",
        "piece", "pieces",
        "pinch", "pinches",
        "dash", "dashes",
        "bunch", "bunches",
        "sprig", "sprigs",
        "handful", "handfuls",
        "head", "heads",
        "stalk", "stalks",
        "jar", "jars",
        "bag", "bags",
        "bottle", "bottles",
        "drop", "drops",
    }
)

# Words that follow a number in instructions but never describe an ingredient amount
NON_INGREDIENT_WORDS = frozenset(
    {
        "second", "seconds", "sec", "secs",
        "minute", "minutes", "min", "mins",
        "hour", "hours", "hr", "hrs",
        "day", "days", "night", "nights",
        "degree", "degrees", "c", "f", "celsius", "fahrenheit",
        "inch", "inches", "in", "cm", "mm",
        "time", "times", "x", "percent",
        "few", "couple", "little", "bit", "while", "moment",
        "more", "minute's", "side", "sides", "layer", "layers",
    }
)

PREPARATION_PATTERN = re.compile(
    r"\b(?:(?:finely|roughly|thinly)\s+)?(?:chopped|diced|sliced|minced|grated|peeled)\b",
    re.IGNORECASE,
)
CONNECTOR_PATTERN = re.compile(r"^(?:add|with|and|plus)\s+", re.IGNORECASE)
_OF_PATTERN = re.compile(r"^of\s+", re.IGNORECASE)
_ARTICLE_PATTERN = re.compile(r"^(?:an?|the)\s+", re.IGNORECASE)
# "flour into the bowl" -> "flour"
_TRAILING_CONTEXT = re.compile(
    r"\s+(?:then|until|for|to|in|into|on|onto|over|at|from|while)\s+.*$", re.IGNORECASE
)
_PARENTHETICAL = re.compile(r"\([^)]*\)")
_CLAUSE_SPLIT = re.compile(r",|\.(?!\d)")

_FRACTION = re.compile(
    r"(?<![\d./])(?:(?P<whole>\d+)(?:\s+|\s*-\s*))?(?P<num>\d+)\s*/\s*(?P<den>\d+)(?![\d./])"
    r"\s*(?P<word>[A-Za-z]+)"
)
_NUMBER = re.compile(r"(?<![\d./])(?P<amount>\d+(?:\.\d+)?)(?![\d./])\s*(?P<word>[A-Za-z]+)")
_ARTICLE = re.compile(
    r"^(?:(?:add|with|and|plus)\s+)?an?\s+(?!(?:pinch|dash)\b)(?P<word>[A-Za-z]+)",
    re.IGNORECASE,
)
_SPECIAL = re.compile(r"\b(?P<phrase>to taste|as needed|pinch of|dash of)\b", re.IGNORECASE)


@dataclass(frozen=True)
class _Candidate:
    quantity: Optional[float]
    unit: Optional[str]
    name_text: str


def _split_unit(word: str, rest: str) -> Optional[Tuple[Optional[str], str]]:
    """Decide whether the word after an amount is a unit, a count noun or not an ingredient at all."""
    lowered = word.lower()
    if lowered in NON_INGREDIENT_WORDS:
        return None
    if lowered in MEASUREMENT_UNITS:
        return word, rest
    return None, word + rest


def _match_fraction(clause: str) -> Optional[_Candidate]:
    for match in _FRACTION.finditer(clause):
        denominator = int(match.group("den"))
        if denominator == 0:
            continue
        split = _split_unit(match.group("word"), clause[match.end():])
        if split is None:
            continue
        quantity = int(match.group("num")) / denominator
        if match.group("whole"):
            quantity += int(match.group("whole"))
        return _Candidate(quantity, split[0], split[1])
    return None


def _match_number(clause: str) -> Optional[_Candidate]:
    for match in _NUMBER.finditer(clause):
        split = _split_unit(match.group("word"), clause[match.end():])
        if split is None:
            continue
        return _Candidate(float(match.group("amount")), split[0], split[1])
    return None


def _match_article(clause: str) -> Optional[_Candidate]:
    match = _ARTICLE.match(clause)
    if match is None:
        return None
    split = _split_unit(match.group("word"), clause[match.end():])
    if split is None:
        return None
    return _Candidate(1.0, split[0], split[1])


def _match_special(clause: str) -> Optional[_Candidate]:
    match = _SPECIAL.search(clause)
    if match is None:
        return None
    phrase = match.group("phrase").lower()
    if phrase in ("pinch of", "dash of"):
        name_text = clause[match.end():]
    else:
        # "season with salt to taste": the ingredient sits before the phrase
        before = clause[: match.start()]
        name_text = re.split(r"\b(?:with|add)\s+", before, flags=re.IGNORECASE)[-1]
    return _Candidate(None, phrase, name_text)


INGREDIENT_PATTERNS: Tuple[Tuple[str, Callable[[str], Optional[_Candidate]]], ...] = (
    ("fraction", _match_fraction),
    ("number", _match_number),
    ("article", _match_article),
    ("special", _match_special),
)


def _clean_name(text: str) -> Tuple[str, Optional[str]]:
    """Strip leading filler and the preparation method; returns (name, preparation)."""
    name = text.strip(" \t\n-:;")
    name = _OF_PATTERN.sub("", name)

    preparation = None
    prep_match = PREPARATION_PATTERN.search(name)
    if prep_match:
        preparation = prep_match.group(0).lower()
        name = (name[: prep_match.start()] + " " + name[prep_match.end():]).strip()

    name = CONNECTOR_PATTERN.sub("", name)
    name = _ARTICLE_PATTERN.sub("", name)
    name = _TRAILING_CONTEXT.sub("", name)
    name = " ".join(name.split()).strip(" -:;!?")
    return name, preparation


def parse_ingredient_clause(clause: str) -> Optional[Ingredient]:
    """
    Parse one clause of an instruction into an ingredient.

    Returns None when no pattern in INGREDIENT_PATTERNS matches or when the
    remaining name is empty.
    """
    clause = replace_vulgar_fractions(clause).strip()
    if not clause:
        return None

    for _, matcher in INGREDIENT_PATTERNS:
        candidate = matcher(clause)
        if candidate is None:
            continue
        name, preparation = _clean_name(candidate.name_text)
        if not name:
            return None
        return Ingredient(
            name=name,
            quantity=candidate.quantity,
            unit=candidate.unit,
            preparation=preparation,
        )
    return None


def parse_ingredient_line(line: str) -> Optional[Ingredient]:
    """
    Parse a recipe ingredient line such as "1 (14 oz) can tomatoes, drained".

    Unlike clauses, a line is always an ingredient: when no amount is found
    the whole line becomes the name.
    """
    text = _PARENTHETICAL.sub(" ", replace_vulgar_fractions(line or ""))
    head, _, tail = text.partition(",")
    if not head.strip():
        return None

    ingredient = parse_ingredient_clause(head)
    if ingredient is None:
        name, preparation = _clean_name(head)
        if not name:
            return None
        ingredient = Ingredient(name=name, preparation=preparation)

    if ingredient.preparation is None and tail:
        prep_match = PREPARATION_PATTERN.search(tail)
        if prep_match:
            ingredient = ingredient.model_copy(update={"preparation": prep_match.group(0).lower()})
    return ingredient


def split_instruction_clauses(instruction: str) -> List[str]:
    """Split on commas and sentence periods; decimal points are kept."""
    return [part.strip() for part in _CLAUSE_SPLIT.split(instruction or "") if part.strip()]


def _mentions(text: str, name: str) -> bool:
    return re.search(rf"\b{re.escape(name)}\b", text, re.IGNORECASE) is not None


def find_known_ingredient(name: str, known: Sequence[Ingredient]) -> Optional[Ingredient]:
    """Case-insensitive lookup: exact name first, then whole-word containment either way."""
    lowered = name.lower()
    for ingredient in known:
        if ingredient.name.lower() == lowered:
            return ingredient
    for ingredient in known:
        if len(ingredient.name) >= 3 and (_mentions(name, ingredient.name) or _mentions(ingredient.name, name)):
            return ingredient
    return None


def _prefer_known(parsed: Ingredient, known: Optional[Ingredient]) -> Ingredient:
    if known is None:
        return parsed
    return Ingredient(
        name=parsed.name,
        quantity=known.quantity if known.quantity is not None else parsed.quantity,
        unit=known.unit if known.unit is not None else parsed.unit,
        preparation=parsed.preparation or known.preparation,
    )


def extract_step_ingredients(instruction: str, known: Iterable[Ingredient] = ()) -> List[Ingredient]:
    """
    Ingredients referenced by one instruction.

    Each clause is parsed independently. Quantity and unit from the recipe's
    own ingredient list win over the ones read from the instruction text.
    Clauses without an amount contribute an ingredient only when they name a
    known ingredient.
    """
    known = list(known)
    found: List[Ingredient] = []
    seen = set()

    for clause in split_instruction_clauses(instruction):
        parsed = parse_ingredient_clause(clause)
        if parsed is not None:
            resolved = [_prefer_known(parsed, find_known_ingredient(parsed.name, known))]
        else:
            resolved = [k for k in known if len(k.name) >= 3 and _mentions(clause, k.name)]

        for ingredient in resolved:
            key = (ingredient.name.lower(), ingredient.quantity, ingredient.unit)
            if key in seen:
                continue
            seen.add(key)
            found.append(ingredient)

    return found
