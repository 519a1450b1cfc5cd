"""
Schema.org Recipe extraction from JSON-LD blocks.

A page may carry any number of ``<script type="application/ld+json">``
blocks. Blocks are scanned in document order and each one is offered to
SHAPE_MATCHERS in turn:

    array          [{"@type": "Organization"}, {"@type": "Recipe", ...}]
    graph          {"@graph": [..., {"@type": ["Recipe"], ...}]}
    recipe         {"@type": "Recipe", ...}
    webpage        {"@type": "WebPage", "mainEntity": {"@type": "Recipe", ...}}

The first block that any matcher accepts supplies the recipe.
"""

import json
import logging
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from bs4 import BeautifulSoup

from cookstep.utils.recipe_normalization import RawRecipeFields, clean_text, ensure_list, safe_strip

logger = logging.getLogger(__name__)

RecipeNode = Dict[str, Any]


def is_recipe_type(node: Any) -> bool:
    """True for a dict whose @type is "Recipe" or a list containing it."""
    if not isinstance(node, dict):
        return False
    node_type = node.get("@type")
    if isinstance(node_type, list):
        return "Recipe" in node_type
    return node_type == "Recipe"


def _first_recipe(items: Any) -> Optional[RecipeNode]:
    if not isinstance(items, list):
        return None
    for item in items:
        if is_recipe_type(item):
            return item
    return None


def _match_array(block: Any) -> Optional[RecipeNode]:
    if isinstance(block, list):
        return _first_recipe(block)
    return None


def _match_graph(block: Any) -> Optional[RecipeNode]:
    if isinstance(block, dict) and "@graph" in block:
        return _first_recipe(block["@graph"])
    return None


def _match_recipe(block: Any) -> Optional[RecipeNode]:
    return block if is_recipe_type(block) else None


def _match_webpage(block: Any) -> Optional[RecipeNode]:
    if not isinstance(block, dict) or block.get("@type") != "WebPage":
        return None
    main_entity = block.get("mainEntity")
    return main_entity if is_recipe_type(main_entity) else None


SHAPE_MATCHERS: Tuple[Tuple[str, Callable[[Any], Optional[RecipeNode]]], ...] = (
    ("array", _match_array),
    ("graph", _match_graph),
    ("recipe", _match_recipe),
    ("webpage", _match_webpage),
)


def iter_json_ld_blocks(html: str) -> Iterator[Any]:
    """Yield every JSON-LD block that parses; malformed blocks are skipped."""
    soup = BeautifulSoup(html or "", "html.parser")
    for index, script in enumerate(soup.find_all("script", attrs={"type": "application/ld+json"})):
        content = script.string or script.get_text()
        if not content or not content.strip():
            continue
        try:
            block = json.loads(content)
        except (ValueError, RecursionError) as e:
            # JSONDecodeError is a ValueError, as is the int digit-limit error
            logger.debug(f"Skipping malformed JSON-LD block #{index}: {e}")
            continue
        yield block


def find_recipe_node(html: str) -> Optional[RecipeNode]:
    for block in iter_json_ld_blocks(html):
        for shape, matcher in SHAPE_MATCHERS:
            node = matcher(block)
            if node is not None:
                logger.debug(f"JSON-LD recipe found via {shape} shape")
                return node
    return None


# ---------------------------------------------------------------------------
# Field mapping
# ---------------------------------------------------------------------------

def _image_url(value: Any) -> str:
    if isinstance(value, list):
        return _image_url(value[0]) if value else ""
    if isinstance(value, dict):
        return safe_strip(value.get("url") or value.get("contentUrl"))
    return safe_strip(value)


def _step_text(step: Any) -> str:
    """Instruction entry to text: bare string, else text > name > description."""
    if isinstance(step, str):
        return clean_text(step)
    if isinstance(step, dict):
        for key in ("text", "name", "description"):
            value = clean_text(step.get(key))
            if value:
                return value
    return ""


def _instructions(value: Any) -> List[str]:
    if isinstance(value, str):
        return [clean_text(line) for line in value.splitlines() if clean_text(line)]

    steps: List[str] = []
    for entry in ensure_list(value):
        if isinstance(entry, dict) and entry.get("@type") == "HowToSection":
            steps.extend(_instructions(entry.get("itemListElement", [])))
            continue
        text = _step_text(entry)
        if text:
            steps.append(text)
    return steps


def _yield_text(value: Any) -> str:
    if isinstance(value, list):
        return _yield_text(value[0]) if value else ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(int(value)) if float(value).is_integer() else str(value)
    return clean_text(value)


def _joined(value: Any) -> str:
    if isinstance(value, list):
        return ", ".join(clean_text(v) for v in value if clean_text(v))
    return clean_text(value)


def _keywords(value: Any) -> List[str]:
    if isinstance(value, str):
        return [clean_text(k) for k in value.split(",") if clean_text(k)]
    return [clean_text(k) for k in ensure_list(value) if clean_text(k)]


def _nutrition(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {
        key: clean_text(value.get(key))
        for key in ("calories", "proteinContent", "fatContent", "carbohydrateContent")
    }


def map_recipe_node(node: RecipeNode) -> RawRecipeFields:
    """Map a schema.org Recipe object onto RawRecipeFields."""
    return RawRecipeFields(
        name=clean_text(node.get("name")),
        description=clean_text(node.get("description")),
        image=_image_url(node.get("image")),
        ingredients=[clean_text(i) for i in ensure_list(node.get("recipeIngredient")) if clean_text(i)],
        instructions=_instructions(node.get("recipeInstructions")),
        total_time=safe_strip(node.get("totalTime")),
        cook_time=safe_strip(node.get("cookTime")),
        prep_time=safe_strip(node.get("prepTime")),
        recipe_yield=_yield_text(node.get("recipeYield")),
        category=_joined(node.get("recipeCategory")),
        cuisine=_joined(node.get("recipeCuisine")),
        keywords=_keywords(node.get("keywords")),
        nutrition=_nutrition(node.get("nutrition")),
    )


def extract_structured(html: str) -> Optional[RawRecipeFields]:
    """
    Recipe fields from the page's JSON-LD, or None when no block holds a Recipe.
    """
    node = find_recipe_node(html)
    if node is None:
        return None
    return map_recipe_node(node)
