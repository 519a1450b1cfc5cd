"""
Markup heuristics for pages without JSON-LD.

Ingredients and instructions are each resolved through three tiers, the
next tier only running when the previous one found nothing:

1. class-name selectors (``.ingredients li``, ``[class*='step'] li`` ...)
2. a "Ingredients:" / "Instructions:" label followed by sibling items
3. page-wide list items / numbered paragraphs
"""

import logging
import re
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from cookstep.utils.recipe_normalization import RawRecipeFields, clean_text, remove_exact_duplicates

logger = logging.getLogger(__name__)

UNTITLED_RECIPE = "Untitled Recipe"

INGREDIENT_SELECTORS = ".ingredients li, .ingredient-item, [class*='ingredient'] li"
INSTRUCTION_SELECTORS = ".instructions li, .steps li, [class*='instruction'] li, [class*='step'] li"
IMAGE_SELECTORS = ".recipe-image img, .recipe-photo img, [class*='recipe'] img"
KEYWORD_SELECTORS = "[class*='keywords'] li, [class*='tags'] li"
LABEL_CANDIDATES = ["p", "div", "h2", "h3", "h4"]

INGREDIENTS_LABEL = re.compile(r"^ingredients?:", re.IGNORECASE)
INSTRUCTIONS_LABEL = re.compile(r"^instructions?:|^directions?:|^steps?:", re.IGNORECASE)
ANY_LABEL = re.compile(r"^ingredients?:|^instructions?:|^directions?:|^steps?:", re.IGNORECASE)
NOT_AN_INGREDIENT = re.compile(r"^step|^instruction|^prep|^cook|^total", re.IGNORECASE)
STEP_LIKE = re.compile(r"^step|^instruction|^\d+\.|^[a-z]\.", re.IGNORECASE)


def _text(el: Optional[Tag]) -> str:
    return clean_text(el.get_text(" ")) if el is not None else ""


def _first_text(soup: BeautifulSoup, *selectors: str) -> str:
    for selector in selectors:
        text = _text(soup.select_one(selector))
        if text:
            return text
    return ""


def _texts(soup: BeautifulSoup, selector: str) -> List[str]:
    return remove_exact_duplicates([_text(el) for el in soup.select(selector)])


def _innermost_match(soup: BeautifulSoup, pattern: "re.Pattern[str]") -> Optional[Tag]:
    """First label element whose text matches, skipping wrappers around a closer match."""
    for el in soup.find_all(LABEL_CANDIDATES):
        if not pattern.match(_text(el)):
            continue
        if any(pattern.match(_text(child)) for child in el.find_all(LABEL_CANDIDATES)):
            continue
        return el
    return None


def _section_items(label: Tag, stop: Optional["re.Pattern[str]"]) -> List[str]:
    """Walk the label's following siblings collecting list items and paragraphs."""
    items: List[str] = []
    for sibling in label.find_next_siblings():
        text = _text(sibling)
        if stop is not None and stop.match(text):
            break
        if sibling.name == "li" and text:
            items.append(text)
        elif sibling.name in ("ul", "ol"):
            items.extend(t for t in (_text(li) for li in sibling.find_all("li")) if t)
        elif sibling.name == "p" and text and not ANY_LABEL.match(text):
            items.append(text)
    return remove_exact_duplicates(items)


def _labelled_section(
    soup: BeautifulSoup, label: "re.Pattern[str]", stop: Optional["re.Pattern[str]"]
) -> List[str]:
    anchor = _innermost_match(soup, label)
    if anchor is None:
        return []
    return _section_items(anchor, stop)


def _leaf_texts(soup: BeautifulSoup, names: List[str], pattern: "re.Pattern[str]") -> List[str]:
    texts = []
    for el in soup.find_all(names):
        text = _text(el)
        if not text or not pattern.match(text):
            continue
        if any(pattern.match(_text(child)) for child in el.find_all(names)):
            continue
        texts.append(text)
    return remove_exact_duplicates(texts)


def find_ingredients(soup: BeautifulSoup) -> List[str]:
    ingredients = _texts(soup, INGREDIENT_SELECTORS)
    if ingredients:
        return ingredients

    ingredients = _labelled_section(soup, INGREDIENTS_LABEL, stop=INSTRUCTIONS_LABEL)
    if ingredients:
        logger.debug("Ingredients found after section label")
        return ingredients

    logger.debug("Falling back to page-wide list items for ingredients")
    return [text for text in _texts(soup, "ul li, ol li") if not NOT_AN_INGREDIENT.match(text)]


def find_instructions(soup: BeautifulSoup) -> List[str]:
    instructions = _texts(soup, INSTRUCTION_SELECTORS)
    if instructions:
        return instructions

    instructions = _labelled_section(soup, INSTRUCTIONS_LABEL, stop=None)
    if instructions:
        logger.debug("Instructions found after section label")
        return instructions

    logger.debug("Falling back to step-like paragraphs for instructions")
    return _leaf_texts(soup, ["p", "div"], STEP_LIKE)


def _image(soup: BeautifulSoup) -> str:
    img = soup.select_one(IMAGE_SELECTORS)
    if img is not None and img.get("src"):
        return str(img["src"]).strip()
    for selector in ("meta[property='og:image']", "meta[name='twitter:image']"):
        meta = soup.select_one(selector)
        if meta is not None and meta.get("content"):
            return str(meta["content"]).strip()
    return ""


def extract_heuristic(html: str) -> Optional[RawRecipeFields]:
    """
    Recipe fields recovered from markup conventions.

    Returns None when neither ingredients nor instructions could be found.
    """
    soup = BeautifulSoup(html or "", "html.parser")

    fields = RawRecipeFields(
        name=_first_text(soup, "h1", ".recipe-title", "[class*='title']") or UNTITLED_RECIPE,
        description=_first_text(soup, ".recipe-description", "[class*='description']"),
        image=_image(soup),
        ingredients=find_ingredients(soup),
        instructions=find_instructions(soup),
        total_time=_first_text(soup, "[class*='total-time']"),
        cook_time=_first_text(soup, "[class*='cook-time']"),
        prep_time=_first_text(soup, "[class*='prep-time']"),
        recipe_yield=_first_text(soup, "[class*='yield']", "[class*='servings']"),
        category=_first_text(soup, "[class*='category']"),
        cuisine=_first_text(soup, "[class*='cuisine']"),
        keywords=_texts(soup, KEYWORD_SELECTORS),
        nutrition={
            "calories": _first_text(soup, "[class*='calories']"),
            "proteinContent": _first_text(soup, "[class*='protein']"),
            "fatContent": _first_text(soup, "[class*='fat']"),
            "carbohydrateContent": _first_text(soup, "[class*='carbs'], [class*='carbohydrate']"),
        },
    )

    if not fields.has_content():
        logger.info("Heuristic extraction found no ingredients or instructions")
        return None
    return fields
