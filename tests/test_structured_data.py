"""Tests for JSON-LD recipe extraction."""

import json

from cookstep.services.structured_data import SHAPE_MATCHERS, extract_structured, find_recipe_node


def _page(*blocks) -> str:
    scripts = "\n".join(
        f'<script type="application/ld+json">{b if isinstance(b, str) else json.dumps(b)}</script>'
        for b in blocks
    )
    return f"<html><head>{scripts}</head><body><h1>Page title</h1></body></html>"


def test_shape_matcher_order():
    assert [name for name, _ in SHAPE_MATCHERS] == ["array", "graph", "recipe", "webpage"]


def test_array_match_chosen_over_unrelated_graph():
    html = _page(
        {"@graph": [{"@type": "WebSite", "name": "Food Blog"}]},
        [{"@type": "Organization", "name": "Food Blog"}, {"@type": "Recipe", "name": "Array Pie"}],
    )
    assert extract_structured(html).name == "Array Pie"


def test_first_matching_block_wins():
    html = _page(
        {"@graph": [{"@type": "Recipe", "name": "Graph Cake"}]},
        {"@type": "Recipe", "name": "Direct Stew"},
    )
    assert extract_structured(html).name == "Graph Cake"


def test_malformed_block_is_skipped():
    """A broken block does not stop the scan."""
    html = _page('{"@type": "Recipe", "name": ', {"@type": "Recipe", "name": "Good Soup"})
    assert extract_structured(html).name == "Good Soup"

    huge_number = '{"@type": "Thing", "n": 1' + "0" * 5000 + "}"
    deeply_nested = "[" * 100000 + "]" * 100000
    html = _page(huge_number, deeply_nested, {"@type": "Recipe", "name": "Good Soup"})
    assert extract_structured(html).name == "Good Soup"


def test_type_list_and_webpage_main_entity():
    assert find_recipe_node(_page({"@type": ["Recipe", "NewsArticle"], "name": "Tagged"}))["name"] == "Tagged"

    html = _page({"@type": "WebPage", "mainEntity": {"@type": "Recipe", "name": "Main Entity Tart"}})
    assert extract_structured(html).name == "Main Entity Tart"


def test_no_recipe_returns_none():
    assert extract_structured(_page({"@type": "Organization"})) is None
    assert extract_structured("<html><body><p>No data</p></body></html>") is None


def test_field_mapping():
    html = _page(
        {
            "@context": "https://schema.org",
            "@type": "Recipe",
            "name": "Mac &amp; Cheese",
            "description": "  Creamy\n baked   pasta ",
            "image": [{"@type": "ImageObject", "url": "https://example.com/mac.jpg"}],
            "recipeIngredient": ["8 oz macaroni", "2 cups cheddar"],
            "recipeInstructions": [
                "Boil the pasta.",
                {"@type": "HowToStep", "text": "Make the sauce."},
                {"@type": "HowToStep", "name": "Combine"},
                {
                    "@type": "HowToSection",
                    "name": "Bake",
                    "itemListElement": [{"@type": "HowToStep", "description": "Bake 20 minutes."}],
                },
            ],
            "totalTime": "PT45M",
            "cookTime": "PT30M",
            "prepTime": "PT15M",
            "recipeYield": ["4 servings", "4"],
            "recipeCategory": ["Main", "Pasta"],
            "recipeCuisine": "American",
            "keywords": "pasta, cheese , comfort food",
            "nutrition": {"@type": "NutritionInformation", "calories": "520 kcal"},
        }
    )

    fields = extract_structured(html)

    assert fields.name == "Mac & Cheese"
    assert fields.description == "Creamy baked pasta"
    assert fields.image == "https://example.com/mac.jpg"
    assert fields.ingredients == ["8 oz macaroni", "2 cups cheddar"]
    assert fields.instructions == ["Boil the pasta.", "Make the sauce.", "Combine", "Bake 20 minutes."]
    assert fields.total_time == "PT45M"
    assert fields.recipe_yield == "4 servings"
    assert fields.category == "Main, Pasta"
    assert fields.keywords == ["pasta", "cheese", "comfort food"]
    assert fields.nutrition["calories"] == "520 kcal"
    assert fields.nutrition["fatContent"] == ""


def test_string_instructions_and_numeric_yield():
    html = _page(
        {
            "@type": "Recipe",
            "name": "Toast",
            "image": "https://example.com/toast.jpg",
            "recipeInstructions": "Toast the bread.\nButter it.",
            "recipeYield": 2,
        }
    )
    fields = extract_structured(html)
    assert fields.instructions == ["Toast the bread.", "Butter it."]
    assert fields.recipe_yield == "2"
    assert fields.image == "https://example.com/toast.jpg"
