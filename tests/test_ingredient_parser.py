"""Tests for rule-based ingredient parsing."""

from cookstep.models.recipe import Ingredient
from cookstep.utils.ingredient_parser import (
    INGREDIENT_PATTERNS,
    extract_step_ingredients,
    find_known_ingredient,
    parse_ingredient_clause,
    parse_ingredient_line,
    split_instruction_clauses,
)


def test_pattern_table_order():
    """Fraction, number, article and special patterns are tried in that order."""
    assert [name for name, _ in INGREDIENT_PATTERNS] == ["fraction", "number", "article", "special"]


def test_number_with_unit():
    ingredient = parse_ingredient_clause("stirring 2 cups of sauce")
    assert ingredient == Ingredient(name="sauce", quantity=2.0, unit="cups")


def test_fraction_and_mixed_number():
    """Fractions are read before the plain-number pattern sees their digits."""
    assert parse_ingredient_clause("1/2 cup milk") == Ingredient(name="milk", quantity=0.5, unit="cup")
    assert parse_ingredient_clause("add 1 1/2 cups flour") == Ingredient(
        name="flour", quantity=1.5, unit="cups"
    )


def test_count_noun_without_unit():
    assert parse_ingredient_clause("3 eggs") == Ingredient(name="eggs", quantity=3.0)


def test_article_defaults_to_one():
    assert parse_ingredient_clause("a cup of milk") == Ingredient(name="milk", quantity=1.0, unit="cup")
    assert parse_ingredient_clause("an onion") == Ingredient(name="onion", quantity=1.0)


def test_special_tokens_have_no_quantity():
    """'to taste', 'as needed', 'pinch of', 'dash of' keep quantity null and use the phrase as unit."""
    assert parse_ingredient_clause("salt to taste") == Ingredient(name="salt", unit="to taste")
    assert parse_ingredient_clause("olive oil as needed") == Ingredient(name="olive oil", unit="as needed")
    assert parse_ingredient_clause("a pinch of salt") == Ingredient(name="salt", unit="pinch of")
    assert parse_ingredient_clause("a dash of vinegar") == Ingredient(name="vinegar", unit="dash of")


def test_grouped_special_keeps_full_name():
    assert parse_ingredient_clause("Salt and pepper to taste").name == "Salt and pepper"


def test_preparation_and_connector_are_stripped():
    ingredient = parse_ingredient_clause("and 2 finely chopped onions")
    assert ingredient.name == "onions"
    assert ingredient.quantity == 2.0
    assert ingredient.preparation == "finely chopped"


def test_time_and_temperature_are_not_ingredients():
    assert parse_ingredient_clause("Simmer for 20 minutes at 180 F") is None
    assert parse_ingredient_clause("Bake 25 minutes") is None


def test_empty_name_is_discarded():
    assert parse_ingredient_clause("cut into 2 pieces") is None
    assert parse_ingredient_clause("") is None


def test_parse_ingredient_line():
    """Parenthetical notes are dropped and the preparation may follow a comma."""
    ingredient = parse_ingredient_line("3 cloves garlic, minced")
    assert ingredient == Ingredient(name="garlic", quantity=3.0, unit="cloves", preparation="minced")

    canned = parse_ingredient_line("1 (14 oz) can tomatoes, drained")
    assert canned.name == "tomatoes"
    assert canned.unit == "can"
    assert canned.quantity == 1.0


def test_parse_ingredient_line_without_amount():
    assert parse_ingredient_line("Fresh basil") == Ingredient(name="Fresh basil")
    assert parse_ingredient_line("   ") is None


def test_split_instruction_clauses_keeps_decimals():
    assert split_instruction_clauses("Add 1.5 cups stock, stir. Serve") == [
        "Add 1.5 cups stock",
        "stir",
        "Serve",
    ]


def test_find_known_ingredient():
    known = [Ingredient(name="All-purpose flour", quantity=2.0, unit="cups"), Ingredient(name="eggs")]
    assert find_known_ingredient("EGGS", known).name == "eggs"
    assert find_known_ingredient("flour", known).name == "All-purpose flour"
    assert find_known_ingredient("sugar", known) is None


def test_step_ingredients_example_instruction():
    ingredients = extract_step_ingredients("Simmer for 20 minutes at 180 F, stirring 2 cups of sauce")
    assert ingredients == [Ingredient(name="sauce", quantity=2.0, unit="cups")]


def test_step_ingredients_prefer_known_quantity():
    """Quantity and unit from the recipe's own list win over the instruction text."""
    known = [Ingredient(name="Flour", quantity=3.0, unit="cups")]
    ingredients = extract_step_ingredients("Add 2 cup flour", known)
    assert ingredients == [Ingredient(name="flour", quantity=3.0, unit="cups")]


def test_step_ingredients_known_mention_without_amount():
    known = [Ingredient(name="eggs", quantity=4.0)]
    assert extract_step_ingredients("Whisk the eggs until fluffy", known) == known


def test_step_ingredients_are_deduplicated():
    ingredients = extract_step_ingredients("Add 1 cup milk, then 1 cup milk")
    assert ingredients == [Ingredient(name="milk", quantity=1.0, unit="cup")]
