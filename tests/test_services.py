"""Tests for validators, prompt building and Gemini helpers."""

import json

import pytest

from cookstep.models.recipe import Ingredient
from cookstep.services.prompt_service import create_instruction_prompt, format_ingredient
from cookstep.utils.exceptions import ValidationError
from cookstep.utils.gemini_helpers import extract_first_json_value, get_response_text, safe_json_loads
from cookstep.utils.validators import validate_process_payload, validate_url


def test_validate_url_valid():
    """Test URL validation with valid URLs."""
    assert validate_url("https://example.com/recipe") == "https://example.com/recipe"
    assert validate_url("  http://example.com/recipe ") == "http://example.com/recipe"


def test_validate_url_invalid_scheme():
    """Test URL validation with invalid scheme."""
    with pytest.raises(ValidationError):
        validate_url("ftp://example.com")


def test_validate_url_private_hosts():
    """Test URL validation blocks localhost and private ranges."""
    for url in ("http://localhost/recipe", "http://10.0.0.5/", "http://172.16.0.1/", "http://[::1]/"):
        with pytest.raises(ValidationError):
            validate_url(url)


def test_validate_url_empty():
    with pytest.raises(ValidationError):
        validate_url("")


def test_validate_process_payload_wraps_string_ingredients():
    instructions, ingredients = validate_process_payload(
        {"instructions": ["Mix"], "ingredients": ["flour", {"name": "milk", "quantity": 1, "unit": "cup"}, "  "]}
    )
    assert instructions == ["Mix"]
    assert ingredients == [Ingredient(name="flour"), Ingredient(name="milk", quantity=1.0, unit="cup")]


def test_validate_process_payload_ingredients_optional():
    assert validate_process_payload({"instructions": []}) == ([], [])


def test_validate_process_payload_limits(monkeypatch):
    from cookstep.config import settings

    monkeypatch.setattr(settings, "max_instructions", 2)
    with pytest.raises(ValidationError):
        validate_process_payload({"instructions": ["a", "b", "c"]})


def test_format_ingredient():
    assert format_ingredient(Ingredient(name="flour", quantity=1.5, unit="cups", preparation="sifted")) == (
        "1 1/2 cups flour, sifted"
    )
    assert format_ingredient(Ingredient(name="salt", unit="to taste")) == "salt to taste"


def test_create_instruction_prompt_without_ingredients():
    prompt = create_instruction_prompt(["Boil water"], [])
    assert "1. Boil water" in prompt
    assert "(none provided)" in prompt


def test_extract_first_json_value():
    assert extract_first_json_value('```json\n[{"action": "Stir"}]\n```') == '[{"action": "Stir"}]'
    assert extract_first_json_value('Here you go: [1, 2] hope it helps') == "[1, 2]"


def test_safe_json_loads_repairs_trailing_commas():
    assert safe_json_loads('[{"action": "Stir",},]') == [{"action": "Stir"}]
    with pytest.raises(json.JSONDecodeError):
        safe_json_loads("nothing here")


def test_get_response_text():
    class Part:
        text = '[{"action": "Stir"}]'

    class Content:
        parts = [Part()]

    class Candidate:
        content = Content()

    class Response:
        text = None
        candidates = [Candidate()]

    assert get_response_text(Response()) == '[{"action": "Stir"}]'
    assert get_response_text(object()) == ""


def test_validate_process_payload_accepts_long_recipes():
    """A long real-world recipe stays well inside the default limits."""
    steps = ["Fold the butter into the dough, then rest it. " * 50] * 300
    instructions, _ = validate_process_payload({"instructions": steps})
    assert len(instructions) == 300
