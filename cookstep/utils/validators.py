"""Input validation utilities."""

import ipaddress
from typing import Any, List, Optional, Tuple
from urllib.parse import urlparse

from pydantic import ValidationError as PydanticValidationError

from cookstep.config import settings
from cookstep.models.recipe import Ingredient
from cookstep.utils.exceptions import ValidationError


def validate_url(url: str) -> str:
    """
    Validate and sanitize URL to prevent SSRF attacks.

    Args:
        url: URL to validate

    Returns:
        Validated URL string

    Raises:
        ValidationError: If URL is invalid or potentially dangerous
    """
    if not url or not isinstance(url, str):
        raise ValidationError("URL must be a non-empty string")

    url = url.strip()

    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise ValidationError(f"Invalid URL format: {str(e)}")

    if parsed.scheme not in ("http", "https"):
        raise ValidationError("URL must use http or https protocol")

    hostname = parsed.hostname
    if not hostname:
        raise ValidationError("URL must have a valid hostname")

    blocked_hosts = {
        "localhost",
        "127.0.0.1",
        "0.0.0.0",
        "::1",
    }

    if hostname.lower() in blocked_hosts:
        raise ValidationError("URL cannot point to localhost or private IPs")

    # Literal IPs only; hostnames are not resolved here
    try:
        address = ipaddress.ip_address(hostname)
    except ValueError:
        address = None
    if address is not None and (
        address.is_private or address.is_loopback or address.is_link_local or address.is_reserved
    ):
        raise ValidationError("URL cannot point to private IP ranges")

    return url


def _validate_ingredient(item: Any, index: int) -> Optional[Ingredient]:
    if isinstance(item, str):
        name = item.strip()
        return Ingredient(name=name) if name else None
    if isinstance(item, dict):
        try:
            return Ingredient(**item)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid ingredient at position {index}: {e.errors()[0]['msg']}")
    raise ValidationError("Each ingredient must be an object or a string")


def validate_process_payload(payload: Any) -> Tuple[List[str], List[Ingredient]]:
    """
    Validate the process-recipe body.

    Args:
        payload: Decoded JSON body

    Returns:
        (instructions, ingredients); string ingredients are wrapped as Ingredient(name=...)

    Raises:
        ValidationError: If instructions or ingredients are not arrays, or limits are exceeded
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")

    instructions = payload.get("instructions")
    if not isinstance(instructions, list):
        raise ValidationError("Instructions must be an array")

    ingredients = payload.get("ingredients")
    if ingredients is None:
        ingredients = []
    if not isinstance(ingredients, list):
        raise ValidationError("Ingredients must be an array")

    if len(instructions) > settings.max_instructions:
        raise ValidationError(f"Instructions list cannot exceed {settings.max_instructions} items")

    for instruction in instructions:
        if not isinstance(instruction, str):
            raise ValidationError("All instructions must be strings")
        if len(instruction) > settings.max_instruction_length:
            raise ValidationError(
                f"Instruction text cannot exceed {settings.max_instruction_length} characters"
            )

    validated: List[Ingredient] = []
    for index, item in enumerate(ingredients):
        ingredient = _validate_ingredient(item, index)
        if ingredient is not None:
            validated.append(ingredient)

    return instructions, validated
