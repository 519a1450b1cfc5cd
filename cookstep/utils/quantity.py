"""Quantity parsing, servings scaling and display formatting.

Scaling works as a substitution over every numeric token embedded in an
ingredient line. The token grammar is an ordered alternation, so a mixed
number or fraction is always recognised before a range or a plain number:

    "1 1/2", "1-1/2"  mixed number
    "1/2"    fraction
    "1-2", "1 to 2"  range
    "3", "2.5"       plain number

Scaled values are written with two decimals ("0.50"), including when the
factor is 1; callers that don't want reformatting skip scaling entirely.
"""

import math
import re
from fractions import Fraction
from typing import Optional, Union

_NUM = r"\d+(?:\.\d+)?"

QUANTITY_TOKEN = re.compile(
    r"(?P<mixed_whole>\d+)(?:\s+|\s*-\s*)(?P<mixed_num>\d+)\s*/\s*(?P<mixed_den>\d+)"
    rf"|(?P<num>{_NUM})\s*/\s*(?P<den>{_NUM})"
    rf"|(?P<low>{_NUM})\s*(?:-|–|\bto\b)\s*(?P<high>{_NUM})"
    rf"|(?P<plain>{_NUM})"
)

_VULGAR_FRACTIONS = {
    "½": "1/2",
    "⅓": "1/3",
    "⅔": "2/3",
    "¼": "1/4",
    "¾": "3/4",
    "⅛": "1/8",
    "⅜": "3/8",
    "⅝": "5/8",
    "⅞": "7/8",
}

# halves, thirds, quarters, eighths
DISPLAY_DENOMINATORS = frozenset({2, 3, 4, 8})
_DISPLAY_TOLERANCE = 0.01


def _format_scaled(value: float) -> str:
    if not math.isfinite(value):
        raise ZeroDivisionError("non-finite quantity")
    return f"{value:.2f}"


def _scale_match(match: "re.Match[str]", factor: float) -> str:
    token = match.group(0)
    try:
        if match.group("mixed_whole") is not None:
            whole = float(match.group("mixed_whole"))
            value = whole + float(match.group("mixed_num")) / float(match.group("mixed_den"))
            return _format_scaled(value * factor)

        if match.group("num") is not None:
            value = float(match.group("num")) / float(match.group("den"))
            return _format_scaled(value * factor)

        if match.group("low") is not None:
            low = _format_scaled(float(match.group("low")) * factor)
            high = _format_scaled(float(match.group("high")) * factor)
            return f"{low}-{high}"

        return _format_scaled(float(match.group("plain")) * factor)
    except ZeroDivisionError:
        # 1/0 and friends: keep the author's text rather than emit inf/nan
        return token


def scale_quantity_token(token: str, factor: float) -> str:
    """
    Scale a single quantity expression.

    Args:
        token: A quantity such as "2", "1.5", "1/2", "1 1/2", "2-3" or "2 to 3"
        factor: Multiplier (target servings / original servings)

    Returns:
        The scaled quantity with two decimals; ranges are re-joined with "-".
        Text that is not a quantity, or a fraction with a zero denominator,
        is returned unchanged.
    """
    match = QUANTITY_TOKEN.fullmatch(token.strip())
    if match is None:
        return token
    return _scale_match(match, factor)


def scale_ingredient_text(text: str, factor: float) -> str:
    """Scale every quantity token embedded in an ingredient line."""
    return QUANTITY_TOKEN.sub(lambda m: _scale_match(m, factor), text)


def replace_vulgar_fractions(text: str) -> str:
    """Rewrite unicode fractions ("1½", "¾") as ASCII fractions ("1 1/2", "3/4")."""
    for symbol, ascii_fraction in _VULGAR_FRACTIONS.items():
        text = re.sub(rf"(\d)\s*{symbol}", rf"\1 {ascii_fraction}", text)
        text = text.replace(symbol, ascii_fraction)
    return text


def parse_quantity(value: Union[str, int, float, None]) -> Optional[float]:
    """
    Read a numeric amount from free text.

    Mixed numbers, fractions, decimals and unicode fractions are supported;
    ranges resolve to their lower bound. Returns None when no amount is found.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            amount = float(value)
        except OverflowError:
            return None
        return amount if math.isfinite(amount) else None

    text = replace_vulgar_fractions(str(value))
    match = QUANTITY_TOKEN.search(text)
    if match is None:
        return None

    try:
        if match.group("mixed_whole") is not None:
            amount = float(match.group("mixed_whole")) + float(match.group("mixed_num")) / float(
                match.group("mixed_den")
            )
        elif match.group("num") is not None:
            amount = float(match.group("num")) / float(match.group("den"))
        elif match.group("low") is not None:
            amount = float(match.group("low"))
        else:
            amount = float(match.group("plain"))
    except ZeroDivisionError:
        return None
    return amount if math.isfinite(amount) else None


def format_display_quantity(value: Optional[float]) -> str:
    """
    Render a quantity for people: 0.5 -> "1/2", 1.25 -> "1 1/4", 3.0 -> "3".

    Halves, thirds, quarters and eighths become fractions (mixed numbers above
    one); anything else is rounded to one decimal place.
    """
    if value is None or not math.isfinite(value):
        return ""

    whole = int(value)
    remainder = value - whole
    if remainder < _DISPLAY_TOLERANCE:
        return str(whole)
    if remainder > 1 - _DISPLAY_TOLERANCE:
        return str(whole + 1)

    fraction = Fraction(remainder).limit_denominator(8)
    if (
        fraction.denominator in DISPLAY_DENOMINATORS
        and abs(float(fraction) - remainder) < _DISPLAY_TOLERANCE
    ):
        text = f"{fraction.numerator}/{fraction.denominator}"
        return f"{whole} {text}" if whole else text

    return f"{value:.1f}".rstrip("0").rstrip(".")
