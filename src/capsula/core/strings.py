"""
String utility functions for capsula.

Identifier casing and escaping used when emitting source for the four
target platforms.
"""

from __future__ import annotations

import re

_WORD_PATTERN = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")


def split_words(text: str) -> list[str]:
    """
    Split text into words on separators and camelCase boundaries.

    Examples:
        >>> split_words("buyButton")
        ['buy', 'Button']
        >>> split_words("hero-card 2")
        ['hero', 'card', '2']
        >>> split_words("HTTPServer")
        ['HTTP', 'Server']
    """
    return _WORD_PATTERN.findall(text)


def to_pascal_case(text: str) -> str:
    """
    Convert text to PascalCase.

    Acronyms keep their capitals; a leading digit gets an underscore prefix
    so the result is always a valid identifier.

    Examples:
        >>> to_pascal_case("buy-button")
        'BuyButton'
        >>> to_pascal_case("cap-1")
        'Cap1'
    """
    words = split_words(text)
    result = "".join(w if w.isupper() else w[:1].upper() + w[1:].lower() for w in words)
    if not result:
        return "_"
    if result[0].isdigit():
        result = "_" + result
    return result


def to_camel_case(text: str) -> str:
    """
    Convert text to camelCase.

    Examples:
        >>> to_camel_case("Buy Now")
        'buyNow'
    """
    pascal = to_pascal_case(text)
    if pascal.startswith("_"):
        return pascal
    words = split_words(pascal)
    if not words:
        return pascal
    return words[0].lower() + pascal[len(words[0]) :]


def to_snake_case(text: str) -> str:
    """
    Convert text to snake_case.

    Examples:
        >>> to_snake_case("HeroCard")
        'hero_card'
    """
    return "_".join(w.lower() for w in split_words(text))


def to_kebab_case(text: str) -> str:
    """
    Convert text to kebab-case (npm package names, CSS classes).

    Examples:
        >>> to_kebab_case("My Shop App")
        'my-shop-app'
    """
    return "-".join(w.lower() for w in split_words(text))


def to_package_segment(text: str) -> str:
    """Lowercase alphanumeric segment usable in Java/Kotlin packages and bundle ids."""
    segment = "".join(w.lower() for w in split_words(text))
    if not segment:
        return "app"
    if segment[0].isdigit():
        segment = "app" + segment
    return segment


def escape_string(text: str) -> str:
    """Escape text for a double-quoted string literal (C-family syntax)."""
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )


def hex_to_rgb(hex_color: str) -> tuple[int, int, int] | None:
    """
    Convert ``#rrggbb`` to an (r, g, b) tuple.

    Returns:
        Tuple of 0-255 components, or None if the value is not a hex color
    """
    match = re.fullmatch(r"#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})", hex_color)
    if not match:
        return None
    r, g, b = (int(part, 16) for part in match.groups())
    return r, g, b
