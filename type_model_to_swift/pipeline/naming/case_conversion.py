"""
Case conversion between identifier conventions.

Every conversion goes through a canonical word list (the snake_case-like
internal form): the source identifier is segmented according to its
convention, then the words are re-joined in the target convention.

Acronym runs are one segment in both directions:
    "HTTPServer" -> ["http", "server"] -> "httpServer" -> ["http", "server"]
"""

from __future__ import annotations

import re
from collections.abc import Callable
from enum import Enum


class CaseConvention(str, Enum):
    """Identifier conventions understood by the naming engine."""

    IDENTITY = "identity"
    SNAKE = "snake_case"  # Canonical internal form
    CAMEL = "camelCase"
    PASCAL = "PascalCase"
    KEBAB = "kebab-case"
    SCREAMING_SNAKE = "SCREAMING_SNAKE_CASE"


# "HTTPServer" -> "HTTP_Server"
_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
# "userId" -> "user_Id", "v2Response" -> "v2_Response"
_LOWER_UPPER_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATORS = re.compile(r"[_\-\s]+")


def _split_on(text: str, separator: str) -> list[str]:
    return [word.lower() for word in text.split(separator) if word]


def _split_case_boundaries(text: str) -> list[str]:
    """Split camelCase / PascalCase text, keeping acronym runs together."""
    text = _ACRONYM_BOUNDARY.sub(r"\1_\2", text)
    text = _LOWER_UPPER_BOUNDARY.sub(r"\1_\2", text)
    return [word.lower() for word in _SEPARATORS.split(text) if word]


def split_words(identifier: str, from_convention: CaseConvention = CaseConvention.IDENTITY) -> list[str]:
    """
    Segment an identifier into lowercase canonical words.

    Args:
        identifier: The identifier to segment
        from_convention: The convention the identifier is written in.
            IDENTITY means "unknown": separators and case boundaries both split.

    Returns:
        List of lowercase words
    """
    if from_convention in (CaseConvention.SNAKE, CaseConvention.SCREAMING_SNAKE):
        return _split_on(identifier, "_")
    if from_convention == CaseConvention.KEBAB:
        return _split_on(identifier, "-")
    return _split_case_boundaries(identifier)


def _join_camel(words: list[str]) -> str:
    if not words:
        return ""
    return words[0] + "".join(word.capitalize() for word in words[1:])


def _join_pascal(words: list[str]) -> str:
    return "".join(word.capitalize() for word in words)


def _stable_words(words: list[str], join: Callable[[list[str]], str]) -> list[str]:
    """Normalize words so that joining then re-splitting them is lossless.

    Consecutive single-letter words ("x_y_z") collapse into an acronym run
    once capitalized ("xYZ"), so re-segmentation is applied until stable.
    """
    current = words
    # Each pass can only merge words, so this settles within len(words) passes
    for _ in range(len(words) + 1):
        resplit = _split_case_boundaries(join(current))
        if resplit == current:
            break
        current = resplit
    return current


def join_words(words: list[str], to_convention: CaseConvention) -> str:
    """Join canonical words in the target convention."""
    if to_convention in (CaseConvention.SNAKE, CaseConvention.IDENTITY):
        return "_".join(words)
    if to_convention == CaseConvention.SCREAMING_SNAKE:
        return "_".join(words).upper()
    if to_convention == CaseConvention.KEBAB:
        return "-".join(words)
    if to_convention == CaseConvention.CAMEL:
        return _join_camel(_stable_words(words, _join_camel))
    if to_convention == CaseConvention.PASCAL:
        return _join_pascal(_stable_words(words, _join_pascal))
    raise ValueError(f"Unsupported case convention: {to_convention}")


def convert_case(
    identifier: str,
    from_convention: CaseConvention,
    to_convention: CaseConvention,
) -> str:
    """
    Convert an identifier between conventions.

    Examples:
        convert_case("user_id", SNAKE, CAMEL) -> "userId"
        convert_case("APIResponse", PASCAL, SNAKE) -> "api_response"
        convert_case("hello_world", SNAKE, KEBAB) -> "hello-world"
        convert_case("Anything", SNAKE, IDENTITY) -> "Anything"

    Args:
        identifier: The identifier to convert
        from_convention: Convention the identifier is written in
        to_convention: Convention to produce

    Returns:
        The converted identifier
    """
    if to_convention == CaseConvention.IDENTITY or not identifier:
        return identifier
    return join_words(split_words(identifier, from_convention), to_convention)


def to_snake_case(identifier: str) -> str:
    return convert_case(identifier, CaseConvention.IDENTITY, CaseConvention.SNAKE)


def to_camel_case(identifier: str) -> str:
    return convert_case(identifier, CaseConvention.IDENTITY, CaseConvention.CAMEL)


def to_pascal_case(identifier: str) -> str:
    return convert_case(identifier, CaseConvention.IDENTITY, CaseConvention.PASCAL)
