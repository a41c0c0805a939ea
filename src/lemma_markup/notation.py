"""Reserved characters and low-level lexical helpers for the entry notation."""

from __future__ import annotations

import re

from lemma_markup.exceptions import (
    EmptyAnnotationKeyError,
    EmptyAnnotationValueError,
    InvalidAnnotationKeyError,
    InvalidAnnotationValueError,
    ParseError,
)

COMMENT_PREFIX = "#"
SUB_ENTRY_SEPARATOR = "|"
LIST_SEPARATOR = ","
ANNOTATION_OPEN = "["
ANNOTATION_CLOSE = "]"
KEY_VALUE_SEPARATOR = ":"
REDIRECT_MARKER = ">"
ENTRY_REDIRECT_MARKER = ">>"

ANNOTATION_KEY_RE = re.compile(r"[A-Za-z0-9_]+")


def split_with_offsets(
    text: str, separator: str = LIST_SEPARATOR
) -> list[tuple[str, int]]:
    """Split on ``separator`` outside parentheses, keeping piece offsets."""
    pieces: list[tuple[str, int]] = []
    depth = 0
    start = 0
    for index, char in enumerate(text):
        if char == "(":
            depth += 1
        elif char == ")":
            depth = max(depth - 1, 0)
        elif char == separator and depth == 0:
            pieces.append((text[start:index], start))
            start = index + 1
    pieces.append((text[start:], start))
    return pieces


def smart_split(text: str, separator: str = LIST_SEPARATOR) -> list[str]:
    """Split ``text`` on ``separator`` except inside (nested) parentheses.

    >>> smart_split("one,term((a,b),c),three")
    ['one', 'term((a,b),c)', 'three']
    """
    return [piece for piece, _ in split_with_offsets(text, separator)]


def parentheses_balanced(text: str) -> bool:
    depth = 0
    for char in text:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


def is_blank_or_comment(line: str) -> bool:
    """True for lines a collection skips."""
    stripped = line.strip()
    return not stripped or stripped.startswith(COMMENT_PREFIX)


def annotation_problem(
    key: str, value: str | bool
) -> tuple[type[ParseError], str] | None:
    """Return the error class and message for an invalid annotation, if any."""
    if not key:
        return EmptyAnnotationKeyError, "Empty annotation key"
    if not ANNOTATION_KEY_RE.fullmatch(key):
        return (
            InvalidAnnotationKeyError,
            f"Invalid annotation key '{key}': only letters, digits and '_' allowed",
        )
    if value is True:
        return None
    if not isinstance(value, str):
        return (
            InvalidAnnotationValueError,
            f"Annotation '{key}' must have a string value or be a flag",
        )
    if not value:
        return EmptyAnnotationValueError, f"Empty value for annotation '{key}'"
    if ANNOTATION_OPEN in value or ANNOTATION_CLOSE in value:
        return (
            InvalidAnnotationValueError,
            f"Annotation value '{value}' cannot contain '[' or ']'",
        )
    return None
