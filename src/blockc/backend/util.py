"""Shared utilities for backend code emitters."""

from __future__ import annotations

from ..blocks import ExpressionValue, SlotValue
from ..frontend.type_inference import is_quoted

ARITHMETIC_OPS: dict[str, str] = {
    "add": "+",
    "subtract": "-",
    "multiply": "*",
    "divide": "/",
}

COMPARISON_OPS: dict[str, str] = {
    "equals": "==",
    "not-equals": "!=",
    "less-than": "<",
    "greater-than": ">",
}

BINARY_OPS: dict[str, str] = {**ARITHMETIC_OPS, **COMPARISON_OPS}

# Fixed name arithmetic statements assign to
TEMP_NAME = "result"

# Target of an input or set block with no variable chosen
DEFAULT_TARGET = "variable"

DEFAULT_FOR_LIMIT = "10"

DEFAULT_COMMENT = "Comment"


def escape_string(value: str) -> str:
    """Escape text for a double-quoted literal (without quotes). Valid in C++ and Python."""
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
        .replace("\r", "\\r")
    )


def quote_string(value: str) -> str:
    return '"' + escape_string(value) + '"'


def one_line(text: str) -> str:
    """Collapse line breaks so a comment stays a single output line."""
    return " ".join(text.splitlines())


def strip_quotes(text: str) -> str:
    text = text.strip()
    if is_quoted(text):
        return text[1:-1]
    return text


def is_nested(value: SlotValue | None) -> bool:
    return isinstance(value, ExpressionValue)
