"""Type inference for slot values.

Types are inferred from literal text only. A nested expression block is
`unknown`: expression results are never evaluated statically.
"""

from __future__ import annotations

import re

from ..blocks import (
    VARIABLE_KINDS,
    BlockInstance,
    ExpressionValue,
    LiteralValue,
    SlotValue,
    VarType,
    iter_blocks,
)

INT_PATTERN = re.compile(r"-?[0-9]+")

BOOL_LITERALS = frozenset({"true", "false", "True", "False"})


def is_int_literal(text: str) -> bool:
    return INT_PATTERN.fullmatch(text) is not None


def is_quoted(text: str) -> bool:
    """Wrapped in matching single or double quotes."""
    if len(text) < 2:
        return False
    return (text[0] == '"' and text[-1] == '"') or (text[0] == "'" and text[-1] == "'")


def infer_value_type(value: SlotValue | None, variable_types: dict[str, VarType]) -> VarType:
    """Infer the type of a slot value.

    Priority: declared variable, bool literal, int literal, quoted string.
    """
    match value:
        case None:
            return "unknown"
        case ExpressionValue():
            return "unknown"
        case LiteralValue(text=text):
            text = text.strip()
            if not text:
                return "unknown"
            if text in variable_types:
                return variable_types[text]
            if text in BOOL_LITERALS:
                return "bool"
            if is_int_literal(text):
                return "int"
            if is_quoted(text):
                return "string"
            return "unknown"
        case _:
            return "unknown"


def build_variable_type_map(blocks: list[BlockInstance]) -> dict[str, VarType]:
    """Map every declared variable name to its kind. Later declarations win."""
    types: dict[str, VarType] = {}
    for block in iter_blocks(blocks):
        if block.kind in VARIABLE_KINDS:
            name = block.name.strip()
            if name:
                types[name] = block.kind
    return types


def arithmetic_compatible(left: VarType, right: VarType) -> bool:
    return left == "int" and right == "int"


def comparison_compatible(left: VarType, right: VarType) -> bool:
    """Comparable when both are known and the same type."""
    if left == "unknown" or right == "unknown":
        return False
    return left == right
