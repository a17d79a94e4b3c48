"""Block tree model - the in-memory representation of a user program.

A program is an ordered list of top-level BlockInstance trees. Each instance
owns its slot-nested expressions and its children exclusively.

Architecture:
    Editor -> [Block tree] -> Frontend (inference, validation) -> Backend -> Source text
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal


# ============================================================
# ENUMERATIONS
# ============================================================

BlockKind = Literal[
    "int",
    "string",
    "bool",
    "set",
    "if",
    "while",
    "for",
    "print",
    "input",
    "add",
    "subtract",
    "multiply",
    "divide",
    "equals",
    "not-equals",
    "less-than",
    "greater-than",
    "comment",
]

Category = Literal["variable", "control", "io", "arithmetic", "conditional", "comment"]
"""Presentation grouping of block kinds.

Only `arithmetic` and `conditional` blocks produce a value and may be nested
inside a slot.
"""

SlotKind = Literal["value", "condition", "statement"]

VarType = Literal["int", "string", "bool", "unknown"]

Language = Literal["cpp", "python"]

LANGUAGES: tuple[str, ...] = ("cpp", "python")

VARIABLE_KINDS = frozenset({"int", "string", "bool"})
CONTAINER_KINDS = frozenset({"if", "while", "for"})
ARITHMETIC_KINDS = frozenset({"add", "subtract", "multiply", "divide"})
COMPARISON_KINDS = frozenset({"equals", "not-equals", "less-than", "greater-than"})
EXPRESSION_CATEGORIES = frozenset({"arithmetic", "conditional"})


# ============================================================
# CATALOG ENTRIES
# ============================================================


@dataclass(frozen=True)
class SlotSpec:
    """A named hole on a block.

    `statement` slots are filled by the block's `children`; `value` and
    `condition` slots hold a SlotValue.
    """

    name: str
    slot_kind: SlotKind


@dataclass(frozen=True)
class BlockDefinition:
    """Catalog description of one block kind."""

    kind: BlockKind
    category: Category
    label: str
    slots: tuple[SlotSpec, ...] = ()

    def slot(self, name: str) -> SlotSpec | None:
        for spec in self.slots:
            if spec.name == name:
                return spec
        return None

    def has_statement_slot(self) -> bool:
        return any(spec.slot_kind == "statement" for spec in self.slots)


# ============================================================
# SLOT VALUES
#
# Either literal text typed by the user or a nested expression block.
# An absent slot is a missing key in BlockInstance.slots.
# ============================================================


@dataclass(frozen=True)
class LiteralValue:
    """Literal text in a slot: a number, a quoted string, a variable name."""

    text: str


@dataclass(frozen=True)
class ExpressionValue:
    """A nested arithmetic or comparison block used as a value."""

    block: BlockInstance


SlotValue = LiteralValue | ExpressionValue


# ============================================================
# INSTANCES
# ============================================================


@dataclass
class BlockInstance:
    """One block of a user program.

    Invariants:
    - id is unique across the whole tree
    - children is non-empty only for if/while/for
    - a nested ExpressionValue holds an arithmetic or conditional block
    - name is meaningful only for int/string/bool
    """

    id: str
    kind: str
    category: str
    name: str = ""
    slots: dict[str, SlotValue] = field(default_factory=dict)
    children: list[BlockInstance] = field(default_factory=list)

    def slot(self, name: str) -> SlotValue | None:
        return self.slots.get(name)

    def slot_text(self, name: str) -> str:
        """Trimmed literal text of a slot, or "" when absent or nested."""
        value = self.slots.get(name)
        if isinstance(value, LiteralValue):
            return value.text.strip()
        return ""

    def nested(self) -> list[BlockInstance]:
        """Slot-nested expression blocks in slot order."""
        return [v.block for v in self.slots.values() if isinstance(v, ExpressionValue)]


def is_blank(value: SlotValue | None) -> bool:
    """An absent slot or whitespace-only literal. Nested expressions are never blank."""
    if value is None:
        return True
    if isinstance(value, LiteralValue):
        return value.text.strip() == ""
    return False


def iter_blocks(blocks: list[BlockInstance]) -> list[BlockInstance]:
    """All instances of the tree in tree order: block, children, then slot-nested."""
    result: list[BlockInstance] = []
    for block in blocks:
        _collect(block, result)
    return result


def _collect(block: BlockInstance, result: list[BlockInstance]) -> None:
    result.append(block)
    for child in block.children:
        _collect(child, result)
    for nested in block.nested():
        _collect(nested, result)
