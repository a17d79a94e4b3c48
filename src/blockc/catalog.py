"""Block catalog: the registry of block kinds and their slot shapes.

The catalog is an ordinary immutable object passed to whatever needs it;
default_catalog() builds the standard one.
"""

from __future__ import annotations

import itertools
from typing import Callable

from .blocks import BlockDefinition, BlockInstance, SlotSpec

_VALUE = SlotSpec("value", "value")
_BODY = SlotSpec("body", "statement")
_OPERANDS = (SlotSpec("left", "value"), SlotSpec("right", "value"))

BLOCK_DEFINITIONS: tuple[BlockDefinition, ...] = (
    # Variables
    BlockDefinition("int", "variable", "int variable", (_VALUE,)),
    BlockDefinition("string", "variable", "string variable", (_VALUE,)),
    BlockDefinition("bool", "variable", "bool variable", (_VALUE,)),
    BlockDefinition("set", "variable", "set variable", (SlotSpec("variable", "value"), _VALUE)),
    # Control flow
    BlockDefinition("if", "control", "if", (SlotSpec("condition", "condition"), _BODY)),
    BlockDefinition("while", "control", "while", (SlotSpec("condition", "condition"), _BODY)),
    BlockDefinition("for", "control", "for loop", (SlotSpec("limit", "value"), _BODY)),
    # I/O
    BlockDefinition("print", "io", "print", (_VALUE,)),
    BlockDefinition(
        "input", "io", "input", (SlotSpec("variable", "value"), SlotSpec("prompt", "value"))
    ),
    # Arithmetic
    BlockDefinition("add", "arithmetic", "+", _OPERANDS),
    BlockDefinition("subtract", "arithmetic", "-", _OPERANDS),
    BlockDefinition("multiply", "arithmetic", "*", _OPERANDS),
    BlockDefinition("divide", "arithmetic", "/", _OPERANDS),
    # Comparisons
    BlockDefinition("equals", "conditional", "==", _OPERANDS),
    BlockDefinition("not-equals", "conditional", "!=", _OPERANDS),
    BlockDefinition("less-than", "conditional", "<", _OPERANDS),
    BlockDefinition("greater-than", "conditional", ">", _OPERANDS),
    # Comment
    BlockDefinition("comment", "comment", "// comment", (SlotSpec("text", "value"),)),
)


class BlockCatalog:
    """Immutable registry of block definitions keyed by kind."""

    def __init__(
        self,
        definitions: tuple[BlockDefinition, ...] | list[BlockDefinition],
        id_factory: Callable[[str], str] | None = None,
    ) -> None:
        self._definitions: dict[str, BlockDefinition] = {}
        for definition in definitions:
            if definition.kind in self._definitions:
                raise ValueError("duplicate block kind '" + definition.kind + "'")
            self._definitions[definition.kind] = definition
        if id_factory is None:
            id_factory = _counter_ids()
        self._id_factory = id_factory

    def __contains__(self, kind: object) -> bool:
        return kind in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    def kinds(self) -> list[str]:
        return list(self._definitions)

    def get(self, kind: str) -> BlockDefinition | None:
        return self._definitions.get(kind)

    def category_of(self, kind: str) -> str | None:
        definition = self._definitions.get(kind)
        return definition.category if definition is not None else None

    def by_category(self, category: str) -> list[BlockDefinition]:
        """Definitions of one category, in catalog order (palette grouping)."""
        return [d for d in self._definitions.values() if d.category == category]

    def new_id(self, kind: str) -> str:
        return self._id_factory(kind)

    def instantiate(self, kind: str, block_id: str | None = None, name: str = "") -> BlockInstance:
        """Create a fresh instance of a kind: empty slots, no children."""
        definition = self._definitions.get(kind)
        if definition is None:
            raise KeyError("unknown block kind '" + kind + "'")
        if block_id is None:
            block_id = self.new_id(kind)
        return BlockInstance(id=block_id, kind=kind, category=definition.category, name=name)


def _counter_ids() -> Callable[[str], str]:
    counter = itertools.count(1)

    def make(kind: str) -> str:
        return kind + "-" + str(next(counter))

    return make


def default_catalog(id_factory: Callable[[str], str] | None = None) -> BlockCatalog:
    """Build the standard catalog."""
    return BlockCatalog(BLOCK_DEFINITIONS, id_factory)
