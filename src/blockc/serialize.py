"""JSON program format.

A program document is either a list of blocks or an object:

    {"language": "cpp", "blocks": [...]}

Each block is {"id", "type", "name"?, "slots"?, "children"?}. A slot holds a
string (literal text) or a block object (nested expression). Numbers and
booleans in slots are converted to literal text. Blocks without an id get
one from the catalog.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field

from .blocks import (
    LANGUAGES,
    BlockInstance,
    ExpressionValue,
    LiteralValue,
    SlotValue,
    iter_blocks,
)
from .catalog import BlockCatalog, default_catalog
from .tree import BlockTreeError, check_tree


@dataclass
class Program:
    """A loaded program: its top-level blocks and the language it asks for, if any."""

    blocks: list[BlockInstance] = field(default_factory=list)
    language: str | None = None


def load_program(text: str, catalog: BlockCatalog | None = None) -> Program:
    """Parse a JSON program document. Raises BlockTreeError when malformed."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise BlockTreeError(
            "invalid JSON at line " + str(e.lineno) + ", column " + str(e.colno) + ": " + e.msg
        ) from e
    return program_from_data(data, catalog)


def program_from_data(data: object, catalog: BlockCatalog | None = None) -> Program:
    if catalog is None:
        catalog = default_catalog()
    language: str | None = None
    if isinstance(data, list):
        raw_blocks = data
    elif isinstance(data, dict):
        raw_blocks = data.get("blocks", [])
        raw_language = data.get("language")
        if raw_language is not None:
            if raw_language not in LANGUAGES:
                raise BlockTreeError("unknown language '" + str(raw_language) + "'")
            language = raw_language
        if not isinstance(raw_blocks, list):
            raise BlockTreeError("'blocks' must be a list")
    else:
        raise BlockTreeError("program must be a list of blocks or an object with 'blocks'")
    blocks = [_block_from_data(b, catalog, "blocks[" + str(i) + "]") for i, b in enumerate(raw_blocks)]
    _assign_missing_ids(blocks, catalog)
    problems = check_tree(blocks, catalog)
    if problems:
        raise BlockTreeError(problems[0])
    return Program(blocks, language)


def _block_from_data(data: object, catalog: BlockCatalog, where: str) -> BlockInstance:
    if not isinstance(data, dict):
        raise BlockTreeError(where + ": block must be an object")
    kind = data.get("type")
    if not isinstance(kind, str) or not kind:
        raise BlockTreeError(where + ": block needs a 'type'")
    raw_id = data.get("id")
    block_id = "" if raw_id is None else str(raw_id)
    raw_name = data.get("name")
    name = "" if raw_name is None else str(raw_name)
    slots: dict[str, SlotValue] = {}
    raw_slots = data.get("slots") or {}
    if not isinstance(raw_slots, dict):
        raise BlockTreeError(where + ": 'slots' must be an object")
    for slot_name, raw in raw_slots.items():
        value = _slot_from_data(raw, catalog, where + ".slots." + slot_name)
        if value is not None:
            slots[slot_name] = value
    raw_children = data.get("children") or []
    if not isinstance(raw_children, list):
        raise BlockTreeError(where + ": 'children' must be a list")
    children = [
        _block_from_data(c, catalog, where + ".children[" + str(i) + "]")
        for i, c in enumerate(raw_children)
    ]
    category = catalog.category_of(kind) or ""
    return BlockInstance(block_id, kind, category, name, slots, children)


def _slot_from_data(raw: object, catalog: BlockCatalog, where: str) -> SlotValue | None:
    if raw is None:
        return None
    if isinstance(raw, bool):
        return LiteralValue("true" if raw else "false")
    if isinstance(raw, (str, int, float)):
        return LiteralValue(str(raw))
    if isinstance(raw, dict):
        return ExpressionValue(_block_from_data(raw, catalog, where))
    raise BlockTreeError(where + ": slot must be text or a block")


def _assign_missing_ids(blocks: list[BlockInstance], catalog: BlockCatalog) -> None:
    every = iter_blocks(blocks)
    used = {b.id for b in every if b.id}
    for block in every:
        if block.id:
            continue
        block_id = catalog.new_id(block.kind)
        while block_id in used:
            block_id = catalog.new_id(block.kind)
        used.add(block_id)
        block.id = block_id


# ---------------------------------------------------------------------------
# Dumping
# ---------------------------------------------------------------------------


def block_to_dict(block: BlockInstance) -> dict[str, object]:
    d: dict[str, object] = {"id": block.id, "type": block.kind}
    if block.name:
        d["name"] = block.name
    if block.slots:
        slots: dict[str, object] = {}
        for slot_name, value in block.slots.items():
            match value:
                case LiteralValue(text=text):
                    slots[slot_name] = text
                case ExpressionValue(block=nested):
                    slots[slot_name] = block_to_dict(nested)
        d["slots"] = slots
    if block.children:
        d["children"] = [block_to_dict(c) for c in block.children]
    return d


def program_to_dict(program: Program) -> dict[str, object]:
    d: dict[str, object] = {}
    if program.language is not None:
        d["language"] = program.language
    d["blocks"] = [block_to_dict(b) for b in program.blocks]
    return d


def dump_program(program: Program) -> str:
    return json.dumps(program_to_dict(program), indent=2)
