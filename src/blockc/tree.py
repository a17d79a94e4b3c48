"""Tree editing: an arena of block instances keyed by id.

The arena keeps a parent pointer for every instance so that lookup, update,
cascading delete and reparenting are direct. Callers that want persistent
semantics use update_block/delete_block/move_block, which edit a deep copy and
return the new top-level list.
"""

from __future__ import annotations

import copy
from typing import Callable

from .blocks import (
    CONTAINER_KINDS,
    EXPRESSION_CATEGORIES,
    BlockInstance,
    ExpressionValue,
    LiteralValue,
    SlotValue,
)
from .catalog import BlockCatalog, default_catalog


class BlockTreeError(Exception):
    """Malformed tree or invalid editing request."""

    def __init__(self, msg: str, block_id: str = "") -> None:
        self.msg: str = msg
        self.block_id: str = block_id
        super().__init__(msg)


# ---------------------------------------------------------------------------
# Invariant checks
# ---------------------------------------------------------------------------


def check_tree(blocks: list[BlockInstance], catalog: BlockCatalog | None = None) -> list[str]:
    """Report every violated tree invariant. Empty list means well-formed."""
    if catalog is None:
        catalog = default_catalog()
    problems: list[str] = []
    seen: set[str] = set()
    for block in blocks:
        _check_block(block, catalog, seen, problems, nested=False)
    return problems


def _check_block(
    block: BlockInstance,
    catalog: BlockCatalog,
    seen: set[str],
    problems: list[str],
    nested: bool,
) -> None:
    if block.id in seen:
        problems.append("duplicate block id '" + block.id + "'")
    seen.add(block.id)
    definition = catalog.get(block.kind)
    if definition is None:
        problems.append("unknown block kind '" + block.kind + "' (" + block.id + ")")
    elif block.category != definition.category:
        problems.append(
            "block " + block.id + " has category '" + block.category
            + "', expected '" + definition.category + "'"
        )
    if nested and block.category not in EXPRESSION_CATEGORIES:
        problems.append("block " + block.id + " (" + block.kind + ") cannot be nested in a slot")
    if block.children and block.kind not in CONTAINER_KINDS:
        problems.append("block " + block.id + " (" + block.kind + ") cannot have children")
    for child in block.children:
        _check_block(child, catalog, seen, problems, nested=False)
    for value in block.slots.values():
        if isinstance(value, ExpressionValue):
            _check_block(value.block, catalog, seen, problems, nested=True)


# ---------------------------------------------------------------------------
# Arena
# ---------------------------------------------------------------------------


class BlockTree:
    """Mutable block tree with O(1) lookup by id.

    Instances stay linked through `children` and `slots` as usual; the arena
    only indexes them. Every mutation keeps both views consistent.
    """

    def __init__(
        self, blocks: list[BlockInstance] | None = None, catalog: BlockCatalog | None = None
    ) -> None:
        self.catalog: BlockCatalog = catalog if catalog is not None else default_catalog()
        self._roots: list[str] = []
        self._nodes: dict[str, BlockInstance] = {}
        # id -> (parent id, slot name); slot name is None for children
        self._parents: dict[str, tuple[str | None, str | None]] = {}
        for block in blocks or []:
            self.insert(block)

    def __contains__(self, block_id: object) -> bool:
        return block_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def roots(self) -> list[BlockInstance]:
        return [self._nodes[i] for i in self._roots]

    def get(self, block_id: str) -> BlockInstance:
        block = self._nodes.get(block_id)
        if block is None:
            raise BlockTreeError("no block with id '" + block_id + "'", block_id)
        return block

    def parent_of(self, block_id: str) -> tuple[BlockInstance | None, str | None]:
        """Owning block (None at top level) and the slot it sits in (None for children)."""
        self.get(block_id)
        parent_id, slot = self._parents[block_id]
        if parent_id is None:
            return (None, None)
        return (self._nodes[parent_id], slot)

    def create(self, kind: str, parent_id: str | None = None, index: int | None = None) -> BlockInstance:
        """Drop a new block of `kind` from the catalog into the tree."""
        block = self.catalog.instantiate(kind, self._fresh_id(kind))
        self.insert(block, parent_id, index)
        return block

    def insert(
        self, block: BlockInstance, parent_id: str | None = None, index: int | None = None
    ) -> None:
        """Insert a statement at top level or into a container's children."""
        self._check_new(block, nested=False)
        if parent_id is None:
            siblings = self._roots
        else:
            parent = self.get(parent_id)
            if parent.kind not in CONTAINER_KINDS:
                raise BlockTreeError(
                    "block " + parent_id + " (" + parent.kind + ") cannot have children", parent_id
                )
            siblings = None
        self._register(block, parent_id, None)
        if siblings is not None:
            _insert_at(siblings, block.id, index)
        else:
            parent = self._nodes[parent_id]
            pos = len(parent.children) if index is None else index
            parent.children.insert(pos, block)

    def place_in_slot(self, parent_id: str, slot: str, block: BlockInstance) -> None:
        """Put an expression block into a value or condition slot, replacing its contents."""
        parent = self.get(parent_id)
        self._check_slot(parent, slot)
        self._check_new(block, nested=True)
        self._clear_slot(parent, slot)
        self._register(block, parent_id, slot)
        parent.slots[slot] = ExpressionValue(block)

    def set_slot(self, block_id: str, slot: str, value: SlotValue | str | None) -> None:
        """Set a slot to literal text, a nested expression, or clear it with None."""
        if isinstance(value, ExpressionValue):
            self.place_in_slot(block_id, slot, value.block)
            return
        block = self.get(block_id)
        self._check_slot(block, slot)
        self._clear_slot(block, slot)
        if isinstance(value, str):
            block.slots[slot] = LiteralValue(value)
        elif isinstance(value, LiteralValue):
            block.slots[slot] = value

    def rename(self, block_id: str, name: str) -> None:
        self.get(block_id).name = name

    def remove(self, block_id: str) -> list[str]:
        """Delete a block and everything it owns. Returns the removed ids."""
        block = self.get(block_id)
        self._detach(block_id)
        removed: list[str] = []
        self._unregister(block, removed)
        return removed

    def move(
        self,
        block_id: str,
        parent_id: str | None = None,
        index: int | None = None,
        slot: str | None = None,
    ) -> None:
        """Reparent a block: to top level, into a container's children, or into a slot."""
        block = self.get(block_id)
        if parent_id is not None:
            target = self.get(parent_id)
            if parent_id == block_id or self._is_ancestor(block_id, parent_id):
                raise BlockTreeError("cannot move block " + block_id + " into itself", block_id)
            if slot is not None:
                self._check_slot(target, slot)
                if block.category not in EXPRESSION_CATEGORIES:
                    raise BlockTreeError(
                        "block " + block_id + " (" + block.kind + ") cannot be nested in a slot",
                        block_id,
                    )
            elif target.kind not in CONTAINER_KINDS:
                raise BlockTreeError(
                    "block " + parent_id + " (" + target.kind + ") cannot have children", parent_id
                )
        elif slot is not None:
            raise BlockTreeError("a slot target needs a parent block", block_id)
        self._detach(block_id)
        if parent_id is None:
            self._parents[block_id] = (None, None)
            _insert_at(self._roots, block_id, index)
        elif slot is not None:
            target = self._nodes[parent_id]
            self._clear_slot(target, slot)
            self._parents[block_id] = (parent_id, slot)
            target.slots[slot] = ExpressionValue(block)
        else:
            target = self._nodes[parent_id]
            self._parents[block_id] = (parent_id, None)
            pos = len(target.children) if index is None else index
            target.children.insert(pos, block)

    # --- internals ---

    def _fresh_id(self, kind: str) -> str:
        block_id = self.catalog.new_id(kind)
        while block_id in self._nodes:
            block_id = self.catalog.new_id(kind)
        return block_id

    def _check_new(self, block: BlockInstance, nested: bool) -> None:
        problems: list[str] = []
        seen = set(self._nodes)
        _check_block(block, self.catalog, seen, problems, nested)
        if problems:
            raise BlockTreeError(problems[0], block.id)

    def _check_slot(self, block: BlockInstance, slot: str) -> None:
        definition = self.catalog.get(block.kind)
        spec = definition.slot(slot) if definition is not None else None
        if spec is None or spec.slot_kind == "statement":
            raise BlockTreeError(
                "block " + block.id + " (" + block.kind + ") has no value slot '" + slot + "'",
                block.id,
            )

    def _clear_slot(self, block: BlockInstance, slot: str) -> None:
        old = block.slots.pop(slot, None)
        if isinstance(old, ExpressionValue):
            self._unregister(old.block, [])

    def _register(self, block: BlockInstance, parent_id: str | None, slot: str | None) -> None:
        self._nodes[block.id] = block
        self._parents[block.id] = (parent_id, slot)
        for child in block.children:
            self._register(child, block.id, None)
        for name, value in block.slots.items():
            if isinstance(value, ExpressionValue):
                self._register(value.block, block.id, name)

    def _unregister(self, block: BlockInstance, removed: list[str]) -> None:
        removed.append(block.id)
        del self._nodes[block.id]
        del self._parents[block.id]
        for child in block.children:
            self._unregister(child, removed)
        for nested in block.nested():
            self._unregister(nested, removed)

    def _detach(self, block_id: str) -> None:
        parent_id, slot = self._parents[block_id]
        if parent_id is None:
            self._roots.remove(block_id)
            return
        parent = self._nodes[parent_id]
        if slot is not None:
            del parent.slots[slot]
            return
        for i, child in enumerate(parent.children):
            if child.id == block_id:
                del parent.children[i]
                return

    def _is_ancestor(self, ancestor_id: str, block_id: str) -> bool:
        current: str | None = self._parents[block_id][0]
        while current is not None:
            if current == ancestor_id:
                return True
            current = self._parents[current][0]
        return False


def _insert_at(ids: list[str], block_id: str, index: int | None) -> None:
    if index is None:
        ids.append(block_id)
    else:
        ids.insert(index, block_id)


# ---------------------------------------------------------------------------
# Persistent operations
# ---------------------------------------------------------------------------


def update_block(
    blocks: list[BlockInstance],
    block_id: str,
    update: Callable[[BlockTree, BlockInstance], None],
    catalog: BlockCatalog | None = None,
) -> list[BlockInstance]:
    """Apply `update(tree, block)` to a copy of the tree and return the new top level."""
    tree = BlockTree(copy.deepcopy(blocks), catalog)
    update(tree, tree.get(block_id))
    return tree.roots()


def delete_block(
    blocks: list[BlockInstance], block_id: str, catalog: BlockCatalog | None = None
) -> list[BlockInstance]:
    """Return a copy of the tree without `block_id` and everything nested in it."""
    tree = BlockTree(copy.deepcopy(blocks), catalog)
    tree.remove(block_id)
    return tree.roots()


def move_block(
    blocks: list[BlockInstance],
    block_id: str,
    parent_id: str | None = None,
    index: int | None = None,
    slot: str | None = None,
    catalog: BlockCatalog | None = None,
) -> list[BlockInstance]:
    """Return a copy of the tree with `block_id` reparented."""
    tree = BlockTree(copy.deepcopy(blocks), catalog)
    tree.move(block_id, parent_id, index, slot)
    return tree.roots()
