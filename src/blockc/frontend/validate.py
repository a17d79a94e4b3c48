"""Semantic validation of block trees.

Walks each top-level block depth-first (the block, its children, then its
slot-nested expressions) applying structural and type rules. Errors are
returned as data; nothing here raises.

By default only the first error inside each top-level block is reported, so
the result has at most one error per top-level statement. Validator(exhaustive=True)
reports every error instead.
"""

from __future__ import annotations

from ..blocks import (
    ARITHMETIC_KINDS,
    COMPARISON_KINDS,
    BlockInstance,
    LiteralValue,
    VarType,
    is_blank,
)
from .type_inference import (
    arithmetic_compatible,
    build_variable_type_map,
    comparison_compatible,
    infer_value_type,
    is_int_literal,
)

MISSING_NAME_AND_VALUE = "missing name and value"
MISSING_NAME = "missing name"
MISSING_VALUE = "missing value"
PRINT_MISSING_VALUE = "print block is missing a value"
FOR_MISSING_LIMIT = "for loop is missing a limit"
FOR_LIMIT_NOT_INT = "for loop limit must be an integer"


class ValidationError:
    """An error attached to a block.

    block_id is the offending block, root_id the top-level block containing
    it, line_number the 1-based position of that top-level block.
    """

    def __init__(self, block_id: str, message: str, root_id: str = "", line_number: int = 0) -> None:
        self.block_id: str = block_id
        self.message: str = message
        self.root_id: str = root_id if root_id else block_id
        self.line_number: int = line_number

    def __repr__(self) -> str:
        return "error:" + str(self.line_number) + ": [" + self.block_id + "] " + self.message

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidationError):
            return NotImplemented
        return (
            self.block_id == other.block_id
            and self.message == other.message
            and self.root_id == other.root_id
            and self.line_number == other.line_number
        )

    def to_dict(self) -> dict[str, object]:
        return {"blockId": self.block_id, "message": self.message}


class ValidationResult:
    """Result of validating a block tree."""

    def __init__(self) -> None:
        self._errors: list[ValidationError] = []

    def add_error(self, block_id: str, message: str, root_id: str, line_number: int) -> None:
        self._errors.append(ValidationError(block_id, message, root_id, line_number))

    def errors(self) -> list[ValidationError]:
        return self._errors

    def has_errors(self) -> bool:
        return len(self._errors) > 0

    def root_ids(self) -> set[str]:
        """Ids of top-level blocks with an error anywhere in their subtree."""
        return {e.root_id for e in self._errors}

    def messages_for(self, block_id: str) -> list[str]:
        return [e.message for e in self._errors if e.block_id == block_id]


def variable_error(block: BlockInstance) -> str | None:
    """Missing name/value check for int/string/bool declarations."""
    no_name = block.name.strip() == ""
    no_value = is_blank(block.slot("value"))
    if no_name and no_value:
        return MISSING_NAME_AND_VALUE
    if no_name:
        return MISSING_NAME
    if no_value:
        return MISSING_VALUE
    return None


class Validator:
    """Apply structural and type rules to a block tree."""

    def __init__(self, exhaustive: bool = False) -> None:
        self.exhaustive: bool = exhaustive
        self.variable_types: dict[str, VarType] = {}

    def validate(self, blocks: list[BlockInstance]) -> ValidationResult:
        self.variable_types = build_variable_type_map(blocks)
        result = ValidationResult()
        for i, block in enumerate(blocks):
            found: list[tuple[BlockInstance, str]] = []
            self._walk(block, found)
            for offender, message in found:
                result.add_error(offender.id, message, block.id, i + 1)
        return result

    def _walk(self, block: BlockInstance, found: list[tuple[BlockInstance, str]]) -> bool:
        """Collect errors of a subtree. Returns True once walking should stop."""
        message = self.check_block(block)
        if message is not None:
            found.append((block, message))
            if not self.exhaustive:
                return True
        for child in block.children:
            if self._walk(child, found):
                return True
        for nested in block.nested():
            if self._walk(nested, found):
                return True
        return False

    def check_block(self, block: BlockInstance) -> str | None:
        """Rules for a single block, ignoring its descendants."""
        match block.kind:
            case "int" | "string" | "bool":
                return variable_error(block)
            case "print":
                if is_blank(block.slot("value")):
                    return PRINT_MISSING_VALUE
                return None
            case "for":
                return self._check_for_limit(block)
            case "set":
                return self._check_assignment(block)
            case kind if kind in ARITHMETIC_KINDS:
                left = infer_value_type(block.slot("left"), self.variable_types)
                right = infer_value_type(block.slot("right"), self.variable_types)
                if not arithmetic_compatible(left, right):
                    return (
                        "Type mismatch: Cannot perform " + kind + " operation between "
                        + left + " and " + right + ". Both operands must be integers."
                    )
                return None
            case kind if kind in COMPARISON_KINDS:
                left = infer_value_type(block.slot("left"), self.variable_types)
                right = infer_value_type(block.slot("right"), self.variable_types)
                if not comparison_compatible(left, right):
                    return (
                        "Type mismatch: Cannot compare " + left + " with " + right
                        + ". Types must be compatible."
                    )
                return None
            case _:
                return None

    def _check_for_limit(self, block: BlockInstance) -> str | None:
        limit = block.slot("limit")
        if is_blank(limit):
            return FOR_MISSING_LIMIT
        if not isinstance(limit, LiteralValue):
            return None
        text = limit.text.strip()
        # Undeclared names fall through to the literal check
        if text in self.variable_types:
            if self.variable_types[text] != "int":
                return FOR_LIMIT_NOT_INT
            return None
        if not is_int_literal(text):
            return FOR_LIMIT_NOT_INT
        return None

    def _check_assignment(self, block: BlockInstance) -> str | None:
        name = block.slot_text("variable")
        if not name or name not in self.variable_types:
            return None
        declared = self.variable_types[name]
        assigned = infer_value_type(block.slot("value"), self.variable_types)
        if assigned != declared and assigned != "unknown":
            return (
                "Type mismatch: Cannot assign " + assigned + ' to variable "' + name
                + '" of type ' + declared + "."
            )
        return None


def validate_blocks(blocks: list[BlockInstance]) -> list[ValidationError]:
    """One error per top-level block whose subtree has an error, in order."""
    return Validator().validate(blocks).errors()


def has_validation_errors(blocks: list[BlockInstance]) -> bool:
    return Validator().validate(blocks).has_errors()
