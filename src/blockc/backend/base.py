"""Base backend for block-tree code generators (C++, Python).

Walks the block tree and dispatches on block kind. Subclasses override hooks
for declarations, I/O, control flow headers and comments.

Top-level blocks are emitted one after another into `lines`; the line a
top-level block starts on is recorded in `error_lines` when the validator
reported an error inside it.
"""

from __future__ import annotations

from ..blocks import (
    ARITHMETIC_KINDS,
    COMPARISON_KINDS,
    BlockInstance,
    ExpressionValue,
    LiteralValue,
    SlotValue,
    VarType,
    is_blank,
)
from ..frontend.type_inference import BOOL_LITERALS, build_variable_type_map, is_quoted
from ..frontend.validate import variable_error
from .util import (
    BINARY_OPS,
    DEFAULT_COMMENT,
    DEFAULT_FOR_LIMIT,
    DEFAULT_TARGET,
    one_line,
    quote_string,
)


class BlockBackend:
    """Base class for block-tree code generators."""

    indent_unit: str = "    "
    true_literal: str = "true"
    false_literal: str = "false"

    def __init__(self) -> None:
        self.indent = 0
        self.lines: list[str] = []
        self.error_lines: list[int] = []
        self.error_roots: set[str] = set()
        self.variable_types: dict[str, VarType] = {}

    def emit(self, blocks: list[BlockInstance], error_roots: set[str] | None = None) -> str:
        """Emit source text for a program. Fills `error_lines` as a side result."""
        self.indent = 0
        self.lines = []
        self.error_lines = []
        self.error_roots = set(error_roots) if error_roots else set()
        self.variable_types = build_variable_type_map(blocks)
        self._reset()
        if not blocks:
            return self._empty_program()
        self._emit_prologue(blocks)
        for block in blocks:
            start = len(self.lines) + 1
            self._emit_block(block)
            if block.id in self.error_roots:
                self.error_lines.append(start)
        self._emit_epilogue()
        return "\n".join(self.lines)

    def _line(self, text: str = "") -> None:
        if text:
            self.lines.append(self.indent_unit * self.indent + text)
        else:
            self.lines.append("")

    # --- Hooks for subclasses ---

    def _reset(self) -> None:
        """Clear per-program state before emitting."""

    def _empty_program(self) -> str:
        """Placeholder text for a program with no blocks."""
        raise NotImplementedError

    def _emit_prologue(self, blocks: list[BlockInstance]) -> None:
        """Emit headers and open the program skeleton, if any."""
        raise NotImplementedError

    def _emit_epilogue(self) -> None:
        """Close the program skeleton, if any."""
        raise NotImplementedError

    def _comment(self, text: str) -> str:
        """Return a whole-line comment."""
        raise NotImplementedError

    def _nested_error(self, text: str) -> str:
        """Stand-in text for a nested expression that cannot be rendered."""
        raise NotImplementedError

    def _var_decl(self, kind: str, name: str, value: str) -> None:
        raise NotImplementedError

    def _print(self, value: str) -> None:
        raise NotImplementedError

    def _input(self, target: str, prompt: str) -> None:
        raise NotImplementedError

    def _assign(self, target: str, value: str) -> None:
        raise NotImplementedError

    def _temp_assign(self, expr: str) -> None:
        """Emit an arithmetic expression used as a statement."""
        raise NotImplementedError

    def _expr_stmt(self, expr: str) -> None:
        """Emit a comparison used as a statement (never terminated)."""
        self._line(expr)

    def _open_block(self, keyword: str, cond: str) -> None:
        """Emit the header of an if/while."""
        raise NotImplementedError

    def _open_for(self, limit: str) -> None:
        raise NotImplementedError

    def _close_block(self) -> None:
        raise NotImplementedError

    def _empty_body(self) -> None:
        raise NotImplementedError

    def _default_value(self, kind: str) -> str:
        """Default literal of a declaration with a blank value."""
        raise NotImplementedError

    # --- Statements ---

    def _emit_block(self, block: BlockInstance) -> None:
        match block.kind:
            case "int" | "string" | "bool":
                self._emit_declaration(block)
            case "print":
                self._print(self._value(block.slot("value"), '""'))
            case "input":
                target = block.slot_text("variable") or DEFAULT_TARGET
                self._input(target, self._string_value(block.slot("prompt")))
            case "set":
                target = block.slot_text("variable") or DEFAULT_TARGET
                self._assign(target, self._value(block.slot("value"), "0"))
            case "if" | "while":
                cond = self._value(block.slot("condition"), self.true_literal)
                self._open_block(block.kind, cond)
                self._emit_body(block.children)
            case "for":
                self._open_for(self._value(block.slot("limit"), DEFAULT_FOR_LIMIT))
                self._emit_body(block.children)
            case kind if kind in ARITHMETIC_KINDS:
                if self._missing_operands(block):
                    self._line(self._comment(_operands_error(block)))
                else:
                    self._temp_assign(self._expr(block))
            case kind if kind in COMPARISON_KINDS:
                self._expr_stmt(self._expr(block))
            case "comment":
                text = block.slot_text("text") or DEFAULT_COMMENT
                self._line(self._comment(text))
            case kind:
                self._line(self._comment("Unknown block type: " + kind))

    def _emit_declaration(self, block: BlockInstance) -> None:
        error = variable_error(block)
        if error is not None:
            self._line(self._comment("Error: " + block.kind + " variable " + error))
            return
        value = block.slot("value")
        if is_blank(value):
            text = self._default_value(block.kind)
        elif block.kind == "string":
            text = self._string_value(value)
        else:
            text = self._value(value, self._default_value(block.kind))
        self._var_decl(block.kind, block.name.strip(), text)

    def _emit_body(self, body: list[BlockInstance]) -> None:
        self.indent += 1
        self._enter_scope()
        if not body:
            self._empty_body()
        for child in body:
            self._emit_block(child)
        self._exit_scope()
        self.indent -= 1
        self._close_block()

    def _enter_scope(self) -> None:
        pass

    def _exit_scope(self) -> None:
        pass

    # --- Expressions ---

    def _expr(self, block: BlockInstance) -> str:
        """Render an expression block without statement punctuation."""
        op = BINARY_OPS.get(block.kind)
        if op is None:
            return self._nested_error("Unknown block type: " + block.kind)
        if block.kind in ARITHMETIC_KINDS and self._missing_operands(block):
            return self._nested_error(_operands_error(block))
        left = self._operand(block.slot("left"))
        right = self._operand(block.slot("right"))
        return left + " " + op + " " + right

    def _operand(self, value: SlotValue | None) -> str:
        if isinstance(value, ExpressionValue):
            return "(" + self._expr(value.block) + ")"
        return self._value(value, "0")

    def _value(self, value: SlotValue | None, default: str) -> str:
        match value:
            case ExpressionValue(block=block):
                return self._expr(block)
            case LiteralValue(text=text) if text.strip():
                return self._literal(one_line(text.strip()))
            case _:
                return default

    def _literal(self, text: str) -> str:
        """Respell bool and string literals for the target; everything else passes through."""
        if text in self.variable_types:
            return text
        if text in BOOL_LITERALS:
            return self.true_literal if text.lower() == "true" else self.false_literal
        if is_quoted(text):
            return self._string_literal(text)
        return text

    def _string_literal(self, text: str) -> str:
        """Spelling of a quoted string literal (single or double quotes) in the target."""
        return text

    def _string_value(self, value: SlotValue | None) -> str:
        if isinstance(value, LiteralValue):
            text = value.text.strip()
            if not is_quoted(text) and text not in self.variable_types:
                return quote_string(text)
        return self._value(value, '""')

    def _missing_operands(self, block: BlockInstance) -> bool:
        return is_blank(block.slot("left")) and is_blank(block.slot("right"))


def _operands_error(block: BlockInstance) -> str:
    return "Error: " + block.kind + " block is missing both operands"
