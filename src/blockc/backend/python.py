"""Python backend: block tree → Python script.

Statements are emitted at module level with no wrapping. Bodies use
four-space indentation and `pass` when empty. A nested expression that cannot
be rendered becomes `0`, with its error comment on the line above.
"""

from __future__ import annotations

from ..blocks import BlockInstance
from .base import BlockBackend
from .util import TEMP_NAME, one_line

EMPTY_PROGRAM = "# Drag blocks to create your program\n\n# Your code here"


class PythonBackend(BlockBackend):
    """Emit Python code from a block tree."""

    true_literal = "True"
    false_literal = "False"

    def __init__(self) -> None:
        super().__init__()
        # Flushed as whole-line comments before the next emitted line
        self._pending_comments: list[str] = []

    def _reset(self) -> None:
        self._pending_comments = []

    def _line(self, text: str = "") -> None:
        pending, self._pending_comments = self._pending_comments, []
        for comment in pending:
            super()._line(comment)
        super()._line(text)

    def _empty_program(self) -> str:
        return EMPTY_PROGRAM

    def _emit_prologue(self, blocks: list[BlockInstance]) -> None:
        pass

    def _emit_epilogue(self) -> None:
        pass

    def _comment(self, text: str) -> str:
        return "# " + one_line(text)

    def _nested_error(self, text: str) -> str:
        self._pending_comments.append(self._comment(text))
        return "0"

    def _var_decl(self, kind: str, name: str, value: str) -> None:
        self._line(f"{name} = {value}")

    def _print(self, value: str) -> None:
        self._line(f"print({value})")

    def _input(self, target: str, prompt: str) -> None:
        if self.variable_types.get(target) == "int":
            self._line(f"{target} = int(input({prompt}))")
        else:
            self._line(f"{target} = input({prompt})")

    def _assign(self, target: str, value: str) -> None:
        self._line(f"{target} = {value}")

    def _temp_assign(self, expr: str) -> None:
        self._line(f"{TEMP_NAME} = {expr}")

    def _open_block(self, keyword: str, cond: str) -> None:
        self._line(f"{keyword} {cond}:")

    def _open_for(self, limit: str) -> None:
        self._line(f"for i in range({limit}):")

    def _close_block(self) -> None:
        pass

    def _empty_body(self) -> None:
        self._line("pass")

    def _default_value(self, kind: str) -> str:
        if kind == "string":
            return '""'
        if kind == "bool":
            return self.false_literal
        return "0"


def emit_python(blocks: list[BlockInstance], error_roots: set[str] | None = None) -> str:
    return PythonBackend().emit(blocks, error_roots)
