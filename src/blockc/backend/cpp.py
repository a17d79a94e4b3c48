"""C++ backend: block tree → C++ program.

The generated statements are wrapped in a fixed skeleton:

    #include <iostream>
    #include <string>        (only when a string variable exists)
    using namespace std;

    int main() {
        ...
        return 0;
    }

Arithmetic statements assign to a temporary declared once per scope.
"""

from __future__ import annotations

from ..blocks import BlockInstance, iter_blocks
from .base import BlockBackend
from .util import TEMP_NAME, one_line, quote_string

EMPTY_PROGRAM = (
    "// Drag blocks to create your program\n"
    "\n"
    "#include <iostream>\n"
    "using namespace std;\n"
    "\n"
    "int main() {\n"
    "    // Your code here\n"
    "    return 0;\n"
    "}"
)

_CPP_TYPES: dict[str, str] = {
    "int": "int",
    "string": "string",
    "bool": "bool",
}


class CppBackend(BlockBackend):
    """Emit C++ code from a block tree."""

    true_literal = "true"
    false_literal = "false"

    def __init__(self) -> None:
        super().__init__()
        self._scopes: list[set[str]] = [set()]

    def _reset(self) -> None:
        self._scopes = [set()]

    def _empty_program(self) -> str:
        return EMPTY_PROGRAM

    def _emit_prologue(self, blocks: list[BlockInstance]) -> None:
        self._line("#include <iostream>")
        if any(b.kind == "string" for b in iter_blocks(blocks)):
            self._line("#include <string>")
        self._line("using namespace std;")
        self._line()
        self._line("int main() {")
        self.indent = 1

    def _emit_epilogue(self) -> None:
        self._line("return 0;")
        self.indent = 0
        self._line("}")

    def _comment(self, text: str) -> str:
        return "// " + one_line(text)

    def _nested_error(self, text: str) -> str:
        return "/* " + one_line(text).replace("*/", "* /") + " */"

    def _string_literal(self, text: str) -> str:
        # Single quotes are char literals in C++
        if text.startswith("'"):
            return quote_string(text[1:-1])
        return text

    def _var_decl(self, kind: str, name: str, value: str) -> None:
        self._line(f"{_CPP_TYPES[kind]} {name} = {value};")

    def _print(self, value: str) -> None:
        self._line(f"cout << {value} << endl;")

    def _input(self, target: str, prompt: str) -> None:
        self._line(f"cin >> {target};")

    def _assign(self, target: str, value: str) -> None:
        self._line(f"{target} = {value};")

    def _temp_assign(self, expr: str) -> None:
        if any(TEMP_NAME in scope for scope in self._scopes):
            self._line(f"{TEMP_NAME} = {expr};")
        else:
            self._scopes[-1].add(TEMP_NAME)
            self._line(f"int {TEMP_NAME} = {expr};")

    def _open_block(self, keyword: str, cond: str) -> None:
        self._line(f"{keyword} ({cond}) {{")

    def _open_for(self, limit: str) -> None:
        self._line(f"for (int i = 0; i < {limit}; i++) {{")

    def _close_block(self) -> None:
        self._line("}")

    def _empty_body(self) -> None:
        self._line("// empty")

    def _enter_scope(self) -> None:
        self._scopes.append(set())

    def _exit_scope(self) -> None:
        self._scopes.pop()

    def _default_value(self, kind: str) -> str:
        if kind == "string":
            return '""'
        if kind == "bool":
            return self.false_literal
        return "0"


def emit_cpp(blocks: list[BlockInstance], error_roots: set[str] | None = None) -> str:
    return CppBackend().emit(blocks, error_roots)
