"""Code generation entry point: validate, then emit for the selected language.

Generation never fails on a well-formed tree. Invalid blocks still produce
text (a comment in place of broken code) and the lines they start on are
reported in GeneratedCode.error_line_numbers.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .backend import BACKENDS
from .blocks import LANGUAGES, BlockInstance
from .frontend.validate import ValidationError, Validator


@dataclass
class GeneratedCode:
    """Generated source text and the 1-based lines of erroring top-level blocks."""

    source_text: str
    error_line_numbers: list[int] = field(default_factory=list)
    errors: list[ValidationError] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {"sourceText": self.source_text, "errorLineNumbers": list(self.error_line_numbers)}


def generate_code(blocks: list[BlockInstance], language: str) -> GeneratedCode:
    """Render a block tree as source text in `language` ("cpp" or "python")."""
    backend_cls = BACKENDS.get(language)
    if backend_cls is None:
        raise ValueError(
            "unknown language '" + language + "' (expected one of: " + ", ".join(LANGUAGES) + ")"
        )
    result = Validator().validate(blocks)
    backend = backend_cls()
    text = backend.emit(blocks, result.root_ids())
    return GeneratedCode(text, list(backend.error_lines), list(result.errors()))
