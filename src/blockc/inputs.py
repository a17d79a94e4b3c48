"""Collect input prompts and assemble standard input for a run."""

from __future__ import annotations

from .backend.util import strip_quotes
from .blocks import BlockInstance, iter_blocks

DEFAULT_PROMPT = "Enter value"


def extract_input_prompts(blocks: list[BlockInstance]) -> list[str]:
    """One prompt per input block, in tree order."""
    prompts: list[str] = []
    for block in iter_blocks(blocks):
        if block.kind == "input":
            prompt = strip_quotes(block.slot_text("prompt"))
            prompts.append(prompt or DEFAULT_PROMPT)
    return prompts


def build_stdin(answers: list[str] | None) -> str | None:
    """Newline-joined answers, or None when there is nothing to send."""
    if not answers:
        return None
    return "\n".join(answers)
