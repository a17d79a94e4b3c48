"""Pytest configuration for blockc test suite."""

import sys
from pathlib import Path

import pytest

# Add src directory to path for blockc imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from blockc.blocks import BlockInstance, ExpressionValue, LiteralValue  # noqa: E402
from blockc.catalog import default_catalog  # noqa: E402


def parse_tests_file(path: Path) -> list[tuple[str, str, str]]:
    """Parse .tests file into (name, input, expected) tuples."""
    lines = path.read_text().split("\n")
    result: list[tuple[str, str, str]] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("=== "):
            test_name = line[4:].strip()
            i += 1
            input_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                input_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            expected_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                expected_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            test_input = "\n".join(input_lines)
            expected = "\n".join(expected_lines).strip()
            result.append((test_name, test_input, expected))
        else:
            i += 1
    return result


def make_block(
    kind: str,
    block_id: str,
    name: str = "",
    children: list[BlockInstance] | None = None,
    **slots: object,
) -> BlockInstance:
    """Build a block; str slot values become literals, blocks become nested expressions."""
    catalog = default_catalog()
    block = catalog.instantiate(kind, block_id, name) if kind in catalog else BlockInstance(
        block_id, kind, ""
    )
    for slot_name, value in slots.items():
        if isinstance(value, BlockInstance):
            block.slots[slot_name] = ExpressionValue(value)
        else:
            block.slots[slot_name] = LiteralValue(str(value))
    block.children = list(children or [])
    return block


@pytest.fixture
def block():
    """Factory fixture for building blocks inline."""
    return make_block
