"""JSON program format tests."""

import json

import pytest

from blockc.blocks import ExpressionValue, LiteralValue
from blockc.serialize import Program, dump_program, load_program, program_to_dict
from blockc.tree import BlockTreeError


def test_load_object_form():
    program = load_program(
        """
        {"language": "python", "blocks": [
          {"id": "a", "type": "int", "name": "count", "slots": {"value": 10}},
          {"id": "w", "type": "while",
           "slots": {"condition": {"id": "gt", "type": "greater-than",
                                   "slots": {"left": "count", "right": "0"}}},
           "children": [{"id": "p", "type": "print", "slots": {"value": "count"}}]}
        ]}
        """
    )
    assert program.language == "python"
    first, loop = program.blocks
    assert first.category == "variable"
    assert first.slots["value"] == LiteralValue("10")
    condition = loop.slots["condition"]
    assert isinstance(condition, ExpressionValue)
    assert condition.block.kind == "greater-than"
    assert condition.block.category == "conditional"
    assert [c.id for c in loop.children] == ["p"]


def test_load_list_form_and_scalar_slots():
    program = load_program('[{"id": "b", "type": "bool", "name": "ok", "slots": {"value": true}}]')
    assert program.language is None
    assert program.blocks[0].slots["value"] == LiteralValue("true")


def test_null_slot_is_absent():
    program = load_program('[{"id": "p", "type": "print", "slots": {"value": null}}]')
    assert program.blocks[0].slots == {}


def test_missing_ids_are_assigned():
    program = load_program(
        '[{"id": "print-1", "type": "print", "slots": {"value": "1"}}, {"type": "print"}]'
    )
    ids = [b.id for b in program.blocks]
    assert ids[0] == "print-1"
    assert ids[1] and ids[1] != "print-1"


@pytest.mark.parametrize(
    "text,fragment",
    [
        ("{not json", "invalid JSON"),
        ('"hello"', "program must be"),
        ('{"blocks": {}}', "'blocks' must be a list"),
        ('{"language": "rust", "blocks": []}', "unknown language 'rust'"),
        ("[42]", "blocks[0]: block must be an object"),
        ('[{"id": "x"}]', "needs a 'type'"),
        ('[{"id": "x", "type": "print", "slots": ["value"]}]', "'slots' must be an object"),
        ('[{"id": "x", "type": "print", "slots": {"value": [1]}}]', "slot must be text or a block"),
        ('[{"id": "x", "type": "if", "children": {"a": 1}}]', "'children' must be a list"),
        ('[{"id": "x", "type": "teleport"}]', "unknown block kind 'teleport'"),
        ('[{"id": "x", "type": "print"}, {"id": "x", "type": "print"}]', "duplicate block id"),
    ],
)
def test_malformed_programs(text: str, fragment: str):
    with pytest.raises(BlockTreeError) as excinfo:
        load_program(text)
    assert fragment in excinfo.value.msg


def test_dump_round_trips_structure():
    text = json.dumps(
        {
            "language": "cpp",
            "blocks": [
                {
                    "id": "f",
                    "type": "for",
                    "slots": {"limit": "3"},
                    "children": [
                        {
                            "id": "p",
                            "type": "print",
                            "slots": {
                                "value": {
                                    "id": "m",
                                    "type": "multiply",
                                    "slots": {"left": "2", "right": "3"},
                                }
                            },
                        }
                    ],
                }
            ],
        }
    )
    program = load_program(text)
    assert json.loads(dump_program(program)) == json.loads(text)


def test_program_to_dict_omits_empty_fields():
    program = load_program('[{"id": "c", "type": "comment"}]')
    assert program_to_dict(program) == {"blocks": [{"id": "c", "type": "comment"}]}
    assert program_to_dict(Program([], "python")) == {"language": "python", "blocks": []}
