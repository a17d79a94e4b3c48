"""Type inference tests."""

import pytest

from conftest import make_block
from blockc.blocks import ExpressionValue, LiteralValue
from blockc.frontend.type_inference import (
    arithmetic_compatible,
    build_variable_type_map,
    comparison_compatible,
    infer_value_type,
)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("42", "int"),
        ("-7", "int"),
        ("  12  ", "int"),
        ("true", "bool"),
        ("False", "bool"),
        ("TRUE", "unknown"),
        ('"hello"', "string"),
        ("'x'", "string"),
        ("\"mismatched'", "unknown"),
        ("3.5", "unknown"),
        ("", "unknown"),
        ("   ", "unknown"),
        ("someName", "unknown"),
    ],
)
def test_literal_classification(text: str, expected: str):
    assert infer_value_type(LiteralValue(text), {}) == expected


def test_absent_and_nested_are_unknown():
    assert infer_value_type(None, {}) == "unknown"
    nested = ExpressionValue(make_block("add", "a", left="1", right="2"))
    assert infer_value_type(nested, {"a": "int"}) == "unknown"


def test_variable_name_takes_priority():
    types = {"true": "string", "count": "int"}
    assert infer_value_type(LiteralValue("true"), types) == "string"
    assert infer_value_type(LiteralValue(" count "), types) == "int"


def test_variable_map_walks_whole_tree():
    blocks = [
        make_block("int", "a", "count", value="10"),
        make_block(
            "if",
            "i",
            children=[make_block("string", "s", "label", value='"x"')],
            condition=make_block("equals", "eq", left="count", right="1"),
        ),
        make_block("bool", "b", "  ", value="true"),
        make_block("print", "p", value="count"),
    ]
    assert build_variable_type_map(blocks) == {"count": "int", "label": "string"}


def test_variable_map_last_write_wins():
    blocks = [
        make_block("int", "a", "x", value="1"),
        make_block("string", "b", "x", value='"one"'),
    ]
    assert build_variable_type_map(blocks) == {"x": "string"}


def test_declared_variable_referenced_in_print_is_int():
    blocks = [make_block("int", "a", "count", value="10"), make_block("print", "p", value="count")]
    types = build_variable_type_map(blocks)
    assert infer_value_type(blocks[1].slot("value"), types) == "int"


def test_compatibility_rules():
    assert arithmetic_compatible("int", "int")
    assert not arithmetic_compatible("int", "unknown")
    assert not arithmetic_compatible("string", "string")
    assert comparison_compatible("string", "string")
    assert comparison_compatible("int", "int")
    assert not comparison_compatible("int", "bool")
    assert not comparison_compatible("unknown", "unknown")
