"""
JSON specification failure tests ensuring standards compliance.

Validates that invalid JSON strings raise JSONDecodeError with the reader's
message, error kind and position information.
"""

import sys

import pytest

import easyjson
from easyjson import ErrorKind
from easyjson import ReaderConfig

from .conftest import JsonTestCase


def test_json_spec_failures(json_fail_cases: list[JsonTestCase]) -> None:
    """
    Validates JSON strings that must fail parsing.

    Tests the JSON_checker failure cases to ensure strict standards
    compliance and proper error handling for malformed JSON.
    """
    for case in json_fail_cases:
        if case.skip_reason:
            continue

        with pytest.raises(easyjson.JSONDecodeError) as exc_info:
            easyjson.loads(case.input_data)

        # Ensure error contains position information
        assert exc_info.value.lineno >= 1, case.description
        assert exc_info.value.colno >= 1, case.description


def test_deep_nesting_fails_with_depth_limit(
    json_fail_cases: list[JsonTestCase],
) -> None:
    """
    Validates fail18.json is rejected once a nesting limit is configured.
    """
    (too_deep,) = [
        case for case in json_fail_cases if case.description == "fail18.json"
    ]

    assert easyjson.loads(too_deep.input_data).is_container()

    with pytest.raises(easyjson.JSONDecodeError) as exc_info:
        easyjson.loads(too_deep.input_data, ReaderConfig(max_depth=18))

    assert exc_info.value.msg == "Maximum nesting depth exceeded"
    assert exc_info.value.colno == 19


def test_module_not_serializable() -> None:
    """
    Validates modules raise proper TypeError during encoding.
    """
    with pytest.raises(
        TypeError, match=r"Object of type module is not a JSON value"
    ):
        easyjson.dumps(sys)


def test_nested_non_serializable_rejected() -> None:
    """
    Validates unsupported objects nested in lists and dicts are rejected.
    """
    with pytest.raises(TypeError):
        easyjson.dumps([1, [2, 3, sys]])

    with pytest.raises(TypeError):
        easyjson.dumps((1, (2, 3, sys)))

    with pytest.raises(TypeError):
        easyjson.dumps({"a": {"b": sys}})


@pytest.mark.parametrize(
    "input_data,expected_msg,expected_col",
    [
        ("", "Unexpected end of input", 1),
        ("[", "Unexpected end of input", 2),
        ("[42", "Unexpected end of input", 4),
        ("[42,", "Unexpected end of input", 5),
        ('["', "String token abruptly ended", 3),
        ('["spam', "String token abruptly ended", 7),
        ('["spam"', "Unexpected end of input", 8),
        ("{", "Unexpected end of input", 2),
        ('{"', "String token abruptly ended", 3),
        ('{"spam"', "Unexpected end of input", 8),
        ('{"spam":', "Unexpected end of input", 9),
        ('{"spam":42', "Unexpected end of input", 11),
        ('{"spam":42,', "Unexpected end of input", 12),
        ('"spam', "String token abruptly ended", 6),
        ("[1.", "Number token abruptly ended", 4),
        ("[1e-", "Number token abruptly ended", 5),
        ('["\\u12', "String token abruptly ended", 7),
    ],
)
def test_truncated_input_error_positions(
    input_data: str, expected_msg: str, expected_col: int
) -> None:
    """
    Validates error positioning for truncated JSON inputs.

    Running out of input is reported one column past the last character.
    """
    with pytest.raises(easyjson.JSONDecodeError) as exc_info:
        easyjson.loads(input_data)

    err = exc_info.value
    assert err.msg == expected_msg
    assert err.lineno == 1
    assert err.colno == expected_col


@pytest.mark.parametrize(
    "input_data,expected_msg,expected_col",
    [
        ("[,", "Expecting value", 2),
        ('{"spam":[}', "Mismatched closing bracket", 10),
        ("[42:", "Expecting ',' delimiter", 4),
        ('[42 "spam"', "Expecting ',' delimiter", 5),
        ("[42,]", "Illegal trailing comma before end of array", 5),
        ('{"spam":[42}', "Mismatched closing bracket", 12),
        ('["]', "String token abruptly ended", 4),
        ('["spam":', "Expecting ',' delimiter", 8),
        ('["spam",]', "Illegal trailing comma before end of array", 9),
        ("{:", "Expecting property name enclosed in double quotes", 2),
        ("{,", "Expecting property name enclosed in double quotes", 2),
        ("{42", "Expecting property name enclosed in double quotes", 2),
        ("[{]", "Mismatched closing bracket", 3),
        ('{"spam",', "Expecting ':' delimiter", 8),
        ('{"spam"}', "Expecting ':' delimiter", 8),
        ('[{"spam"]', "Expecting ':' delimiter", 9),
        ('{"spam":}', "Expecting value", 9),
        ('[{"spam":]', "Expecting value", 10),
        ('{"spam":42 "ham"', "Expecting ',' delimiter", 12),
        ('[{"spam":42]', "Mismatched closing bracket", 12),
        ('{"spam":42,}', "Illegal trailing comma before end of object", 12),
        ('{"spam":42 , }', "Illegal trailing comma before end of object", 14),
        ("[123  , ]", "Illegal trailing comma before end of array", 9),
        ('42,"spam"', "Expecting object or array", 1),
        ('"spam",42', "Expecting object or array", 1),
    ],
)
def test_unexpected_data_error_positions(
    input_data: str, expected_msg: str, expected_col: int
) -> None:
    """
    Validates grammar errors point at the start of the offending token.
    """
    with pytest.raises(easyjson.JSONDecodeError) as exc_info:
        easyjson.loads(input_data)

    err = exc_info.value
    assert err.msg == expected_msg
    assert err.lineno == 1
    assert err.colno == expected_col


@pytest.mark.parametrize(
    "input_data,expected_col",
    [
        ("[]]", 3),
        ("{}}", 3),
        ("[],[]", 3),
        ("{},{}", 3),
        ("[]  x", 5),
    ],
)
def test_extra_data_error_positions(input_data: str, expected_col: int) -> None:
    """
    Validates error positioning for extra data after a complete document.
    """
    with pytest.raises(easyjson.JSONDecodeError) as exc_info:
        easyjson.loads(input_data)

    err = exc_info.value
    assert err.msg == "Extra data"
    assert err.kind is ErrorKind.STRUCTURAL
    assert err.lineno == 1
    assert err.colno == expected_col


@pytest.mark.parametrize(
    "input_data,expected_col",
    [
        ('42,"spam"', 3),
        ('"spam",42', 7),
    ],
)
def test_extra_data_after_scalar_root(
    input_data: str, expected_col: int
) -> None:
    """
    Validates scalar documents are complete after their single value.
    """
    with pytest.raises(easyjson.JSONDecodeError) as exc_info:
        easyjson.loads(input_data, ReaderConfig(allow_scalar_root=True))

    assert exc_info.value.msg == "Extra data"
    assert exc_info.value.colno == expected_col


@pytest.mark.parametrize(
    "input_data,expected_msg",
    [
        ("[0x14]", "Unexpected character 'x'"),
        ("[013]", "Poorly formed number"),
        ("[1.e5]", "Poorly formed number"),
        ("[+1]", "Poorly formed number"),
        ("[--1]", "Poorly formed number"),
        ("[0e]", "Poorly formed number"),
        ("[1e999]", "Number out of range"),
        ("[truth]", "Invalid literal 'truth'"),
        ("[nul]", "Invalid literal 'nul'"),
        ('["\\x15"]', "Invalid escape character 'x'"),
        ('["\\u12G4"]', "Invalid hexadecimal digit"),
        ('["tab\there"]', "Invalid control character in string"),
        ("['single']", "Unexpected character \"'\""),
    ],
)
def test_lexical_errors(input_data: str, expected_msg: str) -> None:
    """
    Validates tokenizer failures are reported as LEX errors.
    """
    with pytest.raises(easyjson.JSONDecodeError) as exc_info:
        easyjson.loads(input_data)

    assert exc_info.value.msg == expected_msg
    assert exc_info.value.kind is ErrorKind.LEX


@pytest.mark.parametrize(
    "input_data,expected_line,expected_col",
    [
        ("!", 1, 1),
        (" !", 1, 2),
        ("\n!", 2, 1),
        ("\n  \n\n     !", 4, 6),
        ('[1,\n 2,\n ]', 3, 2),
    ],
)
def test_line_column_calculation(
    input_data: str, expected_line: int, expected_col: int
) -> None:
    """
    Validates accurate line and column number calculation for multi-line JSON.
    """
    with pytest.raises(easyjson.JSONDecodeError) as exc_info:
        easyjson.loads(input_data)

    err = exc_info.value
    assert err.lineno == expected_line
    assert err.colno == expected_col

    # Verify string representation format
    expected_str = f"at line {expected_line}, column {expected_col}"
    assert str(err).endswith(expected_str)
