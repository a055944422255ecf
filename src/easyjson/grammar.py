"""
JSON lexical primitives shared by the streaming reader and writer.

Holds the token and scope vocabularies plus the canonical spellings for
numbers and strings, so both directions agree on the wire format without
depending on each other.
"""

import math
from enum import Enum


class Token(Enum):
    """Lexical token kinds, also reported to print policies."""

    NONE = "none"
    COMMA = "comma"
    CURLY_OPEN = "curly_open"
    CURLY_CLOSE = "curly_close"
    SQUARE_OPEN = "square_open"
    SQUARE_CLOSE = "square_close"
    COLON = "colon"
    STRING = "string"
    NUMBER = "number"
    TRUE = "true"
    FALSE = "false"
    NULL = "null"
    IDENTIFIER = "identifier"


class Scope(Enum):
    """Kinds of container that can be open on a scope stack."""

    ARRAY = "array"
    OBJECT = "object"


WHITESPACE = frozenset(" \t\n\r")
NONZERO_DIGITS = frozenset("123456789")
NUMBER_CHARS = frozenset("0123456789+-.eE")
HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
LITERAL_STARTS = frozenset("tTfFnN")

ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

_NAMED_CONTROLS = {
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
    "\b": "\\b",
    "\f": "\\f",
}

# Characters below this must be escaped inside strings
CONTROL_LIMIT = 0x20


def is_letter(char: str) -> bool:
    """Checks for an ASCII letter; literal scanning stops at anything else."""
    return ("a" <= char <= "z") or ("A" <= char <= "Z")


def format_number(value: float) -> str | None:
    """
    Spells a double the way it appears on the wire.

    Returns None for NaN and infinities, which have no JSON spelling.
    """
    if math.isnan(value) or math.isinf(value):
        return None
    return repr(float(value))


def escape_string(value: str) -> str:
    """Quotes a string, escaping quotes, backslashes and control characters."""
    result = ['"']
    for char in value:
        if char == '"':
            result.append('\\"')
        elif char == "\\":
            result.append("\\\\")
        elif ord(char) < CONTROL_LIMIT:
            named = _NAMED_CONTROLS.get(char)
            result.append(named if named else f"\\u{ord(char):04x}")
        else:
            result.append(char)
    result.append('"')
    return "".join(result)
