"""
Pull-based JSON reader.

The reader turns a character stream into notations, one per call to
`read_next`. It keeps a scope stack of the containers currently open so it
can check the grammar as it goes, and tracks line and column numbers for its
diagnostics. Malformed input never raises: the reader reports an ERROR
notation and stays in that state for the rest of the session.
"""

import io
import logging
import math
from collections.abc import Iterator
from enum import Enum
from types import TracebackType
from typing import IO

from .config import DEFAULT_READER_CONFIG
from .config import ReaderConfig
from .errors import Diagnostic
from .errors import ErrorKind
from .grammar import CONTROL_LIMIT
from .grammar import ESCAPES
from .grammar import HEX_DIGITS
from .grammar import LITERAL_STARTS
from .grammar import NONZERO_DIGITS
from .grammar import NUMBER_CHARS
from .grammar import WHITESPACE
from .grammar import Scope
from .grammar import Token
from .grammar import is_letter

logger = logging.getLogger(__name__)


class Notation(Enum):
    """Parse events produced by the reader."""

    OBJECT_START = "object_start"
    OBJECT_END = "object_end"
    ARRAY_START = "array_start"
    ARRAY_END = "array_end"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    ERROR = "error"


class _NumberState(Enum):
    """States of the number tokenizer."""

    START = "start"
    MINUS = "minus"
    ZERO = "zero"
    INTEGER = "integer"
    DOT = "dot"
    FRACTION = "fraction"
    EXPONENT = "exponent"
    EXPONENT_SIGN = "exponent_sign"
    EXPONENT_DIGITS = "exponent_digits"


# Transitions keyed by (state, character class). Classes: "0", "1" for any
# non-zero digit, "e" for either exponent marker, or the character itself.
_NUMBER_TRANSITIONS = {
    (_NumberState.START, "-"): _NumberState.MINUS,
    (_NumberState.START, "0"): _NumberState.ZERO,
    (_NumberState.START, "1"): _NumberState.INTEGER,
    (_NumberState.MINUS, "0"): _NumberState.ZERO,
    (_NumberState.MINUS, "1"): _NumberState.INTEGER,
    (_NumberState.ZERO, "."): _NumberState.DOT,
    (_NumberState.ZERO, "e"): _NumberState.EXPONENT,
    (_NumberState.INTEGER, "0"): _NumberState.INTEGER,
    (_NumberState.INTEGER, "1"): _NumberState.INTEGER,
    (_NumberState.INTEGER, "."): _NumberState.DOT,
    (_NumberState.INTEGER, "e"): _NumberState.EXPONENT,
    (_NumberState.DOT, "0"): _NumberState.FRACTION,
    (_NumberState.DOT, "1"): _NumberState.FRACTION,
    (_NumberState.FRACTION, "0"): _NumberState.FRACTION,
    (_NumberState.FRACTION, "1"): _NumberState.FRACTION,
    (_NumberState.FRACTION, "e"): _NumberState.EXPONENT,
    (_NumberState.EXPONENT, "+"): _NumberState.EXPONENT_SIGN,
    (_NumberState.EXPONENT, "-"): _NumberState.EXPONENT_SIGN,
    (_NumberState.EXPONENT, "0"): _NumberState.EXPONENT_DIGITS,
    (_NumberState.EXPONENT, "1"): _NumberState.EXPONENT_DIGITS,
    (_NumberState.EXPONENT_SIGN, "0"): _NumberState.EXPONENT_DIGITS,
    (_NumberState.EXPONENT_SIGN, "1"): _NumberState.EXPONENT_DIGITS,
    (_NumberState.EXPONENT_DIGITS, "0"): _NumberState.EXPONENT_DIGITS,
    (_NumberState.EXPONENT_DIGITS, "1"): _NumberState.EXPONENT_DIGITS,
}

_ACCEPTING_NUMBER_STATES = frozenset(
    {
        _NumberState.ZERO,
        _NumberState.INTEGER,
        _NumberState.FRACTION,
        _NumberState.EXPONENT_DIGITS,
    }
)

_PUNCTUATION = {
    "{": Token.CURLY_OPEN,
    "}": Token.CURLY_CLOSE,
    "[": Token.SQUARE_OPEN,
    "]": Token.SQUARE_CLOSE,
    ":": Token.COLON,
    ",": Token.COMMA,
}

_TOKEN_NOTATIONS = {
    Token.CURLY_OPEN: Notation.OBJECT_START,
    Token.CURLY_CLOSE: Notation.OBJECT_END,
    Token.SQUARE_OPEN: Notation.ARRAY_START,
    Token.SQUARE_CLOSE: Notation.ARRAY_END,
    Token.STRING: Notation.STRING,
    Token.NUMBER: Notation.NUMBER,
    Token.TRUE: Notation.BOOLEAN,
    Token.FALSE: Notation.BOOLEAN,
    Token.NULL: Notation.NULL,
}

_OPENERS = {Token.CURLY_OPEN: Scope.OBJECT, Token.SQUARE_OPEN: Scope.ARRAY}
_CLOSERS = {Token.CURLY_CLOSE: Scope.OBJECT, Token.SQUARE_CLOSE: Scope.ARRAY}

_VALUE_TOKENS = frozenset(
    {
        Token.CURLY_OPEN,
        Token.SQUARE_OPEN,
        Token.STRING,
        Token.NUMBER,
        Token.TRUE,
        Token.FALSE,
        Token.NULL,
    }
)

_START_NOTATIONS = frozenset({Notation.OBJECT_START, Notation.ARRAY_START})
_END_NOTATIONS = frozenset({Notation.OBJECT_END, Notation.ARRAY_END})


def _number_class(char: str) -> str:
    if char == "0":
        return "0"
    if char in NONZERO_DIGITS:
        return "1"
    if char in "eE":
        return "e"
    return char


class Reader:
    """
    Streams notations out of a character source.

    Typical use drives `read_next` until it returns False:

        with Reader(text) as reader:
            for notation in reader:
                ...

    The reader owns its source and closes it on `close`.
    """

    def __init__(
        self, source: IO[str] | str, config: ReaderConfig | None = None
    ) -> None:
        if isinstance(source, str):
            source = io.StringIO(source)
        self._stream: IO[str] | None = source
        self._config = config if config is not None else DEFAULT_READER_CONFIG

        self._buffer = ""
        self._pos = 0
        self._exhausted = False
        self._line = 1
        self._column = 0
        self._previous_position = (1, 0)
        self._token_position = (1, 1)

        self._scopes: list[Scope] = []
        self._token = Token.NONE
        self._started = False
        self._error: Diagnostic | None = None

        self._identifier: str | None = None
        self._string_value = ""
        self._number_value = 0.0
        self._boolean_value = False

    @property
    def config(self) -> ReaderConfig:
        return self._config

    @property
    def identifier(self) -> str | None:
        """Key of the member just read when inside an object."""
        return self._identifier

    @property
    def string_value(self) -> str:
        """Text of the last string, or the spelling of the last number."""
        return self._string_value

    @property
    def number_value(self) -> float:
        return self._number_value

    @property
    def boolean_value(self) -> bool:
        return self._boolean_value

    @property
    def error(self) -> Diagnostic | None:
        return self._error

    @property
    def error_message(self) -> str | None:
        return self._error.message if self._error is not None else None

    @property
    def line(self) -> int:
        return self._line

    @property
    def column(self) -> int:
        return self._column

    @property
    def depth(self) -> int:
        """Number of containers currently open."""
        return len(self._scopes)

    def read_next(self) -> tuple[bool, Notation | None]:
        """
        Advances to the next notation.

        Returns:
            (True, notation) when a notation was produced, including the
            first ERROR; (False, ERROR) on every call after an error;
            (False, None) once a complete document has been consumed.
        """
        if self._error is not None:
            return False, Notation.ERROR

        if self._stream is None:
            self._fail(ErrorKind.STREAM, "Reader is closed")
            return True, Notation.ERROR

        at_end = self._at_end()
        if self._error is not None:
            return True, Notation.ERROR

        finished = self._started and not self._scopes
        if at_end and not finished:
            self._fail(
                ErrorKind.STRUCTURAL, "Unexpected end of input", ahead=True
            )
            return True, Notation.ERROR
        if finished and not at_end:
            self._fail(ErrorKind.STRUCTURAL, "Extra data", ahead=True)
            return True, Notation.ERROR
        if at_end:
            return False, None

        self._started = True
        self._identifier = None

        while True:
            ok = self._advance()
            if not ok or self._token is not Token.NONE:
                break

        notation = _TOKEN_NOTATIONS.get(self._token)
        if not ok or notation is None:
            if self._error is None:
                self._unexpected("Unexpected token")
            return True, Notation.ERROR

        if not self._scopes:
            self._skip_whitespace()

        return True, notation

    def skip_object(self) -> bool:
        """Consumes notations up to the end of the current object."""
        return self._skip_until(Notation.OBJECT_END)

    def skip_array(self) -> bool:
        """Consumes notations up to the end of the current array."""
        return self._skip_until(Notation.ARRAY_END)

    def close(self) -> None:
        """Closes the underlying source; safe to call more than once."""
        if self._stream is None:
            return
        stream, self._stream = self._stream, None
        try:
            stream.close()
        except OSError as exc:
            logger.warning("Failed to close JSON source: %s", exc)

    def __enter__(self) -> "Reader":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def __iter__(self) -> Iterator[Notation]:
        while True:
            ok, notation = self.read_next()
            if not ok or notation is None:
                return
            yield notation

    def _skip_until(self, end: Notation) -> bool:
        depth = 0
        while True:
            ok, notation = self.read_next()
            if notation is Notation.ERROR:
                return False
            if not ok:
                return True
            if depth == 0 and notation is end:
                return True
            if notation in _START_NOTATIONS:
                depth += 1
            elif notation in _END_NOTATIONS:
                depth -= 1

    # Grammar

    def _advance(self) -> bool:
        if not self._scopes:
            return self._read_root()
        if self._scopes[-1] is Scope.ARRAY:
            return self._read_array_member()
        return self._read_object_member()

    def _read_root(self) -> bool:
        if not self._next_token():
            return False
        if self._token not in _OPENERS and not self._config.allow_scalar_root:
            return self._unexpected("Expecting object or array")
        return self._expect_value()

    def _read_array_member(self) -> bool:
        comma_required = self._token is not Token.SQUARE_OPEN

        if not self._next_token():
            return False
        if self._token in _CLOSERS:
            return self._close_scope()

        if comma_required:
            if self._token is not Token.COMMA:
                return self._unexpected("Expecting ',' delimiter")
            if not self._next_token():
                return False
            if self._token in _CLOSERS:
                return self._unexpected(
                    "Illegal trailing comma before end of array"
                )

        return self._expect_value()

    def _read_object_member(self) -> bool:
        comma_required = self._token is not Token.CURLY_OPEN

        if not self._next_token():
            return False
        if self._token in _CLOSERS:
            return self._close_scope()

        if comma_required:
            if self._token is not Token.COMMA:
                return self._unexpected("Expecting ',' delimiter")
            if not self._next_token():
                return False
            if self._token in _CLOSERS:
                return self._unexpected(
                    "Illegal trailing comma before end of object"
                )

        if self._token is not Token.STRING:
            return self._unexpected(
                "Expecting property name enclosed in double quotes"
            )
        identifier = self._string_value

        if not self._next_token():
            return False
        if self._token is not Token.COLON:
            return self._unexpected("Expecting ':' delimiter")

        if not self._next_token() or not self._expect_value():
            return False

        self._identifier = identifier
        return True

    def _expect_value(self) -> bool:
        """Checks the current token starts a value and opens its scope."""
        if self._token not in _VALUE_TOKENS:
            return self._unexpected("Expecting value")

        scope = _OPENERS.get(self._token)
        if scope is None:
            return True

        limit = self._config.max_depth
        if limit is not None and len(self._scopes) >= limit:
            return self._unexpected("Maximum nesting depth exceeded")
        self._scopes.append(scope)
        return True

    def _close_scope(self) -> bool:
        if self._scopes[-1] is not _CLOSERS[self._token]:
            return self._unexpected("Mismatched closing bracket")
        self._scopes.pop()
        return True

    # Tokenizer

    def _next_token(self) -> bool:
        self._token = Token.NONE
        self._skip_whitespace()

        char = self._read()
        if not char:
            if self._error is not None:
                return False
            return self._fail(
                ErrorKind.STRUCTURAL, "Unexpected end of input", ahead=True
            )

        self._token_position = (self._line, self._column)
        punctuation = _PUNCTUATION.get(char)
        if punctuation is not None:
            self._token = punctuation
            return True
        if char == '"':
            return self._scan_string()
        if char in NUMBER_CHARS:
            return self._scan_number(char)
        if char in LITERAL_STARTS:
            return self._scan_literal(char)

        return self._fail(ErrorKind.LEX, f"Unexpected character {char!r}")

    def _scan_string(self) -> bool:
        chars: list[str] = []
        has_surrogates = False

        while True:
            char = self._read()
            if not char:
                return self._string_ended()
            if char == '"':
                break

            if char == "\\":
                escape = self._read()
                if not escape:
                    return self._string_ended()
                if escape == "u":
                    code = self._scan_hex_escape()
                    if code is None:
                        return False
                    has_surrogates = has_surrogates or 0xD800 <= code <= 0xDFFF
                    chars.append(chr(code))
                    continue
                translated = ESCAPES.get(escape)
                if translated is None:
                    return self._fail(
                        ErrorKind.LEX, f"Invalid escape character {escape!r}"
                    )
                chars.append(translated)
            elif self._config.strict and ord(char) < CONTROL_LIMIT:
                return self._fail(
                    ErrorKind.LEX, "Invalid control character in string"
                )
            else:
                chars.append(char)

        text = "".join(chars)
        if has_surrogates:
            # Joins escaped surrogate pairs; lone halves are kept as-is
            text = text.encode("utf-16-le", "surrogatepass").decode(
                "utf-16-le", "surrogatepass"
            )

        self._string_value = text
        self._token = Token.STRING
        return True

    def _scan_hex_escape(self) -> int | None:
        code = 0
        for _ in range(4):
            char = self._read()
            if not char:
                self._string_ended()
                return None
            if char not in HEX_DIGITS:
                self._fail(ErrorKind.LEX, "Invalid hexadecimal digit")
                return None
            code = code * 16 + int(char, 16)
        return code

    def _string_ended(self) -> bool:
        if self._error is not None:
            return False
        return self._fail(
            ErrorKind.LEX, "String token abruptly ended", ahead=True
        )

    def _scan_number(self, first: str) -> bool:
        state = _NumberState.START
        chars: list[str] = []
        char = first

        while True:
            next_state = _NUMBER_TRANSITIONS.get((state, _number_class(char)))
            if next_state is None:
                return self._fail(ErrorKind.LEX, "Poorly formed number")
            state = next_state
            chars.append(char)

            char = self._read()
            if not char:
                break
            if char not in NUMBER_CHARS:
                self._backtrack()
                break

        if state not in _ACCEPTING_NUMBER_STATES:
            if not char:
                return self._fail(
                    ErrorKind.LEX, "Number token abruptly ended", ahead=True
                )
            return self._fail(ErrorKind.LEX, "Poorly formed number")

        text = "".join(chars)
        number = float(text)
        if math.isinf(number):
            return self._fail(ErrorKind.LEX, "Number out of range")

        self._string_value = text
        self._number_value = number
        self._token = Token.NUMBER
        return True

    def _scan_literal(self, first: str) -> bool:
        letters = [first]
        while True:
            char = self._read()
            if not char:
                break
            if not is_letter(char):
                self._backtrack()
                break
            letters.append(char)

        word = "".join(letters)
        lowered = word.lower()
        if lowered == "true":
            self._boolean_value = True
            self._token = Token.TRUE
        elif lowered == "false":
            self._boolean_value = False
            self._token = Token.FALSE
        elif lowered == "null":
            self._token = Token.NULL
        else:
            return self._fail(ErrorKind.LEX, f"Invalid literal {word!r}")
        return True

    # Character source

    def _read(self) -> str:
        """Consumes one character, or returns "" at the end of input."""
        if self._pos >= len(self._buffer) and not self._fill():
            return ""

        char = self._buffer[self._pos]
        self._pos += 1
        self._previous_position = (self._line, self._column)
        if char == "\n":
            self._line += 1
            self._column = 0
        else:
            self._column += 1
        return char

    def _backtrack(self) -> None:
        """Pushes back the character returned by the last `_read`."""
        self._pos -= 1
        self._line, self._column = self._previous_position

    def _at_end(self) -> bool:
        return self._pos >= len(self._buffer) and not self._fill()

    def _fill(self) -> bool:
        if self._exhausted or self._stream is None:
            return False
        try:
            chunk = self._stream.read(self._config.buffer_size)
        except (OSError, ValueError) as exc:
            self._exhausted = True
            self._fail(ErrorKind.STREAM, f"Failed to read input: {exc}")
            return False

        if not chunk:
            self._exhausted = True
            return False
        self._buffer = chunk
        self._pos = 0
        return True

    def _skip_whitespace(self) -> None:
        while True:
            char = self._read()
            if not char:
                return
            if char not in WHITESPACE:
                self._backtrack()
                return

    def _fail(self, kind: ErrorKind, msg: str, ahead: bool = False) -> bool:
        """
        Records a failure at the current position.

        With `ahead` the error is placed just past the last consumed
        character, which is where input ran out or unexpected data starts.
        """
        column = self._column + 1 if ahead else self._column
        return self._record(Diagnostic(kind, msg, self._line, max(column, 1)))

    def _unexpected(self, msg: str) -> bool:
        """Records a grammar failure at the start of the current token."""
        line, column = self._token_position
        diagnostic = Diagnostic(ErrorKind.STRUCTURAL, msg, line, column)
        return self._record(diagnostic)

    def _record(self, diagnostic: Diagnostic) -> bool:
        """Keeps the first error of the session; later ones are dropped."""
        if self._error is None:
            self._error = diagnostic
            logger.debug("JSON read failed: %s", diagnostic.message)
        return False
