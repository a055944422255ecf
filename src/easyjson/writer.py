"""
Push-based JSON writer.

The writer emits the structural characters of a document and leaves every
piece of whitespace to its print policy. It keeps a stack of open containers
and the last token written, which is enough to place commas and to refuse
calls that would produce malformed output. Refused calls are dropped with a
debug log rather than raised.
"""

import io
import logging
import math
from collections.abc import Callable
from types import TracebackType
from typing import IO

from .errors import Diagnostic
from .errors import ErrorKind
from .grammar import Scope
from .grammar import Token
from .grammar import escape_string
from .grammar import format_number
from .policies import PrettyPrintPolicy
from .policies import PrintPolicy
from .policies import WriteChar

logger = logging.getLogger(__name__)

type Scalar = None | bool | int | float | str
type _Hook = Callable[[WriteChar, int, Token], None]

_NO_COMMA_AFTER = frozenset(
    {Token.NONE, Token.CURLY_OPEN, Token.SQUARE_OPEN, Token.IDENTIFIER}
)


class Writer:
    """
    Writes JSON text to a character sink.

    Example:
        with Writer(policy=DensePrintPolicy()) as writer:
            writer.write_object_start()
            writer.write_value(1, "a")
            writer.write_object_end()
            text = writer.getvalue()
    """

    def __init__(
        self,
        sink: IO[str] | None = None,
        policy: PrintPolicy | None = None,
        initial_indent: int = 0,
    ) -> None:
        self._sink: IO[str] | None = sink if sink is not None else io.StringIO()
        self._policy: PrintPolicy = (
            policy if policy is not None else PrettyPrintPolicy()
        )
        self._indent = initial_indent
        self._stack: list[Scope] = []
        self._previous = Token.NONE
        self._error: Diagnostic | None = None
        self._text: str | None = None

    @property
    def policy(self) -> PrintPolicy:
        return self._policy

    @property
    def indent_level(self) -> int:
        return self._indent

    @property
    def depth(self) -> int:
        """Number of containers currently open."""
        return len(self._stack)

    @property
    def error(self) -> Diagnostic | None:
        """First stream failure seen by the writer, if any."""
        return self._error

    @property
    def closed(self) -> bool:
        return self._sink is None

    def getvalue(self) -> str:
        """Returns the text written so far to the default in-memory sink."""
        if self._text is not None:
            return self._text
        if isinstance(self._sink, io.StringIO):
            return self._sink.getvalue()
        raise TypeError("getvalue() requires an in-memory sink")

    def write_object_start(self, identifier: str | None = None) -> None:
        if self._prefix(identifier, self._policy.write_object_start_prefix):
            self._open(Scope.OBJECT, "{", Token.CURLY_OPEN)

    def write_object_end(self) -> None:
        self._close_scope(
            Scope.OBJECT,
            self._policy.write_object_end_prefix,
            "}",
            Token.CURLY_CLOSE,
        )

    def write_array_start(self, identifier: str | None = None) -> None:
        if self._prefix(identifier, self._policy.write_array_start_prefix):
            self._open(Scope.ARRAY, "[", Token.SQUARE_OPEN)

    def write_array_end(self) -> None:
        self._close_scope(
            Scope.ARRAY,
            self._policy.write_array_end_prefix,
            "]",
            Token.SQUARE_CLOSE,
        )

    def write_value(self, value: Scalar, identifier: str | None = None) -> None:
        """
        Writes a scalar, as an object member when `identifier` is given.

        Accepts None, bool, int, float and str. Other types are refused.
        """
        spelled = _spell(value)
        if spelled is None:
            self._ignore(f"unsupported value type {type(value).__name__}")
            return
        text, token = spelled
        if self._prefix(identifier, self._policy.write_value_prefix):
            self._emit(text)
            self._previous = token

    def write_null(self, identifier: str | None = None) -> None:
        self.write_value(None, identifier)

    def write_identifier(self, identifier: str) -> None:
        """Writes a member key on its own; the next bare value completes it."""
        if self._sink is None:
            self._ignore("identifier after close")
        elif not self._can_write_identified(identifier):
            self._ignore(f"identifier {identifier!r} out of place")
        else:
            self._write_identifier(identifier)

    def flush(self) -> None:
        """Flushes the sink without closing it."""
        if self._sink is None:
            return
        try:
            self._sink.flush()
        except (OSError, ValueError) as exc:
            self._record(exc)

    def close(self) -> None:
        """Flushes and closes the sink; safe to call more than once."""
        if self._sink is None:
            return
        self.flush()
        sink, self._sink = self._sink, None
        if isinstance(sink, io.StringIO) and not sink.closed:
            self._text = sink.getvalue()
        try:
            sink.close()
        except (OSError, ValueError) as exc:
            self._record(exc)

    def __enter__(self) -> "Writer":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def _prefix(self, identifier: str | None, hook: _Hook) -> bool:
        """Writes what precedes a value or container start, if legal here."""
        if self._sink is None:
            self._ignore("write after close")
            return False

        if identifier is None:
            if not self._can_write_bare():
                self._ignore("value without identifier")
                return False
            self._write_comma()
        else:
            if not self._can_write_identified(identifier):
                self._ignore(f"identifier {identifier!r} out of place")
                return False
            self._write_identifier(identifier)

        hook(self._emit, self._indent, self._previous)
        return True

    def _open(self, scope: Scope, opener: str, token: Token) -> None:
        self._emit(opener)
        self._indent += 1
        self._stack.append(scope)
        self._previous = token

    def _close_scope(
        self, scope: Scope, hook: _Hook, closer: str, token: Token
    ) -> None:
        if self._sink is None:
            self._ignore("write after close")
            return
        if not self._stack or self._stack[-1] is not scope:
            self._ignore(f"mismatched {scope.value} end")
            return
        if self._previous is Token.IDENTIFIER:
            self._ignore("container end after a dangling identifier")
            return

        self._indent -= 1
        hook(self._emit, self._indent, self._previous)
        self._emit(closer)
        self._stack.pop()
        self._previous = token

    def _can_write_bare(self) -> bool:
        if not self._stack:
            # A document has exactly one root
            return self._previous is Token.NONE
        return (
            self._stack[-1] is Scope.ARRAY
            or self._previous is Token.IDENTIFIER
        )

    def _can_write_identified(self, identifier: object) -> bool:
        return (
            bool(self._stack)
            and self._stack[-1] is Scope.OBJECT
            and self._previous is not Token.IDENTIFIER
            and isinstance(identifier, str)
        )

    def _write_comma(self) -> None:
        if self._previous not in _NO_COMMA_AFTER:
            self._emit(",")

    def _write_identifier(self, identifier: str) -> None:
        self._write_comma()
        self._policy.write_identifier_prefix(
            self._emit, self._indent, self._previous
        )
        self._emit(escape_string(identifier))
        self._emit(":")
        self._previous = Token.IDENTIFIER

    def _emit(self, text: str) -> None:
        """Writes text to the sink, recording the first failure."""
        if self._error is not None or self._sink is None:
            return
        try:
            self._sink.write(text)
        except (OSError, ValueError) as exc:
            self._record(exc)

    def _record(self, exc: Exception) -> None:
        if self._error is None:
            self._error = Diagnostic(
                ErrorKind.STREAM, f"Failed to write output: {exc}"
            )
            logger.warning("JSON write failed: %s", exc)

    @staticmethod
    def _ignore(reason: str) -> None:
        logger.debug("Ignoring writer call: %s", reason)


def _spell(value: object) -> tuple[str, Token] | None:
    """Returns the wire text and token for a scalar, None if unsupported."""
    if value is None:
        return "null", Token.NULL
    if isinstance(value, bool):
        return ("true", Token.TRUE) if value else ("false", Token.FALSE)
    if isinstance(value, int | float):
        try:
            number = float(value)
        except OverflowError:
            number = math.inf
        text = format_number(number)
        if text is None:
            logger.warning("Writing non-finite number %r as null", value)
            return "null", Token.NULL
        return text, Token.NUMBER
    if isinstance(value, str):
        return escape_string(value), Token.STRING
    return None
