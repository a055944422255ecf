"""
Print policies: the whitespace half of the writer.

The writer owns every structural character. A policy is asked for the
whitespace that goes in front of each structural element and may only emit
spaces, tabs and line breaks through the callback it is handed.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from .grammar import Token

type WriteChar = Callable[[str], None]

_NO_SPACE_AFTER = frozenset({Token.NONE, Token.SQUARE_OPEN, Token.CURLY_OPEN})


class PrintPolicy(Protocol):
    """
    Whitespace hooks called by the writer.

    Each hook receives the writer's one-character output callback, the
    current indent depth and the token emitted just before.
    """

    def write_object_start_prefix(
        self, write: WriteChar, indent: int, previous: Token
    ) -> None: ...

    def write_array_start_prefix(
        self, write: WriteChar, indent: int, previous: Token
    ) -> None: ...

    def write_object_end_prefix(
        self, write: WriteChar, indent: int, previous: Token
    ) -> None: ...

    def write_array_end_prefix(
        self, write: WriteChar, indent: int, previous: Token
    ) -> None: ...

    def write_identifier_prefix(
        self, write: WriteChar, indent: int, previous: Token
    ) -> None: ...

    def write_value_prefix(
        self, write: WriteChar, indent: int, previous: Token
    ) -> None: ...


class DensePrintPolicy:
    """Emits no whitespace at all."""

    def write_object_start_prefix(
        self, write: WriteChar, indent: int, previous: Token
    ) -> None:
        pass

    def write_array_start_prefix(
        self, write: WriteChar, indent: int, previous: Token
    ) -> None:
        pass

    def write_object_end_prefix(
        self, write: WriteChar, indent: int, previous: Token
    ) -> None:
        pass

    def write_array_end_prefix(
        self, write: WriteChar, indent: int, previous: Token
    ) -> None:
        pass

    def write_identifier_prefix(
        self, write: WriteChar, indent: int, previous: Token
    ) -> None:
        pass

    def write_value_prefix(
        self, write: WriteChar, indent: int, previous: Token
    ) -> None:
        pass


@dataclass(frozen=True)
class PrettyPrintPolicy:
    """
    Readable output: one object member per line, arrays kept inline.

    Attributes:
        newline: Line terminator written before members and closing braces
        indent: Unit repeated once per nesting level
    """

    newline: str = "\n"
    indent: str = "\t"

    def __post_init__(self) -> None:
        if not isinstance(self.newline, str) or self.newline.strip():
            raise ValueError("newline must contain only whitespace")
        if not isinstance(self.indent, str) or self.indent.strip():
            raise ValueError("indent must contain only whitespace")

    def write_object_start_prefix(
        self, write: WriteChar, indent: int, previous: Token
    ) -> None:
        self._space(write, previous)

    def write_array_start_prefix(
        self, write: WriteChar, indent: int, previous: Token
    ) -> None:
        self._space(write, previous)

    def write_object_end_prefix(
        self, write: WriteChar, indent: int, previous: Token
    ) -> None:
        if previous is not Token.CURLY_OPEN:
            self._line(write, indent)

    def write_array_end_prefix(
        self, write: WriteChar, indent: int, previous: Token
    ) -> None:
        pass

    def write_identifier_prefix(
        self, write: WriteChar, indent: int, previous: Token
    ) -> None:
        self._line(write, indent)

    def write_value_prefix(
        self, write: WriteChar, indent: int, previous: Token
    ) -> None:
        self._space(write, previous)

    def _line(self, write: WriteChar, indent: int) -> None:
        for char in self.newline + self.indent * indent:
            write(char)

    @staticmethod
    def _space(write: WriteChar, previous: Token) -> None:
        if previous not in _NO_SPACE_AFTER:
            write(" ")
