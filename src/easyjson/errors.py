"""Error taxonomy shared by the reader, writer, serializer and value model."""

from dataclasses import dataclass
from enum import Enum


class ErrorKind(Enum):
    """
    Categories of failure a JSON session can run into.

    STRUCTURAL and LEX come from malformed input, STREAM from the underlying
    source or sink, SAFETY from an attempt to build a cyclic tree.
    """

    STRUCTURAL = "structural"
    LEX = "lex"
    STREAM = "stream"
    SAFETY = "safety"


@dataclass(frozen=True)
class Diagnostic:
    """
    Positioned description of a terminal session error.

    Line and column are 1-based; zero means the position is unknown
    (for example a failure on the output side).
    """

    kind: ErrorKind
    msg: str
    lineno: int = 0
    colno: int = 0

    @property
    def message(self) -> str:
        if self.lineno <= 0:
            return self.msg
        return f"{self.msg} at line {self.lineno}, column {self.colno}"

    def __str__(self) -> str:
        return self.message


class JSONDecodeError(ValueError):
    """
    Raised by the convenience decoding API when the document is malformed.

    Carries the same information as the reader's :class:`Diagnostic` so
    callers can point users at the offending line and column.
    """

    def __init__(
        self,
        msg: str,
        lineno: int = 1,
        colno: int = 1,
        kind: ErrorKind = ErrorKind.STRUCTURAL,
    ) -> None:
        if not isinstance(msg, str):
            raise TypeError("msg must be a string")

        self.msg = msg
        self.lineno = lineno
        self.colno = colno
        self.kind = kind

        super().__init__(f"{msg} at line {lineno}, column {colno}")

    @classmethod
    def from_diagnostic(cls, diagnostic: Diagnostic) -> "JSONDecodeError":
        return cls(
            diagnostic.msg, diagnostic.lineno, diagnostic.colno, diagnostic.kind
        )


class JSONEncodeError(ValueError):
    """Raised by the convenience encoding API when a tree cannot be written."""

    def __init__(self, msg: str, kind: ErrorKind = ErrorKind.SAFETY) -> None:
        self.msg = msg
        self.kind = kind
        super().__init__(msg)
