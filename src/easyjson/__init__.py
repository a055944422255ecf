"""
Streaming JSON codec with a mutable, cycle-safe document model.

The pull-based Reader and push-based Writer work without building a tree;
the serializer connects them to Value/Array/Object documents. The
`loads`/`dumps` family wraps the common cases.
"""

from typing import IO

from ._profile import HotPathStats
from ._profile import ProfileContext
from ._profile import clear_hot_path_stats
from ._profile import get_hot_path_stats
from .config import DEFAULT_READER_CONFIG
from .config import ReaderConfig
from .errors import Diagnostic
from .errors import ErrorKind
from .errors import JSONDecodeError
from .errors import JSONEncodeError
from .grammar import Scope
from .grammar import Token
from .policies import DensePrintPolicy
from .policies import PrettyPrintPolicy
from .policies import PrintPolicy
from .reader import Notation
from .reader import Reader
from .serializer import deserialize
from .serializer import deserialize_array
from .serializer import deserialize_object
from .serializer import serialize
from .serializer import to_text
from .values import EMPTY_ARRAY
from .values import EMPTY_OBJECT
from .values import FALSE
from .values import NULL
from .values import TRUE
from .values import Array
from .values import Object
from .values import Value
from .values import ValueLike
from .values import ValueType
from .writer import Writer

__version__ = "0.1.0"


def loads(s: str, config: ReaderConfig | None = None) -> Value:
    """
    Parses a JSON document held in a string.

    Raises:
        TypeError: If s is not a str
        JSONDecodeError: If the document is malformed
    """
    if not isinstance(s, str):
        raise TypeError(
            f"the JSON object must be str, not {type(s).__name__}"
        )

    with ProfileContext("loads", len(s)), Reader(s, config) as reader:
        return _decode(reader)


def load(fp: IO[str], config: ReaderConfig | None = None) -> Value:
    """
    Parses a JSON document from a text stream, reading it in chunks.

    The stream is left open.
    """
    if not hasattr(fp, "read"):
        raise TypeError("fp must have a read() method")

    with ProfileContext("load"):
        return _decode(Reader(fp, config))


def dumps(obj: ValueLike, policy: PrintPolicy | None = None) -> str:
    """
    Serializes a value to a string, dense unless a policy is given.

    Raises:
        TypeError: If obj has no JSON counterpart
        JSONEncodeError: If the tree cannot be written
    """
    value = Value.of(obj)
    with ProfileContext("dumps"), _writer(None, policy) as writer:
        _encode(value, writer)
    return writer.getvalue()


def dump(
    obj: ValueLike, fp: IO[str], policy: PrintPolicy | None = None
) -> None:
    """Serializes a value to a text stream, flushing but not closing it."""
    if not hasattr(fp, "write"):
        raise TypeError("fp must have a write() method")

    value = Value.of(obj)
    with ProfileContext("dump"):
        _encode(value, _writer(fp, policy))


def _decode(reader: Reader) -> Value:
    value = deserialize(reader)
    if reader.error is not None:
        raise JSONDecodeError.from_diagnostic(reader.error)
    return value


def _writer(fp: IO[str] | None, policy: PrintPolicy | None) -> Writer:
    return Writer(fp, policy if policy is not None else DensePrintPolicy())


def _encode(value: Value, writer: Writer) -> None:
    completed = serialize(value, writer)
    writer.flush()
    if writer.error is not None:
        raise JSONEncodeError(writer.error.msg, writer.error.kind)
    if not completed:
        raise JSONEncodeError("Circular reference detected")


__all__ = [
    "DEFAULT_READER_CONFIG",
    "EMPTY_ARRAY",
    "EMPTY_OBJECT",
    "FALSE",
    "NULL",
    "TRUE",
    "Array",
    "DensePrintPolicy",
    "Diagnostic",
    "ErrorKind",
    "HotPathStats",
    "JSONDecodeError",
    "JSONEncodeError",
    "Notation",
    "Object",
    "PrettyPrintPolicy",
    "PrintPolicy",
    "Reader",
    "ReaderConfig",
    "Scope",
    "Token",
    "Value",
    "ValueLike",
    "ValueType",
    "Writer",
    "__version__",
    "clear_hot_path_stats",
    "deserialize",
    "deserialize_array",
    "deserialize_object",
    "dump",
    "dumps",
    "get_hot_path_stats",
    "load",
    "loads",
    "serialize",
    "to_text",
]
