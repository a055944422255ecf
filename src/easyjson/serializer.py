"""
Bridges the streaming reader and writer with the document model.

Both directions walk the tree with explicit stacks, so the nesting depth of
a document is limited by memory rather than by the interpreter's recursion
limit.
"""

import logging
from dataclasses import dataclass

from ._profile import ProfileContext
from .policies import DensePrintPolicy
from .policies import PrintPolicy
from .reader import Notation
from .reader import Reader
from .values import NULL
from .values import Array
from .values import Object
from .values import Value
from .writer import Scalar
from .writer import Writer

logger = logging.getLogger(__name__)

_END_NOTATIONS = frozenset({Notation.OBJECT_END, Notation.ARRAY_END})


@dataclass(slots=True)
class _Frame:
    """A container being filled while its members are read."""

    container: Array | Object
    identifier: str | None


@dataclass(slots=True)
class _Pending:
    """A value waiting to be written; containers are visited twice."""

    value: Value
    identifier: str | None = None
    processed: bool = False


def deserialize(reader: Reader) -> Value:
    """
    Reads one complete document into a Value.

    On a reader positioned inside a document, reads the next member or
    element only. Returns NULL if the reader reports any error or meets
    the end of an enclosing container. The reader is left open.
    """
    with ProfileContext("deserialize"):
        value = _read_tree(reader)
    return NULL if value is None else value


def deserialize_array(reader: Reader) -> Array:
    """Reads a document whose root is an array; EMPTY_ARRAY otherwise."""
    return deserialize(reader).as_array()


def deserialize_object(reader: Reader) -> Object:
    """Reads a document whose root is an object; EMPTY_OBJECT otherwise."""
    return deserialize(reader).as_object()


def serialize(item: Value | Array | Object, writer: Writer) -> bool:
    """
    Writes a tree through writer.

    Returns:
        False if the tree turned out to be cyclic or the writer hit a
        stream error, True otherwise
    """
    with ProfileContext("serialize"):
        if not _write_tree(Value.of(item), writer):
            return False
    return writer.error is None


def to_text(
    item: Value | Array | Object, policy: PrintPolicy | None = None
) -> str:
    """Serializes into a string, dense unless a policy is given."""
    writer = Writer(
        policy=policy if policy is not None else DensePrintPolicy()
    )
    with writer:
        serialize(item, writer)
    return writer.getvalue()


def _read_tree(reader: Reader) -> Value | None:
    frames: list[_Frame] = []
    root: Value | None = None

    while True:
        ok, notation = reader.read_next()
        if not ok or notation is None or notation is Notation.ERROR:
            break

        identifier = reader.identifier
        if notation is Notation.OBJECT_START:
            frames.append(_Frame(Object(), identifier))
            continue
        if notation is Notation.ARRAY_START:
            frames.append(_Frame(Array(), identifier))
            continue

        if notation in _END_NOTATIONS:
            if not frames:
                logger.debug("Container end without a matching start")
                return None
            frame = frames.pop()
            value = Value.of(frame.container)
            identifier = frame.identifier
        else:
            value = _scalar(reader, notation)

        if not frames:
            if reader.depth > 0:
                # Started inside a larger document; leave the rest unread
                return value
            root = value
            continue
        # Fresh containers cannot already be in the tree
        parent = frames[-1].container
        if isinstance(parent, Array):
            parent._adopt(value)
        else:
            parent._adopt(identifier if identifier is not None else "", value)

    if reader.error is not None:
        logger.debug("Deserialization failed: %s", reader.error_message)
        return None
    return root


def _scalar(reader: Reader, notation: Notation) -> Value:
    if notation is Notation.STRING:
        return Value.string(reader.string_value)
    if notation is Notation.NUMBER:
        return Value.number(reader.number_value)
    if notation is Notation.BOOLEAN:
        return Value.boolean(reader.boolean_value)
    return NULL


def _write_tree(root: Value, writer: Writer) -> bool:
    pending = [_Pending(root)]
    open_containers: set[int] = set()

    while pending:
        entry = pending.pop()
        value = entry.value

        if not value.is_container():
            scalar: Scalar = value.payload  # type: ignore[assignment]
            writer.write_value(scalar, entry.identifier)
            continue

        container = value.payload
        if entry.processed:
            open_containers.discard(id(container))
            if isinstance(container, Array):
                writer.write_array_end()
            else:
                writer.write_object_end()
            continue

        if id(container) in open_containers:
            logger.error(
                "Refusing to serialize a %s that contains itself",
                value.type.name.lower(),
            )
            return False
        open_containers.add(id(container))

        entry.processed = True
        pending.append(entry)
        if isinstance(container, Array):
            writer.write_array_start(entry.identifier)
            pending.extend(_Pending(child) for child in reversed(container))
        elif isinstance(container, Object):
            writer.write_object_start(entry.identifier)
            pending.extend(
                _Pending(child, key)
                for key, child in reversed(container.items())
            )

    return True
