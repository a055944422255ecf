"""
In-memory JSON document model.

A Value is an immutable tagged union over the six JSON kinds. Arrays and
objects are the mutable containers that Values wrap. Containers reject any
insertion that would make the tree cyclic, and the shared empty instances
ignore every mutation, so callers handed a default can never corrupt it.
"""

import logging
from collections.abc import Callable
from collections.abc import ItemsView
from collections.abc import Iterable
from collections.abc import Iterator
from collections.abc import KeysView
from collections.abc import Mapping
from collections.abc import ValuesView
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .errors import JSONEncodeError

logger = logging.getLogger(__name__)


class ValueType(Enum):
    """Discriminates the variants of a Value."""

    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


type Payload = bool | float | str | Array | Object | None
type ValueLike = (
    Value
    | Array
    | Object
    | bool
    | int
    | float
    | str
    | None
    | list[Any]
    | tuple[Any, ...]
    | dict[str, Any]
)

_CONTAINER_TYPES = frozenset({ValueType.ARRAY, ValueType.OBJECT})


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class Value:
    """
    Immutable JSON value.

    Every coercion returns a type-appropriate default instead of failing,
    so `value.as_object().get_number("x")` is always safe to chain.
    """

    type: ValueType
    payload: Payload = None

    def __post_init__(self) -> None:
        expected = _PAYLOAD_TYPES[self.type]
        if not isinstance(self.payload, expected):
            raise TypeError(
                f"{self.type.name} payload must be {expected.__name__}, "
                f"not {type(self.payload).__name__}"
            )

    @classmethod
    def boolean(cls, flag: bool) -> "Value":
        return TRUE if flag else FALSE

    @classmethod
    def number(cls, number: float) -> "Value":
        return cls(ValueType.NUMBER, float(number))

    @classmethod
    def string(cls, text: str | None) -> "Value":
        return cls(ValueType.STRING, "" if text is None else text)

    @classmethod
    def array(cls, array: "Array | None") -> "Value":
        return cls(ValueType.ARRAY, EMPTY_ARRAY if array is None else array)

    @classmethod
    def object(cls, obj: "Object | None") -> "Value":
        return cls(ValueType.OBJECT, EMPTY_OBJECT if obj is None else obj)

    @classmethod
    def of(cls, item: ValueLike) -> "Value":  # noqa: PLR0911
        """
        Wraps a Python object as a Value.

        Lists, tuples and dicts are copied into fresh containers; Array and
        Object instances are wrapped without copying.

        Raises:
            TypeError: If the object has no JSON counterpart
            JSONEncodeError: If nested lists or dicts contain themselves
        """
        if item is None:
            return NULL
        if isinstance(item, Value):
            return item
        if isinstance(item, bool):
            return TRUE if item else FALSE
        if isinstance(item, int | float):
            return cls.number(item)
        if isinstance(item, str):
            return cls(ValueType.STRING, item)
        if isinstance(item, Array):
            return cls(ValueType.ARRAY, item)
        if isinstance(item, Object):
            return cls(ValueType.OBJECT, item)
        if isinstance(item, list | tuple | dict):
            return _copy_nested(item)
        msg = f"Object of type {type(item).__name__} is not a JSON value"
        raise TypeError(msg)

    def is_null(self) -> bool:
        return self.type is ValueType.NULL

    def is_container(self) -> bool:
        return self.type in _CONTAINER_TYPES

    def as_boolean(self) -> bool:
        if self.type is ValueType.BOOLEAN:
            return bool(self.payload)
        if self.type is ValueType.NUMBER:
            return self.payload != 0.0
        if self.type is ValueType.STRING:
            return str(self.payload).lower() == "true"
        return False

    def as_number(self) -> float:
        if self.type is ValueType.NUMBER:
            return float(self.payload)  # type: ignore[arg-type]
        if self.type is ValueType.BOOLEAN:
            return 1.0 if self.payload else 0.0
        if self.type is ValueType.STRING:
            try:
                return float(str(self.payload))
            except ValueError:
                return 0.0
        return 0.0

    def as_string(self) -> str:
        if self.type is ValueType.STRING:
            return str(self.payload)
        if self.type is ValueType.BOOLEAN:
            return "true" if self.payload else "false"
        if self.type is ValueType.NUMBER:
            return repr(self.payload)
        return ""

    def as_array(self) -> "Array":
        if self.type is ValueType.ARRAY:
            return self.payload  # type: ignore[return-value]
        return EMPTY_ARRAY

    def as_object(self) -> "Object":
        if self.type is ValueType.OBJECT:
            return self.payload  # type: ignore[return-value]
        return EMPTY_OBJECT

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return _values_equal(self, other)

    def __hash__(self) -> int:
        if self.is_container():
            raise TypeError(f"unhashable Value of type {self.type.name}")
        return hash((self.type, self.payload))

    def __str__(self) -> str:
        return _dense_text(self)

    def __repr__(self) -> str:
        return f"Value({self.type.name}, {self.payload!r})"


class Array:
    """
    Ordered, mutable sequence of Values.

    Mutators report success as a bool instead of raising: out-of-range
    indexes, writes to the shared empty array and cyclic insertions are all
    refused with False.
    """

    __slots__ = ("_frozen", "_values")
    __hash__ = None  # type: ignore[assignment]

    def __init__(self, items: Iterable[ValueLike] | None = None) -> None:
        self._values: list[Value] = []
        self._frozen = False
        if items is not None:
            for item in items:
                self.append(item)

    @classmethod
    def _frozen_empty(cls) -> "Array":
        empty = cls()
        empty._frozen = True
        return empty

    @property
    def frozen(self) -> bool:
        return self._frozen

    def is_index_valid(self, index: int) -> bool:
        return 0 <= index < len(self._values)

    def get(self, index: int) -> Value:
        """Returns the element at index, or NULL when out of range."""
        if not self.is_index_valid(index):
            return NULL
        return self._values[index]

    def get_boolean(self, index: int) -> bool:
        return self.get(index).as_boolean()

    def get_number(self, index: int) -> float:
        return self.get(index).as_number()

    def get_string(self, index: int) -> str:
        return self.get(index).as_string()

    def get_array(self, index: int) -> "Array":
        return self.get(index).as_array()

    def get_object(self, index: int) -> "Object":
        return self.get(index).as_object()

    def append(self, item: ValueLike = None) -> bool:
        value = _admit(self, item)
        if value is None:
            return False
        self._values.append(value)
        return True

    def insert(self, index: int, item: ValueLike = None) -> bool:
        if not 0 <= index <= len(self._values):
            return False
        value = _admit(self, item)
        if value is None:
            return False
        self._values.insert(index, value)
        return True

    def set(self, index: int, item: ValueLike = None) -> bool:
        if not self.is_index_valid(index):
            return False
        value = _admit(self, item)
        if value is None:
            return False
        self._values[index] = value
        return True

    def remove_at(self, index: int) -> bool:
        if self._frozen or not self.is_index_valid(index):
            return False
        del self._values[index]
        return True

    def remove(self, item: ValueLike) -> bool:
        """Removes the first element equal to item."""
        index = self.index_of(item)
        if index < 0 or self._frozen:
            return False
        del self._values[index]
        return True

    def remove_all(self, item: ValueLike) -> int:
        target = Value.of(item)
        return self.remove_if(lambda value: value == target)

    def remove_if(self, predicate: Callable[[Value], bool]) -> int:
        if self._frozen:
            return 0
        kept = [value for value in self._values if not predicate(value)]
        removed = len(self._values) - len(kept)
        self._values[:] = kept
        return removed

    def clear(self) -> bool:
        if self._frozen:
            return False
        self._values.clear()
        return True

    def sort(
        self, key: Callable[[Value], Any], reverse: bool = False
    ) -> bool:
        if self._frozen:
            return False
        self._values.sort(key=key, reverse=reverse)
        return True

    def index_of(self, item: ValueLike) -> int:
        """Returns the index of the first element equal to item, or -1."""
        target = Value.of(item)
        for index, value in enumerate(self._values):
            if value == target:
                return index
        return -1

    def last_index_of(self, item: ValueLike) -> int:
        target = Value.of(item)
        for index in range(len(self._values) - 1, -1, -1):
            if self._values[index] == target:
                return index
        return -1

    def contains(self, item: ValueLike) -> bool:
        return self.index_of(item) >= 0

    def contains_null(self) -> bool:
        return any(value.is_null() for value in self._values)

    def sub_array(self, start: int, stop: int) -> "Array":
        """
        Copies the half-open range [start, stop) into a new array.

        An invalid range yields a new empty array.
        """
        result = Array()
        if 0 <= start < stop <= len(self._values):
            result._values.extend(self._values[start:stop])
        return result

    def copy(self) -> "Array":
        result = Array()
        result._values.extend(self._values)
        return result

    def to_list(self) -> list[Value]:
        return list(self._values)

    def _adopt(self, value: Value) -> None:
        """Appends a value known not to contain this array."""
        self._values.append(value)

    def _children(self) -> Iterable[Value]:
        return self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Value]:
        return iter(self._values)

    def __getitem__(self, index: int) -> Value:
        return self._values[index]

    def __contains__(self, item: object) -> bool:
        # Objects with no JSON counterpart are never elements
        if not isinstance(item, _VALUE_LIKE_TYPES):
            return False
        return self.contains(item)  # type: ignore[arg-type]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Array):
            return NotImplemented
        return _values_equal(Value.array(self), Value.array(other))

    def __str__(self) -> str:
        return _dense_text(Value.array(self))

    def __repr__(self) -> str:
        return f"Array({self})"


class Object:
    """
    Mutable mapping from string keys to Values.

    Fields keep insertion order, which is also the order they are written
    in. Keys must be str; the empty string is a valid key.
    """

    __slots__ = ("_fields", "_frozen")
    __hash__ = None  # type: ignore[assignment]

    def __init__(
        self,
        fields: Mapping[str, ValueLike]
        | Iterable[tuple[str, ValueLike]]
        | None = None,
    ) -> None:
        self._fields: dict[str, Value] = {}
        self._frozen = False
        if fields is None:
            return
        if isinstance(fields, Mapping | Object):
            pairs: Iterable[tuple[str, ValueLike]] = fields.items()
        else:
            pairs = fields
        for key, item in pairs:
            self.set(key, item)

    @classmethod
    def _frozen_empty(cls) -> "Object":
        empty = cls()
        empty._frozen = True
        return empty

    @property
    def frozen(self) -> bool:
        return self._frozen

    def has(self, key: str, value_type: ValueType | None = None) -> bool:
        value = self._fields.get(key)
        if value is None:
            return False
        return value_type is None or value.type is value_type

    def get(self, key: str, value_type: ValueType | None = None) -> Value:
        """Returns the field, or NULL when missing or of another type."""
        value = self._fields.get(key)
        if value is None:
            return NULL
        if value_type is not None and value.type is not value_type:
            return NULL
        return value

    def get_boolean(self, key: str) -> bool:
        return self.get(key).as_boolean()

    def get_number(self, key: str) -> float:
        return self.get(key).as_number()

    def get_string(self, key: str) -> str:
        return self.get(key).as_string()

    def get_array(self, key: str) -> Array:
        return self.get(key).as_array()

    def get_object(self, key: str) -> "Object":
        return self.get(key).as_object()

    def has_value(self, item: ValueLike) -> bool:
        target = Value.of(item)
        return any(value == target for value in self._fields.values())

    def has_null_value(self) -> bool:
        return any(value.is_null() for value in self._fields.values())

    def set(self, key: str, item: ValueLike = None) -> bool:
        if not isinstance(key, str):
            if not self._frozen:
                logger.debug("Rejected non-string key %r", key)
            return False
        value = _admit(self, item)
        if value is None:
            return False
        self._fields[key] = value
        return True

    def set_if_absent(self, key: str, item: ValueLike = None) -> bool:
        if key in self._fields:
            return False
        return self.set(key, item)

    def remove(self, key: str) -> bool:
        if self._frozen or key not in self._fields:
            return False
        del self._fields[key]
        return True

    def clear(self) -> bool:
        if self._frozen:
            return False
        self._fields.clear()
        return True

    def keys(self) -> KeysView[str]:
        return self._fields.keys()

    def values(self) -> ValuesView[Value]:
        return self._fields.values()

    def items(self) -> ItemsView[str, Value]:
        return self._fields.items()

    def copy(self) -> "Object":
        result = Object()
        result._fields.update(self._fields)
        return result

    def to_dict(self) -> dict[str, Value]:
        return dict(self._fields)

    def _adopt(self, key: str, value: Value) -> None:
        """Stores a field value known not to contain this object."""
        self._fields[key] = value

    def _children(self) -> Iterable[Value]:
        return self._fields.values()

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __getitem__(self, key: str) -> Value:
        return self._fields[key]

    def __contains__(self, key: object) -> bool:
        return key in self._fields

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Object):
            return NotImplemented
        return _values_equal(Value.object(self), Value.object(other))

    def __str__(self) -> str:
        return _dense_text(Value.object(self))

    def __repr__(self) -> str:
        return f"Object({self})"


_PAYLOAD_TYPES: dict[ValueType, type] = {
    ValueType.NULL: type(None),
    ValueType.BOOLEAN: bool,
    ValueType.NUMBER: float,
    ValueType.STRING: str,
    ValueType.ARRAY: Array,
    ValueType.OBJECT: Object,
}

NULL = Value(ValueType.NULL)
TRUE = Value(ValueType.BOOLEAN, True)
FALSE = Value(ValueType.BOOLEAN, False)
EMPTY_ARRAY = Array._frozen_empty()
EMPTY_OBJECT = Object._frozen_empty()

_VALUE_LIKE_TYPES = (
    Value,
    Array,
    Object,
    bool,
    int,
    float,
    str,
    type(None),
    list,
    tuple,
    dict,
)


def _fresh(item: list[Any] | tuple[Any, ...] | dict[str, Any]) -> Value:
    if isinstance(item, dict):
        return Value(ValueType.OBJECT, Object())
    return Value(ValueType.ARRAY, Array())


def _copy_nested(item: list[Any] | tuple[Any, ...] | dict[str, Any]) -> Value:
    """
    Copies nested lists, tuples and dicts into fresh containers.

    Walks with an explicit stack, visiting each source twice so the set of
    sources still open is exactly the ancestors of the one being copied.
    Fresh containers cannot be reachable from anything the caller passes
    in, so children are attached without the insertion check.
    """
    root = _fresh(item)
    pending: list[tuple[Any, Any, bool]] = [(item, root.payload, False)]
    open_sources: set[int] = set()

    while pending:
        source, container, processed = pending.pop()
        if processed:
            open_sources.discard(id(source))
            continue
        open_sources.add(id(source))
        pending.append((source, container, True))

        entries = (
            source.items()
            if isinstance(source, dict)
            else ((None, child) for child in source)
        )
        for key, child in entries:
            if isinstance(container, Object) and not isinstance(key, str):
                logger.debug("Rejected non-string key %r", key)
                continue
            if isinstance(child, list | tuple | dict):
                if id(child) in open_sources:
                    raise JSONEncodeError("Circular reference detected")
                value = _fresh(child)
                pending.append((child, value.payload, False))
            else:
                value = Value.of(child)

            if isinstance(container, Array):
                container._adopt(value)
            else:
                container._adopt(key, value)

    return root


def _admit(container: Array | Object, item: ValueLike) -> Value | None:
    """
    Normalises an incoming item for storage in container.

    Returns None when the container is frozen or the item would make the
    tree cyclic.
    """
    if container.frozen:
        logger.debug("Ignored mutation of a shared empty container")
        return None
    value = Value.of(item)
    nested = value.payload
    if isinstance(nested, Array | Object) and _reaches(nested, container):
        logger.warning(
            "Rejected insertion of a %s that already contains its target",
            value.type.name.lower(),
        )
        return None
    return value


def _reaches(root: Array | Object, target: Array | Object) -> bool:
    """Checks whether target is root itself or one of its descendants."""
    if root is target:
        return True
    pending: list[Array | Object] = [root]
    seen = {id(root)}
    while pending:
        container = pending.pop()
        for child in container._children():
            if not child.is_container():
                continue
            nested = child.payload
            if nested is target:
                return True
            if id(nested) not in seen:
                seen.add(id(nested))
                pending.append(nested)  # type: ignore[arg-type]
    return False


def _values_equal(left: Value, right: Value) -> bool:
    """Structural equality, walked with an explicit stack."""
    pending = [(left, right)]
    while pending:
        a, b = pending.pop()
        if a is b:
            continue
        if a.type is not b.type:
            return False
        if a.type is ValueType.ARRAY:
            xs = a.payload._values  # type: ignore[union-attr]
            ys = b.payload._values  # type: ignore[union-attr]
            if xs is ys:
                continue
            if len(xs) != len(ys):
                return False
            pending.extend(zip(xs, ys, strict=True))
        elif a.type is ValueType.OBJECT:
            xf = a.payload._fields  # type: ignore[union-attr]
            yf = b.payload._fields  # type: ignore[union-attr]
            if xf is yf:
                continue
            if xf.keys() != yf.keys():
                return False
            pending.extend((xf[key], yf[key]) for key in xf)
        elif a.payload != b.payload:
            return False
    return True


def _dense_text(value: Value) -> str:
    from .serializer import to_text

    return to_text(value)
