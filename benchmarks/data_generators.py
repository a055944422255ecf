"""
Document generators for the benchmarks.

Every generator is seeded so repeated runs time the same text. Documents
always have a container root, which is what the reader accepts by default.
"""

import json
import random
import string
from typing import Any

_SEED = 20240115
_ESCAPE_PROBABILITY = 0.3
_ESCAPABLE = ['"', "\\", "/", "\b", "\f", "\n", "\r", "\t"]


def generate_document(kind: str) -> str:
    """Returns the JSON text for a named document shape."""
    return json.dumps(generate_data(kind))


def generate_data(kind: str) -> Any:
    """Returns the Python data for a named document shape."""
    generators = {
        "small_object": _small_object,
        "record_list": _record_list,
        "mixed_array": _mixed_array,
        "deep_nesting": _deep_nesting,
        "string_heavy": _string_heavy,
    }
    if kind not in generators:
        raise ValueError(f"Unknown document kind: {kind}")

    return generators[kind](random.Random(_SEED))


def _small_object(rng: random.Random) -> dict[str, Any]:
    return {
        "id": 12345,
        "name": "Alice Johnson",
        "email": "alice@example.com",
        "active": True,
        "balance": 1234.56,
        "metadata": {"created": "2024-01-15T10:30:00Z", "source": "api"},
    }


def _record_list(rng: random.Random) -> dict[str, Any]:
    """Around 20KB of flat records, the common API payload shape."""
    return {
        "count": 200,
        "records": [
            {
                "id": f"txn_{i:06d}",
                "amount": round(rng.uniform(1.0, 1000.0), 2),
                "currency": rng.choice(["USD", "EUR", "GBP", "JPY"]),
                "settled": rng.choice([True, False]),
                "note": None if i % 3 else _word(rng, 16),
            }
            for i in range(200)
        ],
    }


def _mixed_array(rng: random.Random) -> list[Any]:
    choices = [
        lambda i: rng.randint(-1000, 1000),
        lambda i: round(rng.uniform(-100.0, 100.0), 3),
        lambda i: _word(rng, rng.randint(5, 30)),
        lambda i: rng.choice([True, False]),
        lambda i: None,
        lambda i: {"index": i, "score": round(rng.uniform(0, 100), 2)},
    ]
    return [rng.choice(choices)(i) for i in range(500)]


def _deep_nesting(rng: random.Random) -> list[Any]:
    """A narrow document 500 containers deep."""
    root: list[Any] = []
    tip = root
    for level in range(250):
        child: list[Any] = []
        tip.append({"level": level, "next": child})
        tip = child
    tip.append(_word(rng, 10))
    return root


def _string_heavy(rng: random.Random) -> dict[str, Any]:
    def escaped() -> str:
        return "".join(
            rng.choice(_ESCAPABLE)
            if rng.random() < _ESCAPE_PROBABILITY
            else rng.choice(string.ascii_letters + " ")
            for _ in range(50)
        )

    return {
        "strings": [escaped() for _ in range(100)],
        "unicode": ["caf\u00e9 \u4e2d\u6587 \U0001f600" for _ in range(50)],
        "paths": {
            f"key_{i}": f"C:\\Users\\{_word(rng, 8)}\\file_{i}.txt"
            for i in range(20)
        },
    }


def _word(rng: random.Random, length: int) -> str:
    return "".join(rng.choices(string.ascii_letters, k=length))
