"""
Opt-in timing of the public entry points.

Set EASYJSON_PROFILE before import to collect per-operation call counts,
elapsed time and characters processed. Without it `ProfileContext` only
checks a constant flag and stats stay empty.
"""

import os
import time
from dataclasses import dataclass
from types import TracebackType

PROFILE_HOT_PATHS = __debug__ and "EASYJSON_PROFILE" in os.environ


@dataclass
class HotPathStats:
    """Accumulated timings for one profiled operation."""

    function_name: str
    call_count: int = 0
    total_time_ns: int = 0
    chars_processed: int = 0

    def record_call(self, duration_ns: int, chars: int = 0) -> None:
        self.call_count += 1
        self.total_time_ns += duration_ns
        self.chars_processed += chars

    @property
    def mean_time_ns(self) -> float:
        if not self.call_count:
            return 0.0
        return self.total_time_ns / self.call_count


_stats: dict[str, HotPathStats] = {}


class ProfileContext:
    """Times the enclosed block under `operation` when profiling is on."""

    __slots__ = ("_chars", "_operation", "_started")

    def __init__(self, operation: str, chars: int = 0) -> None:
        self._operation = operation
        self._chars = chars
        self._started = 0

    def __enter__(self) -> "ProfileContext":
        if PROFILE_HOT_PATHS:
            self._started = time.perf_counter_ns()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if not PROFILE_HOT_PATHS:
            return
        elapsed = time.perf_counter_ns() - self._started
        stats = _stats.get(self._operation)
        if stats is None:
            stats = _stats[self._operation] = HotPathStats(self._operation)
        stats.record_call(elapsed, self._chars)


def get_hot_path_stats() -> dict[str, HotPathStats]:
    """Returns a snapshot of the stats; empty when profiling is off."""
    return dict(_stats)


def clear_hot_path_stats() -> None:
    _stats.clear()
