"""Immutable reader configuration."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ReaderConfig:
    """
    Configures reader strictness and resource limits.

    Attributes:
        strict: Reject raw control characters inside strings
        allow_scalar_root: Accept a document whose root is not a container
        max_depth: Maximum container nesting, None for unlimited
        buffer_size: Characters pulled from the source per read call
    """

    strict: bool = True
    allow_scalar_root: bool = False
    max_depth: int | None = None
    buffer_size: int = 8192

    def __post_init__(self) -> None:
        if not isinstance(self.strict, bool):
            raise TypeError("strict must be a boolean")
        if not isinstance(self.allow_scalar_root, bool):
            raise TypeError("allow_scalar_root must be a boolean")
        if self.max_depth is not None and (
            not isinstance(self.max_depth, int) or self.max_depth < 1
        ):
            raise ValueError("max_depth must be a positive integer or None")
        if not isinstance(self.buffer_size, int) or self.buffer_size < 1:
            raise ValueError("buffer_size must be a positive integer")


DEFAULT_READER_CONFIG = ReaderConfig()
