"""Success-or-error result returned by every secret store operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from keysafe.secrets.errors import KeychainError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Holds either a value or a :class:`KeychainError`, never both.

    ``value`` is ``None`` for operations that produce nothing on success.
    """

    value: T | None = None
    error: KeychainError | None = None

    def __post_init__(self) -> None:
        if self.error is not None and self.value is not None:
            raise ValueError("Result cannot carry both a value and an error")

    @classmethod
    def success(cls, value: T | None = None) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: KeychainError) -> Result[T]:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T | None:
        """Return the value, raising the held error on failure."""
        if self.error is not None:
            raise self.error
        return self.value

    def value_or(self, default: T | None = None) -> T | None:
        if self.error is not None:
            return default
        return self.value
