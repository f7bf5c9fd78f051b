"""Operation Results - explicit Ok/Err variants for fallback composition.

Invariants:
    - Ok carries the produced value; Err carries the exception that stopped the stage
    - Err.superseded keeps the primary branch's Err when a fallback also failed,
      so no failure reason is lost even though only one is surfaced
    - All functions are PURE: no IO, no async

Design Decisions:
    - Frozen dataclasses over a tagged tuple: pattern matching with `match` and
      isinstance both read naturally
    - unwrap() raises the surfaced error chained to the superseded one (__cause__)
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Stage resolved to a value."""
    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    """Stage failed. `superseded` is the earlier branch this failure replaced."""
    error: Exception
    superseded: "Err | None" = None

    @property
    def ok(self) -> bool:
        return False

    @property
    def code(self) -> str | None:
        return getattr(self.error, "code", None)

    def errors(self) -> list[Exception]:
        """All failure reasons, surfaced error first."""
        chain: list[Exception] = []
        current: Err | None = self
        while current is not None:
            chain.append(current.error)
            current = current.superseded
        return chain

    def unwrap(self) -> Any:
        primary = self.superseded.error if self.superseded is not None else None
        # stage errors are memoized and shared: set __cause__ at most once, never to itself
        if primary is not None and primary is not self.error and self.error.__cause__ is None:
            raise self.error from primary
        raise self.error


Result = Union[Ok[Any], Err]


def first_success(primary: Result, fallback: Result) -> Result:
    """Pick primary when it succeeded, otherwise the fallback.

    A failed fallback keeps the primary failure as `superseded`.
    """
    if isinstance(primary, Ok):
        return primary
    if isinstance(fallback, Ok):
        return fallback
    return Err(fallback.error, superseded=primary)
