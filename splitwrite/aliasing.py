"""Values that may be held by both copies of a split data structure at once."""

from __future__ import annotations

import enum
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")


class DropBehavior(enum.Enum):
    """Whether dropping an :class:`Aliased` releases the value it holds."""

    NO_DROP = "no_drop"
    DO_DROP = "do_drop"

    @property
    def do_drop(self) -> bool:
        return self is DropBehavior.DO_DROP


def _release(value: Any) -> None:
    close = getattr(value, "close", None)
    if callable(close):
        close()


class Aliased(Generic[T]):
    """A reference to a value that several owners may share.

    Only owners whose drop behaviour is ``DO_DROP`` release the value (by
    calling its ``close()`` method, if it has one) when they are dropped.
    """

    __slots__ = ("_value", "_behavior", "_live")

    def __init__(self, value: T, drop_behavior: DropBehavior = DropBehavior.NO_DROP) -> None:
        self._value = value
        self._behavior = drop_behavior
        self._live = True

    @classmethod
    def of(cls, value: T, drop_behavior: DropBehavior = DropBehavior.NO_DROP) -> "Aliased[T]":
        """Wrap ``value`` with the given drop behaviour."""
        return cls(value, drop_behavior)

    @property
    def value(self) -> T:
        if not self._live:
            raise ReferenceError("aliased value has been dropped")
        return self._value

    @property
    def drop_behavior(self) -> DropBehavior:
        return self._behavior

    def alias(self) -> "Aliased[T]":
        """Return another owner of the same value with the same drop behaviour."""
        return type(self)(self.value, self._behavior)

    def change_drop(self, drop_behavior: DropBehavior) -> "Aliased[T]":
        """Move the value into a new owner with another drop behaviour.

        This owner is consumed without releasing the value.
        """
        value = self.value
        self._live = False
        return type(self)(value, drop_behavior)

    def drop(self) -> bool:
        """Drop this owner; return True if the value was released."""
        if not self._live:
            return False
        self._live = False
        if self._behavior.do_drop:
            _release(self._value)
            return True
        return False

    @staticmethod
    def _unwrap(other: Any) -> Any:
        return other.value if isinstance(other, Aliased) else other

    def _compare(self, other: Any, op: Callable[[Any, Any], bool]) -> bool:
        return op(self.value, self._unwrap(other))

    def __eq__(self, other: object) -> bool:
        return self.value == self._unwrap(other)

    def __lt__(self, other: Any) -> bool:
        return self._compare(other, lambda a, b: a < b)

    def __le__(self, other: Any) -> bool:
        return self._compare(other, lambda a, b: a <= b)

    def __gt__(self, other: Any) -> bool:
        return self._compare(other, lambda a, b: a > b)

    def __ge__(self, other: Any) -> bool:
        return self._compare(other, lambda a, b: a >= b)

    def __hash__(self) -> int:
        return hash(self.value)

    def __repr__(self) -> str:
        return repr(self.value)