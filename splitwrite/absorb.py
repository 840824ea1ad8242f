"""The interface a data structure implements to receive operations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

O = TypeVar("O")


class Absorb(ABC, Generic[O]):
    """A data structure that can apply operations to itself.

    Every operation is applied twice, once to each copy. ``absorb_first`` is
    called for the first application and ``absorb_second`` for the last, so an
    implementation may share data between the copies on the first and hand
    over ownership on the second.
    """

    @abstractmethod
    def absorb_first(self, operation: O, other: "Absorb[O]") -> None:
        """Apply ``operation`` for the first time; ``other`` is the other copy."""

    def absorb_second(self, operation: O, other: "Absorb[O]") -> None:
        """Apply ``operation`` for the last time; defaults to ``absorb_first``."""
        self.absorb_first(operation, other)

    def drop_first(self) -> None:
        """Dispose of the copy that is discarded first; does nothing by default."""

    def drop_second(self) -> None:
        """Dispose of the copy that is discarded last; does nothing by default."""

    @abstractmethod
    def sync_with(self, first: "Absorb[O]") -> None:
        """Bring this freshly created copy in line with ``first``."""