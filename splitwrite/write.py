"""Write side of a split data structure: the single writer and taken data."""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Any, Generic, Iterable, Optional, TypeVar

from splitwrite.absorb import Absorb
from splitwrite.read import EpochRegistry, ReadGuard, ReadHandle

T = TypeVar("T", bound=Absorb)
O = TypeVar("O")

_SPINS_BEFORE_YIELD = 20


class Taken(Generic[T]):
    """The last copy of the data, handed out when the writer is taken."""

    __slots__ = ("_inner",)

    def __init__(self, inner: T) -> None:
        self._inner: Optional[T] = inner

    @property
    def value(self) -> T:
        if self._inner is None:
            raise RuntimeError("taken value has already been dropped or moved out")
        return self._inner

    def into_box(self) -> T:
        """Move the value out; ``drop_second`` will not be called on it."""
        value = self.value
        self._inner = None
        return value

    def drop(self) -> None:
        """Dispose of the value with ``drop_second``; later calls do nothing."""
        if self._inner is not None:
            inner, self._inner = self._inner, None
            inner.drop_second()

    def __enter__(self) -> T:
        return self.value

    def __exit__(self, *exc_info: Any) -> None:
        self.drop()

    def __repr__(self) -> str:
        state = repr(self._inner) if self._inner is not None else "dropped"
        return f"Taken(inner={state})"


class WriteHandle(Generic[T, O]):
    """The single writer of a split data structure.

    Operations are queued with :meth:`append` or :meth:`extend` and become
    visible to readers when :meth:`publish` swaps the two copies.
    """

    def __init__(self, w_handle: T, epochs: EpochRegistry, r_handle: ReadHandle[T]) -> None:
        self.epochs = epochs
        self._w_handle = w_handle
        self._oplog: deque[O] = deque()
        self._swap_index = 0
        self._r_handle = r_handle
        self._last_epochs: dict[int, int] = {}
        self._waiting = threading.Event()
        self._refreshes = 0
        self._first = True
        self._second = True
        self._taken = False
        self._closed = False

    @property
    def first(self) -> bool:
        """True until the first publish."""
        return self._first

    @property
    def oplog(self) -> tuple[O, ...]:
        """Operations not yet applied to both copies."""
        return tuple(self._oplog)

    @property
    def swap_index(self) -> int:
        """Number of logged operations already applied to the read copy."""
        return self._swap_index

    @property
    def refreshes(self) -> int:
        """Number of publishes so far."""
        return self._refreshes

    @property
    def is_waiting(self) -> bool:
        """True while the writer waits for readers to leave the old copy."""
        return self._waiting.is_set()

    @property
    def read_handle(self) -> ReadHandle[T]:
        """The reader owned by this writer."""
        return self._r_handle

    def _wait(self, epochs: EpochRegistry) -> None:
        """Block until no reader is still inside the copy from before the last swap."""
        self._waiting.set()
        try:
            spins = 0
            while True:
                blocked = False
                for index, epoch in epochs:
                    last = self._last_epochs.get(index, 0)
                    if last % 2 == 0:
                        continue
                    if epoch.value == last:
                        blocked = True
                        break
                if not blocked:
                    return
                if spins < _SPINS_BEFORE_YIELD:
                    spins += 1
                else:
                    time.sleep(0)
        finally:
            self._waiting.clear()

    def _check_usable(self) -> None:
        if self._taken:
            raise RuntimeError("write handle has been taken or closed")

    def publish(self) -> "WriteHandle[T, O]":
        """Apply queued operations and make them visible to readers."""
        self._check_usable()
        with self.epochs.lock:
            self._wait(self.epochs)

            if not self._first:
                w_handle = self._w_handle
                r_handle = self._r_handle.inner.load()
                if r_handle is None:
                    raise RuntimeError("read copy missing while the writer is live")

                if self._second:
                    w_handle.sync_with(r_handle)
                    self._second = False

                for _ in range(self._swap_index):
                    w_handle.absorb_second(self._oplog.popleft(), r_handle)

                for op in self._oplog:
                    w_handle.absorb_first(op, r_handle)

                self._swap_index = len(self._oplog)
            else:
                self._first = False

            self._w_handle = self._r_handle.inner.swap(self._w_handle)

            for index, epoch in self.epochs:
                self._last_epochs[index] = epoch.value

            self._refreshes += 1
        return self

    def flush(self) -> None:
        """Publish only if there are operations readers have not seen."""
        if self.has_pending_operations():
            self.publish()

    def has_pending_operations(self) -> bool:
        """Return True if some appended operation is not yet visible to readers."""
        return self._swap_index < len(self._oplog)

    def append(self, op: O) -> "WriteHandle[T, O]":
        """Queue one operation."""
        self.extend((op,))
        return self

    def extend(self, ops: Iterable[O]) -> None:
        """Queue several operations.

        Before the first publish nothing reads the write copy, so operations
        are applied to it straight away.
        """
        self._check_usable()
        if self._first:
            w_inner = self._w_handle
            guard = self.enter()
            if guard is None:
                raise RuntimeError("data has already been destroyed")
            try:
                for op in ops:
                    w_inner.absorb_second(op, guard.value)
            finally:
                guard.release()
        else:
            self._oplog.extend(ops)

    def raw_write_handle(self) -> T:
        """Return the copy that is currently being written to."""
        self._check_usable()
        return self._w_handle

    def enter(self) -> Optional[ReadGuard[T]]:
        """Start a read of the published copy through this writer's reader."""
        return self._r_handle.enter()

    def _take_inner(self) -> Optional[Taken[T]]:
        if self._taken:
            return None

        if self._first or self._oplog:
            self.publish()
        if self._oplog:
            self.publish()
        if self._oplog:
            raise RuntimeError("operations left over after publishing twice")

        self._taken = True
        r_copy = self._r_handle.inner.swap(None)

        with self.epochs.lock:
            self._wait(self.epochs)

        self._w_handle.drop_first()
        return Taken(r_copy)

    def take(self) -> Taken[T]:
        """Consume the writer and return the last copy of the data."""
        self._check_usable()
        taken = self._take_inner()
        if taken is None:
            raise RuntimeError("write handle has already been taken")
        self._release_reader()
        return taken

    def _release_reader(self) -> None:
        if not self._closed:
            self._closed = True
            self._r_handle.close()

    def close(self) -> None:
        """Publish what is left, dispose of both copies and end the writer."""
        taken = self._take_inner()
        if taken is not None:
            taken.drop()
        self._release_reader()

    def __enter__(self) -> "WriteHandle[T, O]":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"WriteHandle(epochs={self.epochs!r}, w_handle={self._w_handle!r}, "
            f"oplog={list(self._oplog)!r}, swap_index={self._swap_index}, "
            f"r_handle={self._r_handle!r}, first={self._first}, second={self._second})"
        )