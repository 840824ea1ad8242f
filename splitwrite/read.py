"""Read side of a split data structure: handles, guards and handle factories."""

from __future__ import annotations

import threading
from typing import Any, Callable, Generic, Iterator, Optional, TypeVar

T = TypeVar("T")
U = TypeVar("U")


class _AtomicSlot(Generic[T]):
    """A shared reference that can be read and swapped atomically."""

    __slots__ = ("_value", "_lock")

    def __init__(self, value: Optional[T]) -> None:
        self._value = value
        self._lock = threading.Lock()

    def load(self) -> Optional[T]:
        with self._lock:
            return self._value

    def swap(self, new: Optional[T]) -> Optional[T]:
        with self._lock:
            old, self._value = self._value, new
            return old


class _EpochCounter:
    """A monotonically increasing counter; odd while its reader is reading."""

    __slots__ = ("_count", "_lock")

    def __init__(self) -> None:
        self._count = 0
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        with self._lock:
            return self._count

    def increment(self) -> int:
        with self._lock:
            self._count += 1
            return self._count

    def __repr__(self) -> str:
        return f"Epoch({self.value})"


class EpochRegistry:
    """The epoch counters of every live reader, keyed by a reusable index."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self._entries: dict[int, Any] = {}
        self._free: list[int] = []
        self._next = 0

    def register(self, counter: Any) -> int:
        """Store ``counter`` and return the index it was stored at."""
        with self.lock:
            if self._free:
                index = self._free.pop()
            else:
                index = self._next
                self._next += 1
            self._entries[index] = counter
            return index

    def unregister(self, index: int) -> Any:
        """Remove and return the counter stored at ``index``."""
        with self.lock:
            try:
                counter = self._entries.pop(index)
            except KeyError:
                raise KeyError(f"no epoch registered at index {index}") from None
            self._free.append(index)
            return counter

    def __iter__(self) -> Iterator[tuple[int, Any]]:
        with self.lock:
            snapshot = sorted(self._entries.items(), key=lambda entry: entry[0])
        return iter(snapshot)

    def __len__(self) -> int:
        with self.lock:
            return len(self._entries)

    def __contains__(self, index: object) -> bool:
        with self.lock:
            return index in self._entries

    def __repr__(self) -> str:
        return f"EpochRegistry({dict(self)!r})"


class ReadGuard(Generic[T]):
    """Access to the published value; the writer waits until it is released."""

    __slots__ = ("_handle", "_value", "_active")

    def __init__(self, handle: "ReadHandle[Any]", value: T) -> None:
        self._handle = handle
        self._value = value
        self._active = True

    @property
    def value(self) -> T:
        if not self._active:
            raise RuntimeError("read guard has been released")
        return self._value

    def map(self, func: Callable[[T], U]) -> "ReadGuard[U]":
        """Return a guard over ``func(value)``; this guard hands over its hold."""
        mapped = func(self.value)
        self._active = False
        return ReadGuard(self._handle, mapped)

    def try_map(self, func: Callable[[T], Optional[U]]) -> Optional["ReadGuard[U]"]:
        """Like :meth:`map`, but release and return None if ``func`` gives None."""
        mapped = func(self.value)
        if mapped is None:
            self.release()
            return None
        self._active = False
        return ReadGuard(self._handle, mapped)

    def release(self) -> None:
        """End this read; releasing twice has no further effect."""
        if not self._active:
            return
        self._active = False
        self._handle._leave()

    def __enter__(self) -> T:
        return self.value

    def __exit__(self, *exc_info: Any) -> None:
        self.release()

    def __repr__(self) -> str:
        state = repr(self._value) if self._active else "released"
        return f"ReadGuard({state})"


class ReadHandle(Generic[T]):
    """A reader of the published copy of a split data structure."""

    def __init__(self, value: T, epochs: Optional[EpochRegistry] = None) -> None:
        self._attach(_AtomicSlot(value), epochs if epochs is not None else EpochRegistry())

    @classmethod
    def _attached(cls, inner: _AtomicSlot[T], epochs: EpochRegistry) -> "ReadHandle[T]":
        handle = cls.__new__(cls)
        handle._attach(inner, epochs)
        return handle

    def _attach(self, inner: _AtomicSlot[T], epochs: EpochRegistry) -> None:
        self.inner = inner
        self.epochs = epochs
        self._epoch = _EpochCounter()
        self._epoch_index = epochs.register(self._epoch)
        self._enters = 0
        self._closed = False

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("read handle has been closed")

    def _leave(self) -> None:
        self._enters -= 1
        if self._enters == 0:
            self._epoch.increment()

    def enter(self) -> Optional[ReadGuard[T]]:
        """Start a read; return None if the writer has been dropped."""
        self._check_open()
        if self._enters:
            value = self.inner.load()
            if value is None:
                raise RuntimeError("value dropped while a read guard was held")
            self._enters += 1
            return ReadGuard(self, value)

        self._epoch.increment()
        value = self.inner.load()
        if value is None:
            self._epoch.increment()
            return None
        self._enters += 1
        return ReadGuard(self, value)

    def was_dropped(self) -> bool:
        """Return True once the writer has taken or dropped the data."""
        return self.inner.load() is None

    def raw_handle(self) -> Optional[T]:
        """Return the currently published copy without starting a read."""
        return self.inner.load()

    def factory(self) -> "ReadHandleFactory[T]":
        """Return a factory that makes new readers of the same data."""
        return ReadHandleFactory(self.inner, self.epochs)

    def clone(self) -> "ReadHandle[T]":
        """Return a new, independent reader of the same data."""
        return ReadHandle._attached(self.inner, self.epochs)

    def close(self) -> None:
        """Unregister this reader; fails while read guards are held."""
        if self._closed:
            return
        if self._enters:
            raise RuntimeError("cannot close a read handle while read guards are held")
        counter = self.epochs.unregister(self._epoch_index)
        self._closed = True
        if counter is not self._epoch:
            raise RuntimeError("epoch registry held another reader's counter")

    def __enter__(self) -> "ReadHandle[T]":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"ReadHandle(epochs={self.epochs!r}, epoch={self._epoch!r})"


class ReadHandleFactory(Generic[T]):
    """Makes new readers of a split data structure; safe to share."""

    def __init__(self, inner: _AtomicSlot[T], epochs: EpochRegistry) -> None:
        self.inner = inner
        self.epochs = epochs

    def handle(self) -> ReadHandle[T]:
        """Return a new reader."""
        return ReadHandle._attached(self.inner, self.epochs)

    def __repr__(self) -> str:
        return f"ReadHandleFactory(epochs={self.epochs!r})"