"""Creating a writer and a reader over a new split data structure."""

from __future__ import annotations

import copy
from typing import Callable, TypeVar

from splitwrite.absorb import Absorb
from splitwrite.read import EpochRegistry, ReadHandle
from splitwrite.write import WriteHandle

T = TypeVar("T", bound=Absorb)


def new_from_empty(value: T) -> tuple[WriteHandle, ReadHandle]:
    """Start from ``value``: readers get a deep copy, the writer gets ``value``."""
    epochs = EpochRegistry()
    reader = ReadHandle(copy.deepcopy(value), epochs)
    writer = WriteHandle(value, epochs, reader.clone())
    return writer, reader


def new(factory: Callable[[], T]) -> tuple[WriteHandle, ReadHandle]:
    """Start from two empty copies, each made by calling ``factory()``."""
    epochs = EpochRegistry()
    reader = ReadHandle(factory(), epochs)
    writer = WriteHandle(factory(), epochs, reader.clone())
    return writer, reader