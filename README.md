# splitwrite

A concurrency primitive for read-heavy workloads. It keeps two copies of a
data structure. Readers look at one copy while a single writer applies
operations to the other. `publish()` waits until no reader is still inside
the copy it is about to change. It then replays the logged operations on
that copy and swaps the two, so that both copies stay in step.

## Installation

```
pip install splitwrite
```

## Modules

- `splitwrite.absorb`: `Absorb`, the abstract base your data structure
  implements.
  - `absorb_first(operation, other)` applies an operation for the first time.
  - `absorb_second(operation, other)` applies it for the last time. By
    default it calls `absorb_first`.
  - `sync_with(first)` makes the second copy equal to the first. It is called
    once, before the second copy is first written to.
  - `drop_first()` and `drop_second()` are called when each copy is disposed
    of. By default they do nothing.
- `splitwrite.api`: `new(factory)` builds both copies by calling
  `factory()` twice. `new_from_empty(value)` gives the writer `value` and
  gives readers a deep copy of it. Both functions return
  `(writer, reader)`.
- `splitwrite.write`: `WriteHandle` and `Taken`.
  - `append(op)` and `extend(ops)` queue operations. Before the first
    publish, operations are applied to the write copy straight away.
  - `publish()` makes queued operations visible to readers.
  - `flush()` publishes only when `has_pending_operations()` is true.
  - `enter()` reads through the writer's own reader, and
    `raw_write_handle()` returns the copy being written.
  - `take()` publishes whatever is left and ends the writer. It returns a
    `Taken` that holds the last copy of the data.
  - `close()` does the same as `take()`, but disposes of both copies with
    `drop_first` and `drop_second`. A `WriteHandle` used as a context
    manager calls `close()` on exit.
  - `Taken.value` is the data. `Taken.drop()` calls `drop_second` on it.
    `Taken.into_box()` moves the data out, so that `drop_second` is not
    called. Used as a context manager, a `Taken` yields the data and drops
    it on exit.
- `splitwrite.read`: `ReadHandle`, `ReadGuard`, `ReadHandleFactory` and
  `EpochRegistry`.
  - `ReadHandle.enter()` returns a `ReadGuard`. It returns `None` once the
    writer has been taken or closed.
  - A guard used as a context manager yields the published copy. You can
    also read `guard.value` and call `guard.release()`.
  - `ReadGuard.map(func)` and `ReadGuard.try_map(func)` narrow a guard to
    part of the value. `try_map` releases the guard and returns `None` if
    `func` returns `None`.
  - `clone()` and `factory().handle()` make further readers.
  - `was_dropped()` reports whether the data is gone, and `raw_handle()`
    returns the published copy without starting a read.
  - `close()` unregisters a reader. It refuses to close while guards are
    held.
- `splitwrite.aliasing`: `Aliased` wraps a value that both copies share. Its
  `DropBehavior` is `NO_DROP` or `DO_DROP`, and only an owner marked
  `DO_DROP` releases the value.
  - `Aliased.of(value, drop_behavior)` creates an owner.
  - `alias()` makes another owner of the same value.
  - `change_drop(drop_behavior)` moves the value into a new owner with a
    different behaviour.
  - `drop()` releases the value, by calling its `close()` method if it has
    one, but only for a `DO_DROP` owner.

## Example

```python
from splitwrite.absorb import Absorb
from splitwrite.api import new


class Counter(Absorb):
    def __init__(self):
        self.value = 0

    def absorb_first(self, operation, other):
        self.value += operation

    def sync_with(self, first):
        self.value = first.value


writer, reader = new(Counter)

writer.append(1)
writer.append(2)
writer.publish()

with reader.enter() as counter:
    print(counter.value)  # 3

writer.append(4)
assert writer.has_pending_operations()
writer.flush()

final = writer.take()
print(final.value.value)  # 7
assert reader.enter() is None
reader.close()
```

## Limits

- This is a library only; it provides no command-line program.
- The published-copy slot and the epoch counters are guarded by
  `threading` locks. Reads are therefore cheap but not lock-free.
- Readers are not reclaimed automatically. Call `close()` on a `ReadHandle`
  once it is no longer needed, so that the writer stops tracking it.

## Running the tests

```
pip install -e .[test]
pytest
```