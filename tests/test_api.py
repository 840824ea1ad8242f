import threading
from dataclasses import dataclass

from splitwrite.absorb import Absorb
from splitwrite.aliasing import Aliased, DropBehavior
from splitwrite.api import new, new_from_empty


@dataclass
class CounterAddOp:
    amount: int


class Counter(Absorb):
    def __init__(self, count=0):
        self.count = count

    def absorb_first(self, operation, other):
        self.count += operation.amount

    def sync_with(self, first):
        self.count = first.count


class ValueRegistry:
    def __init__(self):
        self.num_live_values = 0

    def adjust_count(self, delta):
        self.num_live_values += delta
        assert self.num_live_values >= 0


class Value:
    def __init__(self, v, registry):
        self.v = v
        self.registry = registry
        registry.adjust_count(1)

    def close(self):
        self.registry.adjust_count(-1)


@dataclass
class PushBack:
    value: Aliased


class PopFront:
    pass


class Deque(Absorb):
    def __init__(self):
        self.items = []

    def absorb_first(self, operation, other):
        if isinstance(operation, PushBack):
            self.items.append(operation.value.alias())
        else:
            self.items.pop(0)

    def absorb_second(self, operation, other):
        if isinstance(operation, PushBack):
            self.items.append(operation.value.change_drop(DropBehavior.DO_DROP))
        else:
            self.items.pop(0).change_drop(DropBehavior.DO_DROP).drop()

    def sync_with(self, first):
        assert len(self.items) == 0
        self.items.extend(item.alias() for item in first.items)

    def drop_second(self):
        for item in self.items:
            item.change_drop(DropBehavior.DO_DROP).drop()
        self.items.clear()


def test_deque():
    registry = ValueRegistry()

    def mkval(v):
        return Aliased.of(Value(v, registry), DropBehavior.NO_DROP)

    w, r = new(Deque)
    w.append(PushBack(mkval(1)))
    w.append(PushBack(mkval(2)))
    w.append(PushBack(mkval(3)))
    w.publish()

    assert registry.num_live_values == 3
    with r.enter() as deque:
        assert [item.value.v for item in deque.items] == [1, 2, 3]

    w.append(PushBack(mkval(4)))
    w.publish()

    assert registry.num_live_values == 4
    with r.enter() as deque:
        assert [item.value.v for item in deque.items] == [1, 2, 3, 4]

    w.append(PopFront())
    w.append(PopFront())
    w.publish()

    assert registry.num_live_values == 4
    with r.enter() as deque:
        assert [item.value.v for item in deque.items] == [3, 4]

    w.append(PopFront())
    w.publish()

    assert registry.num_live_values == 2
    with r.enter() as deque:
        assert [item.value.v for item in deque.items] == [4]

    r.close()
    w.close()

    assert registry.num_live_values == 0


def test_read_before_publish():
    w, r = new(Counter)
    w.append(CounterAddOp(1))
    w.publish()

    result = []

    def read():
        with r.enter() as counter:
            result.append(counter.count)

    reader_thread = threading.Thread(target=read)
    reader_thread.start()

    w.publish()
    w.append(CounterAddOp(1))

    reader_thread.join(timeout=5)
    assert result == [1]
    assert w.has_pending_operations() is True
    with r.enter() as counter:
        assert counter.count == 1


def test_new_uses_separate_copies():
    w, r = new(Counter)
    assert w.raw_write_handle() is not r.raw_handle()
    assert w.raw_write_handle().count == 0
    assert r.raw_handle().count == 0


def test_new_from_empty_copies_value():
    start = Counter(4)
    w, r = new_from_empty(start)
    assert w.raw_write_handle() is start
    assert r.raw_handle() is not start
    assert r.raw_handle().count == 4


def test_new_registers_two_readers():
    w, r = new(Counter)
    assert len(r.epochs) == 2
    assert w.epochs is r.epochs
    r.close()
    assert len(w.epochs) == 1
    w.close()
    assert len(w.epochs) == 0


def test_readers_see_published_value_only():
    w, r = new_from_empty(Counter(10))
    w.publish()
    w.append(CounterAddOp(5))
    with r.enter() as counter:
        assert counter.count == 10
    w.publish()
    with r.enter() as counter:
        assert counter.count == 15