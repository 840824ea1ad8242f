import pytest

from splitwrite.aliasing import Aliased, DropBehavior


class Resource:
    def __init__(self, name):
        self.name = name
        self.closed = 0

    def close(self):
        self.closed += 1


def test_of_wraps_value_with_behavior():
    res = Resource("a")
    wrapped = Aliased.of(res, DropBehavior.DO_DROP)
    assert wrapped.value is res
    assert wrapped.drop_behavior is DropBehavior.DO_DROP
    assert wrapped.drop_behavior.do_drop is True


def test_constructor_defaults_to_no_drop():
    wrapped = Aliased("x")
    assert wrapped.drop_behavior is DropBehavior.NO_DROP
    assert DropBehavior.NO_DROP.do_drop is False


def test_no_drop_does_not_release():
    res = Resource("a")
    wrapped = Aliased.of(res, DropBehavior.NO_DROP)
    assert wrapped.drop() is False
    assert res.closed == 0


def test_do_drop_releases_once():
    res = Resource("a")
    wrapped = Aliased.of(res, DropBehavior.DO_DROP)
    assert wrapped.drop() is True
    assert res.closed == 1
    assert wrapped.drop() is False
    assert res.closed == 1


def test_value_after_drop_raises():
    res = Resource("a")
    wrapped = Aliased.of(res, DropBehavior.NO_DROP)
    assert wrapped.value is res
    assert wrapped.drop() is False
    with pytest.raises(ReferenceError):
        _ = wrapped.value
    assert res.closed == 0


def test_do_drop_without_close_method():
    wrapped = Aliased.of([1, 2], DropBehavior.DO_DROP)
    assert wrapped.drop() is True
    with pytest.raises(ReferenceError):
        _ = wrapped.value


def test_alias_shares_value():
    res = Resource("a")
    original = Aliased.of(res, DropBehavior.NO_DROP)
    copy = original.alias()
    assert copy.value is original.value
    assert copy.drop_behavior is original.drop_behavior
    copy.drop()
    assert original.value is res
    assert res.closed == 0


def test_change_drop_moves_value():
    res = Resource("a")
    original = Aliased.of(res, DropBehavior.NO_DROP)
    moved = original.change_drop(DropBehavior.DO_DROP)
    assert moved.value is res
    assert moved.drop_behavior is DropBehavior.DO_DROP
    with pytest.raises(ReferenceError):
        _ = original.value
    assert original.drop() is False
    assert res.closed == 0
    assert moved.drop() is True
    assert res.closed == 1


def test_only_do_drop_alias_releases():
    res = Resource("shared")
    first = Aliased.of(res, DropBehavior.NO_DROP)
    second = first.alias().change_drop(DropBehavior.DO_DROP)
    first.drop()
    assert res.closed == 0
    second.drop()
    assert res.closed == 1


def test_equality_and_hash_follow_value():
    a = Aliased.of("key")
    b = Aliased.of("key", DropBehavior.DO_DROP)
    assert a == b
    assert a == "key"
    assert hash(a) == hash("key")
    table = {a: "found"}
    assert table["key"] == "found"


def test_ordering_follows_value():
    raw = [3, 1, 2]
    items = [Aliased.of(v) for v in raw]
    assert [item.value for item in sorted(items)] == sorted(raw)
    assert Aliased.of(1) < Aliased.of(2)
    assert Aliased.of(2) >= 2
    assert not (Aliased.of(2) > Aliased.of(2))


def test_repr_is_value_repr():
    assert repr(Aliased.of("text")) == repr("text")