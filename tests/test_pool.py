import itertools

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from recordsmith.core.pool import AccumulatorPool, ObjectPool, PoolStats
from recordsmith.core.registry import PoolRegistry
from recordsmith.core.configuration import assemble


class Box:
    def __init__(self, ident):
        self.ident = ident
        self.value = None


def _counter_pool(max_size=1000, reset=None):
    counter = itertools.count(1)
    return ObjectPool(lambda: Box(next(counter)), reset=reset, max_size=max_size, label="boxes")


def test_default_max_size_is_1000():
    pool = ObjectPool(object)

    assert pool.max_size == 1000
    assert pool.stats().max_size == 1000


def test_get_on_empty_pool_is_a_miss():
    pool = _counter_pool()

    obj = pool.get()

    assert obj.ident == 1
    stats = pool.stats()
    assert (stats.hits, stats.misses, stats.total_created) == (0, 1, 1)


def test_released_object_is_reused_as_hit():
    pool = _counter_pool()

    first = pool.get()
    pool.release(first)
    second = pool.get()

    assert second is first
    stats = pool.stats()
    assert (stats.hits, stats.misses, stats.total_created) == (1, 1, 1)
    assert stats.hit_rate == 0.5


def test_reset_hook_runs_on_release():
    seen = []
    pool = _counter_pool(reset=seen.append)

    obj = pool.get()
    pool.release(obj)

    assert seen == [obj]


def test_release_beyond_capacity_drops_object():
    seen = []
    pool = _counter_pool(max_size=2, reset=seen.append)
    objs = [pool.get() for _ in range(3)]

    kept = [pool.release(obj) for obj in objs]

    assert kept == [True, True, False]
    assert pool.size() == 2
    assert len(seen) == 2


def test_double_release_is_rejected():
    pool = _counter_pool()
    obj = pool.get()
    pool.release(obj)

    with pytest.raises(ValueError, match="already released"):
        pool.release(obj)


def test_object_can_be_released_again_after_reacquire():
    pool = _counter_pool()
    obj = pool.get()
    pool.release(obj)
    assert pool.get() is obj

    assert pool.release(obj) is True


def test_clear_keeps_counters_and_reset_stats_keeps_objects():
    pool = _counter_pool()
    objs = [pool.get() for _ in range(3)]
    for obj in objs:
        pool.release(obj)

    pool.reset_stats()
    assert pool.size() == 3
    assert pool.stats().misses == 0
    assert pool.stats().total_created == 0

    pool.get()
    pool.clear()
    assert pool.size() == 0
    assert pool.stats().hits == 1


def test_clear_and_reset_stats_are_idempotent():
    pool = _counter_pool()
    pool.release(pool.get())

    for _ in range(3):
        pool.clear()
        pool.reset_stats()

    stats = pool.stats()
    assert stats == PoolStats(
        size=0, max_size=1000, hits=0, misses=0, hit_rate=0.0, total_created=0, utilization=0.0
    )


def test_utilization_is_idle_share_of_capacity():
    pool = _counter_pool(max_size=4)
    objs = [pool.get() for _ in range(2)]
    for obj in objs:
        pool.release(obj)

    assert pool.stats().utilization == 0.5
    assert pool.stats().as_dict()["utilization"] == 0.5


def test_zero_capacity_pool_never_keeps_objects():
    pool = _counter_pool(max_size=0)

    assert pool.release(pool.get()) is False
    assert pool.stats().utilization == 0.0


def test_negative_capacity_is_rejected():
    with pytest.raises(ValueError):
        ObjectPool(object, max_size=-1)


def test_borrow_releases_on_exit_even_after_error():
    pool = _counter_pool()

    with pytest.raises(RuntimeError):
        with pool.borrow() as obj:
            raise RuntimeError("boom")

    assert pool.size() == 1
    assert pool.get() is obj


def test_accumulator_pool_rejects_foreign_accumulators():
    registry = PoolRegistry()
    ours = registry.pool_for(assemble(["id"]))
    theirs = registry.pool_for(assemble(["name"]))

    with pytest.raises(ValueError):
        ours.release(theirs.get())
    with pytest.raises(ValueError):
        ours.release(object())


def test_accumulator_pool_resets_on_release():
    pool = PoolRegistry().pool_for(assemble(["id"]))
    acc = pool.get().withId(4)

    pool.release(acc)

    assert pool.get().partial == {}


@settings(max_examples=50, deadline=None)
@given(n=st.integers(min_value=0, max_value=60), extra=st.integers(min_value=0, max_value=20))
def test_pool_accounting_property(n, extra):
    pool = _counter_pool(max_size=n + extra)

    objs = [pool.get() for _ in range(n)]
    assert (pool.stats().misses, pool.stats().hits) == (n, 0)

    for obj in objs:
        pool.release(obj)
    again = [pool.get() for _ in range(n)]

    stats = pool.stats()
    assert stats.hits == n
    assert stats.hits + stats.misses == 2 * n
    assert {id(o) for o in again} == {id(o) for o in objs}


@settings(max_examples=50, deadline=None)
@given(max_size=st.integers(min_value=0, max_value=40), k=st.integers(min_value=0, max_value=40))
def test_capacity_bound_property(max_size, k):
    pool = _counter_pool(max_size=max_size)
    objs = [pool.get() for _ in range(max_size + k)]

    for obj in objs:
        pool.release(obj)

    assert pool.size() == max_size
