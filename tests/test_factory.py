import asyncio

import pytest
from pydantic import BaseModel, field_validator

import recordsmith
from recordsmith.core.config import PoolConfig, RecordsmithConfig
from recordsmith.core.errors import AsyncUnsupported, EmptyFieldList, UnrecognizedShape, ValidationFailure
from recordsmith.core.factory import (
    BuilderFactory,
    builder,
    builder_async,
    clear_pools,
    create_async_factory,
    create_factory,
    get_detailed_pool_stats,
    get_pool_stats,
    reset_pool_stats,
)
from recordsmith.core.interfaces import UNSET
from recordsmith.core.registry import PoolRegistry, default_registry, set_default_registry


class Customer(BaseModel):
    email: str
    name: str = ""

    @field_validator("email")
    @classmethod
    def email_has_at(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("email must contain '@'")
        return value


class Vehicle:
    def __init__(self, data):
        self.make = data.get("make")
        self.year = data.get("year")


@pytest.fixture
def registry():
    fresh = PoolRegistry()
    previous = set_default_registry(fresh)
    yield fresh
    set_default_registry(previous)


def test_interface_scenario_omits_unassigned_fields(registry):
    make = create_factory(["id", "name"])

    assert make().withId(1).build() == {"id": 1}


def test_class_scenario_builds_instances(registry):
    make = create_factory(Vehicle)

    assert set(make.field_names) == {"make", "year"}
    car = make().withMake("Volvo").withYear(1999).build()
    assert isinstance(car, Vehicle)
    assert (car.make, car.year) == ("Volvo", 1999)


def test_schema_scenario_names_failing_field(registry):
    make = create_factory(Customer)

    with pytest.raises(ValidationFailure) as excinfo:
        make().withEmail("bad").build()

    assert "email" in excinfo.value.fields


def test_async_scenario_fails_before_any_accumulator(registry):
    constructed = []

    class Recorder:
        def __init__(self, data):
            constructed.append(data)
            self.x = 1

    with pytest.raises(AsyncUnsupported):
        create_async_factory(Recorder)
    with pytest.raises(AsyncUnsupported):
        create_async_factory(["id"])

    assert constructed == []
    assert get_detailed_pool_stats()["async"]["total_pools"] == 0
    assert get_detailed_pool_stats()["sync"]["total_pools"] == 0


def test_async_factory_builds_and_validates(registry):
    make = create_async_factory(Customer)

    customer = asyncio.run(make().withEmail("a@b.c").withName("Ada").build_async())
    assert isinstance(customer, Customer)

    with pytest.raises(ValidationFailure):
        asyncio.run(make().withEmail("nope").build_async())


def test_async_factory_with_explicit_fields(registry):
    make = create_async_factory(Customer, ["email"])

    acc = make()
    assert hasattr(acc, "withEmail")
    assert not hasattr(acc, "withName")


def test_factory_errors_surface_at_creation(registry):
    with pytest.raises(UnrecognizedShape):
        create_factory(42)
    with pytest.raises(EmptyFieldList):
        create_factory([])
    with pytest.raises(EmptyFieldList):
        create_factory(Vehicle, [])


def test_identical_configurations_share_a_pool(registry):
    first = create_factory(["a", "b"])
    second = create_factory(["b", "a", "a"])
    other = create_factory(["a"])

    assert first.pool is second.pool
    assert first.pool is not other.pool


def test_sync_and_async_pools_are_separate(registry):
    sync_factory = create_factory(Customer)
    async_factory = create_async_factory(Customer)

    sync_factory.release(sync_factory())
    async_factory.release(async_factory())

    assert sync_factory.pool is not async_factory.pool
    assert get_pool_stats() == {"sync": 1, "async": 1}


def test_annotated_class_gets_setters_for_declared_fields(registry):
    class Ticket:
        id: int
        name: str

        def __init__(self, data):
            for key, value in data.items():
                setattr(self, key, value)

    make = create_factory(Ticket)
    ticket = make().withId(7).withName("printer jam").build()

    assert set(make.field_names) == {"id", "name"}
    assert (ticket.id, ticket.name) == (7, "printer jam")


def test_async_accumulator_cannot_enter_sync_pool(registry):
    sync_factory = create_factory(Customer)
    async_factory = create_async_factory(Customer)

    with pytest.raises(ValueError):
        sync_factory.release(async_factory())
    with pytest.raises(ValueError):
        async_factory.release(sync_factory())

    assert get_pool_stats() == {"sync": 0, "async": 0}
    assert hasattr(sync_factory(), "build")


def test_release_recycles_accumulator(registry):
    make = create_factory(["id"])
    acc = make().withId(1)
    acc.note = "stale"

    assert make.release(acc) is True
    again = make()

    assert again is acc
    assert again.build() == {}
    assert not hasattr(again, "note")


def test_session_releases_on_exit(registry):
    make = create_factory(["id"])

    with make.session() as acc:
        result = acc.withId(9).build()

    assert result == {"id": 9}
    assert get_pool_stats()["sync"] == 1


def test_detailed_stats_report_hits_misses_and_utilization(registry):
    make = create_factory(["id"])
    accs = [make() for _ in range(4)]
    for acc in accs:
        make.release(acc)
    make()

    detail = get_detailed_pool_stats()["sync"]

    assert detail["total_pools"] == 1
    assert detail["total_hits"] == 1
    assert detail["total_misses"] == 4
    assert detail["total_created"] == 4
    assert detail["total_objects"] == 3
    assert detail["average_hit_rate"] == pytest.approx(0.2)
    assert detail["average_utilization"] == pytest.approx(3 / 1000)
    (entry,) = detail["pools"]
    assert entry["key"] == "listed:fields[id]"
    assert entry["size"] == 3


def test_clear_pools_keeps_counters(registry):
    make = create_factory(["id"])
    make.release(make())

    clear_pools()
    clear_pools()

    assert get_pool_stats() == {"sync": 0, "async": 0}
    assert get_detailed_pool_stats()["sync"]["total_misses"] == 1
    assert make.pool is create_factory(["id"]).pool


def test_reset_pool_stats_keeps_idle_accumulators(registry):
    make = create_factory(["id"])
    make.release(make())

    reset_pool_stats()
    reset_pool_stats()

    detail = get_detailed_pool_stats()["sync"]
    assert (detail["total_hits"], detail["total_misses"], detail["total_created"]) == (0, 0, 0)
    assert detail["average_hit_rate"] == 0.0
    assert get_pool_stats()["sync"] == 1


def test_empty_registry_stats(registry):
    detail = get_detailed_pool_stats()

    assert detail["sync"]["pools"] == []
    assert detail["async"]["average_utilization"] == 0.0
    assert get_pool_stats() == {"sync": 0, "async": 0}


def test_explicit_registry_is_isolated_from_default(registry):
    own = PoolRegistry(PoolConfig(max_size=2))
    make = create_factory(["id"], registry=own)
    accs = [make() for _ in range(3)]
    for acc in accs:
        make.release(acc)

    assert own.get_pool_stats()["sync"] == 2
    assert get_pool_stats()["sync"] == 0
    assert default_registry() is registry


def test_registry_accepts_top_level_config():
    reg = PoolRegistry(RecordsmithConfig(pool=PoolConfig(max_size=5, async_max_size=7)))

    assert reg.pool_for(recordsmith.assemble(["a"])).max_size == 5
    assert reg.async_pool_for(recordsmith.assemble(Customer)).max_size == 7


def test_registry_rejects_invalid_pool_config():
    with pytest.raises(ValueError):
        PoolRegistry(PoolConfig(max_size=-1))


def test_builder_aliases_match_factories(registry):
    assert isinstance(builder(["id"]), BuilderFactory)
    assert builder(["id"]).pool is create_factory(["id"]).pool
    assert builder_async(Customer).pool is create_async_factory(Customer).pool


def test_top_level_exports():
    assert recordsmith.create_factory is create_factory
    assert "create_async_factory" in recordsmith.__all__
    assert recordsmith.UNSET is UNSET
    assert recordsmith.__version__
