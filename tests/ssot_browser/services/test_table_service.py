from __future__ import annotations

import asyncio
import json

import pytest

from ssot_browser.core.exceptions import LoadFailure
from ssot_browser.core.record_store import RecordStore
from ssot_browser.services.snapshot_cache import SnapshotCache
from ssot_browser.services.storage import InMemoryStorage
from ssot_browser.services.table_service import LoadStatus, TableService
from ssot_browser.services.transport import InMemoryDataSource


class CountingSource(InMemoryDataSource):
    def __init__(self, tables, failing=()):
        super().__init__(tables, {})
        self.fetches = []
        self.failing = set(failing)

    async def fetch_dataset(self, resource):
        self.fetches.append(resource)
        if resource in self.failing:
            raise LoadFailure(resource, "HTTP 500", status_code=500)
        return await super().fetch_dataset(resource)


class ExplodingSource(InMemoryDataSource):
    async def fetch_dataset(self, resource):
        raise RuntimeError("boom")


def _tables():
    return {
        "campaign": [{"RADIA_ID": "R-1", "STATUS": "Live"}, {"RADIA_ID": "R-2", "STATUS": "Planned"}],
        "radiaPlan": [{"AGENCY_NAME": "North", "RATE": 32}],
    }


def test_initial_state_is_idle_and_empty():
    service = TableService(CountingSource(_tables()), ["campaign", "radiaPlan"])

    assert set(service) == {"campaign", "radiaPlan"}
    assert service.status("campaign") is LoadStatus.IDLE
    assert len(service.store("campaign")) == 0


def test_load_replaces_dataset_and_marks_ready():
    service = TableService(CountingSource(_tables()), ["campaign"])

    store = asyncio.run(service.load("campaign"))

    assert store.columns == ["RADIA_ID", "STATUS"]
    assert service.status("campaign") is LoadStatus.READY
    assert service["campaign"].generation == 1
    assert not service["campaign"].from_cache


def test_failed_reload_keeps_previous_dataset_and_records_error():
    source = CountingSource(_tables())
    service = TableService(source, ["campaign"])
    first = asyncio.run(service.load("campaign"))

    source.failing.add("campaign")
    with pytest.raises(LoadFailure, match="Failed to load campaign data: HTTP 500"):
        asyncio.run(service.reload("campaign"))

    state = service["campaign"]
    assert state.status is LoadStatus.ERROR
    assert "HTTP 500" in state.error
    assert state.store is first
    assert state.generation == 1


def test_unexpected_errors_are_wrapped_as_load_failure():
    service = TableService(ExplodingSource(_tables(), {}), ["campaign"])

    with pytest.raises(LoadFailure) as excinfo:
        asyncio.run(service.load("campaign"))

    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert service.status("campaign") is LoadStatus.ERROR


def test_tables_have_independent_status():
    source = CountingSource(_tables(), failing={"radiaPlan"})
    service = TableService(source, ["campaign", "radiaPlan"])

    outcome = asyncio.run(service.load_many(["campaign", "radiaPlan"]))

    assert outcome["campaign"] is None
    assert isinstance(outcome["radiaPlan"], LoadFailure)
    assert service.status("campaign") is LoadStatus.READY
    assert service.status("radiaPlan") is LoadStatus.ERROR


def test_snapshot_short_circuits_initial_load():
    source = CountingSource(_tables())
    cache = SnapshotCache(InMemoryStorage())
    cache.put(RecordStore.from_rows("campaign", [{"RADIA_ID": "R-CACHED"}]))
    service = TableService(source, ["campaign"], snapshot_cache=cache, cached_resources=["campaign"])

    store = asyncio.run(service.load("campaign"))

    assert source.fetches == []
    assert [r["RADIA_ID"] for r in store] == ["R-CACHED"]
    assert service["campaign"].from_cache


def test_reload_bypasses_and_rewrites_snapshot():
    storage = InMemoryStorage()
    cache = SnapshotCache(storage)
    cache.put(RecordStore.from_rows("campaign", [{"RADIA_ID": "R-CACHED"}]))
    source = CountingSource(_tables())
    service = TableService(source, ["campaign"], snapshot_cache=cache, cached_resources=["campaign"])

    asyncio.run(service.reload("campaign"))

    assert source.fetches == ["campaign"]
    assert [r["RADIA_ID"] for r in json.loads(storage.read_bytes("snapshots/campaign.json"))] == ["R-1", "R-2"]


def test_snapshot_with_non_record_rows_falls_through_to_fetch():
    storage = InMemoryStorage()
    storage.write_bytes("snapshots/campaign.json", b"[1, 2]")
    source = CountingSource(_tables())
    service = TableService(
        source, ["campaign"], snapshot_cache=SnapshotCache(storage), cached_resources=["campaign"]
    )

    store = asyncio.run(service.load("campaign"))

    assert source.fetches == ["campaign"]
    assert service.status("campaign") is LoadStatus.READY
    assert not service["campaign"].from_cache
    assert [r["RADIA_ID"] for r in store] == ["R-1", "R-2"]
    assert [r["RADIA_ID"] for r in json.loads(storage.read_bytes("snapshots/campaign.json"))] == ["R-1", "R-2"]


def test_first_fetch_populates_snapshot_for_cached_resources_only():
    storage = InMemoryStorage()
    service = TableService(
        CountingSource(_tables()),
        ["campaign", "radiaPlan"],
        snapshot_cache=SnapshotCache(storage),
        cached_resources=["campaign"],
    )

    asyncio.run(service.load_many(["campaign", "radiaPlan"]))

    assert storage.list_files("snapshots") == ["snapshots/campaign.json"]
    assert not service.uses_cache("radiaPlan")


def test_unknown_resource_raises_key_error():
    service = TableService(CountingSource(_tables()), ["campaign"])

    with pytest.raises(KeyError, match="Unknown resource"):
        service.status("targeting")
