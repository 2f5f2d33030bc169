from __future__ import annotations

import pytest

from ssot_browser.core.record_store import RecordStore
from ssot_browser.services.snapshot_cache import SnapshotCache
from ssot_browser.services.storage import InMemoryStorage, LocalFileSystemStorage


@pytest.fixture(params=["memory", "local"])
def storage(request, tmp_path):
    if request.param == "memory":
        return InMemoryStorage()
    return LocalFileSystemStorage(tmp_path / "cache")


def test_snapshot_put_then_get(storage):
    cache = SnapshotCache(storage)
    cache.put(RecordStore.from_rows("campaign", [{"RADIA_ID": "R-1", "STATUS": "Live"}]))

    store = cache.get("campaign")

    assert store.resource == "campaign"
    assert store.columns == ["RADIA_ID", "STATUS"]
    assert store.to_rows() == [{"RADIA_ID": "R-1", "STATUS": "Live"}]
    assert cache.cached_resources() == ["campaign"]


def test_missing_snapshot_is_a_miss(storage):
    assert SnapshotCache(storage).get("radiaPlan") is None


def test_invalidate_removes_snapshot(storage):
    cache = SnapshotCache(storage)
    cache.put(RecordStore.from_rows("campaign", [{"RADIA_ID": "R-1"}]))

    cache.invalidate("campaign")
    cache.invalidate("campaign")

    assert cache.get("campaign") is None
    assert cache.cached_resources() == []


@pytest.mark.parametrize("payload", [b"{not json", b'{"data": []}', b"[1, 2]"])
def test_unusable_snapshot_is_a_miss(storage, payload):
    storage.write_bytes("snapshots/campaign.json", payload)

    assert SnapshotCache(storage).get("campaign") is None


def test_local_storage_refuses_paths_outside_root(tmp_path):
    storage = LocalFileSystemStorage(tmp_path / "cache")

    with pytest.raises(ValueError, match="Access denied"):
        storage.write_bytes("../escape.json", b"{}")


def test_local_storage_leaves_no_temp_files(tmp_path):
    storage = LocalFileSystemStorage(tmp_path / "cache")

    storage.write_bytes("snapshots/campaign.json", b"[]")

    assert storage.list_files("snapshots") == ["snapshots/campaign.json"]
    assert storage.read_bytes("snapshots/campaign.json") == b"[]"
