from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from ssot_browser.core.record_store import RecordStore
from ssot_browser.services.storage import StorageBackend

logger = logging.getLogger(__name__)

SNAPSHOT_PREFIX = "snapshots"


class SnapshotCache:
    """
    Local copy of previously fetched datasets, keyed by resource type.

    A present snapshot replaces the remote fetch entirely; reloads after a
    mutation bypass it and overwrite it.
    """

    def __init__(self, storage: StorageBackend):
        self.storage = storage

    @staticmethod
    def _path(resource: str) -> str:
        return f"{SNAPSHOT_PREFIX}/{resource}.json"

    def get(self, resource: str) -> Optional[RecordStore]:
        path = self._path(resource)
        if not self.storage.exists(path):
            return None
        try:
            rows = json.loads(self.storage.read_bytes(path))
        except (OSError, ValueError):
            # A corrupt snapshot is treated as a miss; the fetch rewrites it
            logger.exception("Unreadable snapshot, ignoring", extra={"resource": resource})
            return None
        if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
            logger.warning("Snapshot is not a list of rows, ignoring", extra={"resource": resource})
            return None
        return RecordStore.from_rows(resource, rows)

    def put(self, store: RecordStore) -> None:
        data = json.dumps(store.to_rows()).encode("utf-8")
        self.storage.write_bytes(self._path(store.resource), data)
        logger.debug(
            "Snapshot written",
            extra={"resource": store.resource, "n_records": len(store)},
        )

    def invalidate(self, resource: str) -> None:
        self.storage.delete(self._path(resource))

    def cached_resources(self) -> list[str]:
        files = self.storage.list_files(SNAPSHOT_PREFIX, ".json")
        return sorted(Path(f).stem for f in files)
