from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, Mapping, Optional

from ssot_browser.core.exceptions import LoadFailure
from ssot_browser.core.record_store import RecordStore
from ssot_browser.services.snapshot_cache import SnapshotCache
from ssot_browser.services.transport import DataSource

logger = logging.getLogger(__name__)


class LoadStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass
class TableState:
    """
    Current dataset and load status of one table.
    Every table owns its own status; loads of different tables never share one.
    """
    resource: str
    store: RecordStore
    status: LoadStatus = LoadStatus.IDLE
    error: Optional[str] = None
    from_cache: bool = False
    # Bumped on every successful (re)load; the UI uses it to notice new data
    generation: int = 0

    @property
    def is_loading(self) -> bool:
        return self.status is LoadStatus.LOADING


class TableService(Mapping[str, TableState]):
    """
    Loads, caches and replaces the dataset of each table.

    Implements the Mapping interface (resource -> TableState) so the UI can
    look tables up like a dict.
    """

    def __init__(
        self,
        data_source: DataSource,
        resources: Iterable[str],
        snapshot_cache: Optional[SnapshotCache] = None,
        cached_resources: Iterable[str] = (),
    ) -> None:
        self.data_source = data_source
        self.snapshot_cache = snapshot_cache
        self._cached_resources = set(cached_resources)
        self._tables: Dict[str, TableState] = {
            r: TableState(resource=r, store=RecordStore.empty(r)) for r in resources
        }

    # -------------------------------------------------------------------------
    # Mapping
    # -------------------------------------------------------------------------
    def __getitem__(self, resource: str) -> TableState:
        try:
            return self._tables[resource]
        except KeyError:
            raise KeyError(f"Unknown resource '{resource}'") from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._tables)

    def __len__(self) -> int:
        return len(self._tables)

    def store(self, resource: str) -> RecordStore:
        return self[resource].store

    def status(self, resource: str) -> LoadStatus:
        return self[resource].status

    def uses_cache(self, resource: str) -> bool:
        return self.snapshot_cache is not None and resource in self._cached_resources

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------
    async def load(self, resource: str) -> RecordStore:
        """
        Initial load. A cached snapshot, if present, short-circuits the fetch.
        """
        state = self[resource]

        if self.uses_cache(resource):
            cached = self.snapshot_cache.get(resource)
            if cached is not None:
                state.store = cached
                state.status = LoadStatus.READY
                state.error = None
                state.from_cache = True
                state.generation += 1
                logger.info(
                    "Dataset served from snapshot",
                    extra={"resource": resource, "n_records": len(cached)},
                )
                return cached

        return await self._fetch(state)

    async def reload(self, resource: str) -> RecordStore:
        """Full reload from the source of truth (after a mutation or explicit refresh)."""
        return await self._fetch(self[resource])

    async def load_many(self, resources: Iterable[str], *, reload: bool = False) -> Dict[str, Optional[LoadFailure]]:
        """
        Load independent tables concurrently on the current event loop.
        Returns resource -> LoadFailure (or None on success); each table
        settles its own status.
        """
        resources = list(resources)
        op = self.reload if reload else self.load
        results = await asyncio.gather(*(op(r) for r in resources), return_exceptions=True)

        outcome: Dict[str, Optional[LoadFailure]] = {}
        for resource, result in zip(resources, results):
            if isinstance(result, LoadFailure):
                outcome[resource] = result
            elif isinstance(result, BaseException):
                raise result
            else:
                outcome[resource] = None
        return outcome

    async def _fetch(self, state: TableState) -> RecordStore:
        resource = state.resource
        state.status = LoadStatus.LOADING
        state.error = None

        try:
            rows = await self.data_source.fetch_dataset(resource)
        except LoadFailure as e:
            # Previous dataset is kept; the UI shows the error instead of it
            state.status = LoadStatus.ERROR
            state.error = str(e)
            logger.error("Dataset load failed", extra={"resource": resource, "error": str(e)})
            raise
        except Exception as e:
            state.status = LoadStatus.ERROR
            state.error = str(e)
            logger.exception("Unexpected error while loading dataset", extra={"resource": resource})
            raise LoadFailure(resource, str(e)) from e

        store = RecordStore.from_rows(resource, rows)
        state.store = store
        state.status = LoadStatus.READY
        state.from_cache = False
        state.generation += 1

        if self.uses_cache(resource):
            self.snapshot_cache.put(store)

        logger.info(
            "Dataset loaded",
            extra={"resource": resource, "n_records": len(store), "n_columns": len(store.columns)},
        )
        return store
