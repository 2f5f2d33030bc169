from __future__ import annotations

import copy
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import httpx

from ssot_browser.config.model import ResourceConfig
from ssot_browser.core.edit_scope import EditScope
from ssot_browser.core.exceptions import LoadFailure, TransportError

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


class DataSource(ABC):
    """
    Remote source of truth for every table.

    - fetch_dataset raises LoadFailure on any non-success
    - update_* return a success flag; transport problems raise TransportError
    """

    @abstractmethod
    async def fetch_dataset(self, resource: str) -> List[Row]:
        pass

    @abstractmethod
    async def update_by_key(self, resource: str, payload: Mapping[str, str]) -> bool:
        pass

    @abstractmethod
    async def update_by_compound_key(self, resource: str, payload: Mapping[str, str]) -> bool:
        pass


def _rows_from_body(resource: str, body: Any) -> List[Row]:
    # Backend answers {"data": [...]}; a bare list is accepted too
    rows = body.get("data") if isinstance(body, dict) else body
    if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
        raise LoadFailure(resource, "unexpected response payload")
    return rows


class HttpDataSource(DataSource):
    """
    httpx-based implementation.

        GET {base_url}/{path}                                  -> {"data": [...]}
        PUT {base_url}/{path}/{update_by_key_path}             <- payload
        PUT {base_url}/{path}/{update_by_compound_key_path}    <- payload

    A client is opened per call; every Dash callback runs its own event loop.
    """

    def __init__(
        self,
        base_url: str,
        resources: Sequence[ResourceConfig],
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._resources: Dict[str, ResourceConfig] = {r.key: r for r in resources}
        self._client_kwargs: Dict[str, Any] = {"timeout": httpx.Timeout(timeout_seconds)}
        if transport is not None:
            self._client_kwargs["transport"] = transport

    def _resource(self, resource: str) -> ResourceConfig:
        try:
            return self._resources[resource]
        except KeyError:
            raise KeyError(f"Unknown resource '{resource}'") from None

    def _url(self, *parts: str) -> str:
        return "/".join([self.base_url, *(p.strip("/") for p in parts)])

    async def fetch_dataset(self, resource: str) -> List[Row]:
        url = self._url(self._resource(resource).path)
        logger.info("Fetching dataset", extra={"resource": resource, "url": url})

        try:
            async with httpx.AsyncClient(**self._client_kwargs) as client:
                response = await client.get(url)
        except httpx.HTTPError as e:
            raise LoadFailure(resource, f"transport error: {e}") from e

        if not response.is_success:
            raise LoadFailure(
                resource,
                f"HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise LoadFailure(resource, "response is not valid JSON") from e

        return _rows_from_body(resource, body)

    async def _put(self, resource: str, sub_path: str, payload: Mapping[str, str]) -> bool:
        url = self._url(self._resource(resource).path, sub_path)
        logger.info(
            "Submitting update",
            extra={"resource": resource, "url": url, "fields": sorted(payload)},
        )

        try:
            async with httpx.AsyncClient(**self._client_kwargs) as client:
                response = await client.put(url, json=dict(payload))
        except httpx.HTTPError as e:
            raise TransportError(f"{resource}: {e}") from e

        if not response.is_success:
            logger.warning(
                "Update rejected",
                extra={"resource": resource, "status_code": response.status_code},
            )
            return False

        # Some endpoints answer 200 with {"success": false}
        try:
            body = response.json()
        except ValueError:
            return True
        if isinstance(body, dict) and body.get("success") is False:
            return False
        return True

    async def update_by_key(self, resource: str, payload: Mapping[str, str]) -> bool:
        return await self._put(resource, self._resource(resource).update_by_key_path, payload)

    async def update_by_compound_key(self, resource: str, payload: Mapping[str, str]) -> bool:
        return await self._put(
            resource, self._resource(resource).update_by_compound_key_path, payload
        )


class InMemoryDataSource(DataSource):
    """
    Dict-backed source of truth. Backs the demo mode and the test-suite.

    Updates locate records by the key columns configured for each
    (resource, scope) and apply the remaining payload fields; unknown
    columns in the payload are ignored.
    """

    def __init__(
        self,
        tables: Mapping[str, Sequence[Row]],
        keys: Mapping[Tuple[str, EditScope], Tuple[str, ...]],
    ) -> None:
        self._tables: Dict[str, List[Row]] = {k: [dict(r) for r in v] for k, v in tables.items()}
        self._keys = dict(keys)
        self.calls: List[Tuple[str, str, Dict[str, str]]] = []

    @classmethod
    def from_config(
        cls,
        resources: Sequence[ResourceConfig],
        data_dir: Optional[Path] = None,
    ) -> InMemoryDataSource:
        """Build from resource configs; tables are read from `<data_dir>/<key>.json` when present."""
        tables: Dict[str, List[Row]] = {}
        keys: Dict[Tuple[str, EditScope], Tuple[str, ...]] = {}
        for res in resources:
            tables[res.key] = []
            if data_dir is not None:
                path = Path(data_dir) / f"{res.key}.json"
                if path.is_file():
                    with path.open() as f:
                        tables[res.key] = _rows_from_body(res.key, json.load(f))
            for d in res.edit_scopes:
                keys[(res.key, d.scope)] = d.key_columns
        return cls(tables, keys)

    def table(self, resource: str) -> List[Row]:
        return copy.deepcopy(self._tables.get(resource, []))

    async def fetch_dataset(self, resource: str) -> List[Row]:
        if resource not in self._tables:
            raise LoadFailure(resource, "unknown resource", status_code=404)
        return copy.deepcopy(self._tables[resource])

    def _apply(self, resource: str, scope: EditScope, payload: Mapping[str, str], unique: bool) -> bool:
        self.calls.append((resource, scope.value, dict(payload)))

        key_columns = self._keys.get((resource, scope))
        if not key_columns or any(k not in payload for k in key_columns):
            return False

        rows = self._tables.get(resource, [])
        hits = [r for r in rows if all(str(r.get(k, "")) == payload[k] for k in key_columns)]
        if not hits or (unique and len(hits) != 1):
            return False

        for row in hits:
            for column, value in payload.items():
                if column not in key_columns and column in row:
                    row[column] = value
        return True

    async def update_by_key(self, resource: str, payload: Mapping[str, str]) -> bool:
        return self._apply(resource, EditScope.BY_KEY, payload, unique=False)

    async def update_by_compound_key(self, resource: str, payload: Mapping[str, str]) -> bool:
        return self._apply(resource, EditScope.BY_COMPOUND_KEY, payload, unique=True)
