from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine, List, Optional, TypeVar

from ssot_browser.config.model import ResourceConfig
from ssot_browser.core.edit_scope import EditScopeResolver, EditSession
from ssot_browser.core.filter_state import FilterState
from ssot_browser.core.record_store import RecordStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Drive a service coroutine from a (synchronous) Dash callback on its own event loop."""
    return asyncio.run(coro)


def filter_state_for(cfg: ResourceConfig, data: object, store: RecordStore) -> FilterState:
    """Rebuild a table's FilterState from its dcc.Store payload and bind it to the dataset."""
    raw = data if isinstance(data, dict) else None
    return FilterState.from_dict(cfg.facets, raw, store.records)


def try_parse_session(data: object, resolver: Optional[EditScopeResolver]) -> Optional[EditSession]:
    if not isinstance(data, dict) or not data or resolver is None:
        return None
    try:
        return EditSession.from_dict(data, resolver)
    except Exception:
        logger.exception("Invalid edit-session: %r", data)
        return None


def grid_columns(columns: List[str]) -> List[dict]:
    return [{"name": c, "id": c} for c in columns]
