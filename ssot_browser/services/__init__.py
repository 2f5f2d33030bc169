"""
Service layer: remote transport, snapshot caching, per-table loading,
mutation submission and export
"""

from .mutation_service import MutationCoordinator, build_payload
from .snapshot_cache import SnapshotCache
from .table_service import LoadStatus, TableService, TableState
from .transport import DataSource, HttpDataSource, InMemoryDataSource

__all__ = [
    "MutationCoordinator",
    "build_payload",
    "SnapshotCache",
    "LoadStatus",
    "TableService",
    "TableState",
    "DataSource",
    "HttpDataSource",
    "InMemoryDataSource",
]
