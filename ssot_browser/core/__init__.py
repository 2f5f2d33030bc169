"""
Core domain layer: record store and schema inference, the facet filter
engine, and edit-scope resolution
"""

from .record_store import Record, RecordStore, infer_columns
from .filter_state import Facet, FacetSpec, FilterState
from .edit_scope import EditScope, EditScopeResolver, EditSession, ScopeDescriptor

__all__ = [
    "Record",
    "RecordStore",
    "infer_columns",
    "Facet",
    "FacetSpec",
    "FilterState",
    "EditScope",
    "EditScopeResolver",
    "EditSession",
    "ScopeDescriptor",
]
