from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from ssot_browser.core.exceptions import ConfigError, EditSessionError, ReadOnlyFieldError
from ssot_browser.core.record_store import Record

logger = logging.getLogger(__name__)


class EditScope(str, Enum):
    """
    Governance mode of an edit.

    - BY_KEY: the remote update locates records by a single identifying column
    - BY_COMPOUND_KEY: the remote update locates one record by two identifying columns
    """
    BY_KEY = "BY_KEY"
    BY_COMPOUND_KEY = "BY_COMPOUND_KEY"


@dataclass(frozen=True)
class ScopeDescriptor:
    """
    Everything a scope needs to open, render and submit an edit.

    :param scope: the scope tag
    :param governed_column: clicking a cell in this column opens the scope
    :param key_columns: business key; one column for BY_KEY, two for BY_COMPOUND_KEY
    :param read_only: columns shown but not editable (key columns are always added)
    :param payload_fields: fixed whitelist sent on submit; None sends the full working copy
    :param title: dialog title
    """
    scope: EditScope
    governed_column: str
    key_columns: Tuple[str, ...]
    read_only: FrozenSet[str] = frozenset()
    payload_fields: Optional[Tuple[str, ...]] = None
    title: str = ""

    def __post_init__(self) -> None:
        expected = 1 if self.scope is EditScope.BY_KEY else 2
        if len(self.key_columns) != expected:
            raise ConfigError(
                f"{self.scope.value} scope on '{self.governed_column}' needs "
                f"{expected} key column(s), got {list(self.key_columns)}"
            )
        if self.scope is EditScope.BY_KEY and not self.payload_fields:
            raise ConfigError(
                f"BY_KEY scope on '{self.governed_column}' needs a payload_fields whitelist"
            )
        if self.payload_fields is not None:
            missing = [k for k in self.key_columns if k not in self.payload_fields]
            if missing:
                raise ConfigError(
                    f"payload_fields of scope on '{self.governed_column}' must contain "
                    f"the key column(s) {missing}"
                )
        # Identifying columns are never editable
        object.__setattr__(self, "read_only", frozenset(self.read_only) | frozenset(self.key_columns))

    @property
    def display_title(self) -> str:
        return self.title or f"Edit {self.governed_column}"

    def is_editable(self, column: str) -> bool:
        if column in self.read_only:
            return False
        if self.payload_fields is not None and column not in self.payload_fields:
            return False
        return True

    def editable_columns(self, columns: Iterable[str]) -> List[str]:
        return [c for c in columns if self.is_editable(c)]


@dataclass
class EditSession:
    """
    Transient, single-record, single-scope edit buffer.

    `original` is the record as it was clicked (never mutated);
    `working` is a copy the user edits.
    """
    resource: str
    descriptor: ScopeDescriptor
    original: Record
    working: Record = field(default_factory=dict)
    closed: bool = False

    def __post_init__(self) -> None:
        if not self.working:
            self.working = dict(self.original)

    @property
    def scope(self) -> EditScope:
        return self.descriptor.scope

    @property
    def key(self) -> Dict[str, str]:
        return {k: self.original.get(k, "") for k in self.descriptor.key_columns}

    def is_editable(self, column: str) -> bool:
        return self.descriptor.is_editable(column)

    def set_value(self, column: str, value: Any) -> None:
        if column not in self.working:
            raise EditSessionError(f"Unknown column '{column}' for {self.resource}")
        if not self.is_editable(column):
            raise ReadOnlyFieldError(column, self.scope.value)
        self.working[column] = "" if value is None else str(value)

    def apply_edits(self, edits: Mapping[str, Any]) -> None:
        """Apply form values; read-only columns are silently left untouched."""
        for column, value in edits.items():
            if column in self.working and self.is_editable(column):
                self.working[column] = "" if value is None else str(value)

    def changed_columns(self) -> List[str]:
        return [c for c, v in self.working.items() if self.original.get(c) != v]

    def close(self) -> None:
        self.closed = True

    def cancel(self) -> None:
        """Discard the working copy; nothing is sent and the dataset is untouched."""
        self.working = dict(self.original)
        self.closed = True

    # -------------------------------------------------------------------------
    # Serialisation (dcc.Store)
    # -------------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "resource": self.resource,
            "governed_column": self.descriptor.governed_column,
            "original": dict(self.original),
            "working": dict(self.working),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], resolver: EditScopeResolver) -> EditSession:
        descriptor = resolver.descriptor_for(data["governed_column"])
        if descriptor is None:
            raise EditSessionError(
                f"Column '{data['governed_column']}' does not govern an edit scope"
            )
        return cls(
            resource=data["resource"],
            descriptor=descriptor,
            original=dict(data["original"]),
            working=dict(data["working"]),
        )


class EditScopeResolver:
    """
    Dispatch table: governed column -> scope descriptor, for one table.

    `resolve` turns a click into an EditSession (or None for an ungoverned column).
    """

    def __init__(self, resource: str, descriptors: Iterable[ScopeDescriptor]) -> None:
        self.resource = resource
        self._by_column: Dict[str, ScopeDescriptor] = {}
        for d in descriptors:
            if d.governed_column in self._by_column:
                raise ConfigError(
                    f"Column '{d.governed_column}' governs more than one scope in '{resource}'"
                )
            self._by_column[d.governed_column] = d

    @property
    def governed_columns(self) -> List[str]:
        return list(self._by_column)

    @property
    def descriptors(self) -> List[ScopeDescriptor]:
        return list(self._by_column.values())

    def descriptor_for(self, column_id: str) -> Optional[ScopeDescriptor]:
        return self._by_column.get(column_id)

    def resolve(self, column_id: str, record: Mapping[str, str]) -> Optional[EditSession]:
        descriptor = self._by_column.get(column_id)
        if descriptor is None:
            return None

        logger.info(
            "Opening edit session",
            extra={
                "resource": self.resource,
                "scope": descriptor.scope.value,
                "governed_column": column_id,
            },
        )
        return EditSession(resource=self.resource, descriptor=descriptor, original=dict(record))
