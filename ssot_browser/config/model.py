from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from ssot_browser.core.edit_scope import EditScope, ScopeDescriptor
from ssot_browser.core.exceptions import ConfigError
from ssot_browser.core.filter_state import FacetSpec

RESOURCE_TYPES = ("targeting", "campaign", "mediaPlan", "radiaPlan")


@dataclass
class ResourceConfig:
    """
    Parsed config entry for a single table / resource type.
    """
    raw: Dict[str, Any]
    source_path: Path
    index: int

    @property
    def key(self) -> str:
        try:
            return self.raw["key"]
        except KeyError:
            raise ConfigError(f"Resource config {self.source_path} has no 'key'") from None

    @property
    def label(self) -> str:
        return self.raw.get("label", self.key)

    @property
    def path(self) -> str:
        return self.raw.get("path", self.key.lower())

    @property
    def update_by_key_path(self) -> str:
        return self.raw.get("update_by_key_path", "update")

    @property
    def update_by_compound_key_path(self) -> str:
        return self.raw.get("update_by_compound_key_path", "update-compound")

    @property
    def cache(self) -> bool:
        return bool(self.raw.get("cache", False))

    @property
    def facets(self) -> List[FacetSpec]:
        specs: List[FacetSpec] = []
        for raw in self.raw.get("facets", []):
            if "column" not in raw:
                raise ConfigError(f"Facet without 'column' in {self.source_path}")
            specs.append(
                FacetSpec(
                    name=raw.get("name", raw["column"].lower()),
                    column=raw["column"],
                    label=raw.get("label", ""),
                )
            )
        return specs

    @property
    def edit_scopes(self) -> List[ScopeDescriptor]:
        scopes: List[ScopeDescriptor] = []
        for raw in self.raw.get("edit_scopes", []):
            try:
                scope = EditScope(raw["scope"])
                governed = raw["governed_column"]
            except (KeyError, ValueError) as e:
                raise ConfigError(f"Invalid edit scope in {self.source_path}: {e}") from e

            payload = raw.get("payload_fields")
            scopes.append(
                ScopeDescriptor(
                    scope=scope,
                    governed_column=governed,
                    key_columns=tuple(raw.get("key_columns", [governed])),
                    read_only=frozenset(raw.get("read_only", [])),
                    payload_fields=tuple(payload) if payload is not None else None,
                    title=raw.get("title", ""),
                )
            )
        return scopes

    @classmethod
    def from_raw(cls, raw: Dict[str, Any], source_path: Path, index: int) -> ResourceConfig:
        return cls(raw=raw, source_path=source_path, index=index)


@dataclass
class GlobalConfig:
    ui_title: str = "Single Source Of Truth"
    subtitle: str = "Marketing operations data"
    base_url: str = "http://localhost:3000/api"
    timeout_seconds: float = 30.0
    data_source: str = "http"
    demo_data_dir: Optional[Path] = None
    cache_dir: Optional[Path] = None
    default_table: Optional[str] = None
    resources: List[ResourceConfig] = field(default_factory=list)

    def resource(self, key: str) -> ResourceConfig:
        for r in self.resources:
            if r.key == key:
                return r
        raise KeyError(f"Unknown resource '{key}'")
