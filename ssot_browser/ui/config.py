from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from ssot_browser.config.model import GlobalConfig, ResourceConfig
from ssot_browser.core.edit_scope import EditScopeResolver
from ssot_browser.services.mutation_service import MutationCoordinator
from ssot_browser.services.table_service import TableService


@dataclass
class AppConfig:
    """
    Shared state for the Dash app: config, loaded tables, edit-scope
    resolvers and the mutation coordinator. Passed into layout + callback
    registration functions instead of using module-level globals.
    """
    config_root: Path
    global_config: GlobalConfig
    resources: Dict[str, ResourceConfig] = field(default_factory=dict)
    resolvers: Dict[str, EditScopeResolver] = field(default_factory=dict)

    tables: Optional[TableService] = None
    coordinator: Optional[MutationCoordinator] = None

    def validate(self) -> None:
        """Ensure all required services are attached before the app starts."""
        if self.tables is None:
            raise RuntimeError("AppConfig.tables must be initialized.")
        if self.coordinator is None:
            raise RuntimeError("AppConfig.coordinator must be initialized.")
        if not self.resources:
            raise RuntimeError("AppConfig.resources is empty; nothing to show.")
