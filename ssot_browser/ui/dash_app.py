from __future__ import annotations

import logging
from pathlib import Path

import dash_bootstrap_components as dbc
from dash import Dash

from ssot_browser.config.loader import load_global_config
from ssot_browser.config.model import GlobalConfig
from ssot_browser.core.edit_scope import EditScopeResolver
from ssot_browser.services.mutation_service import MutationCoordinator
from ssot_browser.services.snapshot_cache import SnapshotCache
from ssot_browser.services.storage import InMemoryStorage, LocalFileSystemStorage, StorageBackend
from ssot_browser.services.table_service import TableService
from ssot_browser.services.transport import DataSource, HttpDataSource, InMemoryDataSource
from ssot_browser.ui.callbacks import (
    register_edit_callbacks,
    register_export_callbacks,
    register_filter_callbacks,
    register_load_callbacks,
)
from ssot_browser.ui.config import AppConfig
from ssot_browser.ui.layout.build_layout import build_layout

logger = logging.getLogger(__name__)


def _build_data_source(global_config: GlobalConfig) -> DataSource:
    if global_config.data_source == "demo":
        logger.info(
            "Using in-memory demo data source",
            extra={"demo_data_dir": str(global_config.demo_data_dir)},
        )
        return InMemoryDataSource.from_config(global_config.resources, global_config.demo_data_dir)

    return HttpDataSource(
        base_url=global_config.base_url,
        resources=global_config.resources,
        timeout_seconds=global_config.timeout_seconds,
    )


def _build_storage(global_config: GlobalConfig) -> StorageBackend:
    if global_config.cache_dir is not None:
        # LocalFileSystemStorage creates the directory if needed
        return LocalFileSystemStorage(global_config.cache_dir)
    return InMemoryStorage()


def build_app_config(config_root: Path | str = Path("config")) -> AppConfig:
    config_root = Path(config_root)

    # 1) Load Config
    global_config = load_global_config(config_root)
    if not global_config.resources:
        raise RuntimeError(f"No resource configs were loaded from {config_root}")

    # 2) Service Layer
    data_source = _build_data_source(global_config)
    tables = TableService(
        data_source,
        resources=[r.key for r in global_config.resources],
        snapshot_cache=SnapshotCache(_build_storage(global_config)),
        cached_resources=[r.key for r in global_config.resources if r.cache],
    )
    coordinator = MutationCoordinator(data_source, tables)

    # 3) Edit scope dispatch tables
    resolvers = {
        r.key: EditScopeResolver(r.key, r.edit_scopes) for r in global_config.resources
    }

    ctx = AppConfig(
        config_root=config_root,
        global_config=global_config,
        resources={r.key: r for r in global_config.resources},
        resolvers=resolvers,
        tables=tables,
        coordinator=coordinator,
    )
    ctx.validate()
    return ctx


def create_dash_app(config_root: Path | str = Path("config")) -> Dash:
    ctx = build_app_config(config_root)

    # Resolve the assets folder so styles.css is found regardless of cwd
    assets_path = Path(__file__).parent / "assets"

    app = Dash(
        __name__,
        external_stylesheets=[dbc.themes.FLATLY],
        assets_folder=str(assets_path),
    )
    app.title = ctx.global_config.ui_title

    app.layout = build_layout(ctx)

    # Register callbacks
    register_load_callbacks(app, ctx)
    register_filter_callbacks(app, ctx)
    register_edit_callbacks(app, ctx)
    register_export_callbacks(app, ctx)

    return app
