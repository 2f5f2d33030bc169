from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import dash
from dash import Input, Output, State, dcc, exceptions

from ssot_browser.config.model import ResourceConfig
from ssot_browser.services.export_service import export_csv, export_filename
from ssot_browser.ui.callbacks.callbacks_utils import filter_state_for
from ssot_browser.ui.ids import IDs, table_id

if TYPE_CHECKING:
    from ssot_browser.ui.config import AppConfig

logger = logging.getLogger(__name__)


def _register_table_export(app: dash.Dash, ctx: AppConfig, cfg: ResourceConfig) -> None:
    resource = cfg.key

    @app.callback(
        Output(table_id(resource, IDs.Table.DOWNLOAD), "data"),
        Input(table_id(resource, IDs.Table.EXPORT_BTN), "n_clicks"),
        State(table_id(resource, IDs.Table.FILTER_STATE), "data"),
        prevent_initial_call=True,
    )
    def download_visible_rows(n_clicks, filter_data):
        if not n_clicks:
            raise exceptions.PreventUpdate

        store = ctx.tables.store(resource)
        visible = filter_state_for(cfg, filter_data, store).visible_records()
        text = export_csv(visible, columns=store.columns)
        return dcc.send_string(text, export_filename(resource))


def register_export_callbacks(app: dash.Dash, ctx: AppConfig) -> None:
    for cfg in ctx.resources.values():
        _register_table_export(app, ctx, cfg)
