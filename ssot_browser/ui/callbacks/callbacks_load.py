from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import dash
import dash_bootstrap_components as dbc
from dash import Input, Output, html

from ssot_browser.config.model import ResourceConfig
from ssot_browser.core.exceptions import LoadFailure
from ssot_browser.ui.callbacks.callbacks_utils import run_async
from ssot_browser.ui.ids import IDs, table_id
from ssot_browser.validation.resource_validation import warn_on_invalid_resource

if TYPE_CHECKING:
    from ssot_browser.ui.config import AppConfig

logger = logging.getLogger(__name__)

HIDDEN = {"display": "none"}


def _register_table_load(app: dash.Dash, ctx: AppConfig, cfg: ResourceConfig) -> None:
    resource = cfg.key

    @app.callback(
        Output(table_id(resource, IDs.Table.DATA_VERSION), "data"),
        Output(table_id(resource, IDs.Table.ERROR), "children"),
        Output(table_id(resource, IDs.Table.GRID_WRAPPER), "style"),
        Input(table_id(resource, IDs.Table.REFRESH_BTN), "n_clicks"),
    )
    def load_table(n_clicks):
        """
        Page load: cached snapshot or fetch. Refresh button: always fetch.
        A failure replaces the grid with the error message.
        """
        tables = ctx.tables
        try:
            if n_clicks:
                run_async(tables.reload(resource))
            else:
                run_async(tables.load(resource))
        except LoadFailure as e:
            alert = dbc.Alert(
                [html.Strong("Could not load data. "), e.message],
                color="danger",
                className="m-2",
            )
            return dash.no_update, alert, HIDDEN

        state = tables[resource]
        warn_on_invalid_resource(cfg, state.store, logger)
        return state.generation, None, {}


def register_load_callbacks(app: dash.Dash, ctx: AppConfig) -> None:
    for cfg in ctx.resources.values():
        _register_table_load(app, ctx, cfg)
