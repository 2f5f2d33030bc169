from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import dash
from dash import Input, Output, State

from ssot_browser.config.model import ResourceConfig
from ssot_browser.ui.callbacks.callbacks_utils import filter_state_for, grid_columns
from ssot_browser.ui.ids import IDs, facet_id, table_id

if TYPE_CHECKING:
    from ssot_browser.ui.config import AppConfig

logger = logging.getLogger(__name__)


def _register_table_filters(app: dash.Dash, ctx: AppConfig, cfg: ResourceConfig) -> None:
    resource = cfg.key
    specs = cfg.facets

    select_ids = {facet_id(resource, f.name, IDs.Facet.SELECT): f.name for f in specs}
    all_ids = {facet_id(resource, f.name, IDs.Facet.ALL_BTN): f.name for f in specs}
    none_ids = {facet_id(resource, f.name, IDs.Facet.NONE_BTN): f.name for f in specs}
    reset_id = table_id(resource, IDs.Table.RESET_FILTERS_BTN)

    outputs = [Output(table_id(resource, IDs.Table.FILTER_STATE), "data")]
    for f in specs:
        outputs.append(Output(facet_id(resource, f.name, IDs.Facet.SELECT), "options"))
        outputs.append(Output(facet_id(resource, f.name, IDs.Facet.SELECT), "value"))
    outputs += [
        Output(table_id(resource, IDs.Table.GRID), "data"),
        Output(table_id(resource, IDs.Table.GRID), "columns"),
        Output(table_id(resource, IDs.Table.ROW_COUNT), "children"),
    ]

    inputs = [Input(table_id(resource, IDs.Table.DATA_VERSION), "data")]
    inputs += [Input(cid, "value") for cid in select_ids]
    inputs += [Input(cid, "n_clicks") for cid in all_ids]
    inputs += [Input(cid, "n_clicks") for cid in none_ids]
    inputs.append(Input(reset_id, "n_clicks"))

    # Facet dropdown values are both inputs and outputs: the options of every
    # facet depend on every other facet, so one callback owns the whole table.
    @app.callback(
        *outputs,
        *inputs,
        State(table_id(resource, IDs.Table.FILTER_STATE), "data"),
    )
    def update_table_filters(_version, *args):
        n = len(specs)
        values = args[:n]
        stored = args[-1]

        store = ctx.tables.store(resource)
        state = filter_state_for(cfg, stored, store)

        trigger = dash.ctx.triggered_id
        if trigger in select_ids:
            name = select_ids[trigger]
            idx = [f.name for f in specs].index(name)
            state.set_selection(name, values[idx] or [])
        elif trigger in all_ids:
            state.select_all(all_ids[trigger])
        elif trigger in none_ids:
            state.deselect_all(none_ids[trigger])
        elif trigger == reset_id:
            state.reset()

        visible = state.visible_records()

        result: list = [state.to_dict()]
        for facet in state.facets:
            result.append([{"label": o, "value": o} for o in facet.options])
            result.append(list(facet.selected))
        result += [
            visible,
            grid_columns(store.columns),
            f"{len(visible)} of {len(store)} rows",
        ]
        return tuple(result)


def register_filter_callbacks(app: dash.Dash, ctx: AppConfig) -> None:
    for cfg in ctx.resources.values():
        _register_table_filters(app, ctx, cfg)
