from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import dash_bootstrap_components as dbc
from dash import dcc

from ssot_browser.ui.ids import IDs
from ssot_browser.ui.layout.build_edit_modal import build_edit_modal
from ssot_browser.ui.layout.build_navbar import build_navbar
from ssot_browser.ui.layout.build_table_panel import build_table_panel

if TYPE_CHECKING:
    from ssot_browser.ui.config import AppConfig


def build_layout(ctx: AppConfig) -> dbc.Container:
    navbar = build_navbar(ctx.global_config)

    tabs = [
        dcc.Tab(
            label=cfg.label,
            value=cfg.key,
            children=[build_table_panel(cfg)],
        )
        for cfg in ctx.resources.values()
    ]

    return dbc.Container(
        fluid=True,
        className="ssot-root",
        children=[
            navbar,
            build_edit_modal(),
            dcc.Tabs(
                id=IDs.Control.TABLE_TABS,
                value=_choose_default_table(ctx),
                children=tabs,
                className="mt-2",
            ),
        ],
    )


def _choose_default_table(ctx: AppConfig) -> Optional[str]:
    if not ctx.resources:
        return None
    default = ctx.global_config.default_table
    if default in ctx.resources:
        return default
    return next(iter(ctx.resources))
