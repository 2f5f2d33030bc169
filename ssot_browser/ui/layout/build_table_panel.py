from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import dash_table, dcc, html

from ssot_browser.config.model import ResourceConfig
from ssot_browser.ui.ids import IDs, table_id
from ssot_browser.ui.layout.build_filter_panel import build_filter_panel

FONT_FAMILY = 'system-ui, -apple-system, BlinkMacSystemFont, "SF Pro Text", "Segoe UI", sans-serif'


def governed_column_styles(cfg: ResourceConfig) -> list[dict]:
    """Highlight the columns whose cells open an edit dialog."""
    return [
        {
            "if": {"column_id": d.governed_column},
            "cursor": "pointer",
            "color": "#1d4ed8",
            "textDecoration": "underline",
        }
        for d in cfg.edit_scopes
    ]


def build_grid(cfg: ResourceConfig) -> dash_table.DataTable:
    return dash_table.DataTable(
        id=table_id(cfg.key, IDs.Table.GRID),
        data=[],
        columns=[],

        # ---- FONT + LOOK & FEEL ----
        style_table={"overflowX": "auto"},
        style_cell={
            "fontFamily": FONT_FAMILY,
            "fontSize": "12px",
            "padding": "6px 8px",
            "textAlign": "left",
            "minWidth": "100px",
            "maxWidth": "320px",
            "whiteSpace": "normal",
            "height": "auto",
        },
        style_header={
            "fontFamily": FONT_FAMILY,
            "fontSize": "12px",
            "fontWeight": "700",
            "textTransform": "uppercase",
            "backgroundColor": "#1e293b",
            "color": "white",
        },
        style_data={"borderBottom": "1px solid #e5e7eb"},
        style_data_conditional=governed_column_styles(cfg),

        page_size=50,
        sort_action="native",
        filter_action="none",
        cell_selectable=True,
    )


def build_table_panel(cfg: ResourceConfig) -> dbc.Card:
    return dbc.Card(
        [
            # Per-table state
            dcc.Store(id=table_id(cfg.key, IDs.Table.FILTER_STATE), storage_type="session"),
            dcc.Store(id=table_id(cfg.key, IDs.Table.DATA_VERSION)),

            dbc.CardHeader(cfg.label.upper(), className="fw-semibold"),
            build_filter_panel(cfg),
            dbc.CardBody(
                dcc.Loading(
                    id=table_id(cfg.key, "loading"),
                    type="default",
                    children=[
                        html.Div(id=table_id(cfg.key, IDs.Table.ERROR)),
                        html.Div(
                            build_grid(cfg),
                            id=table_id(cfg.key, IDs.Table.GRID_WRAPPER),
                        ),
                    ],
                ),
                className="p-2",
            ),
        ],
        className="ssot-table-card mt-3",
    )
