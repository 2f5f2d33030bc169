from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import dcc, html

from ssot_browser.config.model import ResourceConfig
from ssot_browser.ui.ids import IDs, facet_id, table_id


def _build_facet(resource: str, name: str, label: str) -> dbc.Col:
    return dbc.Col(
        html.Div(
            [
                html.Div(
                    [
                        html.Label(label, className="form-label mb-0 fw-semibold"),
                        html.Div(
                            [
                                dbc.Button(
                                    "Select all",
                                    id=facet_id(resource, name, IDs.Facet.ALL_BTN),
                                    color="link",
                                    size="sm",
                                    className="p-0 me-2",
                                ),
                                dbc.Button(
                                    "Clear",
                                    id=facet_id(resource, name, IDs.Facet.NONE_BTN),
                                    color="link",
                                    size="sm",
                                    className="p-0",
                                ),
                            ],
                            className="ms-auto",
                        ),
                    ],
                    className="d-flex align-items-center mb-1",
                ),
                dcc.Dropdown(
                    id=facet_id(resource, name, IDs.Facet.SELECT),
                    options=[],
                    value=[],
                    multi=True,
                    placeholder=f"No {label.lower()} selected",
                    className="mb-2",
                    maxHeight=260,
                ),
            ]
        ),
        md=4,
    )


def build_filter_panel(cfg: ResourceConfig) -> html.Div:
    """One dropdown per facet, plus the table-level filter/refresh actions."""
    facets = [_build_facet(cfg.key, f.name, f.display_label) for f in cfg.facets]

    actions = html.Div(
        [
            dbc.Button(
                "Reset filters",
                id=table_id(cfg.key, IDs.Table.RESET_FILTERS_BTN),
                color="secondary",
                outline=True,
                size="sm",
                className="me-2",
            ),
            dbc.Button(
                "Refresh",
                id=table_id(cfg.key, IDs.Table.REFRESH_BTN),
                color="secondary",
                outline=True,
                size="sm",
                className="me-2",
            ),
            dbc.Button(
                "Export CSV",
                id=table_id(cfg.key, IDs.Table.EXPORT_BTN),
                color="primary",
                size="sm",
            ),
            dcc.Download(id=table_id(cfg.key, IDs.Table.DOWNLOAD)),
            html.Small(
                "",
                id=table_id(cfg.key, IDs.Table.ROW_COUNT),
                className="text-muted ms-3",
            ),
        ],
        className="d-flex align-items-center mb-2",
    )

    return html.Div(
        [
            dbc.Row(facets, className="g-3") if facets else html.Div(),
            actions,
        ],
        className="ssot-filter-bar p-2 border-bottom",
    )
