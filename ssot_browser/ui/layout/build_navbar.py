from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import html

from ssot_browser.config.model import GlobalConfig


def build_navbar(global_config: GlobalConfig) -> dbc.Navbar:
    title = global_config.ui_title
    subtitle = global_config.subtitle

    return dbc.Navbar(
        dbc.Container(
            fluid=True,
            children=[
                html.Div(
                    [
                        html.H2(title, className="mb-0"),
                        html.Small(
                            subtitle,
                            className="text-muted",
                            id="navbar-subtitle",
                        ),
                    ],
                    className="d-flex flex-column justify-content-center",
                ),
            ],
        ),
        color="light",
        dark=False,
        className="shadow-sm ssot-navbar",
    )
