from __future__ import annotations

from typing import List

import dash_bootstrap_components as dbc
from dash import dcc, html

from ssot_browser.core.edit_scope import EditSession
from ssot_browser.ui.ids import IDs, edit_field_id


def build_edit_modal() -> html.Div:
    return html.Div(
        [
            dcc.Store(id=IDs.Store.EDIT_SESSION),
            # Blocking notification for failed updates
            dcc.ConfirmDialog(id=IDs.Control.EDIT_ALERT, message=""),
            dbc.Modal(
                [
                    dbc.ModalHeader(
                        dbc.ModalTitle("Edit", id=IDs.Control.EDIT_MODAL_TITLE),
                        close_button=False,
                    ),
                    dbc.ModalBody(
                        html.Div(id=IDs.Control.EDIT_FORM),
                        style={"maxHeight": "60vh", "overflowY": "auto"},
                    ),
                    dbc.ModalFooter(
                        [
                            dbc.Button(
                                "Cancel",
                                id=IDs.Control.EDIT_CANCEL_BTN,
                                color="secondary",
                                outline=True,
                            ),
                            dbc.Button(
                                "Save Changes",
                                id=IDs.Control.EDIT_SAVE_BTN,
                                color="primary",
                            ),
                        ]
                    ),
                ],
                id=IDs.Control.EDIT_MODAL,
                is_open=False,
                size="xl",
                backdrop="static",
                keyboard=False,
            ),
        ]
    )


def build_edit_form(session: EditSession) -> dbc.Row:
    """
    Two-column grid of inputs; read-only fields are rendered disabled.
    BY_KEY scopes only show their whitelist.
    """
    descriptor = session.descriptor
    if descriptor.payload_fields is not None:
        columns = [c for c in descriptor.payload_fields if c in session.working]
    else:
        columns = list(session.working)

    fields: List[dbc.Col] = []
    for column in columns:
        read_only = not session.is_editable(column)
        fields.append(
            dbc.Col(
                [
                    dbc.Label(column, className="small text-muted mb-1"),
                    dbc.Input(
                        id=edit_field_id(column),
                        value=session.working.get(column, ""),
                        type="text",
                        disabled=read_only,
                        className="bg-light text-muted" if read_only else "",
                    ),
                ],
                md=6,
                className="mb-3",
            )
        )
    return dbc.Row(fields)
