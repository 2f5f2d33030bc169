from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import dash
from dash import ALL, Input, Output, State, exceptions

from ssot_browser.core.exceptions import LoadFailure, SubmitInProgressError, UpdateFailure
from ssot_browser.ui.callbacks.callbacks_utils import run_async, try_parse_session
from ssot_browser.ui.ids import IDs, table_id
from ssot_browser.ui.layout.build_edit_modal import build_edit_form

if TYPE_CHECKING:
    from ssot_browser.ui.config import AppConfig

logger = logging.getLogger(__name__)


def register_edit_callbacks(app: dash.Dash, ctx: AppConfig) -> None:
    resources = list(ctx.resources)
    grid_ids = {table_id(r, IDs.Table.GRID): r for r in resources}

    # ---------------------------------------------------------
    # 1. Cell click -> resolve scope -> open dialog
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Store.EDIT_SESSION, "data", allow_duplicate=True),
        Output(IDs.Control.EDIT_MODAL, "is_open", allow_duplicate=True),
        Output(IDs.Control.EDIT_MODAL_TITLE, "children"),
        Output(IDs.Control.EDIT_FORM, "children"),
        *[Output(gid, "active_cell") for gid in grid_ids],
        *[Input(gid, "active_cell") for gid in grid_ids],
        *[State(gid, "derived_viewport_data") for gid in grid_ids],
        State(IDs.Store.EDIT_SESSION, "data"),
        prevent_initial_call=True,
    )
    def open_edit_session(*args):
        n = len(grid_ids)
        active_cells = dict(zip(grid_ids, args[:n]))
        viewports = dict(zip(grid_ids, args[n:2 * n]))
        current = args[-1]

        trigger = dash.ctx.triggered_id
        if trigger not in grid_ids:
            raise exceptions.PreventUpdate

        # One session at a time; the dialog is modal anyway
        if current:
            raise exceptions.PreventUpdate

        cell = active_cells[trigger]
        rows = viewports[trigger] or []
        if not cell or cell.get("row") is None or cell["row"] >= len(rows):
            raise exceptions.PreventUpdate

        resource = grid_ids[trigger]
        session = ctx.resolvers[resource].resolve(cell.get("column_id"), rows[cell["row"]])
        if session is None:
            raise exceptions.PreventUpdate

        # Clear the clicked cell so the same cell can reopen the dialog later
        cleared = [None if gid == trigger else dash.no_update for gid in grid_ids]
        return (
            session.to_dict(),
            True,
            session.descriptor.display_title,
            build_edit_form(session),
            *cleared,
        )

    # ---------------------------------------------------------
    # 2. Cancel -> discard working copy
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Store.EDIT_SESSION, "data", allow_duplicate=True),
        Output(IDs.Control.EDIT_MODAL, "is_open", allow_duplicate=True),
        Input(IDs.Control.EDIT_CANCEL_BTN, "n_clicks"),
        prevent_initial_call=True,
    )
    def cancel_edit_session(n_clicks):
        if not n_clicks:
            raise exceptions.PreventUpdate
        return None, False

    # ---------------------------------------------------------
    # 3. Save -> scoped update -> reload on success
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Store.EDIT_SESSION, "data", allow_duplicate=True),
        Output(IDs.Control.EDIT_MODAL, "is_open", allow_duplicate=True),
        Output(IDs.Control.EDIT_ALERT, "displayed"),
        Output(IDs.Control.EDIT_ALERT, "message"),
        *[Output(table_id(r, IDs.Table.DATA_VERSION), "data", allow_duplicate=True) for r in resources],
        Input(IDs.Control.EDIT_SAVE_BTN, "n_clicks"),
        State({"type": IDs.Pattern.EDIT_FIELD, "column": ALL}, "value"),
        State({"type": IDs.Pattern.EDIT_FIELD, "column": ALL}, "id"),
        State(IDs.Store.EDIT_SESSION, "data"),
        running=[(Output(IDs.Control.EDIT_SAVE_BTN, "disabled"), True, False)],
        prevent_initial_call=True,
    )
    def save_edit_session(n_clicks, values, ids, session_data):
        untouched_versions = [dash.no_update] * len(resources)
        if not n_clicks or not session_data:
            raise exceptions.PreventUpdate

        resource = session_data.get("resource")
        session = try_parse_session(session_data, ctx.resolvers.get(resource))
        if session is None:
            return (None, False, True, "This edit can no longer be saved.", *untouched_versions)

        session.apply_edits({i["column"]: v for i, v in zip(ids, values)})

        notifications: list[str] = []
        try:
            run_async(ctx.coordinator.submit(session, notifier=notifications.append))
        except SubmitInProgressError:
            return (dash.no_update, dash.no_update, True, "A save for this table is already in progress.", *untouched_versions)
        except UpdateFailure as e:
            # Dialog stays open with the user's edits; nothing is reloaded
            message = notifications[-1] if notifications else str(e)
            return (session.to_dict(), True, True, message, *untouched_versions)
        except LoadFailure as e:
            # The update went through; only the reload failed
            logger.error("Reload after update failed", extra={"resource": resource, "error": str(e)})
            return (
                None,
                False,
                True,
                f"Changes saved, but reloading the table failed: {e.message}. Use Refresh to try again.",
                *untouched_versions,
            )

        versions = [
            ctx.tables[r].generation if r == resource else dash.no_update
            for r in resources
        ]
        return (None, False, False, "", *versions)
