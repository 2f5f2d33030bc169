from __future__ import annotations

__all__ = ["IDs", "table_id", "facet_id", "edit_field_id"]


class IDs:
    class Store:
        EDIT_SESSION = "edit-session"

    class Control:
        TABLE_TABS = "table-tabs"

        # Edit dialog
        EDIT_MODAL = "edit-modal"
        EDIT_MODAL_TITLE = "edit-modal-title"
        EDIT_FORM = "edit-form"
        EDIT_SAVE_BTN = "edit-save-btn"
        EDIT_CANCEL_BTN = "edit-cancel-btn"
        EDIT_ALERT = "edit-alert"

    class Table:
        # Per-table suffixes, combined with the resource key via table_id()
        FILTER_STATE = "filter-state"
        DATA_VERSION = "data-version"
        GRID = "grid"
        GRID_WRAPPER = "grid-wrapper"
        ERROR = "error"
        ROW_COUNT = "row-count"
        REFRESH_BTN = "refresh-btn"
        RESET_FILTERS_BTN = "reset-filters-btn"
        EXPORT_BTN = "export-btn"
        DOWNLOAD = "download"

    class Facet:
        SELECT = "select"
        ALL_BTN = "all-btn"
        NONE_BTN = "none-btn"

    class Pattern:
        # pattern-matching "type" strings
        EDIT_FIELD = "edit-field"


def table_id(resource: str, part: str) -> str:
    return f"{resource}-{part}"


def facet_id(resource: str, facet: str, part: str) -> str:
    return f"{resource}-facet-{facet}-{part}"


def edit_field_id(column: str) -> dict:
    return {"type": IDs.Pattern.EDIT_FIELD, "column": column}
