from __future__ import annotations

from typing import Optional


class SsotBrowserError(Exception):
    """Base exception for all ssot_browser errors"""
    pass


class ConfigError(SsotBrowserError):
    """Invalid or inconsistent global.json / resource config"""
    pass


class TransportError(SsotBrowserError):
    """The remote service could not be reached or answered garbage"""
    pass


class LoadFailure(SsotBrowserError):
    """
    Fetching a dataset failed: non-success response or transport error.
    Rendered as a full-table error state.
    """

    def __init__(self, resource: str, message: str, status_code: Optional[int] = None):
        self.resource = resource
        self.message = message
        self.status_code = status_code
        super().__init__(f"Failed to load {resource} data: {message}")


class UpdateFailure(SsotBrowserError):
    """
    A remote update was rejected or errored.
    The edit session stays open; the caller must not treat the submit as success.
    """

    def __init__(self, resource: str, scope: str, message: str):
        self.resource = resource
        self.scope = scope
        self.message = message
        super().__init__(f"Update failed ({resource}, {scope}): {message}")


class EditSessionError(SsotBrowserError):
    """Misuse of an edit session (bad field, double submit, ...)"""
    pass


class ReadOnlyFieldError(EditSessionError):
    """Attempt to write a column the active scope keeps read-only"""

    def __init__(self, column: str, scope: str):
        self.column = column
        self.scope = scope
        super().__init__(f"Column '{column}' is read-only in scope {scope}")


class SubmitInProgressError(EditSessionError):
    """A submit for the same table is still pending"""

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"A submit for '{resource}' is already in flight")
