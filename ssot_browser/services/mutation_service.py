from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Optional, Set

from ssot_browser.core.edit_scope import EditScope, EditSession
from ssot_browser.core.exceptions import EditSessionError, SubmitInProgressError, UpdateFailure
from ssot_browser.core.record_store import RecordStore
from ssot_browser.services.table_service import TableService
from ssot_browser.services.transport import DataSource

logger = logging.getLogger(__name__)

# Blocking, user-facing notification (the UI turns it into a confirm dialog)
Notifier = Callable[[str], None]


def build_payload(session: EditSession) -> Dict[str, str]:
    """
    Outbound partial update for a session.

    - BY_KEY: exactly the scope's whitelist (missing columns sent as "")
    - BY_COMPOUND_KEY: the whole working copy, edited or not
    """
    descriptor = session.descriptor
    if session.scope is EditScope.BY_KEY:
        return {f: session.working.get(f, "") for f in descriptor.payload_fields}
    if descriptor.payload_fields is not None:
        return {f: session.working.get(f, "") for f in descriptor.payload_fields}
    return dict(session.working)


class MutationCoordinator:
    """
    Submits edit sessions and reconciles the view with server-confirmed state.

    - Never applies edits locally: success is followed by a full reload
    - Failure keeps the session open, notifies the user, and raises UpdateFailure
    - No automatic retry; one submit per table at a time
    """

    def __init__(
        self,
        data_source: DataSource,
        tables: TableService,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self.data_source = data_source
        self.tables = tables
        self.notifier = notifier
        self._in_flight: Set[str] = set()
        # Dash runs callbacks on worker threads, each with its own event loop
        self._lock = threading.Lock()

    def is_submitting(self, resource: str) -> bool:
        return resource in self._in_flight

    def _notify(self, message: str, notifier: Optional[Notifier] = None) -> None:
        target = notifier or self.notifier
        if target is not None:
            target(message)

    async def submit(self, session: EditSession, notifier: Optional[Notifier] = None) -> RecordStore:
        """
        Send the scoped update, then reload the table.

        `notifier` overrides the coordinator-wide one for this call.

        :return: the reloaded dataset
        :raises SubmitInProgressError: a submit for the same table is pending
        :raises UpdateFailure: the update was rejected or errored
        :raises LoadFailure: the update succeeded but the reload did not
        """
        if session.closed:
            raise EditSessionError("Cannot submit a closed edit session")

        resource = session.resource
        payload = build_payload(session)
        scope = session.scope
        update = (
            self.data_source.update_by_key
            if scope is EditScope.BY_KEY
            else self.data_source.update_by_compound_key
        )

        log_extra = {
            "resource": resource,
            "scope": scope.value,
            "key": session.key,
            "changed": session.changed_columns(),
        }

        with self._lock:
            if resource in self._in_flight:
                raise SubmitInProgressError(resource)
            self._in_flight.add(resource)
        try:
            try:
                ok = await update(resource, payload)
            except Exception as e:
                logger.exception("Update errored", extra=log_extra)
                failure = UpdateFailure(resource, scope.value, str(e) or type(e).__name__)
                self._notify(f"Update failed: {failure.message}", notifier)
                raise failure from e

            if not ok:
                logger.warning("Update rejected", extra=log_extra)
                failure = UpdateFailure(resource, scope.value, "rejected by server")
                self._notify("Update failed: rejected by server", notifier)
                raise failure

            logger.info("Update accepted", extra=log_extra)
            session.close()
            return await self.tables.reload(resource)
        finally:
            with self._lock:
                self._in_flight.discard(resource)
