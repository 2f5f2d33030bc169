from __future__ import annotations

import asyncio
import threading

import pytest

from ssot_browser.core.edit_scope import EditScope, EditScopeResolver, ScopeDescriptor
from ssot_browser.core.exceptions import (
    EditSessionError,
    LoadFailure,
    SubmitInProgressError,
    TransportError,
    UpdateFailure,
)
from ssot_browser.services.mutation_service import MutationCoordinator, build_payload
from ssot_browser.services.table_service import LoadStatus, TableService
from ssot_browser.services.transport import InMemoryDataSource

PKG = "RADIA_OR_PRISMA_PACKAGE_NAME"
PLACEMENT = "PLACEMENTNAME"
WHITELIST = (PKG, "TACTIC", "BUY_MODEL", "LIVE_DATE")

PACKAGE_SCOPE = ScopeDescriptor(
    scope=EditScope.BY_KEY,
    governed_column=PKG,
    key_columns=(PKG,),
    read_only=frozenset({PLACEMENT, "BUY_MODEL"}),
    payload_fields=WHITELIST,
)
PLACEMENT_SCOPE = ScopeDescriptor(
    scope=EditScope.BY_COMPOUND_KEY,
    governed_column=PLACEMENT,
    key_columns=(PKG, PLACEMENT),
    read_only=frozenset({"TACTIC", "BUY_MODEL", "LIVE_DATE"}),
)

ROWS = [
    {PKG: "PKG_1", PLACEMENT: "PL_1", "TACTIC": "Prospecting", "BUY_MODEL": "CPM", "LIVE_DATE": "2024-07-01", "GEO": "US"},
    {PKG: "PKG_1", PLACEMENT: "PL_2", "TACTIC": "Prospecting", "BUY_MODEL": "CPM", "LIVE_DATE": "2024-07-01", "GEO": "US"},
    {PKG: "PKG_2", PLACEMENT: "PL_3", "TACTIC": "Awareness", "BUY_MODEL": "CPC", "LIVE_DATE": "2024-10-01", "GEO": "CA"},
]


class RejectingSource(InMemoryDataSource):
    async def update_by_compound_key(self, resource, payload):
        self.calls.append((resource, EditScope.BY_COMPOUND_KEY.value, dict(payload)))
        return False


class BrokenSource(InMemoryDataSource):
    async def update_by_key(self, resource, payload):
        raise TransportError("connection reset")


class GatedSource(InMemoryDataSource):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.gate = asyncio.Event()

    async def update_by_key(self, resource, payload):
        await self.gate.wait()
        return await super().update_by_key(resource, payload)


class ThreadGatedSource(InMemoryDataSource):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.entered = threading.Event()
        self.gate = threading.Event()

    async def update_by_key(self, resource, payload):
        self.entered.set()
        await asyncio.to_thread(self.gate.wait, 5)
        return await super().update_by_key(resource, payload)


class ReloadFailsSource(InMemoryDataSource):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fail_fetch = False

    async def fetch_dataset(self, resource):
        if self.fail_fetch:
            raise LoadFailure(resource, "HTTP 503", status_code=503)
        return await super().fetch_dataset(resource)


def _build(source_cls=InMemoryDataSource):
    source = source_cls(
        {"targeting": ROWS},
        {
            ("targeting", EditScope.BY_KEY): (PKG,),
            ("targeting", EditScope.BY_COMPOUND_KEY): (PKG, PLACEMENT),
        },
    )
    tables = TableService(source, ["targeting"])
    asyncio.run(tables.load("targeting"))
    resolver = EditScopeResolver("targeting", [PACKAGE_SCOPE, PLACEMENT_SCOPE])
    return source, tables, resolver


def test_by_key_submit_sends_exactly_the_whitelist_and_reloads():
    source, tables, resolver = _build()
    coordinator = MutationCoordinator(source, tables)
    session = resolver.resolve(PKG, tables.store("targeting")[0])

    session.set_value("TACTIC", "Retargeting")
    store = asyncio.run(coordinator.submit(session))

    assert source.calls == [
        (
            "targeting",
            "BY_KEY",
            {PKG: "PKG_1", "TACTIC": "Retargeting", "BUY_MODEL": "CPM", "LIVE_DATE": "2024-07-01"},
        )
    ]
    assert session.closed
    # Server-confirmed state: every record of the package was updated
    assert [r["TACTIC"] for r in store] == ["Retargeting", "Retargeting", "Awareness"]
    assert tables.store("targeting") is store
    assert tables["targeting"].generation == 2


def test_compound_submit_sends_full_working_copy():
    source, tables, resolver = _build()
    coordinator = MutationCoordinator(source, tables)
    session = resolver.resolve(PLACEMENT, tables.store("targeting")[1])

    session.set_value("GEO", "UK")
    store = asyncio.run(coordinator.submit(session))

    (_, scope, payload), = source.calls
    assert scope == "BY_COMPOUND_KEY"
    assert payload == {**ROWS[1], "GEO": "UK"}
    assert [r["GEO"] for r in store] == ["US", "UK", "CA"]


def test_rejected_update_keeps_session_open_and_dataset_unchanged():
    source, tables, resolver = _build(RejectingSource)
    messages = []
    coordinator = MutationCoordinator(source, tables, notifier=messages.append)
    before = tables.store("targeting")
    session = resolver.resolve(PLACEMENT, before[0])
    session.set_value("GEO", "UK")

    with pytest.raises(UpdateFailure, match="rejected by server"):
        asyncio.run(coordinator.submit(session))

    assert len(source.calls) == 1
    assert not session.closed
    assert session.working["GEO"] == "UK"
    assert tables.store("targeting") is before
    assert tables["targeting"].generation == 1
    assert source.table("targeting") == ROWS
    assert messages == ["Update failed: rejected by server"]
    assert not coordinator.is_submitting("targeting")


def test_transport_error_becomes_update_failure():
    source, tables, resolver = _build(BrokenSource)
    messages = []
    coordinator = MutationCoordinator(source, tables)
    session = resolver.resolve(PKG, tables.store("targeting")[0])

    with pytest.raises(UpdateFailure) as excinfo:
        asyncio.run(coordinator.submit(session, notifier=messages.append))

    assert isinstance(excinfo.value.__cause__, TransportError)
    assert messages == ["Update failed: connection reset"]
    assert not session.closed


def test_second_submit_for_same_table_is_refused_while_first_is_pending():
    source, tables, resolver = _build(GatedSource)
    coordinator = MutationCoordinator(source, tables)
    first = resolver.resolve(PKG, tables.store("targeting")[0])
    second = resolver.resolve(PKG, tables.store("targeting")[2])

    async def scenario():
        pending = asyncio.create_task(coordinator.submit(first))
        await asyncio.sleep(0)
        assert coordinator.is_submitting("targeting")

        with pytest.raises(SubmitInProgressError):
            await coordinator.submit(second)

        source.gate.set()
        await pending

    asyncio.run(scenario())

    assert first.closed
    assert not second.closed
    assert not coordinator.is_submitting("targeting")


def test_submits_from_separate_threads_are_serialised_per_table():
    source, tables, resolver = _build(ThreadGatedSource)
    coordinator = MutationCoordinator(source, tables)
    first = resolver.resolve(PKG, tables.store("targeting")[0])
    second = resolver.resolve(PKG, tables.store("targeting")[2])
    errors = []

    def run_first():
        try:
            asyncio.run(coordinator.submit(first))
        except Exception as e:
            errors.append(e)

    worker = threading.Thread(target=run_first)
    worker.start()
    assert source.entered.wait(5)

    with pytest.raises(SubmitInProgressError):
        asyncio.run(coordinator.submit(second))

    source.gate.set()
    worker.join(5)

    assert not worker.is_alive()
    assert errors == []
    assert len(source.calls) == 1
    assert first.closed
    assert not second.closed
    assert not coordinator.is_submitting("targeting")


def test_closed_session_cannot_be_submitted():
    source, tables, resolver = _build()
    coordinator = MutationCoordinator(source, tables)
    session = resolver.resolve(PKG, tables.store("targeting")[0])
    session.cancel()

    with pytest.raises(EditSessionError):
        asyncio.run(coordinator.submit(session))
    assert source.calls == []


def test_reload_failure_after_accepted_update_is_reported():
    source, tables, resolver = _build(ReloadFailsSource)
    coordinator = MutationCoordinator(source, tables)
    session = resolver.resolve(PKG, tables.store("targeting")[0])
    session.set_value("TACTIC", "Retargeting")
    source.fail_fetch = True

    with pytest.raises(LoadFailure):
        asyncio.run(coordinator.submit(session))

    # The update itself went through
    assert session.closed
    assert source.table("targeting")[0]["TACTIC"] == "Retargeting"
    assert tables.status("targeting") is LoadStatus.ERROR
    assert not coordinator.is_submitting("targeting")


def test_build_payload_fills_missing_whitelist_columns():
    resolver = EditScopeResolver("targeting", [PACKAGE_SCOPE])
    session = resolver.resolve(PKG, {PKG: "PKG_9", "TACTIC": "Awareness"})

    assert build_payload(session) == {PKG: "PKG_9", "TACTIC": "Awareness", "BUY_MODEL": "", "LIVE_DATE": ""}
