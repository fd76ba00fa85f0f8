from __future__ import annotations

import asyncio
import threading
from typing import Any, Dict, List, Optional, Sequence

import pytest

from cvdesk.adapters.api_errors import ApiClientError, ApiTimeoutError, ApiUnreachableError
from cvdesk.domain.entities import ExternalList
from cvdesk.domain.ports import UseCaseError
from cvdesk.usecases.list_sync import ListSyncWorkflow


class _ListPortDouble:
    def __init__(
        self,
        *,
        catalog: Optional[List[ExternalList]] = None,
        num_added: Any = "all",
        create_exc: Optional[Exception] = None,
        attach_exc: Optional[Exception] = None,
        list_exc: Optional[Exception] = None,
    ) -> None:
        self.catalog = list(catalog or [])
        self.num_added = num_added
        self.create_exc = create_exc
        self.attach_exc = attach_exc
        self.list_exc = list_exc
        self.calls: List[tuple] = []
        self.gates: Dict[str, threading.Event] = {}

    def _wait(self, step: str) -> None:
        gate = self.gates.get(step)
        if gate is not None:
            assert gate.wait(5), f"{step} gate never opened"

    def list_lists(self) -> List[ExternalList]:
        self.calls.append(("list_lists",))
        self._wait("list_lists")
        if self.list_exc:
            raise self.list_exc
        return list(self.catalog)

    def create_list(self, name: str) -> str:
        self.calls.append(("create_list", name))
        self._wait("create_list")
        if self.create_exc:
            raise self.create_exc
        new = ExternalList(list_id=f"L{len(self.catalog) + 1}", name=name)
        self.catalog.append(new)
        return new.list_id

    def add_contacts(self, list_id: str, contact_ids: Sequence[str]) -> Optional[int]:
        self.calls.append(("add_contacts", list_id, tuple(contact_ids)))
        self._wait("add_contacts")
        if self.attach_exc:
            raise self.attach_exc
        if self.num_added == "all":
            return len(contact_ids)
        return self.num_added


class _Selection:
    def __init__(self) -> None:
        self.cleared = 0

    def clear(self) -> None:
        self.cleared += 1


def _workflow(port: _ListPortDouble) -> tuple:
    selection = _Selection()
    return ListSyncWorkflow(port, clear_selection=selection.clear), selection


@pytest.mark.asyncio
async def test_duplicate_name_fails_locally_without_network() -> None:
    port = _ListPortDouble(catalog=[ExternalList("1", "engineering")])
    workflow, selection = _workflow(port)
    await workflow.load_lists()
    port.calls.clear()

    with pytest.raises(UseCaseError) as excinfo:
        await workflow.create_and_attach("  Engineering ", ["A"])

    assert excinfo.value.code == "DUPLICATE_LIST_NAME"
    assert excinfo.value.kind == "validation"
    assert port.calls == []
    assert selection.cleared == 0


@pytest.mark.asyncio
async def test_blank_name_and_empty_selection_rejected_locally() -> None:
    port = _ListPortDouble()
    workflow, _ = _workflow(port)

    with pytest.raises(UseCaseError) as blank:
        await workflow.create_and_attach("   ", ["A"])
    with pytest.raises(UseCaseError) as empty:
        await workflow.create_and_attach("Q1", [])
    with pytest.raises(UseCaseError) as no_list:
        await workflow.attach_to_existing(None, ["A"])

    assert blank.value.code == "LIST_NAME_REQUIRED"
    assert empty.value.code == "NO_CONTACTS_SELECTED"
    assert no_list.value.code == "NO_LIST_SELECTED"
    assert port.calls == []


@pytest.mark.asyncio
async def test_create_and_attach_full_success() -> None:
    port = _ListPortDouble()
    workflow, selection = _workflow(port)

    outcome = await workflow.create_and_attach("Q1 Hires", ["A", "B", "C"])

    assert outcome.status == "completed"
    assert outcome.list_created
    assert (outcome.requested, outcome.added) == (3, 3)
    assert outcome.message == 'Successfully created list "Q1 Hires" and added 3 contacts'
    assert selection.cleared == 1
    assert port.calls == [
        ("create_list", "Q1 Hires"),
        ("add_contacts", "L1", ("A", "B", "C")),
        ("list_lists",),
    ]
    assert workflow.find_list("L1") == ExternalList("L1", "Q1 Hires")
    assert not workflow.is_syncing


@pytest.mark.asyncio
async def test_create_and_attach_partial_count() -> None:
    port = _ListPortDouble(num_added=2)
    workflow, selection = _workflow(port)

    outcome = await workflow.create_and_attach("Q1 Hires", ["A", "B", "C"])

    assert outcome.status == "partial"
    assert outcome.is_partial
    assert outcome.added == 2
    assert outcome.message == 'Created list "Q1 Hires" but only added 2 of 3 contacts'
    assert selection.cleared == 1


@pytest.mark.asyncio
async def test_missing_count_assumes_all_requested() -> None:
    workflow, _ = _workflow(_ListPortDouble(num_added=None))

    outcome = await workflow.create_and_attach("Q2", ["A", "B"])

    assert outcome.status == "completed"
    assert outcome.added == 2


@pytest.mark.asyncio
async def test_create_failure_leaves_selection_and_catalog_unchanged() -> None:
    port = _ListPortDouble(
        catalog=[ExternalList("1", "Other")],
        create_exc=ApiClientError("ctx", status=400, reason="Bad Request", detail="Invalid list name"),
    )
    workflow, selection = _workflow(port)
    await workflow.load_lists()

    with pytest.raises(UseCaseError) as excinfo:
        await workflow.create_and_attach("Q1", ["A"])

    assert excinfo.value.message == "Invalid list name"
    assert excinfo.value.kind == "rejected"
    assert selection.cleared == 0
    assert workflow.lists == (ExternalList("1", "Other"),)
    assert not workflow.is_syncing


@pytest.mark.asyncio
async def test_attach_failure_after_create_is_reported_distinctly() -> None:
    port = _ListPortDouble(attach_exc=ApiTimeoutError("slow"))
    workflow, selection = _workflow(port)

    outcome = await workflow.create_and_attach("Q1 Hires", ["A", "B"])

    assert outcome.status == "attach_failed"
    assert outcome.list_created
    assert outcome.added == 0
    assert outcome.message.startswith('List "Q1 Hires" was created but adding contacts failed')
    assert selection.cleared == 0
    assert workflow.name_taken("q1 hires")

    with pytest.raises(UseCaseError) as retry:
        await workflow.create_and_attach("Q1 Hires", ["A", "B"])
    assert retry.value.code == "DUPLICATE_LIST_NAME"


@pytest.mark.asyncio
async def test_attach_to_existing_success_and_partial() -> None:
    port = _ListPortDouble(catalog=[ExternalList("7", "Backend")])
    workflow, selection = _workflow(port)
    await workflow.load_lists()

    outcome = await workflow.attach_to_existing("7", ["A", "B"])
    assert outcome.status == "completed"
    assert not outcome.list_created
    assert outcome.message == 'Successfully added 2 contacts to "Backend"'
    assert selection.cleared == 1

    port.num_added = 1
    partial = await workflow.attach_to_existing("7", ["A", "B"])
    assert partial.status == "partial"
    assert partial.message == 'Added only 1 of 2 contacts to "Backend"'


@pytest.mark.asyncio
async def test_attach_to_existing_unreachable_keeps_selection() -> None:
    port = _ListPortDouble(attach_exc=ApiUnreachableError("down", endpoint="http://api:8000/hubspot/lists/7/add_contacts"))
    workflow, selection = _workflow(port)

    with pytest.raises(UseCaseError) as excinfo:
        await workflow.attach_to_existing("7", ["A", "B"])

    assert excinfo.value.kind == "unreachable"
    assert "http://api:8000" in excinfo.value.message
    assert selection.cleared == 0
    assert not workflow.is_syncing


@pytest.mark.asyncio
async def test_load_lists_failure_empties_catalog() -> None:
    port = _ListPortDouble(catalog=[ExternalList("1", "A")])
    workflow, _ = _workflow(port)
    await workflow.load_lists()

    port.list_exc = ApiUnreachableError("down", endpoint="http://api:8000/hubspot/lists/search")
    lists = await workflow.load_lists()

    assert lists == ()
    assert workflow.lists == ()
    assert workflow.lists_error.startswith("Cannot connect to backend server")
    assert not workflow.is_loading_lists


async def _until_called(port: _ListPortDouble, step: str) -> None:
    for _ in range(500):
        if any(call[0] == step for call in port.calls):
            return
        await asyncio.sleep(0.01)
    raise AssertionError(f"{step} was not called")


@pytest.mark.asyncio
@pytest.mark.parametrize("step", ["create_list", "add_contacts", "list_lists"])
async def test_overlapping_calls_are_blocked_at_every_await_point(step: str) -> None:
    port = _ListPortDouble()
    port.gates[step] = threading.Event()
    workflow, selection = _workflow(port)

    first = asyncio.ensure_future(workflow.create_and_attach("Q1 Hires", ["A", "B"]))
    await _until_called(port, step)
    assert workflow.is_syncing

    with pytest.raises(UseCaseError) as same_name:
        await workflow.create_and_attach("q1 hires", ["A", "B"])
    with pytest.raises(UseCaseError) as other_name:
        await workflow.create_and_attach("Other", ["C"])
    with pytest.raises(UseCaseError) as existing:
        await workflow.attach_to_existing("L9", ["C"])

    assert same_name.value.code in {"SYNC_IN_PROGRESS", "DUPLICATE_LIST_NAME"}
    assert other_name.value.code == "SYNC_IN_PROGRESS"
    assert existing.value.code == "SYNC_IN_PROGRESS"

    port.gates[step].set()
    outcome = await first

    assert outcome.status == "completed"
    assert [call for call in port.calls if call[0] == "create_list"] == [("create_list", "Q1 Hires")]
    assert [call for call in port.calls if call[0] == "add_contacts"] == [("add_contacts", "L1", ("A", "B"))]
    assert selection.cleared == 1
    assert not workflow.is_syncing

    with pytest.raises(UseCaseError) as retry:
        await workflow.create_and_attach("Q1 HIRES", ["C"])
    assert retry.value.code == "DUPLICATE_LIST_NAME"


@pytest.mark.asyncio
async def test_new_list_survives_failed_catalog_refresh() -> None:
    port = _ListPortDouble(list_exc=ApiTimeoutError("slow"))
    workflow, _ = _workflow(port)

    outcome = await workflow.create_and_attach("Q1 Hires", ["A"])

    assert outcome.status == "completed"
    assert workflow.find_list("L1") == ExternalList("L1", "Q1 Hires")
    assert workflow.lists_error == "Request timed out. Please check your connection and try again."
