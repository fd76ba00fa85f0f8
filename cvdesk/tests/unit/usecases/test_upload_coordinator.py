from __future__ import annotations

import asyncio
import itertools
import threading
from typing import Any, Dict, List

import pytest

from cvdesk.adapters.api_errors import ApiClientError, ApiResponseError, ApiUnreachableError
from cvdesk.domain.entities import CandidateFile
from cvdesk.usecases.upload_coordinator import UploadCoordinator

MIB = 1024 * 1024


class _ParserDouble:
    """Fake parser; behaviour keyed by file name."""

    def __init__(self, *, failures: Dict[str, Exception] | None = None, gates: Dict[str, threading.Event] | None = None):
        self.failures = failures or {}
        self.gates = gates or {}
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def parse_resume(self, file: CandidateFile, on_progress=None) -> Dict[str, Any]:
        with self._lock:
            self.calls.append(file.name)
        gate = self.gates.get(file.name)
        if gate is not None:
            assert gate.wait(5), "gate never opened"
        if on_progress:
            on_progress(50, 100)
            on_progress(25, 100)
            on_progress(90, 100)
        if file.name in self.failures:
            raise self.failures[file.name]
        return {"name": file.name.split(".")[0].title(), "email": None, "skills": ["Python"]}


def _file(name: str, size: int = 1000) -> CandidateFile:
    return CandidateFile(name=name, size=size, content=b"x")


def _sequential_ids():
    counter = itertools.count(1)
    return lambda: f"item-{next(counter)}"


@pytest.mark.asyncio
async def test_batch_settles_one_terminal_item_per_accepted_file() -> None:
    parser = _ParserDouble(failures={"b.docx": ApiUnreachableError("down", endpoint="http://api:8000/parse_resume/")})
    coordinator = UploadCoordinator(parser, id_factory=_sequential_ids())

    receipt = coordinator.submit_batch(
        [_file("a.pdf"), _file("b.docx"), _file("notes.txt"), _file("huge.pdf", 12 * MIB), _file("c.doc")]
    )
    await coordinator.wait_idle()

    assert [r.reason for r in receipt.rejected] == ["unsupported-type", "too-large"]
    assert sorted(parser.calls) == ["a.pdf", "b.docx", "c.doc"]
    items = coordinator.items
    assert [item.file.name for item in items] == ["a.pdf", "b.docx", "c.doc"]
    assert [item.item_id for item in items] == ["item-1", "item-2", "item-3"]
    assert all(item.is_terminal for item in items)

    a, b, c = items
    assert a.status == "succeeded" and a.progress == 100.0
    assert a.parsed.name == "A"
    assert a.parsed.raw == {"name": "A", "email": None, "skills": ["Python"]}
    assert b.status == "failed"
    assert "Cannot connect to backend server at http://api:8000" in b.error
    assert b.parsed is None
    assert c.status == "succeeded"
    assert coordinator.in_flight == 0


@pytest.mark.asyncio
async def test_rejected_files_never_reach_transport() -> None:
    parser = _ParserDouble()
    coordinator = UploadCoordinator(parser)

    receipt = coordinator.submit_batch([_file("big.pdf", 12 * MIB)])
    await coordinator.wait_idle()

    assert receipt.accepted == ()
    assert receipt.rejected[0].reason == "too-large"
    assert coordinator.items == ()
    assert parser.calls == []


@pytest.mark.asyncio
async def test_progress_is_monotonic_and_status_one_way() -> None:
    snapshots: List[tuple] = []
    coordinator = UploadCoordinator(
        _ParserDouble(),
        on_change=lambda items: snapshots.append((items[0].status, items[0].progress)),
    )

    coordinator.submit_batch([_file("a.pdf")])
    await coordinator.wait_idle()

    progress = [pct for _, pct in snapshots]
    assert progress == sorted(progress)
    assert (("uploading", 50.0)) in snapshots
    assert (("uploading", 25.0)) not in snapshots
    statuses = [status for status, _ in snapshots]
    assert statuses[0] == "queued"
    assert statuses[-1] == "succeeded"
    assert statuses.index("succeeded") == len(statuses) - 1


@pytest.mark.asyncio
async def test_failure_messages_follow_failure_kind() -> None:
    parser = _ParserDouble(
        failures={
            "bad.pdf": ApiResponseError("garbage"),
            "rejected.pdf": ApiClientError("ctx", status=422, reason="Unprocessable Entity", detail="Unreadable PDF"),
            "plain.pdf": ApiClientError("ctx", status=413, reason="Payload Too Large"),
        }
    )
    coordinator = UploadCoordinator(parser)

    coordinator.submit_batch([_file("bad.pdf"), _file("rejected.pdf"), _file("plain.pdf")])
    await coordinator.wait_idle()

    errors = {item.file.name: item.error for item in coordinator.items}
    assert errors == {
        "bad.pdf": "Failed to parse server response",
        "rejected.pdf": "Unreadable PDF",
        "plain.pdf": "Upload failed: Payload Too Large",
    }


@pytest.mark.asyncio
async def test_removed_in_flight_item_stops_reflecting_updates() -> None:
    gate = threading.Event()
    parser = _ParserDouble(gates={"slow.pdf": gate})
    coordinator = UploadCoordinator(parser, id_factory=_sequential_ids())

    coordinator.submit_batch([_file("slow.pdf"), _file("fast.pdf")])
    for _ in range(500):
        if "slow.pdf" in parser.calls:
            break
        await asyncio.sleep(0.01)
    assert coordinator.get("item-1").status == "uploading"
    assert coordinator.remove_item("item-1")
    gate.set()
    await coordinator.wait_idle()

    assert [item.file.name for item in coordinator.items] == ["fast.pdf"]
    assert coordinator.get("item-1") is None
    assert not coordinator.remove_item("item-1")


@pytest.mark.asyncio
async def test_resubmitting_a_file_creates_a_new_item() -> None:
    parser = _ParserDouble(failures={"a.pdf": ApiUnreachableError("down", endpoint="http://api")})
    coordinator = UploadCoordinator(parser, id_factory=_sequential_ids())

    coordinator.submit_batch([_file("a.pdf")])
    await coordinator.wait_idle()
    parser.failures.clear()
    coordinator.submit_batch([_file("a.pdf")])
    await coordinator.wait_idle()

    assert [(item.item_id, item.status) for item in coordinator.items] == [
        ("item-1", "failed"),
        ("item-2", "succeeded"),
    ]
