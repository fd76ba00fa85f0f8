"""Multi-file resume upload with independent per-file status tracking.

Call context:
    ``UploadVM`` forwards picked files to ``submit_batch`` and renders
    ``items`` whenever ``on_change`` fires. All methods run on the event loop
    thread; progress ticks coming from transport threads are re-scheduled onto
    the loop before they touch state.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import uuid
from concurrent.futures import Executor
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from cvdesk.domain.entities import CandidateFile, ParsedResume, UploadItem
from cvdesk.domain.files import RejectReason, validate_file
from cvdesk.domain.ports import ItemId, ResumeParserPort
from cvdesk.usecases.error_mapping import map_api_error
from cvdesk.utils.aio import loop_callback, run_blocking

LOGGER = logging.getLogger(__name__)

ChangeFn = Callable[[Tuple[UploadItem, ...]], None]


@dataclass(frozen=True)
class FileRejection:
    """A file refused by local validation; it never reaches the transport."""

    file: CandidateFile
    reason: RejectReason
    message: str


@dataclass(frozen=True)
class BatchReceipt:
    """Accepted items (submission order) and rejected files of one batch."""

    accepted: Tuple[UploadItem, ...]
    rejected: Tuple[FileRejection, ...]


class UploadCoordinator:
    """Drives one upload-and-parse request per accepted file.

    The item collection is an immutable ordered mapping that is rebuilt on
    every update, so each progress or completion event replaces exactly one
    item by identifier.
    """

    def __init__(
        self,
        parser_port: ResumeParserPort,
        *,
        executor: Optional[Executor] = None,
        on_change: Optional[ChangeFn] = None,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ) -> None:
        self.parser_port = parser_port
        self.executor = executor
        self.on_change = on_change
        self._id_factory = id_factory
        self._items: Mapping[ItemId, UploadItem] = MappingProxyType({})
        self._tasks: Dict[ItemId, asyncio.Task] = {}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def items(self) -> Tuple[UploadItem, ...]:
        return tuple(self._items.values())

    def get(self, item_id: ItemId) -> Optional[UploadItem]:
        return self._items.get(item_id)

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def submit_batch(self, files: Iterable[CandidateFile]) -> BatchReceipt:
        """Validate ``files`` and start one upload task per accepted file.

        Must be called from a coroutine or callback running on the event loop.
        """
        loop = asyncio.get_running_loop()
        accepted = []
        rejected = []
        for file in files:
            check = validate_file(file)
            if not check.accepted:
                LOGGER.info("Rejected %s (%s)", file.name, check.reason)
                rejected.append(FileRejection(file, check.reason, check.message))
                continue
            item = UploadItem(item_id=self._id_factory(), file=file)
            self._items = MappingProxyType({**self._items, item.item_id: item})
            accepted.append(item)

        for item in accepted:
            task = loop.create_task(self._upload(item.item_id))
            self._tasks[item.item_id] = task
            task.add_done_callback(functools.partial(self._forget_task, item.item_id))

        if accepted:
            self._notify()
        return BatchReceipt(accepted=tuple(accepted), rejected=tuple(rejected))

    def remove_item(self, item_id: ItemId) -> bool:
        """Dismiss an item. An in-flight request keeps running but is no longer reflected."""
        if item_id not in self._items:
            return False
        remaining = {key: value for key, value in self._items.items() if key != item_id}
        self._items = MappingProxyType(remaining)
        self._notify()
        return True

    async def wait_idle(self) -> None:
        """Wait until every upload task started so far has settled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _upload(self, item_id: ItemId) -> None:
        item = self._items.get(item_id)
        if item is None:
            return
        self._replace(item_id, status="uploading")

        loop = asyncio.get_running_loop()
        on_progress = loop_callback(loop, functools.partial(self._apply_progress, item_id))
        try:
            payload = await run_blocking(
                self.executor, self.parser_port.parse_resume, item.file, on_progress
            )
        except Exception as exc:
            err = map_api_error(
                exc,
                default_code="UPLOAD_FAILED",
                default_message="Upload failed",
                timeout_message="Upload timed out. Please try again.",
            )
            LOGGER.warning("Upload of %s failed [%s]: %s", item.file.name, err.code, exc)
            self._replace(item_id, status="failed", error=err.message)
            return

        LOGGER.info("Parsed %s", item.file.name)
        self._replace(
            item_id,
            status="succeeded",
            progress=100.0,
            parsed=ParsedResume.from_payload(payload),
        )

    def _apply_progress(self, item_id: ItemId, sent: int, total: int) -> None:
        item = self._items.get(item_id)
        if item is None or item.status != "uploading" or total <= 0:
            return
        pct = min(100.0, max(0.0, sent * 100.0 / total))
        if pct <= item.progress:
            return
        self._replace(item_id, progress=pct)

    def _replace(self, item_id: ItemId, **changes: Any) -> None:
        """Swap one item for an updated copy; removed or terminal items are left alone."""
        item = self._items.get(item_id)
        if item is None or item.is_terminal:
            return
        updated = replace(item, **changes)
        self._items = MappingProxyType({**self._items, item_id: updated})
        self._notify()

    def _forget_task(self, item_id: ItemId, _task: asyncio.Task) -> None:
        self._tasks.pop(item_id, None)

    def _notify(self) -> None:
        if self.on_change:
            self.on_change(self.items)


__all__ = ["BatchReceipt", "FileRejection", "UploadCoordinator"]
