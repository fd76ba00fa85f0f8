"""Upload panel projection from ``UploadCoordinator`` items.

Call context:
    The front end passes picked files to ``add_files`` and renders ``rows()``
    whenever the coordinator fires ``on_change``. Rejections are surfaced via
    ``on_notice`` (toast text), one message per refused file.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from cvdesk.domain.entities import CandidateFile, UploadItem
from cvdesk.domain.files import format_file_size
from cvdesk.usecases.upload_coordinator import BatchReceipt, UploadCoordinator
from .status_format import or_na, upload_status_label

_PARSED_FIELDS = ("name", "email", "phone", "job_title", "skills", "experience")


@dataclass
class UploadRow:
    """Display row model for one upload."""

    item_id: str
    file_name: str
    size: str
    status: str
    progress: int
    detail: str
    removable: bool


class UploadVM:
    """Coordinates file picking and renders upload rows."""

    def __init__(
        self,
        coordinator: UploadCoordinator,
        *,
        on_notice: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.coordinator = coordinator
        self.on_notice = on_notice

    def add_files(self, files: Sequence[CandidateFile]) -> BatchReceipt:
        receipt = self.coordinator.submit_batch(files)
        for rejection in receipt.rejected:
            self._notice(f"{rejection.file.name}: {rejection.message}")
        if receipt.accepted:
            self._notice(f"Uploading {len(receipt.accepted)} file(s)...")
        return receipt

    def dismiss(self, item_id: str) -> bool:
        return self.coordinator.remove_item(item_id)

    def rows(self) -> List[UploadRow]:
        return [self._to_row(item) for item in self.coordinator.items]

    def parsed_fields(self, item_id: str) -> List[tuple]:
        """``(label, value)`` pairs of a parsed resume with ``N/A`` fallbacks."""
        item = self.coordinator.get(item_id)
        if item is None or item.parsed is None:
            return []
        parsed = item.parsed
        return [
            (key.replace("_", " ").title(), or_na(getattr(parsed, key)))
            for key in _PARSED_FIELDS
        ]

    @property
    def summary_label(self) -> str:
        items = self.coordinator.items
        if not items:
            return ""
        done = sum(1 for item in items if item.status == "succeeded")
        failed = sum(1 for item in items if item.status == "failed")
        pending = len(items) - done - failed
        parts = [f"{done} parsed"]
        if failed:
            parts.append(f"{failed} failed")
        if pending:
            parts.append(f"{pending} in progress")
        return ", ".join(parts)

    # ------------------------------------------------------------------
    def _to_row(self, item: UploadItem) -> UploadRow:
        if item.status == "failed":
            detail = item.error or "Upload failed"
        elif item.status == "succeeded" and item.parsed is not None:
            detail = or_na(item.parsed.name)
        else:
            detail = ""
        return UploadRow(
            item_id=item.item_id,
            file_name=item.file.name,
            size=format_file_size(item.file.size),
            status=upload_status_label(item.status),
            progress=int(item.progress),
            detail=detail,
            removable=item.is_terminal,
        )

    def _notice(self, message: str) -> None:
        if self.on_notice:
            self.on_notice(message)


__all__ = ["UploadRow", "UploadVM"]
