"""Form state for "Add candidates to HubSpot".

Call context:
    Opened from the results panel when the selection is non-empty. ``submit``
    runs on the event loop and routes the workflow outcome into one of
    ``success_message``, ``warning_message`` or ``error_message``.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Tuple

from cvdesk.domain.entities import SyncMode, SyncOutcome
from cvdesk.domain.ports import UseCaseError
from cvdesk.usecases.list_sync import ListSyncWorkflow
from .status_format import plural

LOGGER = logging.getLogger(__name__)


class ListSyncVM:
    """Create-new / pick-existing form over ``ListSyncWorkflow``.

    ``selected_ids`` returns the selected contact ids in result order; that
    order is what gets sent to the backend.
    """

    def __init__(
        self,
        workflow: ListSyncWorkflow,
        *,
        selected_ids: Callable[[], Sequence[str]],
    ) -> None:
        self.workflow = workflow
        self._selected_ids = selected_ids

        self.mode: SyncMode = "create"
        self.list_name: str = ""
        self.list_id: Optional[str] = None
        self.success_message: str = ""
        self.warning_message: str = ""
        self.error_message: str = ""
        self.last_outcome: Optional[SyncOutcome] = None

    # ------------------------------------------------------------------
    @property
    def selection_count(self) -> int:
        return len(self._selected_ids())

    @property
    def title(self) -> str:
        return f"Add {plural(self.selection_count, 'Candidate')} to HubSpot"

    @property
    def is_busy(self) -> bool:
        return self.workflow.is_syncing

    def list_options(self) -> List[Tuple[str, str]]:
        """``(list_id, name)`` pairs of the cataloged lists."""
        return [(item.list_id, item.name or item.list_id) for item in self.workflow.lists]

    # ------------------------------------------------------------------
    # Form editing
    # ------------------------------------------------------------------
    def set_mode(self, mode: SyncMode) -> None:
        if mode not in ("create", "existing"):
            raise ValueError(f"Unsupported sync mode '{mode}'.")
        if mode == self.mode:
            return
        self.mode = mode
        self.list_name = ""
        self.list_id = None
        self.error_message = ""

    def set_list_name(self, name: str) -> None:
        self.list_name = name or ""

    def choose_list(self, list_id: Optional[str]) -> None:
        self.list_id = list_id or None

    def is_form_valid(self) -> bool:
        if not self.selection_count or self.is_busy:
            return False
        if self.mode == "create":
            return bool(self.list_name.strip())
        return bool(self.list_id)

    def reset_messages(self) -> None:
        self.success_message = ""
        self.warning_message = ""
        self.error_message = ""

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    async def open(self) -> None:
        """Reset the form and refresh the catalog when it is empty."""
        self.mode = "create"
        self.list_name = ""
        self.list_id = None
        self.reset_messages()
        if not self.workflow.lists:
            await self.workflow.load_lists()
        if self.workflow.lists_error:
            self.error_message = self.workflow.lists_error

    async def submit(self) -> Optional[SyncOutcome]:
        self.reset_messages()
        contact_ids = list(self._selected_ids())
        try:
            if self.mode == "create":
                outcome = await self.workflow.create_and_attach(self.list_name, contact_ids)
            else:
                outcome = await self.workflow.attach_to_existing(self.list_id, contact_ids)
        except UseCaseError as err:
            LOGGER.debug("List sync rejected [%s]: %s", err.code, err.message)
            self.error_message = err.message
            return None

        self.last_outcome = outcome
        if outcome.is_partial:
            self.warning_message = outcome.message
        else:
            self.success_message = outcome.message
            self.list_name = ""
            self.list_id = None
        return outcome


__all__ = ["ListSyncVM"]
