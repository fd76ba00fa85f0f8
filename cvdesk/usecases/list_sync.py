"""Sync a selection of candidates into a CRM contact list.

Two entry points share one non-reentrant guard:

* ``create_and_attach``: create a list, then attach contacts. If the attach
  step fails the list still exists remotely; that state is returned as an
  ``attach_failed`` outcome and the list is added to the local catalog so a
  retry by name is caught by the duplicate check.
* ``attach_to_existing``: attach contacts to a cataloged list.

The workflow also owns the list catalog (``load_lists``). No idempotency key
is sent, so a retry after an ambiguous network failure may create a second
list or re-attach contacts.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor
from typing import Callable, Iterable, List, Optional, Tuple

from cvdesk.domain.entities import ExternalList, SyncMode, SyncOutcome
from cvdesk.domain.ports import ContactId, ContactListPort, ListId, validation_error
from cvdesk.usecases.error_mapping import map_api_error
from cvdesk.utils.aio import run_blocking

LOGGER = logging.getLogger(__name__)


def _noop() -> None:
    """Default selection-clearing hook."""


class ListSyncWorkflow:
    """List catalog plus create-and-attach / attach-to-existing operations."""

    def __init__(
        self,
        list_port: ContactListPort,
        *,
        clear_selection: Callable[[], None] = _noop,
        executor: Optional[Executor] = None,
        on_change: Optional[Callable[["ListSyncWorkflow"], None]] = None,
    ) -> None:
        self.list_port = list_port
        self.clear_selection = clear_selection
        self.executor = executor
        self.on_change = on_change

        self.lists: Tuple[ExternalList, ...] = ()
        self.lists_error: Optional[str] = None
        self.is_loading_lists = False
        self.is_syncing = False
        self._lists_token = 0

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------
    async def load_lists(self) -> Tuple[ExternalList, ...]:
        """Fetch the list catalog. Failures empty it and set ``lists_error``."""
        self._lists_token += 1
        token = self._lists_token
        self.is_loading_lists = True
        self.lists_error = None
        self._notify()
        try:
            fetched = await run_blocking(self.executor, self.list_port.list_lists)
        except Exception as exc:
            if token != self._lists_token:
                return self.lists
            err = map_api_error(
                exc,
                default_code="LISTS_LOAD_FAILED",
                default_message="Failed to load lists",
                timeout_message="Request timed out. Please check your connection and try again.",
            )
            LOGGER.warning("Loading lists failed [%s]: %s", err.code, exc)
            self.lists = ()
            self.lists_error = err.message
        else:
            if token != self._lists_token:
                return self.lists
            self.lists = tuple(fetched)
            LOGGER.debug("Loaded %d lists", len(self.lists))
        self.is_loading_lists = False
        self._notify()
        return self.lists

    def find_list(self, list_id: ListId) -> Optional[ExternalList]:
        for item in self.lists:
            if item.list_id == list_id:
                return item
        return None

    def name_taken(self, name: str) -> bool:
        """Case-insensitive comparison against cataloged list names."""
        needle = (name or "").strip().lower()
        return any(item.name.strip().lower() == needle for item in self.lists)

    # ------------------------------------------------------------------
    # Sync operations
    # ------------------------------------------------------------------
    async def create_and_attach(
        self, name: str, contact_ids: Iterable[ContactId]
    ) -> SyncOutcome:
        """Create list ``name`` and attach ``contact_ids`` to it.

        Raises:
            UseCaseError: Local validation failures (no network call) or a failed
                create (selection and catalog unchanged).
        """
        trimmed = (name or "").strip()
        if not trimmed:
            raise validation_error("LIST_NAME_REQUIRED", "Please enter a list name")
        if self.name_taken(trimmed):
            raise validation_error(
                "DUPLICATE_LIST_NAME",
                "A list with this name already exists. Please choose a unique name.",
            )
        ids = self._normalize_ids(contact_ids)
        self._begin()
        try:
            try:
                list_id = await run_blocking(self.executor, self.list_port.create_list, trimmed)
            except Exception as exc:
                err = map_api_error(
                    exc, default_code="LIST_CREATE_FAILED", default_message="Failed to create list"
                )
                LOGGER.warning("Creating list %r failed [%s]: %s", trimmed, err.code, exc)
                raise err from exc
            created = ExternalList(list_id=str(list_id), name=trimmed)
            LOGGER.info("Created list %r (%s)", trimmed, created.list_id)
            self._remember(created)

            try:
                added = await run_blocking(
                    self.executor, self.list_port.add_contacts, created.list_id, ids
                )
            except Exception as exc:
                err = map_api_error(
                    exc,
                    default_code="ATTACH_FAILED",
                    default_message="Failed to add contacts to list",
                )
                LOGGER.warning(
                    "List %s created but attaching %d contacts failed [%s]: %s",
                    created.list_id, len(ids), err.code, exc,
                )
                return SyncOutcome(
                    status="attach_failed",
                    mode="create",
                    list_id=created.list_id,
                    list_name=trimmed,
                    requested=len(ids),
                    added=0,
                    message=f'List "{trimmed}" was created but adding contacts failed: {err.message}',
                    error=err.message,
                )
            outcome = self._attached_outcome("create", created, len(ids), added)
            self.clear_selection()
            await self.load_lists()
            # The refresh replaces the catalog; it may predate the new list.
            self._remember(created)
        finally:
            self._end()
        return outcome

    async def attach_to_existing(
        self, list_id: Optional[ListId], contact_ids: Iterable[ContactId]
    ) -> SyncOutcome:
        """Attach ``contact_ids`` to the cataloged list ``list_id``.

        Raises:
            UseCaseError: Local validation failures or a failed attach
                (selection unchanged).
        """
        target_id = str(list_id or "").strip()
        if not target_id:
            raise validation_error("NO_LIST_SELECTED", "Please select a list")
        ids = self._normalize_ids(contact_ids)
        self._begin()
        try:
            try:
                added = await run_blocking(
                    self.executor, self.list_port.add_contacts, target_id, ids
                )
            except Exception as exc:
                err = map_api_error(
                    exc,
                    default_code="ATTACH_FAILED",
                    default_message="Failed to add contacts to list",
                )
                LOGGER.warning("Attaching to list %s failed [%s]: %s", target_id, err.code, exc)
                raise err from exc
        finally:
            self._end()

        known = self.find_list(target_id)
        target = ExternalList(
            list_id=target_id,
            name=known.name if known and known.name else "selected list",
        )
        outcome = self._attached_outcome("existing", target, len(ids), added)
        self.clear_selection()
        return outcome

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _begin(self) -> None:
        if self.is_syncing:
            raise validation_error("SYNC_IN_PROGRESS", "A list update is already in progress.")
        self.is_syncing = True
        self._notify()

    def _end(self) -> None:
        self.is_syncing = False
        self._notify()

    def _remember(self, created: ExternalList) -> None:
        if self.find_list(created.list_id) is None:
            self.lists = self.lists + (created,)
            self._notify()

    @staticmethod
    def _normalize_ids(contact_ids: Iterable[ContactId]) -> List[ContactId]:
        ids: List[ContactId] = []
        for raw in contact_ids or ():
            text = str(raw).strip()
            if text and text not in ids:
                ids.append(text)
        if not ids:
            raise validation_error("NO_CONTACTS_SELECTED", "Please select at least one contact")
        return ids

    @staticmethod
    def _attached_outcome(
        mode: SyncMode, target: ExternalList, requested: int, added: Optional[int]
    ) -> SyncOutcome:
        if added is None:
            LOGGER.warning("Backend did not report num_added for %s; assuming %d", target.list_id, requested)
            count = requested
        else:
            count = added
        partial = count < requested
        if mode == "create":
            message = (
                f'Created list "{target.name}" but only added {count} of {requested} contacts'
                if partial
                else f'Successfully created list "{target.name}" and added {count} contacts'
            )
        else:
            message = (
                f'Added only {count} of {requested} contacts to "{target.name}"'
                if partial
                else f'Successfully added {count} contacts to "{target.name}"'
            )
        return SyncOutcome(
            status="partial" if partial else "completed",
            mode=mode,
            list_id=target.list_id,
            list_name=target.name,
            requested=requested,
            added=count,
            message=message,
        )

    def _notify(self) -> None:
        if self.on_change:
            self.on_change(self)


__all__ = ["ListSyncWorkflow"]
