"""Keyword search lifecycle plus the selection set over the current results.

Call context:
    ``SearchInputVM.request_search`` hands the committed terms to ``commit``.
    ``SearchResultsVM`` renders ``results``/``selected_ids``, and
    ``ListSyncWorkflow`` consumes the selection and clears it after a sync.

Each commit takes a new token from a monotonically increasing counter; a
response is applied only when its token is still the latest, so the displayed
results always belong to the most recent commit.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor
from typing import Callable, FrozenSet, List, Optional, Sequence, Tuple

from cvdesk.domain.entities import (
    SEARCH_MODES,
    LastQuery,
    SearchMode,
    SearchPhase,
    SearchResult,
)
from cvdesk.domain.ports import CandidateSearchPort, ContactId, validation_error
from cvdesk.usecases.error_mapping import map_api_error
from cvdesk.utils.aio import run_blocking

LOGGER = logging.getLogger(__name__)


class SearchOrchestrator:
    """Owns search phase, last query, result collection and selection set."""

    def __init__(
        self,
        search_port: CandidateSearchPort,
        *,
        executor: Optional[Executor] = None,
        on_change: Optional[Callable[["SearchOrchestrator"], None]] = None,
    ) -> None:
        self.search_port = search_port
        self.executor = executor
        self.on_change = on_change

        self.phase: SearchPhase = "idle"
        self.last_query: Optional[LastQuery] = None
        self.error: Optional[str] = None
        self._results: Tuple[SearchResult, ...] = ()
        self._selected: FrozenSet[ContactId] = frozenset()
        self._token = 0

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def results(self) -> Tuple[SearchResult, ...]:
        return self._results

    @property
    def selected_ids(self) -> FrozenSet[ContactId]:
        return self._selected

    @property
    def is_searching(self) -> bool:
        return self.phase == "searching"

    @property
    def has_searched(self) -> bool:
        return self.last_query is not None

    @property
    def all_selected(self) -> bool:
        ids = self._selectable_ids()
        return bool(ids) and self._selected == ids

    def selected_results(self) -> List[SearchResult]:
        """Selected results in result order."""
        return [r for r in self._results if r.contact_id in self._selected]

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------
    async def commit(self, terms: Sequence[str], mode: SearchMode = "or") -> bool:
        """Run a search for ``terms``.

        Returns:
            ``True`` when this call's outcome was applied, ``False`` when a newer
            commit superseded it while the request was in flight.

        Raises:
            UseCaseError: ``NO_SEARCH_TERMS`` when ``terms`` is empty; no request
                is sent and state is unchanged.
        """
        snapshot = tuple(t.strip() for t in terms if t and t.strip())
        if not snapshot:
            raise validation_error("NO_SEARCH_TERMS", "Please add at least one search keyword")
        if mode not in SEARCH_MODES:
            raise validation_error("INVALID_SEARCH_MODE", f"Unsupported search mode '{mode}'.")

        self._token += 1
        token = self._token
        self.phase = "searching"
        self.error = None
        self.last_query = LastQuery(terms=snapshot, mode=mode)
        self._selected = frozenset()
        self._notify()
        LOGGER.debug("Search #%d started: %s (%s)", token, list(snapshot), mode)

        try:
            records = await run_blocking(self.executor, self.search_port.search, snapshot, mode)
            results = tuple(SearchResult.from_payload(item) for item in records)
        except Exception as exc:
            if token != self._token:
                LOGGER.debug("Discarding stale failure of search #%d: %s", token, exc)
                return False
            err = map_api_error(
                exc,
                default_code="SEARCH_FAILED",
                default_message="Search failed",
                timeout_message="Search request timed out. Please try again.",
            )
            LOGGER.warning("Search #%d failed [%s]: %s", token, err.code, exc)
            self.phase = "failed"
            self.error = err.message
            self._results = ()
            self._notify()
            return True

        if token != self._token:
            LOGGER.debug("Discarding stale results of search #%d", token)
            return False
        self._results = results
        self.phase = "completed"
        LOGGER.info("Search #%d returned %d results", token, len(results))
        self._notify()
        return True

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def toggle(self, contact_id: ContactId) -> bool:
        """Flip membership of ``contact_id``. Returns whether it is now selected.

        Identifiers absent from the current results are ignored.
        """
        if contact_id not in self._selectable_ids():
            return False
        if contact_id in self._selected:
            self._selected = self._selected - {contact_id}
            selected = False
        else:
            self._selected = self._selected | {contact_id}
            selected = True
        self._notify()
        return selected

    def select_all(self) -> None:
        """Select exactly all result identifiers, or clear if all are already selected."""
        ids = self._selectable_ids()
        self._selected = frozenset() if self._selected == ids else ids
        self._notify()

    def clear_selection(self) -> None:
        if not self._selected:
            return
        self._selected = frozenset()
        self._notify()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _selectable_ids(self) -> FrozenSet[ContactId]:
        return frozenset(r.contact_id for r in self._results if r.contact_id)

    def _notify(self) -> None:
        if self.on_change:
            self.on_change(self)


__all__ = ["SearchOrchestrator"]
