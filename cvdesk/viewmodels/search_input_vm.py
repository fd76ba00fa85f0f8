"""Keyword input state for the multi-term search box.

Call context:
    The front end forwards key presses and the search button here. Only
    ``request_search`` reaches ``on_search_requested``; editing terms never
    triggers a search.
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence, Tuple

from cvdesk.domain.entities import SEARCH_MODES, SearchMode
from cvdesk.domain.search_terms import SearchTermSet
from .status_format import plural

MODE_ANY: SearchMode = "or"
MODE_ALL: SearchMode = "and"

MODE_LABELS = {
    MODE_ANY: "Any Match",
    MODE_ALL: "All Match",
}

SearchRequestFn = Callable[[Tuple[str, ...], SearchMode], None]


class SearchInputVM:
    """Tag-set search builder: input text, ordered terms and match mode."""

    def __init__(
        self,
        *,
        on_search_requested: Optional[SearchRequestFn] = None,
        on_terms_changed: Optional[Callable[[Tuple[str, ...]], None]] = None,
    ) -> None:
        self.on_search_requested = on_search_requested
        self.on_terms_changed = on_terms_changed
        self.input_text: str = ""
        self.mode: SearchMode = MODE_ANY
        self._terms = SearchTermSet()

    # ------------------------------------------------------------------
    @property
    def terms(self) -> Tuple[str, ...]:
        return self._terms.terms

    @property
    def keyword_count_label(self) -> str:
        count = len(self._terms)
        if not count:
            return "Press Enter to add keywords"
        return f"{plural(count, 'keyword')} selected"

    @property
    def placeholder(self) -> str:
        if not len(self._terms):
            return "Type keywords like 'React', 'Python', 'Manager' and press Enter..."
        return "Add more keywords..."

    @property
    def can_search(self) -> bool:
        return bool(len(self._terms))

    # ------------------------------------------------------------------
    # Term editing
    # ------------------------------------------------------------------
    def set_input(self, text: str) -> None:
        self.input_text = text or ""

    def press_enter(self) -> bool:
        """Add the current input as a term; the input is cleared either way."""
        added = self._terms.add(self.input_text)
        self.input_text = ""
        if added:
            self._terms_changed()
        return added

    def press_backspace(self) -> Optional[str]:
        """Remove the last term, but only while the input box is empty."""
        if self.input_text:
            return None
        removed = self._terms.pop_last()
        if removed is not None:
            self._terms_changed()
        return removed

    def add_terms(self, raw_terms: Sequence[str]) -> int:
        """Add several terms at once; returns how many were new."""
        added = sum(1 for raw in raw_terms if self._terms.add(raw))
        if added:
            self._terms_changed()
        return added

    def remove_at(self, index: int) -> Optional[str]:
        removed = self._terms.remove_at(index)
        if removed is not None:
            self._terms_changed()
        return removed

    def clear(self) -> None:
        if not len(self._terms):
            return
        self._terms.clear()
        self._terms_changed()

    def set_mode(self, mode: SearchMode) -> None:
        if mode not in SEARCH_MODES:
            raise ValueError(f"Unsupported search mode '{mode}'.")
        self.mode = mode

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------
    def request_search(self) -> bool:
        """Hand the current terms and mode to the search callback.

        An empty term list is forwarded too; the orchestrator rejects it
        without sending a request.
        """
        if self.on_search_requested is None:
            return False
        self.on_search_requested(self.terms, self.mode)
        return True

    def _terms_changed(self) -> None:
        if self.on_terms_changed:
            self.on_terms_changed(self.terms)


__all__ = ["MODE_ALL", "MODE_ANY", "MODE_LABELS", "SearchInputVM"]
