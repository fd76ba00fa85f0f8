"""Result table projection from ``SearchOrchestrator`` state.

Call context:
    The front end calls ``rows()``/``summary_label`` after every orchestrator
    change. Highlighting uses the terms of the committed query, not the terms
    currently being edited.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from cvdesk.domain.entities import SearchResult
from cvdesk.domain.highlight import Segment, highlight_segments, matched_terms
from cvdesk.usecases.search_orchestrator import SearchOrchestrator
from .status_format import NOT_AVAILABLE, or_na, plural

EXCERPT_CHARS = 240


@dataclass
class ResultRow:
    """Display row for one candidate."""

    contact_id: str
    selected: bool
    name: Tuple[Segment, ...]
    email: str
    job_title: Tuple[Segment, ...]
    excerpt: Tuple[Segment, ...]
    matched_keywords: Tuple[str, ...]
    contact_url: Optional[str]

    @property
    def name_text(self) -> str:
        return "".join(fragment for fragment, _ in self.name)

    @property
    def job_title_text(self) -> str:
        return "".join(fragment for fragment, _ in self.job_title)


class SearchResultsVM:
    """Read model over the orchestrator plus selection commands."""

    def __init__(
        self,
        orchestrator: SearchOrchestrator,
        *,
        contact_url: Optional[Callable[[str], Optional[str]]] = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.contact_url = contact_url

    # ------------------------------------------------------------------
    @property
    def query_terms(self) -> Tuple[str, ...]:
        query = self.orchestrator.last_query
        return query.terms if query else ()

    @property
    def summary_label(self) -> str:
        orch = self.orchestrator
        if orch.is_searching:
            return "Searching candidates..."
        if orch.phase == "failed":
            return orch.error or "Search failed"
        if not orch.has_searched:
            return "Enter keywords and click Search to find candidates"
        joined = ", ".join(self.query_terms)
        if not orch.results:
            return f'No candidates match your search for "{joined}".'
        return f'Found {plural(len(orch.results), "candidate")} for "{joined}"'

    @property
    def selection_label(self) -> str:
        count = len(self.orchestrator.selected_ids)
        return f"Add to HubSpot ({count})" if count else ""

    @property
    def all_selected(self) -> bool:
        return self.orchestrator.all_selected

    def rows(self) -> List[ResultRow]:
        terms = self.query_terms
        selected = self.orchestrator.selected_ids
        return [self._to_row(result, terms, result.contact_id in selected) for result in self.orchestrator.results]

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def toggle(self, contact_id: str) -> bool:
        return self.orchestrator.toggle(contact_id)

    def toggle_all(self) -> None:
        self.orchestrator.select_all()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _to_row(self, result: SearchResult, terms: Sequence[str], selected: bool) -> ResultRow:
        return ResultRow(
            contact_id=result.contact_id,
            selected=selected,
            name=_segments(result.name, terms),
            email=or_na(result.email),
            job_title=_segments(result.job_title, terms),
            excerpt=_excerpt(result.full_text, terms),
            matched_keywords=matched_terms(result, terms),
            contact_url=self.contact_url(result.contact_id) if self.contact_url else None,
        )


def _segments(value: Optional[str], terms: Sequence[str]) -> Tuple[Segment, ...]:
    """Highlight present text; absent fields render as an unmarked ``N/A``."""
    text = or_na(value)
    if text == NOT_AVAILABLE:
        return ((NOT_AVAILABLE, False),)
    return tuple(highlight_segments(text, terms))


def _excerpt(text: Optional[str], terms: Sequence[str]) -> Tuple[Segment, ...]:
    """First ``EXCERPT_CHARS`` of the flattened text, highlighted before the cut.

    A match straddling the cut keeps its mark on the part that remains.
    """
    flat = " ".join((text or "").split())
    if not flat:
        return ((NOT_AVAILABLE, False),)
    segments = highlight_segments(flat, terms)
    if len(flat) <= EXCERPT_CHARS:
        return tuple(segments)

    kept: List[Segment] = []
    budget = EXCERPT_CHARS
    for fragment, matched in segments:
        if budget <= 0:
            break
        kept.append((fragment[:budget], matched))
        budget -= len(fragment)
    fragment, matched = kept[-1]
    if not matched:
        kept[-1] = (fragment.rstrip(), False)
    kept.append(("...", False))
    return tuple(part for part in kept if part[0])


__all__ = ["ResultRow", "SearchResultsVM"]
