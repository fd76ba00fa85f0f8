from __future__ import annotations

from typing import Iterator, List, Optional, Tuple


class SearchTermSet:
    """Ordered, de-duplicated keyword list edited one term at a time.

    Terms are trimmed on entry; blanks and exact (case-sensitive) duplicates
    are rejected. Editing never triggers a search.
    """

    def __init__(self) -> None:
        self._terms: List[str] = []

    @property
    def terms(self) -> Tuple[str, ...]:
        return tuple(self._terms)

    def add(self, raw: str) -> bool:
        """Append ``raw`` if it is non-blank and new. Returns whether it was added."""
        term = (raw or "").strip()
        if not term or term in self._terms:
            return False
        self._terms.append(term)
        return True

    def remove_at(self, index: int) -> Optional[str]:
        """Remove the term at ``index``; out-of-range indexes are ignored."""
        if index < 0 or index >= len(self._terms):
            return None
        return self._terms.pop(index)

    def pop_last(self) -> Optional[str]:
        if not self._terms:
            return None
        return self._terms.pop()

    def clear(self) -> None:
        self._terms.clear()

    def __len__(self) -> int:
        return len(self._terms)

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._terms))

    def __contains__(self, term: object) -> bool:
        return term in self._terms


__all__ = ["SearchTermSet"]
