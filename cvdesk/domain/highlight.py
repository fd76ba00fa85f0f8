"""Keyword highlighting for search result text.

Matching is a case-insensitive substring search across all terms. Spans that
overlap or touch are merged into one inclusive span, so a fragment is either
fully highlighted or not at all.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from .entities import SearchResult

Span = Tuple[int, int]
Segment = Tuple[str, bool]


def match_spans(text: str, terms: Iterable[str]) -> List[Span]:
    """Return merged ``(start, end)`` spans of ``terms`` inside ``text``."""
    if not text:
        return []
    haystack = text.lower()
    raw: List[Span] = []
    for term in terms:
        needle = (term or "").strip().lower()
        if not needle:
            continue
        start = haystack.find(needle)
        while start != -1:
            raw.append((start, start + len(needle)))
            start = haystack.find(needle, start + 1)
    if not raw:
        return []

    raw.sort()
    merged: List[Span] = [raw[0]]
    for start, end in raw[1:]:
        last_start, last_end = merged[-1]
        if start <= last_end:
            merged[-1] = (last_start, max(last_end, end))
        else:
            merged.append((start, end))
    return merged


def highlight_segments(text: str, terms: Sequence[str]) -> List[Segment]:
    """Split ``text`` into ``(fragment, matched)`` pairs in reading order."""
    if not text:
        return []
    spans = match_spans(text, terms)
    if not spans:
        return [(text, False)]
    segments: List[Segment] = []
    cursor = 0
    for start, end in spans:
        if start > cursor:
            segments.append((text[cursor:start], False))
        segments.append((text[start:end], True))
        cursor = end
    if cursor < len(text):
        segments.append((text[cursor:], False))
    return segments


def matched_terms(result: SearchResult, terms: Sequence[str]) -> Tuple[str, ...]:
    """Backend-reported keywords, or the terms found client-side in the result text."""
    if result.matched_keywords:
        return result.matched_keywords
    corpus = " ".join(
        part
        for part in (result.name, result.job_title, result.skills, result.full_text)
        if part
    ).lower()
    if not corpus:
        return ()
    return tuple(term for term in terms if term.strip() and term.strip().lower() in corpus)


__all__ = ["Segment", "Span", "highlight_segments", "match_spans", "matched_terms"]
