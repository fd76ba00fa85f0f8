"""Status-token labeling helpers for upload rows and the search header.

Call context:
    ``UploadVM`` and ``SearchResultsVM`` call these helpers to map workflow
    status tokens into consistent operator-facing labels.
"""

from __future__ import annotations

from typing import Optional

NOT_AVAILABLE = "N/A"


def phase_key(phase: Optional[str]) -> str:
    """Normalize status text into lowercase canonical token."""
    return (phase or "").strip().lower()


def upload_status_label(status: Optional[str]) -> str:
    """Convert an upload status token into operator-facing label text."""
    key = phase_key(status)
    mapping = {
        "queued": "Queued",
        "uploading": "Uploading...",
        "succeeded": "Parsed",
        "failed": "Failed",
    }
    if not key:
        return "Queued"
    if key in mapping:
        return mapping[key]
    return key.replace("_", " ").title()


def or_na(value: Optional[str]) -> str:
    """Display fallback for absent backend fields."""
    text = (value or "").strip() if isinstance(value, str) else value
    return str(text) if text else NOT_AVAILABLE


def plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


__all__ = ["NOT_AVAILABLE", "or_na", "phase_key", "plural", "upload_status_label"]
