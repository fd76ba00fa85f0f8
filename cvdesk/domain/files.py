"""Client-side pre-submission checks for resume files."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from .entities import CandidateFile

RejectReason = Literal["unsupported-type", "too-large"]

ACCEPTED_EXTENSIONS: tuple[str, ...] = ("pdf", "doc", "docx")
MAX_FILE_SIZE = 10 * 1024 * 1024

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


@dataclass(frozen=True)
class FileCheck:
    """Outcome of ``validate_file``; ``reason`` is set only for rejections."""

    accepted: bool
    reason: Optional[RejectReason] = None
    message: str = ""


def validate_file(file: CandidateFile) -> FileCheck:
    """Accept PDF/DOC/DOCX files up to 10 MiB. Type is checked before size."""
    if file.extension not in ACCEPTED_EXTENSIONS:
        listed = ", ".join(f".{ext}" for ext in ACCEPTED_EXTENSIONS)
        return FileCheck(
            accepted=False,
            reason="unsupported-type",
            message=f"File type not supported. Please upload {listed} files only.",
        )
    if file.size > MAX_FILE_SIZE:
        return FileCheck(
            accepted=False,
            reason="too-large",
            message="File size too large. Please upload files smaller than 10MB.",
        )
    return FileCheck(accepted=True)


def format_file_size(size: int) -> str:
    """Render a byte count as ``0 Bytes``, ``1.5 KB``, ``10 MB``..."""
    if size <= 0:
        return "0 Bytes"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[unit]}"


__all__ = [
    "ACCEPTED_EXTENSIONS",
    "FileCheck",
    "MAX_FILE_SIZE",
    "RejectReason",
    "format_file_size",
    "validate_file",
]
