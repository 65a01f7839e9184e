"""Session summaries and human-readable sizes."""

from __future__ import annotations

from typing import Iterable

from pydantic import BaseModel

from dupedrop.ingestion.models import FileRecord

_UNITS = ("B", "KB", "MB", "GB")


def format_file_size(size: int) -> str:
    """Return ``size`` bytes as a one-decimal string in B, KB, MB or GB."""
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{value:.1f} {_UNITS[unit]}"


class SessionSummary(BaseModel):
    """Counts describing the current working set.

    Attributes:
        kept_count: Files still kept.
        duplicate_count: Kept files flagged as duplicates.
        removed_count: Files in the removed ledger.
        reclaimed_bytes: Total size of removed files.
    """

    kept_count: int = 0
    duplicate_count: int = 0
    removed_count: int = 0
    reclaimed_bytes: int = 0

    @classmethod
    def from_records(
        cls, kept: Iterable[FileRecord], removed: Iterable[FileRecord]
    ) -> "SessionSummary":
        kept = list(kept)
        removed = list(removed)
        return cls(
            kept_count=len(kept),
            duplicate_count=sum(1 for record in kept if record.is_duplicate),
            removed_count=len(removed),
            reclaimed_bytes=sum(record.size for record in removed),
        )

    @property
    def reclaimed(self) -> str:
        return format_file_size(self.reclaimed_bytes)


__all__ = ["SessionSummary", "format_file_size"]
