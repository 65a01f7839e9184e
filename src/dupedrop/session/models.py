"""Session state models."""

from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, Field

from dupedrop.ingestion.models import FileRecord


class SessionPhase(str, Enum):
    """Lifecycle phase of a deduplication session."""

    empty = "empty"
    scanning = "scanning"
    reviewing = "reviewing"
    committed = "committed"


class WorkingSet(BaseModel):
    """Kept files plus the ledger of files removed during this session.

    Attributes:
        kept: Files still in the set, in assignment order.
        removed: Files moved out of the set, in removal order.
    """

    kept: List[FileRecord] = Field(default_factory=list)
    removed: List[FileRecord] = Field(default_factory=list)


__all__ = ["SessionPhase", "WorkingSet"]
