"""In-memory deduplication sessions: scan, review, commit, reset."""

from __future__ import annotations

import logging
from typing import Iterable

from dupedrop.ingestion import FileRecord, IngestionPipeline, ProgressCallback, RawFile
from dupedrop.reporting import SessionSummary
from dupedrop.sharing import ShareLink, share_file

from .errors import DuplicateIngestionRejected, RecordNotFound, SessionError
from .models import SessionPhase, WorkingSet

LOGGER = logging.getLogger(__name__)


class DedupSession:
    """Own the working set for one user session.

    Records only ever move from ``kept`` to the removed ledger; nothing is
    deleted until :meth:`reset`. Every mutation builds new lists and swaps the
    whole :class:`WorkingSet` in one assignment, so callers never observe a
    half-applied change.
    """

    def __init__(self, pipeline: IngestionPipeline | None = None) -> None:
        self.pipeline = pipeline or IngestionPipeline()
        self._working = WorkingSet()
        self._phase = SessionPhase.empty
        self._generation = 0

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def kept(self) -> list[FileRecord]:
        return list(self._working.kept)

    @property
    def removed(self) -> list[FileRecord]:
        return list(self._working.removed)

    @property
    def duplicates(self) -> list[FileRecord]:
        return [record for record in self._working.kept if record.is_duplicate]

    async def ingest(
        self,
        files: Iterable[RawFile],
        progress: ProgressCallback | None = None,
    ) -> list[FileRecord]:
        """Scan ``files`` and replace the working set with the result.

        Args:
            files: File handles in assignment order.
            progress: Optional percentage callback forwarded to the pipeline.

        Returns:
            list[FileRecord]: The newly kept records.

        Raises:
            DuplicateIngestionRejected: If a scan is already running.
        """
        if self._phase is SessionPhase.scanning:
            raise DuplicateIngestionRejected("An ingestion is already in progress for this session.")

        previous_phase = self._phase
        self._phase = SessionPhase.scanning
        generation = self._generation
        try:
            records = await self.pipeline.ingest(files, progress=progress)
        except BaseException:
            if generation == self._generation:
                self._phase = previous_phase
            raise

        if generation != self._generation:
            LOGGER.info("Session was reset during ingestion; discarding %d records.", len(records))
            return records

        self._working = WorkingSet(kept=records)
        self._phase = SessionPhase.reviewing
        return list(records)

    def remove_one(self, path: str) -> FileRecord:
        """Move the kept record at ``path`` to the end of the removed ledger.

        Raises:
            RecordNotFound: If no kept record has that path.
            SessionError: If a scan is running.
        """
        self._ensure_idle("remove a file")
        kept = self._working.kept
        for index, record in enumerate(kept):
            if record.path == path:
                self._working = WorkingSet(
                    kept=kept[:index] + kept[index + 1 :],
                    removed=[*self._working.removed, record],
                )
                LOGGER.debug("Removed %s from the working set.", path)
                return record
        raise RecordNotFound(path)

    def commit_duplicates(self) -> list[FileRecord]:
        """Move every kept duplicate to the removed ledger at once.

        Returns:
            list[FileRecord]: The records that were moved, in kept order.

        Raises:
            SessionError: If a scan is running.
        """
        self._ensure_idle("commit duplicates")
        moved = [record for record in self._working.kept if record.is_duplicate]
        survivors = [record for record in self._working.kept if not record.is_duplicate]
        self._working = WorkingSet(kept=survivors, removed=[*self._working.removed, *moved])
        if self._phase is not SessionPhase.empty:
            self._phase = SessionPhase.committed
        LOGGER.info("Committed removal of %d duplicates.", len(moved))
        return moved

    def reset(self) -> None:
        """Discard the working set and the removed ledger.

        A scan that is still running when the session is reset keeps running,
        but its result is dropped.
        """
        self._generation += 1
        self._working = WorkingSet()
        self._phase = SessionPhase.empty

    def attach_share_metadata(self, path: str, share_id: str, share_url: str) -> FileRecord:
        """Set the share fields of the kept record at ``path``.

        Raises:
            RecordNotFound: If no kept record has that path.
        """
        kept = self._working.kept
        for index, record in enumerate(kept):
            if record.path == path:
                updated = record.model_copy(update={"share_id": share_id, "share_url": share_url})
                self._working = WorkingSet(
                    kept=[*kept[:index], updated, *kept[index + 1 :]],
                    removed=self._working.removed,
                )
                return updated
        raise RecordNotFound(path)

    def share(self, path: str, base_url: str | None = None) -> ShareLink:
        """Create a share link for the kept record at ``path`` and attach it.

        ``base_url`` defaults to the configured ``sharing.base_url``.

        Raises:
            RecordNotFound: If no kept record has that path.
        """
        record = next((record for record in self._working.kept if record.path == path), None)
        if record is None:
            raise RecordNotFound(path)
        link = share_file(record, base_url)
        self.attach_share_metadata(path, link.share_id, link.share_url)
        return link

    def summary(self) -> SessionSummary:
        """Return counts for the current working set."""
        return SessionSummary.from_records(self._working.kept, self._working.removed)

    def _ensure_idle(self, action: str) -> None:
        if self._phase is SessionPhase.scanning:
            raise SessionError(f"Cannot {action} while an ingestion is in progress.")


__all__ = [
    "DedupSession",
    "SessionPhase",
    "WorkingSet",
    "SessionError",
    "DuplicateIngestionRejected",
    "RecordNotFound",
]
