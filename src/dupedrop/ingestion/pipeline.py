"""High-level ingestion pipeline orchestration."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence

from .detectors import UNREADABLE_FINGERPRINT, HashComputer
from .errors import DuplicatePathError, UnreadableFile
from .models import FileRecord, PreviewPayload, RawFile, read_bytes
from .previews import PreviewGenerator
from .progress import ProgressCallback, ProgressTracker

if TYPE_CHECKING:
    from dupedrop.config.models import DupedropConfig

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class _Slot:
    fingerprint: str
    preview: Optional[PreviewPayload]
    size: int = 0


def classify_duplicates(fingerprints: Sequence[str]) -> List[bool]:
    """Flag each fingerprint that already appeared earlier in the sequence.

    The first occurrence of every fingerprint is kept; later ones are
    duplicates. The unreadable sentinel never matches anything, itself included.

    Args:
        fingerprints: Fingerprints in assignment order.

    Returns:
        List[bool]: Duplicate flags aligned with ``fingerprints``.
    """
    seen: set[str] = set()
    flags: List[bool] = []
    for fingerprint in fingerprints:
        if fingerprint == UNREADABLE_FINGERPRINT:
            flags.append(False)
            continue
        flags.append(fingerprint in seen)
        seen.add(fingerprint)
    return flags


def _ensure_unique_paths(handles: Sequence[RawFile]) -> None:
    seen: set[str] = set()
    for handle in handles:
        if handle.path in seen:
            raise DuplicatePathError(handle.path)
        seen.add(handle.path)


class IngestionPipeline:
    """Fingerprint and preview a batch of files concurrently, then classify them."""

    def __init__(
        self,
        hasher: HashComputer | None = None,
        previews: PreviewGenerator | None = None,
        max_concurrency: int = 0,
    ) -> None:
        self.hasher = hasher or HashComputer()
        self.previews = previews or PreviewGenerator()
        self.max_concurrency = max_concurrency

    @classmethod
    def from_config(cls, config: "DupedropConfig") -> "IngestionPipeline":
        """Build a pipeline using the ingestion and preview settings of ``config``."""
        return cls(
            previews=PreviewGenerator(config.previews),
            max_concurrency=config.ingestion.max_concurrency,
        )

    async def ingest(
        self,
        files: Iterable[RawFile],
        progress: ProgressCallback | None = None,
    ) -> list[FileRecord]:
        """Process ``files`` and return one record per file in input order.

        Per-file work runs concurrently and may finish in any order. Duplicate
        flags are assigned afterwards in a single pass over input order, so the
        result does not depend on scheduling.

        Args:
            files: File handles; their order is the assignment order.
            progress: Called with a percentage after each file completes.

        Returns:
            list[FileRecord]: Classified records in assignment order.

        Raises:
            DuplicatePathError: If two handles share a path.
        """
        handles = list(files)
        _ensure_unique_paths(handles)
        tracker = ProgressTracker(len(handles), progress)
        if not handles:
            tracker.finish_empty()
            return []

        LOGGER.info("Ingesting %d files.", len(handles))
        slots: list[Optional[_Slot]] = [None] * len(handles)
        limiter = (
            asyncio.Semaphore(self.max_concurrency)
            if self.max_concurrency > 0
            else contextlib.nullcontext()
        )

        async def _run(index: int, handle: RawFile) -> None:
            async with limiter:
                slots[index] = await self._process(handle)
            tracker.advance()

        await asyncio.gather(*(_run(index, handle) for index, handle in enumerate(handles)))

        filled = [slot for slot in slots if slot is not None]
        if len(filled) != len(handles):
            raise RuntimeError("ingestion finished with unfilled result slots")
        flags = classify_duplicates([slot.fingerprint for slot in filled])

        records = [
            FileRecord(
                name=handle.name,
                path=handle.path,
                size=handle.size if handle.size >= 0 else slot.size,
                media_type=handle.media_type or "",
                fingerprint=slot.fingerprint,
                is_duplicate=is_duplicate,
                last_modified=handle.last_modified,
                preview=slot.preview,
            )
            for handle, slot, is_duplicate in zip(handles, filled, flags)
        ]
        LOGGER.info(
            "Ingestion finished: %d files, %d duplicates.",
            len(records),
            sum(flags),
        )
        return records

    async def _process(self, handle: RawFile) -> _Slot:
        try:
            data = await self._read(handle)
        except UnreadableFile as exc:
            LOGGER.warning("%s", exc)
            return _Slot(fingerprint=UNREADABLE_FINGERPRINT, preview=None)

        fingerprint, preview = await asyncio.gather(
            self.hasher.compute_async(data),
            self.previews.generate(data, handle.media_type or "", handle.name),
        )
        return _Slot(fingerprint=fingerprint, preview=preview, size=len(data))

    async def _read(self, handle: RawFile) -> bytes:
        try:
            return await read_bytes(handle)
        except Exception as exc:
            raise UnreadableFile(f"{handle.path}: could not read file: {exc}") from exc


__all__ = ["IngestionPipeline", "classify_duplicates"]
