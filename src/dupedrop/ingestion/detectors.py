"""Media type detection and content fingerprinting."""

from __future__ import annotations

import asyncio
import hashlib
import mimetypes
from pathlib import Path

UNREADABLE_FINGERPRINT = "unreadable"

# Payloads above this size are hashed in a worker thread.
_INLINE_HASH_LIMIT = 1024 * 1024


class TypeDetector:
    """Guess a declared media type from a file name, as a browser would."""

    def detect(self, path: Path | str) -> str:
        """Return the media type for ``path`` or an empty string when unknown."""
        mime, _ = mimetypes.guess_type(str(path), strict=False)
        return mime or ""


class HashComputer:
    """Compute content fingerprints for duplicate detection."""

    algorithm = "sha256"

    def compute(self, data: bytes) -> str:
        """Return the hex digest of ``data``."""
        return hashlib.new(self.algorithm, data).hexdigest()

    async def compute_async(self, data: bytes) -> str:
        """Return the hex digest of ``data`` without stalling the event loop."""
        if len(data) <= _INLINE_HASH_LIMIT:
            return self.compute(data)
        return await asyncio.to_thread(self.compute, data)


__all__ = ["HashComputer", "TypeDetector", "UNREADABLE_FINGERPRINT"]
