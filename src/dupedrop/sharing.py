"""Share link generation for individual files."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from dupedrop.config import ConfigManager
from dupedrop.ingestion.models import FileRecord

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ShareLink:
    """Opaque share identifier and the URL built from it."""

    share_id: str
    share_url: str

    @property
    def download_url(self) -> str:
        return download_url(self.share_url)


def share_file(record: FileRecord, base_url: str | None = None) -> ShareLink:
    """Create a new share link for ``record``.

    The record itself is not modified; write the result back with
    ``DedupSession.attach_share_metadata``.

    Args:
        record: The file being shared.
        base_url: Link prefix. Defaults to ``sharing.base_url`` from the
            effective configuration.

    Raises:
        ConfigError: If ``base_url`` is omitted and the configuration is invalid.
    """
    if base_url is None:
        base_url = ConfigManager().load().sharing.base_url
    share_id = str(uuid.uuid4())
    LOGGER.debug("Created share %s for %s.", share_id, record.path)
    return ShareLink(share_id=share_id, share_url=f"{base_url.rstrip('/')}/share/{share_id}")


def download_url(share_url: str) -> str:
    """Return the direct-download variant of ``share_url``."""
    return f"{share_url}?download=true"


__all__ = ["ShareLink", "share_file", "download_url"]
