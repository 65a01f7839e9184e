"""Data models exchanged by the ingestion pipeline."""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, Literal, Optional, Protocol, Union, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

ReadResult = Union[bytes, Awaitable[bytes]]

TEXT_MEDIA_TYPES = frozenset({"application/json"})
TEXT_SUFFIXES = (".md", ".txt")


def media_kind(media_type: str, file_name: str) -> Literal["image", "text", "other"]:
    """Classify a file as image, text, or other from its declared type and name."""
    if media_type.startswith("image/"):
        return "image"
    if (
        media_type.startswith("text/")
        or media_type in TEXT_MEDIA_TYPES
        or file_name.endswith(TEXT_SUFFIXES)
    ):
        return "text"
    return "other"


@runtime_checkable
class RawFile(Protocol):
    """Handle for one user-supplied file.

    ``read`` may return the bytes directly or an awaitable resolving to them.
    A negative ``size`` means unknown; the record then uses the length read.
    """

    name: str
    path: str
    size: int
    media_type: str
    last_modified: int

    def read(self) -> ReadResult: ...


async def read_bytes(handle: RawFile) -> bytes:
    """Return the content of ``handle`` whether its reader is sync or async."""
    content = handle.read()
    if inspect.isawaitable(content):
        content = await content
    return bytes(content)


@dataclass(slots=True)
class MemoryFile:
    """A file whose content is already in memory or produced by a callable.

    Attributes:
        name: Display name.
        path: Relative path within the selection.
        content: Raw bytes, or a callable returning bytes (or an awaitable).
        media_type: Declared content type, possibly empty.
        last_modified: Modification time in epoch milliseconds.
        size: Byte length; derived from ``content`` when it is bytes. Left at
            -1 for callable content, in which case the ingested record takes
            the length of the bytes actually read.
    """

    name: str
    path: str
    content: Union[bytes, Callable[[], ReadResult]]
    media_type: str = ""
    last_modified: int = 0
    size: int = field(default=-1)

    def __post_init__(self) -> None:
        if self.size < 0 and isinstance(self.content, bytes):
            self.size = len(self.content)

    def read(self) -> ReadResult:
        if isinstance(self.content, bytes):
            return self.content
        return self.content()


@dataclass(slots=True)
class LocalFile:
    """A file on disk, read off the event loop thread.

    Attributes:
        source: Absolute location of the file.
        path: Relative path within the selection.
        size: Byte length at discovery time.
        media_type: Declared content type, possibly empty.
        last_modified: Modification time in epoch milliseconds.
    """

    source: Path
    path: str
    size: int
    media_type: str = ""
    last_modified: int = 0

    @property
    def name(self) -> str:
        return self.source.name

    async def read(self) -> bytes:
        return await asyncio.to_thread(self.source.read_bytes)


class PreviewPayload(BaseModel):
    """Self-contained preview for a file.

    Attributes:
        kind: ``image`` for a data URL, ``text`` for decoded text.
        data: The preview content.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["image", "text"]
    data: str


class FileRecord(BaseModel):
    """One ingested file, classified against the rest of its batch.

    Attributes:
        name: Display name.
        path: Relative path; identity key within a session.
        size: Byte length.
        media_type: Declared content type, possibly empty.
        fingerprint: SHA-256 hex digest, or the unreadable sentinel.
        is_duplicate: Whether an earlier file in the batch has the same fingerprint.
        last_modified: Modification time in epoch milliseconds.
        preview: Optional preview payload.
        share_id: Share identifier assigned by the sharing collaborator.
        share_url: Share URL assigned by the sharing collaborator.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    size: int = Field(ge=0)
    media_type: str = ""
    fingerprint: str
    is_duplicate: bool = False
    last_modified: int = 0
    preview: Optional[PreviewPayload] = None
    share_id: Optional[str] = None
    share_url: Optional[str] = None

    @property
    def kind(self) -> Literal["image", "text", "other"]:
        return media_kind(self.media_type, self.name)


__all__ = [
    "RawFile",
    "MemoryFile",
    "LocalFile",
    "PreviewPayload",
    "FileRecord",
    "media_kind",
    "read_bytes",
]
