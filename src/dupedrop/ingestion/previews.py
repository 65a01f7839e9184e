"""Lightweight preview generation for images and text."""

from __future__ import annotations

import asyncio
import base64
import io
import logging
from typing import Optional

from PIL import Image, UnidentifiedImageError

from dupedrop.config.models import PreviewOptions

from .errors import PreviewDecodeFailure
from .models import PreviewPayload, media_kind

LOGGER = logging.getLogger(__name__)


def data_url(data: bytes, media_type: str) -> str:
    """Return ``data`` embedded as a base64 ``data:`` URL."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{media_type or 'application/octet-stream'};base64,{encoded}"


class PreviewGenerator:
    """Produce previews for image and text files.

    Images become self-contained data URLs, optionally thumbnailed with Pillow.
    Text (``text/*``, JSON, ``.md`` and ``.txt``) is decoded as UTF-8 with a
    leading BOM dropped and invalid bytes replaced by U+FFFD. Anything else has
    no preview.
    """

    def __init__(self, options: PreviewOptions | None = None) -> None:
        self.options = options or PreviewOptions()

    async def generate(
        self, data: bytes, media_type: str, file_name: str
    ) -> Optional[PreviewPayload]:
        """Return a preview for the file, or None when unsupported or undecodable.

        Args:
            data: Raw file content.
            media_type: Declared content type, possibly empty.
            file_name: Display name, used for extension-based text detection.

        Returns:
            Optional[PreviewPayload]: Preview payload, if one could be built.
        """
        if not self.options.enabled:
            return None
        try:
            kind = media_kind(media_type, file_name)
            if kind == "image":
                return await self._image_preview(data, media_type)
            if kind == "text":
                return self._text_preview(data)
        except PreviewDecodeFailure as exc:
            LOGGER.debug("No preview for %s: %s", file_name, exc)
        except Exception:  # pragma: no cover - previews are best effort
            LOGGER.exception("Preview generation failed for %s", file_name)
        return None

    async def _image_preview(self, data: bytes, media_type: str) -> PreviewPayload:
        max_edge = self.options.image_max_edge
        if max_edge is None:
            return PreviewPayload(kind="image", data=data_url(data, media_type))
        thumbnail = await asyncio.to_thread(self._thumbnail, data, max_edge)
        return PreviewPayload(kind="image", data=data_url(thumbnail, "image/png"))

    def _thumbnail(self, data: bytes, max_edge: int) -> bytes:
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.thumbnail((max_edge, max_edge))
                buffer = io.BytesIO()
                img.save(buffer, format="PNG")
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise PreviewDecodeFailure(f"cannot decode image: {exc}") from exc
        return buffer.getvalue()

    def _text_preview(self, data: bytes) -> PreviewPayload:
        text = data.decode("utf-8-sig", errors="replace")
        limit = self.options.text_max_chars
        if limit is not None:
            text = text[:limit]
        return PreviewPayload(kind="text", data=text)


__all__ = ["PreviewGenerator", "data_url"]
