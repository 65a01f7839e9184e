"""Tests for preview generation."""

from __future__ import annotations

import base64
import io

import pytest
from PIL import Image

from dupedrop.config.models import PreviewOptions
from dupedrop.ingestion import PreviewGenerator


def _png(width: int, height: int) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color="blue").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.mark.asyncio
async def test_image_preview_is_self_contained_data_url() -> None:
    data = _png(4, 4)

    preview = await PreviewGenerator().generate(data, "image/png", "dot.png")

    assert preview is not None
    assert preview.kind == "image"
    assert preview.data == "data:image/png;base64," + base64.b64encode(data).decode("ascii")


@pytest.mark.asyncio
async def test_image_preview_thumbnails_when_configured() -> None:
    generator = PreviewGenerator(PreviewOptions(image_max_edge=8))

    preview = await generator.generate(_png(64, 32), "image/png", "wide.png")

    assert preview is not None
    header, encoded = preview.data.split(",", 1)
    assert header == "data:image/png;base64"
    with Image.open(io.BytesIO(base64.b64decode(encoded))) as img:
        assert img.size == (8, 4)


@pytest.mark.asyncio
async def test_corrupt_image_thumbnail_yields_no_preview() -> None:
    generator = PreviewGenerator(PreviewOptions(image_max_edge=8))

    assert await generator.generate(b"not an image", "image/jpeg", "broken.jpg") is None


@pytest.mark.parametrize(
    ("media_type", "name"),
    [
        ("text/plain", "a.log"),
        ("text/csv", "table.csv"),
        ("application/json", "data.json"),
        ("", "README.md"),
        ("application/octet-stream", "notes.txt"),
    ],
)
@pytest.mark.asyncio
async def test_text_previews_decode_content(media_type: str, name: str) -> None:
    preview = await PreviewGenerator().generate("héllo\nworld".encode("utf-8"), media_type, name)

    assert preview is not None
    assert preview.kind == "text"
    assert preview.data == "héllo\nworld"


@pytest.mark.asyncio
async def test_text_preview_respects_character_limit() -> None:
    generator = PreviewGenerator(PreviewOptions(text_max_chars=5))

    preview = await generator.generate(b"abcdefghij", "text/plain", "long.txt")

    assert preview is not None and preview.data == "abcde"


@pytest.mark.asyncio
async def test_invalid_utf8_bytes_are_replaced() -> None:
    preview = await PreviewGenerator().generate(b"caf\xe9", "text/plain", "latin.txt")

    assert preview is not None
    assert preview.data == "caf\ufffd"


@pytest.mark.asyncio
async def test_utf8_byte_order_mark_is_dropped() -> None:
    preview = await PreviewGenerator().generate(b"\xef\xbb\xbfhello", "text/plain", "bom.txt")

    assert preview is not None
    assert preview.data == "hello"


@pytest.mark.asyncio
async def test_unsupported_types_have_no_preview() -> None:
    generator = PreviewGenerator()

    assert await generator.generate(b"%PDF-1.7", "application/pdf", "doc.pdf") is None
    assert await generator.generate(b"\x00", "", "archive.bin") is None


@pytest.mark.asyncio
async def test_disabled_previews_return_none() -> None:
    generator = PreviewGenerator(PreviewOptions(enabled=False))

    assert await generator.generate(b"hello", "text/plain", "a.txt") is None
