"""Shared fixtures for xmind-preview tests."""

import zipfile
from io import BytesIO
from pathlib import Path

import pytest

# Minimal bytes with a PNG signature; the extractor never decodes pixels.
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + b"thumbnail-pixels"


def build_xmind(entries: dict[str, bytes] | None = None) -> bytes:
    """Build .xmind archive bytes holding the given entries."""
    if entries is None:
        entries = {
            "content.json": b"[]",
            "Thumbnails/thumbnail.png": PNG_BYTES,
        }
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return buffer.getvalue()


_THUMBNAIL_NAME = b"Thumbnails/thumbnail.png"
_LOCAL_HEADER_SIZE = 30
_CENTRAL_HEADER_SIZE = 46


def with_unsupported_version(data: bytes) -> bytes:
    """Mark the thumbnail's directory record as needing zip version 25.5."""
    buf = bytearray(data)
    central = buf.rindex(_THUMBNAIL_NAME) - _CENTRAL_HEADER_SIZE
    buf[central + 6] = 0xFF
    return bytes(buf)


def with_undecodable_name(data: bytes) -> bytes:
    """Break the UTF-8 name in the thumbnail's local header."""
    buf = bytearray(data)
    local = buf.index(_THUMBNAIL_NAME) - _LOCAL_HEADER_SIZE
    central = buf.rindex(_THUMBNAIL_NAME) - _CENTRAL_HEADER_SIZE
    # Set the UTF-8 name flag (0x0800) in both headers
    buf[local + 7] |= 0x08
    buf[central + 9] |= 0x08
    # "Thumbnails" -> "Thumbna\xc5ls"
    buf[local + _LOCAL_HEADER_SIZE + 7] = 0xC5
    return bytes(buf)


@pytest.fixture
def png_bytes():
    return PNG_BYTES


@pytest.fixture
def xmind_bytes():
    return build_xmind()


@pytest.fixture
def vault_dir(tmp_path):
    """A vault with a few notes and archives.

    drafts/xmind/roadmap.xmind
    notes/page.md
    notes/sub/doc.xmind
    notes/shared/doc.xmind
    projects/q3.md
    """
    root = tmp_path / "vault"
    files = {
        "drafts/xmind/roadmap.xmind": build_xmind(),
        "notes/sub/doc.xmind": build_xmind(),
        "notes/shared/doc.xmind": build_xmind(),
        "notes/page.md": b"# Page\n",
        "projects/q3.md": b"# Q3\n",
    }
    for rel, data in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    return root


def write_file(root: Path, rel: str, data: bytes | str) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(data, str):
        path.write_text(data, encoding="utf-8")
    else:
        path.write_bytes(data)
    return path
