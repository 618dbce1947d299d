"""Thumbnail extraction from XMind archives.

An .xmind file is a zip archive; XMind stores a pre-rendered PNG preview
at a fixed entry name.
"""

import base64
import logging
import zipfile
import zlib
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path

from .errors import CorruptArchive, FileNotFound, ThumbnailNotFound

logger = logging.getLogger(__name__)

THUMBNAIL_ENTRY = "Thumbnails/thumbnail.png"
THUMBNAIL_MIME = "image/png"


@dataclass(frozen=True)
class ThumbnailImage:
    """Decoded thumbnail bytes and their encoding."""

    data: bytes
    mime: str = THUMBNAIL_MIME
    entry: str = THUMBNAIL_ENTRY

    def data_uri(self) -> str:
        """Return the image as a base64 ``data:`` URI."""
        b64_data = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime};base64,{b64_data}"


def extract_thumbnail(data: bytes) -> ThumbnailImage:
    """Extract the embedded thumbnail from archive bytes.

    Args:
        data: Raw content of an .xmind file.

    Returns:
        The thumbnail image.

    Raises:
        CorruptArchive: If data is not a readable zip archive.
        ThumbnailNotFound: If the archive has no thumbnail entry.
    """
    try:
        archive = zipfile.ZipFile(BytesIO(data))
    except (
        zipfile.BadZipFile,
        zipfile.LargeZipFile,
        ValueError,
        NotImplementedError,
        OSError,
        EOFError,
    ) as e:
        raise CorruptArchive(f"Not a valid archive: {e}") from e

    with archive:
        try:
            info = archive.getinfo(THUMBNAIL_ENTRY)
        except KeyError as e:
            raise ThumbnailNotFound(
                f"Thumbnail not found in the XMind file: {THUMBNAIL_ENTRY}"
            ) from e

        if info.is_dir():
            raise ThumbnailNotFound(f"{THUMBNAIL_ENTRY} is a directory")

        try:
            image_data = archive.read(info)
        except (
            zipfile.BadZipFile,
            zlib.error,
            EOFError,
            ValueError,
            NotImplementedError,
            RuntimeError,
        ) as e:
            raise CorruptArchive(f"Cannot read {THUMBNAIL_ENTRY}: {e}") from e

    logger.debug("Extracted %s (%d bytes)", THUMBNAIL_ENTRY, len(image_data))
    return ThumbnailImage(data=image_data)


def read_thumbnail(path: Path) -> ThumbnailImage:
    """Extract the thumbnail from an archive on the local filesystem.

    Raises:
        FileNotFound: If the file cannot be read.
        CorruptArchive: If the file is not a readable zip archive.
        ThumbnailNotFound: If the archive has no thumbnail entry.
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except (OSError, ValueError) as e:
        raise FileNotFound(str(path)) from e
    return extract_thumbnail(data)
