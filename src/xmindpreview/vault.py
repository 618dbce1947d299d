"""Vault filesystem access.

A vault is a directory whose files are addressed by storage paths:
``/``-separated, relative to the vault root, without a leading slash.
"""

import logging
from pathlib import Path

from .errors import FileNotFound

logger = logging.getLogger(__name__)


class Vault:
    """Read-only view of a directory addressed by storage paths."""

    def __init__(self, root: Path):
        self.root = Path(root).resolve()

    def __repr__(self) -> str:
        return f"Vault({str(self.root)!r})"

    def local_path(self, path: str) -> Path | None:
        """Map a storage path to a filesystem path.

        Returns None when the path would leave the vault root or cannot name
        a file on this system.
        """
        try:
            candidate = (self.root / path.lstrip("/")).resolve()
        except (OSError, ValueError) as e:
            logger.debug("Unusable storage path %r: %s", path, e)
            return None
        try:
            candidate.relative_to(self.root)
        except ValueError:
            logger.debug("Storage path escapes vault root: %s", path)
            return None
        return candidate

    def storage_path(self, local: Path) -> str:
        """Return the storage path of a file inside the vault.

        Raises:
            FileNotFound: If the file is outside the vault root.
        """
        try:
            rel = Path(local).resolve().relative_to(self.root)
        except ValueError as e:
            raise FileNotFound(str(local)) from e
        return rel.as_posix()

    def is_file(self, path: str) -> bool:
        local = self.local_path(path)
        if local is None:
            return False
        try:
            return local.is_file()
        except (OSError, ValueError) as e:
            logger.debug("Cannot stat %r: %s", path, e)
            return False

    def read_bytes(self, path: str) -> bytes:
        """Read a file by storage path.

        Raises:
            FileNotFound: If the path does not name a readable file.
        """
        if not self.is_file(path):
            raise FileNotFound(path)
        try:
            return self.local_path(path).read_bytes()
        except OSError as e:
            raise FileNotFound(path) from e

    def read_text(self, path: str) -> str:
        return self.read_bytes(path).decode("utf-8")
