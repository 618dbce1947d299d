"""Resolution of directive targets to vault storage paths."""

import logging
from typing import Protocol

from .errors import FileNotFound, NoActiveDocument

logger = logging.getLogger(__name__)


class FileLookup(Protocol):
    def is_file(self, path: str) -> bool: ...


def resolve_relative_path(document_path: str, target: str) -> str:
    """Resolve target against the directory containing document_path.

    ``..`` pops a directory (never above the vault root), ``.`` and empty
    segments are skipped.

    Examples:
        >>> resolve_relative_path("notes/page.md", "sub/doc.xmind")
        'notes/sub/doc.xmind'
        >>> resolve_relative_path("notes/sub/page.md", "../shared/doc.xmind")
        'notes/shared/doc.xmind'
    """
    parts = [part for part in document_path.split("/")[:-1] if part]

    for segment in target.split("/"):
        if segment == "..":
            if parts:
                parts.pop()
        elif segment and segment != ".":
            parts.append(segment)

    return "/".join(parts)


def candidate_paths(target: str, document_path: str) -> list[str]:
    """Return the storage paths to try for target, in order.

    An absolute target (leading ``/``) has a single candidate with the slash
    stripped. A relative target is tried relative to the document first and
    then verbatim from the vault root.
    """
    if target.startswith("/"):
        return [target[1:]]

    candidates = [resolve_relative_path(document_path, target), target]
    return list(dict.fromkeys(candidates))


def resolve_location(
    target: str,
    document_path: str | None,
    vault: FileLookup,
) -> str:
    """Resolve a directive target to an existing storage path.

    Args:
        target: Target from the directive.
        document_path: Storage path of the document being rendered.
        vault: Lookup used to test candidates.

    Returns:
        The first candidate that names an existing file.

    Raises:
        NoActiveDocument: If document_path is missing.
        FileNotFound: If no candidate exists; names the last one tried.
    """
    if not document_path:
        raise NoActiveDocument("Could not determine the current document path")

    attempted = target
    for candidate in candidate_paths(target, document_path):
        attempted = candidate
        if vault.is_file(candidate):
            logger.debug("Resolved %r to %s", target, candidate)
            return candidate
        logger.debug("No file at %s for target %r", candidate, target)

    raise FileNotFound(attempted)
