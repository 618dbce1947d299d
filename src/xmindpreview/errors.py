"""Exceptions raised by xmind-preview.

Every render condition is a subclass of ``XMindPreviewError`` so the block
pipeline can turn any of them into the inline placeholder.
"""


class XMindPreviewError(Exception):
    """Base exception for xmind-preview errors."""

    pass


class MissingTarget(XMindPreviewError):
    """Block text contains neither a ``name:`` nor a ``path:`` directive."""

    pass


class NoActiveDocument(XMindPreviewError):
    """The host could not tell which document is being rendered."""

    pass


class FileNotFound(XMindPreviewError):
    """No candidate storage path exists in the vault."""

    def __init__(self, path: str):
        super().__init__(f"File does not exist: {path}")
        self.path = path


class CorruptArchive(XMindPreviewError):
    """Content is not a readable zip archive."""

    pass


class ThumbnailNotFound(XMindPreviewError):
    """The archive has no embedded thumbnail entry."""

    pass


class ConfigError(XMindPreviewError):
    """Settings file cannot be read, written or validated."""

    pass
