"""xmind-preview - Inline XMind thumbnail previews for Markdown vaults."""

__version__ = "1.3.0"

from .config import PreviewSettings, SettingsManager, load_settings
from .directive import Directive, parse_directive
from .errors import (
    ConfigError,
    CorruptArchive,
    FileNotFound,
    MissingTarget,
    NoActiveDocument,
    ThumbnailNotFound,
    XMindPreviewError,
)
from .extension import XMindExtension, render_markdown
from .render import render_block, render_placeholder, render_preview
from .resolver import resolve_location, resolve_relative_path
from .session import PreviewSession
from .thumbnail import ThumbnailImage, extract_thumbnail
from .vault import Vault

__all__ = [
    "PreviewSettings",
    "SettingsManager",
    "load_settings",
    "Directive",
    "parse_directive",
    "resolve_location",
    "resolve_relative_path",
    "ThumbnailImage",
    "extract_thumbnail",
    "render_block",
    "render_preview",
    "render_placeholder",
    "render_markdown",
    "XMindExtension",
    "PreviewSession",
    "Vault",
    "XMindPreviewError",
    "MissingTarget",
    "NoActiveDocument",
    "FileNotFound",
    "CorruptArchive",
    "ThumbnailNotFound",
    "ConfigError",
    "__version__",
]
