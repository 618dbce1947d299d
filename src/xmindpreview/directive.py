"""Parsing of ``xmind`` block bodies into directives.

A block body holds one directive per line::

    name: roadmap
    zoom: 0.8
    alignment: right
    button-display: false

``name:`` looks the archive up in the configured base folder, ``path:`` gives
a path verbatim. Other lines are ignored.
"""

import logging
import math
import re
from dataclasses import dataclass

from .config import PreviewSettings
from .errors import MissingTarget

logger = logging.getLogger(__name__)

ARCHIVE_EXTENSION = "xmind"

_NAME_RE = re.compile(r"^\s*name:\s*(.*)$")
_PATH_RE = re.compile(r"^\s*path:\s*(.*)$")
_ZOOM_RE = re.compile(r"^\s*zoom:\s*(\S+)\s*$")
_BUTTON_RE = re.compile(r"^\s*button-display:\s*(true|True|1|false|False|0)\s*$")
_ALIGNMENT_RE = re.compile(r"^\s*alignment:\s*(left|right|center)\s*$")

_BUTTON_TRUE = {"true", "True", "1"}


@dataclass(frozen=True)
class Directive:
    """Parsed configuration of one ``xmind`` block."""

    target: str
    zoom: float
    button_visible: bool | None
    alignment: str

    def show_button(self, settings: PreviewSettings) -> bool:
        """Return whether the Open control is shown for this block."""
        if self.button_visible is None:
            return settings.show_open_button
        return self.button_visible


class _Accumulator:
    """Collects directive values line by line.

    Precedence per field:
        name target, path target: first match wins
        target: name target, else path target
        zoom, button, alignment: last valid match wins
    """

    def __init__(self, settings: PreviewSettings):
        self.base_folder = settings.base_folder
        self.name_target: str | None = None
        self.path_target: str | None = None
        self.zoom = settings.default_zoom
        self.button_visible: bool | None = None
        self.alignment = settings.default_alignment

    def feed(self, line: str) -> None:
        match = _NAME_RE.match(line)
        if match:
            name = match.group(1).strip()
            if name and self.name_target is None:
                self.name_target = _compose_name_target(self.base_folder, name)
            return

        match = _PATH_RE.match(line)
        if match:
            path = match.group(1).strip()
            if path and self.path_target is None:
                self.path_target = path
            return

        match = _ZOOM_RE.match(line)
        if match:
            zoom = _parse_zoom(match.group(1))
            if zoom is None:
                logger.debug("Ignoring invalid zoom value: %r", match.group(1))
            else:
                self.zoom = zoom
            return

        match = _BUTTON_RE.match(line)
        if match:
            self.button_visible = match.group(1) in _BUTTON_TRUE
            return

        match = _ALIGNMENT_RE.match(line)
        if match:
            self.alignment = match.group(1)

    @property
    def target(self) -> str | None:
        return self.name_target or self.path_target

    def build(self) -> Directive:
        target = self.target
        if not target:
            raise MissingTarget("No valid file path provided")
        return Directive(
            target=target,
            zoom=self.zoom,
            button_visible=self.button_visible,
            alignment=self.alignment,
        )


def _compose_name_target(base_folder: str, name: str) -> str:
    return f"{base_folder.rstrip('/')}/{name}.{ARCHIVE_EXTENSION}"


def _parse_zoom(value: str) -> float | None:
    try:
        zoom = float(value)
    except ValueError:
        return None
    if not math.isfinite(zoom) or zoom <= 0:
        return None
    return zoom


def parse_directive(source: str, settings: PreviewSettings | None = None) -> Directive:
    """Parse the body of an ``xmind`` block.

    Args:
        source: Raw block text.
        settings: Settings snapshot supplying the base folder and defaults.

    Returns:
        The parsed directive.

    Raises:
        MissingTarget: If neither ``name:`` nor ``path:`` yields a target.
    """
    accumulator = _Accumulator(settings or PreviewSettings())
    for line in source.splitlines():
        accumulator.feed(line)
    return accumulator.build()
