"""Settings management for xmind-preview.

Handles loading .xmind-preview.yaml files with directory traversal,
environment variable overrides, and default values. Settings are handed to
renders as an immutable ``PreviewSettings`` snapshot; ``SettingsManager``
owns the current snapshot and its persistence.
"""

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".xmind-preview.yaml"
ENV_BASE_FOLDER = "XMIND_PREVIEW_BASE_FOLDER"

ALIGNMENTS = ("left", "center", "right")
MIN_ZOOM = 0.5
MAX_ZOOM = 1.0

# Keys written by the Obsidian plugin's data.json
_LEGACY_KEYS = {
    "xmindFolderPath": "base_folder",
    "showOpenButton": "show_open_button",
    "defaultZoom": "default_zoom",
    "defaultAlignment": "default_alignment",
}

_TRUE_STRINGS = {"true", "yes", "on", "1"}
_FALSE_STRINGS = {"false", "no", "off", "0"}


@dataclass(frozen=True)
class PreviewSettings:
    """Process-wide preview settings."""

    base_folder: str = "/drafts/xmind"
    show_open_button: bool = True
    default_zoom: float = 1.0
    default_alignment: str = "center"

    def validate(self) -> None:
        """Validate settings.

        Raises:
            ConfigError: If a value is out of range.
        """
        if not isinstance(self.base_folder, str):
            raise ConfigError("base_folder must be a string")

        if not isinstance(self.show_open_button, bool):
            raise ConfigError("show_open_button must be true or false")

        if isinstance(self.default_zoom, bool) or not isinstance(
            self.default_zoom, (int, float)
        ):
            raise ConfigError(f"Invalid default_zoom value: {self.default_zoom!r}")
        if not MIN_ZOOM <= self.default_zoom <= MAX_ZOOM:
            raise ConfigError(
                f"default_zoom must be between {MIN_ZOOM} and {MAX_ZOOM}, "
                f"got {self.default_zoom}"
            )

        if self.default_alignment not in ALIGNMENTS:
            raise ConfigError(
                f"Invalid default_alignment value: {self.default_alignment}. "
                f"Must be one of: {', '.join(ALIGNMENTS)}"
            )


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find .xmind-preview.yaml by traversing up from start_path.

    Args:
        start_path: Directory to start searching from. Defaults to cwd.

    Returns:
        Path to config file if found, None otherwise.
    """
    if start_path is None:
        start_path = Path.cwd()
    else:
        start_path = Path(start_path).resolve()

    if start_path.is_file():
        start_path = start_path.parent

    current = start_path
    while True:
        config_path = current / CONFIG_FILENAME
        if config_path.is_file():
            return config_path

        parent = current.parent
        if parent == current:
            return None
        current = parent


def load_settings(
    config_path: Path | None = None,
    start_path: Path | None = None,
) -> PreviewSettings:
    """Load settings from file and environment, merged over the defaults.

    Priority (highest to lowest):
    1. Environment variables (XMIND_PREVIEW_BASE_FOLDER)
    2. Config file (.xmind-preview.yaml)
    3. Defaults

    Args:
        config_path: Explicit path to config file. If None, searches.
        start_path: Directory to start config file search from.

    Returns:
        Loaded and validated settings.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid.
    """
    settings = apply_environment(load_stored_settings(config_path, start_path))
    settings.validate()
    return settings


def load_stored_settings(
    config_path: Path | None = None,
    start_path: Path | None = None,
) -> PreviewSettings:
    """Load settings from the config file only, without environment overrides.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid.
    """
    settings = PreviewSettings()

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.is_file():
            raise ConfigError(f"Config file not found: {config_path}")
    else:
        config_path = find_config_file(start_path)

    if config_path is not None:
        settings = _load_config_file(config_path)
        logger.debug("Loaded settings from %s", config_path)

    settings.validate()
    return settings


def apply_environment(settings: PreviewSettings) -> PreviewSettings:
    """Overlay environment variable overrides on settings."""
    env_folder = os.environ.get(ENV_BASE_FOLDER)
    if env_folder:
        return replace(settings, base_folder=env_folder.strip())
    return settings


def _load_config_file(config_path: Path) -> PreviewSettings:
    """Load settings from a YAML file.

    Unknown keys are ignored; missing keys keep their defaults.

    Raises:
        ConfigError: If file cannot be read or parsed.
    """
    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")

    return settings_from_dict(data)


def settings_from_dict(data: dict[str, Any]) -> PreviewSettings:
    """Merge a raw settings mapping over the defaults.

    Accepts both the YAML keys and the Obsidian plugin's camelCase keys;
    the YAML keys win when both are present.
    """
    merged: dict[str, Any] = {}
    for legacy, key in _LEGACY_KEYS.items():
        if legacy in data:
            merged[key] = data[legacy]
    for key in _LEGACY_KEYS.values():
        if key in data:
            merged[key] = data[key]

    changes: dict[str, Any] = {}
    if "base_folder" in merged:
        changes["base_folder"] = str(merged["base_folder"]).strip()
    if "show_open_button" in merged:
        changes["show_open_button"] = coerce_bool(merged["show_open_button"])
    if "default_zoom" in merged:
        changes["default_zoom"] = coerce_zoom(merged["default_zoom"])
    if "default_alignment" in merged:
        changes["default_alignment"] = str(merged["default_alignment"]).strip()

    return replace(PreviewSettings(), **changes)


def coerce_bool(value: Any) -> bool:
    """Convert a YAML or command-line value to bool.

    Raises:
        ConfigError: If the value is not a recognised boolean.
    """
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ConfigError(f"Invalid boolean value: {value!r}")


def coerce_zoom(value: Any) -> float:
    """Convert a YAML or command-line value to a zoom factor.

    Raises:
        ConfigError: If the value is not a number.
    """
    if isinstance(value, bool):
        raise ConfigError(f"Invalid zoom value: {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid zoom value: {value!r}") from e


def save_settings(config_path: Path, settings: PreviewSettings) -> None:
    """Write settings to a YAML file.

    Note: comments in an existing file are not preserved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    content = "# xmind-preview configuration\n\n"
    content += yaml.safe_dump(
        settings_to_dict(settings), default_flow_style=False, sort_keys=False
    )

    try:
        Path(config_path).write_text(content, encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot write config file {config_path}: {e}") from e


def create_default_config(path: Path | None = None) -> Path:
    """Create a default .xmind-preview.yaml config file.

    Args:
        path: Directory to create config in. Defaults to cwd.

    Returns:
        Path to created config file.

    Raises:
        ConfigError: If file already exists or cannot be written.
    """
    if path is None:
        path = Path.cwd()
    else:
        path = Path(path)

    config_path = path / CONFIG_FILENAME

    if config_path.exists():
        raise ConfigError(f"Config file already exists: {config_path}")

    defaults = PreviewSettings()
    config_content = f'''# xmind-preview configuration

# Folder (inside the vault) that "name:" directives look in
base_folder: "{defaults.base_folder}"

# Show the "Open" button on hover unless a block sets button-display
show_open_button: {str(defaults.show_open_button).lower()}

# Default zoom for previews, between {MIN_ZOOM} and {MAX_ZOOM}
default_zoom: {defaults.default_zoom}

# Default alignment: "left", "center" or "right"
default_alignment: "{defaults.default_alignment}"
'''

    try:
        config_path.write_text(config_content, encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot write config file: {e}") from e

    return config_path


def settings_to_dict(settings: PreviewSettings) -> dict[str, Any]:
    """Convert settings to a dictionary for display or persistence."""
    return {
        "base_folder": settings.base_folder,
        "show_open_button": settings.show_open_button,
        "default_zoom": settings.default_zoom,
        "default_alignment": settings.default_alignment,
    }


SettingsListener = Callable[[PreviewSettings], None]


class SettingsManager:
    """Owns the current settings snapshot and its persistence.

    Renders read ``settings`` once and never see it change underneath them.
    ``update()`` builds a new snapshot, saves it and notifies listeners,
    which is how open previews get re-rendered.

    The manager is given the stored settings (what the config file holds).
    ``settings`` is that value with environment overrides applied; only the
    stored value is ever written back.
    """

    def __init__(
        self,
        settings: PreviewSettings | None = None,
        config_path: Path | None = None,
    ):
        self._stored = settings if settings is not None else PreviewSettings()
        self._stored.validate()
        self._settings = apply_environment(self._stored)
        self._settings.validate()
        self.config_path = Path(config_path) if config_path is not None else None
        self._listeners: list[SettingsListener] = []

    @classmethod
    def load(
        cls,
        config_path: Path | None = None,
        start_path: Path | None = None,
    ) -> "SettingsManager":
        """Create a manager from the config file found for start_path."""
        if config_path is None:
            config_path = find_config_file(start_path)
        stored = load_stored_settings(config_path=config_path, start_path=start_path)
        return cls(settings=stored, config_path=config_path)

    @property
    def settings(self) -> PreviewSettings:
        return self._settings

    @property
    def stored_settings(self) -> PreviewSettings:
        return self._stored

    def subscribe(self, listener: SettingsListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: SettingsListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def update(self, **changes: Any) -> PreviewSettings:
        """Replace the snapshot with one carrying ``changes``.

        Raises:
            ConfigError: If a key is unknown or a value is invalid. The
                current snapshot is left untouched in that case.
        """
        unknown = set(changes) - set(settings_to_dict(self._stored))
        if unknown:
            raise ConfigError(f"Unknown setting(s): {', '.join(sorted(unknown))}")

        new_stored = replace(self._stored, **changes)
        new_stored.validate()
        new_settings = apply_environment(new_stored)
        new_settings.validate()

        if self.config_path is not None:
            save_settings(self.config_path, new_stored)

        self._stored = new_stored
        self._settings = new_settings
        logger.info("Settings updated: %s", ", ".join(sorted(changes)))

        for listener in list(self._listeners):
            listener(new_settings)
        return new_settings
