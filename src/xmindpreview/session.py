"""Tracking of open documents and re-rendering on settings change."""

import logging

from .config import PreviewSettings, SettingsManager
from .errors import FileNotFound
from .extension import render_markdown
from .vault import Vault

logger = logging.getLogger(__name__)


class PreviewSession:
    """Renders vault documents and keeps them current with the settings.

    Each open document is rendered with the snapshot current at that moment.
    A settings change re-renders every open document from scratch.
    """

    def __init__(
        self,
        vault: Vault,
        manager: SettingsManager | None = None,
        link_prefix: str = "",
    ):
        self.vault = vault
        self.manager = manager if manager is not None else SettingsManager()
        self.link_prefix = link_prefix
        self._rendered: dict[str, str] = {}
        self.manager.subscribe(self._on_settings_changed)

    @property
    def documents(self) -> list[str]:
        """Storage paths of the open documents, in opening order."""
        return list(self._rendered)

    def open(self, document_path: str) -> str:
        """Render a document and keep it open.

        Raises:
            FileNotFound: If the document does not exist in the vault.
        """
        html = self._render(document_path, self.manager.settings)
        self._rendered[document_path] = html
        return html

    def close(self, document_path: str) -> None:
        self._rendered.pop(document_path, None)

    def rendered(self, document_path: str) -> str:
        """Return the last rendering of an open document.

        Raises:
            KeyError: If the document is not open.
        """
        return self._rendered[document_path]

    def rerender_all(self) -> None:
        """Re-render every open document with the current settings."""
        settings = self.manager.settings
        for document_path in list(self._rendered):
            try:
                self._rendered[document_path] = self._render(document_path, settings)
            except FileNotFound:
                logger.warning("Closing %s: no longer in the vault", document_path)
                self.close(document_path)

    def detach(self) -> None:
        """Stop following settings changes."""
        self.manager.unsubscribe(self._on_settings_changed)

    def _on_settings_changed(self, settings: PreviewSettings) -> None:
        logger.debug("Re-rendering %d open document(s)", len(self._rendered))
        self.rerender_all()

    def _render(self, document_path: str, settings: PreviewSettings) -> str:
        text = self.vault.read_text(document_path)
        return render_markdown(
            text,
            vault=self.vault,
            document_path=document_path,
            settings=settings,
            link_prefix=self.link_prefix,
        )
