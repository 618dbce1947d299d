"""Python-Markdown extension rendering ``xmind`` fenced blocks as previews.

Usage::

    md = markdown.Markdown(
        extensions=[XMindExtension(vault_root="vault", settings=settings)]
    )
    md.xmind_document_path = "projects/q3.md"
    html = md.convert(text)

The document path may also be given once through the ``document_path``
option; the attribute set on the Markdown instance wins.
"""

import re
from pathlib import Path

from markdown import Markdown
from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor

from .config import PreviewSettings
from .render import render_block
from .vault import Vault

DEFAULT_LANGUAGE = "xmind"

FENCE_START = re.compile(
    r"^(?P<indent>[ ]{0,3})(?P<fence>`{3,}|~{3,})[ \t]*(?P<info>[^`]*?)[ \t]*$"
)


def _is_fence_end(line: str, fence: str) -> bool:
    stripped = line.strip()
    if len(line) - len(line.lstrip(" ")) > 3:
        return False
    return len(stripped) >= len(fence) and set(stripped) == {fence[0]}


class _XMindFencePreprocessor(Preprocessor):
    """Replace ``xmind`` fences with rendered previews."""

    def __init__(self, md: Markdown, extension: "XMindExtension"):
        super().__init__(md)
        self.extension = extension

    def run(self, lines: list[str]) -> list[str]:
        language = self.extension.getConfig("language")
        result: list[str] = []
        index = 0
        length = len(lines)

        while index < length:
            line = lines[index]
            match = FENCE_START.match(line)
            if not match:
                result.append(line)
                index += 1
                continue

            fence = match.group("fence")
            info = match.group("info").split()
            end = index + 1
            while end < length and not _is_fence_end(lines[end], fence):
                end += 1

            if not info or info[0] != language:
                # Foreign fence, copied through untouched
                result.extend(lines[index : end + 1])
                index = end + 1
                continue

            source = "\n".join(lines[index + 1 : end])
            placeholder = self.md.htmlStash.store(self._render(source))
            result.extend(["", placeholder, ""])
            index = end + 1

        return result

    def _render(self, source: str) -> str:
        document_path = getattr(self.md, "xmind_document_path", None)
        if document_path is None:
            document_path = self.extension.getConfig("document_path") or None
        return render_block(
            source,
            settings=self.extension.settings,
            vault=self.extension.vault,
            document_path=document_path,
            link_prefix=self.extension.getConfig("link_prefix"),
        )


class XMindExtension(Extension):
    """Register the ``xmind`` fence preprocessor."""

    def __init__(self, **kwargs: object) -> None:
        self.config = {
            "vault_root": [".", "Directory holding the vault."],
            "settings": [PreviewSettings(), "PreviewSettings snapshot."],
            "document_path": ["", "Storage path of the document being rendered."],
            "language": [DEFAULT_LANGUAGE, "Info string that marks preview blocks."],
            "link_prefix": ["", "Prefix for the Open link target."],
        }
        super().__init__(**kwargs)

    @property
    def settings(self) -> PreviewSettings:
        settings = self.getConfig("settings")
        return settings if settings is not None else PreviewSettings()

    @property
    def vault(self) -> Vault:
        root = self.getConfig("vault_root")
        if isinstance(root, Vault):
            return root
        return Vault(Path(root))

    def extendMarkdown(self, md: Markdown) -> None:  # noqa: N802
        processor = _XMindFencePreprocessor(md, self)
        # After normalize_whitespace (30), before fenced_code_block (25)
        md.preprocessors.register(processor, "xmind_preview", 28)


def makeExtension(**kwargs: object) -> XMindExtension:  # noqa: N802
    return XMindExtension(**kwargs)


def render_markdown(
    text: str,
    vault: Vault,
    document_path: str | None,
    settings: PreviewSettings | None = None,
    extensions: list | None = None,
    link_prefix: str = "",
) -> str:
    """Convert Markdown text to HTML with ``xmind`` blocks rendered.

    Args:
        text: Markdown source.
        vault: Vault the document lives in.
        document_path: Storage path of the document.
        settings: Settings snapshot; defaults if None.
        extensions: Extra Markdown extensions.
        link_prefix: Prefix for the Open link target.

    Returns:
        HTML body fragment.
    """
    md = Markdown(
        extensions=[
            XMindExtension(
                vault_root=vault,
                settings=settings,
                link_prefix=link_prefix,
            ),
            *(extensions or ["fenced_code", "tables"]),
        ]
    )
    md.xmind_document_path = document_path
    return md.convert(text)
