"""Tests for xmindpreview.extension module."""

import markdown
from bs4 import BeautifulSoup
from conftest import build_xmind, with_undecodable_name, write_file

from xmindpreview.config import PreviewSettings
from xmindpreview.extension import XMindExtension, render_markdown
from xmindpreview.render import PLACEHOLDER_TEXT
from xmindpreview.vault import Vault


def _parse(html):
    return BeautifulSoup(html, "html.parser")


def _render(text, vault_dir, **kwargs):
    return render_markdown(
        text, vault=Vault(vault_dir), document_path="projects/q3.md", **kwargs
    )


class TestXMindExtension:
    """Tests for the Markdown extension."""

    def test_replaces_xmind_fence(self, vault_dir):
        text = "# Plan\n\n```xmind\nname: roadmap\n```\n\nAfter the map.\n"
        html = _render(text, vault_dir)
        soup = _parse(html)

        assert soup.find("h1").get_text() == "Plan"
        assert soup.find("div", class_="xmind-preview") is not None
        assert soup.find("img") is not None
        assert "name: roadmap" not in html
        assert "After the map." in html

    def test_preview_not_wrapped_in_paragraph(self, vault_dir):
        html = render_markdown(
            "```xmind\nname: roadmap\n```\n",
            vault=Vault(vault_dir),
            document_path="projects/q3.md",
        )
        container = _parse(html).find("div", class_="xmind-preview")
        assert container.parent.name != "p"

    def test_tilde_fence(self, vault_dir):
        html = render_markdown(
            "~~~~ xmind\nname: roadmap\n~~~~\n",
            vault=Vault(vault_dir),
            document_path="projects/q3.md",
        )
        assert _parse(html).find("img") is not None

    def test_other_fences_untouched(self, vault_dir):
        text = "```python\nprint('hi')\n```\n"
        html = _render(text, vault_dir)
        code = _parse(html).find("code")
        assert "print('hi')" in code.get_text()
        assert _parse(html).find("img") is None

    def test_xmind_fence_inside_other_fence(self, vault_dir):
        """Test an example block shown inside a longer fence is not rendered."""
        text = "````markdown\n```xmind\nname: roadmap\n```\n````\n"
        html = _render(text, vault_dir)
        assert _parse(html).find("img") is None
        assert "name: roadmap" in html

    def test_failure_is_local_to_block(self, vault_dir):
        """Test a broken block does not affect its siblings."""
        text = (
            "```xmind\nzoom: 0.5\n```\n\n"
            "```xmind\nname: roadmap\n```\n"
        )
        html = _render(text, vault_dir)
        soup = _parse(html)
        assert soup.find("div", class_="xmind-preview-error").get_text() == (
            PLACEHOLDER_TEXT
        )
        assert len(soup.find_all("img")) == 1

    def test_damaged_archive_beside_valid_block(self, vault_dir):
        """Test a damaged archive leaves the neighbouring preview intact."""
        damaged = with_undecodable_name(build_xmind())
        write_file(vault_dir, "drafts/xmind/damaged.xmind", damaged)
        text = (
            "```xmind\nname: damaged\n```\n\n"
            "```xmind\nname: roadmap\n```\n"
        )
        soup = _parse(_render(text, vault_dir))

        assert soup.find("div", class_="xmind-preview-error") is not None
        assert len(soup.find_all("img")) == 1

    def test_overlong_name_beside_valid_block(self, vault_dir):
        text = (
            "```xmind\nname: " + "a" * 300 + "\n```\n\n"
            "```xmind\nname: roadmap\n```\n"
        )
        soup = _parse(_render(text, vault_dir))

        assert soup.find("div", class_="xmind-preview-error") is not None
        assert len(soup.find_all("img")) == 1

    def test_settings_passed_to_blocks(self, vault_dir):
        settings = PreviewSettings(default_alignment="left", default_zoom=0.5)
        html = render_markdown(
            "```xmind\nname: roadmap\n```\n",
            vault=Vault(vault_dir),
            document_path="projects/q3.md",
            settings=settings,
        )
        soup = _parse(html)
        assert "justify-content: flex-start" in soup.find("div")["style"]
        assert "width: 50%" in soup.find("img")["style"]

    def test_custom_language(self, vault_dir):
        md = markdown.Markdown(
            extensions=[
                XMindExtension(
                    vault_root=str(vault_dir),
                    document_path="projects/q3.md",
                    language="mindmap",
                ),
                "fenced_code",
            ]
        )
        html = md.convert("```mindmap\nname: roadmap\n```\n")
        assert _parse(html).find("img") is not None

    def test_document_path_attribute_wins(self, vault_dir):
        md = markdown.Markdown(
            extensions=[
                XMindExtension(vault_root=str(vault_dir), document_path="elsewhere.md")
            ]
        )
        md.xmind_document_path = "notes/page.md"
        html = md.convert("```xmind\npath: sub/doc.xmind\n```\n")
        assert _parse(html).find("div")["data-xmind-path"] == "notes/sub/doc.xmind"

    def test_without_document_path(self, vault_dir):
        md = markdown.Markdown(extensions=[XMindExtension(vault_root=str(vault_dir))])
        html = md.convert("```xmind\nname: roadmap\n```\n")
        assert PLACEHOLDER_TEXT in html

    def test_entry_point_name(self, vault_dir):
        """Test the extension loads by its registered name."""
        md = markdown.Markdown(
            extensions=["xmind"],
            extension_configs={
                "xmind": {
                    "vault_root": str(vault_dir),
                    "document_path": "projects/q3.md",
                }
            },
        )
        html = md.convert("```xmind\nname: roadmap\n```\n")
        assert _parse(html).find("img") is not None
