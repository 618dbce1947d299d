"""HTML rendering of XMind previews.

Turns a thumbnail and a directive into an HTML fragment, and runs the
per-block pipeline that ends in either a preview or the failure placeholder.
"""

import logging
from urllib.parse import quote

from bs4 import BeautifulSoup, Tag

from .config import PreviewSettings
from .directive import Directive, parse_directive
from .errors import XMindPreviewError
from .resolver import resolve_location
from .thumbnail import ThumbnailImage, extract_thumbnail
from .vault import Vault

logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT = "Failed to load XMind preview."
OPEN_BUTTON_TEXT = "Open"

_JUSTIFY = {
    "left": "flex-start",
    "center": "center",
    "right": "flex-end",
}

_BUTTON_POSITION = {
    "left": "left: 8px;",
    "center": "left: 50%; transform: translateX(-50%);",
    "right": "right: 8px;",
}


def _new_soup() -> BeautifulSoup:
    return BeautifulSoup("", "html.parser")


def _format_percent(zoom: float) -> str:
    return f"{100 * zoom:g}%"


def preview_css() -> str:
    """Return the stylesheet for rendered previews.

    The Open control is hidden until the image or the control is hovered.
    """
    return """
/* XMind preview */
.xmind-preview img {
  display: block;
}
.xmind-preview-open {
  display: none;
}
.xmind-preview img:hover + .xmind-preview-open,
.xmind-preview-open:hover {
  display: block;
}
.xmind-preview-open a {
  padding: 4px 8px;
  font-size: 12px;
  cursor: pointer;
  background: transparent;
  border: none;
  box-shadow: none;
  color: var(--text-accent, #7f6df2);
  text-decoration: none;
}
.xmind-preview-open a:hover {
  text-decoration: underline;
}
.xmind-preview-error {
  color: var(--text-muted, #888);
  font-style: italic;
}"""


def render_preview(
    image: ThumbnailImage,
    directive: Directive,
    settings: PreviewSettings,
    location: str,
    link_prefix: str = "",
) -> str:
    """Build the HTML fragment for one preview.

    Args:
        image: Extracted thumbnail.
        directive: Display options for the block.
        settings: Settings snapshot for the global button default.
        location: Resolved storage path of the archive.
        link_prefix: Prepended to location in the Open link.

    Returns:
        HTML fragment string.
    """
    soup = _new_soup()
    alignment = directive.alignment if directive.alignment in _JUSTIFY else "center"

    container = soup.new_tag("div")
    container["class"] = ["xmind-preview", f"xmind-preview-{alignment}"]
    container["data-xmind-path"] = location
    container["style"] = (
        "position: relative; width: 100%; display: flex; "
        f"align-items: center; justify-content: {_JUSTIFY[alignment]};"
    )

    img = soup.new_tag("img")
    img["src"] = image.data_uri()
    img["alt"] = location.rsplit("/", 1)[-1]
    img["style"] = f"width: {_format_percent(directive.zoom)}; height: auto;"
    container.append(img)

    if directive.show_button(settings):
        container.append(_open_control(soup, location, alignment, link_prefix))

    soup.append(container)
    return str(soup)


def _open_control(
    soup: BeautifulSoup, location: str, alignment: str, link_prefix: str
) -> Tag:
    wrapper = soup.new_tag("div")
    wrapper["class"] = ["xmind-preview-open"]
    wrapper["style"] = f"position: absolute; bottom: 8px; {_BUTTON_POSITION[alignment]}"

    link = soup.new_tag("a")
    link["href"] = link_prefix + quote(location)
    link["role"] = "button"
    link.string = OPEN_BUTTON_TEXT
    wrapper.append(link)
    return wrapper


def render_placeholder() -> str:
    """Return the fragment shown when a preview cannot be rendered."""
    soup = _new_soup()
    div = soup.new_tag("div")
    div["class"] = ["xmind-preview-error"]
    div.string = PLACEHOLDER_TEXT
    soup.append(div)
    return str(soup)


def render_block(
    source: str,
    settings: PreviewSettings,
    vault: Vault,
    document_path: str | None,
    link_prefix: str = "",
) -> str:
    """Render one ``xmind`` block.

    Runs parse, resolve, read, extract and render. Any preview error is
    logged and replaced by the placeholder, so one broken block never
    affects the rest of the document.

    Args:
        source: Raw block text.
        settings: Settings snapshot for this render.
        vault: Vault the document lives in.
        document_path: Storage path of the document being rendered.
        link_prefix: Prepended to the archive path in the Open link.

    Returns:
        HTML fragment string.
    """
    try:
        directive = parse_directive(source, settings)
        logger.debug("Attempting to load XMind file at: %s", directive.target)
        location = resolve_location(directive.target, document_path, vault)
        data = vault.read_bytes(location)
        logger.info("Read XMind file %s (%d bytes)", location, len(data))
        image = extract_thumbnail(data)
    except XMindPreviewError as e:
        logger.warning(
            "Error processing XMind block in %s: %s: %s",
            document_path,
            type(e).__name__,
            e,
        )
        return render_placeholder()

    return render_preview(image, directive, settings, location, link_prefix)
