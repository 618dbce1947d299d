"""Command-line interface for xmind-preview."""

import html
import logging
from pathlib import Path

import click
import yaml

from . import __version__
from .config import (
    CONFIG_FILENAME,
    SettingsManager,
    coerce_bool,
    coerce_zoom,
    create_default_config,
    find_config_file,
    load_settings,
    settings_to_dict,
)
from .errors import XMindPreviewError
from .render import preview_css
from .resolver import resolve_location
from .session import PreviewSession
from .thumbnail import read_thumbnail
from .vault import Vault

_SETTING_PARSERS = {
    "base_folder": lambda value: value.strip(),
    "show_open_button": coerce_bool,
    "default_zoom": coerce_zoom,
    "default_alignment": lambda value: value.strip(),
}


@click.group()
@click.version_option(version=__version__, prog_name="xmind-preview")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
def main(verbose):
    """Render inline XMind thumbnail previews in Markdown notes.

    Markdown notes reference .xmind files from fenced blocks:

    \b
      ```xmind
      name: roadmap
      zoom: 0.8
      alignment: right
      ```

    \b
    Quick start:
      xmind-preview config init                 # Create .xmind-preview.yaml
      xmind-preview render notes/ -r --vault .  # Render notes to HTML
      xmind-preview thumbnail map.xmind         # Extract the thumbnail PNG
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True))
@click.option("-r", "--recursive", is_flag=True, help="Process directories recursively")
@click.option(
    "--vault",
    "vault_root",
    type=click.Path(exists=True, file_okay=False),
    default=".",
    help="Vault root directory (default: current directory)",
)
@click.option(
    "-d",
    "--directory",
    "output_dir",
    type=click.Path(),
    help="Output directory (default: next to each note)",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True),
    help="Config file path",
)
@click.option(
    "--link-prefix",
    default="",
    help="Prefix for the Open button link (e.g. obsidian://open?file=)",
)
def render(paths, recursive, vault_root, output_dir, config_path, link_prefix):
    """Render Markdown notes to HTML with XMind previews.

    \b
    Examples:
      xmind-preview render projects/q3.md
      xmind-preview render notes/ -r --vault . -d _site
    """
    if not paths:
        raise click.UsageError("No files or directories specified")

    vault = Vault(Path(vault_root))

    try:
        manager = SettingsManager.load(
            config_path=Path(config_path) if config_path else None,
            start_path=vault.root,
        )
    except XMindPreviewError as e:
        raise click.ClickException(str(e))

    files = _collect_files(paths, recursive)
    if not files:
        click.echo("No Markdown files found")
        return

    session = PreviewSession(vault, manager, link_prefix=link_prefix)
    rendered = 0

    for input_path in files:
        try:
            document_path = vault.storage_path(input_path)
            body = session.open(document_path)
        except XMindPreviewError as e:
            click.echo(f"Warning: Skipping {input_path}: {e}", err=True)
            continue

        if output_dir:
            output_path = Path(output_dir) / Path(document_path).with_suffix(".html")
        else:
            output_path = input_path.with_suffix(".html")

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(
                _standalone_page(body, title=input_path.stem), encoding="utf-8"
            )
        except OSError as e:
            click.echo(f"Error writing {output_path}: {e}", err=True)
            continue

        click.echo(f"Rendered: {document_path} -> {output_path}")
        rendered += 1

    click.echo(f"\n{rendered} file(s) rendered")


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(),
    help="Output PNG path (default: <filename>.png)",
)
def thumbnail(path, output_path):
    """Extract the embedded thumbnail of an .xmind file.

    \b
    Examples:
      xmind-preview thumbnail roadmap.xmind
      xmind-preview thumbnail roadmap.xmind -o preview.png
    """
    try:
        image = read_thumbnail(Path(path))
    except XMindPreviewError as e:
        raise click.ClickException(str(e))

    if output_path is None:
        output_path = Path(path).with_suffix(".png")

    try:
        Path(output_path).write_bytes(image.data)
    except OSError as e:
        raise click.ClickException(f"Cannot write {output_path}: {e}")

    click.echo(f"Extracted: {path} -> {output_path} ({len(image.data)} bytes)")


@main.command()
@click.argument("target")
@click.option(
    "--document",
    "document_path",
    required=True,
    help="Storage path of the note containing the block",
)
@click.option(
    "--vault",
    "vault_root",
    type=click.Path(exists=True, file_okay=False),
    default=".",
    help="Vault root directory (default: current directory)",
)
def resolve(target, document_path, vault_root):
    """Show which vault file a block target refers to.

    \b
    Examples:
      xmind-preview resolve ../maps/plan.xmind --document notes/sub/page.md
      xmind-preview resolve /drafts/xmind/a.xmind --document index.md
    """
    vault = Vault(Path(vault_root))
    try:
        location = resolve_location(target, document_path, vault)
    except XMindPreviewError as e:
        raise click.ClickException(str(e))
    click.echo(location)


@main.group()
def config():
    """Manage xmind-preview configuration."""
    pass


@config.command("init")
@click.option(
    "-d",
    "--directory",
    type=click.Path(),
    default=".",
    help="Directory to create config in",
)
def config_init(directory):
    """Create a new .xmind-preview.yaml configuration file."""
    try:
        config_path = create_default_config(Path(directory))
        click.echo(f"Created: {config_path}")
    except XMindPreviewError as e:
        raise click.ClickException(str(e))


@config.command("show")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True),
    help="Config file path",
)
def config_show(config_path):
    """Display current configuration.

    Shows merged configuration from file, environment, and defaults.
    """
    try:
        settings = load_settings(config_path=Path(config_path) if config_path else None)
    except XMindPreviewError as e:
        raise click.ClickException(str(e))
    data = settings_to_dict(settings)
    click.echo(yaml.safe_dump(data, default_flow_style=False, sort_keys=False))


@config.command("where")
@click.option(
    "-d",
    "--directory",
    type=click.Path(exists=True),
    help="Directory to search from",
)
def config_where(directory):
    """Show which config file would be used.

    Searches up the directory tree for .xmind-preview.yaml.
    """
    start = Path(directory) if directory else Path.cwd()
    config_path = find_config_file(start)

    if config_path:
        click.echo(f"Config file: {config_path}")
    else:
        click.echo(f"No {CONFIG_FILENAME} found (searched from {start})")


@config.command("set")
@click.argument("key", type=click.Choice(sorted(_SETTING_PARSERS)))
@click.argument("value")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True),
    help="Config file path",
)
def config_set(key, value, config_path):
    """Change one setting and save it.

    \b
    Examples:
      xmind-preview config set base_folder /maps
      xmind-preview config set default_zoom 0.8
      xmind-preview config set show_open_button false
    """
    path = _resolve_config_path(config_path)
    try:
        manager = SettingsManager.load(config_path=path)
        manager.update(**{key: _SETTING_PARSERS[key](value)})
    except XMindPreviewError as e:
        raise click.ClickException(str(e))
    click.echo(f"Set {key} = {getattr(manager.stored_settings, key)!r} in {path}")


def _resolve_config_path(config_path: str | None) -> Path:
    """Find config file from explicit path or directory traversal.

    Raises:
        click.ClickException: If no config file found.
    """
    if config_path:
        return Path(config_path)
    found = find_config_file()
    if not found:
        raise click.ClickException(
            f"No {CONFIG_FILENAME} found. Run 'xmind-preview config init' first."
        )
    return found


def _collect_files(paths: tuple, recursive: bool) -> list[Path]:
    """Collect Markdown files from paths.

    Args:
        paths: Tuple of file/directory paths.
        recursive: Whether to search directories recursively.

    Returns:
        List of Markdown file paths.
    """
    files = []
    markdown_extensions = {".md", ".markdown"}

    for path_str in paths:
        path = Path(path_str)

        if path.is_file():
            if path.suffix.lower() in markdown_extensions:
                files.append(path)
        elif path.is_dir():
            for ext in markdown_extensions:
                pattern = f"*{ext}"
                files.extend(path.rglob(pattern) if recursive else path.glob(pattern))

    return sorted(set(files))


def _standalone_page(body: str, title: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{html.escape(title)}</title>
<style>{preview_css()}
</style>
</head>
<body>
{body}
</body>
</html>
"""


if __name__ == "__main__":
    main()
