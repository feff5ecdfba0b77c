"""Command-line interface for mailgallery.

This module defines the CLI commands using Click framework.

Commands:
- build: Write the gallery as static HTML pages.
- serve: Browse the gallery on a local HTTP server.

Both commands read defaults from mailgallery.yaml in the current directory;
command-line options take precedence.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from . import __version__
from .build import load_config
from .errors import GalleryError


@click.group()
@click.version_option(version=__version__, prog_name="mailgallery")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
def cli(verbose: bool):
    """Preview the emails registered in a mailgallery Gallery."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _gallery_option(func):
    return click.option(
        "--gallery",
        "gallery_ref",
        required=False,
        help="Gallery to load as module:attribute (overrides mailgallery.yaml)",
    )(func)


def _load(gallery_ref: str | None, config: dict, project_root: Path):
    from .loader import load_gallery

    reference = gallery_ref or config.get("gallery")
    if not reference:
        raise click.ClickException(
            "No gallery given. Pass --gallery module:attribute or set `gallery` in mailgallery.yaml."
        )
    try:
        return load_gallery(reference, search_path=project_root)
    except GalleryError as exc:
        raise click.ClickException(str(exc)) from exc


@cli.command()
@_gallery_option
@click.option(
    "--path",
    "output",
    type=click.Path(file_okay=False, path_type=Path),
    required=False,
    help="Directory to write the pages to (overrides mailgallery.yaml output_dir)",
)
@click.option("--base-path", required=False, help="URL prefix the pages are served under")
def build(gallery_ref: str | None, output: Path | None, base_path: str | None):
    """Write the gallery as static HTML pages."""
    project_root = Path.cwd()
    config = load_config(project_root)
    gallery = _load(gallery_ref, config, project_root)
    from .build import BuildError, build_gallery

    output_dir = output or project_root / config.get("output_dir", "_build/emails")
    try:
        result = build_gallery(
            gallery,
            output_dir,
            base_path=base_path if base_path is not None else str(config.get("base_path") or ""),
        )
    except BuildError as exc:
        click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
        click.echo(click.style(f"  Preview: {exc.preview_path}", fg="yellow"), err=True)
        click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)
        raise SystemExit(1) from None
    click.echo(f"Built {len(result.gallery.previews)} previews into {result.output_dir}")


@cli.command()
@_gallery_option
@click.option(
    "--port",
    type=int,
    required=False,
    help="Port to run the server on (overrides mailgallery.yaml)",
)
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind")
@click.option("--base-path", required=False, help="URL prefix to mount the gallery under")
def serve(gallery_ref: str | None, port: int | None, host: str, base_path: str | None):
    """Browse the gallery on a local HTTP server."""
    project_root = Path.cwd()
    config = load_config(project_root)
    gallery = _load(gallery_ref, config, project_root)
    from .server import GalleryServer

    server = GalleryServer(
        gallery,
        port=int(port or config.get("port", 4000)),
        base_path=base_path if base_path is not None else str(config.get("base_path") or ""),
        host=host,
    )
    server.start()


def main():
    """Entry point for the CLI application."""
    cli()
