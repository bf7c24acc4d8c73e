"""CLI interface for Wikiroute.

Command-line tool for inspecting the link index, resolving and checking
wiki-links, rendering content and running the preview server.
"""

import json
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, NoReturn

import click

from wikiroute.config import Config
from wikiroute.core.index import ConflictPolicy, LinkIndex, build_index
from wikiroute.core.markdown import PageRenderer, check_links
from wikiroute.core.nodes import to_node
from wikiroute.core.resolver import Broken, UnresolvedPolicy, WikiLinkReference, resolve
from wikiroute.core.scanner import load_document
from wikiroute.errors import WikirouteError


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging",
)
def cli(verbose: bool) -> None:
    """Wikiroute - wiki-links resolved to site URLs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def content_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command that builds an index."""
    decorators = [
        click.option(
            "--config",
            "-c",
            "config_path",
            type=click.Path(exists=True, path_type=Path),
            default=None,
            help="Path to configuration file (default: auto-discover wikiroute.toml)",
        ),
        click.option(
            "--source-dir",
            "-s",
            type=click.Path(exists=True, path_type=Path, file_okay=False),
            default=None,
            help="Content source directory (overrides config)",
        ),
        click.option(
            "--conflict-policy",
            type=click.Choice([p.value for p in ConflictPolicy]),
            default=None,
            help="Lookup key collision policy (overrides config)",
        ),
        click.option(
            "--unresolved",
            type=click.Choice([p.value for p in UnresolvedPolicy]),
            default=None,
            help="Unresolved link policy (overrides config)",
        ),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


@cli.command()
@content_options
@click.option("--json", "as_json", is_flag=True, help="Print the index as a JSON object")
def index(
    config_path: Path | None,
    source_dir: Path | None,
    conflict_policy: str | None,
    unresolved: str | None,
    as_json: bool,
) -> None:
    """Build the link index and print every lookup key."""
    config = _load_config(config_path, source_dir, conflict_policy, unresolved)
    link_index = _build(config)

    if as_json:
        click.echo(json.dumps(link_index.to_dict(), indent=2, ensure_ascii=False))
        return

    for key, url in link_index.to_dict().items():
        click.echo(f"{key} -> {url}")
    click.echo(
        f"{len(link_index)} keys for {len(link_index.documents)} documents",
        err=True,
    )


@cli.command(name="resolve")
@content_options
@click.argument("slug")
@click.option("--alias", "-a", default=None, help="Display text, as in [[slug|alias]]")
@click.option("--preview/--no-preview", default=None, help="Render in preview context")
def resolve_command(
    config_path: Path | None,
    source_dir: Path | None,
    conflict_policy: str | None,
    unresolved: str | None,
    slug: str,
    alias: str | None,
    preview: bool | None,
) -> None:
    """Resolve a single wiki-link slug."""
    config = _load_config(config_path, source_dir, conflict_policy, unresolved, preview)
    link_index = _build(config)

    link = resolve(
        WikiLinkReference(raw_slug=slug, alias=alias),
        link_index,
        config.links.resolve_options(),
    )
    status = "broken" if isinstance(link, Broken) else "resolved"
    click.echo(json.dumps({"status": status, "node": to_node(link).to_dict()}, indent=2))
    if isinstance(link, Broken):
        sys.exit(1)


@cli.command()
@content_options
def check(
    config_path: Path | None,
    source_dir: Path | None,
    conflict_policy: str | None,
    unresolved: str | None,
) -> None:
    """Report wiki-links that do not resolve."""
    config = _load_config(config_path, source_dir, conflict_policy, unresolved)
    link_index = _build(config)

    try:
        broken = check_links(link_index, config.links.resolve_options())
    except (OSError, UnicodeDecodeError) as e:
        _fail(e)

    if not broken:
        click.echo(click.style("All wiki-links resolve.", fg="green"))
        return

    for document, ref in broken:
        click.echo(f"{document.relative_path}.md: [[{ref.raw_slug}]]")
    documents = {document.relative_path for document, _ in broken}
    click.echo(
        click.style(
            f"\n{len(broken)} broken wiki-link(s) in {len(documents)} document(s)",
            fg="red",
        ),
        err=True,
    )
    sys.exit(1)


@cli.command()
@content_options
@click.argument("markdown_file", type=click.Path(exists=True, path_type=Path, dir_okay=False))
@click.option("--preview/--no-preview", default=None, help="Render in preview context")
def render(
    config_path: Path | None,
    source_dir: Path | None,
    conflict_policy: str | None,
    unresolved: str | None,
    markdown_file: Path,
    preview: bool | None,
) -> None:
    """Render a markdown file to HTML with wiki-links resolved."""
    config = _load_config(config_path, source_dir, conflict_policy, unresolved, preview)
    link_index = _build(config)

    renderer = PageRenderer(link_index, config.links.resolve_options())
    try:
        document = load_document(markdown_file.parent, markdown_file)
        result = renderer.render(document)
    except (WikirouteError, OSError) as e:
        _fail(e)

    click.echo(result.html, nl=False)
    for ref in result.broken:
        click.echo(click.style(f"Unresolved: [[{ref.raw_slug}]]", fg="yellow"), err=True)


@cli.command()
@content_options
@click.option("--host", default=None, help="Host to bind to (overrides config)")
@click.option("--port", "-p", type=int, default=None, help="Port to bind to (overrides config)")
@click.option(
    "--preview/--no-preview",
    default=True,
    help="Render drafts without marking them (default: enabled)",
)
@click.option(
    "--live-reload/--no-live-reload",
    default=None,
    help="Enable/disable live reload (overrides config, default: enabled)",
)
def serve(
    config_path: Path | None,
    source_dir: Path | None,
    conflict_policy: str | None,
    unresolved: str | None,
    host: str | None,
    port: int | None,
    preview: bool,
    live_reload: bool | None,
) -> None:
    """Start the preview server."""
    from wikiroute.server import run_server

    config = _load_config(config_path, source_dir, conflict_policy, unresolved, preview)
    config = config.with_overrides(host=host, port=port, live_reload_enabled=live_reload)

    # Fail before binding if the content tree is unusable
    _build(config)

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Source directory: {config.content.source_dir}")
    click.echo(f"Preview mode: {'enabled' if config.links.preview else 'disabled'}")
    if config.live_reload.enabled:
        click.echo("Live reload: enabled")
    else:
        click.echo("Live reload: disabled")

    run_server(config)


def _load_config(
    config_path: Path | None,
    source_dir: Path | None,
    conflict_policy: str | None,
    unresolved: str | None,
    preview: bool | None = None,
) -> Config:
    """Load configuration and apply CLI overrides."""
    try:
        config = Config.load(config_path)
        return config.with_overrides(
            source_dir=source_dir,
            conflict_policy=ConflictPolicy.parse(conflict_policy) if conflict_policy else None,
            unresolved=UnresolvedPolicy.parse(unresolved) if unresolved else None,
            preview=preview,
        )
    except (FileNotFoundError, ValueError) as e:
        _fail(e)


def _build(config: Config) -> LinkIndex:
    try:
        return build_index(config.content.source_dir, config.links.conflict_policy)
    except WikirouteError as e:
        _fail(e)


def _fail(error: Exception) -> NoReturn:
    click.echo(click.style(f"Error: {error}", fg="red"), err=True)
    sys.exit(1)
