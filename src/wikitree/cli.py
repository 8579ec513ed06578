"""CLI interface for Wikitree.

Command-line tool for editing documents under a content root and
maintaining its navigation index.
"""

import logging
import sys
from pathlib import Path
from typing import BinaryIO, NoReturn

import click

from wikitree.config import Config
from wikitree.core.errors import ContentError
from wikitree.store import ContentStore


@click.group()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover wikitree.toml)",
)
@click.option(
    "--root",
    "-r",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Content root directory (overrides config)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (show index repairs)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, root: Path | None, verbose: bool) -> None:
    """Wikitree - file-backed wiki content with a self-maintaining index."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        config = Config.load(config_path).with_overrides(root=root)
    except (FileNotFoundError, ValueError) as e:
        _fail(e)
    ctx.obj = config


def _open_store(config: Config) -> ContentStore:
    content = config.content
    try:
        return ContentStore(
            content.root,
            document_suffix=content.document_suffix,
            read_forbidden=content.read_forbidden,
            write_forbidden=content.write_forbidden,
        )
    except (ContentError, OSError) as e:
        _fail(e)


def _fail(error: Exception) -> NoReturn:
    click.echo(click.style(f"Error: {error}", fg="red"), err=True)
    sys.exit(1)


@cli.command()
@click.pass_obj
def rebuild(config: Config) -> None:
    """Rebuild the index from the documents on disk."""
    store = _open_store(config)
    try:
        tree = store.rebuild()
    except OSError as e:
        _fail(e)
    click.echo(f"Indexed {len(tree) - 1} entries into {store.index_path}")


@cli.command()
@click.argument("path")
@click.argument("source", type=click.File("rb"), default="-")
@click.pass_obj
def create(config: Config, path: str, source: BinaryIO) -> None:
    """Create document PATH from SOURCE (default: stdin)."""
    store = _open_store(config)
    try:
        created = store.create(path, source)
    except ContentError as e:
        _fail(e)
    click.echo(f"Created {created}")


@cli.command()
@click.argument("path")
@click.pass_obj
def read(config: Config, path: str) -> None:
    """Write document PATH to stdout."""
    store = _open_store(config)
    try:
        with store.read(path) as f:
            content = f.read()
    except ContentError as e:
        _fail(e)
    click.get_binary_stream("stdout").write(content)


@cli.command()
@click.argument("path")
@click.argument("source", type=click.File("rb"), default="-")
@click.pass_obj
def update(config: Config, path: str, source: BinaryIO) -> None:
    """Replace document PATH with SOURCE (default: stdin)."""
    store = _open_store(config)
    try:
        updated = store.update(path, source)
    except ContentError as e:
        _fail(e)
    click.echo(f"Updated {updated}")


@cli.command()
@click.argument("path")
@click.pass_obj
def delete(config: Config, path: str) -> None:
    """Delete document PATH."""
    store = _open_store(config)
    try:
        deleted = store.delete(path)
    except ContentError as e:
        _fail(e)
    click.echo(f"Deleted {deleted}")


@cli.command()
@click.argument("id_or_path")
@click.argument("direction", type=click.Choice(["up", "down"]))
@click.pass_obj
def move(config: Config, id_or_path: str, direction: str) -> None:
    """Move an index entry up or down among its siblings."""
    store = _open_store(config)
    if not store.move(id_or_path, "up" if direction == "up" else "down"):
        _fail(ValueError(f"Cannot move {id_or_path} {direction}"))
    click.echo(f"Moved {id_or_path} {direction}")


@cli.command()
@click.argument("path")
@click.pass_obj
def title(config: Config, path: str) -> None:
    """Print the title of document PATH."""
    store = _open_store(config)
    try:
        click.echo(store.title(path))
    except ContentError as e:
        _fail(e)


@cli.command()
@click.pass_obj
def watch(config: Config) -> None:
    """Keep the index in step with documents edited on disk."""
    from wikitree.live import IndexWatcher

    store = _open_store(config)
    watcher = IndexWatcher(
        store,
        watch_patterns=config.watch.patterns,
        debounce=config.watch.debounce,
    )
    click.echo(f"Watching {store.root} (Ctrl+C to stop)")
    try:
        watcher.run()
    except KeyboardInterrupt:
        watcher.stop()
