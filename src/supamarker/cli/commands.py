"""CLI command implementations"""

from pathlib import Path
from typing import Annotated

import typer

from supamarker.config import CONFIG_FILE, Settings, gen_config, load_config
from supamarker.core.reconcile import delete_post, list_posts, publish_file
from supamarker.crud.ports import Backend
from supamarker.crud.supabase_backend import make_backend
from supamarker.errors import ConfigError, SupamarkerError


SLUG_WIDTH = 32


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _config_path(ctx: typer.Context) -> Path | None:
    return (ctx.obj or {}).get("config")


def _settings(ctx: typer.Context) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(_config_path(ctx))
    except ConfigError as e:
        _fail(str(e))


def _backend(ctx: typer.Context) -> Backend:
    """Build the backend; a client that cannot be created is a config failure."""
    settings = _settings(ctx)
    try:
        return make_backend(settings)
    except ConfigError as e:
        _fail(str(e))


def publish_cmd(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Markdown file to publish")],
    ):
    """Upload a markdown file to the bucket and upsert its metadata row."""
    backend = _backend(ctx)
    try:
        result = publish_file(backend, path)
    except (OSError, UnicodeDecodeError) as e:
        _fail(f"Cannot read {path}", e)
    except SupamarkerError as e:
        _fail(str(e))
    typer.echo(f"✓ Uploaded {result.key}")
    typer.echo(f"✓ Published: {result.title}")


def delete_cmd(
    ctx: typer.Context,
    slug: Annotated[str, typer.Argument(help="Post slug")],
    soft: Annotated[bool, typer.Option("--soft", help="Keep storage file, remove only the metadata row")] = False,
    ):
    """Delete a post by slug from the bucket and the table."""
    backend = _backend(ctx)
    try:
        result = delete_post(backend, slug, soft=soft)
    except SupamarkerError as e:
        _fail(str(e))
    kept = ", ".join(result.blob_names) if not result.removed_blob else ""
    if not (result.removed_blob or result.removed_row):
        typer.echo(f"Nothing deleted for {result.slug}: no metadata row, kept {kept} in bucket (--soft)")
    elif kept:
        typer.echo(f"✓ Deleted {result.slug} (kept {kept} in bucket)")
    else:
        typer.echo(f"✓ Deleted {result.slug}")


def list_cmd(ctx: typer.Context):
    """List every slug with where it lives: both, bucket or table."""
    backend = _backend(ctx)
    try:
        entries = list_posts(backend)
    except SupamarkerError as e:
        _fail(str(e))
    if not entries:
        typer.echo("No slugs found.")
        return
    typer.echo(f"{'slug'.ljust(SLUG_WIDTH)} location")
    for entry in entries:
        typer.echo(f"{entry.slug.ljust(SLUG_WIDTH)} {entry.presence.value}")


def gen_config_cmd(ctx: typer.Context):
    """Write a sample config.toml (or the --config path); fails if it exists."""
    try:
        path = gen_config(_config_path(ctx) or Path(CONFIG_FILE))
    except ConfigError as e:
        _fail(str(e))
    typer.echo(f"Sample config written to {path}")
