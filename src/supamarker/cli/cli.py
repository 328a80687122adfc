"""CLI entrypoint: Typer app definition and command registration"""

from pathlib import Path
from typing import Annotated, Optional

import typer
from dotenv import find_dotenv, load_dotenv

from supamarker.cli.commands import delete_cmd, gen_config_cmd, list_cmd, publish_cmd
from supamarker.log import configure_logging


app = typer.Typer(
    name="supamarker",
    no_args_is_help=True,
    add_completion=False,
    help="Publish markdown posts to Supabase (storage bucket + posts table)",
)


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[Optional[Path], typer.Option("--config", help="Path to config file")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log every store call")] = False,
    ):
    """Publish markdown posts to Supabase (storage bucket + posts table)."""
    load_dotenv(find_dotenv(usecwd=True))
    configure_logging(verbose)
    ctx.obj = {"config": config}


app.command(name="publish")(publish_cmd)
app.command(name="delete")(delete_cmd)
app.command(name="list")(list_cmd)
app.command(name="gen-config")(gen_config_cmd)
