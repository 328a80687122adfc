"""Loguru sink setup for the CLI"""

import typer
from loguru import logger


LOG_FORMAT = "<level>{level: <8}</level> {message}"


def configure_logging(verbose: bool = False) -> None:
    """Route log records to stderr via typer; DEBUG when verbose, else WARNING."""
    logger.remove()
    logger.add(
        lambda msg: typer.echo(msg, err=True, nl=False),
        level="DEBUG" if verbose else "WARNING",
        format=LOG_FORMAT,
        colorize=False,
    )
