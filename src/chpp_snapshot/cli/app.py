from __future__ import annotations

import logging

import typer

from chpp_snapshot.cli.common import CliState
from chpp_snapshot.cli.downloads import app as downloads_app
from chpp_snapshot.core.config import settings

app = typer.Typer(no_args_is_help=True)
app.add_typer(downloads_app, name="downloads")


@app.callback()
def main(
    ctx: typer.Context,
    database_url: str | None = typer.Option(
        None, "--database-url", help="SQLAlchemy URL; defaults to DATABASE_URL."
    ),
    echo: bool = typer.Option(
        settings.db_echo, "--echo/--no-echo", help="Log every SQL statement."
    ),
    log_level: str = typer.Option(
        settings.log_level, "--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)."
    ),
) -> None:
    """Operate the local CHPP snapshot store."""

    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = CliState(database_url=database_url, echo=echo)
