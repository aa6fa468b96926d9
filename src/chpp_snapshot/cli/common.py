from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import typer
from sqlalchemy.orm import Session

from chpp_snapshot.core.config import settings
from chpp_snapshot.db import DatabaseConfig, create_db_engine, create_session_factory


@dataclass(frozen=True)
class CliState:
    """Options given to the root command, shared with every subcommand via `ctx.obj`."""

    database_url: str | None = None
    echo: bool = False

    def database_config(self) -> DatabaseConfig:
        return DatabaseConfig(
            database_url=self.database_url or settings.database_url,
            echo=self.echo,
        )


def cli_state(ctx: typer.Context) -> CliState:
    state = ctx.find_root().obj
    return state if isinstance(state, CliState) else CliState(echo=settings.db_echo)


@contextmanager
def session_scope(state: CliState | None = None) -> Iterator[Session]:
    """
    Context-managed DB session for CLI commands.
    Ensures proper close and rolls back on exception.
    """
    engine = create_db_engine((state or CliState()).database_config())
    SessionLocal = create_session_factory(engine)
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
        engine.dispose()
