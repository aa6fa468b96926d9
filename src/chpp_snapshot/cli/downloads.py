from __future__ import annotations

from datetime import timedelta
from typing import NoReturn

import typer

from chpp_snapshot.cli.common import cli_state, session_scope
from chpp_snapshot.core.config import settings
from chpp_snapshot.core.errors import SnapshotError
from chpp_snapshot.db.enums import DownloadStatus
from chpp_snapshot.sync.entries import FetchEntryTracker
from chpp_snapshot.sync.epochs import EpochManager
from chpp_snapshot.sync.promotion import PromotionPolicy, PromotionStep

app = typer.Typer(help="Inspect and manage downloads (snapshot epochs).")


def _fail(e: SnapshotError) -> NoReturn:
    typer.echo(f"{e.__class__.__name__}: {e}", err=True)
    raise typer.Exit(code=1) from e


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    status: DownloadStatus | None = typer.Option(None, "--status", help="Only this status."),
) -> None:
    """List downloads, oldest first. The current one is marked with `*`."""

    with session_scope(cli_state(ctx)) as session:
        epochs = EpochManager(session)
        current = epochs.current_epoch()
        for download_id in epochs.list_epochs(status=status):
            d = epochs.get_epoch(download_id)
            marker = "*" if download_id == current else " "
            finished = d.finished_at.isoformat() if d.finished_at else "-"
            typer.echo(
                f"{marker} {d.id:>6} {d.status:<9} "
                f"started={d.started_at.isoformat()} finished={finished}"
            )


@app.command("entries")
def entries_cmd(
    ctx: typer.Context,
    download_id: int = typer.Argument(..., help="Download id."),
) -> None:
    """Show every endpoint attempt recorded for a download."""

    with session_scope(cli_state(ctx)) as session:
        for e in FetchEntryTracker(session).list_entries(download_id):
            line = f"{e.endpoint} v{e.version} status={e.status} retries={e.retry_count}"
            if e.error_message:
                line += f" error={e.error_message}"
            typer.echo(line)


@app.command("promote")
def promote_cmd(
    ctx: typer.Context,
    download_id: int = typer.Argument(..., help="Download id."),
    allow_partial: bool = typer.Option(
        settings.allow_partial_promotion,
        "--allow-partial/--no-allow-partial",
        help="Promote even if required endpoints are exhausted.",
    ),
    tolerate: list[str] | None = typer.Option(
        None, "--tolerate", help="Endpoint that may be exhausted (repeatable)."
    ),
    keep_previous: int = typer.Option(
        settings.retention_keep_previous,
        "--keep-previous",
        help="Retired downloads to keep after promotion.",
    ),
) -> None:
    """Settle a download and make it current."""

    policy = PromotionPolicy(
        allow_partial=allow_partial, tolerated_endpoints=frozenset(tolerate or ())
    )
    try:
        with session_scope(cli_state(ctx)) as session:
            step = PromotionStep(session)
            step.settle(download_id)
            result = step.promote(download_id, policy, keep_previous=keep_previous)
    except SnapshotError as e:
        _fail(e)

    typer.echo(
        " ".join(
            [
                f"Promoted download {result.download_id}:",
                f"superseded={result.superseded_id}",
                f"deleted={result.retired_ids}",
            ]
        )
    )


@app.command("discard")
def discard_cmd(
    ctx: typer.Context,
    download_id: int = typer.Argument(..., help="Download id."),
) -> None:
    """Mark a download retired without deleting its rows."""

    try:
        with session_scope(cli_state(ctx)) as session:
            EpochManager(session).discard_epoch(download_id)
    except SnapshotError as e:
        _fail(e)
    typer.echo(f"Discarded download {download_id}")


@app.command("retire")
def retire_cmd(
    ctx: typer.Context,
    download_id: int = typer.Argument(..., help="Download id."),
) -> None:
    """Delete a retired download and every row scoped to it."""

    try:
        with session_scope(cli_state(ctx)) as session:
            EpochManager(session).retire_epoch(download_id)
    except SnapshotError as e:
        _fail(e)
    typer.echo(f"Deleted download {download_id}")


@app.command("reap")
def reap_cmd(
    ctx: typer.Context,
    older_than_hours: float = typer.Option(
        settings.abandoned_after_hours,
        "--older-than-hours",
        help="Open downloads started before this many hours ago are reaped.",
    ),
) -> None:
    """Delete abandoned open downloads."""

    try:
        with session_scope(cli_state(ctx)) as session:
            reaped = PromotionStep(session).reap_abandoned(timedelta(hours=older_than_hours))
    except SnapshotError as e:
        _fail(e)
    typer.echo(f"Reaped downloads: {reaped}")


@app.command("retention")
def retention_cmd(
    ctx: typer.Context,
    keep_previous: int = typer.Option(
        settings.retention_keep_previous,
        "--keep-previous",
        help="Retired downloads to keep.",
    ),
) -> None:
    """Delete the oldest retired downloads beyond the retention window."""

    try:
        with session_scope(cli_state(ctx)) as session:
            deleted = PromotionStep(session).apply_retention(keep_previous)
    except SnapshotError as e:
        _fail(e)
    typer.echo(f"Deleted downloads: {deleted}")
