"""Ad-hoc diagnostics for the Drive → Slack notifier."""

from __future__ import annotations

import asyncio
import datetime as dt
import json
from typing import Any, Awaitable, Callable, Optional, TypeVar

import typer

from drivehook.config import settings
from drivehook.errors import DriveHookError
from drivehook.services import drive as drive_api
from drivehook.services.activity import query_recent_activity
from drivehook.services.people import resolve_email
from drivehook.services.pipeline import ChangeNotifier

T = TypeVar("T")

app = typer.Typer(
    name="drivehook",
    help="Relay Google Drive activity to Slack and inspect the Drive APIs",
    no_args_is_help=True,
)


def _run(call: Callable[[ChangeNotifier], Awaitable[T]]) -> T:
    notifier = ChangeNotifier(settings)
    try:
        return asyncio.run(call(notifier))
    except DriveHookError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)


async def _with_client(
    notifier: ChangeNotifier, fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
) -> T:
    token = await notifier.bearer_token()
    async with notifier.http_client() as client:
        return await fn(client, token, *args, **kwargs)


def _require(value: Optional[str], name: str) -> str:
    if not value:
        typer.echo(f"Error: {name} is required", err=True)
        raise typer.Exit(1)
    return value


@app.command()
def drives():
    """List shared drives visible to the credential."""
    found = _run(lambda n: _with_client(n, drive_api.list_drives))
    if not found:
        typer.echo("No drives found.")
        return
    for item in found:
        typer.echo(f"{item.get('id', '')}\t{item.get('name', '')}")


@app.command()
def files():
    """List files visible to the credential, shared drives included."""
    found = _run(lambda n: _with_client(n, drive_api.list_files))
    if not found:
        typer.echo("No files found.")
        return
    for item in found:
        typer.echo(
            "\t".join(
                str(item.get(key, ""))
                for key in ("kind", "id", "name", "fileExtension", "size")
            )
        )


@app.command()
def parents(file_id: str = typer.Argument(...)):
    """Print the folder tree above a file."""
    tree = _run(lambda n: _with_client(n, drive_api.parent_tree, file_id))
    if not tree:
        typer.echo("No parents found.")
        return
    for depth, item in tree:
        typer.echo(f"{'  ' * (depth - 1)}{item.get('name', '')} ({item.get('id', '')})")


@app.command("watch-file")
def watch_file(
    file_id: str = typer.Argument(...),
    hook_url: Optional[str] = typer.Argument(None, help="Webhook address (defaults to PUBLIC_BASE_URL/hook)"),
    hours: float = typer.Option(24.0, help="Channel lifetime in hours"),
):
    """Open a files.watch channel on a single file."""
    address = hook_url or f"{settings.public_base_url.rstrip('/')}/hook"
    channel = _run(
        lambda n: _with_client(
            n,
            drive_api.watch_file,
            file_id,
            address,
            channel_token=settings.channel_token,
            expiration_hours=hours,
        )
    )
    typer.echo(json.dumps(channel, indent=2))


@app.command()
def changes(
    drive_id: str = typer.Argument(...),
    page_token: str = typer.Argument(..., help="Page token, e.g. a ping's message number"),
):
    """Print one page of changes.list for the drive."""
    page = _run(lambda n: _with_client(n, drive_api.list_changes, drive_id, page_token))
    typer.echo(json.dumps(page, indent=2))


@app.command()
def activity(
    drive_id: Optional[str] = typer.Argument(None, help="Drive id (defaults to DRIVE_ID)"),
    minutes: int = typer.Option(settings.lookback_minutes, help="Lookback window in minutes"),
):
    """Print the newest activity record inside the lookback window."""
    target = _require(drive_id or settings.drive_id, "DRIVE_ID")
    found = _run(
        lambda n: _with_client(
            n, query_recent_activity, target, dt.timedelta(minutes=minutes), 1
        )
    )
    if found is None:
        typer.echo("No activities found.")
        return
    typer.echo(json.dumps(found.model_dump(by_alias=True, exclude_none=True), indent=2))


@app.command()
def whois(person_name: str = typer.Argument(..., help="People resource name, e.g. people/123")):
    """Resolve a person resource name to its primary email."""
    email = _run(lambda n: _with_client(n, resolve_email, person_name))
    typer.echo(email or "No email addresses found.")


@app.command()
def watch(
    drive_id: Optional[str] = typer.Argument(None, help="Drive id (defaults to DRIVE_ID)"),
    hook_url: Optional[str] = typer.Argument(None, help="Webhook address (defaults to PUBLIC_BASE_URL/hook)"),
    hours: float = typer.Option(24.0, help="Channel lifetime in hours"),
):
    """Open a changes.watch channel that pings the webhook."""
    target = _require(drive_id or settings.drive_id, "DRIVE_ID")
    address = hook_url or f"{settings.public_base_url.rstrip('/')}/hook"
    channel = _run(
        lambda n: _with_client(
            n,
            drive_api.watch_changes,
            target,
            address,
            channel_token=settings.channel_token,
            expiration_hours=hours,
        )
    )
    typer.echo(json.dumps(channel, indent=2))


@app.command()
def unwatch(
    channel_id: str = typer.Argument(...),
    resource_id: str = typer.Argument(...),
):
    """Stop a watch channel."""
    _run(lambda n: _with_client(n, drive_api.stop_channel, channel_id, resource_id))
    typer.echo(f"Channel {channel_id} stopped")


@app.command()
def notify():
    """Run the pipeline once, as if a change ping had arrived."""
    result = _run(lambda n: n.run())
    typer.echo(result.outcome.value)
    if result.message is not None:
        typer.echo(result.message.text)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1"),
    port: int = typer.Option(8000),
):
    """Run the webhook server."""
    import uvicorn

    uvicorn.run("drivehook.app:app", host=host, port=port, proxy_headers=True)


if __name__ == "__main__":
    app()
