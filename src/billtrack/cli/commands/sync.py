"""Cloud sync commands."""

import asyncio

import click

from billtrack.cli.error_handling import handle_domain_error
from billtrack.domain.errors import DomainError
from billtrack.sync.envelope import SyncService
from billtrack.sync.policy import DEFAULT_INTERVAL, AutoSyncScheduler, CloudSyncService
from billtrack.sync.remote import DirectoryRemoteStore, RemoteScope
from billtrack.sync.utils import clear_sync_data, data_size, format_bytes, has_local_data


@click.group()
@click.option(
    "--remote-dir",
    type=click.Path(file_okay=False),
    envvar="BILLTRACK_REMOTE_DIR",
    help="Directory holding the sync object (overrides BILLTRACK_REMOTE_DIR)",
)
@click.option(
    "--scope",
    type=click.Choice([s.value for s in RemoteScope]),
    default=RemoteScope.APPDATA.value,
    show_default=True,
    envvar="BILLTRACK_REMOTE_SCOPE",
    help="Keep the sync object hidden (appdata) or visible",
)
@click.pass_context
def sync_group(ctx, remote_dir: str | None, scope: str):
    """Sync encrypted backups with a remote directory."""
    ctx.obj["remote_dir"] = remote_dir
    ctx.obj["remote_scope"] = scope


def _cloud_or_exit(ctx) -> CloudSyncService:
    remote_dir = ctx.obj.get("remote_dir")
    if not remote_dir:
        click.echo("Error: No remote directory configured. Use --remote-dir or BILLTRACK_REMOTE_DIR.", err=True)
        ctx.exit(1)
    repo = ctx.obj["repo"]
    remote = DirectoryRemoteStore(remote_dir, ctx.obj["remote_scope"])
    return CloudSyncService(SyncService(repo, codec=ctx.obj["codec"]), remote, repo)


password_option = click.option(
    "--password",
    envvar="BILLTRACK_SYNC_PASSWORD",
    prompt="Sync password",
    hide_input=True,
    help="Encryption password (overrides BILLTRACK_SYNC_PASSWORD)",
)


@sync_group.command("push")
@password_option
@click.pass_context
def push(ctx, password: str):
    """Upload local data, replacing the remote backup."""
    cloud = _cloud_or_exit(ctx)
    try:
        asyncio.run(cloud.upload(password))
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo("Uploaded backup")


@sync_group.command("pull")
@password_option
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def pull(ctx, password: str, yes: bool):
    """Replace local data with the remote backup."""
    cloud = _cloud_or_exit(ctx)
    if not yes and has_local_data(ctx.obj["repo"]):
        if not click.confirm("This replaces all local data. Continue?"):
            click.echo("Download cancelled.")
            return
    try:
        asyncio.run(cloud.download(password))
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo("Downloaded backup")


@sync_group.command("auto")
@password_option
@click.pass_context
def auto(ctx, password: str):
    """Sync once in whichever direction is newer."""
    cloud = _cloud_or_exit(ctx)
    try:
        result = asyncio.run(cloud.auto_sync(password))
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Sync result: {result.value}")


@sync_group.command("watch")
@password_option
@click.option("--interval", type=click.FloatRange(min=1), default=DEFAULT_INTERVAL, show_default=True, help="Seconds between syncs")
@click.pass_context
def watch(ctx, password: str, interval: float):
    """Keep syncing on an interval until interrupted."""
    scheduler = AutoSyncScheduler(_cloud_or_exit(ctx), password, interval)
    click.echo(f"Syncing every {interval:g}s, press Ctrl+C to stop")
    try:
        asyncio.run(scheduler.run(asyncio.Event()))
    except KeyboardInterrupt:
        click.echo("Stopped")


@sync_group.command("status")
@click.pass_context
def status(ctx):
    """Show local data size and the last sync time."""
    repo = ctx.obj["repo"]
    last_sync = repo.get_last_sync()
    click.echo(f"Local data: {format_bytes(data_size(repo))}")
    click.echo(f"Last sync: {last_sync.isoformat() if last_sync else 'never'}")
    remote_dir = ctx.obj.get("remote_dir")
    if remote_dir:
        try:
            remote = asyncio.run(DirectoryRemoteStore(remote_dir, ctx.obj["remote_scope"]).find())
        except DomainError as e:
            handle_domain_error(ctx, e)
            return
        click.echo(f"Remote backup: {remote.modified_time.isoformat() if remote else 'none'}")


@sync_group.command("reset")
@click.pass_context
def reset(ctx):
    """Forget the last sync time."""
    clear_sync_data(ctx.obj["repo"])
    click.echo("Cleared sync state")


def register_commands(cli):
    """Register sync commands with main CLI."""
    cli.add_command(sync_group, name="sync")
