"""Backup export and import commands."""

from pathlib import Path

import click

from billtrack.cli.error_handling import handle_domain_error
from billtrack.cli.resolution import resolve_profile_or_exit
from billtrack.domain.errors import DomainError, PasswordRequiredError
from billtrack.domain.profile import ProfileService
from billtrack.sync.envelope import SyncService
from billtrack.sync.merge import MergeResult
from billtrack.sync.profile_backup import ProfileBackupService, profile_backup_filename
from billtrack.sync.utils import password_strength, validate_password


def _sync_service(ctx) -> SyncService:
    return SyncService(ctx.obj["repo"], codec=ctx.obj["codec"])


@click.group()
def backup_group():
    """Export and import backups."""
    pass


@backup_group.command("export")
@click.argument("path", type=click.Path(), default=".")
@click.option("--encrypt", is_flag=True, help="Encrypt the backup with a password")
@click.option("--password", envvar="BILLTRACK_SYNC_PASSWORD", help="Encryption password")
@click.pass_context
def export_backup(ctx, path: str, encrypt: bool, password: str | None):
    """Export all data to PATH.

    When PATH is a directory a timestamped file name is used.

    Examples:
        billtrack backup export
        billtrack backup export ~/backups --encrypt
    """
    if encrypt and not password:
        password = click.prompt("Password", hide_input=True, confirmation_prompt=True)
    if encrypt:
        for issue in validate_password(password):
            click.echo(f"Warning: {issue}", err=True)
        click.echo(f"Password strength: {password_strength(password)}")

    try:
        target = _sync_service(ctx).export_to_file(path, password if encrypt else None)
        click.echo(f"Exported {'encrypted ' if encrypt else ''}backup to {target}")
    except DomainError as e:
        handle_domain_error(ctx, e)
    except OSError as e:
        click.echo(f"Error: Could not write backup: {e}", err=True)
        ctx.exit(1)


def _import(ctx, path: str, password: str | None, merge: bool):
    service = _sync_service(ctx)
    try:
        return service.import_from_file(path, password, merge=merge)
    except PasswordRequiredError:
        password = click.prompt("Backup password", hide_input=True)
    return service.import_from_file(path, password, merge=merge)


@backup_group.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--password", envvar="BILLTRACK_SYNC_PASSWORD", help="Password for encrypted backups")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def import_backup(ctx, path: str, password: str | None, yes: bool):
    """Replace all local data with a backup."""
    if not yes and not click.confirm("This replaces all local data. Continue?"):
        click.echo("Import cancelled.")
        return
    try:
        snapshot = _import(ctx, path, password, merge=False)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Restored backup from {snapshot.timestamp or 'unknown time'}")


@backup_group.command("merge")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--password", envvar="BILLTRACK_SYNC_PASSWORD", help="Password for encrypted backups")
@click.pass_context
def merge_backup(ctx, path: str, password: str | None):
    """Add entities from a backup that are missing locally."""
    try:
        result: MergeResult = _import(ctx, path, password, merge=True)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Merged {result.total_added} item(s), skipped {result.total_skipped}")
    for name, added in result.added.items():
        if added or result.skipped[name]:
            click.echo(f"  {name}: {added} added, {result.skipped[name]} skipped")


@backup_group.command("profile-export")
@click.argument("path", type=click.Path(), default=".")
@click.option("--profile", help="Profile name or ID (defaults to the active profile)")
@click.pass_context
def export_profile(ctx, path: str, profile: str | None):
    """Export one profile with its cards, statements and installments."""
    repo = ctx.obj["repo"]
    profile_service = ProfileService(repo)
    if profile is not None:
        profile_id = resolve_profile_or_exit(ctx, profile_service, profile)
    else:
        profile_id = profile_service.get_active_profile().id

    try:
        content = ProfileBackupService(repo).export_profile(profile_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    target = Path(path)
    if target.is_dir():
        target = target / profile_backup_filename(profile_service.get_profile(profile_id))
    target.write_text(content, encoding="utf-8")
    click.echo(f"Exported profile to {target}")


@backup_group.command("profile-import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_profile(ctx, path: str):
    """Import a profile backup as a new profile."""
    content = Path(path).read_text(encoding="utf-8")
    try:
        result = ProfileBackupService(ctx.obj["repo"]).import_profile(content)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(
        f"Profile \"{result.profile.name}\" imported successfully with {result.card_count} card(s)."
    )


def register_commands(cli):
    """Register backup commands with main CLI."""
    cli.add_command(backup_group, name="backup")
