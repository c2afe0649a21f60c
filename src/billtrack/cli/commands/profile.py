"""Profile management commands."""

import click

from billtrack.cli.error_handling import handle_domain_error
from billtrack.cli.resolution import resolve_profile_or_exit
from billtrack.domain.errors import DomainError
from billtrack.domain.profile import ProfileService


@click.group()
def profile_group():
    """Manage profiles."""
    pass


@profile_group.command("create")
@click.argument("name", metavar="PROFILE_NAME")
@click.pass_context
def create_profile(ctx, name: str):
    """Create a profile and make it active.

    Examples:
        billtrack profile create "Household"
    """
    service = ProfileService(ctx.obj["repo"])
    try:
        created = service.create_profile(name)
        click.echo(f"Created profile '{created.name}' (ID: {created.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@profile_group.command("list")
@click.pass_context
def list_profiles(ctx):
    """List all profiles."""
    repo = ctx.obj["repo"]
    service = ProfileService(repo)
    active_id = repo.get_active_profile_id()
    selected = set(repo.get_selected_profile_ids())
    multi = repo.get_multi_profile_mode()

    click.echo("\nProfiles:")
    click.echo("-" * 60)
    for p in service.list_profiles():
        marker = "*" if p.id == active_id else " "
        flag = " [selected]" if multi and p.id in selected else ""
        click.echo(f"{marker} {p.name:20s} | ID: {p.id}{flag}")


@profile_group.command("use")
@click.argument("profile", metavar="PROFILE")
@click.pass_context
def use_profile(ctx, profile: str):
    """Make a profile active.

    PROFILE can be a profile name or ID.
    """
    service = ProfileService(ctx.obj["repo"])
    profile_id = resolve_profile_or_exit(ctx, service, profile)
    service.set_active_profile(profile_id)
    click.echo(f"Active profile: {service.get_profile(profile_id).name}")


@profile_group.command("rename")
@click.argument("profile", metavar="PROFILE")
@click.argument("new_name", metavar="NEW_NAME")
@click.pass_context
def rename_profile(ctx, profile: str, new_name: str):
    """Rename a profile."""
    service = ProfileService(ctx.obj["repo"])
    profile_id = resolve_profile_or_exit(ctx, service, profile)
    try:
        renamed = service.rename_profile(profile_id, new_name)
        click.echo(f"Renamed profile to '{renamed.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@profile_group.command("delete")
@click.argument("profile", metavar="PROFILE")
@click.option("--cascade", is_flag=True, help="Also delete the profile's cards and their bills")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_profile(ctx, profile: str, cascade: bool, yes: bool):
    """Delete a profile.

    A profile that still owns cards is only deleted with --cascade, which
    removes the cards with all their statements, installments and bills.

    Examples:
        billtrack profile delete "Old"
        billtrack profile delete "Old" --cascade
    """
    service = ProfileService(ctx.obj["repo"])
    profile_id = resolve_profile_or_exit(ctx, service, profile)
    name = service.get_profile(profile_id).name

    if not yes and not click.confirm(f"Are you sure you want to delete profile '{name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        removed = service.delete_profile(profile_id, cascade=cascade)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted profile '{name}'")
    if removed["cards"]:
        click.echo(
            f"Removed {removed['cards']} card(s), {removed['statements']} statement(s) "
            f"and {removed['installments']} installment(s)"
        )


@profile_group.command("multi")
@click.argument("mode", type=click.Choice(["on", "off"]))
@click.pass_context
def multi_profile_mode(ctx, mode: str):
    """Turn multi-profile view on or off."""
    ProfileService(ctx.obj["repo"]).set_multi_profile_mode(mode == "on")
    click.echo(f"Multi-profile mode {mode}")


@profile_group.command("select")
@click.argument("profile", metavar="PROFILE")
@click.pass_context
def toggle_selection(ctx, profile: str):
    """Add a profile to, or remove it from, the multi-profile view."""
    service = ProfileService(ctx.obj["repo"])
    profile_id = resolve_profile_or_exit(ctx, service, profile)
    selected = service.toggle_profile_selection(profile_id)
    state = "Selected" if profile_id in selected else "Deselected"
    click.echo(f"{state} profile '{service.get_profile(profile_id).name}'")


def register_commands(cli):
    """Register profile commands with main CLI."""
    cli.add_command(profile_group, name="profile")
