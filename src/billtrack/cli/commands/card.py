"""Card management commands."""

import click

from billtrack.cli.error_handling import handle_domain_error
from billtrack.cli.resolution import resolve_card_or_exit, resolve_profile_or_exit
from billtrack.domain.card import DEFAULT_CARD_COLOR, CardService
from billtrack.domain.errors import DomainError
from billtrack.domain.profile import ProfileService

DAY = click.IntRange(1, 31)


@click.group()
def card_group():
    """Manage credit cards."""
    pass


@card_group.command("add")
@click.argument("bank_name", metavar="BANK")
@click.argument("card_name", metavar="CARD_NAME")
@click.option("--due-day", type=DAY, required=True, help="Day of month the bill is due")
@click.option("--cutoff-day", type=DAY, required=True, help="Statement cutoff day")
@click.option("--color", default=DEFAULT_CARD_COLOR, show_default=True, help="Display color")
@click.option("--profile", help="Profile name or ID (defaults to the active profile)")
@click.pass_context
def add_card(ctx, bank_name: str, card_name: str, due_day: int, cutoff_day: int, color: str, profile: str | None):
    """Add a credit card.

    Examples:
        billtrack card add "BPI" "Gold" --due-day 15 --cutoff-day 25
        billtrack card add "Chase" "Sapphire" --due-day 3 --cutoff-day 10 --profile "Work"
    """
    repo = ctx.obj["repo"]
    profile_service = ProfileService(repo)
    if profile is not None:
        profile_id = resolve_profile_or_exit(ctx, profile_service, profile)
    else:
        profile_id = profile_service.get_active_profile().id

    try:
        card = CardService(repo).add_card(profile_id, bank_name, card_name, due_day, cutoff_day, color)
        click.echo(f"Created card '{card.bank_name} {card.card_name}' (ID: {card.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@card_group.command("list")
@click.option("--all", "show_all", is_flag=True, help="Show cards of every profile")
@click.pass_context
def list_cards(ctx, show_all: bool):
    """List cards of the visible profiles."""
    repo = ctx.obj["repo"]
    profile_ids = None if show_all else ProfileService(repo).visible_profile_ids()
    cards = CardService(repo).list_cards(profile_ids)
    if not cards:
        click.echo("No cards found.")
        return

    click.echo("\nCards:")
    click.echo("-" * 80)
    for c in cards:
        click.echo(
            f"{c.id[:8]} | {c.bank_name:12s} | {c.card_name:16s} | "
            f"Due: {c.due_day:2d} | Cutoff: {c.cutoff_day:2d}"
        )


@card_group.command("update")
@click.argument("card", metavar="CARD")
@click.option("--bank", help="Bank name")
@click.option("--name", help="Card name")
@click.option("--due-day", type=DAY, help="Day of month the bill is due")
@click.option("--cutoff-day", type=DAY, help="Statement cutoff day")
@click.option("--color", help="Display color")
@click.pass_context
def update_card(ctx, card: str, bank: str | None, name: str | None, due_day: int | None, cutoff_day: int | None, color: str | None):
    """Update a card.

    CARD can be a card ID, ID prefix, card name or "Bank/Card".
    """
    service = CardService(ctx.obj["repo"])
    card_id = resolve_card_or_exit(ctx, service, card)
    updates = {
        key: value
        for key, value in (
            ("bank_name", bank),
            ("card_name", name),
            ("due_day", due_day),
            ("cutoff_day", cutoff_day),
            ("color", color),
        )
        if value is not None
    }
    if not updates:
        click.echo("Nothing to update.")
        return
    try:
        updated = service.update_card(card_id, **updates)
        click.echo(f"Updated card '{updated.bank_name} {updated.card_name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@card_group.command("transfer")
@click.argument("card", metavar="CARD")
@click.argument("profile", metavar="PROFILE")
@click.pass_context
def transfer_card(ctx, card: str, profile: str):
    """Move a card and its history to another profile."""
    repo = ctx.obj["repo"]
    card_service = CardService(repo)
    profile_service = ProfileService(repo)
    card_id = resolve_card_or_exit(ctx, card_service, card)
    profile_id = resolve_profile_or_exit(ctx, profile_service, profile)
    try:
        moved = card_service.transfer_card(card_id, profile_id)
        click.echo(f"Moved card '{moved.card_name}' to profile '{profile_service.get_profile(profile_id).name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@card_group.command("delete")
@click.argument("card", metavar="CARD")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_card(ctx, card: str, yes: bool):
    """Delete a card with its statements, installments and bills."""
    service = CardService(ctx.obj["repo"])
    card_id = resolve_card_or_exit(ctx, service, card)
    try:
        plan = service.plan_card_deletion(card_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    label = f"{plan.card.bank_name} {plan.card.card_name}"
    click.echo(
        f"Deleting '{label}' also removes {plan.statement_count} statement(s), "
        f"{plan.installment_count} installment(s), {plan.cash_installment_count} cash installment(s) "
        f"and {plan.one_time_bill_count} one-time bill(s)."
    )
    if not yes and not click.confirm("Are you sure?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_card(plan)
        click.echo(f"Deleted card '{label}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register card commands with main CLI."""
    cli.add_command(card_group, name="card")
