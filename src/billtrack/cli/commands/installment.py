"""Installment plan commands."""

import click

from billtrack.cli.error_handling import handle_domain_error
from billtrack.cli.resolution import parse_amount_or_exit, resolve_card_or_exit, resolve_month_or_exit
from billtrack.domain.card import CardService
from billtrack.domain.errors import DomainError
from billtrack.domain.installment import InstallmentService
from billtrack.domain.profile import ProfileService
from billtrack.utils.dates import parse_date


@click.group()
def installment_group():
    """Manage installment plans."""
    pass


@installment_group.command("add")
@click.argument("card", metavar="CARD")
@click.argument("name", metavar="NAME")
@click.option("--principal", required=True, help="Total principal")
@click.option("--terms", type=click.IntRange(min=1), required=True, help="Number of monthly terms")
@click.option("--start", "start_date", default="today", show_default=True, help="Start date")
@click.option("--monthly", help="Monthly amortization (defaults to principal / terms)")
@click.pass_context
def add_installment(ctx, card: str, name: str, principal: str, terms: int, start_date: str, monthly: str | None):
    """Add an installment plan to a card.

    Examples:
        billtrack installment add "Gold" "Laptop" --principal 60000 --terms 12
        billtrack installment add "Gold" "Phone" --principal 30000 --terms 6 --start 2024-01-15
    """
    repo = ctx.obj["repo"]
    card_id = resolve_card_or_exit(ctx, CardService(repo), card)
    total = parse_amount_or_exit(ctx, principal)
    monthly_amount = parse_amount_or_exit(ctx, monthly) if monthly is not None else None
    try:
        start = parse_date(start_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        installment = InstallmentService(repo).add_installment(
            card_id, name, total, terms, start, monthly_amortization=monthly_amount
        )
        click.echo(
            f"Created installment '{installment.name}' "
            f"({installment.terms} x {installment.monthly_amortization:.2f}, ID: {installment.id})"
        )
    except DomainError as e:
        handle_domain_error(ctx, e)


@installment_group.command("list")
@click.option("--month", help="Show only plans billed in this month")
@click.pass_context
def list_installments(ctx, month: str | None):
    """List installment plans of the visible profiles."""
    repo = ctx.obj["repo"]
    service = InstallmentService(repo)
    cards = {c.id: c for c in CardService(repo).list_cards(ProfileService(repo).visible_profile_ids())}

    if month is not None:
        month_str = resolve_month_or_exit(ctx, repo, month)
        rows = [
            (i, f"term {status.current_term}/{status.total_terms}")
            for i, status in service.active_installments(month_str, list(cards))
        ]
    else:
        rows = [(i, f"{i.terms} terms from {i.start_date.isoformat()}") for i in service.list_installments(list(cards))]

    if not rows:
        click.echo("No installments found.")
        return

    click.echo("\nInstallments:")
    click.echo("-" * 80)
    for installment, detail in rows:
        card = cards[installment.card_id]
        click.echo(
            f"{installment.id[:8]} | {card.card_name:16s} | {installment.name:20s} | "
            f"{installment.monthly_amortization:>10.2f} | {detail}"
        )


@installment_group.command("delete")
@click.argument("installment_id")
@click.pass_context
def delete_installment(ctx, installment_id: str):
    """Delete an installment plan."""
    try:
        InstallmentService(ctx.obj["repo"]).delete_installment(installment_id)
        click.echo(f"Deleted installment {installment_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register installment commands with main CLI."""
    cli.add_command(installment_group, name="installment")
