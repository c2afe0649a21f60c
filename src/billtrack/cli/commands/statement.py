"""Statement commands."""

import click

from billtrack.cli.error_handling import handle_domain_error
from billtrack.cli.resolution import parse_amount_or_exit, resolve_card_or_exit, resolve_month_or_exit
from billtrack.domain.card import CardService
from billtrack.domain.errors import DomainError
from billtrack.domain.installment import InstallmentService
from billtrack.domain.statement import StatementService


@click.group()
def statement_group():
    """Manage monthly statements."""
    pass


@statement_group.command("set")
@click.argument("card", metavar="CARD")
@click.option("--month", help="Month (YYYY-MM, 'this month', 'last month'); defaults to the active month")
@click.option("--amount", help="Statement amount")
@click.option("--adjusted", "adjusted_amount", help="Amount actually due, if different")
@click.option("--due-date", help="Custom due date for this month")
@click.option("--unbilled/--billed", default=None, help="Whether the statement is still unbilled")
@click.pass_context
def set_statement(
    ctx,
    card: str,
    month: str | None,
    amount: str | None,
    adjusted_amount: str | None,
    due_date: str | None,
    unbilled: bool | None,
):
    """Create or update the statement of a card for a month.

    Examples:
        billtrack statement set "Gold" --amount 12500
        billtrack statement set "BPI/Gold" --month 2024-03 --adjusted 9000
    """
    repo = ctx.obj["repo"]
    card_id = resolve_card_or_exit(ctx, CardService(repo), card)
    month_str = resolve_month_or_exit(ctx, repo, month)

    updates = {}
    if amount is not None:
        updates["amount"] = parse_amount_or_exit(ctx, amount)
    if adjusted_amount is not None:
        updates["adjusted_amount"] = parse_amount_or_exit(ctx, adjusted_amount)
    if due_date is not None:
        updates["custom_due_date"] = due_date
    if unbilled is not None:
        updates["is_unbilled"] = unbilled

    try:
        statement = StatementService(repo).update_statement(card_id, month_str, **updates)
        click.echo(f"Statement {statement.month_str}: {statement.amount:.2f}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@statement_group.command("pay")
@click.argument("card", metavar="CARD")
@click.option("--month", help="Month; defaults to the active month")
@click.pass_context
def toggle_paid(ctx, card: str, month: str | None):
    """Toggle the paid flag of a card's statement."""
    repo = ctx.obj["repo"]
    card_id = resolve_card_or_exit(ctx, CardService(repo), card)
    month_str = resolve_month_or_exit(ctx, repo, month)
    installment_total = InstallmentService(repo).card_installment_total(card_id, month_str)
    try:
        statement = StatementService(repo).toggle_paid(card_id, month_str, installment_total)
        click.echo(f"Statement {month_str} marked {'paid' if statement.is_paid else 'unpaid'}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@statement_group.command("list")
@click.option("--month", help="Month; defaults to the active month")
@click.pass_context
def list_statements(ctx, month: str | None):
    """List statements of a month."""
    repo = ctx.obj["repo"]
    month_str = resolve_month_or_exit(ctx, repo, month)
    cards = {c.id: c for c in CardService(repo).list_cards()}
    statements = StatementService(repo).list_for_month(month_str)
    if not statements:
        click.echo(f"No statements for {month_str}.")
        return

    click.echo(f"\nStatements for {month_str}:")
    click.echo("-" * 60)
    for s in statements:
        card = cards.get(s.card_id)
        label = f"{card.bank_name} {card.card_name}" if card else s.card_id
        status = "paid" if s.is_paid else ("unbilled" if s.is_unbilled else "unpaid")
        click.echo(f"{label:28s} | {s.amount:>12.2f} | {status}")


def register_commands(cli):
    """Register statement commands with main CLI."""
    cli.add_command(statement_group, name="statement")
