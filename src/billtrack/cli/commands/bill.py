"""One-time bill and cash installment commands."""

import click

from billtrack.cli.error_handling import handle_domain_error
from billtrack.cli.resolution import parse_amount_or_exit, resolve_card_or_exit
from billtrack.domain.bills import BillService
from billtrack.domain.card import CardService
from billtrack.domain.errors import DomainError
from billtrack.domain.profile import ProfileService
from billtrack.utils.dates import parse_date


def _due_date_or_exit(ctx, due: str) -> str:
    try:
        return parse_date(due).isoformat()
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


@click.group()
def bill_group():
    """Manage one-time bills and cash installments."""
    pass


@bill_group.command("add")
@click.argument("card", metavar="CARD")
@click.argument("name", metavar="NAME")
@click.option("--amount", required=True, help="Bill amount")
@click.option("--due", required=True, help="Due date")
@click.option("--cash", is_flag=True, help="Record as a cash installment")
@click.option("--term", help="Term label for cash installments, e.g. '3/12'")
@click.pass_context
def add_bill(ctx, card: str, name: str, amount: str, due: str, cash: bool, term: str | None):
    """Add a one-time bill or cash installment.

    Examples:
        billtrack bill add "Gold" "Annual fee" --amount 2500 --due 2024-05-10
        billtrack bill add "Gold" "Appliance" --amount 1500 --due tomorrow --cash --term 1/6
    """
    repo = ctx.obj["repo"]
    card_id = resolve_card_or_exit(ctx, CardService(repo), card)
    value = parse_amount_or_exit(ctx, amount)
    due_date = _due_date_or_exit(ctx, due)
    service = BillService(repo)
    try:
        if cash:
            created = service.add_cash_installment(card_id, name, value, due_date, term=term)
        else:
            created = service.add_one_time_bill(card_id, name, value, due_date)
        click.echo(f"Created {'cash installment' if cash else 'bill'} '{created.name}' (ID: {created.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@bill_group.command("list")
@click.pass_context
def list_bills(ctx):
    """List one-time bills and cash installments of the visible profiles."""
    repo = ctx.obj["repo"]
    service = BillService(repo)
    card_ids = [c.id for c in CardService(repo).list_cards(ProfileService(repo).visible_profile_ids())]
    rows = [("bill", b) for b in service.list_one_time_bills(card_ids)]
    rows += [("cash", c) for c in service.list_cash_installments(card_ids)]
    if not rows:
        click.echo("No bills found.")
        return

    click.echo("\nBills:")
    click.echo("-" * 70)
    for kind, item in sorted(rows, key=lambda row: row[1].due_date):
        status = "paid" if item.is_paid else "unpaid"
        click.echo(f"{item.id[:8]} | {kind:4s} | {item.name:20s} | {item.amount:>10.2f} | {item.due_date} | {status}")


@bill_group.command("pay")
@click.argument("bill_id")
@click.pass_context
def toggle_bill_paid(ctx, bill_id: str):
    """Toggle the paid flag of a bill or cash installment."""
    service = BillService(ctx.obj["repo"])
    try:
        if any(b.id == bill_id for b in service.list_one_time_bills()):
            item = service.toggle_one_time_bill_paid(bill_id)
        else:
            item = service.toggle_cash_installment_paid(bill_id)
        click.echo(f"'{item.name}' marked {'paid' if item.is_paid else 'unpaid'}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@bill_group.command("delete")
@click.argument("bill_id")
@click.pass_context
def delete_bill(ctx, bill_id: str):
    """Delete a one-time bill or cash installment."""
    service = BillService(ctx.obj["repo"])
    try:
        if any(b.id == bill_id for b in service.list_one_time_bills()):
            service.delete_one_time_bill(bill_id)
        else:
            service.delete_cash_installment(bill_id)
        click.echo(f"Deleted bill {bill_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register bill commands with main CLI."""
    cli.add_command(bill_group, name="bill")
