"""Summary commands."""

from decimal import Decimal

import click

from billtrack.cli.resolution import resolve_month_or_exit
from billtrack.domain.bank_balance import BankBalanceService
from billtrack.domain.card import CardService
from billtrack.domain.installment import InstallmentService
from billtrack.domain.profile import ProfileService
from billtrack.domain.statement import StatementService
from billtrack.domain.summary import SummaryService


@click.command("summary")
@click.option("--month", help="Month (YYYY-MM, 'this month', 'last month'); defaults to the active month")
@click.pass_context
def summary(ctx, month: str | None):
    """Show bill totals for a month.

    Examples:
        billtrack summary
        billtrack summary --month "last month"
    """
    repo = ctx.obj["repo"]
    month_str = resolve_month_or_exit(ctx, repo, month)
    profile_ids = ProfileService(repo).visible_profile_ids()
    totals = SummaryService(repo).monthly_totals(month_str, profile_ids)

    installment_service = InstallmentService(repo)
    statement_service = StatementService(repo)

    click.echo(f"\nSummary for {month_str}:")
    click.echo("-" * 60)
    for card in CardService(repo).list_cards(profile_ids):
        statement = statement_service.get_statement(card.id, month_str)
        if statement is not None:
            amount, status = statement.amount, "paid" if statement.is_paid else "unpaid"
        else:
            amount, status = installment_service.card_installment_total(card.id, month_str), "no statement"
        click.echo(f"{card.bank_name + ' ' + card.card_name:30s} {amount:>12.2f}  {status}")

    click.echo("-" * 60)
    click.echo(f"{'Total bills':30s} {totals.bill_total:>12.2f}")
    click.echo(f"{'Unpaid':30s} {totals.unpaid_total:>12.2f}")
    click.echo(f"{'Installments':30s} {totals.installment_total:>12.2f}")

    balances = BankBalanceService(repo)
    if balances.is_tracking_enabled():
        total_balance = sum(
            (b.balance for pid in profile_ids if (b := balances.get_balance(pid, month_str)) is not None),
            Decimal("0"),
        )
        click.echo(f"{'Bank balance':30s} {total_balance:>12.2f}")
        click.echo(f"{'After unpaid bills':30s} {total_balance - totals.unpaid_total:>12.2f}")


@click.command("month")
@click.argument("month")
@click.pass_context
def set_active_month(ctx, month: str):
    """Set the month other commands default to."""
    repo = ctx.obj["repo"]
    month_str = resolve_month_or_exit(ctx, repo, month)
    repo.save_active_month(month_str)
    click.echo(f"Active month: {month_str}")


def register_commands(cli):
    """Register summary commands with main CLI."""
    cli.add_command(summary)
    cli.add_command(set_active_month)
