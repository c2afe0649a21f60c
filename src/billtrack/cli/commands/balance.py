"""Bank balance commands."""

import click

from billtrack.cli.error_handling import handle_domain_error
from billtrack.cli.resolution import parse_amount_or_exit, resolve_month_or_exit, resolve_profile_or_exit
from billtrack.domain.bank_balance import BankBalanceService
from billtrack.domain.errors import DomainError
from billtrack.domain.profile import ProfileService


@click.group()
def balance_group():
    """Track monthly bank balances."""
    pass


@balance_group.command("set")
@click.argument("amount")
@click.option("--month", help="Month; defaults to the active month")
@click.option("--profile", help="Profile name or ID (defaults to the active profile)")
@click.pass_context
def set_balance(ctx, amount: str, month: str | None, profile: str | None):
    """Record the bank balance for a month."""
    repo = ctx.obj["repo"]
    profile_service = ProfileService(repo)
    if profile is not None:
        profile_id = resolve_profile_or_exit(ctx, profile_service, profile)
    else:
        profile_id = profile_service.get_active_profile().id
    month_str = resolve_month_or_exit(ctx, repo, month)
    value = parse_amount_or_exit(ctx, amount)
    try:
        balance = BankBalanceService(repo).set_balance(profile_id, month_str, value)
        click.echo(f"Bank balance for {balance.month_str}: {balance.balance:.2f}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@balance_group.command("tracking")
@click.argument("mode", type=click.Choice(["on", "off"]))
@click.pass_context
def set_tracking(ctx, mode: str):
    """Turn bank balance tracking on or off."""
    BankBalanceService(ctx.obj["repo"]).set_tracking_enabled(mode == "on")
    click.echo(f"Bank balance tracking {mode}")


def register_commands(cli):
    """Register bank balance commands with main CLI."""
    cli.add_command(balance_group, name="balance")
