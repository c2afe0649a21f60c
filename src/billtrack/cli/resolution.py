"""CLI helpers for profile, card and month resolution."""

from __future__ import annotations

from decimal import Decimal

import click

from billtrack.database.repository import Repository
from billtrack.domain.card import CardService
from billtrack.domain.profile import ProfileService
from billtrack.utils.amount_parser import parse_amount
from billtrack.utils.dates import current_month, parse_month
from billtrack.utils.resolvers import resolve_card, resolve_profile


def resolve_profile_or_exit(ctx: click.Context, profile_service: ProfileService, profile: str) -> str:
    """Resolve profile name or ID, or exit with a CLI error."""
    try:
        return resolve_profile(profile_service, profile)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def resolve_card_or_exit(ctx: click.Context, card_service: CardService, card: str) -> str:
    """Resolve card reference, or exit with a CLI error."""
    try:
        return resolve_card(card_service, card)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def resolve_month_or_exit(ctx: click.Context, repo: Repository, month: str | None) -> str:
    """Resolve a --month option.

    Falls back to the stored active month, then the current month.
    """
    if month is None:
        return repo.get_active_month() or current_month()
    try:
        return parse_month(month)
    except ValueError as exc:
        click.echo(f"Error: Invalid month: {exc}", err=True)
        ctx.exit(1)


def parse_amount_or_exit(ctx: click.Context, amount: str) -> Decimal:
    """Parse an amount option, or exit with a CLI error."""
    try:
        return parse_amount(amount)
    except ValueError as exc:
        click.echo(f"Error: Invalid amount format: {exc}", err=True)
        ctx.exit(1)
