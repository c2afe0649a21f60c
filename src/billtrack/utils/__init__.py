"""Utility functions for billtrack."""

from billtrack.utils.amount_parser import parse_amount
from billtrack.utils.dates import current_month, parse_date, parse_month
from billtrack.utils.ids import new_id

__all__ = ["parse_amount", "parse_date", "parse_month", "current_month", "new_id"]
