"""Utility functions for pocketledger."""

from pocketledger.utils.date_parser import get_date_range, parse_date, parse_dmy_date
from pocketledger.utils.amount_parser import parse_amount
from pocketledger.utils.names import find_by_name, slugify

__all__ = ["get_date_range", "parse_date", "parse_dmy_date", "parse_amount", "find_by_name", "slugify"]
