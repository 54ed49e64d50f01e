"""Utility functions for bankledger."""

from bankledger.utils.date_parser import parse_date, parse_datetime, get_date_range
from bankledger.utils.amount_parser import parse_amount, positive_amount

__all__ = ["parse_date", "parse_datetime", "get_date_range", "parse_amount", "positive_amount"]
