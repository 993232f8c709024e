"""Utility modules for Honourus."""

from .datetime_utils import (
    utc_now,
    to_aware_utc,
    parse_timestamp,
    utc_date,
    year_bounds,
    iter_year_days,
    isoformat_utc,
)
from .ids import generate_id

__all__ = [
    # Datetime utilities
    "utc_now",
    "to_aware_utc",
    "parse_timestamp",
    "utc_date",
    "year_bounds",
    "iter_year_days",
    "isoformat_utc",
    # Ids
    "generate_id",
]
