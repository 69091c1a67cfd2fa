"""
Utility functions for lease accounting
"""

from .date_utils import (
    normalize_date,
    first_of_month,
    add_months,
    add_years,
    full_months_between,
    format_date_short,
    format_date_dmy,
)

from .finance import (
    round_half_up,
    monthly_rate,
    present_value,
    xnpv,
)

__all__ = [
    # Date utilities
    'normalize_date',
    'first_of_month',
    'add_months',
    'add_years',
    'full_months_between',
    'format_date_short',
    'format_date_dmy',

    # Finance utilities
    'round_half_up',
    'monthly_rate',
    'present_value',
    'xnpv',
]
