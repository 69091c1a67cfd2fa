"""
Lease Payment Schedule Generator
Turns lease terms into monthly payment rows, applying the rent review rule
recorded for each lease year

Property leases: monthly rent from annual rent, reviewed at every lease-year
boundary (Fixed %, RBA CPI %, Market override or no change).
Motor vehicle leases: flat monthly rent for the whole term.
"""

import logging
from datetime import date
from typing import List, Optional, Tuple

from lease_reporting.lease_accounting.core.models import (
    IncrementMethod, LeaseTerms, MotorVehicleLease, PaymentRow, PropertyLease,
)
from lease_reporting.lease_accounting.core.validation import validate_lease
from lease_reporting.lease_accounting.utils.date_utils import (
    add_months, first_of_month,
)
from lease_reporting.lease_accounting.utils.finance import round_half_up, xnpv

logger = logging.getLogger(__name__)

# Whether a payment falls due in the month starting on the end date itself.
# False: iterate while payment date < end date.
END_DATE_INCLUSIVE = False

INCREMENT_NOTES = {
    IncrementMethod.FIXED: "Fixed Increment Rate",
    IncrementMethod.CPI: "RBA CPI Rate",
    IncrementMethod.MARKET: "Market Review",
    IncrementMethod.NONE: "None",
}


def _payment_dates(start: date, end: date, inclusive_end: bool) -> List[date]:
    dates = []
    current = first_of_month(start)
    months = 0
    while current < end or (inclusive_end and current == end):
        dates.append(current)
        months += 1
        current = add_months(first_of_month(start), months)
    return dates


def _apply_increment(lease: PropertyLease, lease_year: int, amount: float) -> Tuple[float, str]:
    """Amount after the review for lease_year, and the note naming the rule"""
    method = lease.increment_methods.get(lease_year)
    if method is None:
        return amount, ""

    if method == IncrementMethod.FIXED:
        amount = amount * (1 + lease.fixed_increment_rate / 100)
    elif method == IncrementMethod.CPI:
        amount = amount * (1 + lease.rba_cpi_rate / 100)
    elif method == IncrementMethod.MARKET:
        amount = lease.override_amounts.get(lease_year, 0.0)

    return amount, INCREMENT_NOTES[method]


def generate_property_payment_rows(lease: PropertyLease, inclusive_end: Optional[bool] = None) -> List[PaymentRow]:
    """
    Generate the monthly payment rows for a property lease

    Year 1's review applies to payment #1; every later review applies on the
    first payment of its lease year and carries forward. Reviewed amounts
    compound unrounded; rows are rounded to cents when serialized. Every row
    of a year is noted with the rule that set its amount.
    """
    if inclusive_end is None:
        inclusive_end = END_DATE_INCLUSIVE

    dates = _payment_dates(lease.start_date, lease.end_date, inclusive_end)
    amount = round_half_up(lease.annual_rent / 12)
    note = ""
    rows: List[PaymentRow] = []

    for index, payment_date in enumerate(dates):
        lease_year = index // 12 + 1
        if index % 12 == 0:
            amount, note = _apply_increment(lease, lease_year, amount)
            if note:
                logger.debug(f"📅 Lease {lease.id} year {lease_year}: {note} -> {amount:.2f}")
        rows.append(PaymentRow(
            sequence_number=index + 1,
            lease_year=lease_year,
            payment_date=payment_date,
            amount=amount,
            note=note,
        ))

    return rows


def generate_motor_vehicle_payment_rows(lease: MotorVehicleLease, inclusive_end: Optional[bool] = None) -> List[PaymentRow]:
    if inclusive_end is None:
        inclusive_end = END_DATE_INCLUSIVE

    amount = round_half_up(lease.annual_rent / 12)
    return [
        PaymentRow(
            sequence_number=index + 1,
            lease_year=index // 12 + 1,
            payment_date=payment_date,
            amount=amount,
        )
        for index, payment_date in enumerate(_payment_dates(lease.start_date, lease.end_date, inclusive_end))
    ]


def generate_payment_rows(lease: LeaseTerms, inclusive_end: Optional[bool] = None) -> List[PaymentRow]:
    """
    Generate the payment schedule for any lease variant

    Args:
        lease: Validated lease terms
        inclusive_end: Override END_DATE_INCLUSIVE for this call
    Returns:
        Payment rows in strictly increasing monthly order (empty when the lease
        ends in the month it starts)
    Raises:
        LeaseValidationError if the lease terms are incomplete
    """
    validate_lease(lease)

    if isinstance(lease, PropertyLease):
        rows = generate_property_payment_rows(lease, inclusive_end)
    elif isinstance(lease, MotorVehicleLease):
        rows = generate_motor_vehicle_payment_rows(lease, inclusive_end)
    else:
        raise TypeError(f"Unsupported lease type: {type(lease).__name__}")

    logger.info(f"📊 Generated {len(rows)} payments for lease {lease.id} ({lease.lease_type.value})")
    if not rows:
        logger.warning(f"⚠️ Lease {lease.id} has no payments between {lease.start_date} and {lease.end_date}")
    return rows


def total_payments(rows: List[PaymentRow]) -> float:
    return round_half_up(sum(row.amount for row in rows))


def schedule_xnpv(rows: List[PaymentRow], borrowing_rate: float) -> float:
    """XNPV of the payment schedule at the annual borrowing rate (percent)"""
    value = xnpv(borrowing_rate / 100, ((row.payment_date, row.amount) for row in rows))
    return round_half_up(value)
