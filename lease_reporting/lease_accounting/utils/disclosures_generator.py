"""
Disclosures Generator
Period aggregates of the lease liability roll-forward for a reporting window:
current/non-current split, PV interest accretion and the maturity analysis
(lease payments due)
"""

import logging
from datetime import date
from typing import Dict, List, Optional, Tuple

from lease_reporting.lease_accounting.core.models import (
    LeaseLiabilityRow, LeaseLiabilitySummary, LeasePaymentsDueRow,
)
from lease_reporting.lease_accounting.utils.date_utils import same_month
from lease_reporting.lease_accounting.utils.finance import round_half_up

logger = logging.getLogger(__name__)

# (label, first year offset from the closing year, last offset or None for open-ended)
MATURITY_BUCKETS: List[Tuple[str, int, Optional[int]]] = [
    ('< 1 Year', 1, 1),
    ('1-2 Years', 2, 2),
    ('2-3 Years', 3, 3),
    ('3-4 Years', 4, 4),
    ('4-5 Years', 5, 5),
    ('> 5 Years', 6, None),
]


class DisclosuresGenerator:
    """
    Aggregate one lease's liability rows over a reporting window
    Rows are matched to periods by their payment date (day precision)
    """

    def __init__(self, liability_rows: List[LeaseLiabilityRow]):
        self.liability_rows = liability_rows

    def calculate_lease_liability_summary(self, start_date: date, end_date: date) -> LeaseLiabilitySummary:
        """
        Short-term: payments net of interest falling within [start_date, end_date]
        Long-term: closing liability of the period in end_date's month (0 if none)
        """
        short_term = -sum(
            row.payment + row.interest_expense
            for row in self.liability_rows
            if start_date <= row.payment_date <= end_date
        )

        long_term = 0.0
        for row in self.liability_rows:
            if same_month(row.payment_date, end_date):
                long_term = row.liability_ending
                break

        return LeaseLiabilitySummary(
            short_term=round_half_up(short_term),
            long_term=round_half_up(long_term),
        )

    def calculate_pv_interest_accretion(self, start_date: date) -> float:
        """Interest accreted on the liability from start_date onwards"""
        total = sum(row.interest_expense for row in self.liability_rows if row.payment_date >= start_date)
        return round_half_up(total)

    def calculate_lease_payments_due(self, closing_date: date) -> List[LeasePaymentsDueRow]:
        """
        Maturity analysis - payments due by calendar year after the closing year
        Six buckets followed by a Total row; NPV = payments - interest
        """
        payments_by_year: Dict[int, float] = {}
        interest_by_year: Dict[int, float] = {}
        for row in self.liability_rows:
            year = row.payment_date.year
            payments_by_year[year] = payments_by_year.get(year, 0.0) + abs(row.payment)
            interest_by_year[year] = interest_by_year.get(year, 0.0) + row.interest_expense

        closing_year = closing_date.year
        rows: List[LeasePaymentsDueRow] = []
        for label, first_offset, last_offset in MATURITY_BUCKETS:
            first_year = closing_year + first_offset
            last_year = closing_year + last_offset if last_offset is not None else None

            def in_bucket(year: int) -> bool:
                return year >= first_year and (last_year is None or year <= last_year)

            rows.append(LeasePaymentsDueRow(
                label=label,
                lease_payments=round_half_up(sum(v for y, v in payments_by_year.items() if in_bucket(y))),
                interest=round_half_up(sum(v for y, v in interest_by_year.items() if in_bucket(y))),
            ))

        rows.append(LeasePaymentsDueRow(
            label='Total',
            lease_payments=round_half_up(sum(row.lease_payments for row in rows)),
            interest=round_half_up(sum(row.interest for row in rows)),
        ))
        return rows
