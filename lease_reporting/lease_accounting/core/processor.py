"""
Main Lease Processor
Runs one lease through the full pipeline for a reporting window:
payment schedule -> cash flows -> present value -> right-of-use asset and
liability tables -> period aggregates -> journal and balance summary
"""

import logging
from typing import Optional

from lease_reporting.lease_accounting.core.exceptions import MissingOpeningBalanceError
from lease_reporting.lease_accounting.core.models import (
    LeaseCalculation, LeaseTerms, OpeningBalance, PVCalculationParams,
)
from lease_reporting.lease_accounting.core.validation import calculate_committed_years
from lease_reporting.lease_accounting.schedule.generator import generate_payment_rows, schedule_xnpv, total_payments
from lease_reporting.lease_accounting.schedule.pv_calculation import (
    calculate_present_value, generate_cash_flows, generate_lease_liability,
    generate_right_of_use_asset,
)
from lease_reporting.lease_accounting.utils.disclosures_generator import DisclosuresGenerator
from lease_reporting.lease_accounting.utils.finance import monthly_rate
from lease_reporting.lease_accounting.utils.journal_generator import JournalGenerator

logger = logging.getLogger(__name__)


def build_payment_schedule(lease: LeaseTerms, inclusive_end: Optional[bool] = None) -> dict:
    """
    Payment schedule with its totals, as shown on the Lease Payments sheet
    """
    rows = generate_payment_rows(lease, inclusive_end=inclusive_end)
    return {
        'leaseId': lease.id,
        'title': lease.title,
        'leaseType': lease.lease_type.value,
        'committedYears': calculate_committed_years(lease),
        'payments': [row.to_dict() for row in rows],
        'totalPayments': total_payments(rows),
        'xnpv': schedule_xnpv(rows, lease.borrowing_rate),
    }


class LeaseProcessor:
    """
    Single-lease processor for one reporting window
    Every call recomputes from the lease terms; nothing is cached between leases
    """

    def __init__(self, params: PVCalculationParams):
        self.params = params

    def resolve_opening_balance(self, lease: LeaseTerms) -> OpeningBalance:
        """
        Opening balance for the window: manually entered figures first, then
        the snapshot stored on the lease for the opening date

        Raises:
            MissingOpeningBalanceError if neither exists
        """
        if self.params.opening_balance is not None:
            return self.params.opening_balance
        balance = lease.find_opening_balance(self.params.opening_date)
        if balance is None:
            logger.warning(f"⚠️ Lease {lease.id} has no opening balance for {self.params.opening_date}")
            raise MissingOpeningBalanceError(self.params.opening_date, [{'id': lease.id, 'title': lease.title}])
        return balance

    def process_lease(self, lease: LeaseTerms, opening_balance: Optional[OpeningBalance] = None) -> LeaseCalculation:
        """
        Compute every table for the lease over the reporting window

        Raises:
            LeaseValidationError if the lease terms are incomplete
            MissingOpeningBalanceError if no opening balance is available
        """
        params = self.params
        if opening_balance is None:
            opening_balance = self.resolve_opening_balance(lease)

        payment_rows = generate_payment_rows(lease)
        rate = monthly_rate(lease.borrowing_rate)

        cash_flow_rows = generate_cash_flows(
            payment_rows,
            allocation_to_lease_component=params.allocation_to_lease_component,
            other=params.other,
            parking=params.parking,
        )
        pv = calculate_present_value(cash_flow_rows, rate, params.payment_timing)
        right_of_use_rows = generate_right_of_use_asset(cash_flow_rows, pv)
        liability_rows = generate_lease_liability(cash_flow_rows, pv, rate, params.payment_timing)

        disclosures = DisclosuresGenerator(liability_rows)
        journal = JournalGenerator()
        journal_rows = journal.generate_journal(
            pv, liability_rows, right_of_use_rows,
            params.opening_date, params.closing_date, lease.expiry_date,
            opening_balance,
        )
        balance_summary = journal.generate_balance_summary(
            lease.lease_type, opening_balance, params.opening_date, params.closing_date,
        )

        logger.info(f"✅ Lease {lease.id}: PV {pv:.2f} over {len(payment_rows)} payments")

        return LeaseCalculation(
            lease=lease,
            opening_date=params.opening_date,
            closing_date=params.closing_date,
            payment_rows=payment_rows,
            cash_flow_rows=cash_flow_rows,
            present_value=pv,
            right_of_use_rows=right_of_use_rows,
            liability_rows=liability_rows,
            liability_summary=disclosures.calculate_lease_liability_summary(params.opening_date, params.closing_date),
            pv_interest_accretion=disclosures.calculate_pv_interest_accretion(params.opening_date),
            payments_due=disclosures.calculate_lease_payments_due(params.closing_date),
            journal_rows=journal_rows,
            balance_summary=balance_summary,
        )
