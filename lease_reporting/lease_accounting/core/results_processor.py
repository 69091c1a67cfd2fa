"""
Results Processor for multi-lease reports
Runs every included lease through the single-lease pipeline and lays the
balance summaries out as a Summary report (one section per account code) or a
Detail report (one block per lease)
"""

import logging
from typing import Dict, List

from lease_reporting.lease_accounting.core.exceptions import MissingOpeningBalanceError
from lease_reporting.lease_accounting.core.models import (
    LeaseCalculation, LeaseTerms, LeaseType, PVCalculationParams, ReportParams, ReportType,
)
from lease_reporting.lease_accounting.core.processor import LeaseProcessor
from lease_reporting.lease_accounting.utils.finance import round_half_up

logger = logging.getLogger(__name__)

# Summary report sections, in workbook order
ACCOUNT_CODES = [
    ('16400', 'Right to Use the Assets'),
    ('16405', 'Acc.Depr. Right to Use the Assets'),
    ('22005', 'Lease Liability - Current'),
    ('22010', 'Lease Liability - Non Current'),
    ('60080', 'Depreciation Expense'),
    ('60275', 'Interest Expense Rent'),
    ('60270', 'Rent Expense'),
    ('60390', 'Vehicle Expense'),
]


class ResultsProcessor:
    """
    Processes multiple leases for one reporting window
    Leases are independent; each is computed from its own terms and snapshot
    """

    def __init__(self, params: ReportParams):
        self.params = params
        self.lease_processor = LeaseProcessor(PVCalculationParams(
            opening_date=params.opening_date,
            closing_date=params.closing_date,
            payment_timing=params.payment_timing,
        ))

    def select_leases(self, leases: List[LeaseTerms]) -> List[LeaseTerms]:
        """Leases matching the report's lease-type filter, property leases first"""
        included = [lease for lease in leases if self.params.includes(lease)]
        return ([lease for lease in included if lease.lease_type == LeaseType.PROPERTY] +
                [lease for lease in included if lease.lease_type == LeaseType.MOTOR_VEHICLE])

    def check_opening_balances(self, leases: List[LeaseTerms]) -> None:
        """
        Every lease needs a snapshot for the opening date

        Raises:
            MissingOpeningBalanceError listing all offending leases
        """
        missing = [
            {'id': lease.id, 'leaseId': lease.lease_id, 'title': lease.title}
            for lease in leases
            if lease.find_opening_balance(self.params.opening_date) is None
        ]
        if missing:
            logger.warning(f"⚠️ {len(missing)} lease(s) missing an opening balance for {self.params.opening_date}")
            raise MissingOpeningBalanceError(self.params.opening_date, missing)

    def process_leases(self, leases: List[LeaseTerms]) -> List[LeaseCalculation]:
        selected = self.select_leases(leases)
        self.check_opening_balances(selected)

        logger.info(f"🔄 Processing {len(selected)} of {len(leases)} leases "
                    f"({self.params.opening_date} to {self.params.closing_date})")
        return [self.lease_processor.process_lease(lease) for lease in selected]

    def generate_report(self, leases: List[LeaseTerms]) -> Dict:
        calculations = self.process_leases(leases)
        if self.params.report_type == ReportType.DETAIL:
            report = self.build_detail_report(calculations)
        else:
            report = self.build_summary_report(calculations)
        logger.info(f"✅ {self.params.report_type.value} report built for {len(calculations)} leases")
        return report

    def _headers(self) -> List[str]:
        return [
            f"Opening Balance 31/12/{self.params.opening_date.year - 1}",
            f"Movement FY {self.params.closing_date.year}",
            f"Closing Balance {self.params.closing_date.strftime('%d/%m/%Y')}",
        ]

    def build_summary_report(self, calculations: List[LeaseCalculation]) -> Dict:
        """
        One section per account code listing every lease and a Total row
        Rent Expense lists motor vehicles as zero rows, Vehicle Expense lists
        property leases as zero rows
        """
        sections = []
        account_totals = []
        for code, name in ACCOUNT_CODES:
            rows = []
            for calc in calculations:
                line = next((row for row in calc.balance_summary.rows if row.account_code == code), None)
                if line is None:
                    rows.append({'title': calc.lease.title, 'openingBalance': 0.0,
                                 'movement': 0.0, 'closingBalance': 0.0})
                else:
                    rows.append({'title': calc.lease.title, 'openingBalance': line.opening_balance,
                                 'movement': line.movement, 'closingBalance': line.closing_balance})

            total = {
                'openingBalance': round_half_up(sum(row['openingBalance'] for row in rows)),
                'movement': round_half_up(sum(row['movement'] for row in rows)),
                'closingBalance': round_half_up(sum(row['closingBalance'] for row in rows)),
            }
            sections.append({'accountCode': code, 'accountName': name, 'rows': rows, 'total': total})
            account_totals.append({'accountCode': code, 'accountName': name, **total})

        return {
            'reportType': ReportType.SUMMARY.value,
            'headers': self._headers(),
            'sections': sections,
            'accountTotals': account_totals,
        }

    def build_detail_report(self, calculations: List[LeaseCalculation]) -> Dict:
        return {
            'reportType': ReportType.DETAIL.value,
            'headers': self._headers(),
            'leases': [
                {
                    'id': calc.lease.id,
                    'title': calc.lease.title,
                    'leaseType': calc.lease.lease_type.value,
                    'rows': [row.to_dict() for row in calc.balance_summary.rows],
                }
                for calc in calculations
            ],
        }
