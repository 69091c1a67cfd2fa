"""
Journal Entry Generator
Builds the fixed 15-row journal for a reporting window and the opening /
movement / closing balance summary per account code
"""

import logging
from datetime import date
from typing import List, Optional

from lease_reporting.lease_accounting.core.models import (
    BalanceSummary, BalanceSummaryRow, JournalRow, LeaseLiabilityRow, LeaseType,
    OpeningBalance, RightOfUseAssetRow,
)
from lease_reporting.lease_accounting.utils.date_utils import format_date_dmy
from lease_reporting.lease_accounting.utils.finance import round_half_up

logger = logging.getLogger(__name__)

# Journal row positions (0-based)
ROW_ROU_RECOGNITION = 2
ROW_RECOGNITION_CURRENT = 3
ROW_RECOGNITION_NON_CURRENT = 4
ROW_NON_CURRENT = 8
ROW_CURRENT = 9
ROW_DEPRECIATION = 10
ROW_INTEREST = 11
ROW_ACC_DEPRECIATION = 12
ROW_RENT_EXPENSE = 13
MOVEMENT_ROWS = range(ROW_NON_CURRENT, ROW_RENT_EXPENSE + 1)


class JournalGenerator:
    """
    Generate the journal and balance summary for one lease and one window

    Rows 3-5 recognise the lease (right-of-use asset against the liability,
    split by what was paid before the opening date). Rows 9-14 are the
    movement for the window, with rent expense as the balancing line.
    """

    def __init__(self):
        self.journal_rows: List[JournalRow] = []

    def generate_journal(
        self,
        present_value: float,
        liability_rows: List[LeaseLiabilityRow],
        right_of_use_rows: List[RightOfUseAssetRow],
        opening_date: date,
        closing_date: date,
        expiry_date: date,
        opening_balance: OpeningBalance,
    ) -> List[JournalRow]:
        """
        Args:
            liability_rows / right_of_use_rows: Full tables, indexed like the payment schedule
            expiry_date: Contractual expiry date (options not added)
            opening_balance: Snapshot for opening_date; a new lease or extension
                counts as all zeros
        """
        ob = opening_balance.effective()

        def settled(row: LeaseLiabilityRow) -> float:
            return row.payment + row.interest_expense

        in_window = [opening_date <= row.payment_date <= closing_date for row in liability_rows]
        to_closing = [row.payment_date <= closing_date for row in liability_rows]

        paid_before_opening = sum(settled(row) for row in liability_rows if row.payment_date < opening_date)
        window_settled = sum(settled(row) for row, hit in zip(liability_rows, in_window) if hit)
        window_interest = sum(row.interest_expense for row, hit in zip(liability_rows, in_window) if hit)
        window_depreciation = sum(row.depreciation for row, hit in zip(right_of_use_rows, in_window) if hit)

        # Final settlement: the contractual expiry falls on or before the closing date
        final_settlement = closing_date >= expiry_date

        if ob.lease_liability_non_current == 0:
            non_current = 0.0
        elif final_settlement:
            non_current = -ob.lease_liability_non_current
        else:
            non_current = -window_settled

        if final_settlement:
            if ob.lease_liability_non_current == 0 and ob.lease_liability_current == 0:
                current = -sum(settled(row) for row, hit in zip(liability_rows, to_closing) if hit)
            else:
                current = -ob.lease_liability_current
            all_depreciation = sum(row.depreciation for row, hit in zip(right_of_use_rows, to_closing) if hit)
            depreciation = abs(all_depreciation) - abs(ob.acc_depr_right_to_use_assets)
            logger.debug(f"🔄 Final settlement at {closing_date} (expiry {expiry_date})")
        else:
            current = -(window_settled + non_current)
            depreciation = abs(window_depreciation)

        movements = [
            round_half_up(non_current),
            round_half_up(current),
            round_half_up(depreciation),
            round_half_up(window_interest),
        ]
        movements.append(-movements[2])  # Accumulated depreciation mirrors depreciation expense
        movements.append(round_half_up(-sum(movements)))

        pv = round_half_up(present_value)
        recognised_current = round_half_up(paid_before_opening)
        self.journal_rows = [
            JournalRow(),
            JournalRow(),
            JournalRow('164000', 'Right to Use the Assets', pv),
            JournalRow('22005', 'Lease Liability - Current', recognised_current),
            JournalRow('22010', 'Lease Liability - Non-Current', round_half_up(-(pv + recognised_current))),
            JournalRow(),
            JournalRow(),
            JournalRow(),
            JournalRow('22010', 'Lease Liability - Non-Current', movements[0]),
            JournalRow('22005', 'Lease Liability - Current', movements[1]),
            JournalRow('60080', 'Depreciation Expense', movements[2]),
            JournalRow('60275', 'Interest Expense Rent', movements[3]),
            JournalRow('16405', 'Acc.Depr Right to Use Assets', movements[4]),
            JournalRow('60270', 'Rent Expense', movements[5]),
            JournalRow('', f"(Journal at {format_date_dmy(closing_date)})"),
        ]

        if not self.verify_balance():
            logger.warning(f"⚠️ Journal at {closing_date} does not balance")
        return self.journal_rows

    def verify_balance(self) -> bool:
        """
        Verify that the movement rows balance
        Should sum to zero
        """
        total = sum(self.journal_rows[i].amount or 0.0 for i in MOVEMENT_ROWS)
        return abs(total) < 0.01

    def generate_balance_summary(
        self,
        lease_type: LeaseType,
        opening_balance: OpeningBalance,
        opening_date: date,
        closing_date: date,
    ) -> BalanceSummary:
        """
        Opening + movement = closing for the seven lease accounts

        For a new lease or extension the openings are zero and the recognition
        rows (4/5) are added into the current/non-current movements.
        """
        if not self.journal_rows:
            raise ValueError("Generate the journal before the balance summary")

        ob = opening_balance.effective()
        is_extension = opening_balance.is_new_lease_extension
        amount = self._amount

        lines = [
            ('16400', 'Right to Use the Assets', ob.right_to_use_assets,
             amount(ROW_ROU_RECOGNITION) if is_extension else 0.0),
            ('16405', 'Acc.Depr. Right to Use the Assets', ob.acc_depr_right_to_use_assets,
             amount(ROW_ACC_DEPRECIATION)),
            ('22005', 'Lease Liability - Current', ob.lease_liability_current,
             amount(ROW_CURRENT) + (amount(ROW_RECOGNITION_CURRENT) if is_extension else 0.0)),
            ('22010', 'Lease Liability - Non Current', ob.lease_liability_non_current,
             amount(ROW_NON_CURRENT) + (amount(ROW_RECOGNITION_NON_CURRENT) if is_extension else 0.0)),
            ('60080', 'Depreciation Expense', ob.depreciation_expense, amount(ROW_DEPRECIATION)),
            ('60275', 'Interest Expense Rent', ob.interest_expense_rent, amount(ROW_INTEREST)),
        ]
        expense_movement = -sum(movement for _, _, _, movement in lines)
        if lease_type == LeaseType.MOTOR_VEHICLE:
            lines.append(('60390', 'Vehicle Expense', ob.rent_expense, expense_movement))
        else:
            lines.append(('60270', 'Rent Expense', ob.rent_expense, expense_movement))

        rows = []
        for code, label, opening, movement in lines:
            opening = round_half_up(opening)
            movement = round_half_up(movement)
            rows.append(BalanceSummaryRow(
                account_code=code,
                label=label,
                opening_balance=opening,
                movement=movement,
                closing_balance=round_half_up(opening + movement),
            ))

        return BalanceSummary(
            opening_header=f"Opening Balance 31/12/{opening_date.year - 1}",
            movement_header=f"Movement FY {closing_date.year}",
            closing_header=f"Closing Balance {format_date_dmy(closing_date)}",
            rows=rows,
        )

    def _amount(self, index: int) -> float:
        return self.journal_rows[index].amount or 0.0


def generate_lease_journal(
    present_value: float,
    liability_rows: List[LeaseLiabilityRow],
    right_of_use_rows: List[RightOfUseAssetRow],
    opening_date: date,
    closing_date: date,
    expiry_date: date,
    opening_balance: Optional[OpeningBalance] = None,
) -> List[JournalRow]:
    """
    Convenience function to generate the journal rows
    """
    if opening_balance is None:
        opening_balance = OpeningBalance(opening_date=opening_date)
    generator = JournalGenerator()
    return generator.generate_journal(present_value, liability_rows, right_of_use_rows,
                                      opening_date, closing_date, expiry_date, opening_balance)
