"""
PV calculation tables
Cash flows, right-of-use asset depreciation and lease liability roll-forward,
each built in one forward pass over the payment schedule
"""

import logging
from typing import List

from lease_reporting.lease_accounting.core.models import (
    CashFlowRow, LeaseLiabilityRow, PaymentRow, PaymentTiming, RightOfUseAssetRow,
)
from lease_reporting.lease_accounting.utils.finance import present_value

logger = logging.getLogger(__name__)


def generate_cash_flows(payment_rows: List[PaymentRow], allocation_to_lease_component: float = 1.0,
                        other: float = 0.0, parking: float = 0.0) -> List[CashFlowRow]:
    """
    One cash flow row per payment
    Lease component = total cash flows x allocation to the lease component
    """
    rows = []
    for payment in payment_rows:
        total = payment.amount + other + parking
        rows.append(CashFlowRow(
            payment_date=payment.payment_date,
            base_rent=payment.amount,
            other=other,
            parking=parking,
            total_cash_flows=total,
            lease_component=total * allocation_to_lease_component,
        ))
    return rows


def calculate_present_value(cash_flow_rows: List[CashFlowRow], rate: float,
                            timing: PaymentTiming = PaymentTiming.BEGINNING) -> float:
    """
    Present value of the lease component cash flows at the monthly rate
    """
    amounts = [row.lease_component for row in cash_flow_rows]
    value = present_value(amounts, rate, due=(timing == PaymentTiming.BEGINNING))
    logger.debug(f"📊 PV of {len(amounts)} cash flows at {rate:.6f}/month ({timing.value}): {value:.2f}")
    return value


def generate_right_of_use_asset(cash_flow_rows: List[CashFlowRow], pv: float) -> List[RightOfUseAssetRow]:
    """
    Straight-line depreciation of the right-of-use asset

    Depreciation is spread over the periods with a positive base rent; the
    period reaching that count takes whatever balance remains so the asset
    ends at zero.
    """
    depreciable_periods = sum(1 for row in cash_flow_rows if row.base_rent > 0)
    if depreciable_periods == 0:
        logger.warning("⚠️ No periods with rent - right-of-use asset is not depreciated")

    rows: List[RightOfUseAssetRow] = []
    beginning = pv
    depreciation = 0.0
    for index, cash_flow in enumerate(cash_flow_rows):
        period_number = index + 1
        if depreciable_periods == 0:
            depreciation = 0.0
        elif index == 0:
            depreciation = -beginning / depreciable_periods
        elif period_number >= depreciable_periods:
            depreciation = -beginning
        ending = beginning + depreciation
        rows.append(RightOfUseAssetRow(
            payment_date=cash_flow.payment_date,
            period_number=period_number,
            asset_beginning=beginning,
            depreciation=depreciation,
            asset_ending=ending,
        ))
        beginning = ending

    return rows


def generate_lease_liability(cash_flow_rows: List[CashFlowRow], pv: float, rate: float,
                             timing: PaymentTiming = PaymentTiming.BEGINNING) -> List[LeaseLiabilityRow]:
    """
    Monthly roll-forward of the lease liability

    Beginning timing accrues interest on the balance after the payment;
    End timing accrues it on the balance before the payment.
    """
    rows: List[LeaseLiabilityRow] = []
    beginning = pv
    for cash_flow in cash_flow_rows:
        payment = -cash_flow.total_cash_flows
        if timing == PaymentTiming.BEGINNING:
            interest = (beginning + payment) * rate
        else:
            interest = beginning * rate
        ending = beginning + payment + interest
        rows.append(LeaseLiabilityRow(
            payment_date=cash_flow.payment_date,
            liability_beginning=beginning,
            payment=payment,
            interest_expense=interest,
            liability_ending=ending,
        ))
        beginning = ending

    return rows
