"""
Financial calculation utilities
Discounting, rounding and rate conversion for lease calculations
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Sequence, Tuple


def round_half_up(value: float, places: int = 2) -> float:
    """
    Round to a fixed number of decimals, halves away from zero
    (Python's round() is banker's rounding, which is not what the ledgers use)
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def monthly_rate(annual_rate_percent: float) -> float:
    """
    Convert an annual borrowing rate in percent to a simple monthly rate
    6 -> 0.005
    """
    return annual_rate_percent / 100 / 12


def present_value(amounts: Sequence[float], rate: float, due: bool = True) -> float:
    """
    Discount a series of periodic amounts

    Args:
        amounts: Amounts per period in schedule order
        rate: Interest rate per period
        due: True if payments at beginning of period (first amount undiscounted)
    Returns:
        Present value rounded half-up to cents; 0 for an empty series
    """
    if not amounts:
        return 0.0

    offset = 0 if due else 1
    total = 0.0
    for i, amount in enumerate(amounts):
        total += amount / ((1 + rate) ** (i + offset))

    return round_half_up(total)


def xnpv(annual_rate: float, cash_flows: Iterable[Tuple[date, float]]) -> float:
    """
    Net present value of dated cash flows
    Ports Excel XNPV(): sum of amount / (1 + rate) ** (days / 365)

    Args:
        annual_rate: Annual rate as a decimal (0.06 for 6%)
        cash_flows: (date, amount) pairs; the first date is the base date
    """
    flows: List[Tuple[date, float]] = list(cash_flows)
    if not flows:
        return 0.0

    base_date = flows[0][0]
    total = 0.0
    for flow_date, amount in flows:
        days = (flow_date - base_date).days
        total += amount / ((1 + annual_rate) ** (days / 365))

    return total
