"""
Test PV calculation tables
Present value, right-of-use asset depreciation and lease liability roll-forward
"""
from datetime import date

import pytest

from lease_reporting.lease_accounting.core.models import PaymentRow, PaymentTiming
from lease_reporting.lease_accounting.core.validation import parse_lease_record
from lease_reporting.lease_accounting.schedule.generator import generate_payment_rows
from lease_reporting.lease_accounting.schedule.pv_calculation import (
    calculate_present_value, generate_cash_flows, generate_lease_liability,
    generate_right_of_use_asset,
)
from lease_reporting.lease_accounting.utils.finance import monthly_rate, present_value, round_half_up

LEASE = {
    "id": "prop-1",
    "type": "Property",
    "lessor": "Acme Properties",
    "entity": "Acme Pty Ltd",
    "propertyAddress": "1 George St",
    "commencementDate": "2022-05-01",
    "expiryDate": "2024-05-01",
    "options": "0",
    "annualRent": "120000",
    "borrowingRate": "6",
    "rbaCpiRate": "3",
    "incrementMethods": {"1": "None"},
}

RATE = 0.005


def reference_cash_flows():
    return generate_cash_flows(generate_payment_rows(parse_lease_record(LEASE)))


def test_monthly_rate():
    assert monthly_rate(6) == pytest.approx(0.005)


def test_round_half_up():
    assert round_half_up(2.675) == 2.68
    assert round_half_up(0.125) == 0.13
    assert round_half_up(-0.125) == -0.13
    assert round_half_up(10.004) == 10.0


def test_reference_present_value_is_annuity_due():
    pv = calculate_present_value(reference_cash_flows(), RATE, PaymentTiming.BEGINNING)

    expected = round(10000 * (1 + RATE) * (1 - (1 + RATE) ** -24) / RATE, 2)
    assert pv == pytest.approx(expected, abs=0.01)
    assert 226000 < pv < 227000


def test_end_timing_discounts_every_payment():
    pv_end = calculate_present_value(reference_cash_flows(), RATE, PaymentTiming.END)

    expected = 10000 * (1 - (1 + RATE) ** -24) / RATE
    assert pv_end == pytest.approx(expected, abs=0.01)
    assert pv_end < calculate_present_value(reference_cash_flows(), RATE, PaymentTiming.BEGINNING)


def test_empty_cash_flows_have_zero_present_value():
    assert present_value([], RATE) == 0
    assert calculate_present_value([], RATE) == 0


def test_cash_flow_components():
    payments = [PaymentRow(1, 1, date(2023, 1, 1), 1000.0)]
    rows = generate_cash_flows(payments, allocation_to_lease_component=0.8, other=50.0, parking=150.0)

    assert rows[0].total_cash_flows == 1200.0
    assert rows[0].lease_component == pytest.approx(960.0)
    assert rows[0].period == "Jan-23"


def test_right_of_use_asset_closes_to_zero():
    cash_flows = reference_cash_flows()
    pv = calculate_present_value(cash_flows, RATE)
    rows = generate_right_of_use_asset(cash_flows, pv)

    assert len(rows) == 24
    assert rows[0].asset_beginning == pv
    assert rows[0].depreciation == pytest.approx(-pv / 24)
    assert rows[5].depreciation == rows[0].depreciation
    assert rows[-1].asset_ending == pytest.approx(0, abs=0.01)
    assert sum(row.depreciation for row in rows) == pytest.approx(-pv, abs=0.01)
    for previous, current in zip(rows, rows[1:]):
        assert current.asset_beginning == previous.asset_ending


def test_trailing_zero_rent_periods_take_the_catch_up():
    payments = [PaymentRow(i + 1, 1, date(2023, i + 1, 1), amount)
                for i, amount in enumerate([100.0, 100.0, 100.0, 0.0, 0.0])]
    rows = generate_right_of_use_asset(generate_cash_flows(payments), 300.0)

    assert [round(row.depreciation, 2) for row in rows] == [-100.0, -100.0, -100.0, 0.0, 0.0]
    assert rows[-1].asset_ending == pytest.approx(0)


def test_no_rent_periods_means_no_depreciation():
    payments = [PaymentRow(1, 1, date(2023, 1, 1), 0.0), PaymentRow(2, 1, date(2023, 2, 1), 0.0)]
    rows = generate_right_of_use_asset(generate_cash_flows(payments), 500.0)

    assert all(row.depreciation == 0 for row in rows)
    assert rows[-1].asset_ending == 500.0


@pytest.mark.parametrize("timing", [PaymentTiming.BEGINNING, PaymentTiming.END])
def test_lease_liability_closes_to_zero(timing):
    cash_flows = reference_cash_flows()
    pv = calculate_present_value(cash_flows, RATE, timing)
    rows = generate_lease_liability(cash_flows, pv, RATE, timing)

    assert rows[0].liability_beginning == pv
    assert rows[0].payment == -10000.0
    assert rows[-1].liability_ending == pytest.approx(0, abs=0.01)
    for previous, current in zip(rows, rows[1:]):
        assert current.liability_beginning == previous.liability_ending


def test_interest_accrual_depends_on_timing():
    cash_flows = reference_cash_flows()[:1]

    beginning = generate_lease_liability(cash_flows, 50000.0, RATE, PaymentTiming.BEGINNING)[0]
    end = generate_lease_liability(cash_flows, 50000.0, RATE, PaymentTiming.END)[0]

    assert beginning.interest_expense == pytest.approx((50000 - 10000) * RATE)
    assert end.interest_expense == pytest.approx(50000 * RATE)
    assert beginning.liability_ending == pytest.approx(50000 - 10000 + 200)
