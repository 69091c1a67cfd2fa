"""
Test payment schedule generation
Property leases with rent reviews, motor vehicle flat schedules, committed years
"""
from datetime import date

import pytest

from lease_reporting.lease_accounting.core.models import IncrementMethod
from lease_reporting.lease_accounting.core.validation import calculate_committed_years, parse_lease_record
from lease_reporting.lease_accounting.schedule import generator
from lease_reporting.lease_accounting.schedule.generator import (
    generate_payment_rows, schedule_xnpv, total_payments,
)
from lease_reporting.lease_accounting.utils.date_utils import add_months

PROPERTY_LEASE = {
    "id": "prop-1",
    "leaseId": "L001",
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
    "fixedIncrementRate": "4",
    "incrementMethods": {"1": "None"},
    "overrideAmounts": {},
}

MOTOR_LEASE = {
    "id": "mv-1",
    "type": "Motor Vehicle",
    "lessor": "FleetCo",
    "entity": "Acme Pty Ltd",
    "regoNo": "ABC123",
    "deliveryDate": "2023-03-15",
    "expiryDate": "2026-03-01",
    "annualRent": "18000",
    "borrowingRate": "7.5",
}


def property_lease(**overrides):
    record = dict(PROPERTY_LEASE)
    record.update(overrides)
    return parse_lease_record(record)


def test_reference_property_schedule():
    rows = generate_payment_rows(property_lease())

    assert len(rows) == 24, f"Expected 24 payments, got {len(rows)}"
    assert rows[0].amount == 10000.00
    assert rows[0].payment_date == date(2022, 5, 1)
    assert rows[-1].payment_date == date(2024, 4, 1)
    assert rows[0].note == "None"
    assert all(row.amount == 10000.00 for row in rows)
    assert [row.sequence_number for row in rows] == list(range(1, 25))
    assert rows[11].lease_year == 1 and rows[12].lease_year == 2


def test_payment_dates_advance_one_month_at_a_time():
    rows = generate_payment_rows(property_lease(options="2"))

    for previous, current in zip(rows, rows[1:]):
        assert current.payment_date == add_months(previous.payment_date, 1)
        assert current.payment_date.day == 1


def test_market_review_in_year_two():
    rows = generate_payment_rows(property_lease(
        incrementMethods={"2": "Market"},
        overrideAmounts={"2": "9500"},
    ))

    year_two = [row for row in rows if row.lease_year == 2]
    assert len(year_two) == 12
    assert all(row.amount == 9500.00 for row in year_two)
    assert all(row.note == "Market Review" for row in year_two)
    assert all(row.note == "" for row in rows if row.lease_year == 1)


def test_fixed_and_cpi_increments_compound():
    rows = generate_payment_rows(property_lease(
        expiryDate="2025-05-01",
        incrementMethods={"2": "Fixed", "3": "CPI"},
    ))

    assert rows[11].amount == 10000.00
    assert rows[12].amount == pytest.approx(10400.00)
    assert rows[12].note == "Fixed Increment Rate"
    assert rows[24].amount == pytest.approx(10712.00)
    assert rows[24].note == "RBA CPI Rate"


def test_year_one_increment_applies_to_first_payment():
    rows = generate_payment_rows(property_lease(incrementMethods={"1": "Fixed"}))

    assert rows[0].amount == pytest.approx(10400.00)
    assert rows[0].note == "Fixed Increment Rate"
    # No year-2 method: amount carries forward, note cleared
    assert rows[12].amount == rows[0].amount
    assert rows[12].note == ""


def test_increments_compound_before_rounding():
    rows = generate_payment_rows(property_lease(
        expiryDate="2025-05-01",
        annualRent="100000",
        fixedIncrementRate="2.5",
        incrementMethods={"2": "Fixed", "3": "Fixed"},
    ))

    assert rows[0].amount == 8333.33
    assert rows[12].amount == pytest.approx(8333.33 * 1.025)
    assert rows[24].amount == pytest.approx(8333.33 * 1.025 ** 2)
    # Rounded half-up to cents only when serialized
    assert rows[12].to_dict()["amount"] == 8541.66
    assert rows[24].to_dict()["amount"] == 8755.20


def test_options_extend_the_schedule():
    rows = generate_payment_rows(property_lease(options="1"))

    assert len(rows) == 36
    assert rows[-1].payment_date == date(2025, 4, 1)


def test_end_boundary_policy_can_be_inclusive():
    lease = property_lease()

    assert len(generate_payment_rows(lease, inclusive_end=True)) == 25
    assert len(generate_payment_rows(lease, inclusive_end=False)) == 24


def test_end_boundary_module_default(monkeypatch):
    monkeypatch.setattr(generator, 'END_DATE_INCLUSIVE', True)

    assert len(generate_payment_rows(property_lease())) == 25


def test_motor_vehicle_payments_are_flat():
    record = dict(MOTOR_LEASE, incrementMethods={"2": "Fixed"}, fixedIncrementRate="10")
    rows = generate_payment_rows(parse_lease_record(record))

    assert len(rows) == 36
    assert rows[0].payment_date == date(2023, 3, 1)
    assert all(row.amount == 1500.00 for row in rows)
    assert all(row.note == "" for row in rows)


def test_lease_ending_in_its_first_month_has_no_payments():
    rows = generate_payment_rows(property_lease(commencementDate="2022-05-01", expiryDate="2022-05-01"))

    assert rows == []
    assert total_payments(rows) == 0
    assert schedule_xnpv(rows, 6) == 0


def test_committed_years_uses_day_of_month_adjustment():
    assert calculate_committed_years(property_lease(commencementDate="2022-05-15", expiryDate="2024-05-10")) == 2
    assert calculate_committed_years(property_lease(commencementDate="2022-05-15", expiryDate="2024-05-20")) == 3
    assert calculate_committed_years(property_lease()) == 2
    assert calculate_committed_years(property_lease(options="3")) == 5


def test_schedule_totals():
    rows = generate_payment_rows(property_lease())

    assert total_payments(rows) == 240000.00
    xnpv = schedule_xnpv(rows, 6)
    # Discounted, so below the undiscounted total but above the 6% annual floor for two years
    assert 240000 / 1.06 ** 2 < xnpv < 240000
    assert xnpv == pytest.approx(sum(
        row.amount / 1.06 ** ((row.payment_date - rows[0].payment_date).days / 365) for row in rows
    ), abs=0.01)


def test_increment_methods_are_typed():
    lease = property_lease(incrementMethods={"1": "None", "2": "CPI", "3": ""})

    assert lease.increment_methods == {1: IncrementMethod.NONE, 2: IncrementMethod.CPI}
