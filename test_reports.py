"""
Test multi-lease reports
Summary and Detail layouts, lease-type filtering and opening balance checks
"""
from datetime import date

import pytest

from lease_reporting.lease_accounting.core.exceptions import MissingOpeningBalanceError
from lease_reporting.lease_accounting.core.models import PVCalculationParams
from lease_reporting.lease_accounting.core.processor import LeaseProcessor, build_payment_schedule
from lease_reporting.lease_accounting.core.results_processor import ACCOUNT_CODES, ResultsProcessor
from lease_reporting.lease_accounting.core.validation import parse_lease_record, parse_report_params

OPENING_BALANCE_2023 = {
    "openingDate": "2023-01-01",
    "rightToUseAssets": "226756.00",
    "accDeprRightToUseAssets": "-75585.33",
    "leaseLiabilityCurrent": "-115000.00",
    "leaseLiabilityNonCurrent": "-39000.00",
}

PROPERTY_RECORD = {
    "id": "prop-1",
    "leaseId": "L001",
    "type": "Property",
    "lessor": "Acme Properties",
    "propertyAddress": "1 George St",
    "commencementDate": "2022-05-01",
    "expiryDate": "2024-05-01",
    "annualRent": "120000",
    "borrowingRate": "6",
    "incrementMethods": {"1": "None"},
    "openingBalances": [OPENING_BALANCE_2023],
}

MOTOR_RECORD = {
    "id": "mv-1",
    "leaseId": "V001",
    "type": "Motor Vehicle",
    "lessor": "FleetCo",
    "regoNo": "ABC123",
    "deliveryDate": "2022-07-01",
    "expiryDate": "2025-07-01",
    "annualRent": "18000",
    "borrowingRate": "7.5",
    "openingBalances": [dict(OPENING_BALANCE_2023, vehicleExpense="-9000")],
}


def leases(*records):
    return [parse_lease_record(record) for record in records]


def report_params(**overrides):
    data = {"openingDate": "2023-01-01T00:00:00.000Z", "closingDate": "2023-12-31"}
    data.update(overrides)
    return parse_report_params(data)


def test_summary_report_sections():
    report = ResultsProcessor(report_params()).generate_report(leases(MOTOR_RECORD, PROPERTY_RECORD))

    assert report['reportType'] == "Summary"
    assert report['headers'] == ["Opening Balance 31/12/2022", "Movement FY 2023", "Closing Balance 31/12/2023"]
    assert [section['accountCode'] for section in report['sections']] == [code for code, _ in ACCOUNT_CODES]

    # Property leases are listed first
    first_section = report['sections'][0]
    assert [row['title'] for row in first_section['rows']] == ["Acme Properties 1 George St", "FleetCo ABC123"]


def test_summary_report_zero_rows_for_the_other_expense_line():
    report = ResultsProcessor(report_params()).generate_report(leases(PROPERTY_RECORD, MOTOR_RECORD))
    sections = {section['accountCode']: section for section in report['sections']}

    rent_rows = sections['60270']['rows']
    vehicle_rows = sections['60390']['rows']
    assert rent_rows[1] == {'title': "FleetCo ABC123", 'openingBalance': 0.0, 'movement': 0.0, 'closingBalance': 0.0}
    assert vehicle_rows[0]['movement'] == 0.0
    assert vehicle_rows[1]['openingBalance'] == -9000.0


def test_summary_report_totals():
    report = ResultsProcessor(report_params()).generate_report(leases(PROPERTY_RECORD, MOTOR_RECORD))

    for section in report['sections']:
        assert section['total']['movement'] == pytest.approx(
            sum(row['movement'] for row in section['rows']), abs=0.01)
        assert section['total']['closingBalance'] == pytest.approx(
            section['total']['openingBalance'] + section['total']['movement'], abs=0.02)

    assert len(report['accountTotals']) == 8
    assert report['accountTotals'][0]['openingBalance'] == pytest.approx(2 * 226756.00)
    # Each lease's movements balance, so the report's do too
    assert sum(total['movement'] for total in report['accountTotals']) == pytest.approx(0, abs=0.05)


def test_detail_report_blocks():
    report = ResultsProcessor(report_params(reportType="Detail")).generate_report(
        leases(PROPERTY_RECORD, MOTOR_RECORD))

    assert report['reportType'] == "Detail"
    assert [block['id'] for block in report['leases']] == ["prop-1", "mv-1"]
    motor_rows = report['leases'][1]['rows']
    assert len(motor_rows) == 7
    assert motor_rows[-1]['accountCode'] == '60390'
    assert motor_rows[0]['accountName'] == 'Right to Use the Assets'


def test_lease_type_filter():
    processor = ResultsProcessor(report_params(includedLeases="Motor", reportType="Detail"))

    report = processor.generate_report(leases(PROPERTY_RECORD, MOTOR_RECORD))

    assert [block['id'] for block in report['leases']] == ["mv-1"]


def test_missing_opening_balances_list_every_lease():
    without_balance = [
        dict(PROPERTY_RECORD, openingBalances=[]),
        dict(MOTOR_RECORD, openingBalances=[dict(OPENING_BALANCE_2023, openingDate="2022-01-01")]),
    ]

    with pytest.raises(MissingOpeningBalanceError) as excinfo:
        ResultsProcessor(report_params()).generate_report(leases(*without_balance))

    error = excinfo.value
    assert error.opening_date == date(2023, 1, 1)
    assert [lease['id'] for lease in error.leases] == ["prop-1", "mv-1"]
    assert error.leases[0]['leaseId'] == "L001"


def test_leases_outside_the_filter_do_not_need_opening_balances():
    records = [dict(PROPERTY_RECORD, openingBalances=[]), MOTOR_RECORD]

    report = ResultsProcessor(report_params(includedLeases="Motor")).generate_report(leases(*records))

    assert len(report['sections'][0]['rows']) == 1


def test_single_lease_calculation_uses_the_stored_snapshot():
    lease = parse_lease_record(PROPERTY_RECORD)
    params = PVCalculationParams(opening_date=date(2023, 1, 1), closing_date=date(2023, 12, 31))

    calculation = LeaseProcessor(params).process_lease(lease)
    result = calculation.to_dict()

    assert result['leaseId'] == "prop-1"
    assert result['journalDate'] == "31/12/2023"
    assert len(result['cashFlows']) == 24
    assert len(result['journal']) == 15
    assert result['balanceSummary']['rows'][0]['openingBalance'] == 226756.00
    assert result['leaseLiabilitySummary']['total'] == pytest.approx(
        result['leaseLiabilitySummary']['shortTerm'] + result['leaseLiabilitySummary']['longTerm'], abs=0.01)


def test_single_lease_without_snapshot_raises():
    lease = parse_lease_record(dict(PROPERTY_RECORD, openingBalances=[]))
    params = PVCalculationParams(opening_date=date(2023, 1, 1), closing_date=date(2023, 12, 31))

    with pytest.raises(MissingOpeningBalanceError):
        LeaseProcessor(params).process_lease(lease)


def test_build_payment_schedule():
    schedule = build_payment_schedule(parse_lease_record(PROPERTY_RECORD))

    assert schedule['committedYears'] == 2
    assert schedule['totalPayments'] == 240000.00
    assert schedule['payments'][0] == {
        'paymentNumber': 1,
        'leaseYear': 1,
        'paymentDate': "2022-05-01",
        'amount': 10000.00,
        'note': "None",
    }
