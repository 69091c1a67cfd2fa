"""
Lease record parsing and validation
Converts stored/posted records (camelCase, numbers often as strings) into typed
lease terms, collecting every field error before anything is computed
"""

import logging
import math
from datetime import date
from typing import Any, Dict, List, Optional

from lease_reporting.lease_accounting.core.exceptions import LeaseValidationError
from lease_reporting.lease_accounting.core.models import (
    IncludedLeases, IncrementMethod, LeaseTerms, LeaseType, MotorVehicleLease,
    OpeningBalance, PaymentTiming, PropertyLease, PVCalculationParams,
    ReportParams, ReportType,
)
from lease_reporting.lease_accounting.utils.date_utils import full_months_between, normalize_date

logger = logging.getLogger(__name__)

OPENING_BALANCE_FIELDS = {
    'rightToUseAssets': 'right_to_use_assets',
    'accDeprRightToUseAssets': 'acc_depr_right_to_use_assets',
    'leaseLiabilityCurrent': 'lease_liability_current',
    'leaseLiabilityNonCurrent': 'lease_liability_non_current',
    'depreciationExpense': 'depreciation_expense',
    'interestExpenseRent': 'interest_expense_rent',
    'rentExpense': 'rent_expense',
}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    number = float(str(value).replace(',', '').strip()) if isinstance(value, str) else float(value)
    if math.isnan(number) or math.isinf(number):
        raise ValueError(f"Not a finite number: {value!r}")
    return number


def _required_number(record: dict, key: str, errors: List[str]) -> Optional[float]:
    value = record.get(key)
    if _is_blank(value):
        errors.append(f"{key} is required")
        return None
    try:
        return _to_float(value)
    except (TypeError, ValueError):
        errors.append(f"{key} must be numeric (got {value!r})")
        return None


def _optional_number(record: dict, key: str, errors: List[str], default: float = 0.0) -> float:
    value = record.get(key)
    if _is_blank(value):
        return default
    try:
        return _to_float(value)
    except (TypeError, ValueError):
        errors.append(f"{key} must be numeric (got {value!r})")
        return default


def _required_date(record: dict, key: str, errors: List[str]) -> Optional[date]:
    value = record.get(key)
    if _is_blank(value):
        errors.append(f"{key} is required")
        return None
    try:
        return normalize_date(value)
    except ValueError as e:
        errors.append(f"{key}: {e}")
        return None


def _optional_flag(record: dict, key: str, errors: List[str]) -> bool:
    """True/False, or the strings "true"/"false"; blank means False"""
    value = record.get(key)
    if _is_blank(value):
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ('true', 'false'):
        return value.strip().lower() == 'true'
    errors.append(f"{key} must be true or false (got {value!r})")
    return False


def _parse_increment_methods(record: dict, errors: List[str]) -> Dict[int, IncrementMethod]:
    methods: Dict[int, IncrementMethod] = {}
    for raw_year, raw_method in (record.get('incrementMethods') or {}).items():
        try:
            year = int(raw_year)
        except (TypeError, ValueError):
            errors.append(f"incrementMethods: lease year {raw_year!r} is not an integer")
            continue
        if _is_blank(raw_method):
            continue  # Left unspecified in the per-year grid
        try:
            methods[year] = IncrementMethod(raw_method)
        except ValueError:
            errors.append(f"incrementMethods[{year}]: unknown method {raw_method!r}")
    return methods


def _parse_override_amounts(record: dict, errors: List[str]) -> Dict[int, float]:
    amounts: Dict[int, float] = {}
    for raw_year, raw_amount in (record.get('overrideAmounts') or {}).items():
        if _is_blank(raw_amount):
            continue
        try:
            amounts[int(raw_year)] = _to_float(raw_amount)
        except (TypeError, ValueError):
            errors.append(f"overrideAmounts[{raw_year}] must be numeric (got {raw_amount!r})")
    return amounts


def parse_opening_balance(record: dict) -> OpeningBalance:
    """
    Parse one opening balance snapshot
    Blank figures are zero; figures are ignored for a new lease or extension
    """
    errors: List[str] = []
    opening_date = _required_date(record, 'openingDate', errors)
    values = {
        attr: _optional_number(record, key, errors)
        for key, attr in OPENING_BALANCE_FIELDS.items()
    }
    # Motor vehicle snapshots store the expense line as vehicleExpense
    if _is_blank(record.get('rentExpense')) and not _is_blank(record.get('vehicleExpense')):
        values['rent_expense'] = _optional_number(record, 'vehicleExpense', errors)
    is_extension = _optional_flag(record, 'isNewLeaseExtension', errors)

    if errors:
        raise LeaseValidationError(None, errors)

    balance = OpeningBalance(
        opening_date=opening_date,
        is_new_lease_extension=is_extension,
        id=str(record.get('id') or ''),
        **values,
    )
    return balance.effective() if is_extension else balance


def calculate_committed_years(lease: LeaseTerms) -> int:
    """
    Committed lease term in whole years, options included

    Counts whole months from start to end, plus one more when the end day of
    month runs past the start day, then rounds up to years.
    2022-05-15 -> 2024-05-10 is 23 months, so 2 years.
    """
    if lease.start_date is None or lease.expiry_date is None:
        return 0
    start, end = lease.start_date, lease.end_date
    if end <= start:
        return 0
    total_months = full_months_between(start, end)
    if end.day > start.day:
        total_months += 1
    return math.ceil(total_months / 12)


def validate_lease(lease: LeaseTerms, require_all_years: bool = False) -> None:
    """
    Check a constructed lease before any schedule is generated

    require_all_years: a property lease must record a review method for every
        committed year after the first (saved records); calculations accept
        unspecified years as no change

    Raises:
        LeaseValidationError listing every problem found
    """
    errors: List[str] = []
    if lease.start_date is None:
        field_name = 'commencementDate' if lease.lease_type == LeaseType.PROPERTY else 'deliveryDate'
        errors.append(f"{field_name} is required")
    if lease.expiry_date is None:
        errors.append("expiryDate is required")
    if lease.start_date is not None and lease.expiry_date is not None and lease.expiry_date < lease.start_date:
        errors.append("expiryDate is before the lease start date")
    if lease.annual_rent is None or lease.annual_rent < 0:
        errors.append("annualRent must be zero or positive")
    if lease.borrowing_rate is None or lease.borrowing_rate < 0:
        errors.append("borrowingRate must be zero or positive")

    if isinstance(lease, PropertyLease):
        if lease.options_years < 0:
            errors.append("options must be zero or a positive number of years")
        elif lease.expiry_date is not None:
            try:
                lease.end_date
            except (ValueError, OverflowError):
                errors.append(f"options of {lease.options_years} years runs past the supported date range")
        for year, method in lease.increment_methods.items():
            if year < 1:
                errors.append(f"incrementMethods: lease year {year} must be 1 or later")
            if method == IncrementMethod.MARKET and year not in lease.override_amounts:
                errors.append(f"overrideAmounts[{year}] is required for a Market review")
        if require_all_years and not errors:
            for year in range(2, calculate_committed_years(lease) + 1):
                if year not in lease.increment_methods:
                    errors.append(f"incrementMethods[{year}] is required")

    seen = set()
    for balance in lease.opening_balances:
        if balance.opening_date in seen:
            errors.append(f"more than one opening balance for {balance.opening_date.isoformat()}")
        seen.add(balance.opening_date)

    if errors:
        logger.warning(f"⚠️ Lease {lease.id} failed validation: {errors}")
        raise LeaseValidationError(lease.id, errors)


def parse_lease_record(record: dict, require_all_years: bool = False) -> LeaseTerms:
    """
    Build typed lease terms from a lease record

    Args:
        require_all_years: Also require a review method for every committed
            year after the first (used when saving a lease)
    Raises:
        LeaseValidationError if any required field is missing or malformed
    """
    errors: List[str] = []
    lease_id = str(record.get('id') or '') or None
    lease_type = record.get('type', LeaseType.PROPERTY.value)
    try:
        lease_type = LeaseType(lease_type)
    except ValueError:
        raise LeaseValidationError(lease_id, [f"type must be Property or Motor Vehicle (got {lease_type!r})"])

    base: Dict[str, Any] = {
        'id': lease_id or '',
        'lease_id': str(record.get('leaseId') or ''),
        'lessor': str(record.get('lessor') or ''),
        'entity': str(record.get('entity') or ''),
        'branch': record.get('branch') or None,
        'expiry_date': _required_date(record, 'expiryDate', errors),
        'annual_rent': _required_number(record, 'annualRent', errors),
        'borrowing_rate': _required_number(record, 'borrowingRate', errors),
    }

    balances: List[OpeningBalance] = []
    for balance_record in record.get('openingBalances') or []:
        try:
            balances.append(parse_opening_balance(balance_record))
        except LeaseValidationError as e:
            errors.extend(f"openingBalances: {error}" for error in e.errors)

    if lease_type == LeaseType.PROPERTY:
        methods = _parse_increment_methods(record, errors)
        overrides = _parse_override_amounts(record, errors)
        uses = set(methods.values())
        fixed_rate = (_required_number(record, 'fixedIncrementRate', errors)
                      if IncrementMethod.FIXED in uses
                      else _optional_number(record, 'fixedIncrementRate', errors))
        cpi_rate = (_required_number(record, 'rbaCpiRate', errors)
                    if IncrementMethod.CPI in uses
                    else _optional_number(record, 'rbaCpiRate', errors))
        options = _optional_number(record, 'options', errors)
        if options != int(options):
            errors.append(f"options must be a whole number of years (got {record.get('options')!r})")
        commencement = _required_date(record, 'commencementDate', errors)
        if errors:
            raise LeaseValidationError(lease_id, errors)
        lease = PropertyLease(
            **base,
            opening_balances=balances,
            commencement_date=commencement,
            options_years=int(options),
            fixed_increment_rate=fixed_rate,
            rba_cpi_rate=cpi_rate,
            property_address=str(record.get('propertyAddress') or ''),
            increment_methods=methods,
            override_amounts=overrides,
        )
    else:
        delivery = _required_date(record, 'deliveryDate', errors)
        if errors:
            raise LeaseValidationError(lease_id, errors)
        lease = MotorVehicleLease(
            **base,
            opening_balances=balances,
            delivery_date=delivery,
            description=str(record.get('description') or ''),
            vin_serial_no=str(record.get('vinSerialNo') or ''),
            rego_no=str(record.get('regoNo') or ''),
            engine_number=str(record.get('engineNumber') or ''),
            vehicle_type=str(record.get('vehicleType') or ''),
        )

    validate_lease(lease, require_all_years=require_all_years)
    return lease


def _parse_enum(enum_cls, value, field_name: str, errors: List[str], default=None):
    if _is_blank(value):
        if default is None:
            errors.append(f"{field_name} is required")
        return default
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        errors.append(f"{field_name} must be one of {choices} (got {value!r})")
        return default


def _parse_window(data: dict, errors: List[str]):
    opening_date = _required_date(data, 'openingDate', errors)
    closing_date = _required_date(data, 'closingDate', errors)
    if opening_date and closing_date and closing_date < opening_date:
        errors.append("closingDate is before openingDate")
    return opening_date, closing_date


def parse_pv_params(data: dict, default_timing: str = PaymentTiming.BEGINNING.value) -> PVCalculationParams:
    """Reporting parameters for a single-lease PV calculation"""
    errors: List[str] = []
    opening_date, closing_date = _parse_window(data, errors)
    timing = _parse_enum(PaymentTiming, data.get('paymentTiming'), 'paymentTiming', errors,
                         default=PaymentTiming(default_timing))
    allocation = _optional_number(data, 'allocationToLeaseComponent', errors, default=1.0)
    if not 0 <= allocation <= 1:
        errors.append(f"allocationToLeaseComponent must be between 0 and 1 (got {allocation})")

    opening_balance = None
    if data.get('openingBalance'):
        balance_record = dict(data['openingBalance'])
        balance_record.setdefault('openingDate', data.get('openingDate'))
        try:
            opening_balance = parse_opening_balance(balance_record)
        except LeaseValidationError as e:
            errors.extend(f"openingBalance: {error}" for error in e.errors)

    other = _optional_number(data, 'other', errors)
    parking = _optional_number(data, 'parking', errors)

    if errors:
        raise LeaseValidationError(None, errors)

    return PVCalculationParams(
        opening_date=opening_date,
        closing_date=closing_date,
        payment_timing=timing,
        allocation_to_lease_component=allocation,
        other=other,
        parking=parking,
        opening_balance=opening_balance,
    )


def parse_report_params(data: dict, default_timing: str = PaymentTiming.BEGINNING.value) -> ReportParams:
    """Reporting parameters for a multi-lease Summary or Detail report"""
    errors: List[str] = []
    opening_date, closing_date = _parse_window(data, errors)
    report_type = _parse_enum(ReportType, data.get('reportType'), 'reportType', errors,
                              default=ReportType.SUMMARY)
    included = _parse_enum(IncludedLeases, data.get('includedLeases'), 'includedLeases', errors,
                           default=IncludedLeases.ALL)
    timing = _parse_enum(PaymentTiming, data.get('paymentTiming'), 'paymentTiming', errors,
                         default=PaymentTiming(default_timing))

    if errors:
        raise LeaseValidationError(None, errors)

    return ReportParams(
        report_type=report_type,
        included_leases=included,
        opening_date=opening_date,
        closing_date=closing_date,
        payment_timing=timing,
    )
