"""
Data models for lease reporting
Lease terms, opening balance snapshots, schedule rows and reporting parameters
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, List, Dict, Any

from lease_reporting.lease_accounting.utils.date_utils import (
    add_years, format_date_dmy, format_date_short,
)
from lease_reporting.lease_accounting.utils.finance import round_half_up


class IncrementMethod(str, Enum):
    """Rent review rule applied at a lease-year boundary"""
    FIXED = "Fixed"
    CPI = "CPI"
    MARKET = "Market"
    NONE = "None"


class PaymentTiming(str, Enum):
    BEGINNING = "Beginning"
    END = "End"


class LeaseType(str, Enum):
    PROPERTY = "Property"
    MOTOR_VEHICLE = "Motor Vehicle"


class ReportType(str, Enum):
    SUMMARY = "Summary"
    DETAIL = "Detail"


class IncludedLeases(str, Enum):
    PROPERTY = "Property"
    MOTOR = "Motor"
    ALL = "All"


def _money(value: Optional[float]) -> Optional[float]:
    return None if value is None else round_half_up(value)


@dataclass
class OpeningBalance:
    """Account balances as at one calendar date - one snapshot per date per lease"""
    opening_date: date
    is_new_lease_extension: bool = False
    right_to_use_assets: float = 0.0
    acc_depr_right_to_use_assets: float = 0.0
    lease_liability_current: float = 0.0
    lease_liability_non_current: float = 0.0
    depreciation_expense: float = 0.0
    interest_expense_rent: float = 0.0
    rent_expense: float = 0.0  # Vehicle expense for motor vehicle leases
    id: str = ""

    def effective(self) -> 'OpeningBalance':
        """Balances to carry into a report; a new lease or extension starts from zero"""
        if not self.is_new_lease_extension:
            return self
        return OpeningBalance(
            opening_date=self.opening_date,
            is_new_lease_extension=True,
            id=self.id,
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'openingDate': self.opening_date.isoformat(),
            'isNewLeaseExtension': self.is_new_lease_extension,
            'rightToUseAssets': self.right_to_use_assets,
            'accDeprRightToUseAssets': self.acc_depr_right_to_use_assets,
            'leaseLiabilityCurrent': self.lease_liability_current,
            'leaseLiabilityNonCurrent': self.lease_liability_non_current,
            'depreciationExpense': self.depreciation_expense,
            'interestExpenseRent': self.interest_expense_rent,
            'rentExpense': self.rent_expense,
        }


@dataclass
class LeaseTerms(ABC):
    """Contractual terms shared by every lease variant"""
    id: str
    lessor: str
    entity: str
    expiry_date: date
    annual_rent: float
    borrowing_rate: float  # Annual, in percent
    lease_id: str = ""
    branch: Optional[str] = None
    opening_balances: List[OpeningBalance] = field(default_factory=list)

    @property
    @abstractmethod
    def lease_type(self) -> LeaseType:
        ...

    @property
    @abstractmethod
    def start_date(self) -> date:
        ...

    @property
    def end_date(self) -> date:
        return self.expiry_date

    @property
    @abstractmethod
    def title(self) -> str:
        ...

    def find_opening_balance(self, opening_date: date) -> Optional[OpeningBalance]:
        """Snapshot recorded for the given calendar date, if any"""
        for balance in self.opening_balances:
            if balance.opening_date == opening_date:
                return balance
        return None

    def _base_dict(self) -> dict:
        return {
            'id': self.id,
            'leaseId': self.lease_id,
            'type': self.lease_type.value,
            'lessor': self.lessor,
            'entity': self.entity,
            'branch': self.branch,
            'expiryDate': self.expiry_date.isoformat(),
            'annualRent': self.annual_rent,
            'borrowingRate': self.borrowing_rate,
            'openingBalances': [b.to_dict() for b in self.opening_balances],
        }


@dataclass
class PropertyLease(LeaseTerms):
    commencement_date: Optional[date] = None
    options_years: int = 0
    fixed_increment_rate: float = 0.0
    rba_cpi_rate: float = 0.0
    property_address: str = ""
    increment_methods: Dict[int, IncrementMethod] = field(default_factory=dict)
    override_amounts: Dict[int, float] = field(default_factory=dict)

    @property
    def lease_type(self) -> LeaseType:
        return LeaseType.PROPERTY

    @property
    def start_date(self) -> date:
        return self.commencement_date

    @property
    def end_date(self) -> date:
        return add_years(self.expiry_date, self.options_years)

    @property
    def title(self) -> str:
        return f"{self.lessor} {self.property_address}".strip()

    def to_dict(self) -> dict:
        result = self._base_dict()
        result.update({
            'commencementDate': self.commencement_date.isoformat() if self.commencement_date else None,
            'options': self.options_years,
            'fixedIncrementRate': self.fixed_increment_rate,
            'rbaCpiRate': self.rba_cpi_rate,
            'propertyAddress': self.property_address,
            'incrementMethods': {str(year): method.value for year, method in self.increment_methods.items()},
            'overrideAmounts': {str(year): amount for year, amount in self.override_amounts.items()},
        })
        return result


@dataclass
class MotorVehicleLease(LeaseTerms):
    delivery_date: Optional[date] = None
    description: str = ""
    vin_serial_no: str = ""
    rego_no: str = ""
    engine_number: str = ""
    vehicle_type: str = ""

    @property
    def lease_type(self) -> LeaseType:
        return LeaseType.MOTOR_VEHICLE

    @property
    def start_date(self) -> date:
        return self.delivery_date

    @property
    def title(self) -> str:
        return f"{self.lessor} {self.rego_no}".strip()

    def to_dict(self) -> dict:
        result = self._base_dict()
        result.update({
            'deliveryDate': self.delivery_date.isoformat() if self.delivery_date else None,
            'description': self.description,
            'vinSerialNo': self.vin_serial_no,
            'regoNo': self.rego_no,
            'engineNumber': self.engine_number,
            'vehicleType': self.vehicle_type,
        })
        return result


@dataclass
class PaymentRow:
    """Single monthly payment in the lease payment schedule"""
    sequence_number: int
    lease_year: int
    payment_date: date
    amount: float
    note: str = ""

    def to_dict(self) -> dict:
        return {
            'paymentNumber': self.sequence_number,
            'leaseYear': self.lease_year,
            'paymentDate': self.payment_date.isoformat(),
            'amount': _money(self.amount),
            'note': self.note,
        }


@dataclass
class CashFlowRow:
    payment_date: date
    base_rent: float
    other: float = 0.0
    parking: float = 0.0
    total_cash_flows: float = 0.0
    lease_component: float = 0.0

    @property
    def period(self) -> str:
        return format_date_short(self.payment_date)

    def to_dict(self) -> dict:
        return {
            'period': self.period,
            'paymentDate': self.payment_date.isoformat(),
            'baseRent': _money(self.base_rent),
            'other': _money(self.other),
            'parking': _money(self.parking),
            'totalCashFlows': _money(self.total_cash_flows),
            'leaseComponent': _money(self.lease_component),
        }


@dataclass
class RightOfUseAssetRow:
    payment_date: date
    period_number: int
    asset_beginning: float
    depreciation: float
    asset_ending: float

    @property
    def period(self) -> str:
        return format_date_short(self.payment_date)

    def to_dict(self) -> dict:
        return {
            'period': self.period,
            'paymentDate': self.payment_date.isoformat(),
            'periodNumber': self.period_number,
            'assetBeginning': _money(self.asset_beginning),
            'depreciation': _money(self.depreciation),
            'assetEnding': _money(self.asset_ending),
        }


@dataclass
class LeaseLiabilityRow:
    payment_date: date
    liability_beginning: float
    payment: float  # Negative - a reduction of the liability
    interest_expense: float
    liability_ending: float

    @property
    def period(self) -> str:
        return format_date_short(self.payment_date)

    def to_dict(self) -> dict:
        return {
            'period': self.period,
            'paymentDate': self.payment_date.isoformat(),
            'liabilityBeginning': _money(self.liability_beginning),
            'payment': _money(self.payment),
            'interestExpense': _money(self.interest_expense),
            'liabilityEnding': _money(self.liability_ending),
        }


@dataclass
class LeaseLiabilitySummary:
    short_term: float
    long_term: float

    @property
    def total(self) -> float:
        return self.short_term + self.long_term

    def to_dict(self) -> dict:
        return {
            'shortTerm': _money(self.short_term),
            'longTerm': _money(self.long_term),
            'total': _money(self.total),
        }


@dataclass
class LeasePaymentsDueRow:
    """One maturity bucket of the lease payments due table"""
    label: str
    lease_payments: float
    interest: float

    @property
    def npv(self) -> float:
        return self.lease_payments - self.interest

    def to_dict(self) -> dict:
        return {
            'period': self.label,
            'leasePayments': _money(self.lease_payments),
            'interest': _money(self.interest),
            'npv': _money(self.npv),
        }


@dataclass
class JournalRow:
    """Fixed-position journal line; blank rows carry no code and no amount"""
    account_code: str = ""
    label: str = ""
    amount: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            'accountCode': self.account_code,
            'label': self.label,
            'amount': _money(self.amount),
        }


@dataclass
class BalanceSummaryRow:
    account_code: str
    label: str
    opening_balance: float
    movement: float
    closing_balance: float

    def to_dict(self) -> dict:
        return {
            'accountCode': self.account_code,
            'accountName': self.label,
            'openingBalance': self.opening_balance,
            'movement': self.movement,
            'closingBalance': self.closing_balance,
        }


@dataclass
class BalanceSummary:
    """Header plus the seven account lines"""
    opening_header: str
    movement_header: str
    closing_header: str
    rows: List[BalanceSummaryRow] = field(default_factory=list)

    def to_rows(self) -> List[List[Any]]:
        """Eight fixed-position rows as they appear on the workbook"""
        table: List[List[Any]] = [['', '', self.opening_header, self.movement_header, self.closing_header]]
        for row in self.rows:
            table.append([row.account_code, row.label, row.opening_balance,
                          row.movement, row.closing_balance])
        return table

    def to_dict(self) -> dict:
        return {
            'headers': [self.opening_header, self.movement_header, self.closing_header],
            'rows': [row.to_dict() for row in self.rows],
        }


@dataclass
class PVCalculationParams:
    """Reporting parameters for a single-lease PV calculation export"""
    opening_date: date
    closing_date: date
    payment_timing: PaymentTiming = PaymentTiming.BEGINNING
    allocation_to_lease_component: float = 1.0
    other: float = 0.0
    parking: float = 0.0
    # Manually entered figures; looked up on the lease when absent
    opening_balance: Optional[OpeningBalance] = None


@dataclass
class ReportParams:
    report_type: ReportType
    included_leases: IncludedLeases
    opening_date: date
    closing_date: date
    payment_timing: PaymentTiming = PaymentTiming.BEGINNING

    def includes(self, lease: LeaseTerms) -> bool:
        if self.included_leases == IncludedLeases.ALL:
            return True
        if self.included_leases == IncludedLeases.PROPERTY:
            return lease.lease_type == LeaseType.PROPERTY
        return lease.lease_type == LeaseType.MOTOR_VEHICLE


@dataclass
class LeaseCalculation:
    """Everything derived for one lease over one reporting window"""
    lease: LeaseTerms
    opening_date: date
    closing_date: date
    payment_rows: List[PaymentRow]
    cash_flow_rows: List[CashFlowRow]
    present_value: float
    right_of_use_rows: List[RightOfUseAssetRow]
    liability_rows: List[LeaseLiabilityRow]
    liability_summary: LeaseLiabilitySummary
    pv_interest_accretion: float
    payments_due: List[LeasePaymentsDueRow]
    journal_rows: List[JournalRow]
    balance_summary: BalanceSummary

    def to_dict(self) -> dict:
        return {
            'leaseId': self.lease.id,
            'title': self.lease.title,
            'leaseType': self.lease.lease_type.value,
            'openingDate': self.opening_date.isoformat(),
            'closingDate': self.closing_date.isoformat(),
            'journalDate': format_date_dmy(self.closing_date),
            'presentValue': _money(self.present_value),
            'cashFlows': [row.to_dict() for row in self.cash_flow_rows],
            'rightOfUseAsset': [row.to_dict() for row in self.right_of_use_rows],
            'leaseLiability': [row.to_dict() for row in self.liability_rows],
            'leaseLiabilitySummary': self.liability_summary.to_dict(),
            'pvInterestAccretion': _money(self.pv_interest_accretion),
            'leasePaymentsDue': [row.to_dict() for row in self.payments_due],
            'journal': [row.to_dict() for row in self.journal_rows],
            'balanceSummary': self.balance_summary.to_dict(),
        }
