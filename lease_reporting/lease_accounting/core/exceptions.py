"""
Typed errors raised by the lease reporting engine and its store

Every error carries a machine-readable `code` and the structured data the
HTTP layer needs to build a response.
"""

from datetime import date
from typing import List, Optional


class LeaseReportingError(Exception):
    """Base exception for all lease reporting errors"""

    code: str = "LEASE_REPORTING_ERROR"


class LeaseValidationError(LeaseReportingError, ValueError):
    """Lease record is incomplete or malformed; nothing was computed"""

    code: str = "LEASE_VALIDATION_ERROR"

    def __init__(self, lease_id: Optional[str], errors: List[str]):
        self.lease_id = lease_id
        self.errors = list(errors)
        label = lease_id or "<new lease>"
        super().__init__(f"Invalid lease {label}: " + "; ".join(self.errors))


class MissingOpeningBalanceError(LeaseReportingError):
    """No opening balance snapshot for the reporting window, listing every affected lease"""

    code: str = "MISSING_OPENING_BALANCE"

    def __init__(self, opening_date: date, leases: List[dict]):
        self.opening_date = opening_date
        self.leases = leases
        names = ", ".join(lease.get('title') or lease.get('id', '') for lease in leases)
        super().__init__(
            f"Missing opening balance for {opening_date.isoformat()} on {len(leases)} lease(s): {names}"
        )


class LeaseNotFoundError(LeaseReportingError):

    code: str = "LEASE_NOT_FOUND"

    def __init__(self, lease_id: str):
        self.lease_id = lease_id
        super().__init__(f"Lease not found: {lease_id}")


class DuplicateLeaseError(LeaseReportingError):

    code: str = "DUPLICATE_LEASE"

    def __init__(self, lease_id: str):
        self.lease_id = lease_id
        super().__init__(f"Lease already exists: {lease_id}")


class DuplicateOpeningBalanceError(LeaseReportingError):
    """A snapshot already exists for this calendar date"""

    code: str = "DUPLICATE_OPENING_BALANCE"

    def __init__(self, lease_id: str, opening_date: date):
        self.lease_id = lease_id
        self.opening_date = opening_date
        super().__init__(
            f"Opening balance for {opening_date.isoformat()} already exists on lease {lease_id}"
        )
