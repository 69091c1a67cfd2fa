"""
JSON file store for lease records
A flat array of lease records keyed by id, opening balances nested per lease
"""
import json
import logging
import os
import threading
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, List

from lease_reporting.lease_accounting.core.exceptions import (
    DuplicateLeaseError, DuplicateOpeningBalanceError, LeaseNotFoundError,
)
from lease_reporting.lease_accounting.core.models import LeaseTerms
from lease_reporting.lease_accounting.core.validation import (
    parse_lease_record, parse_opening_balance,
)
from lease_reporting.lease_accounting.utils.date_utils import normalize_date

logger = logging.getLogger(__name__)

_write_lock = threading.Lock()


class LeaseStore:
    """Load/save lease records; every write rewrites the whole file"""

    def __init__(self, path):
        self.path = Path(path)

    def load_records(self) -> List[Dict]:
        if not self.path.exists():
            return []
        with open(self.path, 'r', encoding='utf-8') as f:
            records = json.load(f)
        if not isinstance(records, list):
            raise ValueError(f"{self.path} does not contain a list of leases")
        return records

    def save_records(self, records: List[Dict]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(records, f, indent=2)
        os.replace(tmp_path, self.path)

    @contextmanager
    def transaction(self):
        """Context manager for a read-modify-write of the store"""
        with _write_lock:
            records = self.load_records()
            yield records
            self.save_records(records)

    def _find(self, records: List[Dict], lease_id: str) -> Dict:
        for record in records:
            if record.get('id') == lease_id:
                return record
        raise LeaseNotFoundError(lease_id)

    def get_record(self, lease_id: str) -> Dict:
        return self._find(self.load_records(), lease_id)

    def get_lease(self, lease_id: str) -> LeaseTerms:
        return parse_lease_record(self.get_record(lease_id))

    def load_leases(self) -> List[LeaseTerms]:
        """All stored leases as typed terms; any invalid record raises LeaseValidationError"""
        return [parse_lease_record(record) for record in self.load_records()]

    def add_lease(self, record: Dict) -> Dict:
        record = dict(record)
        record['id'] = str(record.get('id') or uuid.uuid4())
        record.setdefault('openingBalances', [])
        parse_lease_record(record, require_all_years=True)

        with self.transaction() as records:
            if any(existing.get('id') == record['id'] for existing in records):
                raise DuplicateLeaseError(record['id'])
            records.append(record)

        logger.info(f"📝 Lease {record['id']} added")
        return record

    def update_lease(self, lease_id: str, record: Dict) -> Dict:
        """Replace a lease's terms; opening balances are kept unless supplied"""
        with self.transaction() as records:
            existing = self._find(records, lease_id)
            updated = dict(record)
            updated['id'] = lease_id
            updated.setdefault('openingBalances', existing.get('openingBalances', []))
            parse_lease_record(updated, require_all_years=True)
            records[records.index(existing)] = updated

        logger.info(f"📝 Lease {lease_id} updated")
        return updated

    def delete_lease(self, lease_id: str):
        with self.transaction() as records:
            records.remove(self._find(records, lease_id))
        logger.info(f"📝 Lease {lease_id} deleted")

    def add_opening_balance(self, lease_id: str, balance_record: Dict) -> Dict:
        """
        Add an opening balance snapshot to a lease

        Raises:
            DuplicateOpeningBalanceError if the lease already has one for that date
        """
        balance = parse_opening_balance(balance_record)
        stored = balance.to_dict()
        stored['id'] = balance.id or str(uuid.uuid4())

        with self.transaction() as records:
            record = self._find(records, lease_id)
            balances = record.setdefault('openingBalances', [])
            if any(normalize_date(b['openingDate']) == balance.opening_date for b in balances):
                raise DuplicateOpeningBalanceError(lease_id, balance.opening_date)
            balances.append(stored)

        logger.info(f"📥 Opening balance {balance.opening_date} added to lease {lease_id}")
        return stored

    def delete_opening_balance(self, lease_id: str, balance_id: str):
        with self.transaction() as records:
            record = self._find(records, lease_id)
            balances = record.get('openingBalances', [])
            remaining = [b for b in balances if b.get('id') != balance_id]
            if len(remaining) == len(balances):
                raise LeaseNotFoundError(f"{lease_id}/openingBalances/{balance_id}")
            record['openingBalances'] = remaining
