"""
Enrollment - Record storage.

Repositories persist the finished user/address/payment graph. The in-memory
repository backs development and tests; Supabase backs deployments.
"""

from enrollment.db.adapter import RecordRepository
from enrollment.db.client import get_repository
from enrollment.db.models import AddressRecord, PaymentRecord, PersistedRecord, UserRecord

__all__ = [
    "RecordRepository",
    "get_repository",
    "UserRecord",
    "AddressRecord",
    "PaymentRecord",
    "PersistedRecord",
]
