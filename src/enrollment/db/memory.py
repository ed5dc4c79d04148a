"""
In-memory record repository.

Used in development and tests. Uniqueness is checked under the same lock as
the write, so two concurrent submissions with one email cannot both succeed.
"""

import logging
import threading
from dataclasses import replace
from itertools import count

from enrollment.db.models import AddressRecord, PaymentRecord, PersistedRecord, UserRecord
from enrollment.errors import IntegrityConflict
from enrollment.state import WizardField

logger = logging.getLogger(__name__)


class InMemoryRecordRepository:
    """Thread-safe dict-backed store with a unique email index."""

    def __init__(self):
        self._lock = threading.Lock()
        self._ids = count(1)
        self.users: dict[int, UserRecord] = {}
        self.addresses: dict[int, AddressRecord] = {}
        self.payments: dict[int, PaymentRecord] = {}
        self._emails: dict[str, int] = {}

    def email_exists(self, email: str) -> bool:
        with self._lock:
            return email in self._emails

    def create_user_graph(
        self,
        user: UserRecord,
        address: AddressRecord,
        payment: PaymentRecord | None,
    ) -> PersistedRecord:
        with self._lock:
            if user.email in self._emails:
                raise IntegrityConflict(WizardField.EMAIL, "This email is already in use.")

            # Stage everything first; only publish once every row is built.
            user_id = next(self._ids)
            stored_user = replace(user, id=user_id)
            stored_address = replace(address, user_id=user_id)
            stored_payment = replace(payment, user_id=user_id) if payment else None

            self.users[user_id] = stored_user
            self.addresses[user_id] = stored_address
            if stored_payment:
                self.payments[user_id] = stored_payment
            self._emails[user.email] = user_id

        logger.debug(f"Stored user {user_id} (payment={stored_payment is not None})")
        return PersistedRecord(user=stored_user, address=stored_address, payment=stored_payment)

    def check(self) -> dict[str, int | str]:
        """Row counts per entity."""
        with self._lock:
            return {
                "users": len(self.users),
                "addresses": len(self.addresses),
                "payments": len(self.payments),
            }
