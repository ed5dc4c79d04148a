"""
Record Repository Protocol.

Defines the storage capability the submission and validation services need.
Implementations must:
- enforce email uniqueness in storage, not only via email_exists()
- write user, address and payment as one atomic unit
"""

from typing import Protocol, runtime_checkable

from enrollment.db.models import AddressRecord, PaymentRecord, PersistedRecord, UserRecord


@runtime_checkable
class RecordRepository(Protocol):
    """Durable storage for onboarded users."""

    def email_exists(self, email: str) -> bool:
        """Whether a user with this email is already stored."""
        ...

    def create_user_graph(
        self,
        user: UserRecord,
        address: AddressRecord,
        payment: PaymentRecord | None,
    ) -> PersistedRecord:
        """
        Persist user, address and optional payment atomically.

        Returns the stored records with ids filled in. Raises IntegrityConflict
        when a uniqueness constraint rejects the write; nothing is stored then.
        """
        ...

    def check(self) -> dict[str, int | str]:
        """Row count per onboarding table, for the CLI storage check."""
        ...
