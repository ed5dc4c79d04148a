"""
Supabase record repository.

The user graph is written through the create_onboarded_user Postgres function
(see migrations/001_onboarding_tables.sql). A function call runs in a single
transaction, so user, address and payment commit together or not at all.
The users.email unique constraint is the authority on duplicates.
"""

import logging
from dataclasses import replace

from postgrest.exceptions import APIError
from supabase import Client, create_client

from enrollment.db.models import AddressRecord, PaymentRecord, PersistedRecord, UserRecord
from enrollment.errors import IntegrityConflict
from enrollment.state import WizardField

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


class SupabaseRecordRepository:
    """Record repository backed by Supabase (PostgREST)."""

    def __init__(self, client: Client):
        self.client = client

    @classmethod
    def from_settings(cls, url: str | None, key: str | None) -> "SupabaseRecordRepository":
        if not url or not key:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required for the supabase backend")
        return cls(create_client(url, key))

    def email_exists(self, email: str) -> bool:
        result = self.client.table("users").select("id").eq("email", email).limit(1).execute()
        return bool(result.data)

    def create_user_graph(
        self,
        user: UserRecord,
        address: AddressRecord,
        payment: PaymentRecord | None,
    ) -> PersistedRecord:
        params = {
            "p_user": user.to_row(),
            "p_address": address.to_row(),
            "p_payment": payment.to_row() if payment else None,
        }
        try:
            result = self.client.rpc("create_onboarded_user", params).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                logger.warning("Unique constraint rejected onboarding insert")
                raise IntegrityConflict(WizardField.EMAIL, "This email is already in use.") from e
            raise

        user_id = int(result.data)
        return PersistedRecord(
            user=replace(user, id=user_id),
            address=replace(address, user_id=user_id),
            payment=replace(payment, user_id=user_id) if payment else None,
        )

    def check(self) -> dict[str, int | str]:
        """Row counts for the onboarding tables (used by the CLI db command)."""
        status: dict[str, int | str] = {}
        for table in ("users", "addresses", "payments"):
            result = self.client.table(table).select("*", count="exact").limit(0).execute()
            status[table] = result.count if result.count is not None else "?"
        return status
