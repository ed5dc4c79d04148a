"""
Repository factory.

One repository per process, chosen by STORAGE_BACKEND.
"""

import logging

from enrollment.config import settings
from enrollment.db.adapter import RecordRepository

logger = logging.getLogger(__name__)

# Singleton repository instance
_repository: RecordRepository | None = None


def get_repository() -> RecordRepository:
    """Get the configured record repository."""
    global _repository

    if _repository is None:
        if settings.storage_backend == "supabase":
            from enrollment.db.supabase_store import SupabaseRecordRepository

            _repository = SupabaseRecordRepository.from_settings(
                settings.supabase_url,
                settings.supabase_service_role_key,
            )
        else:
            from enrollment.db.memory import InMemoryRecordRepository

            _repository = InMemoryRecordRepository()
        logger.info(f"Record storage: {settings.storage_backend}")

    return _repository


def set_repository(repository: RecordRepository | None) -> None:
    """Replace the process repository (None resets to the configured backend)."""
    global _repository
    _repository = repository
