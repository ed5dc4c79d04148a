"""
Pytest configuration and fixtures for enrollment tests.
"""

import os
from datetime import date
from unittest.mock import MagicMock

import pytest

# Set test environment before importing enrollment modules
os.environ["ENROLLMENT_ENV"] = "development"
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["CSRF_SECRET"] = "test-csrf-secret"
os.environ["ADDRESS_LINE2_REQUIRED"] = "true"

from enrollment.db.client import set_repository  # noqa: E402
from enrollment.db.memory import InMemoryRecordRepository  # noqa: E402
from enrollment.state import WizardData  # noqa: E402
from enrollment.validation import StepValidationService  # noqa: E402

TODAY = date(2025, 6, 15)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def repository():
    """Fresh in-memory repository, also installed as the process repository."""
    repo = InMemoryRecordRepository()
    set_repository(repo)
    yield repo
    set_repository(None)


@pytest.fixture
def validator(repository):
    return StepValidationService(repository, today=lambda: TODAY)


@pytest.fixture
def identity_fields() -> dict:
    return {
        "name": "Ann",
        "email": "a@x.com",
        "phone": "+15551234567",
        "subscriptionType": "free",
    }


@pytest.fixture
def address_fields() -> dict:
    return {
        "addressLine1": "12 Harbour Street",
        "addressLine2": "Flat 3",
        "city": "Leeds",
        "postalCode": "LS1 4AP",
        "state": "West Yorkshire",
        "country": "GB",
    }


@pytest.fixture
def payment_fields() -> dict:
    return {
        "creditCardNumber": "4111111111111234",
        "expirationDate": "12/27",
        "cvv": "123",
    }


@pytest.fixture
def free_wizard(identity_fields, address_fields) -> WizardData:
    return WizardData.from_dict({**identity_fields, **address_fields})


@pytest.fixture
def premium_wizard(identity_fields, address_fields, payment_fields) -> WizardData:
    return WizardData.from_dict({
        **identity_fields,
        "email": "premium@x.com",
        "subscriptionType": "premium",
        **address_fields,
        **payment_fields,
    })


@pytest.fixture
def mock_supabase():
    """Mock Supabase client for unit tests."""
    mock_client = MagicMock()

    # Mock table operations
    mock_table = MagicMock()
    mock_table.select.return_value = mock_table
    mock_table.eq.return_value = mock_table
    mock_table.limit.return_value = mock_table
    mock_table.execute.return_value = MagicMock(data=[])

    mock_client.table.return_value = mock_table

    return mock_client
