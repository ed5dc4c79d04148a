"""
Tests for the onboarding HTTP endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from enrollment.validation import StepValidationService
from enrollment.web.app import app
from enrollment.web.routes import get_validation_service


@pytest.fixture
def client(repository, today):
    app.dependency_overrides[get_validation_service] = lambda: StepValidationService(
        repository, today=lambda: today
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


def _csrf(client: TestClient) -> str:
    response = client.get("/onboarding/session")
    assert response.status_code == 200
    return response.json()["csrfToken"]


class TestValidateStep:
    """Test POST /onboarding/validate-step."""

    def test_valid_identity(self, client, identity_fields):
        response = client.post("/onboarding/validate-step", json={"step": 0, "wizard": identity_fields})
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_invalid_address(self, client, address_fields):
        address_fields["city"] = "L"
        response = client.post("/onboarding/validate-step", json={"step": 1, "wizard": address_fields})
        assert response.status_code == 422
        assert response.json() == {"errors": {"city": ["City must be at least 2 characters long."]}}

    def test_missing_step_defaults_to_identity(self, client):
        response = client.post("/onboarding/validate-step", json={})
        assert response.status_code == 422
        assert set(response.json()["errors"]) == {"name", "email", "phone", "subscriptionType"}

    def test_unknown_step_is_ok(self, client):
        response = client.post("/onboarding/validate-step", json={"step": 7, "wizard": {}})
        assert response.status_code == 200

    def test_non_numeric_step_is_unknown(self, client):
        response = client.post("/onboarding/validate-step", json={"step": "two", "wizard": {}})
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_null_step_and_wizard_default_to_empty_identity(self, client):
        response = client.post("/onboarding/validate-step", json={"step": None, "wizard": None})
        assert response.status_code == 422
        assert set(response.json()["errors"]) == {"name", "email", "phone", "subscriptionType"}

    def test_non_object_wizard_is_empty_form(self, client):
        response = client.post("/onboarding/validate-step", json={"step": "1", "wizard": ["x"]})
        assert response.status_code == 422
        assert "addressLine1" in response.json()["errors"]

    def test_unknown_subscription(self, client, identity_fields):
        identity_fields["subscriptionType"] = "platinum"
        response = client.post("/onboarding/validate-step", json={"step": 0, "wizard": identity_fields})
        assert response.status_code == 422
        assert response.json()["errors"] == {"subscriptionType": ["Invalid subscription type."]}


class TestCreate:
    """Test POST /onboarding/create."""

    def test_free_end_to_end(self, client, repository, free_wizard):
        token = _csrf(client)
        response = client.post(
            "/onboarding/create",
            json={"wizard": free_wizard.to_dict()},
            headers={"X-CSRF-Token": token},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "ok"
        assert isinstance(body["userId"], int)
        assert body["userId"] not in repository.payments

    def test_missing_token_forbidden(self, client, repository, free_wizard):
        _csrf(client)
        response = client.post("/onboarding/create", json={"wizard": free_wizard.to_dict()})
        assert response.status_code == 403
        assert "error" in response.json()
        assert repository.check()["users"] == 0

    def test_token_from_other_session_forbidden(self, client, repository, free_wizard):
        other = TestClient(app)
        foreign_token = _csrf(other)
        _csrf(client)

        response = client.post(
            "/onboarding/create",
            json={"wizard": free_wizard.to_dict()},
            headers={"X-CSRF-Token": foreign_token},
        )
        assert response.status_code == 403
        assert repository.check()["users"] == 0

    def test_session_token_is_stable(self, client):
        assert _csrf(client) == _csrf(client)

    def test_premium_with_bad_payment_writes_nothing(self, client, repository, premium_wizard):
        premium_wizard.expiration_date = "13/30"
        token = _csrf(client)
        response = client.post(
            "/onboarding/create",
            json={"wizard": premium_wizard.to_dict()},
            headers={"X-CSRF-Token": token},
        )
        assert response.status_code == 422
        assert response.json() == {"errors": {"expirationDate": ["Month must be between 01 and 12."]}}
        assert repository.check() == {"users": 0, "addresses": 0, "payments": 0}

    def test_duplicate_email(self, client, repository, free_wizard):
        token = _csrf(client)
        payload = {"wizard": free_wizard.to_dict()}
        headers = {"X-CSRF-Token": token}

        assert client.post("/onboarding/create", json=payload, headers=headers).status_code == 201
        second = client.post("/onboarding/create", json=payload, headers=headers)

        assert second.status_code == 422
        assert second.json() == {"errors": {"email": ["This email is already in use."]}}
        assert repository.check()["users"] == 1
