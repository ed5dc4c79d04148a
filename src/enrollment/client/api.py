"""
Enrollment HTTP client.

Thin async wrapper over the onboarding endpoints. Maps responses onto the
error taxonomy: 422 -> validation errors, 403 -> AuthorizationFailure,
anything else that is not a success -> TransportFailure.
"""

import logging

import httpx

from enrollment.errors import AuthorizationFailure, FieldValidationError, TransportFailure
from enrollment.rules import ValidationResult
from enrollment.state import WizardData, WizardField

logger = logging.getLogger(__name__)

FIELD_NAMES = frozenset(f.value for f in WizardField)


class EnrollmentClient:
    """Client for the /onboarding API."""

    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    @classmethod
    def connect(cls, base_url: str, timeout: float = 10.0, **kwargs) -> "EnrollmentClient":
        return cls(httpx.AsyncClient(base_url=base_url, timeout=timeout, **kwargs))

    async def aclose(self) -> None:
        await self.http.aclose()

    async def _post(self, path: str, payload: dict, headers: dict | None = None) -> httpx.Response:
        try:
            return await self.http.post(path, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Request to {path} failed: {e}")
            raise TransportFailure(str(e)) from e

    @staticmethod
    def _errors(response: httpx.Response) -> ValidationResult:
        """Parse a 422 body. Errors for fields this client does not know are dropped."""
        try:
            errors = response.json()["errors"]
            known = {name: messages for name, messages in errors.items() if name in FIELD_NAMES}
            result = ValidationResult.from_dict(known)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise TransportFailure(f"Malformed validation response: {e}") from e

        unknown = sorted(set(errors) - set(known))
        if unknown:
            logger.warning(f"Ignoring validation errors for unknown fields: {', '.join(unknown)}")
        if result.is_valid:
            raise TransportFailure("Validation response named no known field")
        return result

    async def start_session(self) -> str:
        """Open a server session; returns the CSRF token bound to it."""
        try:
            response = await self.http.get("/onboarding/session")
            response.raise_for_status()
            return response.json()["csrfToken"]
        except (httpx.HTTPError, ValueError, KeyError) as e:
            logger.error(f"Could not start onboarding session: {e}")
            raise TransportFailure(str(e)) from e

    async def validate_step(self, step: int, data: WizardData) -> ValidationResult:
        """Validate one step remotely. An empty result means the step passed."""
        response = await self._post(
            "/onboarding/validate-step",
            {"step": step, "wizard": data.to_dict()},
        )
        if response.status_code == 422:
            return self._errors(response)
        if response.is_success:
            return ValidationResult()
        raise TransportFailure(f"Unexpected status {response.status_code} from validate-step")

    async def create(self, data: WizardData, csrf_token: str) -> int:
        """
        Submit the finished wizard.

        Returns the new user id.

        Raises:
            FieldValidationError: server rejected one or more fields
            AuthorizationFailure: CSRF token rejected
            TransportFailure: request did not complete
        """
        response = await self._post(
            "/onboarding/create",
            {"wizard": data.to_dict()},
            headers={"X-CSRF-Token": csrf_token},
        )
        if response.status_code == 201:
            try:
                return int(response.json()["userId"])
            except (ValueError, KeyError, TypeError) as e:
                raise TransportFailure(f"Malformed create response: {e}") from e
        if response.status_code == 422:
            raise FieldValidationError(self._errors(response))
        if response.status_code == 403:
            raise AuthorizationFailure("Invalid CSRF token")
        raise TransportFailure(f"Unexpected status {response.status_code} from create")
