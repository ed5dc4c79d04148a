"""
Onboarding API Endpoints.

- GET  /onboarding/session        issue the session cookie + CSRF token
- POST /onboarding/validate-step  validate one wizard step
- POST /onboarding/create         validate everything and persist
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Header, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

from enrollment.config import get_csrf_secret, settings
from enrollment.db.client import get_repository
from enrollment.errors import FieldValidationError
from enrollment.state import WizardData
from enrollment.submission import SubmissionService
from enrollment.validation import StepValidationService
from enrollment.web.csrf import is_token_valid, new_session_id, token_for

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/onboarding", tags=["onboarding"])


# =============================================================================
# Request Models
# =============================================================================


UNKNOWN_STEP = -1


class CreateRequest(BaseModel):
    """Final submission of the accumulated wizard data."""
    wizard: dict[str, Any] = Field(default_factory=dict)

    @field_validator("wizard", mode="before")
    @classmethod
    def wizard_or_empty(cls, v: Any) -> dict[str, Any]:
        """A null or non-object wizard is treated as an empty form."""
        return v if isinstance(v, dict) else {}


class ValidateStepRequest(CreateRequest):
    """One step's worth of validation. Missing values default like an empty form."""
    step: int = 0

    @field_validator("step", mode="before")
    @classmethod
    def lenient_step(cls, v: Any) -> int:
        """Null means the first step; anything that is not a step number is unknown."""
        if v is None:
            return 0
        try:
            return int(v)
        except (TypeError, ValueError):
            return UNKNOWN_STEP


# =============================================================================
# Dependencies
# =============================================================================


def get_validation_service() -> StepValidationService:
    return StepValidationService(
        get_repository(),
        address_line2_required=settings.address_line2_required,
    )


def get_submission_service(
    validator: StepValidationService = Depends(get_validation_service),
) -> SubmissionService:
    return SubmissionService(get_repository(), validator)


# =============================================================================
# Endpoints
# =============================================================================


@router.get("/session")
def start_session(request: Request, response: Response) -> dict:
    """Issue (or reuse) the session cookie and return its CSRF token."""
    cookie_name = settings.session_cookie_name
    session_id = request.cookies.get(cookie_name)
    if not session_id:
        session_id = new_session_id()
        response.set_cookie(
            cookie_name,
            session_id,
            httponly=True,
            samesite="strict",
            secure=settings.is_production,
        )
    return {"csrfToken": token_for(session_id, get_csrf_secret())}


@router.post("/validate-step")
def validate_step(
    request: ValidateStepRequest,
    validator: StepValidationService = Depends(get_validation_service),
):
    """Validate the fields of a single step."""
    data = WizardData.from_dict(request.wizard)
    result = validator.validate(request.step, data)

    if not result.is_valid:
        return JSONResponse({"errors": result.to_dict()}, status_code=422)

    return {"status": "ok"}


@router.post("/create")
def create(
    request: CreateRequest,
    http_request: Request,
    x_csrf_token: str | None = Header(None),
    service: SubmissionService = Depends(get_submission_service),
):
    """Create the user, address and (premium only) payment records."""
    session_id = http_request.cookies.get(settings.session_cookie_name)
    if not is_token_valid(session_id, x_csrf_token, get_csrf_secret()):
        logger.warning("Rejected onboarding create: invalid CSRF token")
        return JSONResponse({"error": "Invalid CSRF token"}, status_code=403)

    data = WizardData.from_dict(request.wizard)
    try:
        record = service.submit(data)
    except FieldValidationError as e:
        return JSONResponse({"errors": e.result.to_dict()}, status_code=422)

    return JSONResponse({"status": "ok", "userId": record.user_id}, status_code=201)
