"""
Wizard State Machine.

Client-side driver for the onboarding wizard. Owns the current step and the
accumulated WizardData, asks the server to validate a step before moving
forward, and applies the payment skip rule through the step table.

On-screen inputs are modelled as a field -> value map (`inputs`); a UI sets
them with set_input() and reads `view`, `field_errors` and `notice` back.

Only one remote call may be in flight. While advance() or submit() is
pending, every navigation call returns BUSY without doing anything.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from enrollment.client.display import build_summary
from enrollment.errors import AuthorizationFailure, FieldValidationError, TransportFailure
from enrollment.rules import ValidationResult
from enrollment.state import (
    FIRST_STEP,
    STEP_FIELDS,
    SubscriptionType,
    WizardData,
    WizardField,
    WizardStep,
    next_step,
    previous_step,
)

logger = logging.getLogger(__name__)

RETRY_NOTICE = "Unable to validate step. Try again later."
SUBMIT_FAILED_NOTICE = "Oops. Something went wrong while saving your data."
FORBIDDEN_NOTICE = "Your session is no longer valid. Reload the wizard to continue."


class WizardBackend(Protocol):
    """Remote capabilities the wizard needs (EnrollmentClient implements this)."""

    async def validate_step(self, step: int, data: WizardData) -> ValidationResult: ...

    async def create(self, data: WizardData, csrf_token: str) -> int: ...


class NavigationOutcome(str, Enum):
    ADVANCED = "advanced"
    RETREATED = "retreated"
    REJECTED = "rejected"      # validation errors shown, step unchanged
    FAILED = "failed"          # transport failure, retryable
    DENIED = "denied"          # anti-forgery token rejected
    BUSY = "busy"              # a remote call is still pending
    UNCHANGED = "unchanged"    # nothing to do (first/last step, or finished)
    SUBMITTED = "submitted"


@dataclass(frozen=True)
class StepView:
    """What is on screen: one step's fields, plus the review summary."""
    step: WizardStep
    fields: tuple[WizardField, ...]
    summary: dict[WizardField, str] | None = None
    show_payment_summary: bool = False


class WizardStateMachine:
    """Step pointer + accumulated data for one wizard session."""

    def __init__(self, backend: WizardBackend):
        self.backend = backend
        self.current_step: WizardStep = FIRST_STEP
        self.form_data = WizardData()
        self.inputs: dict[WizardField, str] = {}
        self.field_errors = ValidationResult()
        self.notice: str | None = None
        self.user_id: int | None = None
        self._pending = False
        self.view = self.render_step(self.current_step)

    @property
    def busy(self) -> bool:
        return self._pending

    @property
    def completed(self) -> bool:
        return self.user_id is not None

    # -------------------------------------------------------------------------
    # Inputs
    # -------------------------------------------------------------------------

    def set_input(self, field: WizardField, value: str) -> None:
        self.inputs[field] = value

    def set_inputs(self, values: dict[WizardField, str]) -> None:
        self.inputs.update(values)

    def save_step_data(self, step: WizardStep) -> None:
        """Copy the on-screen values of `step` into form_data. Never validates."""
        for field in STEP_FIELDS[step]:
            self.form_data.set(field, self.inputs.get(field, ""))

    def clear_field_errors(self) -> None:
        self.field_errors = ValidationResult()

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    async def advance(self) -> NavigationOutcome:
        """
        Validate the current step remotely and move forward if it passes.

        A transport failure restores the data and errors as they were before
        the call and leaves the step where it is.
        """
        if self._pending:
            return NavigationOutcome.BUSY
        if self.completed:
            return NavigationOutcome.UNCHANGED

        self._pending = True
        try:
            step = self.current_step
            saved_data = self.form_data.copy()
            saved_errors = self.field_errors

            self.save_step_data(step)
            self.clear_field_errors()
            self.notice = None

            try:
                result = await self.backend.validate_step(int(step), self.form_data)
            except TransportFailure:
                self.form_data = saved_data
                self.field_errors = saved_errors
                self.notice = RETRY_NOTICE
                return NavigationOutcome.FAILED

            if not result.is_valid:
                self.field_errors = result
                return NavigationOutcome.REJECTED

            following = next_step(step, self.form_data.subscription)
            if following is None:
                return NavigationOutcome.UNCHANGED

            self.current_step = following
            self.view = self.render_step(following)
            logger.debug(f"Wizard advanced {step.name} -> {following.name}")
            return NavigationOutcome.ADVANCED
        finally:
            self._pending = False

    def retreat(self) -> NavigationOutcome:
        """Go back one step without validating. No-op on the first step."""
        if self._pending:
            return NavigationOutcome.BUSY
        if self.completed:
            return NavigationOutcome.UNCHANGED

        prev = previous_step(self.current_step, self.form_data.subscription)
        if prev is None:
            return NavigationOutcome.UNCHANGED

        self.save_step_data(self.current_step)
        self.current_step = prev
        self.view = self.render_step(prev)
        return NavigationOutcome.RETREATED

    def render_step(self, step: WizardStep) -> StepView:
        """Build the view for `step`. The review step carries a masked summary."""
        if step != WizardStep.REVIEW:
            return StepView(step=step, fields=STEP_FIELDS[step])
        return StepView(
            step=step,
            fields=STEP_FIELDS[step],
            summary=build_summary(self.form_data),
            show_payment_summary=self.form_data.subscription == SubscriptionType.PREMIUM,
        )

    # -------------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------------

    async def submit(self, csrf_token: str) -> NavigationOutcome:
        """Send the accumulated data for creation. Sets user_id on success."""
        if self._pending:
            return NavigationOutcome.BUSY
        if self.completed:
            return NavigationOutcome.UNCHANGED

        self._pending = True
        try:
            self.save_step_data(self.current_step)
            self.clear_field_errors()
            self.notice = None

            try:
                self.user_id = await self.backend.create(self.form_data, csrf_token)
            except FieldValidationError as e:
                self.field_errors = e.result
                return NavigationOutcome.REJECTED
            except AuthorizationFailure:
                self.notice = FORBIDDEN_NOTICE
                return NavigationOutcome.DENIED
            except TransportFailure:
                self.notice = SUBMIT_FAILED_NOTICE
                return NavigationOutcome.FAILED

            logger.info(f"Wizard submitted, user id {self.user_id}")
            return NavigationOutcome.SUBMITTED
        finally:
            self._pending = False
