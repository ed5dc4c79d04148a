"""
Step Validation.

Maps a wizard step to the rule table for that step and runs it. The only
outside lookup is the email uniqueness check against stored users.
"""

import logging
from datetime import date
from typing import Callable

from enrollment.db.adapter import RecordRepository
from enrollment.rules import (
    PAYMENT_RULES,
    USER_RULES,
    FieldRules,
    ValidationResult,
    address_rules,
    validate_fields,
)
from enrollment.state import WizardData, WizardField, WizardStep

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "This email is already in use."


class StepValidationService:
    """
    Validate one wizard step.

    Args:
        repository: used for the email uniqueness check on the identity step
        address_line2_required: whether the second address line must be filled
        today: clock for card expiration checks (defaults to date.today)
    """

    def __init__(
        self,
        repository: RecordRepository,
        *,
        address_line2_required: bool = True,
        today: Callable[[], date] = date.today,
    ):
        self.repository = repository
        self.today = today
        self._tables: dict[WizardStep, tuple[FieldRules, ...]] = {
            WizardStep.IDENTITY: USER_RULES,
            WizardStep.ADDRESS: address_rules(address_line2_required),
            WizardStep.PAYMENT: PAYMENT_RULES,
        }

    def validate(self, step: int, data: WizardData) -> ValidationResult:
        """
        Validate the fields belonging to `step`.

        Review and unknown step indices have nothing to check and return an
        empty result.
        """
        try:
            wizard_step = WizardStep(step)
        except ValueError:
            logger.debug(f"No validation for step index {step}")
            return ValidationResult()

        table = self._tables.get(wizard_step)
        if table is None:
            return ValidationResult()

        result = validate_fields(table, data, today=self.today())

        # Only hit storage for an otherwise well-formed address
        if wizard_step == WizardStep.IDENTITY and WizardField.EMAIL not in result:
            if self.repository.email_exists(data.email):
                result.add(WizardField.EMAIL, DUPLICATE_EMAIL_MESSAGE)

        if not result.is_valid:
            logger.info(f"Step {wizard_step.name.lower()} rejected: {', '.join(result.field_names())}")
        return result
