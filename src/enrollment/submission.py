"""
Final Submission.

Re-validates every step that applies to the submitted data, then writes the
user/address/payment graph as one unit. Client-side step gating is never
trusted: a client may skip steps or send stale data.
"""

import logging

from enrollment.db.adapter import RecordRepository
from enrollment.db.models import PersistedRecord, build_records
from enrollment.errors import FieldValidationError, IntegrityConflict
from enrollment.rules import INVALID_SUBSCRIPTION_MESSAGE, ValidationResult
from enrollment.state import WizardData, WizardField, WizardStep, requires_payment
from enrollment.validation import StepValidationService

logger = logging.getLogger(__name__)


class SubmissionService:
    """Validate and persist a finished wizard."""

    def __init__(self, repository: RecordRepository, validator: StepValidationService):
        self.repository = repository
        self.validator = validator

    def steps_to_validate(self, data: WizardData) -> list[WizardStep]:
        steps = [WizardStep.IDENTITY, WizardStep.ADDRESS]
        if requires_payment(data.subscription):
            steps.append(WizardStep.PAYMENT)
        return steps

    def validate(self, data: WizardData) -> ValidationResult:
        """Aggregate validation over every applicable step."""
        result = ValidationResult()
        for step in self.steps_to_validate(data):
            result.merge(self.validator.validate(step, data))
        return result

    def submit(self, data: WizardData) -> PersistedRecord:
        """
        Persist the wizard data.

        Raises:
            FieldValidationError: any field failed validation, or storage
                rejected the email as a duplicate. Nothing is written.
        """
        result = self.validate(data)
        if not result.is_valid:
            raise FieldValidationError(result)

        subscription = data.subscription
        if subscription is None:
            # Only reachable with a validator that does not check identity fields
            raise FieldValidationError(
                ValidationResult({WizardField.SUBSCRIPTION_TYPE: [INVALID_SUBSCRIPTION_MESSAGE]})
            )

        user, address, payment = build_records(data, subscription)
        try:
            record = self.repository.create_user_graph(user, address, payment)
        except IntegrityConflict as e:
            logger.warning(f"Integrity conflict on {e.field.value} at commit")
            raise FieldValidationError(e.to_result()) from e

        logger.info(
            f"Onboarded user {record.user_id} "
            f"({subscription.value}, payment={'yes' if record.payment else 'no'})"
        )
        return record
