"""
Wizard State.

Field identifiers, step ordering, and the accumulated wizard data.

Step adjacency is kept as data (STEP_TABLE) keyed by subscription type, so the
payment skip rule can be checked without driving the wizard.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, NamedTuple


class SubscriptionType(str, Enum):
    """Subscription categories. Only premium requires payment details."""
    FREE = "free"
    PREMIUM = "premium"


class WizardStep(int, Enum):
    """Logical wizard steps, in display order."""
    IDENTITY = 0
    ADDRESS = 1
    PAYMENT = 2
    REVIEW = 3


class WizardField(str, Enum):
    """Fixed field identifiers. Values are the wire (JSON) keys."""
    NAME = "name"
    EMAIL = "email"
    PHONE = "phone"
    SUBSCRIPTION_TYPE = "subscriptionType"
    ADDRESS_LINE1 = "addressLine1"
    ADDRESS_LINE2 = "addressLine2"
    CITY = "city"
    POSTAL_CODE = "postalCode"
    STATE = "state"
    COUNTRY = "country"
    CREDIT_CARD_NUMBER = "creditCardNumber"
    EXPIRATION_DATE = "expirationDate"
    CVV = "cvv"

    @property
    def attr(self) -> str:
        """Attribute name on WizardData."""
        return self.name.lower()


STEP_FIELDS: dict[WizardStep, tuple[WizardField, ...]] = {
    WizardStep.IDENTITY: (
        WizardField.NAME,
        WizardField.EMAIL,
        WizardField.PHONE,
        WizardField.SUBSCRIPTION_TYPE,
    ),
    WizardStep.ADDRESS: (
        WizardField.ADDRESS_LINE1,
        WizardField.ADDRESS_LINE2,
        WizardField.CITY,
        WizardField.POSTAL_CODE,
        WizardField.STATE,
        WizardField.COUNTRY,
    ),
    WizardStep.PAYMENT: (
        WizardField.CREDIT_CARD_NUMBER,
        WizardField.EXPIRATION_DATE,
        WizardField.CVV,
    ),
    WizardStep.REVIEW: (),
}

FIRST_STEP = WizardStep.IDENTITY


def parse_subscription(value: str | None) -> SubscriptionType | None:
    """Decode a submitted subscription value. Unknown or empty -> None."""
    if not value:
        return None
    try:
        return SubscriptionType(value)
    except ValueError:
        return None


@dataclass
class WizardData:
    """
    Accumulated wizard input.

    All fields are plain strings and start empty. Fields belonging to a step
    are only meaningful once that step has been saved; skipped steps stay empty.
    """
    name: str = ""
    email: str = ""
    phone: str = ""
    subscription_type: str = ""
    address_line1: str = ""
    address_line2: str = ""
    city: str = ""
    postal_code: str = ""
    state: str = ""
    country: str = ""
    credit_card_number: str = ""
    expiration_date: str = ""
    cvv: str = ""

    def get(self, field: WizardField) -> str:
        return getattr(self, field.attr)

    def set(self, field: WizardField, value: str) -> None:
        setattr(self, field.attr, value)

    @property
    def subscription(self) -> SubscriptionType | None:
        return parse_subscription(self.subscription_type)

    def to_dict(self) -> dict[str, str]:
        """Serialize using wire keys (camelCase)."""
        return {f.value: self.get(f) for f in WizardField}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "WizardData":
        """
        Build from a wire payload.

        Missing keys and nulls become empty strings; unknown keys are ignored.
        """
        data = data or {}
        wizard = cls()
        for f in WizardField:
            value = data.get(f.value)
            wizard.set(f, "" if value is None else str(value))
        return wizard

    def copy(self) -> "WizardData":
        return WizardData(**{f.name: getattr(self, f.name) for f in fields(self)})


# =============================================================================
# Step Adjacency
# =============================================================================


class StepLinks(NamedTuple):
    """Neighbours of a step. None means there is no step in that direction."""
    next: WizardStep | None
    prev: WizardStep | None


def _build_links(skip_payment: bool) -> dict[WizardStep, StepLinks]:
    active = [s for s in WizardStep if not (skip_payment and s == WizardStep.PAYMENT)]
    links = {}
    for i, step in enumerate(active):
        links[step] = StepLinks(
            next=active[i + 1] if i + 1 < len(active) else None,
            prev=active[i - 1] if i > 0 else None,
        )
    if skip_payment:
        # A skipped step can still be the current one if the subscription
        # changed after it was entered; route out of it like its neighbours.
        links[WizardStep.PAYMENT] = StepLinks(next=WizardStep.REVIEW, prev=WizardStep.ADDRESS)
    return links


STEP_TABLE: dict[SubscriptionType | None, dict[WizardStep, StepLinks]] = {
    SubscriptionType.FREE: _build_links(skip_payment=True),
    SubscriptionType.PREMIUM: _build_links(skip_payment=False),
    # Undecided subscription: nothing is skipped.
    None: _build_links(skip_payment=False),
}


def next_step(step: WizardStep, subscription: SubscriptionType | None) -> WizardStep | None:
    """Step after `step` for this subscription, or None at the end."""
    return STEP_TABLE[subscription][step].next


def previous_step(step: WizardStep, subscription: SubscriptionType | None) -> WizardStep | None:
    """Step before `step` for this subscription, or None at the start."""
    return STEP_TABLE[subscription][step].prev


def active_steps(subscription: SubscriptionType | None) -> list[WizardStep]:
    """Steps a user actually visits, in order."""
    steps = []
    step: WizardStep | None = FIRST_STEP
    while step is not None:
        steps.append(step)
        step = next_step(step, subscription)
    return steps


def requires_payment(subscription: SubscriptionType | None) -> bool:
    return subscription == SubscriptionType.PREMIUM
