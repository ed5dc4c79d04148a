"""
Field Rules - declarative validation tables.

Each entity (user, address, payment) has an immutable rule table: an ordered
list of (field, rules). validate_fields() runs a table against WizardData and
collects violation messages per field in declaration order.

Step validation and final submission both read these tables, so the rules a
user sees while stepping through the wizard are the rules enforced on create.

Blank values (empty or whitespace-only) are reported only by NotBlank; the
shape rules (length, pattern, email, choice, expiration) skip them so a blank
field gets one message.
"""

import calendar
import re
from dataclasses import dataclass
from datetime import date
from typing import Iterator

from email_validator import EmailNotValidError, validate_email

from enrollment.state import SubscriptionType, WizardData, WizardField


# =============================================================================
# Validation Result
# =============================================================================


class ValidationResult:
    """
    Ordered field -> messages map. Empty means valid.

    Serializes to {"fieldName": ["message", ...]} for the wire.
    """

    def __init__(self, errors: dict[WizardField, list[str]] | None = None):
        self._errors: dict[WizardField, list[str]] = {}
        for f, messages in (errors or {}).items():
            for message in messages:
                self.add(f, message)

    def add(self, f: WizardField, message: str) -> None:
        self._errors.setdefault(f, []).append(message)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        for f, messages in other.items():
            for message in messages:
                self.add(f, message)
        return self

    def items(self) -> Iterator[tuple[WizardField, list[str]]]:
        return iter(self._errors.items())

    def messages(self, f: WizardField) -> list[str]:
        return list(self._errors.get(f, []))

    def field_names(self) -> list[str]:
        return [f.value for f in self._errors]

    @property
    def is_valid(self) -> bool:
        return not self._errors

    def __contains__(self, f: object) -> bool:
        return f in self._errors

    def __len__(self) -> int:
        return len(self._errors)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidationResult):
            return NotImplemented
        return self._errors == other._errors

    def __repr__(self) -> str:
        return f"ValidationResult({self.to_dict()!r})"

    def to_dict(self) -> dict[str, list[str]]:
        return {f.value: list(messages) for f, messages in self._errors.items()}

    @classmethod
    def from_dict(cls, data: dict[str, list[str] | str]) -> "ValidationResult":
        """Parse a wire error map. Unknown field names raise ValueError."""
        result = cls()
        for name, messages in data.items():
            f = WizardField(name)
            if isinstance(messages, str):
                messages = [messages]
            for message in messages:
                result.add(f, message)
        return result


# =============================================================================
# Rule Kinds
# =============================================================================


def _is_blank(value: str) -> bool:
    return not value.strip()


@dataclass(frozen=True)
class NotBlank:
    message: str

    def check(self, value: str, today: date) -> list[str]:
        return [self.message] if _is_blank(value) else []


@dataclass(frozen=True)
class Length:
    min: int | None = None
    max: int | None = None
    min_message: str = ""
    max_message: str = ""

    def check(self, value: str, today: date) -> list[str]:
        if _is_blank(value):
            return []
        if self.min is not None and len(value) < self.min:
            return [self.min_message.format(limit=self.min)]
        if self.max is not None and len(value) > self.max:
            return [self.max_message.format(limit=self.max)]
        return []


@dataclass(frozen=True)
class Pattern:
    regex: str
    message: str

    def check(self, value: str, today: date) -> list[str]:
        if _is_blank(value):
            return []
        return [] if re.fullmatch(self.regex, value) else [self.message]


@dataclass(frozen=True)
class Email:
    message: str

    def check(self, value: str, today: date) -> list[str]:
        if _is_blank(value):
            return []
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError:
            return [self.message]
        return []


@dataclass(frozen=True)
class Choice:
    """Value must decode to a member of `options` (an Enum)."""
    options: type
    message: str

    def check(self, value: str, today: date) -> list[str]:
        if _is_blank(value):
            return []
        try:
            self.options(value)
        except ValueError:
            return [self.message]
        return []


EXPIRATION_RE = re.compile(r"^(\d{1,2})/(\d{2})$")


@dataclass(frozen=True)
class CardExpiration:
    """
    MM/YY card expiration. The card is valid through the last calendar day
    of that month.
    """
    format_message: str = "Invalid expiration date format. Use MM/YY."
    month_message: str = "Month must be between 01 and 12."
    past_message: str = "Expiration date must be in the future."

    def check(self, value: str, today: date) -> list[str]:
        if _is_blank(value):
            return []
        match = EXPIRATION_RE.match(value.strip())
        if not match:
            return [self.format_message]
        month, year = int(match.group(1)), 2000 + int(match.group(2))
        if not 1 <= month <= 12:
            return [self.month_message]
        last_day = date(year, month, calendar.monthrange(year, month)[1])
        if last_day < today:
            return [self.past_message]
        return []


Rule = NotBlank | Length | Pattern | Email | Choice | CardExpiration


@dataclass(frozen=True)
class FieldRules:
    field: WizardField
    rules: tuple[Rule, ...] = ()


# =============================================================================
# Rule Tables
# =============================================================================


INVALID_SUBSCRIPTION_MESSAGE = "Invalid subscription type."

USER_RULES: tuple[FieldRules, ...] = (
    FieldRules(WizardField.NAME, (
        NotBlank("Name cannot be empty."),
    )),
    FieldRules(WizardField.EMAIL, (
        NotBlank("Email cannot be empty."),
        Email("Please enter a valid email address."),
    )),
    FieldRules(WizardField.PHONE, (
        NotBlank("Phone cannot be empty."),
        Pattern(
            r"\+?\d+",
            "Please enter a valid phone number with digits or an optional leading plus sign.",
        ),
        Length(
            min=10,
            max=15,
            min_message="Phone number must be at least {limit} characters long.",
            max_message="Phone number cannot exceed {limit} characters.",
        ),
    )),
    FieldRules(WizardField.SUBSCRIPTION_TYPE, (
        NotBlank("Subscription Type cannot be empty."),
        Choice(SubscriptionType, INVALID_SUBSCRIPTION_MESSAGE),
    )),
)


def _bounded(f: WizardField, label: str, min_len: int, max_len: int) -> FieldRules:
    return FieldRules(f, (
        NotBlank(f"{label} is required."),
        Length(
            min=min_len,
            max=max_len,
            min_message=f"{label} must be at least {{limit}} characters long.",
            max_message=f"{label} cannot exceed {{limit}} characters.",
        ),
    ))


def address_rules(line2_required: bool = True) -> tuple[FieldRules, ...]:
    """Address rule table. The second line is required unless configured off."""
    line2: tuple[Rule, ...] = (
        Length(max=150, max_message="Address Line 2 cannot exceed {limit} characters."),
    )
    if line2_required:
        line2 = (NotBlank("Address Line 2 is required."),) + line2

    return (
        _bounded(WizardField.ADDRESS_LINE1, "Address Line 1", 5, 150),
        FieldRules(WizardField.ADDRESS_LINE2, line2),
        _bounded(WizardField.CITY, "City", 2, 100),
        _bounded(WizardField.POSTAL_CODE, "Postal Code", 4, 10),
        _bounded(WizardField.STATE, "State", 2, 100),
        _bounded(WizardField.COUNTRY, "Country", 2, 100),
    )


PAYMENT_RULES: tuple[FieldRules, ...] = (
    FieldRules(WizardField.CREDIT_CARD_NUMBER, (
        NotBlank("Credit card number is required."),
        Length(
            min=16,
            max=16,
            min_message="Credit card number must be exactly {limit} digits.",
            max_message="Credit card number must be exactly {limit} digits.",
        ),
        Pattern(r"\d+", "Credit card number must contain only digits."),
    )),
    FieldRules(WizardField.EXPIRATION_DATE, (
        NotBlank("Expiration date is required."),
        CardExpiration(),
    )),
    FieldRules(WizardField.CVV, (
        NotBlank("CVV is required."),
        Length(
            min=3,
            max=4,
            min_message="CVV must be either 3 or 4 digits.",
            max_message="CVV must be either 3 or 4 digits.",
        ),
        Pattern(r"\d+", "CVV must contain only digits."),
    )),
)


# =============================================================================
# Validator
# =============================================================================


def validate_fields(
    table: tuple[FieldRules, ...],
    data: WizardData,
    today: date | None = None,
) -> ValidationResult:
    """
    Run a rule table against wizard data.

    Pure: the same data and date always give the same result.
    """
    today = today or date.today()
    result = ValidationResult()
    for entry in table:
        value = data.get(entry.field)
        for rule in entry.rules:
            for message in rule.check(value, today):
                result.add(entry.field, message)
    return result


