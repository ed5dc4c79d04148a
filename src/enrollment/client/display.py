"""
Display helpers for the wizard review step and payment inputs.
"""

import re

from enrollment.state import SubscriptionType, WizardData, WizardField

MASK_CHAR = "*"

# Fields listed on the review step, in order. Payment fields are shown in
# their own block for premium subscriptions only.
SUMMARY_FIELDS = (
    WizardField.NAME,
    WizardField.EMAIL,
    WizardField.PHONE,
    WizardField.SUBSCRIPTION_TYPE,
    WizardField.ADDRESS_LINE1,
    WizardField.ADDRESS_LINE2,
    WizardField.CITY,
    WizardField.POSTAL_CODE,
    WizardField.STATE,
    WizardField.COUNTRY,
)
PAYMENT_SUMMARY_FIELDS = (
    WizardField.CREDIT_CARD_NUMBER,
    WizardField.EXPIRATION_DATE,
)


def mask_card_number(number: str, mask_char: str = MASK_CHAR) -> str:
    """
    Hide all but the last four characters of a card number.

    Only digits in the prefix are masked. Numbers of four characters or
    fewer are returned as-is.
    """
    number = (number or "").strip()
    if len(number) <= 4:
        return number
    return re.sub(r"\d", mask_char, number[:-4]) + number[-4:]


def format_expiration_input(raw: str) -> str:
    """Normalize typed expiration input to MM/YY ("1227" -> "12/27")."""
    digits = re.sub(r"\D", "", raw or "")
    if len(digits) >= 3:
        return f"{digits[:2]}/{digits[2:4]}"
    return digits


def build_summary(data: WizardData) -> dict[WizardField, str]:
    """Read-only review values. Card number is masked; CVV is never shown."""
    summary = {f: data.get(f) for f in SUMMARY_FIELDS}
    if data.subscription == SubscriptionType.PREMIUM:
        summary[WizardField.CREDIT_CARD_NUMBER] = mask_card_number(data.credit_card_number)
        summary[WizardField.EXPIRATION_DATE] = data.expiration_date
    return summary


FIELD_LABELS: dict[WizardField, str] = {
    WizardField.NAME: "Name",
    WizardField.EMAIL: "Email",
    WizardField.PHONE: "Phone",
    WizardField.SUBSCRIPTION_TYPE: "Subscription (free/premium)",
    WizardField.ADDRESS_LINE1: "Address Line 1",
    WizardField.ADDRESS_LINE2: "Address Line 2",
    WizardField.CITY: "City",
    WizardField.POSTAL_CODE: "Postal Code",
    WizardField.STATE: "State",
    WizardField.COUNTRY: "Country",
    WizardField.CREDIT_CARD_NUMBER: "Credit Card Number",
    WizardField.EXPIRATION_DATE: "Expiration (MM/YY)",
    WizardField.CVV: "CVV",
}
