"""
Tests for the declarative field rules.
"""

from datetime import date

import pytest

from enrollment.rules import (
    PAYMENT_RULES,
    USER_RULES,
    CardExpiration,
    Length,
    ValidationResult,
    address_rules,
    validate_fields,
)
from enrollment.state import WizardData, WizardField

TODAY = date(2025, 6, 15)


def _payment(**overrides) -> WizardData:
    values = {"creditCardNumber": "4111111111111234", "expirationDate": "12/27", "cvv": "123"}
    values.update(overrides)
    return WizardData.from_dict(values)


class TestValidationResult:
    """Test the field -> messages map."""

    def test_messages_accumulate_in_order(self):
        result = ValidationResult()
        result.add(WizardField.CVV, "first")
        result.add(WizardField.CVV, "second")
        assert result.messages(WizardField.CVV) == ["first", "second"]
        assert len(result) == 1

    def test_wire_round_trip(self):
        result = ValidationResult.from_dict({"email": ["Email cannot be empty."], "cvv": "bad"})
        assert result.to_dict() == {"email": ["Email cannot be empty."], "cvv": ["bad"]}

    def test_unknown_wire_field_rejected(self):
        with pytest.raises(ValueError):
            ValidationResult.from_dict({"favouriteColour": ["no"]})

    def test_merge(self):
        a = ValidationResult({WizardField.NAME: ["x"]})
        b = ValidationResult({WizardField.NAME: ["y"], WizardField.CITY: ["z"]})
        assert a.merge(b).to_dict() == {"name": ["x", "y"], "city": ["z"]}


class TestUserRules:
    """Test identity rules."""

    def test_blank_fields_get_one_message_each(self):
        result = validate_fields(USER_RULES, WizardData(), today=TODAY)
        assert result.to_dict() == {
            "name": ["Name cannot be empty."],
            "email": ["Email cannot be empty."],
            "phone": ["Phone cannot be empty."],
            "subscriptionType": ["Subscription Type cannot be empty."],
        }

    def test_phone_pattern_then_length(self):
        data = WizardData(name="Ann", email="a@x.com", phone="12ab", subscription_type="free")
        result = validate_fields(USER_RULES, data, today=TODAY)
        assert result.messages(WizardField.PHONE) == [
            "Please enter a valid phone number with digits or an optional leading plus sign.",
            "Phone number must be at least 10 characters long.",
        ]

    @pytest.mark.parametrize("phone", ["+15551234567", "0123456789", "123456789012345"])
    def test_valid_phones(self, phone):
        data = WizardData(name="Ann", email="a@x.com", phone=phone, subscription_type="free")
        assert validate_fields(USER_RULES, data, today=TODAY).is_valid

    def test_phone_too_long(self):
        data = WizardData(name="Ann", email="a@x.com", phone="1234567890123456", subscription_type="free")
        result = validate_fields(USER_RULES, data, today=TODAY)
        assert result.messages(WizardField.PHONE) == ["Phone number cannot exceed 15 characters."]

    @pytest.mark.parametrize("email", ["not-an-email", "a@", "@x.com", "a b@x.com"])
    def test_invalid_email(self, email):
        data = WizardData(name="Ann", email=email, phone="+15551234567", subscription_type="free")
        result = validate_fields(USER_RULES, data, today=TODAY)
        assert result.messages(WizardField.EMAIL) == ["Please enter a valid email address."]

    def test_unknown_subscription_is_a_violation(self):
        data = WizardData(name="Ann", email="a@x.com", phone="+15551234567", subscription_type="gold")
        result = validate_fields(USER_RULES, data, today=TODAY)
        assert result.to_dict() == {"subscriptionType": ["Invalid subscription type."]}

    def test_whitespace_only_is_blank(self):
        data = WizardData(name=" ", email="  ", phone="   ", subscription_type="\t")
        result = validate_fields(USER_RULES, data, today=TODAY)
        assert result.to_dict() == {
            "name": ["Name cannot be empty."],
            "email": ["Email cannot be empty."],
            "phone": ["Phone cannot be empty."],
            "subscriptionType": ["Subscription Type cannot be empty."],
        }


class TestAddressRules:
    """Test address rules and the configurable second line."""

    def test_line2_required_by_default(self):
        data = WizardData(address_line1="12 Harbour St", city="Leeds", postal_code="LS14", state="WY", country="GB")
        result = validate_fields(address_rules(), data, today=TODAY)
        assert result.to_dict() == {"addressLine2": ["Address Line 2 is required."]}

    def test_line2_optional_when_configured(self):
        data = WizardData(address_line1="12 Harbour St", city="Leeds", postal_code="LS14", state="WY", country="GB")
        assert validate_fields(address_rules(line2_required=False), data, today=TODAY).is_valid

    def test_line2_max_length_still_applies(self):
        data = WizardData(
            address_line1="12 Harbour St", address_line2="x" * 151,
            city="Leeds", postal_code="LS14", state="WY", country="GB",
        )
        result = validate_fields(address_rules(line2_required=False), data, today=TODAY)
        assert result.messages(WizardField.ADDRESS_LINE2) == ["Address Line 2 cannot exceed 150 characters."]

    def test_bounds(self):
        data = WizardData(
            address_line1="1 St", address_line2="Flat 3",
            city="L", postal_code="12345678901", state="W", country="G" * 101,
        )
        result = validate_fields(address_rules(), data, today=TODAY)
        assert result.to_dict() == {
            "addressLine1": ["Address Line 1 must be at least 5 characters long."],
            "city": ["City must be at least 2 characters long."],
            "postalCode": ["Postal Code cannot exceed 10 characters."],
            "state": ["State must be at least 2 characters long."],
            "country": ["Country cannot exceed 100 characters."],
        }

    def test_whitespace_only_line1_gets_one_message(self):
        data = WizardData(
            address_line1="    ", address_line2="Flat 3",
            city="Leeds", postal_code="LS14", state="WY", country="GB",
        )
        result = validate_fields(address_rules(), data, today=TODAY)
        assert result.to_dict() == {"addressLine1": ["Address Line 1 is required."]}


class TestPaymentRules:
    """Test payment rules."""

    def test_valid(self):
        assert validate_fields(PAYMENT_RULES, _payment(), today=TODAY).is_valid

    def test_card_length_and_digits(self):
        result = validate_fields(PAYMENT_RULES, _payment(creditCardNumber="4111-1111"), today=TODAY)
        assert result.messages(WizardField.CREDIT_CARD_NUMBER) == [
            "Credit card number must be exactly 16 digits.",
            "Credit card number must contain only digits.",
        ]

    @pytest.mark.parametrize("cvv, messages", [
        ("12", ["CVV must be either 3 or 4 digits."]),
        ("12345", ["CVV must be either 3 or 4 digits."]),
        ("12a", ["CVV must contain only digits."]),
        ("1234", []),
    ])
    def test_cvv(self, cvv, messages):
        result = validate_fields(PAYMENT_RULES, _payment(cvv=cvv), today=TODAY)
        assert result.messages(WizardField.CVV) == messages

    @pytest.mark.parametrize("value, message", [
        ("1227", "Invalid expiration date format. Use MM/YY."),
        ("12/2027", "Invalid expiration date format. Use MM/YY."),
        ("13/27", "Month must be between 01 and 12."),
        ("00/27", "Month must be between 01 and 12."),
        ("05/25", "Expiration date must be in the future."),
    ])
    def test_expiration_violations(self, value, message):
        result = validate_fields(PAYMENT_RULES, _payment(expirationDate=value), today=TODAY)
        assert result.messages(WizardField.EXPIRATION_DATE) == [message]


class TestCardExpiration:
    """Test the expiration boundary: valid through the last day of the month."""

    def test_valid_through_last_day_of_month(self):
        rule = CardExpiration()
        assert rule.check("06/25", date(2025, 6, 1)) == []
        assert rule.check("06/25", date(2025, 6, 30)) == []

    def test_invalid_the_day_after(self):
        assert CardExpiration().check("06/25", date(2025, 7, 1)) == [
            "Expiration date must be in the future."
        ]

    def test_leap_february(self):
        rule = CardExpiration()
        assert rule.check("02/28", date(2028, 2, 29)) == []
        assert rule.check("02/28", date(2028, 3, 1)) != []

    def test_single_digit_month(self):
        assert CardExpiration().check("6/25", date(2025, 6, 30)) == []


class TestLength:

    def test_skips_blank(self):
        assert Length(min=5, min_message="short").check("", TODAY) == []
        assert Length(min=5, min_message="short").check("   ", TODAY) == []

    def test_limit_in_message(self):
        rule = Length(min=5, min_message="at least {limit}")
        assert rule.check("abc", TODAY) == ["at least 5"]
