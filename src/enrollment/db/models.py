"""
Persisted record types.

Built by the submission service from validated WizardData. A PersistedRecord
always has a user and an address; payment is present only for premium users.
"""

from dataclasses import asdict, dataclass

from enrollment.state import SubscriptionType, WizardData


@dataclass(frozen=True)
class UserRecord:
    name: str
    email: str
    phone: str
    subscription_type: SubscriptionType
    id: int | None = None

    def to_row(self) -> dict:
        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "subscription_type": self.subscription_type.value,
        }


@dataclass(frozen=True)
class AddressRecord:
    address_line1: str
    address_line2: str
    city: str
    postal_code: str
    state: str
    country: str
    user_id: int | None = None

    def to_row(self) -> dict:
        row = asdict(self)
        row.pop("user_id")
        return row


@dataclass(frozen=True)
class PaymentRecord:
    credit_card_number: str
    expiration_date: str  # MM/YY, as entered
    cvv: str
    user_id: int | None = None

    def to_row(self) -> dict:
        row = asdict(self)
        row.pop("user_id")
        return row


@dataclass(frozen=True)
class PersistedRecord:
    """The durable user/address/payment triple."""
    user: UserRecord
    address: AddressRecord
    payment: PaymentRecord | None = None

    @property
    def user_id(self) -> int:
        if self.user.id is None:
            raise ValueError("User record has not been stored yet")
        return self.user.id


def build_records(
    data: WizardData,
    subscription: SubscriptionType,
) -> tuple[UserRecord, AddressRecord, PaymentRecord | None]:
    """Split validated wizard data into unsaved entity records."""
    user = UserRecord(
        name=data.name,
        email=data.email,
        phone=data.phone,
        subscription_type=subscription,
    )
    address = AddressRecord(
        address_line1=data.address_line1,
        address_line2=data.address_line2,
        city=data.city,
        postal_code=data.postal_code,
        state=data.state,
        country=data.country,
    )
    payment = None
    if subscription == SubscriptionType.PREMIUM:
        payment = PaymentRecord(
            credit_card_number=data.credit_card_number,
            expiration_date=data.expiration_date,
            cvv=data.cvv,
        )
    return user, address, payment
