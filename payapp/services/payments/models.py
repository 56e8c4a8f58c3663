"""Immutable request/result records for customer and payment operations.

The shapes carry no business rules; `ProviderPaymentAppService` validates
them before anything reaches a provider.
"""

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class Record(BaseModel):
    """Frozen value record with structural equality."""

    model_config = ConfigDict(frozen=True)


class CardInfo(Record):
    """Raw card material. Forwarded to the provider only, never stored or logged."""

    name: str
    card_number: SecretStr
    expiration_year: str
    expiration_month: str
    cvc: SecretStr


class AddCustomerRequest(Record):
    """Intent to register a payer at the provider."""

    email: str
    name: str
    credit_card: CardInfo
    # Caller-side reference for the external customer, sent as provider metadata.
    customer_id: str | None = None


class AddPaymentRequest(Record):
    """Charge `amount` minor units of `currency` to an existing customer."""

    customer_id: str
    receipt_email: str
    description: str
    currency: str
    amount: int


class CustomerResult(Record):
    """Customer as created at the provider."""

    id: str
    email: str
    name: str
    metadata: dict[str, str] = Field(default_factory=dict)


class PaymentResult(Record):
    """Payment (charge) as created at the provider."""

    id: str
    customer_id: str
    receipt_email: str = ""
    description: str = ""
    currency: str = ""
    amount: int
    status: str | None = None
    metadata: dict[str, str] = Field(default_factory=dict)
