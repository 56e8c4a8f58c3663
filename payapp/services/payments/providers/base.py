"""Base payment provider interface."""

from abc import ABC, abstractmethod

from payapp.services.payments.models import (
    AddCustomerRequest,
    AddPaymentRequest,
    CustomerResult,
    PaymentResult,
)


class PaymentProvider(ABC):
    """Adapter over one downstream payment provider.

    Implementations perform exactly one request/response exchange per call and
    raise `ProviderError` for any downstream rejection or transport failure.
    They never retry.
    """

    name: str = "provider"

    @abstractmethod
    async def create_customer(self, request: AddCustomerRequest) -> CustomerResult:
        """Create a customer (with its card as payment source) at the provider."""

    @abstractmethod
    async def create_payment(self, request: AddPaymentRequest) -> PaymentResult:
        """Charge an existing provider customer."""

    async def close(self) -> None:
        """Release network resources held by the adapter."""
