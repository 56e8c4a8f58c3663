"""In-memory payment provider for tests and local runs."""

import asyncio
import itertools

from payapp.common.errors import ProviderError
from payapp.services.payments.models import (
    AddCustomerRequest,
    AddPaymentRequest,
    CustomerResult,
    PaymentResult,
)
from payapp.services.payments.providers.base import PaymentProvider


class MockPaymentProvider(PaymentProvider):
    """Deterministic provider: sequential ids, always approves known customers.

    Customer ids starting with `force-decline` are declined, which mirrors how
    the simulated provider is steered in load tests.
    """

    name = "mock"

    def __init__(self, latency_seconds: float = 0.0, customers: list[str] | None = None) -> None:
        self.latency_seconds = latency_seconds
        self.customers: dict[str, CustomerResult] = {}
        self.payments: dict[str, PaymentResult] = {}
        # (operation, subject) for every call that reached the provider.
        self.calls: list[tuple[str, str]] = []
        self._customer_ids = itertools.count(1)
        self._payment_ids = itertools.count(1)
        for customer_id in customers or []:
            self.customers[customer_id] = CustomerResult(id=customer_id, email="", name="")

    async def _simulate_latency(self) -> None:
        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)

    async def create_customer(self, request: AddCustomerRequest) -> CustomerResult:
        self.calls.append(("create_customer", request.email))
        await self._simulate_latency()
        metadata = {"customer_reference": request.customer_id} if request.customer_id else {}
        customer = CustomerResult(
            id=f"cus_{next(self._customer_ids)}",
            email=request.email,
            name=request.name,
            metadata=metadata,
        )
        self.customers[customer.id] = customer
        return customer

    async def create_payment(self, request: AddPaymentRequest) -> PaymentResult:
        self.calls.append(("create_payment", request.customer_id))
        await self._simulate_latency()
        if request.customer_id.lower().startswith("force-decline"):
            raise ProviderError("card_declined", "Your card was declined.", status_code=402)
        if request.customer_id not in self.customers:
            raise ProviderError(
                "resource_missing",
                f"No such customer: '{request.customer_id}'",
                status_code=400,
            )
        payment = PaymentResult(
            id=f"pay_{next(self._payment_ids)}",
            customer_id=request.customer_id,
            receipt_email=request.receipt_email,
            description=request.description,
            currency=request.currency,
            amount=request.amount,
            status="succeeded",
        )
        self.payments[payment.id] = payment
        return payment
