"""Customer/payment operations in front of a payment provider.

`PaymentAppService` is the two-operation contract callers depend on.
`ProviderPaymentAppService` satisfies it by validating requests, honouring the
caller's cancellation signal and delegating the single downstream exchange to
a `PaymentProvider`.
"""

import re
import time
from abc import ABC, abstractmethod

from payapp.common.cancellation import CancellationSignal, run_cancellable
from payapp.common.errors import InvalidRequestError, OperationCancelledError, ProviderError
from payapp.common.logging import customer_id_ctx, logger, operation_ctx, payment_id_ctx
from payapp.common.metrics import (
    operations_cancelled_total,
    provider_failures_total,
    provider_latency_seconds,
    provider_requests_total,
    validation_rejections_total,
)
from payapp.services.payments.models import (
    AddCustomerRequest,
    AddPaymentRequest,
    CardInfo,
    CustomerResult,
    PaymentResult,
)
from payapp.services.payments.providers.base import PaymentProvider


CURRENCY_RE = re.compile(r"[A-Za-z]{3}")


class PaymentAppService(ABC):
    """Contract every payment backend must satisfy."""

    @abstractmethod
    async def add_customer(
        self,
        request: AddCustomerRequest,
        cancel: CancellationSignal | None = None,
    ) -> CustomerResult:
        """Register a payer at the provider."""

    @abstractmethod
    async def add_payment(
        self,
        request: AddPaymentRequest,
        cancel: CancellationSignal | None = None,
    ) -> PaymentResult:
        """Charge an existing customer."""


def _require(field: str, value: str) -> None:
    if not value or not value.strip():
        raise InvalidRequestError(field, f"{field} must not be empty")


def _require_digits(field: str, value: str) -> None:
    _require(field, value)
    if not (value.isascii() and value.isdigit()):
        raise InvalidRequestError(field, f"{field} must contain digits only")


def validate_card(card: CardInfo) -> None:
    """Shape checks only; the provider decides whether the card is usable."""

    _require("credit_card.name", card.name)
    _require_digits("credit_card.card_number", card.card_number.get_secret_value())
    _require_digits("credit_card.cvc", card.cvc.get_secret_value())
    _require_digits("credit_card.expiration_year", card.expiration_year)
    _require_digits("credit_card.expiration_month", card.expiration_month)
    if not 1 <= int(card.expiration_month) <= 12:
        raise InvalidRequestError("credit_card.expiration_month", "expiration_month must be between 1 and 12")


def validate_customer_request(request: AddCustomerRequest) -> None:
    _require("email", request.email)
    _require("name", request.name)
    validate_card(request.credit_card)


def validate_payment_request(request: AddPaymentRequest) -> AddPaymentRequest:
    """Reject malformed payments and return the request with a normalised currency."""

    _require("customer_id", request.customer_id)
    _require("receipt_email", request.receipt_email)
    _require("description", request.description)
    if not CURRENCY_RE.fullmatch(request.currency or ""):
        raise InvalidRequestError("currency", "currency must be a three-letter code")
    if request.amount <= 0:
        raise InvalidRequestError("amount", "amount must be a positive number of minor units")
    return request.model_copy(update={"currency": request.currency.lower()})


class ProviderPaymentAppService(PaymentAppService):
    """`PaymentAppService` backed by a single `PaymentProvider`."""

    def __init__(self, provider: PaymentProvider, service_name: str = "payments-app") -> None:
        self.provider = provider
        self.service_name = service_name

    async def _call_provider(self, operation: str, factory, cancel: CancellationSignal | None):
        """Run one provider exchange under `cancel`, recording its outcome."""

        provider_requests_total.labels(service=self.service_name, operation=operation).inc()
        started = time.perf_counter()
        try:
            return await run_cancellable(factory, cancel)
        except OperationCancelledError:
            operations_cancelled_total.labels(service=self.service_name, operation=operation).inc()
            logger.warning("%s cancelled in flight reason=%s", operation, cancel.reason if cancel else None)
            raise
        except ProviderError as exc:
            provider_failures_total.labels(
                service=self.service_name,
                operation=operation,
                error_code=exc.error_code,
            ).inc()
            logger.warning(
                "%s rejected by provider=%s error_code=%s status=%s",
                operation,
                self.provider.name,
                exc.error_code,
                exc.status_code,
            )
            raise
        finally:
            provider_latency_seconds.labels(service=self.service_name, operation=operation).observe(
                max(0.0, time.perf_counter() - started)
            )

    def _reject_if_cancelled(self, operation: str, cancel: CancellationSignal | None) -> None:
        if cancel is not None and cancel.cancelled:
            operations_cancelled_total.labels(service=self.service_name, operation=operation).inc()
            logger.info("%s skipped: signal already cancelled", operation)
            raise OperationCancelledError(message=cancel.reason)

    def _validate(self, operation: str, validator, request):
        try:
            return validator(request)
        except InvalidRequestError as exc:
            validation_rejections_total.labels(service=self.service_name, operation=operation).inc()
            logger.info("%s rejected field=%s reason=%s", operation, exc.field, exc.message)
            raise

    async def add_customer(
        self,
        request: AddCustomerRequest,
        cancel: CancellationSignal | None = None,
    ) -> CustomerResult:
        operation = "add_customer"
        op_token = operation_ctx.set(operation)
        try:
            self._reject_if_cancelled(operation, cancel)
            self._validate(operation, validate_customer_request, request)
            customer = await self._call_provider(
                operation,
                lambda: self.provider.create_customer(request),
                cancel,
            )
            customer_token = customer_id_ctx.set(customer.id)
            try:
                logger.info("customer_created customer_id=%s provider=%s", customer.id, self.provider.name)
            finally:
                customer_id_ctx.reset(customer_token)
            return customer
        finally:
            operation_ctx.reset(op_token)

    async def add_payment(
        self,
        request: AddPaymentRequest,
        cancel: CancellationSignal | None = None,
    ) -> PaymentResult:
        operation = "add_payment"
        op_token = operation_ctx.set(operation)
        customer_token = customer_id_ctx.set(request.customer_id)
        try:
            self._reject_if_cancelled(operation, cancel)
            normalised = self._validate(operation, validate_payment_request, request)
            payment = await self._call_provider(
                operation,
                lambda: self.provider.create_payment(normalised),
                cancel,
            )
            payment_token = payment_id_ctx.set(payment.id)
            try:
                logger.info(
                    "payment_created payment_id=%s amount=%s currency=%s status=%s",
                    payment.id,
                    payment.amount,
                    payment.currency,
                    payment.status,
                )
            finally:
                payment_id_ctx.reset(payment_token)
            return payment
        finally:
            customer_id_ctx.reset(customer_token)
            operation_ctx.reset(op_token)
