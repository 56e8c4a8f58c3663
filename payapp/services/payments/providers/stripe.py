"""Stripe REST adapter.

Customers are created in two exchanges: the card is tokenized first, then the
customer is created with that token as its default source. Payments are
charges against the customer's default source.
"""

from typing import Any

import httpx

from payapp.common.errors import ProviderError
from payapp.common.logging import logger
from payapp.services.payments.models import (
    AddCustomerRequest,
    AddPaymentRequest,
    CustomerResult,
    PaymentResult,
)
from payapp.services.payments.providers.base import PaymentProvider


class StripePaymentProvider(PaymentProvider):
    """Talks to the Stripe API with form-encoded requests over `httpx`."""

    name = "stripe"

    def __init__(
        self,
        api_key: str,
        api_base: str = "https://api.stripe.com",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("stripe api key is required")
        self._client = client or httpx.AsyncClient(base_url=api_base, timeout=timeout)
        self._headers = {"Authorization": f"Bearer {api_key}"}

    async def _post(self, path: str, data: dict[str, Any]) -> dict[str, Any]:
        try:
            resp = await self._client.post(path, data=data, headers=self._headers)
        except httpx.HTTPError as exc:
            logger.warning("stripe transport error path=%s error=%s", path, type(exc).__name__)
            raise ProviderError(
                "provider_unavailable",
                f"Stripe request failed: {type(exc).__name__}",
            ) from exc
        if resp.status_code >= 400:
            raise self._to_provider_error(resp)
        try:
            body = resp.json()
        except ValueError:
            body = None
        # Every object Stripe creates carries an id; anything else is not a usable answer.
        if not isinstance(body, dict) or not body.get("id"):
            logger.error("stripe returned an unusable body path=%s status=%s", path, resp.status_code)
            raise ProviderError(
                "invalid_provider_response",
                f"Stripe returned an unexpected response for {path}",
                status_code=resp.status_code,
            )
        return body

    @staticmethod
    def _to_provider_error(resp: httpx.Response) -> ProviderError:
        """Translate a Stripe error body into `ProviderError`."""

        try:
            body = resp.json()
        except ValueError:
            body = None
        error = body.get("error") if isinstance(body, dict) else None
        if not isinstance(error, dict):
            error = {}
        code = error.get("decline_code") or error.get("code") or error.get("type") or "provider_error"
        details = {"type": error.get("type")} if error.get("type") else {}
        if error.get("param"):
            details["param"] = error["param"]
        return ProviderError(
            code,
            error.get("message") or f"Stripe returned HTTP {resp.status_code}",
            status_code=resp.status_code,
            details=details,
        )

    async def create_customer(self, request: AddCustomerRequest) -> CustomerResult:
        card = request.credit_card
        token = await self._post(
            "/v1/tokens",
            {
                "card[name]": card.name,
                "card[number]": card.card_number.get_secret_value(),
                "card[exp_year]": card.expiration_year,
                "card[exp_month]": card.expiration_month,
                "card[cvc]": card.cvc.get_secret_value(),
            },
        )
        data = {"email": request.email, "name": request.name, "source": token["id"]}
        if request.customer_id:
            data["metadata[customer_reference]"] = request.customer_id
        customer = await self._post("/v1/customers", data)
        return CustomerResult(
            id=customer["id"],
            email=customer.get("email") or request.email,
            name=customer.get("name") or request.name,
            metadata=customer.get("metadata") or {},
        )

    async def create_payment(self, request: AddPaymentRequest) -> PaymentResult:
        charge = await self._post(
            "/v1/charges",
            {
                "customer": request.customer_id,
                "receipt_email": request.receipt_email,
                "description": request.description,
                "currency": request.currency,
                "amount": request.amount,
            },
        )
        return PaymentResult(
            id=charge["id"],
            customer_id=charge.get("customer") or request.customer_id,
            receipt_email=charge.get("receipt_email") or request.receipt_email,
            description=charge.get("description") or request.description,
            currency=charge.get("currency") or request.currency,
            amount=charge.get("amount", request.amount),
            status=charge.get("status"),
            metadata=charge.get("metadata") or {},
        )

    async def close(self) -> None:
        await self._client.aclose()
