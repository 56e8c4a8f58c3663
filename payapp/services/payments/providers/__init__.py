"""Payment provider adapters."""

from payapp.common.config import CommonSettings
from payapp.services.payments.providers.base import PaymentProvider
from payapp.services.payments.providers.mock import MockPaymentProvider
from payapp.services.payments.providers.stripe import StripePaymentProvider


def get_payment_provider(settings: CommonSettings) -> PaymentProvider:
    """Build the provider named by `settings.payment_provider`."""

    if settings.payment_provider == "mock":
        return MockPaymentProvider()
    if settings.payment_provider == "stripe":
        return StripePaymentProvider(
            api_key=settings.stripe_api_key,
            api_base=settings.stripe_api_base,
            timeout=settings.provider_timeout_seconds,
        )
    raise ValueError(f"Unknown payment provider: {settings.payment_provider}")


__all__ = [
    "MockPaymentProvider",
    "PaymentProvider",
    "StripePaymentProvider",
    "get_payment_provider",
]
