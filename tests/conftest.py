"""Shared fixtures for payments tests."""

import pytest

from payapp.services.payments.models import AddCustomerRequest, AddPaymentRequest, CardInfo
from payapp.services.payments.providers.mock import MockPaymentProvider
from payapp.services.payments.service import ProviderPaymentAppService


@pytest.fixture
def card():
    return CardInfo(
        name="Jane Doe",
        card_number="4242424242424242",
        expiration_year="2030",
        expiration_month="12",
        cvc="987",
    )


@pytest.fixture
def customer_request(card):
    return AddCustomerRequest(email="jane@example.com", name="Jane Doe", credit_card=card)


@pytest.fixture
def payment_request():
    return AddPaymentRequest(
        customer_id="cus_1",
        receipt_email="a@b.com",
        description="test",
        currency="usd",
        amount=500,
    )


@pytest.fixture
def provider():
    return MockPaymentProvider()


@pytest.fixture
def service(provider):
    return ProviderPaymentAppService(provider, service_name="test")
