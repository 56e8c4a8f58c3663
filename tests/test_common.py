"""Startup config redaction and log context injection."""

import logging

from payapp.common.errors import InvalidRequestError, PaymentAppError, ProviderError
from payapp.common.logging import ContextFilter, customer_id_ctx, operation_ctx, trace_id_ctx
from payapp.common.startup import log_startup_config


def test_startup_config_redacts_secrets(monkeypatch):
    """Secret-like keys are redacted, missing keys marked unset."""

    monkeypatch.setenv("STRIPE_API_KEY", "sk_live_abc")
    monkeypatch.setenv("PAYMENT_PROVIDER", "stripe")
    monkeypatch.delenv("STRIPE_API_BASE", raising=False)
    config = log_startup_config("svc", ["STRIPE_API_KEY", "PAYMENT_PROVIDER", "STRIPE_API_BASE"])
    assert config == {
        "service": "svc",
        "STRIPE_API_KEY": "<redacted>",
        "PAYMENT_PROVIDER": "stripe",
        "STRIPE_API_BASE": "<unset>",
    }


def test_context_filter_injects_correlation_fields():
    """Context variables show up on every record."""

    record = logging.LogRecord("payapp", logging.INFO, __file__, 1, "msg", None, None)
    tokens = [
        (trace_id_ctx, trace_id_ctx.set("trace-9")),
        (operation_ctx, operation_ctx.set("add_payment")),
        (customer_id_ctx, customer_id_ctx.set("cus_1")),
    ]
    try:
        assert ContextFilter().filter(record)
    finally:
        for var, token in tokens:
            var.reset(token)
    assert record.trace_id == "trace-9"
    assert record.operation == "add_payment"
    assert record.customer_id == "cus_1"


def test_error_hierarchy():
    """All surfaced errors share one base; validation errors are ValueErrors."""

    invalid = InvalidRequestError("amount", "amount must be positive")
    assert isinstance(invalid, PaymentAppError)
    assert isinstance(invalid, ValueError)
    assert invalid.details == {"field": "amount"}

    provider = ProviderError("card_declined", "declined", status_code=402)
    assert provider.error_code == "card_declined"
    assert repr(provider) == "ProviderError(error_code='card_declined', message='declined')"
    assert ProviderError().error_code == "provider_error"
