"""HTTP surface for customer and payment creation.

Each request runs under a cancellation signal bounded by
`REQUEST_TIMEOUT_SECONDS`; provider errors are passed through with their
reason code.
"""

from contextlib import asynccontextmanager
from time import perf_counter
from uuid import uuid4

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse

from payapp.common.cancellation import CancellationSignal
from payapp.common.config import settings
from payapp.common.errors import (
    InvalidRequestError,
    OperationCancelledError,
    PaymentAppError,
    ProviderError,
)
from payapp.common.logging import configure_logging, logger, trace_id_ctx
from payapp.common.metrics import http_request_duration_seconds, http_requests_total, metrics_response
from payapp.common.startup import log_startup_config
from payapp.common.tracing import instrument_app, setup_tracing
from payapp.services.payments.models import (
    AddCustomerRequest,
    AddPaymentRequest,
    CustomerResult,
    PaymentResult,
)
from payapp.services.payments.providers import get_payment_provider
from payapp.services.payments.service import PaymentAppService, ProviderPaymentAppService

configure_logging()
setup_tracing(settings.service_name)
log_startup_config(
    settings.service_name,
    ["SERVICE_NAME", "PAYMENT_PROVIDER", "STRIPE_API_BASE", "STRIPE_API_KEY", "REQUEST_TIMEOUT_SECONDS"],
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the provider once per process and close it on shutdown."""

    provider = get_payment_provider(settings)
    app.state.service = ProviderPaymentAppService(provider, service_name=settings.service_name)
    logger.info("payment provider ready provider=%s", provider.name)
    yield
    await provider.close()


app = FastAPI(title="Payments App Service", lifespan=lifespan)
instrument_app(app)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    """Record request count and latency for every HTTP call."""

    start = perf_counter()
    route = request.url.path
    method = request.method
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        route_obj = request.scope.get("route")
        if route_obj is not None and getattr(route_obj, "path", None):
            route = route_obj.path
        return response
    finally:
        elapsed = max(0.0, perf_counter() - start)
        http_request_duration_seconds.labels(
            service=settings.service_name,
            route=route,
            method=method,
        ).observe(elapsed)
        http_requests_total.labels(
            service=settings.service_name,
            route=route,
            method=method,
            status_code=str(status_code),
        ).inc()


def _status_for(exc: PaymentAppError) -> int:
    if isinstance(exc, InvalidRequestError):
        return 400
    if isinstance(exc, OperationCancelledError):
        return 504
    if isinstance(exc, ProviderError) and exc.status_code == 402:
        return 402
    return 502


@app.exception_handler(PaymentAppError)
async def payment_app_error_handler(_: Request, exc: PaymentAppError) -> JSONResponse:
    """Render payments-layer errors with their code and message."""

    return JSONResponse(
        status_code=_status_for(exc),
        content={"detail": {"error_code": exc.error_code, "message": exc.message, **exc.details}},
    )


def get_service(request: Request) -> PaymentAppService:
    return request.app.state.service


def enforce_api_key(x_api_key: str | None = Header(default=None)) -> None:
    """Reject requests without the configured API key (when one is configured)."""

    if settings.api_key and x_api_key != settings.api_key:
        raise HTTPException(status_code=401, detail="invalid API key")


async def bind_trace_id(x_correlation_id: str | None = Header(default=None)) -> str:
    trace_id = x_correlation_id or str(uuid4())
    trace_id_ctx.set(trace_id)
    return trace_id


@app.post(
    "/customers",
    response_model=CustomerResult,
    status_code=201,
    dependencies=[Depends(enforce_api_key), Depends(bind_trace_id)],
)
async def add_customer(req: AddCustomerRequest, service: PaymentAppService = Depends(get_service)):
    """Create a provider customer with the supplied card as payment source."""

    cancel = CancellationSignal.with_timeout(settings.request_timeout_seconds)
    try:
        return await service.add_customer(req, cancel)
    finally:
        cancel.close()


@app.post(
    "/payments",
    response_model=PaymentResult,
    status_code=201,
    dependencies=[Depends(enforce_api_key), Depends(bind_trace_id)],
)
async def add_payment(req: AddPaymentRequest, service: PaymentAppService = Depends(get_service)):
    """Charge an existing provider customer."""

    cancel = CancellationSignal.with_timeout(settings.request_timeout_seconds)
    try:
        return await service.add_payment(req, cancel)
    finally:
        cancel.close()


@app.get("/metrics")
def metrics():
    """Prometheus scrape endpoint."""

    return metrics_response()


@app.get("/health")
def health():
    """Container health probe endpoint."""

    return {"ok": True}
