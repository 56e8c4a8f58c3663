"""Create one customer and charge it through the HTTP surface.

Handy against a local `uvicorn payapp.services.payments.main:app` running with
`PAYMENT_PROVIDER=mock`, or against Stripe test mode with a test card.
"""

import argparse
import asyncio
import json
from uuid import uuid4

import httpx


async def run(base_url: str, api_key: str | None, amount: int, currency: str) -> int:
    """Run customer + payment creation and print both responses."""

    headers = {"x-correlation-id": str(uuid4())}
    if api_key:
        headers["x-api-key"] = api_key
    customer_payload = {
        "email": "smoke@example.com",
        "name": "Smoke Test",
        "credit_card": {
            "name": "Smoke Test",
            "card_number": "4242424242424242",
            "expiration_year": "2030",
            "expiration_month": "12",
            "cvc": "123",
        },
    }
    async with httpx.AsyncClient(base_url=base_url, timeout=30.0) as client:
        resp = await client.post("/customers", json=customer_payload, headers=headers)
        print(f"POST /customers -> {resp.status_code}")
        print(json.dumps(resp.json(), indent=2))
        if resp.status_code >= 400:
            return 1
        customer_id = resp.json()["id"]

        payment_payload = {
            "customer_id": customer_id,
            "receipt_email": "smoke@example.com",
            "description": "smoke payment",
            "currency": currency,
            "amount": amount,
        }
        resp = await client.post("/payments", json=payment_payload, headers=headers)
        print(f"POST /payments -> {resp.status_code}")
        print(json.dumps(resp.json(), indent=2))
        return 0 if resp.status_code < 400 else 1


def main() -> None:
    """Parse CLI args and run the smoke flow."""

    parser = argparse.ArgumentParser(description="Smoke-test customer and payment creation.")
    parser.add_argument("--base-url", default="http://localhost:8000")
    parser.add_argument("--api-key", default=None)
    parser.add_argument("--amount", type=int, default=500)
    parser.add_argument("--currency", default="usd")
    args = parser.parse_args()
    raise SystemExit(asyncio.run(run(args.base_url, args.api_key, args.amount, args.currency)))


if __name__ == "__main__":
    main()
