"""
Client for the Razorpay Orders API.

Only order creation is needed: the storefront opens a gateway order before it
persists its own order, and stores the returned id as the payment reference.
"""
from dataclasses import dataclass
from functools import lru_cache

import httpx
import structlog

from shared.config import settings

logger = structlog.get_logger(__name__)


class PaymentGatewayError(Exception):
    """The gateway could not be reached or refused to open an order."""


@dataclass(frozen=True)
class GatewayOrder:
    id: str
    amount: int
    currency: str
    receipt: str
    status: str | None = None


class RazorpayGateway:
    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = "https://api.razorpay.com/v1",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.key_id = key_id
        self._key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def create_order(self, amount_minor_units: int, currency: str, receipt: str) -> GatewayOrder:
        payload = {
            "amount": amount_minor_units,
            "currency": currency,
            "receipt": receipt,
            "payment_capture": 1,
        }
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                auth=(self.key_id, self._key_secret),
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                resp = await client.post("/orders", json=payload)
                resp.raise_for_status()
                body = resp.json()
        except httpx.HTTPStatusError as exc:
            logger.error("gateway_order_rejected", status_code=exc.response.status_code, receipt=receipt)
            raise PaymentGatewayError(f"Gateway rejected order ({exc.response.status_code})") from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("gateway_unreachable", error=repr(exc), receipt=receipt)
            raise PaymentGatewayError("Gateway request failed") from exc

        if not isinstance(body, dict) or not body.get("id"):
            raise PaymentGatewayError("Gateway response carried no order id")

        logger.info("gateway_order_created", gateway_order_id=body["id"], amount=amount_minor_units)
        return GatewayOrder(
            id=body["id"],
            amount=body.get("amount", amount_minor_units),
            currency=body.get("currency", currency),
            receipt=body.get("receipt", receipt),
            status=body.get("status"),
        )


@lru_cache
def get_payment_gateway() -> RazorpayGateway:
    """FastAPI dependency. One configured client per process."""
    if not settings.RAZORPAY_KEY_ID:
        logger.warning("missing_razorpay_keys")
    return RazorpayGateway(
        key_id=settings.RAZORPAY_KEY_ID,
        key_secret=settings.RAZORPAY_KEY_SECRET,
        base_url=settings.RAZORPAY_BASE_URL,
        timeout=settings.PAYMENT_TIMEOUT_SECONDS,
    )
