"""
PayOS payment gateway integration

Creates checkout sessions for bookings and verifies callback signatures.
Without an API key (local development, tests) the gateway emulates the
provider and returns a fake checkout URL.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from dataclasses import dataclass
from typing import Any

import requests
from django.conf import settings  # type: ignore

logger = logging.getLogger(__name__)

EMULATED_CHECKOUT_BASE = "https://pay.payos.vn/web/"


class PaymentGatewayError(Exception):
    """The provider refused the request or could not be reached."""

    pass


@dataclass(frozen=True)
class CheckoutSession:
    order_code: int
    checkout_url: str
    payment_link_id: str = ""
    emulated: bool = False


def _sign_string(data: dict[str, Any]) -> str:
    """``key=value`` pairs sorted by key and joined with ``&``; None renders empty."""
    parts = []
    for key, value in sorted(data.items()):
        if value is None:
            value = ""
        elif isinstance(value, bool):
            value = str(value).lower()
        parts.append(f"{key}={value}")
    return "&".join(parts)


def generate_signature(data: dict[str, Any], checksum_key: str) -> str:
    """HMAC-SHA256 hex digest of the sorted payload."""
    return hmac.new(
        checksum_key.encode(),
        _sign_string(data).encode(),
        hashlib.sha256,
    ).hexdigest()


class PaymentGateway:
    """Provider boundary used by the booking flow."""

    def create_checkout(
        self,
        order_code: int,
        amount: int,
        description: str,
        return_url: str,
        cancel_url: str,
    ) -> CheckoutSession:
        raise NotImplementedError

    def verify_signature(self, data: dict[str, Any], signature: str | None) -> bool:
        raise NotImplementedError


class PayOSGateway(PaymentGateway):
    def __init__(
        self,
        client_id: str | None = None,
        api_key: str | None = None,
        checksum_key: str | None = None,
        base_url: str | None = None,
        timeout: int | None = None,
    ):
        self.client_id = client_id if client_id is not None else settings.PAYOS_CLIENT_ID
        self.api_key = api_key if api_key is not None else settings.PAYOS_API_KEY
        self.checksum_key = checksum_key if checksum_key is not None else settings.PAYOS_CHECKSUM_KEY
        self.base_url = base_url or settings.PAYOS_API_BASE_URL
        self.timeout = timeout or settings.PAYOS_TIMEOUT_SECONDS

    @property
    def emulated(self) -> bool:
        return not self.api_key

    def create_checkout(
        self,
        order_code: int,
        amount: int,
        description: str,
        return_url: str,
        cancel_url: str,
    ) -> CheckoutSession:
        logger.info(f"Creating PayOS checkout for order {order_code}, amount {amount}")

        if self.emulated:
            logger.warning("PayOS API key is not configured, emulating checkout session")
            return CheckoutSession(
                order_code=order_code,
                checkout_url=f"{EMULATED_CHECKOUT_BASE}{order_code}?amount={amount}",
                emulated=True,
            )

        # PayOS limits descriptions to 25 characters
        signed = {
            "amount": amount,
            "cancelUrl": cancel_url,
            "description": description[:25],
            "orderCode": order_code,
            "returnUrl": return_url,
        }
        payload = dict(signed, signature=generate_signature(signed, self.checksum_key))
        headers = {
            "x-client-id": self.client_id,
            "x-api-key": self.api_key,
            "Content-Type": "application/json",
        }

        try:
            response = requests.post(
                f"{self.base_url.rstrip('/')}/v2/payment-requests",
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            result = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Network error talking to PayOS: {e}")
            raise PaymentGatewayError(f"PayOS request failed: {e}") from e
        except ValueError as e:
            raise PaymentGatewayError("PayOS returned a non-JSON response") from e

        data = result.get("data") or {}
        if result.get("code") != "00" or not data.get("checkoutUrl"):
            message = result.get("desc", "Unknown error")
            logger.error(f"PayOS rejected order {order_code}: {message}")
            raise PaymentGatewayError(f"PayOS error: {message}")

        logger.info(f"PayOS checkout created for order {order_code}: {data.get('paymentLinkId')}")
        return CheckoutSession(
            order_code=order_code,
            checkout_url=data["checkoutUrl"],
            payment_link_id=data.get("paymentLinkId", ""),
        )

    def verify_signature(self, data: dict[str, Any], signature: str | None) -> bool:
        """Callbacks are only checked when a checksum key is configured."""
        if not self.checksum_key:
            return True
        if not signature:
            return False
        expected = generate_signature(data, self.checksum_key)
        return hmac.compare_digest(expected, signature)


def get_gateway() -> PaymentGateway:
    return PayOSGateway()
