"""Stripe Checkout through the REST API."""
import logging
from typing import Any, Dict, Optional

import httpx

from towgo.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

STRIPE_API_URL = "https://api.stripe.com/v1"


class StripeError(Exception):
    """Stripe rejected the request or could not be reached."""


class StripeClient:
    """Creates one-off payment checkout sessions."""

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or default_settings
        self.secret_key = settings.stripe_secret_key
        self.timeout = settings.http_timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.secret_key)

    async def create_checkout_session(
        self,
        name: str,
        description: str,
        amount: float,
        success_url: str,
        cancel_url: str,
        metadata: Dict[str, str],
        price_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Create a payment-mode Checkout Session for a single item.

        Uses `price_id` when the service has a pre-created Stripe price,
        otherwise inline price data in USD cents.
        """
        form: Dict[str, Any] = {
            "mode": "payment",
            "payment_method_types[0]": "card",
            "line_items[0][quantity]": 1,
            "success_url": success_url,
            "cancel_url": cancel_url,
        }
        if price_id:
            form["line_items[0][price]"] = price_id
        else:
            form["line_items[0][price_data][currency]"] = "usd"
            form["line_items[0][price_data][unit_amount]"] = round(amount * 100)
            form["line_items[0][price_data][product_data][name]"] = name
            if description:
                form["line_items[0][price_data][product_data][description]"] = description
        for key, value in metadata.items():
            form[f"metadata[{key}]"] = value

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{STRIPE_API_URL}/checkout/sessions",
                    data=form,
                    auth=(self.secret_key, ""),
                )
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Stripe error {e.response.status_code}: {e.response.text[:500]}")
            raise StripeError(f"Stripe rejected checkout session: {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error(f"Failed to reach Stripe: {e}")
            raise StripeError(f"Failed to reach Stripe: {e}") from e


# Global instance
stripe_client = StripeClient()
