"""Stripe payment intent creation."""

import logging

import stripe

from survey_api.core import config

logger = logging.getLogger(__name__)


def price_to_minor_units(price: float) -> int:
    """Convert a price in major currency units to the integer amount Stripe expects."""
    return round(price * 100)


def create_payment_intent(amount: int, currency: str | None = None) -> str:
    """Create a card payment intent and return its client secret.

    Raises:
        stripe.StripeError: If the gateway rejects the request or is unreachable.
    """
    intent = stripe.PaymentIntent.create(
        amount=amount,
        currency=currency or config.PAYMENT_CURRENCY,
        payment_method_types=["card"],
        api_key=config.STRIPE_SECRET_KEY,
    )
    logger.info("payment_intent_created", extra={"intent_id": intent.id, "amount": amount})
    return intent.client_secret
