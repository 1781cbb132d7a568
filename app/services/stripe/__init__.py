"""Stripe service module for payment processing"""

from app.services.stripe.stripe_config import StripeSettings, stripe_settings
from app.services.stripe.stripe_service import (
    StripeNotConfiguredError,
    StripeService,
    stripe_service,
)

__all__ = [
    "StripeSettings",
    "stripe_settings",
    "StripeNotConfiguredError",
    "StripeService",
    "stripe_service",
]
