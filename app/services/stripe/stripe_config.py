"""Stripe configuration settings"""

import os
from functools import lru_cache

from pydantic_settings import BaseSettings


class StripeSettings(BaseSettings):
    """Stripe configuration loaded from environment variables"""

    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    stripe_price_pro: str = ""  # Price ID of the Pro subscription

    # Checkout redirect paths, relative to APP_URL
    checkout_success_path: str = "/dashboard?success=true"
    checkout_cancel_path: str = "/pricing"

    class Config:
        env_file = f".env.{os.getenv('ENV', 'local')}"
        extra = "ignore"


@lru_cache
def get_stripe_settings() -> StripeSettings:
    return StripeSettings()


stripe_settings = get_stripe_settings()
