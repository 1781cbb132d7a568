"""Billing schemas for checkout and subscription status"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CheckoutRequest(BaseModel):
    """Upgrade request; planReference is a Stripe price id"""
    model_config = ConfigDict(populate_by_name=True)

    plan_reference: str | None = Field(None, alias="planReference")


class CheckoutResponse(BaseModel):
    redirect_url: str = Field(..., serialization_alias="redirectUrl")


class SubscriptionResponse(BaseModel):
    """Current subscription state and derived tier"""
    status: str
    tier: str
    current_period_end: datetime | None = None


class PricesResponse(BaseModel):
    pro_plan_reference: str | None
