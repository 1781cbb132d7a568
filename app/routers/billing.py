"""Billing router for Stripe integration"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

import stripe

from app.db import get_db
from app.models import User
from app.services.entitlements import resolve_tier
from app.services.firebase import get_current_user
from app.services.stripe import StripeNotConfiguredError, stripe_service, stripe_settings
from app.schemas.billing import (
    CheckoutRequest,
    CheckoutResponse,
    PricesResponse,
    SubscriptionResponse,
)
from app.utils.response_utils import internal_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billing", tags=["Billing"])


@router.get("/subscription", response_model=SubscriptionResponse)
async def get_subscription(
    user: User = Depends(get_current_user),
):
    """
    Get the current subscription status and the tier it grants.
    """
    return SubscriptionResponse(
        status=user.subscription_status,
        tier=resolve_tier(user).value,
        current_period_end=user.current_period_end,
    )


@router.post("/checkout", response_model=CheckoutResponse)
async def create_checkout_session(
    data: CheckoutRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Create Stripe Checkout session for the Pro subscription.

    Returns the URL to redirect the user to Stripe.
    """
    plan_reference = (data.plan_reference or "").strip()
    if not plan_reference:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Plan reference is required",
        )

    try:
        redirect_url = await stripe_service.start_upgrade(
            user=user,
            plan_reference=plan_reference,
            db=db,
        )
    except StripeNotConfiguredError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )
    except stripe.StripeError as e:
        logger.error(f"Stripe error creating checkout session for user {user.id}: {e}")
        return internal_error()

    return CheckoutResponse(redirect_url=redirect_url)


@router.post("/webhooks/stripe")
async def stripe_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """
    Stripe webhook endpoint.

    Reconciles Stripe subscription state into the account's subscription status.
    """
    payload = await request.body()
    signature = request.headers.get("stripe-signature")

    if not signature:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing stripe-signature header",
        )

    try:
        event = stripe_service.construct_webhook_event(payload, signature)
    except StripeNotConfiguredError as e:
        logger.error(f"Stripe webhook received but billing is not configured: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )
    except stripe.SignatureVerificationError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid signature",
        )
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid payload",
        )

    logger.info(f"Received Stripe webhook: {event.type}")

    handled = await stripe_service.handle_event(event, db)

    return {"status": "success", "handled": handled}


@router.get("/prices", response_model=PricesResponse)
async def get_prices():
    """
    Get the plan reference to pass to /billing/checkout for the Pro tier.
    """
    return PricesResponse(pro_plan_reference=stripe_settings.stripe_price_pro or None)
