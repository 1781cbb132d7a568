"""Stripe service for customer linkage, checkout and subscription reconciliation"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

import stripe
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models import User
from app.models.user import SubscriptionStatus
from app.services.exceptions import NotFoundError
from app.services.stripe.stripe_config import stripe_settings

logger = logging.getLogger(__name__)

# Stripe subscription statuses collapsed onto the account's four states
STRIPE_STATUS_MAP = {
    "active": SubscriptionStatus.ACTIVE,
    "trialing": SubscriptionStatus.ACTIVE,
    "past_due": SubscriptionStatus.PAST_DUE,
    "unpaid": SubscriptionStatus.PAST_DUE,
    "canceled": SubscriptionStatus.CANCELED,
    "incomplete_expired": SubscriptionStatus.CANCELED,
}


class StripeNotConfiguredError(ValueError):
    """A required Stripe key is missing from the environment"""


def map_stripe_status(stripe_status: Optional[str]) -> SubscriptionStatus:
    return STRIPE_STATUS_MAP.get(stripe_status or "", SubscriptionStatus.NONE)


class StripeService:
    """Service for Stripe payment operations"""

    def __init__(self):
        self._initialized = False

    def _ensure_initialized(self):
        """Lazy initialization of Stripe API key"""
        if not self._initialized:
            if not stripe_settings.stripe_secret_key:
                raise StripeNotConfiguredError("STRIPE_SECRET_KEY not configured")
            stripe.api_key = stripe_settings.stripe_secret_key
            self._initialized = True

    async def _load_user(self, user_id: int, db: AsyncSession) -> Optional[User]:
        result = await db.execute(
            select(User)
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def ensure_customer(
        self,
        user: User,
        db: AsyncSession,
    ) -> str:
        """
        Return the user's Stripe customer id, creating the customer on first use.

        The id is stored with a compare-and-set on the empty column, so two
        concurrent upgrade attempts persist a single customer. The Stripe call
        carries an idempotency key per account for the same reason.

        Raises:
            NotFoundError: If the account no longer exists
        """
        self._ensure_initialized()

        if user.stripe_customer_id:
            return user.stripe_customer_id

        customer = await asyncio.to_thread(
            stripe.Customer.create,
            email=user.email,
            name=user.name,
            metadata={"user_id": str(user.id)},
            idempotency_key=f"customer-create-user-{user.id}",
        )

        result = await db.execute(
            update(User)
            .where(User.id == user.id, User.stripe_customer_id.is_(None))
            .values(stripe_customer_id=customer.id)
            .execution_options(synchronize_session=False)
        )
        await db.commit()

        current = await self._load_user(user.id, db)
        if current is None:
            raise NotFoundError("Account")

        if result.rowcount == 0:
            logger.warning(
                f"Stripe customer already linked for user {user.id}: "
                f"kept {current.stripe_customer_id}, discarded {customer.id}"
            )
        else:
            logger.info(f"Created Stripe customer {customer.id} for user {user.id}")

        return current.stripe_customer_id

    async def start_upgrade(
        self,
        user: User,
        plan_reference: str,
        db: AsyncSession,
    ) -> str:
        """Create a subscription Checkout session and return its redirect URL"""
        self._ensure_initialized()

        customer_id = await self.ensure_customer(user, db)

        app_url = settings.app_url.rstrip("/")
        session = await asyncio.to_thread(
            stripe.checkout.Session.create,
            customer=customer_id,
            mode="subscription",
            payment_method_types=["card"],
            line_items=[
                {
                    "price": plan_reference,
                    "quantity": 1,
                }
            ],
            success_url=f"{app_url}{stripe_settings.checkout_success_path}",
            cancel_url=f"{app_url}{stripe_settings.checkout_cancel_path}",
            metadata={
                "user_id": str(user.id),
                "type": "subscription",
            },
            subscription_data={
                "metadata": {
                    "user_id": str(user.id),
                }
            },
        )

        logger.info(f"Created checkout session {session.id} for user {user.id}, price={plan_reference}")
        return session.url

    def construct_webhook_event(
        self,
        payload: bytes,
        signature: str,
    ) -> stripe.Event:
        """Construct and verify webhook event"""
        self._ensure_initialized()

        if not stripe_settings.stripe_webhook_secret:
            raise StripeNotConfiguredError("STRIPE_WEBHOOK_SECRET not configured")

        return stripe.Webhook.construct_event(
            payload,
            signature,
            stripe_settings.stripe_webhook_secret,
        )

    def _get_attr(self, obj, key: str, default=None):
        """Safely get attribute from a dict or StripeObject"""
        if isinstance(obj, dict):
            return obj.get(key, default)
        return getattr(obj, key, default)

    async def _find_by_customer(self, customer_id: Optional[str], db: AsyncSession) -> Optional[User]:
        if not customer_id:
            return None
        result = await db.execute(select(User).where(User.stripe_customer_id == customer_id))
        return result.scalar_one_or_none()

    def _period_end(self, subscription) -> Optional[datetime]:
        # Newer API versions moved billing periods from the subscription to its items
        period_end = self._get_attr(subscription, "current_period_end")
        if not period_end:
            items = self._get_attr(subscription, "items")
            items_data = self._get_attr(items, "data", []) if items else []
            if items_data:
                period_end = self._get_attr(items_data[0], "current_period_end")
        return datetime.utcfromtimestamp(period_end) if period_end else None

    async def handle_event(self, event, db: AsyncSession) -> bool:
        """Dispatch a verified webhook event. Returns False for ignored types."""
        handlers = {
            "checkout.session.completed": self.handle_checkout_completed,
            "customer.subscription.created": self.handle_subscription_updated,
            "customer.subscription.updated": self.handle_subscription_updated,
            "customer.subscription.deleted": self.handle_subscription_deleted,
            "invoice.payment_failed": self.handle_invoice_payment_failed,
        }
        handler = handlers.get(event.type)
        if handler is None:
            logger.debug(f"Unhandled webhook event type: {event.type}")
            return False

        await handler(event.data.object, db)
        return True

    async def handle_checkout_completed(self, session, db: AsyncSession) -> None:
        """checkout.session.completed: link the subscription and activate the account"""
        if self._get_attr(session, "mode") not in (None, "subscription"):
            return

        customer_id = self._get_attr(session, "customer")
        user = await self._find_by_customer(customer_id, db)
        if not user:
            logger.error(f"No user for customer {customer_id} in checkout session")
            return

        subscription_id = self._get_attr(session, "subscription")
        if subscription_id:
            user.stripe_subscription_id = subscription_id
        user.subscription_status = SubscriptionStatus.ACTIVE.value

        await db.commit()
        logger.info(f"Activated subscription for user {user.id}")

    async def handle_subscription_updated(self, subscription, db: AsyncSession) -> None:
        """customer.subscription.created/updated: mirror the Stripe status"""
        customer_id = self._get_attr(subscription, "customer")
        user = await self._find_by_customer(customer_id, db)
        if not user:
            logger.warning(f"No user for customer {customer_id}")
            return

        stripe_status = self._get_attr(subscription, "status")
        status = map_stripe_status(stripe_status)

        user.stripe_subscription_id = self._get_attr(subscription, "id")
        user.subscription_status = status.value
        user.current_period_end = self._period_end(subscription)

        await db.commit()
        logger.info(f"Updated subscription for user {user.id}: stripe={stripe_status} status={status.value}")

    async def handle_subscription_deleted(self, subscription, db: AsyncSession) -> None:
        """customer.subscription.deleted: downgrade to canceled"""
        customer_id = self._get_attr(subscription, "customer")
        user = await self._find_by_customer(customer_id, db)
        if not user:
            logger.warning(f"No user for customer {customer_id}")
            return

        user.subscription_status = SubscriptionStatus.CANCELED.value
        user.stripe_subscription_id = None

        await db.commit()
        logger.info(f"Canceled subscription for user {user.id}")

    async def handle_invoice_payment_failed(self, invoice, db: AsyncSession) -> None:
        """invoice.payment_failed: mark past due"""
        customer_id = self._get_attr(invoice, "customer")
        user = await self._find_by_customer(customer_id, db)
        if not user:
            return

        user.subscription_status = SubscriptionStatus.PAST_DUE.value
        await db.commit()
        logger.warning(f"Payment failed for user {user.id}")


# Global instance
stripe_service = StripeService()
