"""Feature tier resolution from account subscription state"""

from enum import Enum as PyEnum

from app.models.user import SubscriptionStatus


class Tier(str, PyEnum):
    FREE = "free"
    PRO = "pro"


def resolve_tier(user) -> Tier:
    """Pro iff the subscription is active; every other status is Free."""
    if user is None:
        return Tier.FREE
    if user.subscription_status == SubscriptionStatus.ACTIVE.value:
        return Tier.PRO
    return Tier.FREE


def premium_filters_allowed(tier: Tier) -> bool:
    return tier == Tier.PRO
