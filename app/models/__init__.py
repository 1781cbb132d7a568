from app.db.database import Base
from app.models.user import User, SubscriptionStatus
from app.models.race import Race

__all__ = [
    "Base",
    "User",
    "SubscriptionStatus",
    "Race",
]
