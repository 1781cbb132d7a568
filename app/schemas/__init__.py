"""Pydantic schemas for request/response validation"""

from app.schemas.user import UserResponse, MeResponse, LoginResponse
from app.schemas.race import (
    RaceFields,
    RaceFilters,
    RaceResponse,
    RaceEnvelope,
    RaceListResponse,
    DeleteResponse,
)
from app.schemas.billing import (
    CheckoutRequest,
    CheckoutResponse,
    SubscriptionResponse,
    PricesResponse,
)

__all__ = [
    # User
    "UserResponse",
    "MeResponse",
    "LoginResponse",
    # Race
    "RaceFields",
    "RaceFilters",
    "RaceResponse",
    "RaceEnvelope",
    "RaceListResponse",
    "DeleteResponse",
    # Billing
    "CheckoutRequest",
    "CheckoutResponse",
    "SubscriptionResponse",
    "PricesResponse",
]
