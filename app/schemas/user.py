"""User schemas for responses"""

from datetime import datetime
from pydantic import BaseModel, EmailStr


class UserResponse(BaseModel):
    """User basic response"""
    id: int
    email: EmailStr
    name: str | None
    subscription_status: str
    created_at: datetime

    class Config:
        from_attributes = True


class MeResponse(BaseModel):
    """Authenticated user with the tier resolved from the subscription"""
    user: UserResponse
    tier: str


class LoginResponse(BaseModel):
    """Login endpoint response"""
    user: UserResponse
    tier: str
