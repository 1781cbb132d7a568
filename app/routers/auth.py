"""Authentication router for login and user info"""

from fastapi import APIRouter, Depends

from app.models import User
from app.services.entitlements import resolve_tier
from app.services.firebase import get_current_user, get_current_user_or_create
from app.schemas.user import LoginResponse, MeResponse, UserResponse

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=LoginResponse)
async def login(
    user: User = Depends(get_current_user_or_create),
):
    """
    Verify Firebase token and login or create the account.
    """
    return LoginResponse(
        user=UserResponse.model_validate(user),
        tier=resolve_tier(user).value,
    )


@router.get("/me", response_model=MeResponse)
async def get_me(
    user: User = Depends(get_current_user),
):
    """
    Get current authenticated user's information and feature tier.
    """
    return MeResponse(
        user=UserResponse.model_validate(user),
        tier=resolve_tier(user).value,
    )
