"""API routers module"""

from app.routers.auth import router as auth_router
from app.routers.races import router as races_router
from app.routers.billing import router as billing_router

__all__ = [
    "auth_router",
    "races_router",
    "billing_router",
]
