"""User model for Firebase authenticated users"""

from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from app.db.database import Base


class SubscriptionStatus(str, PyEnum):
    NONE = "none"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"


class User(Base):
    """User account with its Stripe billing linkage"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    firebase_uid = Column(String, unique=True, nullable=False, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=True)

    # Billing linkage, written by the Stripe service only
    stripe_customer_id = Column(String(100), nullable=True, unique=True, index=True)
    stripe_subscription_id = Column(String(100), nullable=True, index=True)
    subscription_status = Column(String(20), default=SubscriptionStatus.NONE.value, nullable=False)
    current_period_end = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    # Relationships
    races = relationship("Race", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', status='{self.subscription_status}')>"
