"""Race model for a user's recorded race results"""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.db.database import Base


class Race(Base):
    """A single race result entry owned by exactly one user"""

    __tablename__ = "races"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    date = Column(DateTime, nullable=False, index=True)  # UTC, naive
    url = Column(String(2048), nullable=False)

    source = Column(String(100), nullable=True, index=True)
    location = Column(String(255), nullable=True)
    distance = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)

    # Premium tags, filterable on the Pro tier only
    level = Column(String(100), nullable=True)
    surface = Column(String(100), nullable=True)
    weather = Column(String(100), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="races")

    def __repr__(self):
        return f"<Race(id={self.id}, name='{self.name}', date='{self.date}')>"
