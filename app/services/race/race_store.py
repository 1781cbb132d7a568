"""Persistence for race records, always scoped to the owning user"""

import logging
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Race
from app.schemas.race import RaceFilters

logger = logging.getLogger(__name__)


class RaceStore:
    """Owner-scoped CRUD over the races table.

    No business validation happens here. A lookup that does not match the owner
    behaves exactly like a lookup of a missing id. Concurrent updates of the same
    record are last-write-wins.

    ``created_at`` doubles as the insertion order that breaks date ties, so it is
    kept strictly increasing per owner even when the clock repeats a value.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _next_created_at(self, owner_id: int) -> datetime:
        now = datetime.utcnow()
        latest = await self.db.scalar(
            select(func.max(Race.created_at)).where(Race.user_id == owner_id)
        )
        if latest is not None and now <= latest:
            now = latest + timedelta(microseconds=1)
        return now

    async def insert(self, race: Race) -> Race:
        race.created_at = await self._next_created_at(race.user_id)
        race.updated_at = race.created_at
        self.db.add(race)
        await self.db.commit()
        await self.db.refresh(race)
        return race

    async def find_by_id(
        self,
        owner_id: int,
        race_id: UUID,
        for_update: bool = False,
    ) -> Race | None:
        query = select(Race).where(Race.id == race_id, Race.user_id == owner_id)
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def find_many(self, owner_id: int, filters: RaceFilters) -> list[Race]:
        """Owner's races matching every given filter, newest date first."""
        query = select(Race).where(Race.user_id == owner_id)

        if filters.search:
            query = query.where(
                or_(
                    Race.name.icontains(filters.search, autoescape=True),
                    Race.location.icontains(filters.search, autoescape=True),
                )
            )

        if filters.source:
            query = query.where(Race.source == filters.source)

        for field, value in filters.premium().items():
            query = query.where(getattr(Race, field) == value)

        query = query.order_by(Race.date.desc(), Race.created_at.asc())

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def update(self, owner_id: int, race_id: UUID, patch: dict) -> Race | None:
        race = await self.find_by_id(owner_id, race_id, for_update=True)
        if not race:
            return None

        if not patch:
            return race

        for field, value in patch.items():
            setattr(race, field, value)

        await self.db.commit()
        await self.db.refresh(race)
        return race

    async def delete(self, owner_id: int, race_id: UUID) -> bool:
        result = await self.db.execute(
            delete(Race).where(Race.id == race_id, Race.user_id == owner_id)
        )
        await self.db.commit()
        return result.rowcount > 0
