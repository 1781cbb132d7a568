"""Race service: validation, ownership and tier rules for race records"""

import logging
from typing import Any, Mapping, Optional
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Race, User
from app.schemas.race import (
    FIELD_MESSAGES,
    RACE_FIELDS,
    RaceFields,
    RaceFilters,
)
from app.services.entitlements import premium_filters_allowed, resolve_tier
from app.services.exceptions import NotFoundError, RaceValidationError, UnauthenticatedError
from app.services.race.race_store import RaceStore

logger = logging.getLogger(__name__)


def _require_caller(caller: Optional[User]) -> User:
    if caller is None:
        raise UnauthenticatedError()
    return caller


def _parse_race_id(race_id: UUID | str) -> UUID:
    """Malformed ids are reported as missing records."""
    if isinstance(race_id, UUID):
        return race_id
    try:
        return UUID(str(race_id))
    except ValueError:
        raise NotFoundError("Race")


def _first_error(error: ValidationError) -> RaceValidationError:
    """Reduce a pydantic error to the first failing field in declaration order."""

    def position(item: dict) -> int:
        field = item["loc"][0] if item["loc"] else ""
        return RACE_FIELDS.index(field) if field in RACE_FIELDS else len(RACE_FIELDS)

    first = sorted(error.errors(), key=position)[0]
    field = str(first["loc"][0]) if first["loc"] else "body"

    if first["type"] == "missing":
        message = "Race name is required" if field == "name" else f"{field.capitalize()} is required"
    elif first["type"] == "string_too_long":
        message = f"{field.capitalize()} must be at most {first['ctx']['max_length']} characters"
    elif field in FIELD_MESSAGES:
        message = FIELD_MESSAGES[field]
    else:
        message = f"Invalid {field}: {first['msg']}"

    return RaceValidationError(field, message)


def _validate(data: Mapping[str, Any]) -> RaceFields:
    try:
        return RaceFields.model_validate(dict(data))
    except ValidationError as e:
        raise _first_error(e)


class RaceService:
    """Entry point for every race operation.

    Each method takes the calling user explicitly and resolves the caller's tier
    itself; nothing is read from ambient request state.
    """

    def __init__(self, db: AsyncSession):
        self.store = RaceStore(db)

    async def list_races(
        self,
        caller: Optional[User],
        filters: RaceFilters | None = None,
    ) -> list[Race]:
        """
        List the caller's races, newest first.

        Premium filters (level, surface, weather) are honoured for Pro callers
        only. Free callers' premium filters are dropped without an error.
        """
        user = _require_caller(caller)
        filters = filters or RaceFilters()

        tier = resolve_tier(user)
        if not premium_filters_allowed(tier) and filters.premium():
            logger.debug(
                f"Ignoring premium filters {sorted(filters.premium())} for user {user.id} ({tier.value})"
            )
            filters = filters.without_premium()

        return await self.store.find_many(user.id, filters)

    async def get_race(self, caller: Optional[User], race_id: UUID | str) -> Race:
        user = _require_caller(caller)
        race = await self.store.find_by_id(user.id, _parse_race_id(race_id))
        if not race:
            raise NotFoundError("Race")
        return race

    async def create_race(self, caller: Optional[User], fields: Mapping[str, Any]) -> Race:
        """
        Validate and persist a new race owned by the caller.

        Premium fields are stored for any tier; only filtering on them is gated.
        """
        user = _require_caller(caller)
        validated = _validate(fields)

        race = Race(user_id=user.id, **validated.to_columns())
        race = await self.store.insert(race)

        logger.info(f"Created race {race.id} for user {user.id}")
        return race

    async def update_race(
        self,
        caller: Optional[User],
        race_id: UUID | str,
        partial_fields: Mapping[str, Any],
    ) -> Race:
        """
        Apply only the fields present in the patch.

        Touched fields are validated with the create rules; an empty patch
        leaves the record untouched.
        """
        user = _require_caller(caller)
        race_id = _parse_race_id(race_id)

        race = await self.store.find_by_id(user.id, race_id)
        if not race:
            raise NotFoundError("Race")

        touched = [field for field in RACE_FIELDS if field in partial_fields]
        if not touched:
            return race

        current = {field: getattr(race, field) for field in RACE_FIELDS}
        current.update({field: partial_fields[field] for field in touched})
        validated = _validate(current)

        updated = await self.store.update(user.id, race_id, validated.to_columns(touched))
        if not updated:
            # Deleted between the read and the write
            raise NotFoundError("Race")

        logger.info(f"Updated race {race_id} for user {user.id}: {touched}")
        return updated

    async def delete_race(self, caller: Optional[User], race_id: UUID | str) -> bool:
        user = _require_caller(caller)
        deleted = await self.store.delete(user.id, _parse_race_id(race_id))
        if not deleted:
            raise NotFoundError("Race")

        logger.info(f"Deleted race {race_id} for user {user.id}")
        return True
