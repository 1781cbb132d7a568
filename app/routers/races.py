"""Races router for CRUD operations"""

from typing import Any

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_db
from app.models import User
from app.services.firebase import get_current_user
from app.services.race import RaceService
from app.schemas.race import (
    DeleteResponse,
    RaceEnvelope,
    RaceFilters,
    RaceListResponse,
    RaceResponse,
)

router = APIRouter(prefix="/races", tags=["Races"])


@router.get("", response_model=RaceListResponse)
async def list_races(
    search: str | None = None,
    source: str | None = None,
    level: str | None = None,
    surface: str | None = None,
    weather: str | None = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    List user's races, newest first.

    level, surface and weather are honoured on the Pro tier only and ignored otherwise.
    """
    filters = RaceFilters(
        search=search,
        source=source,
        level=level,
        surface=surface,
        weather=weather,
    )
    races = await RaceService(db).list_races(user, filters)

    return RaceListResponse(races=[RaceResponse.model_validate(r) for r in races])


@router.get("/{race_id}", response_model=RaceEnvelope)
async def get_race(
    race_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Get race details by ID.
    """
    race = await RaceService(db).get_race(user, race_id)
    return RaceEnvelope(race=RaceResponse.model_validate(race))


@router.post("", response_model=RaceEnvelope, status_code=status.HTTP_201_CREATED)
async def create_race(
    data: dict[str, Any] = Body(...),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Record a new race result.
    """
    race = await RaceService(db).create_race(user, data)
    return RaceEnvelope(race=RaceResponse.model_validate(race))


@router.patch("/{race_id}", response_model=RaceEnvelope)
async def update_race(
    race_id: str,
    data: dict[str, Any] = Body(...),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Partially update a race. Only provided fields are changed.
    """
    race = await RaceService(db).update_race(user, race_id, data)
    return RaceEnvelope(race=RaceResponse.model_validate(race))


@router.delete("/{race_id}", response_model=DeleteResponse)
async def delete_race(
    race_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Permanently delete a race.
    """
    await RaceService(db).delete_race(user, race_id)
    return DeleteResponse(success=True)
