"""Race record service module"""

from app.services.race.race_service import RaceService
from app.services.race.race_store import RaceStore

__all__ = ["RaceService", "RaceStore"]
