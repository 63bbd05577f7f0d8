import logging
from typing import Optional

from pydantic import BaseModel, Field as PydanticField
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from core.config import (
    DEFAULT_PERIMETER_LAT,
    DEFAULT_PERIMETER_LNG,
    DEFAULT_PERIMETER_NAME,
    DEFAULT_PERIMETER_RADIUS_KM,
)
from models.geo import Perimeter
from models.work_zone import PRIMARY_ZONE_ID, WorkZone
from utils.datetime_helpers import utc_now

logger = logging.getLogger(__name__)


# Fields a manager may change (all optional)
class PerimeterUpdate(BaseModel):
    name: Optional[str] = None
    center_lat: Optional[float] = PydanticField(default=None, ge=-90, le=90)
    center_lng: Optional[float] = PydanticField(default=None, ge=-180, le=180)
    radius_km: Optional[float] = PydanticField(default=None, gt=0)  # Validate if sent


def get_work_zone(session: Session) -> WorkZone:
    zone = session.get(WorkZone, PRIMARY_ZONE_ID)
    if zone is None:
        zone = WorkZone(
            id=PRIMARY_ZONE_ID,
            name=DEFAULT_PERIMETER_NAME,
            center_lat=DEFAULT_PERIMETER_LAT,
            center_lng=DEFAULT_PERIMETER_LNG,
            radius_km=DEFAULT_PERIMETER_RADIUS_KM,
            updated_by="system",
        )
        session.add(zone)
        try:
            session.commit()
        except IntegrityError:
            # Another request seeded it first
            session.rollback()
            return session.get(WorkZone, PRIMARY_ZONE_ID)
        session.refresh(zone)
        logger.info(
            "Seeded work zone '%s' at (%s, %s), radius %skm",
            zone.name,
            zone.center_lat,
            zone.center_lng,
            zone.radius_km,
        )
    return zone


def get_active_perimeter(session: Session) -> Perimeter:
    return get_work_zone(session).to_perimeter()


def update_perimeter(session: Session, update: PerimeterUpdate, manager_id: str) -> WorkZone:
    """Apply a manager's change. Takes effect on the next evaluation only."""
    zone = get_work_zone(session)

    changes = update.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in changes.items():
        setattr(zone, key, value)

    zone.updated_at = utc_now()
    zone.updated_by = manager_id
    session.add(zone)
    session.commit()
    session.refresh(zone)

    logger.info("Work zone updated by %s: %s", manager_id, changes)
    return zone
