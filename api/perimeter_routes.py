from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_serializer
from sqlmodel import Session

from core.deps import get_current_user
from db.session import get_session
from models.work_zone import WorkZone
from services.perimeter_config import get_work_zone
from utils.datetime_helpers import format_utc_datetime

router = APIRouter()

# --- Pydantic Models for Response ---


class PerimeterRead(BaseModel):
    name: Optional[str] = None
    center_lat: float
    center_lng: float
    radius_km: float
    updated_at: datetime
    updated_by: Optional[str] = None

    @field_serializer("updated_at")
    def serialize_updated_at(self, dt: datetime) -> str:
        """Ensure updated_at is formatted as UTC with Z suffix"""
        return format_utc_datetime(dt)

    @classmethod
    def from_zone(cls, zone: WorkZone) -> "PerimeterRead":
        return cls(
            name=zone.name,
            center_lat=zone.center_lat,
            center_lng=zone.center_lng,
            radius_km=zone.radius_km,
            updated_at=zone.updated_at,
            updated_by=zone.updated_by,
        )


# --- API Endpoints ---


@router.get("", response_model=PerimeterRead)
def get_perimeter(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    """
    Retrieve the work zone (center and radius) a clock-in must fall inside.
    """
    return PerimeterRead.from_zone(get_work_zone(session))
