from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from models.geo import Perimeter, Position
from utils.datetime_helpers import UTCDateTime, utc_now

# Only one zone exists; it is stored under a fixed key
PRIMARY_ZONE_ID = "primary"


# Work Site w/ Circular Geofence
class WorkZone(SQLModel, table=True):
    __tablename__ = "work_zone"

    id: str = Field(default=PRIMARY_ZONE_ID, primary_key=True)
    name: Optional[str] = Field(default=None, description="Human-friendly site name")
    center_lat: float = Field(..., description="Latitude of zone center")
    center_lng: float = Field(..., description="Longitude of zone center")
    radius_km: float = Field(..., gt=0, description="Allowed clock-in radius in kilometers")
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_by: Optional[str] = Field(default=None)

    def to_perimeter(self) -> Perimeter:
        return Perimeter(
            center=Position(latitude=self.center_lat, longitude=self.center_lng),
            radius_km=self.radius_km,
        )
