from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# Defines the Shapes Used by the Geofence Check


# A Single Fix From the Worker's Device (degrees, WGS-84)
class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


# Circular Work Zone Configured by a Manager
class Perimeter(BaseModel):
    model_config = ConfigDict(frozen=True)

    center: Position
    radius_km: float = Field(gt=0)


# Why a Position Sample Could Not Be Taken (no fix, permission denied, timeout)
class LocationError(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


PositionSample = Union[Position, LocationError]


# Result of Checking One Sample Against the Perimeter
class GateDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    within_perimeter: bool
    reason: Optional[str] = None
    distance_km: Optional[float] = None
