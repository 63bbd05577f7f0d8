import secrets
import time
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field as PydanticField, field_serializer
from sqlmodel import Field, Index, SQLModel

from models.geo import Position
from utils.datetime_helpers import format_utc_datetime, UTCDateTime, utc_now


# Enum Limiting Clock Events to Just Two Vals
class ClockEventType(str, Enum):
    IN = "in"
    OUT = "out"


def new_event_id() -> str:
    # Nanosecond clock plus random suffix keeps ids unique within the same instant
    return f"{time.time_ns()}-{secrets.token_hex(4)}"


# Defines the Structure of Data for a Clock In / Clock Out Call
class ClockRequest(BaseModel):
    latitude: float | None = PydanticField(default=None, ge=-90, le=90)
    longitude: float | None = PydanticField(default=None, ge=-180, le=180)
    note: str | None = PydanticField(default=None, max_length=1000)


# One Live Position Sample, or the Reason the Device Could Not Produce One
class PositionSampleRequest(BaseModel):
    latitude: float | None = PydanticField(default=None, ge=-90, le=90)
    longitude: float | None = PydanticField(default=None, ge=-180, le=180)
    error: str | None = None


# Defines a Table "clock_event" w/ Cols worker_id, event_type, timestamp, ...
# Rows are append-only; seq preserves insertion order
class ClockEvent(SQLModel, table=True):
    __tablename__ = "clock_event"

    __table_args__ = (
        # Most common query: one worker's ledger in insertion order
        Index("ix_clock_event_worker_id_seq", "worker_id", "seq"),
        Index("ix_clock_event_timestamp", "timestamp"),
    )

    seq: Optional[int] = Field(default=None, primary_key=True)
    id: str = Field(default_factory=new_event_id, unique=True, index=True)
    worker_id: str = Field(default="")
    worker_name: Optional[str] = Field(default=None)
    event_type: ClockEventType
    timestamp: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    latitude: float
    longitude: float
    note: Optional[str] = Field(default=None)

    @property
    def location(self) -> Position:
        return Position(latitude=self.latitude, longitude=self.longitude)

    @field_serializer("timestamp")
    def serialize_timestamp(self, dt: datetime) -> str:
        """Ensure timestamp is formatted as UTC with Z suffix"""
        return format_utc_datetime(dt)


# Response Shape for a Ledger Entry
class ClockEventRead(BaseModel):
    id: str
    worker_id: str
    worker_name: Optional[str] = None
    event_type: ClockEventType
    timestamp: datetime
    latitude: float
    longitude: float
    note: Optional[str] = None

    @field_serializer("timestamp")
    def serialize_timestamp(self, dt: datetime) -> str:
        """Ensure timestamp is formatted as UTC with Z suffix"""
        return format_utc_datetime(dt)

    @classmethod
    def from_event(cls, event: ClockEvent) -> "ClockEventRead":
        return cls(
            id=event.id,
            worker_id=event.worker_id,
            worker_name=event.worker_name,
            event_type=event.event_type,
            timestamp=event.timestamp,
            latitude=event.latitude,
            longitude=event.longitude,
            note=event.note,
        )
