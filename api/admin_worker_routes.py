from datetime import datetime
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_serializer
from sqlmodel import Session

from api.time_routes import ShiftRead
from core.deps import require_manager_role
from db.session import get_session
from models.clock_event import ClockEventRead, ClockEventType
from services.ledger import ClockEventLedger, recent_events, worker_ids
from services.shift_reconstructor import ShiftReconstructor
from utils.datetime_helpers import format_utc_datetime, utc_now

router = APIRouter()

# --- Pydantic Models for Responses ---


class WorkerStatus(BaseModel):
    worker_id: str
    worker_name: Optional[str] = None
    is_active: bool  # last event is a clock-in
    last_clock_in: Optional[datetime] = None
    last_clock_out: Optional[datetime] = None

    @field_serializer("last_clock_in", "last_clock_out")
    def serialize_dates(self, dt: Optional[datetime]) -> Optional[str]:
        """Ensure dates are formatted as UTC with Z suffix"""
        return format_utc_datetime(dt)


def _worker_status(session: Session, worker_id: str) -> WorkerStatus:
    events = ClockEventLedger(session, worker_id).read_all()

    last_in = next((e for e in reversed(events) if e.event_type == ClockEventType.IN), None)
    last_out = next((e for e in reversed(events) if e.event_type == ClockEventType.OUT), None)
    named = next((e.worker_name for e in reversed(events) if e.worker_name), None)

    return WorkerStatus(
        worker_id=worker_id,
        worker_name=named,
        is_active=bool(events) and events[-1].event_type == ClockEventType.IN,
        last_clock_in=last_in.timestamp if last_in else None,
        last_clock_out=last_out.timestamp if last_out else None,
    )


# --- API Endpoints ---


# Roster: Every Worker Who Has Clocked, w/ Current Status
@router.get("/workers", response_model=List[WorkerStatus])
def list_workers(
    session: Annotated[Session, Depends(get_session)],
    manager: Annotated[dict, Depends(require_manager_role)],
):
    return [_worker_status(session, worker_id) for worker_id in worker_ids(session)]


# One Worker's Shift History
@router.get("/workers/{worker_id}/shifts", response_model=List[ShiftRead])
def get_worker_shifts(
    worker_id: str,
    session: Annotated[Session, Depends(get_session)],
    manager: Annotated[dict, Depends(require_manager_role)],
):
    events = ClockEventLedger(session, worker_id).read_all()
    if not events:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No clock events found for worker '{worker_id}'.",
        )

    now = utc_now()
    return [ShiftRead.build(shift, now) for shift in ShiftReconstructor.reconstruct(events)]


# Most Recent Clock Events Across All Workers
@router.get("/clock-events", response_model=List[ClockEventRead])
def get_recent_clock_events(
    session: Annotated[Session, Depends(get_session)],
    manager: Annotated[dict, Depends(require_manager_role)],
    limit: int = Query(default=50, ge=1, le=500),
):
    return [ClockEventRead.from_event(event) for event in recent_events(session, limit)]
