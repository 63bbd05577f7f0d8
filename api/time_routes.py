import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_serializer
from sqlmodel import Session

from core.deps import get_current_user
from db.session import get_session
from models.clock_event import ClockEventRead, ClockRequest, PositionSampleRequest
from models.geo import GateDecision, LocationError, Perimeter, Position
from services.clock_state_machine import ClockFailure, ClockOutcome, ClockSessionState
from services.ledger import ClockEventLedger
from services.perimeter_config import get_active_perimeter
from services.session_registry import machine_for
from services.shift_reconstructor import Shift, ShiftReconstructor, format_duration
from utils.datetime_helpers import format_utc_datetime, utc_now

logger = logging.getLogger(__name__)

# --- Pydantic Models for Responses ---


class SessionStateResponse(BaseModel):
    is_clocked_in: bool
    within_perimeter: bool
    last_known_position: Optional[Position] = None
    last_decision: Optional[GateDecision] = None
    perimeter: Perimeter

    @classmethod
    def build(cls, state: ClockSessionState, perimeter: Perimeter) -> "SessionStateResponse":
        return cls(
            is_clocked_in=state.is_clocked_in,
            within_perimeter=state.within_perimeter,
            last_known_position=state.last_known_position,
            last_decision=state.last_decision,
            perimeter=perimeter,
        )


class ShiftRead(BaseModel):
    clock_in: ClockEventRead
    clock_out: Optional[ClockEventRead] = None
    is_open: bool
    duration_seconds: float
    duration_display: str  # "Hh Mm"

    @classmethod
    def build(cls, shift: Shift, now: datetime) -> "ShiftRead":
        elapsed = ShiftReconstructor.duration(shift, now)
        return cls(
            clock_in=ClockEventRead.from_event(shift.clock_in),
            clock_out=ClockEventRead.from_event(shift.clock_out) if shift.clock_out else None,
            is_open=shift.is_open,
            duration_seconds=elapsed.total_seconds(),
            duration_display=format_duration(elapsed),
        )


class CurrentShiftResponse(BaseModel):
    shift_duration_seconds: Optional[float] = None
    shift_start_time: Optional[datetime] = None
    duration_display: Optional[str] = None  # "Hh Mm Ss"
    message: str

    @field_serializer("shift_start_time")
    def serialize_shift_start_time(self, dt: Optional[datetime]) -> Optional[str]:
        """Ensure shift_start_time is formatted as UTC with Z suffix"""
        return format_utc_datetime(dt)


# Defines API Endpoints
router = APIRouter()


def _raise_for_failure(outcome: ClockOutcome) -> None:
    if outcome.ok:
        return
    # Double punches conflict with current state; the rest are bad requests
    status_code = (
        status.HTTP_409_CONFLICT
        if outcome.failure == ClockFailure.ILLEGAL_TRANSITION
        else status.HTTP_400_BAD_REQUEST
    )
    raise HTTPException(
        status_code=status_code,
        detail={"failure": outcome.failure.value, "reason": outcome.reason},
    )


def _clock(data: ClockRequest, session: Session, user: dict, action: str):
    ledger = ClockEventLedger(session, user["id"])
    perimeter = get_active_perimeter(session)

    with machine_for(user["id"], ledger, worker_name=user.get("name")) as machine:
        # Coordinates sent with the punch count as the freshest sample
        if data.latitude is not None and data.longitude is not None:
            machine.observe(Position(latitude=data.latitude, longitude=data.longitude), perimeter)

        try:
            outcome = machine.clock_in(data.note) if action == "in" else machine.clock_out(data.note)
        except Exception as e:
            # Rollback if the punch could not be stored
            session.rollback()
            logger.error(f"Error recording clock-{action} for {user['id']}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Could not record punch.",
            )

    _raise_for_failure(outcome)
    return {
        "status": "success",
        "is_clocked_in": outcome.is_clocked_in,
        "data": ClockEventRead.from_event(outcome.event),
    }


# Record a Live Position Sample (or the Device's Location Error)
@router.post("/position")
def report_position(
    data: PositionSampleRequest,
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    if data.error:
        sample = LocationError(message=data.error)
    elif data.latitude is not None and data.longitude is not None:
        sample = Position(latitude=data.latitude, longitude=data.longitude)
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Either a location (latitude and longitude) or an error is required.",
        )

    perimeter = get_active_perimeter(session)
    ledger = ClockEventLedger(session, user["id"])
    with machine_for(user["id"], ledger) as machine:
        machine.observe(sample, perimeter)
        response = SessionStateResponse.build(machine.state, perimeter)

    return {"status": "success", "data": response}


# Clock In Endpoint
@router.post("/clock-in")
def clock_in(
    data: ClockRequest,
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    return _clock(data, session, user, "in")


# Clock Out Endpoint
@router.post("/clock-out")
def clock_out(
    data: ClockRequest,
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    return _clock(data, session, user, "out")


# Current Clock Status & Latest Gate Decision
@router.get("/status")
def get_status(
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    perimeter = get_active_perimeter(session)
    ledger = ClockEventLedger(session, user["id"])
    with machine_for(user["id"], ledger) as machine:
        response = SessionStateResponse.build(machine.state, perimeter)
    return {"status": "success", "data": response}


# Get All Punches
@router.get("/logs")
def get_all_logs(
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    events = ClockEventLedger(session, user["id"]).read_all()
    return {
        "status": "success",
        "data": [ClockEventRead.from_event(event) for event in reversed(events)],
    }


# Get Last Punch
@router.get("/last-punch")
def get_last_punch(
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    last_punch = ClockEventLedger(session, user["id"]).last_event()

    if not last_punch:
        return {"status": "success", "data": None, "message": "No punches found."}

    return {"status": "success", "data": ClockEventRead.from_event(last_punch)}


# Shift History, Most Recent First
@router.get("/shifts", response_model=List[ShiftRead])
def get_shifts(
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    now = utc_now()
    events = ClockEventLedger(session, user["id"]).read_all()
    return [ShiftRead.build(shift, now) for shift in ShiftReconstructor.reconstruct(events)]


# Live Duration of the Open Shift
@router.get("/current-shift", response_model=CurrentShiftResponse)
def get_current_shift(
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    events = ClockEventLedger(session, user["id"]).read_all()
    shift = ShiftReconstructor.open_shift(events)

    if shift is None:
        return CurrentShiftResponse(message="Not currently clocked in.")

    elapsed = ShiftReconstructor.duration(shift, utc_now())
    return CurrentShiftResponse(
        shift_duration_seconds=elapsed.total_seconds(),
        shift_start_time=shift.clock_in.timestamp,
        duration_display=format_duration(elapsed, with_seconds=True),
        message="Currently clocked in.",
    )
