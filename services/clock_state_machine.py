import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from math import isnan
from typing import Callable, Optional

from models.clock_event import ClockEvent, ClockEventType
from models.geo import GateDecision, LocationError, Perimeter, Position, PositionSample
from services.ledger import ClockEventLedger
from services.perimeter_gate import PerimeterGate
from utils.datetime_helpers import ensure_utc, utc_now

logger = logging.getLogger(__name__)


# Why a Clock In / Clock Out Was Refused
class ClockFailure(str, Enum):
    LOCATION_UNAVAILABLE = "location_unavailable"
    OUTSIDE_PERIMETER = "outside_perimeter"
    ILLEGAL_TRANSITION = "illegal_transition"


@dataclass
class ClockSessionState:
    """Transient per-worker state. Only ClockStateMachine mutates it."""

    is_clocked_in: bool = False
    within_perimeter: bool = False
    last_known_position: Optional[Position] = None
    last_decision: Optional[GateDecision] = None


@dataclass(frozen=True)
class ClockOutcome:
    ok: bool
    is_clocked_in: bool
    event: Optional[ClockEvent] = None
    failure: Optional[ClockFailure] = None
    reason: Optional[str] = None


class ClockStateMachine:
    """Worker-facing clock controller and the only writer of a worker's ledger.

    The clocked-in flag is re-derived from the ledger's last event whenever a
    machine is bound, so a cached flag can never drift from the ledger.
    Refused transitions come back as a failed ClockOutcome; nothing is
    written and the state is left alone.
    """

    def __init__(
        self,
        ledger: ClockEventLedger,
        state: Optional[ClockSessionState] = None,
        worker_name: Optional[str] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.ledger = ledger
        self.state = state if state is not None else ClockSessionState()
        self.worker_name = worker_name
        self.clock = clock

        last = ledger.last_event()
        self.state.is_clocked_in = last is not None and last.event_type == ClockEventType.IN

    def observe(self, sample: PositionSample, perimeter: Perimeter) -> GateDecision:
        # Last sample wins
        decision = PerimeterGate.evaluate(sample, perimeter)
        self.state.last_decision = decision
        self.state.within_perimeter = decision.within_perimeter
        # A fix with NaN coordinates is no more usable than a failed one
        unusable = isinstance(sample, LocationError) or isnan(sample.latitude) or isnan(sample.longitude)
        self.state.last_known_position = None if unusable else sample
        return decision

    def clock_in(self, note: Optional[str] = None) -> ClockOutcome:
        if self.state.is_clocked_in:
            return self._refuse(ClockFailure.ILLEGAL_TRANSITION, "Already clocked in.")

        if self.state.last_known_position is None:
            return self._refuse(ClockFailure.LOCATION_UNAVAILABLE, self._location_reason())

        if not self.state.within_perimeter:
            reason = (
                self.state.last_decision.reason
                if self.state.last_decision is not None and self.state.last_decision.reason
                else "You must be within the designated work area to clock in."
            )
            return self._refuse(ClockFailure.OUTSIDE_PERIMETER, reason)

        return self._record(ClockEventType.IN, note)

    def clock_out(self, note: Optional[str] = None) -> ClockOutcome:
        if not self.state.is_clocked_in:
            return self._refuse(ClockFailure.ILLEGAL_TRANSITION, "Cannot clock out while clocked out.")

        # Leaving the zone does not block ending a shift; a position is still required
        if self.state.last_known_position is None:
            return self._refuse(ClockFailure.LOCATION_UNAVAILABLE, self._location_reason())

        return self._record(ClockEventType.OUT, note)

    def _record(self, event_type: ClockEventType, note: Optional[str]) -> ClockOutcome:
        position = self.state.last_known_position
        timestamp = ensure_utc(self.clock())

        # Never stamp an event before the one it follows
        last = self.ledger.last_event()
        if last is not None and timestamp < last.timestamp:
            timestamp = last.timestamp

        event = ClockEvent(
            worker_name=self.worker_name,
            event_type=event_type,
            timestamp=timestamp,
            latitude=position.latitude,
            longitude=position.longitude,
            note=(note or "").strip() or None,
        )
        self.ledger.append(event)
        self.state.is_clocked_in = event_type == ClockEventType.IN

        logger.info(
            "Worker %s clocked %s at %s (%s)",
            self.ledger.worker_id,
            event_type.value,
            event.timestamp.isoformat(),
            event.id,
        )
        return ClockOutcome(ok=True, is_clocked_in=self.state.is_clocked_in, event=event)

    def _refuse(self, failure: ClockFailure, reason: str) -> ClockOutcome:
        logger.info("Worker %s clock request refused (%s): %s", self.ledger.worker_id, failure.value, reason)
        return ClockOutcome(
            ok=False,
            is_clocked_in=self.state.is_clocked_in,
            failure=failure,
            reason=reason,
        )

    def _location_reason(self) -> str:
        # With no position on hand the last decision, if any, came from a LocationError
        decision = self.state.last_decision
        if decision is not None and decision.reason:
            return decision.reason
        return "Unable to get your current location."
