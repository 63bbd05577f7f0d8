import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from models.clock_event import ClockEvent, ClockEventType
from utils.datetime_helpers import ensure_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Shift:
    """One clock-in paired with its clock-out; ``clock_out`` is None while open."""

    clock_in: ClockEvent
    clock_out: Optional[ClockEvent] = None

    @property
    def is_open(self) -> bool:
        return self.clock_out is None


class ShiftReconstructor:

    @staticmethod
    def reconstruct(events: Iterable[ClockEvent]) -> List[Shift]:
        """Fold chronologically ordered events into shifts, most recent first.

        An In that follows an unmatched In closes the earlier one with no
        clock-out (dangling-in). An Out with nothing open is dropped
        (orphan-out). Both are logged, not corrected.
        """
        shifts: List[Shift] = []
        open_in: Optional[ClockEvent] = None

        for event in events:
            if event.event_type == ClockEventType.IN:
                if open_in is not None:
                    logger.warning(
                        "Dangling clock-in %s for worker %s: followed by clock-in %s with no clock-out",
                        open_in.id,
                        open_in.worker_id,
                        event.id,
                    )
                    shifts.append(Shift(clock_in=open_in))
                open_in = event
            elif open_in is not None:
                shifts.append(Shift(clock_in=open_in, clock_out=event))
                open_in = None
            else:
                logger.warning(
                    "Orphan clock-out %s for worker %s: no preceding clock-in, dropped",
                    event.id,
                    event.worker_id,
                )

        # Still clocked in (or the ledger simply has no matching Out yet)
        if open_in is not None:
            shifts.append(Shift(clock_in=open_in))

        shifts.reverse()
        return shifts

    @staticmethod
    def open_shift(events: Iterable[ClockEvent]) -> Optional[Shift]:
        """The trailing open shift, if the worker is currently clocked in."""
        shifts = ShiftReconstructor.reconstruct(events)
        if shifts and shifts[0].is_open:
            return shifts[0]
        return None

    @staticmethod
    def duration(shift: Shift, now: datetime) -> timedelta:
        end = shift.clock_out.timestamp if shift.clock_out is not None else now
        elapsed = ensure_utc(end) - ensure_utc(shift.clock_in.timestamp)

        # Clock skew can put the clock-in after "now"
        if elapsed < timedelta(0):
            return timedelta(0)
        return elapsed


def format_duration(delta: timedelta, with_seconds: bool = False) -> str:
    """Render as "Hh Mm" (or "Hh Mm Ss"), truncating at every unit."""
    total_seconds = max(int(delta.total_seconds()), 0)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)

    if with_seconds:
        return f"{hours}h {minutes}m {seconds}s"
    return f"{hours}h {minutes}m"
