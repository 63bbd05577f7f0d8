import logging
from typing import List, Optional, Tuple

from sqlmodel import Session, func, select

from models.clock_event import ClockEvent
from utils.datetime_helpers import ensure_utc

logger = logging.getLogger(__name__)


class ClockEventLedger:
    """Append-only, insertion-ordered log of one worker's clock events.

    The ledger never re-sorts, edits, or deletes events. Callers append in the
    order events occur; ``seq`` records that order.
    """

    def __init__(self, session: Session, worker_id: str):
        self.session = session
        self.worker_id = worker_id

    def append(self, event: ClockEvent) -> None:
        event.worker_id = self.worker_id
        event.timestamp = ensure_utc(event.timestamp)

        last = self.last_event()
        if last is not None and event.timestamp < last.timestamp:
            # Out-of-order append is a caller bug; record it but keep insertion order
            logger.warning(
                "Ledger %s: event %s at %s precedes last event %s at %s",
                self.worker_id,
                event.id,
                event.timestamp.isoformat(),
                last.id,
                last.timestamp.isoformat(),
            )

        # Append New Event and Commit to DB
        self.session.add(event)
        self.session.commit()
        self.session.refresh(event)

    def read_all(self) -> Tuple[ClockEvent, ...]:
        return tuple(
            self.session.exec(
                select(ClockEvent)
                .where(ClockEvent.worker_id == self.worker_id)
                .order_by(ClockEvent.seq)
            ).all()
        )

    def last_event(self) -> Optional[ClockEvent]:
        return self.session.exec(
            select(ClockEvent)
            .where(ClockEvent.worker_id == self.worker_id)
            .order_by(ClockEvent.seq.desc())
            .limit(1)
        ).first()


def recent_events(session: Session, limit: int = 50) -> List[ClockEvent]:
    """Most recent events across every worker, newest first."""
    return list(
        session.exec(
            select(ClockEvent).order_by(ClockEvent.seq.desc()).limit(limit)
        ).all()
    )


def worker_ids(session: Session) -> List[str]:
    """Every worker with at least one event, in order of first appearance."""
    rows = session.exec(
        select(ClockEvent.worker_id, func.min(ClockEvent.seq))
        .group_by(ClockEvent.worker_id)
        .order_by(func.min(ClockEvent.seq))
    ).all()
    return [row[0] for row in rows]
