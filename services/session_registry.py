import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from services.clock_state_machine import ClockSessionState, ClockStateMachine
from services.ledger import ClockEventLedger

# In-process session state, keyed by worker id
_states: Dict[str, ClockSessionState] = {}
_locks: Dict[str, threading.Lock] = {}
_registry_lock = threading.Lock()


def _entry(worker_id: str):
    with _registry_lock:
        if worker_id not in _states:
            _states[worker_id] = ClockSessionState()
            _locks[worker_id] = threading.Lock()
        return _states[worker_id], _locks[worker_id]


@contextmanager
def machine_for(
    worker_id: str,
    ledger: ClockEventLedger,
    worker_name: Optional[str] = None,
) -> Iterator[ClockStateMachine]:
    """Bind a state machine to the worker's session state for one step.

    The worker's lock is held for the whole step, so a rapid double clock-in
    runs one after the other and the second sees the first's result.
    """
    state, lock = _entry(worker_id)
    with lock:
        yield ClockStateMachine(ledger, state=state, worker_name=worker_name)


def reset() -> None:
    with _registry_lock:
        _states.clear()
        _locks.clear()
