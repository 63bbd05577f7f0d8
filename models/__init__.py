from .clock_event import ClockEvent, ClockEventRead, ClockEventType, ClockRequest, PositionSampleRequest
from .geo import GateDecision, LocationError, Perimeter, Position, PositionSample
from .work_zone import WorkZone
