"""Ticket state machine, queue engine and the service contract around them."""

from .engine import QueueEngine
from .errors import TurnNotFoundError, TurnQueueError, TurnStateError, TurnValidationError
from .models import Ticket
from .retention import RetentionScheduler
from .service import Err, Ok, Outcome, TurnService
from .state import Priority, TicketStateMachine, TicketStatus

__all__ = [
    "Err",
    "Ok",
    "Outcome",
    "Priority",
    "QueueEngine",
    "RetentionScheduler",
    "Ticket",
    "TicketStateMachine",
    "TicketStatus",
    "TurnNotFoundError",
    "TurnQueueError",
    "TurnService",
    "TurnStateError",
    "TurnValidationError",
]
