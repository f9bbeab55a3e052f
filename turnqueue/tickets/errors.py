from __future__ import annotations


class TurnQueueError(RuntimeError):
    """Base error for queue and ticket failures."""

    code = "turn_queue_error"


class TurnValidationError(TurnQueueError):
    """Raised when registration input is rejected."""

    code = "validation_error"


class TurnNotFoundError(TurnQueueError):
    """Raised when a ticket could not be located."""

    code = "not_found"


class TurnStateError(TurnQueueError):
    """Raised when a transition is not allowed for the ticket's current state."""

    code = "invalid_state"
