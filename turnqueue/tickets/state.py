from __future__ import annotations

from enum import Enum


class TicketStatus(str, Enum):
    """Supported states for a ticket's lifecycle."""

    PENDING = "pending"
    ATTENDED = "attended"
    CANCELLED = "cancelled"


class Priority(str, Enum):
    """Service tiers. High is exhausted before normal is considered."""

    NORMAL = "normal"
    HIGH = "high"


class TicketStateMachine:
    """Validate ticket lifecycle transitions."""

    _TRANSITIONS: dict[TicketStatus, set[TicketStatus]] = {
        TicketStatus.PENDING: {TicketStatus.ATTENDED, TicketStatus.CANCELLED},
        TicketStatus.ATTENDED: set(),
        TicketStatus.CANCELLED: set(),
    }

    @classmethod
    def initial_state(cls) -> TicketStatus:
        return TicketStatus.PENDING

    @classmethod
    def is_terminal(cls, status: TicketStatus) -> bool:
        return not cls._TRANSITIONS.get(status)

    @classmethod
    def can_transition(cls, current: TicketStatus, new: TicketStatus) -> bool:
        return new in cls._TRANSITIONS.get(current, set())

