"""Queue engine owning every ticket and the two priority lanes.

Tickets live in a single registry keyed by id. The high and normal queues only
hold ids, appended at the tail in registration order, and are never reordered.
Attending or cancelling a ticket leaves its id in place: scans skip non-pending
entries, and only :meth:`QueueEngine.prune_older_than` removes them.

The engine performs no locking. Callers that share an instance across threads
must serialise access themselves (see :class:`turnqueue.tickets.service.TurnService`).
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterator

from .errors import TurnNotFoundError, TurnStateError, TurnValidationError
from .models import Ticket
from .state import Priority, TicketStateMachine

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QueueEngine:
    """Two-tier FIFO queue with next-in-line enforcement."""

    def __init__(self, *, clock: Clock | None = None) -> None:
        self._clock: Clock = clock or utcnow
        self._registry: dict[int, Ticket] = {}
        self._queues: dict[Priority, list[int]] = {
            Priority.HIGH: [],
            Priority.NORMAL: [],
        }
        self._next_id = 1

    # -------------------- registration --------------------

    def register_turn(self, customer_name: str, priority: Priority | str = Priority.NORMAL) -> Ticket:
        name = customer_name.strip() if isinstance(customer_name, str) else ""
        if not name:
            raise TurnValidationError("Customer name is required")
        try:
            tier = Priority(priority)
        except (TypeError, ValueError) as exc:
            raise TurnValidationError('Priority must be "normal" or "high"') from exc

        ticket = Ticket(id=self._next_id, customer_name=name, priority=tier, created_at=self._clock())
        self._next_id += 1

        self._registry[ticket.id] = ticket
        self._queues[tier].append(ticket.id)
        logger.info("Registered turn #%s (priority=%s)", ticket.id, tier.value)
        return ticket

    # -------------------- queries --------------------

    def get_next_turn(self) -> Ticket | None:
        for tier in (Priority.HIGH, Priority.NORMAL):
            for ticket in self._iter_pending(tier):
                return ticket
        return None

    def get_pending_turns(self) -> list[Ticket]:
        return [*self._iter_pending(Priority.HIGH), *self._iter_pending(Priority.NORMAL)]

    def get_all_turns(self) -> list[Ticket]:
        return list(self._registry.values())

    def get_turn_by_id(self, ticket_id: int) -> Ticket | None:
        return self._registry.get(ticket_id)

    def queue_ids(self, priority: Priority | str) -> tuple[int, ...]:
        """Snapshot of a lane's ids in insertion order, terminal entries included."""

        return tuple(self._queues[Priority(priority)])

    def now(self) -> datetime:
        return self._clock()

    @property
    def next_id(self) -> int:
        return self._next_id

    def __len__(self) -> int:
        return len(self._registry)

    # -------------------- transitions --------------------

    def attend_turn(self, ticket_id: int) -> Ticket:
        ticket = self._require(ticket_id)
        next_ticket = self.get_next_turn()
        if next_ticket is None or next_ticket.id != ticket_id:
            raise TurnStateError(f"Ticket #{ticket_id} is not the next in line")
        ticket.attend()
        logger.info("Attended turn #%s (priority=%s)", ticket.id, ticket.priority.value)
        return ticket

    def cancel_turn(self, ticket_id: int) -> Ticket:
        ticket = self._require(ticket_id)
        ticket.cancel()
        logger.info("Cancelled turn #%s (priority=%s)", ticket.id, ticket.priority.value)
        return ticket

    # -------------------- retention --------------------

    def prune_older_than(self, max_age: timedelta) -> int:
        """Drop terminal tickets older than ``max_age``; pending tickets always stay.

        Returns the number of tickets removed from the registry.
        """

        now = self.now()
        expired = [
            ticket_id
            for ticket_id, ticket in self._registry.items()
            if TicketStateMachine.is_terminal(ticket.status) and ticket.age(now) > max_age
        ]
        for ticket_id in expired:
            del self._registry[ticket_id]

        for tier, ids in self._queues.items():
            self._queues[tier] = [ticket_id for ticket_id in ids if ticket_id in self._registry]

        if expired:
            logger.info("Pruned %d terminal turns older than %s", len(expired), max_age)
        return len(expired)

    # -------------------- internals --------------------

    def _require(self, ticket_id: int) -> Ticket:
        ticket = self._registry.get(ticket_id)
        if ticket is None:
            raise TurnNotFoundError(f"Ticket #{ticket_id} not found")
        return ticket

    def _iter_pending(self, tier: Priority) -> Iterator[Ticket]:
        for ticket_id in self._queues[tier]:
            ticket = self._registry[ticket_id]
            if ticket.is_pending:
                yield ticket
