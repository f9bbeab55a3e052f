"""Call contract consumed by the HTTP layer.

The engine raises typed errors; this boundary turns them into tagged results
(:class:`Ok` / :class:`Err`) so callers branch on the result type. Every call
runs under one lock, which makes "resolve next, then attend it" atomic when the
service is shared between threads.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from threading import Lock
from typing import Callable, Generic, TypeVar, Union

from opentelemetry import trace

from turnqueue.metrics import (
    TURN_WAIT_SECONDS,
    TURNS_ATTENDED,
    TURNS_CANCELLED,
    TURNS_PRUNED,
    TURNS_REGISTERED,
    TURNS_REJECTED,
    MetricsRegistry,
    build_metrics_registry,
)

from .engine import QueueEngine
from .errors import TurnNotFoundError, TurnQueueError
from .models import Ticket
from .state import Priority

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: TurnQueueError

    @property
    def code(self) -> str:
        return self.error.code

    @property
    def message(self) -> str:
        return str(self.error)


Outcome = Union[Ok[T], Err]


class TurnService:
    """Serialised, result-returning facade over a :class:`QueueEngine`."""

    def __init__(self, engine: QueueEngine | None = None, *, metrics: MetricsRegistry | None = None) -> None:
        self.engine = engine if engine is not None else QueueEngine()
        self.metrics = metrics if metrics is not None else build_metrics_registry()
        self._lock = Lock()

    def register(self, name: str, priority: Priority | str = Priority.NORMAL) -> Outcome[Ticket]:
        outcome = self._run("register", lambda: self.engine.register_turn(name, priority))
        if isinstance(outcome, Ok):
            self._count(TURNS_REGISTERED, outcome.value)
        return outcome

    def list_pending(self) -> list[Ticket]:
        with self._lock:
            return self.engine.get_pending_turns()

    def peek_next(self) -> Ticket | None:
        with self._lock:
            return self.engine.get_next_turn()

    def list_all(self) -> list[Ticket]:
        with self._lock:
            return self.engine.get_all_turns()

    def get(self, ticket_id: int) -> Outcome[Ticket]:
        def lookup() -> Ticket:
            ticket = self.engine.get_turn_by_id(ticket_id)
            if ticket is None:
                raise TurnNotFoundError(f"Ticket #{ticket_id} not found")
            return ticket

        return self._run("get", lookup, record_rejection=False)

    def attend_next(self) -> Outcome[Ticket]:
        def attend() -> Ticket:
            next_ticket = self.engine.get_next_turn()
            if next_ticket is None:
                raise TurnNotFoundError("No pending turns to attend")
            return self.engine.attend_turn(next_ticket.id)

        outcome = self._run("attend_next", attend)
        if isinstance(outcome, Ok):
            ticket = outcome.value
            self._count(TURNS_ATTENDED, ticket)
            waited = ticket.age(self.engine.now()).total_seconds()
            self.metrics.distribution(TURN_WAIT_SECONDS, label_names=("priority",)).observe(
                max(waited, 0.0), labels={"priority": ticket.priority.value}
            )
        return outcome

    def cancel(self, ticket_id: int) -> Outcome[Ticket]:
        outcome = self._run("cancel", lambda: self.engine.cancel_turn(ticket_id))
        if isinstance(outcome, Ok):
            self._count(TURNS_CANCELLED, outcome.value)
        return outcome

    def prune(self, max_age_millis: int) -> int:
        try:
            max_age = timedelta(milliseconds=max_age_millis)
        except OverflowError:
            # Clamp to the representable range.
            max_age = timedelta.max if max_age_millis > 0 else timedelta.min
        with self._lock, tracer.start_as_current_span("turns.prune") as span:
            removed = self.engine.prune_older_than(max_age)
            span.set_attribute("turns.removed", removed)
        if removed:
            self.metrics.counter(TURNS_PRUNED).inc(removed)
        return removed

    def _run(
        self,
        operation: str,
        action: Callable[[], Ticket],
        *,
        record_rejection: bool = True,
    ) -> Outcome[Ticket]:
        with self._lock, tracer.start_as_current_span(f"turns.{operation}") as span:
            try:
                ticket = action()
            except TurnQueueError as exc:
                span.set_attribute("turns.error", exc.code)
                if record_rejection:
                    logger.warning("Refused %s: %s", operation, exc)
                    self.metrics.counter(TURNS_REJECTED, label_names=("code",)).inc(labels={"code": exc.code})
                return Err(exc)
            span.set_attribute("turns.id", ticket.id)
            return Ok(ticket)

    def _count(self, name: str, ticket: Ticket) -> None:
        self.metrics.counter(name, label_names=("priority",)).inc(labels={"priority": ticket.priority.value})
