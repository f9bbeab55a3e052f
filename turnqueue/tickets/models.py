from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

from .errors import TurnStateError, TurnValidationError
from .state import Priority, TicketStateMachine, TicketStatus

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MILLISECOND = timedelta(milliseconds=1)


def to_epoch_millis(moment: datetime) -> int:
    return (moment - EPOCH) // _ONE_MILLISECOND


def from_epoch_millis(value: int) -> datetime:
    return EPOCH + timedelta(milliseconds=value)


def truncate_to_millis(moment: datetime) -> datetime:
    """Drop sub-millisecond precision so wire timestamps are lossless."""

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.replace(microsecond=(moment.microsecond // 1000) * 1000)


class Ticket:
    """A single customer's turn, tracked through pending/attended/cancelled.

    Identity, customer name, priority and creation time are fixed for the
    lifetime of the object. Status only moves through :meth:`attend` and
    :meth:`cancel`, both of which are valid only from ``pending``.
    """

    __slots__ = ("_id", "_customer_name", "_priority", "_status", "_created_at")

    def __init__(
        self,
        id: int,
        customer_name: str,
        priority: Priority,
        created_at: datetime,
        status: TicketStatus | None = None,
    ) -> None:
        self._id = id
        self._customer_name = customer_name
        self._priority = Priority(priority)
        self._status = TicketStatus(status) if status is not None else TicketStateMachine.initial_state()
        self._created_at = truncate_to_millis(created_at)

    @property
    def id(self) -> int:
        return self._id

    @property
    def customer_name(self) -> str:
        return self._customer_name

    @property
    def priority(self) -> Priority:
        return self._priority

    @property
    def status(self) -> TicketStatus:
        return self._status

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def timestamp(self) -> int:
        return to_epoch_millis(self._created_at)

    @property
    def is_pending(self) -> bool:
        return self._status is TicketStatus.PENDING

    def age(self, now: datetime) -> timedelta:
        return now - self._created_at

    def attend(self) -> None:
        self._transition(TicketStatus.ATTENDED)

    def cancel(self) -> None:
        self._transition(TicketStatus.CANCELLED)

    def _transition(self, new: TicketStatus) -> None:
        if not TicketStateMachine.can_transition(self._status, new):
            raise TurnStateError(
                f"Ticket #{self._id} cannot be marked {new.value}; current status: {self._status.value}"
            )
        self._status = new

    def to_wire(self) -> dict[str, Any]:
        return {
            "id": self._id,
            "customerName": self._customer_name,
            "priority": self._priority.value,
            "status": self._status.value,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_wire(cls, payload: Mapping[str, Any]) -> "Ticket":
        try:
            return cls(
                id=int(payload["id"]),
                customer_name=str(payload["customerName"]),
                priority=Priority(payload["priority"]),
                status=TicketStatus(payload["status"]),
                created_at=from_epoch_millis(int(payload["timestamp"])),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise TurnValidationError(f"Malformed ticket payload: {exc}") from exc

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ticket):
            return NotImplemented
        return self.to_wire() == other.to_wire()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"Ticket(id={self._id!r}, customer_name={self._customer_name!r}, "
            f"priority={self._priority.value!r}, status={self._status.value!r})"
        )
