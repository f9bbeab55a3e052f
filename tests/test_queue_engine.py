import logging
from datetime import timedelta

import pytest

from turnqueue.tickets import (
    Priority,
    QueueEngine,
    TicketStatus,
    TurnNotFoundError,
    TurnStateError,
    TurnValidationError,
)


def test_register_assigns_sequential_ids_and_trims_names(engine):
    first = engine.register_turn("  Ana  ")
    second = engine.register_turn("Luis", "high")

    assert (first.id, second.id) == (1, 2)
    assert first.customer_name == "Ana"
    assert first.priority == Priority.NORMAL
    assert second.priority == Priority.HIGH
    assert engine.queue_ids(Priority.NORMAL) == (1,)
    assert engine.queue_ids(Priority.HIGH) == (2,)


@pytest.mark.parametrize("name", ["", "   ", "\t\n", None])
def test_register_rejects_blank_names_without_consuming_ids(engine, name):
    with pytest.raises(TurnValidationError):
        engine.register_turn(name)

    assert engine.next_id == 1
    assert len(engine) == 0
    assert engine.register_turn("Ana").id == 1


def test_register_rejects_unknown_priority(engine):
    with pytest.raises(TurnValidationError, match="Priority"):
        engine.register_turn("Ana", "urgent")
    assert engine.next_id == 1
    assert engine.get_all_turns() == []


def test_next_turn_prefers_high_priority_regardless_of_age(engine, clock):
    normal = engine.register_turn("early normal")
    clock.advance(hours=3)
    high = engine.register_turn("late high", Priority.HIGH)

    assert engine.get_next_turn() is high
    engine.attend_turn(high.id)
    assert engine.get_next_turn() is normal


def test_next_turn_is_none_when_nothing_is_pending(engine):
    assert engine.get_next_turn() is None
    ticket = engine.register_turn("Ana")
    engine.cancel_turn(ticket.id)
    assert engine.get_next_turn() is None


def test_priority_fifo_scenario(engine):
    a = engine.register_turn("A", "high")
    b = engine.register_turn("B", "high")
    c = engine.register_turn("C", "normal")

    assert engine.get_next_turn() is a
    assert engine.attend_turn(a.id).status == TicketStatus.ATTENDED
    assert engine.get_next_turn() is b
    assert engine.cancel_turn(b.id).status == TicketStatus.CANCELLED
    assert engine.get_next_turn() is c


def test_attend_requires_next_in_line(engine):
    first = engine.register_turn("first")
    second = engine.register_turn("second")

    with pytest.raises(TurnStateError, match="not the next in line"):
        engine.attend_turn(second.id)
    assert second.status == TicketStatus.PENDING

    engine.attend_turn(first.id)
    with pytest.raises(TurnStateError):
        engine.attend_turn(first.id)
    engine.attend_turn(second.id)
    assert second.status == TicketStatus.ATTENDED


def test_attend_and_cancel_unknown_ids(engine):
    with pytest.raises(TurnNotFoundError):
        engine.attend_turn(42)
    with pytest.raises(TurnNotFoundError):
        engine.cancel_turn(42)


def test_cancel_any_pending_ticket_at_any_position(engine):
    tickets = [engine.register_turn(f"n{i}") for i in range(3)]
    high = engine.register_turn("h", "high")

    engine.cancel_turn(tickets[2].id)
    engine.cancel_turn(tickets[0].id)

    assert [t.id for t in engine.get_pending_turns()] == [high.id, tickets[1].id]
    with pytest.raises(TurnStateError):
        engine.cancel_turn(tickets[0].id)


def test_terminal_ids_stay_in_queue_until_pruned(engine):
    a = engine.register_turn("A")
    b = engine.register_turn("B")
    engine.attend_turn(a.id)
    engine.cancel_turn(b.id)

    assert engine.queue_ids(Priority.NORMAL) == (a.id, b.id)
    assert engine.get_pending_turns() == []


def test_pending_turns_are_high_then_normal_in_fifo_order(engine):
    n1 = engine.register_turn("n1")
    h1 = engine.register_turn("h1", "high")
    n2 = engine.register_turn("n2")
    h2 = engine.register_turn("h2", "high")

    first = engine.get_pending_turns()
    second = engine.get_pending_turns()

    assert [t.id for t in first] == [h1.id, h2.id, n1.id, n2.id]
    assert [t.id for t in first] == [t.id for t in second]


def test_lookup_and_listing(engine):
    a = engine.register_turn("A")
    b = engine.register_turn("B", "high")
    engine.cancel_turn(a.id)

    assert engine.get_turn_by_id(b.id) is b
    assert engine.get_turn_by_id(99) is None
    assert {t.id for t in engine.get_all_turns()} == {a.id, b.id}


def test_prune_removes_only_old_terminal_tickets(engine, clock):
    old_attended = engine.register_turn("old attended", "high")
    old_cancelled = engine.register_turn("old cancelled")
    old_pending = engine.register_turn("old pending")
    engine.attend_turn(old_attended.id)
    engine.cancel_turn(old_cancelled.id)

    clock.advance(hours=2)
    recent = engine.register_turn("recent")
    engine.cancel_turn(recent.id)

    removed = engine.prune_older_than(timedelta(hours=1))

    assert removed == 2
    assert engine.get_turn_by_id(old_attended.id) is None
    assert engine.get_turn_by_id(old_cancelled.id) is None
    assert engine.get_turn_by_id(old_pending.id) is old_pending
    assert engine.get_turn_by_id(recent.id) is recent
    assert engine.queue_ids(Priority.HIGH) == ()
    assert engine.queue_ids(Priority.NORMAL) == (old_pending.id, recent.id)
    assert engine.get_next_turn() is old_pending


def test_prune_keeps_tickets_exactly_at_threshold(engine, clock):
    ticket = engine.register_turn("Ana")
    engine.cancel_turn(ticket.id)
    clock.advance(minutes=10)

    assert engine.prune_older_than(timedelta(minutes=10)) == 0
    clock.advance(milliseconds=1)
    assert engine.prune_older_than(timedelta(minutes=10)) == 1


def test_prune_never_reuses_ids(engine, clock):
    ticket = engine.register_turn("Ana")
    engine.attend_turn(ticket.id)
    clock.advance(days=2)
    engine.prune_older_than(timedelta(days=1))

    assert engine.register_turn("Luis").id == 2


def test_queues_only_reference_registered_tickets_after_prune(engine, clock):
    for index in range(6):
        ticket = engine.register_turn(f"c{index}", "high" if index % 2 else "normal")
        if index % 3 == 0:
            engine.cancel_turn(ticket.id)
    clock.advance(days=1)
    engine.prune_older_than(timedelta(0))

    for tier in Priority:
        for ticket_id in engine.queue_ids(tier):
            ticket = engine.get_turn_by_id(ticket_id)
            assert ticket is not None
            assert ticket.priority == tier


def test_default_clock_produces_aware_timestamps():
    ticket = QueueEngine().register_turn("Ana")
    assert ticket.created_at.tzinfo is not None
    assert ticket.timestamp > 0


def test_registration_log_omits_customer_name(engine, caplog):
    with caplog.at_level(logging.INFO, logger="turnqueue.tickets.engine"):
        ticket = engine.register_turn("Ana Secret", "high")

    assert f"#{ticket.id}" in caplog.text
    assert "priority=high" in caplog.text
    assert "Ana Secret" not in caplog.text
