import asyncio
import logging
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from turnqueue.tickets import RetentionScheduler


def test_run_once_prunes_with_configured_age(service, clock):
    ticket = service.register("Ana").value
    service.cancel(ticket.id)
    clock.advance(hours=25)

    scheduler = RetentionScheduler(service, max_age=timedelta(hours=24), interval=60)

    assert scheduler.run_once() == 1
    assert service.list_all() == []


def test_rejects_non_positive_interval(service):
    with pytest.raises(ValueError):
        RetentionScheduler(service, max_age=timedelta(hours=1), interval=0)


@pytest.mark.asyncio
async def test_background_loop_prunes_until_stopped():
    service = MagicMock()
    service.prune.return_value = 0
    scheduler = RetentionScheduler(service, max_age=timedelta(seconds=2), interval=0.01)

    scheduler.start()
    assert scheduler.running
    await asyncio.sleep(0.1)
    await scheduler.stop()

    assert not scheduler.running
    assert service.prune.call_count >= 1
    service.prune.assert_called_with(2_000)


@pytest.mark.asyncio
async def test_loop_survives_failing_sweeps(caplog):
    service = MagicMock()
    calls = []

    def prune(max_age_millis):
        calls.append(max_age_millis)
        if len(calls) == 1:
            raise RuntimeError("boom")
        return 0

    service.prune.side_effect = prune
    scheduler = RetentionScheduler(service, max_age=timedelta(minutes=1), interval=0.01)

    with caplog.at_level(logging.ERROR):
        scheduler.start()
        await asyncio.sleep(0.1)
        await scheduler.stop()

    assert service.prune.call_count >= 2
    assert "Retention sweep failed" in caplog.text


@pytest.mark.asyncio
async def test_stop_without_start_is_a_noop(service):
    scheduler = RetentionScheduler(service, max_age=timedelta(minutes=1), interval=1)
    await scheduler.stop()
    assert not scheduler.running
