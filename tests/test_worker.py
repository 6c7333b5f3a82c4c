import asyncio
from datetime import date

import pytest

from streamhub.modules.subscriptions.models import SubscriptionStatus
from streamhub.modules.worker.runner import Worker


async def test_expire_job_runs_in_its_own_session(db, session_factory, make_user, make_plan, make_subscription):
    sub = await make_subscription(await make_user(), await make_plan(duration_days=30), start_date=date(2026, 1, 1))
    worker = Worker(session_factory=session_factory, sweep_interval_seconds=0)

    result = await worker.run_job("expire_subscriptions", today=date(2026, 3, 1))

    assert result.expired_ids == [sub.id]
    await db.refresh(sub)
    assert sub.status == SubscriptionStatus.EXPIRED


async def test_queued_jobs_are_processed(session_factory, make_user, make_plan, make_subscription):
    await make_subscription(await make_user(), await make_plan(duration_days=30), start_date=date(2026, 1, 1))
    worker = Worker(session_factory=session_factory, sweep_interval_seconds=0)
    await worker.start()
    try:
        await worker.enqueue_job("expire_subscriptions", today=date(2026, 3, 1))
        await asyncio.wait_for(worker.queue.join(), timeout=5)
    finally:
        await worker.stop()

    assert worker.is_running is False


async def test_failing_job_does_not_stop_the_loop(session_factory, monkeypatch):
    from streamhub.modules.worker import runner

    calls = []

    async def flaky(db, **kwargs):
        calls.append(kwargs)
        if len(calls) == 1:
            raise RuntimeError("boom")

    monkeypatch.setitem(runner.JOBS, "expire_subscriptions", flaky)
    worker = Worker(session_factory=session_factory, sweep_interval_seconds=0)
    await worker.start()
    try:
        await worker.enqueue_job("expire_subscriptions")
        await worker.enqueue_job("expire_subscriptions")
        await asyncio.wait_for(worker.queue.join(), timeout=5)
    finally:
        await worker.stop()

    assert len(calls) == 2


async def test_unknown_job_is_refused(session_factory):
    worker = Worker(session_factory=session_factory, sweep_interval_seconds=0)
    with pytest.raises(ValueError):
        await worker.enqueue_job("transcode")
