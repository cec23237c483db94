"""Tests for the per-target ActorLock."""

import asyncio

import pytest

from autocover.scheduling import ActorLock


@pytest.mark.asyncio
async def test_tasks_on_one_key_run_in_fifo_order_without_overlap():
    """CRITICAL: Same-key tasks never interleave and run in submission order.

    Why: Aggregate read-modify-write cycles for one target must not overlap.
    """
    lock = ActorLock()
    events = []

    def job(name):
        async def run():
            events.append(f"start {name}")
            await asyncio.sleep(0.01)
            events.append(f"end {name}")
            return name

        return run

    results = await asyncio.gather(*(lock.run_exclusive("goblin", job(n)) for n in "abc"))

    assert results == ["a", "b", "c"]
    assert events == ["start a", "end a", "start b", "end b", "start c", "end c"]
    assert len(lock) == 0


@pytest.mark.asyncio
async def test_different_keys_run_concurrently():
    lock = ActorLock()
    both_started = asyncio.Event()
    started = set()

    def job(key):
        async def run():
            started.add(key)
            if len(started) == 2:
                both_started.set()
            await asyncio.wait_for(both_started.wait(), timeout=1)

        return run

    await asyncio.gather(lock.run_exclusive("a", job("a")), lock.run_exclusive("b", job("b")))
    assert started == {"a", "b"}


@pytest.mark.asyncio
async def test_failure_does_not_block_later_tasks():
    """A failing task raises to its own caller and the queue keeps moving."""
    lock = ActorLock()

    async def boom():
        raise RuntimeError("boom")

    async def ok():
        return "ok"

    results = await asyncio.gather(
        lock.run_exclusive("goblin", boom),
        lock.run_exclusive("goblin", ok),
        return_exceptions=True,
    )

    assert isinstance(results[0], RuntimeError)
    assert results[1] == "ok"
    assert not lock.is_busy("goblin")


@pytest.mark.asyncio
async def test_cancelled_waiter_keeps_order():
    """Cancelling a queued task never lets its successor overtake the running one."""
    lock = ActorLock()
    gate = asyncio.Event()
    events = []

    async def first():
        events.append("first start")
        await gate.wait()
        events.append("first end")

    async def second():
        events.append("second")

    async def third():
        events.append("third")

    t1 = asyncio.ensure_future(lock.run_exclusive("k", first))
    await asyncio.sleep(0)
    t2 = asyncio.ensure_future(lock.run_exclusive("k", second))
    t3 = asyncio.ensure_future(lock.run_exclusive("k", third))
    await asyncio.sleep(0)

    t2.cancel()
    await asyncio.sleep(0.01)
    assert events == ["first start"]

    gate.set()
    await asyncio.gather(t1, t3)
    assert events == ["first start", "first end", "third"]
    assert t2.cancelled()
    assert len(lock) == 0


@pytest.mark.asyncio
async def test_is_busy_while_running():
    lock = ActorLock()
    observed = []

    async def run():
        observed.append(lock.is_busy("goblin"))

    await lock.run_exclusive("goblin", run)
    assert observed == [True]
    assert not lock.is_busy("goblin")
