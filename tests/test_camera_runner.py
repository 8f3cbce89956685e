"""Tests for the bounded task runner."""

import asyncio

import pytest

from core.camera import run_bounded


async def settle(rounds: int = 20) -> None:
    """Let pending callbacks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class Tracker:
    """Records how many tasks run at the same time."""

    def __init__(self):
        self.in_flight = 0
        self.max_in_flight = 0
        self.started = []
        self.finished = []

    def make_task(self, index: int, delay: float = 0):
        async def task():
            self.started.append(index)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            await asyncio.sleep(delay)
            self.in_flight -= 1
            self.finished.append(index)

        return task


class TestRunBounded:
    """Tests for run_bounded."""

    @pytest.mark.asyncio
    async def test_every_task_runs_once(self):
        tracker = Tracker()
        tasks = [tracker.make_task(i, delay=0.001 * (i % 3)) for i in range(10)]

        await run_bounded(tasks, 3)

        assert sorted(tracker.started) == list(range(10))
        assert sorted(tracker.finished) == list(range(10))

    @pytest.mark.asyncio
    async def test_concurrency_ceiling(self):
        tracker = Tracker()
        tasks = [tracker.make_task(i, delay=0.001) for i in range(12)]

        await run_bounded(tasks, 3)

        assert tracker.max_in_flight == 3

    @pytest.mark.asyncio
    async def test_claims_in_index_order(self):
        """Tasks are claimed in list order."""
        tracker = Tracker()
        tasks = [tracker.make_task(i) for i in range(6)]

        await run_bounded(tasks, 2)

        assert tracker.started == list(range(6))

    @pytest.mark.asyncio
    async def test_next_task_waits_for_a_free_slot(self):
        gates = [asyncio.Event() for _ in range(4)]
        started = []

        def make(index):
            async def task():
                started.append(index)
                await gates[index].wait()
            return task

        runner = asyncio.create_task(run_bounded([make(i) for i in range(4)], 3))
        await settle()
        assert started == [0, 1, 2]

        gates[1].set()
        await settle()
        assert started == [0, 1, 2, 3]

        for gate in gates:
            gate.set()
        await runner

    @pytest.mark.asyncio
    async def test_empty_task_list(self):
        await run_bounded([], 3)

    @pytest.mark.asyncio
    async def test_non_positive_concurrency_uses_one_worker(self):
        tracker = Tracker()
        tasks = [tracker.make_task(i, delay=0.001) for i in range(4)]

        await run_bounded(tasks, 0)

        assert tracker.max_in_flight == 1
        assert tracker.finished == [0, 1, 2, 3]

    @pytest.mark.asyncio
    async def test_more_workers_than_tasks(self):
        tracker = Tracker()

        await run_bounded([tracker.make_task(0), tracker.make_task(1)], 5)

        assert sorted(tracker.finished) == [0, 1]
