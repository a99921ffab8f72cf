"""
Spawner Tests for the Job Engine.

- ThreadSpawner runs each unit on its own thread
- WorkerPoolSpawner bounds concurrency
- join() waits, never cancels
- Exceptions from spawned work are logged, not raised
"""

import threading
import time
from unittest.mock import patch

import pytest

from src.engine import ThreadSpawner, WorkerPoolSpawner


@pytest.fixture(params=["thread", "pool"])
def any_spawner(request):
    if request.param == "thread":
        spawner = ThreadSpawner()
    else:
        spawner = WorkerPoolSpawner(max_workers=2)
    yield spawner
    spawner.shutdown(wait=True)


class TestSpawnerContract:

    def test_runs_all_targets(self, any_spawner):
        done = []
        lock = threading.Lock()

        def work(i):
            with lock:
                done.append(i)

        for i in range(10):
            any_spawner.spawn(f"w{i}", lambda i=i: work(i))

        assert any_spawner.join(timeout=5)
        assert sorted(done) == list(range(10))
        assert any_spawner.active_count == 0

    def test_join_times_out_while_blocked(self, any_spawner):
        release = threading.Event()
        any_spawner.spawn("blocked", lambda: release.wait(5))

        assert any_spawner.join(timeout=0.05) is False
        assert any_spawner.active_count == 1

        release.set()
        assert any_spawner.join(timeout=5)

    def test_join_with_nothing_spawned(self, any_spawner):
        assert any_spawner.join(timeout=0.01)

    def test_exception_is_logged_not_raised(self, any_spawner, caplog):
        def crash():
            raise RuntimeError("worker blew up")

        any_spawner.spawn("crasher", crash)
        assert any_spawner.join(timeout=5)

        assert "Background work 'crasher' crashed" in caplog.text


class TestThreadSpawner:

    def test_thread_names_carry_job_name(self):
        spawner = ThreadSpawner()
        names = []

        spawner.spawn("abc", lambda: names.append(threading.current_thread().name))
        spawner.join(timeout=5)

        assert names == ["job-abc"]

    def test_threads_are_not_bounded(self):
        spawner = ThreadSpawner()
        release = threading.Event()

        for i in range(5):
            spawner.spawn(f"w{i}", lambda: release.wait(5))

        assert spawner.active_count == 5
        release.set()
        assert spawner.join(timeout=5)

    def test_join_during_slow_start_is_not_idle(self):
        """join() racing a spawn() must not report idle before the thread runs."""
        spawner = ThreadSpawner()
        release = threading.Event()
        starting = threading.Event()
        original_start = threading.Thread.start

        def slow_start(thread):
            if thread.name.startswith("job-"):
                starting.set()
                time.sleep(0.1)
            original_start(thread)

        with patch.object(threading.Thread, "start", slow_start):
            submitter = threading.Thread(
                target=lambda: spawner.spawn("slow", lambda: release.wait(5))
            )
            submitter.start()
            assert starting.wait(5)

            idle = spawner.join(timeout=0.01)
            submitter.join(5)

        release.set()
        assert spawner.join(timeout=5)
        assert idle is False


class TestWorkerPoolSpawner:

    def test_invalid_worker_count(self):
        with pytest.raises(ValueError):
            WorkerPoolSpawner(max_workers=0)

    def test_concurrency_is_bounded(self):
        spawner = WorkerPoolSpawner(max_workers=2)
        running = 0
        peak = 0
        lock = threading.Lock()

        def work():
            nonlocal running, peak
            with lock:
                running += 1
                peak = max(peak, running)
            time.sleep(0.02)
            with lock:
                running -= 1

        for i in range(6):
            spawner.spawn(f"w{i}", work)

        assert spawner.join(timeout=5)
        spawner.shutdown(wait=True)
        assert peak <= 2
