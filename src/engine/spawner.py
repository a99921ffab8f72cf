"""
Task spawners for the job engine.

A spawner starts the attempt loop of a job in the background and
returns immediately. Spawned work is never cancelled; join() only
waits for it.

- ThreadSpawner: one daemon thread per job, no upper bound
- WorkerPoolSpawner: bounded thread pool, excess jobs wait their turn
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, Optional


logger = logging.getLogger(__name__)


class TaskSpawner(ABC):
    """Starts background work and tracks it until it finishes."""

    @abstractmethod
    def spawn(self, name: str, target: Callable[[], None]) -> None:
        """
        Run target in the background.

        Args:
            name: Label for the unit of work (used in thread names and logs)
            target: Callable to run; its exceptions are logged, never raised
        """
        ...

    @abstractmethod
    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for all spawned work to finish.

        Returns:
            True if nothing is left running, False on timeout
        """
        ...

    def shutdown(self, wait: bool = True) -> None:
        """Release spawner resources. Running work is not cancelled."""
        if wait:
            self.join()

    @property
    @abstractmethod
    def active_count(self) -> int:
        """Number of spawned units that have not finished yet."""
        ...


def _guarded(name: str, target: Callable[[], None]) -> Callable[[], None]:
    """Wrap target so that an escaping exception is logged, not lost."""

    def run() -> None:
        try:
            target()
        except Exception:
            logger.exception(f"Background work '{name}' crashed")

    return run


class ThreadSpawner(TaskSpawner):
    """
    Starts one daemon thread per spawn() call.

    No admission control: every enqueued job gets its own thread
    immediately.
    """

    def __init__(self):
        self._threads: list[threading.Thread] = []
        self._lock = threading.Lock()

    def spawn(self, name: str, target: Callable[[], None]) -> None:
        thread = threading.Thread(
            target=_guarded(name, target),
            name=f"job-{name}",
            daemon=True,
        )
        # Started under the lock so join() never sees a registered, unstarted thread
        with self._lock:
            self._threads = [t for t in self._threads if t.is_alive()]
            thread.start()
            self._threads.append(thread)

    def join(self, timeout: Optional[float] = None) -> bool:
        deadline = None if timeout is None else time.monotonic() + timeout

        while True:
            with self._lock:
                pending = [t for t in self._threads if t.is_alive()]
            if not pending:
                return True

            for thread in pending:
                remaining = None
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        return False
                thread.join(remaining)

    @property
    def active_count(self) -> int:
        with self._lock:
            return sum(1 for t in self._threads if t.is_alive())


class WorkerPoolSpawner(TaskSpawner):
    """
    Runs spawned work on a fixed-size ThreadPoolExecutor.

    Work submitted while all workers are busy waits in the pool queue;
    the job stays pending until a worker picks it up.
    """

    def __init__(self, max_workers: int):
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.max_workers = max_workers
        self._pool = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="job-worker",
        )
        self._futures: set[Future] = set()
        self._lock = threading.Lock()

    def spawn(self, name: str, target: Callable[[], None]) -> None:
        future = self._pool.submit(_guarded(name, target))
        with self._lock:
            self._futures.add(future)
        future.add_done_callback(self._discard)

    def _discard(self, future: Future) -> None:
        with self._lock:
            self._futures.discard(future)

    def join(self, timeout: Optional[float] = None) -> bool:
        with self._lock:
            pending = set(self._futures)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    @property
    def active_count(self) -> int:
        # Done callbacks may lag behind wait(); count by future state
        with self._lock:
            return sum(1 for f in self._futures if not f.done())
