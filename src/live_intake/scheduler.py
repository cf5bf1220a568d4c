"""Live trade intake: recurring task scheduler.

Each ``RecurringTask`` owns a timer thread that sleeps on its own
cancellation event and hands the callback to a shared worker pool. The
next delay starts only once the previous run has finished (fixed delay).

Submission and cancellation share a per-task lock: once ``cancel()``
returns, the task cannot submit another run. A run already in flight
is left to complete.
"""

import logging
import threading
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

TaskSpec = Tuple[Callable[[], object], float]


class RecurringTask:
    """A callback fired every ``interval_seconds`` on a shared executor."""

    def __init__(
        self,
        name: str,
        func: Callable[[], object],
        interval_seconds: float,
        executor: ThreadPoolExecutor,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self.name = name
        self.func = func
        self.interval_seconds = interval_seconds
        self.run_count = 0
        self.failure_count = 0
        self._executor = executor
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._loop, daemon=True, name=f"{self.name}-timer"
        )
        self._thread.start()
        logger.info("Started task '%s' (every %.3fs)", self.name, self.interval_seconds)

    def cancel(self) -> None:
        """Stop future firings immediately; does not wait for an in-flight run."""
        with self._lock:
            self._cancelled.set()
        logger.info("Cancelled task '%s'", self.name)

    def _loop(self) -> None:
        while not self._cancelled.wait(self.interval_seconds):
            future = self._submit()
            if future is None:
                return
            try:
                future.result()
            except CancelledError:
                return

    def _submit(self) -> Optional[Future]:
        with self._lock:
            if self._cancelled.is_set():
                return None
            try:
                return self._executor.submit(self._invoke)
            except RuntimeError:
                # Executor shut down underneath us
                self._cancelled.set()
                return None

    def _invoke(self) -> None:
        try:
            self.func()
            self.run_count += 1
        except Exception:
            self.failure_count += 1
            logger.exception("Scheduled task '%s' failed", self.name)


class IntakeScheduler:
    """Owns the worker pool and the set of recurring tasks."""

    def __init__(self, pool_size: int = 5, thread_name_prefix: str = "live-trade-") -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=pool_size, thread_name_prefix=thread_name_prefix
        )
        self._tasks: Dict[str, RecurringTask] = {}
        self._lock = threading.Lock()
        self._shut_down = False

    # ── Task management ──────────────────────────────────────────────

    def replace(self, specs: Dict[str, TaskSpec]) -> None:
        """Cancel every task, then start *specs* as the new set, atomically."""
        with self._lock:
            if self._shut_down:
                raise RuntimeError("Scheduler has been shut down")
            self._cancel_all_locked()
            for name, (func, interval) in specs.items():
                task = RecurringTask(name, func, interval, self._executor)
                self._tasks[name] = task
                task.start()

    def cancel_all(self) -> None:
        with self._lock:
            self._cancel_all_locked()

    def _cancel_all_locked(self) -> None:
        for task in self._tasks.values():
            task.cancel()
        self._tasks.clear()

    def shutdown(self, wait: bool = True) -> None:
        """Cancel all tasks and stop the pool; in-flight runs complete."""
        with self._lock:
            self._cancel_all_locked()
            self._shut_down = True
        self._executor.shutdown(wait=wait, cancel_futures=True)
        logger.info("Intake scheduler shut down")

    # ── Accessors ────────────────────────────────────────────────────

    def get_task(self, name: str) -> Optional[RecurringTask]:
        return self._tasks.get(name)

    @property
    def active_tasks(self) -> List[str]:
        with self._lock:
            return sorted(self._tasks)
