"""Delayed work queue for enrichment jobs."""

from __future__ import annotations

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Optional, Protocol

from fep.utils.logging import get_logger


logger = get_logger(__name__)


class EnrichmentQueue(Protocol):
    def enqueue(self, event_id: int, delay_seconds: float = 0.0) -> None:
        """Schedule event_id to be handled no earlier than delay_seconds from now."""

    def join(self) -> None:
        """Block until every enqueued item has been handled."""


class WorkerPoolQueue:
    """Thread pool consumer; each item waits for its not-before time in the worker."""

    def __init__(
        self,
        handler: Callable[[int], Any],
        workers: int = 2,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.handler = handler
        self.sleep = sleep
        self.clock = clock
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, workers), thread_name_prefix="enrich"
        )
        self._lock = threading.Lock()
        self._pending: list[Future] = []

    def enqueue(self, event_id: int, delay_seconds: float = 0.0) -> None:
        not_before = self.clock() + max(0.0, delay_seconds)
        future = self._executor.submit(self._run, event_id, not_before)
        with self._lock:
            self._pending.append(future)
        logger.debug("queue.enqueued event_id=%s delay=%s", event_id, delay_seconds)

    def _run(self, event_id: int, not_before: float) -> None:
        remaining = not_before - self.clock()
        if remaining > 0:
            self.sleep(remaining)
        try:
            self.handler(event_id)
        except Exception:
            logger.exception("queue.handler_failed event_id=%s", event_id)

    def join(self) -> None:
        with self._lock:
            pending, self._pending = self._pending, []
        if pending:
            wait(pending)

    def shutdown(self) -> None:
        self.join()
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "WorkerPoolQueue":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()


class StaggeredDispatcher:
    """Space consecutive dispatches by a fixed interval to bound the AI request rate."""

    def __init__(self, queue: EnrichmentQueue, interval_seconds: float = 3.0) -> None:
        self.queue = queue
        self.interval_seconds = interval_seconds
        self._lock = threading.Lock()
        self._count = 0

    def dispatch(self, event_id: int) -> float:
        with self._lock:
            delay = self._count * self.interval_seconds
            self._count += 1
        self.queue.enqueue(event_id, delay)
        return delay

    __call__ = dispatch


class RecordingQueue:
    """Queue that only remembers what was enqueued, for dry runs."""

    def __init__(self) -> None:
        self.items: list[tuple[int, float]] = []

    def enqueue(self, event_id: int, delay_seconds: float = 0.0) -> None:
        self.items.append((event_id, delay_seconds))
        logger.info("queue.dry_run event_id=%s delay=%s", event_id, delay_seconds)

    def join(self) -> None:
        return None
