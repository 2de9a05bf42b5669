"""Fire-and-forget job execution.

Two connections are available, selected with QUEUE_CONNECTION:
- "thread": jobs run on a small worker pool, `enqueue` returns immediately
- "sync": jobs run inline inside `enqueue` (tests, single-process debugging)

Each enqueue is attempted exactly once. A job that raises is logged and
dropped; the error never reaches the code that enqueued it.
"""

import os
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

QUEUE_CONNECTION = os.getenv("QUEUE_CONNECTION", "thread").lower()
QUEUE_WORKERS = int(os.getenv("QUEUE_WORKERS", "2"))


def _job_name(func: Callable[..., Any]) -> str:
    return getattr(func, "__qualname__", None) or type(func).__name__


def _run_job(func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
    try:
        func(*args, **kwargs)
    except Exception:
        logger.exception(f"Job {_job_name(func)} failed")


class JobQueue:
    """Worker pool backed queue.

    The pool is created on the first enqueue, so building a queue (and the
    module-level app that owns one) starts no threads.
    """

    def __init__(self, max_workers: Optional[int] = None):
        self.max_workers = max_workers or QUEUE_WORKERS
        self._executor: Optional[ThreadPoolExecutor] = None
        self._closed = False
        self._lock = threading.Lock()

    @property
    def started(self) -> bool:
        return self._executor is not None

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._closed:
                raise RuntimeError("cannot enqueue a job after shutdown")
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers,
                    thread_name_prefix="userapi-job",
                )
            return self._executor

    def enqueue(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        """Submit a job and return without waiting for it."""
        executor = self._get_executor()
        logger.debug(f"Enqueued job {_job_name(func)}")
        return executor.submit(_run_job, func, *args, **kwargs)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting jobs; with wait=True, let queued jobs finish first."""
        with self._lock:
            self._closed = True
            executor = self._executor
        if executor is not None:
            executor.shutdown(wait=wait)


class SyncJobQueue:
    """Runs each job inline, in the caller's thread."""

    def enqueue(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        logger.debug(f"Running job {_job_name(func)} inline")
        _run_job(func, *args, **kwargs)

    def shutdown(self, wait: bool = True) -> None:
        return None


def build_job_queue(connection: Optional[str] = None):
    """Create the queue for a connection name ("thread" or "sync")."""
    connection = (connection or QUEUE_CONNECTION).lower()
    if connection == "sync":
        return SyncJobQueue()
    if connection == "thread":
        return JobQueue()
    raise ValueError(f"Unknown QUEUE_CONNECTION {connection!r}; expected 'thread' or 'sync'")
