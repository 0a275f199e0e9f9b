# core/parallel.py
from __future__ import annotations
import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Callable, List, Optional
import numpy as np

from dense.errors import WorkerPoolError

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 48


class SerialExecutor:
    """In-thread reduction. Reference behaviour for the pooled variant."""

    def map_indices(self, fn: Callable[[int], float], n: int) -> np.ndarray:
        out = np.zeros(n, dtype=np.float64)
        for i in range(n):
            out[i] = fn(i)
        return out

    def close(self) -> None:
        pass

    def __enter__(self) -> "SerialExecutor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        pass

    def __repr__(self) -> str:
        return "SerialExecutor()"


class WorkerPool:
    """
    Fixed-width thread pool owned by the training driver and handed to
    Layer.propagate_error. Each index is one unit of work; the caller blocks
    until every unit has finished and results are assembled by index, so the
    output never depends on completion order.

    `timeout` is one deadline for the whole call, not per unit. On expiry the
    queued units are cancelled and WorkerPoolError is raised; units already
    running cannot be cancelled and finish in the background. When a unit
    raises, queued units are cancelled, running ones are waited on (bounded
    by the same timeout), and the first failure by index is re-raised.

    Once closed, map_indices degrades to serial execution and logs a warning.
    """

    def __init__(self, max_workers: int = DEFAULT_MAX_WORKERS, timeout: Optional[float] = None,
                 name: str = "COMPUTE"):
        if max_workers <= 0:
            raise ValueError(f"max_workers must be positive, got {max_workers}")
        self.max_workers = int(max_workers)
        self.timeout = timeout
        self.name = name
        self._pool: Optional[ThreadPoolExecutor] = ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix=name
        )
        self._fallback = SerialExecutor()
        logger.debug("Started worker pool %s with %d workers", name, self.max_workers)

    @property
    def closed(self) -> bool:
        return self._pool is None

    def map_indices(self, fn: Callable[[int], float], n: int) -> np.ndarray:
        pool = self._pool
        if pool is None:
            logger.warning("Worker pool %s is closed; running %d units serially", self.name, n)
            return self._fallback.map_indices(fn, n)
        try:
            jobs = [pool.submit(fn, i) for i in range(n)]
        except RuntimeError:
            # executor shut down underneath us
            logger.warning("Worker pool %s refused work; running %d units serially", self.name, n)
            return self._fallback.map_indices(fn, n)

        done, pending = wait(jobs, timeout=self.timeout, return_when=FIRST_EXCEPTION)
        if any(self._failed(job) for job in done):
            self._cancel(jobs)
            # drain units already running so none outlives the call
            wait(jobs, timeout=self.timeout)
            next(job for job in jobs if self._failed(job)).result()
        if pending:
            self._cancel(jobs)
            raise WorkerPoolError(
                f"{len(pending)} of {n} units in pool {self.name} did not finish within {self.timeout}s"
            )
        if any(job.cancelled() for job in jobs):
            raise WorkerPoolError(f"Units in pool {self.name} were cancelled")

        out = np.zeros(n, dtype=np.float64)
        for i, job in enumerate(jobs):
            out[i] = job.result()
        return out

    @staticmethod
    def _failed(job) -> bool:
        return job.done() and not job.cancelled() and job.exception() is not None

    @staticmethod
    def _cancel(jobs: List) -> None:
        for job in jobs:
            job.cancel()

    def close(self) -> None:
        if self._pool is None:
            return
        self._pool.shutdown(wait=True)
        self._pool = None
        logger.debug("Worker pool %s shut down", self.name)

    def __enter__(self) -> "WorkerPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"WorkerPool(name={self.name!r}, max_workers={self.max_workers}, {state})"


def make_executor(parallel: bool, max_workers: int = DEFAULT_MAX_WORKERS,
                  timeout: Optional[float] = None):
    """SerialExecutor or a fresh WorkerPool, per the config switch."""
    if parallel:
        return WorkerPool(max_workers=max_workers, timeout=timeout)
    return SerialExecutor()
