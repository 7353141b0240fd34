"""
Per-fit wall-clock timing.

The backend wraps each stage of a fit (decomposition, triangular solve,
residuals, covariance) in a named section; the collected durations are
returned as Result.timing.
"""

import time
from contextlib import contextmanager
from typing import Iterator


class Timer:
    """
    Wall-clock timer for one fit, broken down by stage.

    Usage:
        timer = Timer()
        timer.start()
        with timer.section('qr_decomposition'):
            qr_result = qr_cpu(X)
        timer.stop()
        timer.result()   # {'total_seconds': ..., 'qr_decomposition': ...}

    Re-entering a section name adds to its previous duration.
    """

    def __init__(self):
        self._began: float | None = None
        self._elapsed: float | None = None
        self._stages: dict[str, float] = {}

    def start(self) -> None:
        self._began = time.perf_counter()
        self._elapsed = None

    def stop(self) -> None:
        if self._began is None:
            raise RuntimeError("Timer.stop() called before start()")
        self._elapsed = time.perf_counter() - self._began

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """Record the duration of the enclosed block under ``name``."""
        entered = time.perf_counter()
        try:
            yield
        finally:
            spent = time.perf_counter() - entered
            self._stages[name] = self._stages.get(name, 0.0) + spent

    def result(self) -> dict[str, float]:
        """
        Total and per-stage durations in seconds.

        Raises:
            RuntimeError: If the timer has not been stopped
        """
        if self._elapsed is None:
            raise RuntimeError("Timer.result() called before stop()")
        return {'total_seconds': self._elapsed, **self._stages}


@contextmanager
def timed() -> Iterator[Timer]:
    """Time a block of caller code: ``with timed() as t: fit(X, y)``."""
    timer = Timer()
    timer.start()
    try:
        yield timer
    finally:
        timer.stop()
