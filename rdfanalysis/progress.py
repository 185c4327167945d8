"""
Progress reporting and cancellation for RDFAnalysis batches.

Exhaustion and power simulation are batches of independent pipeline runs.
A batch reports progress through a plain ``callback(current, total)`` so
that scripts, notebooks and GUIs can all hook in, and it can be stopped
between runs by a ``cancel_check()`` callable returning ``True``.
"""

import sys
import time
from typing import Callable, Optional, TextIO

ProgressCallback = Callable[[int, int], None]


class AnalysisCancelled(Exception):
    """Raised between runs when a batch's ``cancel_check`` fires.

    Attributes:
        completed: Runs finished before the batch stopped, if known.
    """

    def __init__(self, message: str = "Analysis cancelled", completed: Optional[int] = None):
        super().__init__(message)
        self.completed = completed


class ProgressReporter:
    """Counts the finished runs of one batch and forwards throttled updates.

    Can be used as a context manager: entering fires the initial ``0/total``
    update, leaving without an exception fires the final ``total/total``.

    Args:
        total: Number of runs in the batch.
        callback: Called as ``callback(current, total)``.
        update_every: Minimum number of runs between two updates. Defaults
            to about one update per percent of the batch.
    """

    def __init__(
        self,
        total: int,
        callback: ProgressCallback,
        update_every: Optional[int] = None,
    ):
        if total < 0:
            raise ValueError(f"total must be non-negative, got {total}")
        self.total = total
        self.callback = callback
        self.update_every = update_every if update_every is not None else max(1, total // 100)
        self.completed = 0
        self._last_reported = 0
        self._started_at: Optional[float] = None

    def start(self):
        """Reset the counter and report ``0/total``."""
        self.completed = 0
        self._started_at = time.monotonic()
        self._report()

    def advance(self, n: int = 1):
        """Record *n* finished runs; report when due or when the batch is done."""
        self.completed += n
        if self.completed >= self.total or self.completed - self._last_reported >= self.update_every:
            self._report()

    def finish(self):
        """Report ``total/total`` unless that was the last update sent."""
        if self._last_reported != self.total or self.completed != self.total:
            self.completed = self.total
            self._report()

    @property
    def elapsed(self) -> float:
        """Seconds since ``start()`` (0 if never started)."""
        return 0.0 if self._started_at is None else time.monotonic() - self._started_at

    def _report(self):
        self._last_reported = self.completed
        self.callback(self.completed, self.total)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.finish()
        return False


class PrintReporter:
    """One-line console progress bar written to stderr.

    Renders as ``Exhaustion [######------]  50.0% (9/18 runs, 4s left)``.

    Args:
        label: Text in front of the bar.
        width: Number of bar characters.
        stream: Output stream; ``sys.stderr`` when ``None``.
    """

    def __init__(self, label: str = "Progress", width: int = 30, stream: Optional[TextIO] = None):
        self.label = label
        self.width = width
        self.stream = stream
        self._t0: Optional[float] = None

    def __call__(self, current: int, total: int):
        if total <= 0:
            return
        stream = self.stream if self.stream is not None else sys.stderr
        now = time.monotonic()
        if current == 0 or self._t0 is None:
            self._t0 = now

        filled = int(self.width * current / total)
        bar = "#" * filled + "-" * (self.width - filled)
        line = f"\r{self.label} [{bar}] {100.0 * current / total:5.1f}% ({current}/{total} runs"
        if 0 < current < total:
            remaining = (now - self._t0) / current * (total - current)
            line += f", {remaining:.0f}s left"
        stream.write(line + ")")

        if current >= total:
            stream.write("\n")
            self._t0 = None
        stream.flush()


class TqdmReporter:
    """Progress bar backed by ``tqdm`` (imported on first update).

    Usage::

        from rdfanalysis.progress import TqdmReporter
        analysis.set_progress(TqdmReporter(desc="protocols")).exhaust(df)
    """

    def __init__(self, **tqdm_kwargs):
        self._tqdm_kwargs = tqdm_kwargs
        self._bar = None

    def __call__(self, current: int, total: int):
        from tqdm import tqdm

        if self._bar is None:
            self._bar = tqdm(total=total, unit="run", **self._tqdm_kwargs)

        if current > self._bar.n:
            self._bar.update(current - self._bar.n)

        if current >= total:
            self._bar.close()
            self._bar = None


def cancel_after(seconds: float) -> Callable[[], bool]:
    """Build a ``cancel_check`` that fires once *seconds* have elapsed."""
    deadline = time.monotonic() + seconds
    return lambda: time.monotonic() >= deadline


def compute_total_runs(
    n_protocols: int = 1,
    n_parameter_sets: int = 1,
    replications: int = 1,
) -> int:
    """Number of pipeline runs in a batch.

    An exhaustion runs every protocol once; a power simulation runs one
    protocol ``replications`` times per parameter combination.
    """
    return n_protocols * n_parameter_sets * replications
