"""
Sequential and parallel dispatch of independent pipeline runs.

Both the exhauster and the power simulator reduce to "call one function for
every unit and keep the results in unit order". Units share nothing but
read-only arguments, so they may run in joblib worker processes; results
are always collected in submission order, never in completion order.
"""

import warnings
from typing import Any, Callable, Iterable, List, Optional, Tuple

from ..progress import AnalysisCancelled
from .errors import RDFAnalysisError


def _check_cancel(cancel_check: Optional[Callable[[], bool]], completed: int):
    if cancel_check is not None and cancel_check():
        raise AnalysisCancelled(f"Analysis cancelled by user after {completed} runs", completed=completed)


class _UnitFailure:
    """Exception raised by a unit inside a worker, carried back to the parent."""

    def __init__(self, exc: BaseException):
        self.exc = exc


def _call_guarded(func, args):
    try:
        return func(*args)
    except Exception as exc:
        return _UnitFailure(exc)


def _run_sequential(func, units, progress, cancel_check) -> List[Any]:
    results = []
    for args in units:
        _check_cancel(cancel_check, len(results))
        results.append(func(*args))
        if progress is not None:
            progress.advance(1)
    return results


def run_units(
    func: Callable[..., Any],
    units: Iterable[Tuple[Any, ...]],
    n_jobs: int = 1,
    progress=None,
    cancel_check: Optional[Callable[[], bool]] = None,
) -> List[Any]:
    """Apply ``func(*args)`` to every unit and return results in unit order.

    Args:
        func: Unit function. Must be picklable when ``n_jobs > 1``.
        units: Argument tuples, one per unit.
        n_jobs: Number of worker processes. ``1`` runs in-process.
        progress: Optional ``ProgressReporter`` (advanced by 1 per unit).
        cancel_check: Optional callable returning ``True`` to abort.

    An exception raised by a unit propagates unchanged, from workers too.
    Only a failure of the worker pool itself falls back to sequential
    execution.

    Raises:
        AnalysisCancelled: If *cancel_check* fires.
    """
    if n_jobs == 1:
        return _run_sequential(func, units, progress, cancel_check)

    from joblib import Parallel, delayed

    units = list(units)
    results = []
    try:
        outputs = Parallel(
            n_jobs=n_jobs,
            backend="loky",
            verbose=0,
            return_as="generator",
        )(delayed(_call_guarded)(func, args) for args in units)
        for result in outputs:
            _check_cancel(cancel_check, len(results))
            if isinstance(result, _UnitFailure):
                break
            results.append(result)
            if progress is not None:
                progress.advance(1)
        else:
            return results
    except (AnalysisCancelled, RDFAnalysisError):
        raise
    except Exception as e:
        warnings.warn(f"Parallel execution failed ({e}). Falling back to sequential.", stacklevel=3)
        if progress is not None:
            progress.start()
        return _run_sequential(func, units, progress, cancel_check)

    # first unit error, in unit order
    raise result.exc
