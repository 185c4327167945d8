"""
Exhaustive execution of a design over its whole choice space.
"""

from typing import Any, Callable, Dict, Mapping, Optional

import pandas as pd

from .design import Design
from .dispatch import run_units
from .enumeration import enumerate_protocols
from .errors import StepRuntimeError
from .executor import run_protocol
from .results import build_table, failure_record, flatten_result


def _exhaust_unit(design: Design, data: Any, protocol) -> Dict[str, Any]:
    """Run one protocol, turning a step failure into a failure record."""
    try:
        result = run_protocol(design, data, protocol)
    except StepRuntimeError as exc:
        return failure_record(exc)
    return flatten_result(result.data)


def exhaust(
    design: Design,
    data: Any,
    fixed: Optional[Mapping[str, Any]] = None,
    n_jobs: int = 1,
    progress=None,
    cancel_check: Optional[Callable[[], bool]] = None,
) -> pd.DataFrame:
    """Run *design* on *data* once for every protocol in its choice space.

    Each protocol contributes one row: its choice values followed by the
    flattened result fields. A protocol whose run raises
    ``StepRuntimeError`` still gets a row, with ``error_kind`` and
    ``error_message`` set and no result fields, and the batch carries on.

    Args:
        design: The pipeline to exhaust.
        data: Input shared (read-only) by every run.
        fixed: Optional ``{choice: value}`` restricting the space.
        n_jobs: Worker processes for parallel execution.
        progress: Optional ``ProgressReporter``.
        cancel_check: Optional callable returning ``True`` to abort.

    Returns:
        DataFrame indexed by enumeration position (``protocol_id``). Row
        order follows the enumeration order whatever ``n_jobs`` is.

    Raises:
        DesignSpaceError: If the choice space cannot be enumerated; raised
            before any run.
        InvalidChoiceError: If an enumerated protocol is rejected by a step
            (an internal fault, so the batch stops).
    """
    space = enumerate_protocols(design, fixed)

    protocols = list(space)
    outcomes = run_units(
        _exhaust_unit,
        ((design, data, p) for p in protocols),
        n_jobs=n_jobs,
        progress=progress,
        cancel_check=cancel_check,
    )

    leading = [design.protocol_record(p) for p in protocols]
    return build_table(leading, outcomes, space.columns, index_name="protocol_id")
