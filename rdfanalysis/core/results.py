"""
Results processing for RDFAnalysis.

This module flattens step outputs into table rows, assembles exhaustion and
power-sample tables, and summarises power samples into power estimates.
"""

import dataclasses
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

ERROR_KIND = "error_kind"
ERROR_MESSAGE = "error_message"
ERROR_COLUMNS = (ERROR_KIND, ERROR_MESSAGE)


def flatten_result(data: Any) -> Dict[str, Any]:
    """Turn a pipeline output into a flat ``{field: value}`` record.

    - ``None`` gives no fields.
    - A one-row ``DataFrame`` or a ``Series`` gives one field per column.
    - A multi-row ``DataFrame`` gives ``<column>_<row>`` fields, row by row.
    - Mappings (nested ones joined with ``_``), dataclasses and named
      tuples give one field per key.
    - Arrays give ``value_<i>``; anything else a single ``value`` field.
    """
    if data is None:
        return {}
    if isinstance(data, pd.DataFrame):
        if len(data) == 1:
            return {str(col): _scalar(data[col].iloc[0]) for col in data.columns}
        return {f"{col}_{i}": _scalar(data[col].iloc[i]) for i in range(len(data)) for col in data.columns}
    if isinstance(data, pd.Series):
        return {str(k): _scalar(v) for k, v in data.items()}
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        return flatten_result(dataclasses.asdict(data))
    if hasattr(data, "_asdict"):
        return flatten_result(data._asdict())
    if isinstance(data, Mapping):
        record: Dict[str, Any] = {}
        for key, value in data.items():
            if isinstance(value, Mapping):
                for sub_key, sub_value in flatten_result(value).items():
                    record[f"{key}_{sub_key}"] = sub_value
            else:
                record[str(key)] = _scalar(value)
        return record
    if isinstance(data, np.ndarray):
        if data.ndim == 0:
            return {"value": data.item()}
        return {f"value_{i}": _scalar(v) for i, v in enumerate(data.ravel())}
    return {"value": data}


def _scalar(value: Any) -> Any:
    """Unwrap numpy scalars so table cells hold plain Python values."""
    if isinstance(value, np.generic):
        return value.item()
    return value


def failure_record(exc) -> Dict[str, Any]:
    """Failure marker for a row whose pipeline run raised ``StepRuntimeError``."""
    return {ERROR_KIND: exc.kind, ERROR_MESSAGE: str(exc)}


def build_table(
    leading: List[Dict[str, Any]],
    outcomes: List[Dict[str, Any]],
    leading_columns: Sequence[str],
    index_name: str,
) -> pd.DataFrame:
    """Join per-row identifying fields with per-row outcomes.

    Columns are *leading_columns*, then the union of outcome fields in first
    seen order, then the two error columns. Outcome fields that clash with a
    leading column are prefixed ``result_``.
    """
    leading_set = set(leading_columns)
    data_columns: List[str] = []
    seen = set()
    rows = []
    for ident, outcome in zip(leading, outcomes):
        row = dict(ident)
        for key, value in outcome.items():
            if key not in ERROR_COLUMNS and key in leading_set:
                key = f"result_{key}"
            if key not in ERROR_COLUMNS and key not in seen:
                seen.add(key)
                data_columns.append(key)
            row[key] = value
        rows.append(row)

    columns = list(leading_columns) + data_columns + list(ERROR_COLUMNS)
    table = pd.DataFrame(rows, columns=columns)
    table.index.name = index_name
    return table


class ResultsProcessor:
    """Converts power-simulation samples into power estimates.

    A replication counts as significant when its confidence interval
    excludes ``null_value``. Power and coverage are reported as
    percentages of the successful replications.
    """

    def __init__(self, null_value: float = 0.0):
        """Initialise the results processor.

        Args:
            null_value: Effect size under the null hypothesis.
        """
        self.null_value = null_value

    def summarize_power(
        self,
        samples: pd.DataFrame,
        parameters: Optional[Sequence[str]] = None,
        estimate: str = "est",
        lower: str = "lb",
        upper: str = "ub",
        true_value: Union[str, float, None] = None,
        alpha: Optional[float] = None,
        p_value: str = "p_value",
    ) -> pd.DataFrame:
        """
        Summarise power samples per parameter combination.

        Args:
            samples: Output of ``simulate_power``.
            parameters: Parameter columns to group by. Defaults to the ones
                recorded by ``simulate_power`` in ``samples.attrs``.
            estimate: Column holding the point estimate.
            lower: Column holding the lower interval bound.
            upper: Column holding the upper interval bound.
            true_value: Generating effect, as a number or the name of a
                parameter column. Enables the ``bias`` and ``coverage``
                columns.
            alpha: When given and the samples carry a *p_value* column, a
                replication is significant when its p-value is below
                *alpha* instead of when its interval excludes the null.
            p_value: Column holding the p-value.

        Returns:
            One row per parameter combination with ``n_runs``, ``n_failed``,
            ``mean_estimate``, ``sd_estimate``, ``power`` and optionally
            ``bias`` and ``coverage``.

        Raises:
            KeyError: If a result column is missing while some runs
                succeeded. When every run failed the result columns are
                taken as NaN.
        """
        if parameters is None:
            parameters = samples.attrs.get("parameters", [])
        parameters = list(parameters)

        missing = [col for col in (estimate, lower, upper) if col not in samples.columns]
        if missing and ERROR_KIND in samples.columns and samples[ERROR_KIND].notna().all():
            # every run failed, so no result fields were recorded
            samples = samples.assign(**{col: np.nan for col in missing})
            missing = []
        if missing:
            raise KeyError(f"Column '{missing[0]}' not found in samples (available: {', '.join(map(str, samples.columns))})")

        rows = []
        groups = samples.groupby(parameters, sort=False, dropna=False) if parameters else [((), samples)]
        for key, group in groups:
            if not isinstance(key, tuple):
                key = (key,)
            ok = group[ERROR_KIND].isna() if ERROR_KIND in group.columns else pd.Series(True, index=group.index)
            good = group[ok]
            est = good[estimate].astype(float)
            lb = good[lower].astype(float)
            ub = good[upper].astype(float)
            n_ok = len(good)

            row = dict(zip(parameters, key))
            row["n_runs"] = len(group)
            row["n_failed"] = int((~ok).sum())
            row["mean_estimate"] = est.mean() if n_ok else np.nan
            row["sd_estimate"] = est.std(ddof=1) if n_ok > 1 else np.nan
            if alpha is not None and p_value in good.columns:
                significant = good[p_value].astype(float) < alpha
            else:
                significant = (lb > self.null_value) | (ub < self.null_value)
            row["power"] = significant.mean() * 100 if n_ok else np.nan

            if true_value is not None:
                truth = good[true_value].astype(float) if isinstance(true_value, str) else float(true_value)
                row["bias"] = (est - truth).mean() if n_ok else np.nan
                covered = (lb <= truth) & (truth <= ub)
                row["coverage"] = covered.mean() * 100 if n_ok else np.nan

            rows.append(row)

        return pd.DataFrame(rows)


def build_exhaustion_result(
    design_name: str,
    steps: List[str],
    n_protocols: int,
    fixed: Optional[Dict[str, Any]],
    table: pd.DataFrame,
) -> Dict[str, Any]:
    """Assemble the result dict returned by ``RDFAnalysis.exhaust``."""
    n_failed = int(table[ERROR_KIND].notna().sum()) if ERROR_KIND in table.columns else 0
    return {
        "design": {
            "name": design_name,
            "steps": steps,
            "n_protocols": n_protocols,
            "fixed": dict(fixed or {}),
        },
        "results": {
            "n_succeeded": len(table) - n_failed,
            "n_failed": n_failed,
        },
        "table": table,
    }


def build_power_result(
    design_name: str,
    steps: List[str],
    protocol: Dict[str, Any],
    replications: int,
    seed: Optional[int],
    parallel: bool,
    samples: pd.DataFrame,
    summary: pd.DataFrame,
) -> Dict[str, Any]:
    """Assemble the result dict returned by ``RDFAnalysis.find_power``."""
    return {
        "design": {
            "name": design_name,
            "steps": steps,
            "protocol": protocol,
            "replications": replications,
            "seed": seed,
            "parallel": parallel,
        },
        "samples": samples,
        "summary": summary,
    }
