"""
Power simulation for one fixed protocol.

Each unit of work draws a fresh input from a caller-supplied generator,
runs the design with the fixed protocol and records the result. Repeating
this over a grid of generator parameters gives the sampling distribution of
the pipeline's estimate, from which power is computed.
"""

import inspect
from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd
from sklearn.model_selection import ParameterGrid

from ..utils.validators import _validate_parameter_grid, _validate_replications, _validate_seed
from .design import Design
from .dispatch import run_units
from .errors import StepRuntimeError
from .executor import run_protocol
from .results import build_table, failure_record, flatten_result

ParameterGridLike = Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]


def expand_parameter_grid(parameter_grid: ParameterGridLike) -> List[Dict[str, Any]]:
    """Expand a parameter grid into an ordered list of parameter dicts.

    A mapping ``{name: values}`` is expanded into its Cartesian product
    (scalar values are treated as single-value lists). Keys keep their
    declared order, and the first parameter varies slowest, the last
    fastest. A list of mappings is taken as an explicit list of
    combinations.

    Raises:
        ValueError: If the grid is empty or malformed.
    """
    _validate_parameter_grid(parameter_grid).raise_if_invalid()

    if isinstance(parameter_grid, Mapping):
        grid = {}
        for name, values in parameter_grid.items():
            if isinstance(values, np.ndarray):
                values = values.tolist()
            grid[name] = list(values) if isinstance(values, (list, tuple, range)) else [values]
        # ParameterGrid sorts keys by name; reorder by declared key order
        index_grid = ParameterGrid({name: list(range(len(values))) for name, values in grid.items()})
        positions = sorted(tuple(p[name] for name in grid) for p in index_grid)
        return [{name: grid[name][i] for name, i in zip(grid, pos)} for pos in positions]

    return [dict(combo) for combo in parameter_grid]


def _accepts_rng(func: Callable) -> bool:
    """True if *func* declares an ``rng`` parameter."""
    try:
        return "rng" in inspect.signature(func).parameters
    except (TypeError, ValueError):
        return False


def _power_unit(
    design: Design,
    protocol,
    input_generator: Callable[..., Any],
    parameters: Dict[str, Any],
    seed_sequence: Optional[np.random.SeedSequence],
) -> Dict[str, Any]:
    """Draw one input, run the protocol and return the result record."""
    kwargs = dict(parameters)
    if seed_sequence is not None:
        kwargs["rng"] = np.random.default_rng(seed_sequence)
    data = input_generator(**kwargs)
    try:
        result = run_protocol(design, data, protocol)
    except StepRuntimeError as exc:
        return failure_record(exc)
    return flatten_result(result.data)


def simulate_power(
    design: Design,
    protocol: Any,
    input_generator: Callable[..., Any],
    parameter_grid: ParameterGridLike,
    replications: int,
    seed: Optional[int] = None,
    n_jobs: int = 1,
    progress=None,
    cancel_check: Optional[Callable[[], bool]] = None,
) -> pd.DataFrame:
    """Re-run one protocol on freshly generated inputs.

    For every parameter combination and every replication ``1..replications``
    the generator is called as ``input_generator(**parameters)`` to draw an
    independent input, and the design is run on it with *protocol*.

    When the generator declares an ``rng`` parameter it receives its own
    ``numpy.random.Generator``, spawned from ``SeedSequence(seed)``, so that
    draws are independent across units and reproducible when *seed* is set.

    Args:
        design: The pipeline to run.
        protocol: The fixed protocol (any form accepted by ``Design.bind``).
        input_generator: Callable returning one input per call.
        parameter_grid: Mapping of parameter name to values, or a list of
            parameter mappings.
        replications: Number of replications per parameter combination.
        seed: Base seed for the spawned generators.
        n_jobs: Worker processes for parallel execution.
        progress: Optional ``ProgressReporter``.
        cancel_check: Optional callable returning ``True`` to abort.

    Returns:
        DataFrame with columns ``combination``, the parameters,
        ``replication``, the result fields and the error columns. The
        parameter names are stored in ``attrs["parameters"]``.

    Raises:
        InvalidChoiceError: If *protocol* does not fit *design* (checked
            before any input is generated).
        ValueError: If *parameter_grid*, *replications* or *seed* is invalid.
    """
    _validate_replications(replications).raise_if_invalid()
    _validate_seed(seed).raise_if_invalid()
    bound = design.bind(protocol)
    combinations = expand_parameter_grid(parameter_grid)

    parameter_names: List[str] = []
    for combo in combinations:
        for name in combo:
            if name not in parameter_names:
                parameter_names.append(name)

    n_units = len(combinations) * replications
    if _accepts_rng(input_generator):
        seed_sequences = np.random.SeedSequence(seed).spawn(n_units)
    else:
        seed_sequences = [None] * n_units

    leading = []
    units = []
    for c, combo in enumerate(combinations):
        for r in range(replications):
            leading.append({"combination": c, **combo, "replication": r + 1})
            units.append((design, bound, input_generator, combo, seed_sequences[c * replications + r]))

    outcomes = run_units(_power_unit, units, n_jobs=n_jobs, progress=progress, cancel_check=cancel_check)

    table = build_table(leading, outcomes, ["combination", *parameter_names, "replication"], index_name="sample_id")
    table.attrs["parameters"] = parameter_names
    return table
