"""
RDFAnalysis - researcher degrees of freedom analysis.

This module provides the main RDFAnalysis class, which wraps a design
and the engine operations (single runs, exhaustion, power simulation and
step tests) behind one configurable object.
"""

import warnings
from contextlib import nullcontext
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Sequence, Union

import pandas as pd

from .core import (
    Design,
    ExecutionResult,
    ChoiceSpace,
    ResultsProcessor,
    Step,
    StepRegistry,
    StepTestSummary,
    count_protocols,
    exhaust,
    expand_parameter_grid,
    run_protocol,
    run_step_tests,
    simulate_power,
)
from .core.results import ERROR_KIND, ERROR_MESSAGE, build_exhaustion_result, build_power_result
from .progress import ProgressReporter, compute_total_runs
from .utils.formatters import format_design, _format_exhaustion, _format_power, _format_step_tests
from .utils.validators import _validate_alpha, _validate_parallel_settings, _validate_replications, _validate_seed
from .utils.visualization import _create_power_plot, _create_specification_curve

DEFAULT_SEED = 2137
DEFAULT_REPLICATIONS = 200
DEFAULT_ALPHA = 0.05



def _warn_if_all_failed(table: pd.DataFrame, what: str):
    if len(table) and table[ERROR_KIND].notna().all():
        warnings.warn(
            f"All {len(table)} {what} failed; first error: {table[ERROR_KIND].iloc[0]}: {table[ERROR_MESSAGE].iloc[0]}",
            stacklevel=3,
        )

class RDFAnalysis:
    """Researcher degrees of freedom analysis of one design.

    All configuration methods (``set_*``) return ``self`` for method
    chaining.

    Attributes:
        design: The wrapped ``Design``.
        seed: Base seed for power simulations (default: 2137).
        replications: Power-simulation replications per parameter set
            (default: 200).
        alpha: Significance level used by the power summary (default: 0.05).
        parallel: Whether batches run in joblib worker processes.
        n_cores: Number of worker processes when parallel.

    Example:
        >>> from rdfanalysis import RDFAnalysis
        >>> from rdfanalysis.steps import EstimateModel
        >>> from rdfanalysis.stats import simulate_confounded_data
        >>>
        >>> analysis = RDFAnalysis([EstimateModel()])
        >>> df = simulate_confounded_data(1000, seed=1)
        >>> analysis.exhaust(df)
        >>> analysis.find_power(
        ...     {"control_for_z": "yes"},
        ...     simulate_confounded_data,
        ...     {"sample_size": [50, 100, 200], "effect": [0.2]},
        ... )
    """

    def __init__(
        self,
        design: Union[Design, Iterable[Step]],
        registry: Optional[StepRegistry] = None,
        name: Optional[str] = None,
    ):
        """Wrap a design.

        Args:
            design: A ``Design``, a list of ``Step`` objects, or (with
                *registry*) a list of step names.
            registry: Registry used to resolve step names.
            name: Optional label shown in printed output.
        """
        if isinstance(design, Design):
            self.design = design
        else:
            items = list(design)
            if registry is not None and all(isinstance(i, str) for i in items):
                self.design = Design.from_registry(registry, items, name=name)
            else:
                self.design = Design(items, name=name)
        if name is not None:
            self.design.name = name

        from joblib import cpu_count

        self.seed: Optional[int] = DEFAULT_SEED
        self.replications = DEFAULT_REPLICATIONS
        self.alpha = DEFAULT_ALPHA
        self.parallel = False
        self.n_cores = max(1, cpu_count() // 2)
        self._progress_callback: Optional[Callable[[int, int], None]] = None

    # =========================================================================
    # Configuration methods
    # =========================================================================

    def set_seed(self, seed: Optional[int] = None):
        """Set the base seed for power simulations.

        Args:
            seed: Non-negative integer up to 3,000,000,000.
                Pass ``None`` to enable fully random seeding.

        Returns:
            self: For method chaining.

        Raises:
            ValueError: If *seed* is not a valid seed.
        """
        _validate_seed(seed).raise_if_invalid()
        self.seed = seed
        return self

    def set_replications(self, replications: int):
        """Set the number of power-simulation replications per parameter set.

        Returns:
            self: For method chaining.

        Raises:
            ValueError: If *replications* is not a positive integer.
        """
        result = _validate_replications(replications)
        result.raise_if_invalid()
        for warning in result.warnings:
            warnings.warn(warning, stacklevel=2)
        self.replications = replications
        return self

    def set_alpha(self, alpha: float):
        """Set the significance level used when summarising power.

        Args:
            alpha: Type-I error rate (0–0.25). Default is 0.05.

        Returns:
            self: For method chaining.
        """
        _validate_alpha(alpha).raise_if_invalid()
        self.alpha = float(alpha)
        return self

    def set_parallel(self, enable: bool = True, n_cores: Optional[int] = None):
        """Enable or disable parallel execution of batches (via ``joblib``).

        Args:
            enable: ``True`` to dispatch runs to worker processes.
            n_cores: Number of CPU cores to use. Defaults to
                ``cpu_count // 2``.

        Returns:
            self: For method chaining.
        """
        settings, result = _validate_parallel_settings(enable, n_cores)
        result.raise_if_invalid()
        self.parallel, self.n_cores = settings
        return self

    def set_progress(self, callback: Optional[Callable[[int, int], None]]):
        """Set a ``callback(current, total)`` progress hook for batches.

        Use ``PrintReporter()`` or ``TqdmReporter()`` from
        ``rdfanalysis.progress``, or any callable. ``None`` disables it.

        Returns:
            self: For method chaining.
        """
        if callback is not None and not callable(callback):
            raise TypeError("callback must be callable or None")
        self._progress_callback = callback
        return self

    @property
    def _n_jobs(self) -> int:
        return self.n_cores if self.parallel else 1

    def _progress(self, total: int):
        if self._progress_callback is None:
            return nullcontext()
        return ProgressReporter(total, self._progress_callback)

    # =========================================================================
    # Design information
    # =========================================================================

    @property
    def n_protocols(self) -> int:
        """Size of the full choice space."""
        return count_protocols(self.design)

    def describe(self, print_results: bool = True) -> list:
        """Return (and optionally print) the metadata of every step.

        Returns:
            List of plain-data step metadata dicts.
        """
        metadata = self.design.describe()
        if print_results:
            print(format_design(self.design))
        return [m.as_dict() for m in metadata]

    # =========================================================================
    # Engine operations
    # =========================================================================

    def run(self, data: Any, protocol: Any = None) -> ExecutionResult:
        """Run the design once with one protocol. Errors propagate."""
        return run_protocol(self.design, data, protocol)

    def exhaust(
        self,
        data: Any,
        fixed: Optional[Mapping[str, Any]] = None,
        print_results: bool = True,
        return_results: bool = True,
        cancel_check: Optional[Callable[[], bool]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Run the design once for every protocol of its choice space.

        Args:
            data: Input shared by every run.
            fixed: Optional ``{choice: value}`` pinning some choices.
            print_results: Print a summary and the table head.
            return_results: Return the result dict.
            cancel_check: Optional callable returning ``True`` to abort.

        Returns:
            Dict with ``"design"`` settings, ``"results"`` counts and the
            exhaustion ``"table"`` (one row per protocol).
        """
        n_protocols = len(ChoiceSpace(self.design, fixed))
        with self._progress(compute_total_runs(n_protocols=n_protocols)) as progress:
            table = exhaust(
                self.design,
                data,
                fixed=fixed,
                n_jobs=self._n_jobs,
                progress=progress,
                cancel_check=cancel_check,
            )

        _warn_if_all_failed(table, "protocols")

        result = build_exhaustion_result(
            design_name=self.design.name or "",
            steps=self.design.step_names,
            n_protocols=n_protocols,
            fixed=dict(fixed or {}),
            table=table,
        )
        if print_results:
            print(_format_exhaustion(result))
        return result if return_results else None

    def find_power(
        self,
        protocol: Any,
        input_generator: Callable[..., Any],
        parameter_grid: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]],
        replications: Optional[int] = None,
        estimate: str = "est",
        lower: str = "lb",
        upper: str = "ub",
        true_value: Union[str, float, None] = None,
        print_results: bool = True,
        return_results: bool = True,
        cancel_check: Optional[Callable[[], bool]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Estimate power of one protocol by Monte Carlo simulation.

        Args:
            protocol: The fixed protocol.
            input_generator: ``generator(**parameters)`` drawing one input.
                If it declares ``rng`` it receives a seeded generator.
            parameter_grid: Generator parameters (mapping of lists or list
                of mappings).
            replications: Replications per parameter set (defaults to
                ``self.replications``).
            estimate, lower, upper: Result columns used for the summary.
            true_value: Generating effect (number or parameter name) for
                bias and coverage.
            print_results: Print the power summary.
            return_results: Return the result dict.
            cancel_check: Optional callable returning ``True`` to abort.

        Returns:
            Dict with ``"design"`` settings, per-replication ``"samples"``
            and the per-parameter ``"summary"``.
        """
        if replications is None:
            replications = self.replications
        result = _validate_replications(replications)
        result.raise_if_invalid()
        for warning in result.warnings:
            warnings.warn(warning, stacklevel=2)

        bound = self.design.bind(protocol)
        n_sets = len(expand_parameter_grid(parameter_grid))
        total = compute_total_runs(n_parameter_sets=n_sets, replications=replications)
        with self._progress(total) as progress:
            samples = simulate_power(
                self.design,
                bound,
                input_generator,
                parameter_grid,
                replications,
                seed=self.seed,
                n_jobs=self._n_jobs,
                progress=progress,
                cancel_check=cancel_check,
            )

        _warn_if_all_failed(samples, "replications")
        summary = ResultsProcessor().summarize_power(
            samples, estimate=estimate, lower=lower, upper=upper, true_value=true_value, alpha=self.alpha
        )

        power_result = build_power_result(
            design_name=self.design.name or "",
            steps=self.design.step_names,
            protocol=self.design.protocol_record(bound),
            replications=replications,
            seed=self.seed,
            parallel=self.parallel,
            samples=samples,
            summary=summary,
        )
        if print_results:
            print(_format_power(power_result))
        return power_result if return_results else None

    def test_steps(self, print_results: bool = True) -> StepTestSummary:
        """Run the embedded tests of every step in the design."""
        summary = run_step_tests(self.design)
        if print_results:
            print(_format_step_tests(summary))
        return summary

    # =========================================================================
    # Plots
    # =========================================================================

    def plot_specification_curve(
        self,
        exhaustion_result: Union[Dict[str, Any], pd.DataFrame],
        estimate: str = "est",
        lower: str = "lb",
        upper: str = "ub",
        show: bool = True,
    ):
        """Plot an ``exhaust`` result (or its table) as a specification curve."""
        table = exhaustion_result["table"] if isinstance(exhaustion_result, dict) else exhaustion_result
        return _create_specification_curve(
            table,
            choice_columns=self.design.choice_columns,
            estimate=estimate,
            lower=lower,
            upper=upper,
            show=show,
        )

    def plot_power_curve(
        self,
        power_result: Dict[str, Any],
        x: str,
        group: Optional[str] = None,
        target_power: float = 80.0,
        show: bool = True,
    ):
        """Plot power against parameter *x* from a ``find_power`` result."""
        return _create_power_plot(power_result["summary"], x=x, group=group, target_power=target_power, show=show)

    def __repr__(self):
        return f"RDFAnalysis(design={self.design!r})"
