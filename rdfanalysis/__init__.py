"""RDFAnalysis - Researcher Degrees of Freedom Analysis.

A framework for declaring a multi-step statistical analysis as a chain of
pure steps with explicit methodological decision points, then running it
for one protocol, for every protocol (exhaustion), or repeatedly against
simulated data (power analysis).

Example:
    >>> from rdfanalysis import RDFAnalysis
    >>> from rdfanalysis.steps import EstimateModel, TrimOutliers
    >>> from rdfanalysis.stats import simulate_confounded_data
    >>>
    >>> analysis = RDFAnalysis([TrimOutliers(), EstimateModel()])
    >>> analysis.describe()
    >>> analysis.exhaust(simulate_confounded_data(1000, seed=1))
    >>>
    >>> analysis.find_power(
    ...     {"outlier_treatment": "none", "outlier_cut": 0.01, "control_for_z": "yes"},
    ...     simulate_confounded_data,
    ...     {"sample_size": [50, 100, 200], "effect": [0.2, 0.5]},
    ... )
"""

from importlib.metadata import version as _get_version

from .analysis import RDFAnalysis
from .core import (
    Choice,
    ChoiceSpec,
    Design,
    DesignSpaceError,
    FunctionStep,
    InvalidChoiceError,
    Protocol,
    RDFAnalysisError,
    Step,
    StepRegistry,
    StepRuntimeError,
    StepTestCase,
    boolean,
    categorical,
    numeric,
    step,
)
from .progress import AnalysisCancelled, PrintReporter, ProgressReporter, TqdmReporter, cancel_after
from .utils.formatters import format_design

__version__ = _get_version("RDFAnalysis")

__all__ = [
    "RDFAnalysis",
    # Building designs
    "Step",
    "FunctionStep",
    "StepTestCase",
    "step",
    "Design",
    "StepRegistry",
    "ChoiceSpec",
    "Choice",
    "Protocol",
    "categorical",
    "numeric",
    "boolean",
    "format_design",
    # Errors
    "RDFAnalysisError",
    "InvalidChoiceError",
    "DesignSpaceError",
    "StepRuntimeError",
    "AnalysisCancelled",
    # Progress
    "ProgressReporter",
    "PrintReporter",
    "TqdmReporter",
    "cancel_after",
]
