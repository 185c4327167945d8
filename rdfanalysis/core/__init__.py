"""Core components for the RDFAnalysis engine.

Re-exports the foundational building blocks:

- ``ChoiceSpec``, ``Choice``, ``Protocol`` — researcher degrees of freedom
  and their values.
- ``Step``, ``FunctionStep``, ``step`` — the step contract.
- ``Design``, ``StepRegistry`` — pipelines and explicit step lookup.
- ``run_protocol`` — single pipeline run.
- ``ChoiceSpace``, ``enumerate_protocols`` — choice-space enumeration.
- ``exhaust`` — one run per protocol.
- ``simulate_power``, ``ResultsProcessor`` — power simulation and summary.
- ``run_step_tests`` — embedded step tests.
"""

from .choices import BOOLEAN, CATEGORICAL, NUMERIC, Choice, ChoiceSpec, Protocol, boolean, categorical, numeric
from .design import Design, StepRegistry
from .enumeration import ChoiceSpace, count_protocols, enumerate_protocols
from .errors import DesignSpaceError, InvalidChoiceError, RDFAnalysisError, StepRuntimeError
from .executor import ExecutionResult, run_protocol
from .exhaustion import exhaust
from .harness import StepTestReport, StepTestSummary, run_step_tests
from .power import expand_parameter_grid, simulate_power
from .results import ERROR_COLUMNS, ResultsProcessor, flatten_result
from .step import FunctionStep, Step, StepMetadata, StepResult, StepTestCase, step

__all__ = [
    # Choices
    "ChoiceSpec",
    "Choice",
    "Protocol",
    "categorical",
    "numeric",
    "boolean",
    "CATEGORICAL",
    "NUMERIC",
    "BOOLEAN",
    # Steps
    "Step",
    "FunctionStep",
    "StepMetadata",
    "StepResult",
    "StepTestCase",
    "step",
    # Designs
    "Design",
    "StepRegistry",
    # Execution
    "ExecutionResult",
    "run_protocol",
    "ChoiceSpace",
    "enumerate_protocols",
    "count_protocols",
    "exhaust",
    "simulate_power",
    "expand_parameter_grid",
    # Results
    "ResultsProcessor",
    "flatten_result",
    "ERROR_COLUMNS",
    # Harness
    "run_step_tests",
    "StepTestReport",
    "StepTestSummary",
    # Errors
    "RDFAnalysisError",
    "InvalidChoiceError",
    "DesignSpaceError",
    "StepRuntimeError",
]
