"""
Runner for the unit tests embedded in steps.

Every step may ship ``StepTestCase`` fixtures (``Step.test_cases()``) and a
deterministic input (``Step.test_input()``). The harness executes them
through the public ``execute`` contract only, so steps can be checked
without assembling a design.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Union

import pandas as pd

from .design import Design, StepRegistry
from .step import Step, StepTestCase


@dataclass
class StepTestReport:
    """Outcome of one embedded test case."""

    step: str
    case: str
    passed: bool
    message: str = ""


@dataclass
class StepTestSummary:
    """All reports of one harness run."""

    reports: List[StepTestReport] = field(default_factory=list)
    untested: List[str] = field(default_factory=list)

    @property
    def all_passed(self) -> bool:
        return all(r.passed for r in self.reports)

    @property
    def n_passed(self) -> int:
        return sum(r.passed for r in self.reports)

    @property
    def n_failed(self) -> int:
        return len(self.reports) - self.n_passed

    def failures(self) -> List[StepTestReport]:
        return [r for r in self.reports if not r.passed]

    def by_step(self) -> dict:
        """``{step: passed}`` where a step passes when all its cases pass."""
        out: dict = {}
        for r in self.reports:
            out[r.step] = out.get(r.step, True) and r.passed
        return out

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([vars(r) for r in self.reports], columns=["step", "case", "passed", "message"])


def _run_case(s: Step, case: StepTestCase) -> StepTestReport:
    data = case.input if case.input is not None else s.test_input()
    try:
        result = s.execute(data, case.choices)
    except Exception as exc:
        if case.raises is not None and isinstance(exc, case.raises):
            return StepTestReport(s.name, case.name, True)
        return StepTestReport(s.name, case.name, False, f"{type(exc).__name__}: {exc}")

    if case.raises is not None:
        return StepTestReport(s.name, case.name, False, f"expected {case.raises.__name__} but the step succeeded")

    if case.check is None:
        return StepTestReport(s.name, case.name, True)

    try:
        verdict = case.check(result.data)
    except AssertionError as exc:
        return StepTestReport(s.name, case.name, False, str(exc) or "assertion failed")
    except Exception as exc:
        return StepTestReport(s.name, case.name, False, f"check raised {type(exc).__name__}: {exc}")

    if verdict is False:
        return StepTestReport(s.name, case.name, False, "check returned False")
    return StepTestReport(s.name, case.name, True)


def run_step_tests(steps: Union[Design, StepRegistry, Iterable[Step]]) -> StepTestSummary:
    """Run the embedded tests of every step and collect the outcomes.

    Failing cases (including unexpected exceptions) are reported, never
    raised. Steps without test cases are listed in ``untested``.
    """
    summary = StepTestSummary()
    for s in steps:
        cases = s.test_cases()
        if not cases:
            summary.untested.append(s.name)
            continue
        for case in cases:
            summary.reports.append(_run_case(s, case))
    return summary
