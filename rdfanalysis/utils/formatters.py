"""
Text formatting for RDFAnalysis console output.

Renders design documentation, exhaustion and power results, and step test
summaries as plain text.
"""

from typing import Any, Dict, List

import pandas as pd

__all__ = ["format_design"]

_WIDTH = 80


def _header(title: str) -> List[str]:
    return ["=" * _WIDTH, title, "=" * _WIDTH]


def _format_design(metadata: List[Any], title: str = "DESIGN") -> str:
    """Render step metadata (``Design.describe()``) as a text document."""
    lines = _header(title)
    if not metadata:
        lines.append("(no steps)")
    for i, meta in enumerate(metadata, start=1):
        lines.append(f"\nStep {i}: {meta.name}")
        lines.append("-" * _WIDTH)
        for line in meta.step_description:
            lines.append(f"  {line}")
        if meta.choice_spec_list:
            lines.append("  Choices:")
            for line in meta.choice_description:
                lines.append(f"    {line}")
            for spec in meta.choice_spec_list:
                domain = ", ".join(repr(v) for v in spec.domain) if isinstance(spec.domain, tuple) else repr(spec.domain)
                lines.append(f"    - {spec.name} ({spec.kind}): {domain}")
        else:
            lines.append("  No researcher degrees of freedom.")
    return "\n".join(lines)


def _format_table(frame: pd.DataFrame, max_rows: int = 20) -> str:
    with pd.option_context("display.max_rows", max_rows, "display.width", _WIDTH * 2, "display.max_columns", 20):
        return frame.to_string(max_rows=max_rows)


def _format_exhaustion(result: Dict[str, Any], max_rows: int = 20) -> str:
    """Render the dict returned by ``RDFAnalysis.exhaust``."""
    design = result["design"]
    res = result["results"]
    lines = _header("EXHAUSTION RESULTS")
    lines.append(f"Steps: {' -> '.join(design['steps']) or '(none)'}")
    if design["fixed"]:
        lines.append("Fixed choices: " + ", ".join(f"{k}={v!r}" for k, v in design["fixed"].items()))
    lines.append(f"Protocols: {design['n_protocols']}  (succeeded: {res['n_succeeded']}, failed: {res['n_failed']})")
    lines.append("")
    lines.append(_format_table(result["table"], max_rows=max_rows))
    return "\n".join(lines)


def _format_power(result: Dict[str, Any]) -> str:
    """Render the dict returned by ``RDFAnalysis.find_power``."""
    design = result["design"]
    lines = _header("MONTE CARLO POWER SIMULATION RESULTS")
    lines.append(f"Steps: {' -> '.join(design['steps']) or '(none)'}")
    if design["protocol"]:
        lines.append("Protocol: " + ", ".join(f"{k}={v!r}" for k, v in design["protocol"].items()))
    lines.append(f"Replications per parameter set: {design['replications']}")
    if design["seed"] is not None:
        lines.append(f"Seed: {design['seed']}")
    lines.append("")
    lines.append(_format_table(result["summary"], max_rows=50))
    return "\n".join(lines)


def _format_step_tests(summary) -> str:
    """Render a ``StepTestSummary``."""
    lines = _header("STEP TESTS")
    for report in summary.reports:
        status = "PASS" if report.passed else "FAIL"
        line = f"[{status}] {report.step}::{report.case}"
        if report.message:
            line += f" - {report.message}"
        lines.append(line)
    for name in summary.untested:
        lines.append(f"[----] {name} (no embedded tests)")
    lines.append("")
    lines.append(f"{summary.n_passed} passed, {summary.n_failed} failed")
    return "\n".join(lines)


def format_design(design, title: str = None) -> str:
    """Plain-text description of *design* for external documentation tools."""
    if title is None:
        title = f"DESIGN: {design.name}" if getattr(design, "name", None) else "DESIGN"
    return _format_design(design.describe(), title=title)
