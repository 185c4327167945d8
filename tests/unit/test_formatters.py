"""
Tests for text formatting of designs and results.
"""

import pandas as pd

from rdfanalysis.core import Design, FunctionStep, StepTestCase, run_step_tests
from rdfanalysis.core.results import build_exhaustion_result, build_power_result
from rdfanalysis.utils.formatters import _format_exhaustion, _format_power, _format_step_tests, format_design


class TestFormatDesign:
    def test_lists_steps_and_choices(self, two_step_design):
        text = format_design(two_step_design)
        assert "DESIGN: arithmetic" in text
        assert "Step 1: add" in text
        assert "Step 2: scale" in text
        assert "- factor (categorical): 'one', 'ten', 'hundred'" in text
        assert "- k (numeric): 1, 2" in text

    def test_step_without_choices(self):
        text = format_design(Design([FunctionStep("id", lambda d: d, description="Identity.")]))
        assert "No researcher degrees of freedom." in text
        assert "Identity." in text

    def test_empty_design(self):
        assert "(no steps)" in format_design(Design([]))


class TestFormatResults:
    def test_exhaustion(self):
        table = pd.DataFrame({"m": ["a", "b"], "est": [1.0, None], "error_kind": [None, "ValueError"], "error_message": [None, "x"]})
        text = _format_exhaustion(build_exhaustion_result("d", ["clean", "fit"], 2, {"m": "a"}, table))
        assert "EXHAUSTION RESULTS" in text
        assert "clean -> fit" in text
        assert "Fixed choices: m='a'" in text
        assert "succeeded: 1, failed: 1" in text

    def test_power(self):
        summary = pd.DataFrame({"n": [10], "power": [55.0]})
        result = build_power_result("d", ["fit"], {"control_for_z": "yes"}, 100, 42, False, pd.DataFrame(), summary)
        text = _format_power(result)
        assert "Protocol: control_for_z='yes'" in text
        assert "Replications per parameter set: 100" in text
        assert "Seed: 42" in text
        assert "55.0" in text

    def test_step_tests(self):
        good = FunctionStep("good", lambda d: d, tests=[StepTestCase("ok")])
        bad = FunctionStep("bad", lambda d: d, tests=[StepTestCase("no", check=lambda out: False)])
        plain = FunctionStep("plain", lambda d: d)
        text = _format_step_tests(run_step_tests([good, bad, plain]))
        assert "[PASS] good::ok" in text
        assert "[FAIL] bad::no - check returned False" in text
        assert "[----] plain" in text
        assert "1 passed, 1 failed" in text
