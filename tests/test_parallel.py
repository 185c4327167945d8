"""
Tests for parallel execution in RDFAnalysis.
"""

import pandas as pd
import pytest


def _joblib_available():
    """Check if joblib is available."""
    import importlib.util

    return importlib.util.find_spec("joblib") is not None


pytestmark = pytest.mark.skipif(not _joblib_available(), reason="joblib not installed")


class TestParallelExecution:
    """Parallel runs must reproduce sequential runs exactly."""

    def test_exhaustion_matches_sequential(self, confounded_data):
        from rdfanalysis.core import Design, exhaust
        from rdfanalysis.steps import EstimateModel, TrimOutliers

        design = Design([TrimOutliers(), EstimateModel()])
        sequential = exhaust(design, confounded_data, n_jobs=1)
        parallel = exhaust(design, confounded_data, n_jobs=2)

        assert len(sequential) == 18
        pd.testing.assert_frame_equal(sequential, parallel)

    def test_power_matches_sequential(self):
        from rdfanalysis.core import Design, simulate_power
        from rdfanalysis.stats import simulate_confounded_data
        from rdfanalysis.steps import EstimateModel

        design = Design([EstimateModel()])
        grid = {"sample_size": [40, 80], "effect": [0.3]}
        sequential = simulate_power(design, ["yes"], simulate_confounded_data, grid, replications=6, seed=42)
        parallel = simulate_power(design, ["yes"], simulate_confounded_data, grid, replications=6, seed=42, n_jobs=2)

        pd.testing.assert_frame_equal(sequential, parallel)

    def test_facade_parallel(self, confounded_data, suppress_output):
        from rdfanalysis import RDFAnalysis
        from rdfanalysis.steps import EstimateModel

        analysis = RDFAnalysis([EstimateModel()])
        seq = analysis.exhaust(confounded_data)["table"]
        par = analysis.set_parallel(True, n_cores=2).exhaust(confounded_data)["table"]
        pd.testing.assert_frame_equal(seq, par)
