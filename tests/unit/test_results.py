"""Unit tests for rdfanalysis.core.results: row flattening, tables and power summaries."""

from collections import namedtuple
from dataclasses import dataclass

import numpy as np
import pandas as pd
import pytest

from rdfanalysis.core.errors import StepRuntimeError
from rdfanalysis.core.results import (
    ResultsProcessor,
    build_exhaustion_result,
    build_power_result,
    build_table,
    failure_record,
    flatten_result,
)


class TestFlattenResult:
    """Tests for flatten_result."""

    def test_none(self):
        assert flatten_result(None) == {}

    def test_scalar(self):
        assert flatten_result(3.5) == {"value": 3.5}

    def test_one_row_frame(self):
        out = flatten_result(pd.DataFrame({"est": [0.4], "n": [np.int64(10)]}))
        assert out == {"est": 0.4, "n": 10}
        assert type(out["n"]) is int

    def test_multi_row_frame(self):
        out = flatten_result(pd.DataFrame({"est": [1.0, 2.0]}))
        assert out == {"est_0": 1.0, "est_1": 2.0}

    def test_series(self):
        assert flatten_result(pd.Series({"a": 1, "b": 2})) == {"a": 1, "b": 2}

    def test_nested_mapping(self):
        assert flatten_result({"fit": {"est": 1.0, "se": 0.1}, "n": 5}) == {"fit_est": 1.0, "fit_se": 0.1, "n": 5}

    def test_dataclass(self):
        @dataclass
        class Fit:
            est: float
            se: float

        assert flatten_result(Fit(1.0, 0.5)) == {"est": 1.0, "se": 0.5}

    def test_namedtuple(self):
        Fit = namedtuple("Fit", ["est", "se"])
        assert flatten_result(Fit(1.0, 0.5)) == {"est": 1.0, "se": 0.5}

    def test_array(self):
        assert flatten_result(np.array([1.0, 2.0])) == {"value_0": 1.0, "value_1": 2.0}
        assert flatten_result(np.array(4.0)) == {"value": 4.0}


class TestBuildTable:
    """Tests for build_table and failure_record."""

    def test_failure_record(self):
        exc = StepRuntimeError("fit", np.linalg.LinAlgError("singular"), position=2)
        record = failure_record(exc)
        assert record["error_kind"] == "LinAlgError"
        assert "singular" in record["error_message"]

    def test_columns_and_missing_fields(self):
        table = build_table(
            [{"m": "a"}, {"m": "b"}],
            [{"est": 1.0}, {"error_kind": "ValueError", "error_message": "boom"}],
            ["m"],
            index_name="protocol_id",
        )
        assert list(table.columns) == ["m", "est", "error_kind", "error_message"]
        assert pd.isna(table.loc[1, "est"])
        assert pd.isna(table.loc[0, "error_kind"])

    def test_union_of_fields_in_first_seen_order(self):
        table = build_table([{}, {}], [{"b": 1}, {"a": 2, "b": 3}], [], index_name="i")
        assert list(table.columns) == ["b", "a", "error_kind", "error_message"]


class TestSummarizePower:
    """Tests for ResultsProcessor.summarize_power."""

    @pytest.fixture
    def samples(self):
        frame = pd.DataFrame(
            {
                "n": [10, 10, 10, 10, 20, 20],
                "est": [0.5, 0.1, 0.6, np.nan, 0.5, 0.4],
                "lb": [0.1, -0.2, 0.2, np.nan, 0.2, 0.1],
                "ub": [0.9, 0.4, 1.0, np.nan, 0.8, 0.7],
                "p_value": [0.01, 0.3, 0.04, np.nan, 0.001, 0.02],
                "error_kind": [None, None, None, "ValueError", None, None],
            }
        )
        frame.attrs["parameters"] = ["n"]
        return frame

    def test_counts_and_power(self, samples):
        summary = ResultsProcessor().summarize_power(samples)
        first = summary.iloc[0]
        assert first["n"] == 10
        assert first["n_runs"] == 4
        assert first["n_failed"] == 1
        assert first["power"] == pytest.approx(200 / 3)
        assert first["mean_estimate"] == pytest.approx(0.4)
        assert summary.iloc[1]["power"] == pytest.approx(100.0)

    def test_null_value(self, samples):
        summary = ResultsProcessor(null_value=0.15).summarize_power(samples)
        assert summary.iloc[0]["power"] == pytest.approx(100 / 3)

    def test_alpha_uses_p_values(self, samples):
        summary = ResultsProcessor().summarize_power(samples, alpha=0.02)
        assert summary.iloc[0]["power"] == pytest.approx(100 / 3)
        assert summary.iloc[1]["power"] == pytest.approx(50.0)

    def test_bias_and_coverage(self, samples):
        summary = ResultsProcessor().summarize_power(samples, true_value=0.5)
        first = summary.iloc[0]
        assert first["bias"] == pytest.approx(-0.1)
        assert first["coverage"] == pytest.approx(200 / 3)

    def test_true_value_column(self, samples):
        samples["effect"] = 0.5
        summary = ResultsProcessor().summarize_power(samples, true_value="effect")
        assert "coverage" in summary.columns

    def test_missing_column(self, samples):
        with pytest.raises(KeyError, match="beta"):
            ResultsProcessor().summarize_power(samples, estimate="beta")

    def test_all_failed_without_result_columns(self):
        samples = pd.DataFrame(
            {
                "n": [10, 10, 20],
                "replication": [1, 2, 1],
                "error_kind": ["ValueError"] * 3,
                "error_message": ["broken"] * 3,
            }
        )
        samples.attrs["parameters"] = ["n"]
        summary = ResultsProcessor().summarize_power(samples, true_value=0.5, alpha=0.05)
        assert summary["n_runs"].to_list() == [2, 1]
        assert (summary["n_failed"] == summary["n_runs"]).all()
        assert summary[["mean_estimate", "power", "bias", "coverage"]].isna().all().all()

    def test_without_parameters(self, samples):
        samples.attrs = {}
        summary = ResultsProcessor().summarize_power(samples)
        assert len(summary) == 1
        assert summary.iloc[0]["n_runs"] == 6


class TestResultBuilders:
    """Tests for the result dict builders."""

    def test_exhaustion_result(self):
        table = pd.DataFrame({"m": ["a", "b"], "error_kind": [None, "ValueError"], "error_message": [None, "x"]})
        result = build_exhaustion_result("d", ["s"], 2, None, table)
        assert result["design"] == {"name": "d", "steps": ["s"], "n_protocols": 2, "fixed": {}}
        assert result["results"] == {"n_succeeded": 1, "n_failed": 1}
        assert result["table"] is table

    def test_power_result(self):
        samples = pd.DataFrame()
        summary = pd.DataFrame()
        result = build_power_result("d", ["s"], {"m": "a"}, 100, 1, False, samples, summary)
        assert result["design"]["replications"] == 100
        assert result["design"]["protocol"] == {"m": "a"}
        assert result["samples"] is samples
        assert result["summary"] is summary
