"""
Tests for synthetic data generators.
"""

import numpy as np
import pandas as pd
import pytest

from rdfanalysis.stats.data_generation import add_outliers, simulate_confounded_data


class TestSimulateConfoundedData:
    def test_shape_and_columns(self):
        df = simulate_confounded_data(100, seed=1)
        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == ["x", "y", "z"]
        assert len(df) == 100

    def test_seed_reproducible(self):
        pd.testing.assert_frame_equal(simulate_confounded_data(50, seed=3), simulate_confounded_data(50, seed=3))

    def test_rng_takes_precedence(self):
        a = simulate_confounded_data(50, rng=np.random.default_rng(9), seed=1)
        b = simulate_confounded_data(50, rng=np.random.default_rng(9), seed=2)
        pd.testing.assert_frame_equal(a, b)

    def test_confounding_structure(self):
        df = simulate_confounded_data(50_000, effect=0.5, confounding=1.0, seed=4)
        assert df["z"].std() == pytest.approx(1.0, abs=0.02)
        assert np.corrcoef(df["x"], df["z"])[0, 1] == pytest.approx(np.sqrt(0.5), abs=0.02)
        naive = np.polyfit(df["x"], df["y"], 1)[0]
        assert naive == pytest.approx(1.0, abs=0.03)

    def test_no_confounding(self):
        df = simulate_confounded_data(50_000, effect=0.3, confounding=0.0, seed=5)
        assert np.polyfit(df["x"], df["y"], 1)[0] == pytest.approx(0.3, abs=0.03)

    def test_keyword_signature_for_power_grids(self):
        params = {"sample_size": 30, "effect": 0.2, "confounding": 0.4}
        df = simulate_confounded_data(**params, rng=np.random.default_rng(0))
        assert len(df) == 30
        with pytest.raises(TypeError):
            simulate_confounded_data(n=30)

    def test_invalid_sample_size(self):
        with pytest.raises(ValueError):
            simulate_confounded_data(0)
        with pytest.raises(ValueError):
            simulate_confounded_data(10.5)


class TestAddOutliers:
    def test_share_of_rows_replaced(self):
        df = simulate_confounded_data(1000, seed=1)
        out = add_outliers(df, "y", share=0.05, seed=2)
        changed = (out["y"] != df["y"]).sum()
        assert changed == 50
        pd.testing.assert_series_equal(out["x"], df["x"])

    def test_original_untouched(self):
        df = simulate_confounded_data(100, seed=1)
        before = df.copy()
        add_outliers(df, seed=2)
        pd.testing.assert_frame_equal(df, before)

    def test_invalid_share(self):
        with pytest.raises(ValueError):
            add_outliers(simulate_confounded_data(10, seed=1), share=1.5)
