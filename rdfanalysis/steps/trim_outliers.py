"""
Outlier treatment step.
"""

from typing import Optional, Sequence

import numpy as np
import pandas as pd

from ..core.choices import categorical, numeric
from ..core.step import Step, StepTestCase
from ..stats.data_generation import add_outliers, simulate_confounded_data


class TrimOutliers(Step):
    """Winsorize or truncate numeric columns at symmetric quantiles.

    Args:
        columns: Columns to treat. ``None`` treats every numeric column.
    """

    name = "trim_outliers"
    description = """
        Treat extreme values of the analysis variables.
        Values beyond the lower and upper quantiles given by 'outlier_cut'
        are either set to the quantile (winsorize) or their rows are dropped
        (truncate).
    """
    choice_specs = (
        categorical(
            "outlier_treatment",
            ["none", "winsorize", "truncate"],
            "How extreme values are handled",
        ),
        numeric(
            "outlier_cut",
            [0.01, 0.025, 0.05],
            "Share of observations treated as extreme in each tail",
        ),
    )

    def __init__(self, columns: Optional[Sequence[str]] = None):
        self.columns = list(columns) if columns is not None else None

    def transform(self, data: pd.DataFrame, outlier_treatment: str, outlier_cut: float) -> pd.DataFrame:
        if outlier_treatment == "none":
            return data

        columns = self.columns or list(data.select_dtypes(include="number").columns)
        lower = data[columns].quantile(outlier_cut)
        upper = data[columns].quantile(1 - outlier_cut)

        if outlier_treatment == "winsorize":
            out = data.copy()
            out[columns] = data[columns].clip(lower=lower, upper=upper, axis=1)
            return out

        keep = ((data[columns] >= lower) & (data[columns] <= upper)).all(axis=1)
        return data.loc[keep].reset_index(drop=True)

    def test_input(self):
        data = simulate_confounded_data(500, seed=2137)
        return add_outliers(data, "y", share=0.02, seed=2137)

    def test_cases(self):
        def _unchanged(df):
            assert len(df) == 500

        def _clipped(df):
            assert len(df) == 500
            assert df["y"].abs().max() < 10

        def _dropped(df):
            assert len(df) < 500
            assert np.isfinite(df.to_numpy()).all()

        return [
            StepTestCase("none_keeps_data", {"outlier_treatment": "none", "outlier_cut": 0.01}, _unchanged),
            StepTestCase("winsorize_clips_tails", {"outlier_treatment": "winsorize", "outlier_cut": 0.05}, _clipped),
            StepTestCase("truncate_drops_rows", {"outlier_treatment": "truncate", "outlier_cut": 0.025}, _dropped),
        ]
