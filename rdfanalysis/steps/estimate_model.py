"""
OLS effect estimation step with an optional control variable.
"""

from typing import Sequence

import numpy as np
import pandas as pd

from ..core.choices import categorical
from ..core.errors import StepRuntimeError
from ..core.step import Step, StepTestCase
from ..stats.data_generation import simulate_confounded_data
from ..stats.ols import ols_fit


class EstimateModel(Step):
    """Estimate the effect of a treatment on an outcome by OLS.

    The researcher degree of freedom is whether the confounders are
    included as controls.

    Args:
        outcome: Outcome column.
        treatment: Treatment column whose coefficient is reported.
        controls: Columns added as regressors when ``control_for_z`` is
            ``"yes"``.
        alpha: Significance level of the reported interval.
    """

    name = "estimate_model"
    description = """
        Estimate the effect of x on y by ordinary least squares.
        Reports the point estimate of x with its confidence interval.
    """
    choice_specs = (
        categorical(
            "control_for_z",
            ["yes", "no"],
            "Whether the confounder z enters the regression as a control",
        ),
    )

    def __init__(
        self,
        outcome: str = "y",
        treatment: str = "x",
        controls: Sequence[str] = ("z",),
        alpha: float = 0.05,
    ):
        self.outcome = outcome
        self.treatment = treatment
        self.controls = list(controls)
        self.alpha = alpha

    def transform(self, data: pd.DataFrame, control_for_z: str) -> pd.DataFrame:
        regressors = [self.treatment] + (self.controls if control_for_z == "yes" else [])
        fit = ols_fit(
            data[regressors].to_numpy(dtype=float),
            data[self.outcome].to_numpy(dtype=float),
            names=regressors,
            alpha=self.alpha,
        )
        return pd.DataFrame([fit.row(self.treatment)])

    def test_input(self):
        return simulate_confounded_data(400, effect=0.5, confounding=1.0, seed=2137)

    def test_cases(self):
        def _interval_contains_estimate(df):
            row = df.iloc[0]
            assert len(df) == 1
            assert row["lb"] < row["est"] < row["ub"]

        def _close_to_truth(df):
            assert abs(df["est"].iloc[0] - 0.5) < 0.2

        def _biased_without_control(df):
            # bias is confounding^2 / (confounding^2 + 1) = 0.5
            assert df["est"].iloc[0] > 0.75

        collinear = simulate_confounded_data(50, seed=1)
        collinear["z"] = collinear["x"] * 2.0

        return [
            StepTestCase("interval_contains_estimate", {"control_for_z": "no"}, _interval_contains_estimate),
            StepTestCase("controlled_estimate_recovers_effect", {"control_for_z": "yes"}, _close_to_truth),
            StepTestCase("uncontrolled_estimate_is_biased", {"control_for_z": "no"}, _biased_without_control),
            StepTestCase(
                "collinear_control_fails",
                {"control_for_z": "yes"},
                input=collinear,
                raises=StepRuntimeError,
            ),
            StepTestCase(
                "estimate_is_finite",
                {"control_for_z": "yes"},
                lambda df: bool(np.isfinite(df.to_numpy(dtype=float)).all()),
            ),
        ]
