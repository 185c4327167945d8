"""
Shared pytest fixtures for RDFAnalysis tests.
"""

import numpy as np
import pandas as pd
import pytest

from rdfanalysis.core import Design, FunctionStep, categorical, numeric

SEED = 2137


@pytest.fixture
def suppress_output(monkeypatch):
    """Silence printed summaries."""
    monkeypatch.setattr("builtins.print", lambda *args, **kwargs: None)


@pytest.fixture
def confounded_data():
    """Dataset where z confounds x -> y (true effect 0.5, naive slope 1.0)."""
    from rdfanalysis.stats import simulate_confounded_data

    return simulate_confounded_data(2000, effect=0.5, confounding=1.0, seed=SEED)


@pytest.fixture
def add_step():
    """Numeric step with one choice: adds ``k`` to its input."""
    return FunctionStep(
        "add",
        lambda data, k: data + k,
        choices=[numeric("k", [1, 2])],
        description="Add k.",
    )


@pytest.fixture
def scale_step():
    """Categorical step with one choice: multiplies its input."""
    factors = {"one": 1, "ten": 10, "hundred": 100}
    return FunctionStep(
        "scale",
        lambda data, factor: data * factors[factor],
        choices=[categorical("factor", ["one", "ten", "hundred"])],
        description="Multiply by a factor.",
    )


@pytest.fixture
def two_step_design(add_step, scale_step):
    """2 x 3 design: add -> scale."""
    return Design([add_step, scale_step], name="arithmetic")


@pytest.fixture
def flaky_design():
    """Design whose 'bad' choice makes the step raise."""

    def divide(data, mode):
        if mode == "bad":
            raise ZeroDivisionError("division by zero")
        return data / 2

    return Design([FunctionStep("divide", divide, choices=[categorical("mode", ["good", "bad"])])])


@pytest.fixture
def sample_frame():
    return pd.DataFrame({"a": np.arange(5, dtype=float), "b": np.arange(5, dtype=float) * 2})
