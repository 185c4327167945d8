"""
Synthetic data generators for RDFAnalysis designs.

Generators follow the input-generator interface used by ``simulate_power``:
keyword parameters in, one freshly drawn dataset out. Passing ``rng`` makes
a draw reproducible.
"""

from typing import Optional

import numpy as np
import pandas as pd


def _get_rng(rng: Optional[np.random.Generator], seed: Optional[int]) -> np.random.Generator:
    if rng is not None:
        return rng
    return np.random.default_rng(seed)


def simulate_confounded_data(
    sample_size: int = 1000,
    effect: float = 0.5,
    confounding: float = 0.5,
    noise_sd: float = 1.0,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
) -> pd.DataFrame:
    """Draw a dataset in which ``z`` confounds the effect of ``x`` on ``y``.

    The generating model is::

        z ~ N(0, 1)
        x = confounding * z + N(0, 1)
        y = effect * x + confounding * z + N(0, noise_sd^2)

    Regressing ``y`` on ``x`` alone is biased by
    ``confounding^2 / (confounding^2 + 1)``; controlling for ``z`` recovers
    ``effect``.

    Args:
        sample_size: Number of observations.
        effect: True effect of ``x`` on ``y``.
        confounding: Strength of ``z`` on both ``x`` and ``y``.
        noise_sd: Standard deviation of the outcome error.
        rng: Random generator (takes precedence over *seed*).
        seed: Seed used when *rng* is not given.

    Returns:
        DataFrame with columns ``x``, ``y`` and ``z``.
    """
    if not isinstance(sample_size, (int, np.integer)) or sample_size < 1:
        raise ValueError(f"sample_size must be a positive integer, got {sample_size!r}")

    gen = _get_rng(rng, seed)
    z = gen.normal(0.0, 1.0, sample_size)
    x = confounding * z + gen.normal(0.0, 1.0, sample_size)
    y = effect * x + confounding * z + gen.normal(0.0, noise_sd, sample_size)
    return pd.DataFrame({"x": x, "y": y, "z": z})


def add_outliers(
    data: pd.DataFrame,
    column: str = "y",
    share: float = 0.02,
    scale: float = 10.0,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
) -> pd.DataFrame:
    """Return a copy of *data* with a share of *column* replaced by gross outliers.

    Outliers are drawn from ``N(0, scale^2)`` and placed at random rows.
    """
    if not 0 <= share <= 1:
        raise ValueError(f"share must be between 0 and 1, got {share}")
    gen = _get_rng(rng, seed)
    out = data.copy()
    n_out = int(round(share * len(out)))
    if n_out:
        rows = gen.choice(len(out), size=n_out, replace=False)
        out.iloc[rows, out.columns.get_loc(column)] = gen.normal(0.0, scale, n_out)
    return out
