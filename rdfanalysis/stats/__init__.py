"""Statistical helpers: OLS estimation and synthetic data generation."""

from .data_generation import add_outliers, simulate_confounded_data
from .ols import OLSFit, compute_critical_value, ols_fit

__all__ = [
    "OLSFit",
    "ols_fit",
    "compute_critical_value",
    "simulate_confounded_data",
    "add_outliers",
]
