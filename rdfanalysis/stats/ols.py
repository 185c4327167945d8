"""
OLS estimation for RDFAnalysis steps.

QR-based least squares with coefficient standard errors, t statistics,
two-sided p-values and confidence intervals.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

FLOAT_NEAR_ZERO = 1e-15


def compute_critical_value(alpha, dfd):
    """Two-sided critical t value for a ``1 - alpha`` confidence interval.

    Args:
        alpha: Significance level.
        dfd: Residual degrees of freedom (``n - p - 1``).

    Returns:
        ``t_{1 - alpha/2, dfd}``, or ``inf`` when ``dfd <= 0``.
    """
    from scipy.stats import t as t_dist

    if dfd <= 0:
        return np.inf
    return t_dist.ppf(1 - alpha / 2, dfd)


@dataclass
class OLSFit:
    """Coefficient table of one OLS fit (intercept first).

    Attributes:
        names: Coefficient names.
        coef: Point estimates.
        se: Standard errors.
        t_values: ``coef / se``.
        p_values: Two-sided p-values.
        lower: Lower confidence bounds.
        upper: Upper confidence bounds.
        dof: Residual degrees of freedom.
        n: Number of observations.
        alpha: Significance level used for the bounds.
    """

    names: List[str]
    coef: np.ndarray
    se: np.ndarray
    t_values: np.ndarray
    p_values: np.ndarray
    lower: np.ndarray
    upper: np.ndarray
    dof: int
    n: int
    alpha: float

    def row(self, name: str) -> dict:
        """Estimate, bounds and test statistics for one coefficient."""
        i = self.names.index(name)
        return {
            "est": float(self.coef[i]),
            "lb": float(self.lower[i]),
            "ub": float(self.upper[i]),
            "se": float(self.se[i]),
            "t_value": float(self.t_values[i]),
            "p_value": float(self.p_values[i]),
            "n": self.n,
        }


def ols_fit(
    X: np.ndarray,
    y: np.ndarray,
    names: Optional[Sequence[str]] = None,
    alpha: float = 0.05,
) -> OLSFit:
    """
    Fit ``y = b0 + X b + e`` by least squares.

    Args:
        X: (n, p) regressor matrix without intercept column.
        y: (n,) response vector.
        names: Names of the ``p`` regressors. Defaults to ``x1..xp``.
        alpha: Significance level for the confidence bounds.

    Returns:
        ``OLSFit`` with ``"intercept"`` as the first coefficient.

    Raises:
        ValueError: On shape mismatch, missing values or no residual
            degrees of freedom.
        numpy.linalg.LinAlgError: If the regressors are collinear.
    """
    from scipy.stats import t as t_dist

    X = np.asarray(X, dtype=float)
    y = np.asarray(y, dtype=float)
    if X.ndim == 1:
        X = X[:, None]
    n, p = X.shape
    if y.shape != (n,):
        raise ValueError(f"y must have shape ({n},), got {y.shape}")
    if not (np.all(np.isfinite(X)) and np.all(np.isfinite(y))):
        raise ValueError("X and y must not contain missing or infinite values")

    if names is None:
        names = [f"x{i + 1}" for i in range(p)]
    names = ["intercept", *names]
    if len(names) != p + 1:
        raise ValueError(f"Expected {p} regressor names, got {len(names) - 1}")

    dof = n - (p + 1)
    if dof <= 0:
        raise ValueError(f"Not enough observations ({n}) for {p} regressors plus intercept")

    X_int = np.column_stack((np.ones(n), X))
    Q, R = np.linalg.qr(X_int)
    diag = np.abs(np.diag(R))
    rank_tol = diag.max() * max(n, p + 1) * np.finfo(float).eps
    if np.any(diag <= rank_tol):
        raise np.linalg.LinAlgError("Regressor matrix is rank deficient (collinear columns)")

    beta = np.linalg.solve(R, Q.T @ y)
    residuals = y - X_int @ beta
    mse = np.sum(residuals**2) / dof

    # (X'X)^-1 = R^-1 R^-T
    R_inv = np.linalg.solve(R, np.eye(p + 1))
    se = np.sqrt(mse * np.sum(R_inv**2, axis=1))

    with np.errstate(divide="ignore", invalid="ignore"):
        t_values = np.where(se > FLOAT_NEAR_ZERO, beta / se, np.inf * np.sign(beta))
    p_values = 2 * t_dist.sf(np.abs(t_values), dof)

    t_crit = compute_critical_value(alpha, dof)
    return OLSFit(
        names=list(names),
        coef=beta,
        se=se,
        t_values=t_values,
        p_values=p_values,
        lower=beta - t_crit * se,
        upper=beta + t_crit * se,
        dof=dof,
        n=n,
        alpha=alpha,
    )
