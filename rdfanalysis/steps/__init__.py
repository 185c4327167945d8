"""Ready-made steps for common analysis decisions."""

from .estimate_model import EstimateModel
from .trim_outliers import TrimOutliers

__all__ = ["EstimateModel", "TrimOutliers"]
