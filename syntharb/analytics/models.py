"""
Analytics Output Types
Dataclasses for estimator results.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict


@dataclass(frozen=True)
class WeightedMoments:
    """
    Exponentially weighted second moments of two delta series.

    Normalized by the sum of weights; deltas are NOT demeaned.
    """
    covariance: float
    variance_primary: float
    variance_hedge: float
    sum_weights: float


@dataclass(frozen=True)
class HedgeParameters:
    """
    Hedge estimate for primary regressed on hedge.

    primary_Δ ≈ ratio * hedge_Δ
    """
    ratio: float              # Hedge ratio (beta)
    correlation: float        # Clamped to [-1, 1]
    confidence: float         # Fisher-z interval width score, [0, 0.99]
    covariance: float
    variance_primary: float
    variance_hedge: float
    residual_std_dev: float   # Population std of price-level residuals
    samples: int              # Prices per side

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
