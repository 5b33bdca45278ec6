"""
Analytics Module
Pure pair statistics for cross-market hedge sizing.

Structure:
    analytics/
    ├── models.py       → Output types (dataclasses)
    └── covariance.py   → Exponentially weighted covariance estimator

Usage:
    from syntharb.analytics import covariance

    params = covariance.estimate(primary_prices, hedge_prices, half_life_ms=300_000)
    params.ratio, params.correlation, params.confidence

Design Principles:
    ✓ ALL functions are PURE (inputs → computation → outputs)
    ✓ NO state management
"""

from . import covariance

from .models import (
    HedgeParameters,
    WeightedMoments,
)

__all__ = [
    # Modules
    "covariance",
    # Types
    "HedgeParameters",
    "WeightedMoments",
]
