"""
Exponentially Weighted Covariance
Hedge ratio, correlation and confidence for one ordered market pair.

Update: Every tick, once per tracked counterpart market
Use: Hedge sizing for synthetic arbitrage

Pipeline:
    prices → first differences → decay weights → weighted moments
           → hedge ratio / correlation → residual std → Fisher-z confidence

Weights decay by buffer POSITION, not by elapsed time between points:
uniform spacing is assumed. Each call recomputes over the whole buffer.
"""

import math
from typing import Sequence

import numpy as np

from ..config import DEFAULT_HALF_LIFE_MS, DEFAULT_MIN_SAMPLES
from ..errors import InputMismatchError, InsufficientDataError
from .models import HedgeParameters, WeightedMoments


# 97.5th percentile of N(0, 1): two-sided 95% interval
Z_CRITICAL_95: float = 1.96

MAX_CONFIDENCE: float = 0.99

# Fisher standard error needs n - 3 > 0
MIN_FISHER_SAMPLES: int = 4


def price_deltas(prices: np.ndarray) -> np.ndarray:
    """Raw first differences (not returns)"""
    return np.diff(np.asarray(prices, dtype=float))


def decay_factor(half_life_ms: float) -> float:
    """λ such that λ^half_life = 1/2"""
    if half_life_ms <= 0:
        raise ValueError(f"half_life_ms must be positive, got {half_life_ms}")
    return math.exp(-math.log(2) / half_life_ms)


def decay_weights(n_prices: int, half_life_ms: float) -> np.ndarray:
    """
    Weights for the n_prices - 1 deltas.

    The delta ending at buffer position i (1..N-1) gets λ^(N-i),
    so the newest delta weighs λ and older ones decay geometrically.
    """
    lam = decay_factor(half_life_ms)
    exponents = n_prices - np.arange(1, n_prices, dtype=float)
    return np.power(lam, exponents)


def weighted_moments(
    primary_deltas: np.ndarray,
    hedge_deltas: np.ndarray,
    weights: np.ndarray
) -> WeightedMoments:
    """Weighted cross and auto second moments, normalized by Σw"""
    sum_weights = float(np.sum(weights))
    if sum_weights <= 0:
        return WeightedMoments(0.0, 0.0, 0.0, 0.0)

    cov = float(np.sum(weights * primary_deltas * hedge_deltas)) / sum_weights
    var_p = float(np.sum(weights * primary_deltas * primary_deltas)) / sum_weights
    var_h = float(np.sum(weights * hedge_deltas * hedge_deltas)) / sum_weights

    return WeightedMoments(
        covariance=cov,
        variance_primary=var_p,
        variance_hedge=var_h,
        sum_weights=sum_weights
    )


def hedge_ratio(covariance: float, variance_hedge: float) -> float:
    """β = cov / var_hedge, 0 for a flat hedge leg"""
    if variance_hedge <= 0:
        return 0.0
    return covariance / variance_hedge


def correlation(covariance: float, variance_primary: float, variance_hedge: float) -> float:
    """Clamped to [-1, 1]; 0 if either leg is flat or the moments overflowed"""
    if variance_primary <= 0 or variance_hedge <= 0:
        return 0.0
    r = covariance / math.sqrt(variance_primary * variance_hedge)
    if not math.isfinite(r):
        return 0.0
    return max(-1.0, min(1.0, r))


def residual_std_dev(
    primary: np.ndarray,
    hedge: np.ndarray,
    ratio: float
) -> float:
    """
    Population std of primary - β·hedge over price levels.

    Levels, not deltas: this is the spread a hedged position carries.
    """
    residuals = np.asarray(primary, dtype=float) - ratio * np.asarray(hedge, dtype=float)
    if len(residuals) == 0:
        return 0.0
    return float(np.std(residuals))


def fisher_confidence(corr: float, samples: int) -> float:
    """
    Confidence score from the width of a 95% Fisher-z interval.

    z = atanh(|r|), se = 1/√(n-3)
    [z ± 1.96·se] → tanh → confidence = 1 - (r_upper - r_lower) / 2

    Returns:
        Score in [0, 0.99]
    """
    abs_corr = abs(corr)
    if abs_corr >= 1:
        return MAX_CONFIDENCE
    if samples < MIN_FISHER_SAMPLES:
        return 0.0

    z = math.atanh(abs_corr)
    se = 1.0 / math.sqrt(samples - 3)

    r_lower = math.tanh(z - Z_CRITICAL_95 * se)
    r_upper = math.tanh(z + Z_CRITICAL_95 * se)

    confidence = 1.0 - abs(r_upper - r_lower) / 2.0
    return max(0.0, min(MAX_CONFIDENCE, confidence))


def estimate(
    primary: Sequence[float],
    hedge: Sequence[float],
    half_life_ms: float = DEFAULT_HALF_LIFE_MS,
    min_samples: int = DEFAULT_MIN_SAMPLES
) -> HedgeParameters:
    """
    Estimate the relationship of primary regressed on hedge.

    Pure and deterministic: identical inputs give identical outputs.

    Args:
        primary: Primary market prices (oldest first)
        hedge: Hedge market prices, aligned with primary
        half_life_ms: Decay half-life, in buffer positions
        min_samples: Minimum prices required on each side

    Returns:
        HedgeParameters

    Raises:
        InsufficientDataError: Either side shorter than min_samples
        InputMismatchError: Sides of different length
    """
    p = np.asarray(primary, dtype=float)
    h = np.asarray(hedge, dtype=float)

    # At least one delta is needed for any moment
    required = max(min_samples, 2)
    if len(p) < required or len(h) < required:
        raise InsufficientDataError(required, min(len(p), len(h)))

    if len(p) != len(h):
        raise InputMismatchError(len(p), len(h))

    n = len(p)
    weights = decay_weights(n, half_life_ms)
    moments = weighted_moments(price_deltas(p), price_deltas(h), weights)

    ratio = hedge_ratio(moments.covariance, moments.variance_hedge)
    corr = correlation(moments.covariance, moments.variance_primary, moments.variance_hedge)

    return HedgeParameters(
        ratio=ratio,
        correlation=corr,
        confidence=fisher_confidence(corr, n),
        covariance=moments.covariance,
        variance_primary=moments.variance_primary,
        variance_hedge=moments.variance_hedge,
        residual_std_dev=residual_std_dev(p, h, ratio),
        samples=n
    )
