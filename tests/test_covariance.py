"""
Tests for syntharb/analytics/covariance.py.

Exponentially weighted covariance, hedge ratio, correlation and the
Fisher-z confidence score.
"""

import math

import numpy as np
import pytest

from syntharb.analytics import covariance
from syntharb.analytics.covariance import (
    MAX_CONFIDENCE,
    decay_factor,
    decay_weights,
    estimate,
    fisher_confidence,
    price_deltas,
    weighted_moments,
)
from syntharb.errors import InputMismatchError, InsufficientDataError


# =============================================================================
# BUILDING BLOCKS
# =============================================================================


class TestDecay:
    """Test decay factor and positional weights."""

    def test_half_life_halves_weight(self):
        lam = decay_factor(300_000)
        assert lam ** 300_000 == pytest.approx(0.5)

    def test_rejects_non_positive_half_life(self):
        with pytest.raises(ValueError):
            decay_factor(0)

    def test_weights_one_per_delta(self):
        weights = decay_weights(60, 10)
        assert len(weights) == 59

    def test_newest_delta_weighs_lambda(self):
        weights = decay_weights(60, 10)
        assert weights[-1] == pytest.approx(decay_factor(10))

    def test_weights_increase_towards_newest(self):
        weights = decay_weights(60, 10)
        assert np.all(np.diff(weights) > 0)


class TestPriceDeltas:
    def test_raw_differences_not_returns(self):
        result = price_deltas(np.array([100.0, 102.0, 101.0]))
        np.testing.assert_array_equal(result, [2.0, -1.0])


class TestWeightedMoments:
    def test_uniform_weights_match_mean_products(self):
        p = np.array([1.0, -1.0, 2.0])
        h = np.array([2.0, -2.0, 1.0])
        moments = weighted_moments(p, h, np.ones(3))

        assert moments.covariance == pytest.approx(np.mean(p * h))
        assert moments.variance_primary == pytest.approx(np.mean(p * p))
        assert moments.variance_hedge == pytest.approx(np.mean(h * h))
        assert moments.sum_weights == 3.0

    def test_zero_weights_give_zero_moments(self):
        moments = weighted_moments(np.ones(3), np.ones(3), np.zeros(3))
        assert moments.covariance == 0.0
        assert moments.variance_hedge == 0.0


class TestHedgeRatioAndCorrelation:
    def test_flat_hedge_gives_zero_ratio(self):
        assert covariance.hedge_ratio(1.5, 0.0) == 0.0

    def test_ratio_is_cov_over_var(self):
        assert covariance.hedge_ratio(2.0, 4.0) == 0.5

    def test_flat_leg_gives_zero_correlation(self):
        assert covariance.correlation(1.0, 0.0, 1.0) == 0.0
        assert covariance.correlation(1.0, 1.0, -1.0) == 0.0

    def test_correlation_clamped(self):
        assert covariance.correlation(1.0 + 1e-12, 1.0, 1.0) == 1.0
        assert covariance.correlation(-3.0, 1.0, 1.0) == -1.0

    @pytest.mark.parametrize("cov,var_p,var_h", [
        (float("nan"), 1.0, 1.0),
        (1.0, float("nan"), 1.0),
        (float("inf"), float("inf"), float("inf")),
    ])
    def test_non_finite_moments_give_zero_correlation(self, cov, var_p, var_h):
        assert covariance.correlation(cov, var_p, var_h) == 0.0


class TestFisherConfidence:
    """Test the confidence score derived from the Fisher z interval."""

    def test_unit_correlation_caps(self):
        assert fisher_confidence(1.0, 2) == MAX_CONFIDENCE
        assert fisher_confidence(-1.0, 100) == MAX_CONFIDENCE

    def test_too_few_samples_zero(self):
        assert fisher_confidence(0.5, 3) == 0.0

    def test_matches_closed_form(self):
        r, n = 0.8, 60
        z = math.atanh(r)
        se = 1 / math.sqrt(n - 3)
        expected = 1 - (math.tanh(z + 1.96 * se) - math.tanh(z - 1.96 * se)) / 2
        assert fisher_confidence(r, n) == pytest.approx(expected)

    def test_sign_does_not_matter(self):
        assert fisher_confidence(-0.6, 80) == fisher_confidence(0.6, 80)

    def test_more_samples_more_confidence(self):
        assert fisher_confidence(0.8, 200) > fisher_confidence(0.8, 20)

    @pytest.mark.parametrize("r", [0.0, 0.3, 0.7, 0.95, 0.999999])
    def test_always_in_range(self, r):
        result = fisher_confidence(r, 50)
        assert 0.0 <= result <= MAX_CONFIDENCE


# =============================================================================
# ESTIMATE
# =============================================================================


class TestEstimateInputContract:
    """Structural input errors are the only failures."""

    def test_below_min_samples_raises(self):
        prices = list(range(49))
        with pytest.raises(InsufficientDataError) as exc:
            estimate(prices, prices, min_samples=50)
        assert exc.value.required == 50
        assert exc.value.actual == 49

    def test_length_mismatch_raises(self):
        with pytest.raises(InputMismatchError) as exc:
            estimate(list(range(60)), list(range(55)), min_samples=50)
        assert exc.value.primary_len == 60
        assert exc.value.hedge_len == 55

    def test_insufficient_checked_before_mismatch(self):
        with pytest.raises(InsufficientDataError):
            estimate(list(range(10)), list(range(20)), min_samples=50)

    def test_single_price_never_estimated(self):
        with pytest.raises(InsufficientDataError):
            estimate([1.0], [1.0], min_samples=1)


class TestEstimate:
    """Test full estimation against known relationships."""

    def test_perfectly_linear(self, linear_prices):
        params = estimate(linear_prices, linear_prices)

        assert params.correlation == pytest.approx(1.0)
        assert params.ratio == pytest.approx(1.0)
        assert params.confidence == pytest.approx(0.99)
        assert params.residual_std_dev == pytest.approx(0.0)
        assert params.samples == 60

    def test_inverse_relationship(self, linear_prices):
        hedge = [-2.0 * p for p in linear_prices]
        params = estimate(linear_prices, hedge)

        assert params.correlation == pytest.approx(-1.0)
        assert params.ratio == pytest.approx(-0.5)
        assert params.confidence == pytest.approx(0.99)

    def test_scaled_with_offset(self, correlated_walks):
        _, hedge = correlated_walks
        primary = 3.0 * hedge + 10.0
        params = estimate(primary, hedge)

        assert params.ratio == pytest.approx(3.0)
        assert params.correlation == pytest.approx(1.0)
        assert params.residual_std_dev == pytest.approx(0.0, abs=1e-9)

    def test_ratio_times_variance_is_covariance(self, correlated_walks):
        primary, hedge = correlated_walks
        params = estimate(primary, hedge)

        assert params.ratio * params.variance_hedge == pytest.approx(params.covariance, rel=1e-9)

    def test_correlated_walks_strongly_positive(self, correlated_walks):
        primary, hedge = correlated_walks
        params = estimate(primary, hedge)

        assert params.correlation > 0.9
        assert params.ratio > 0

    def test_deterministic(self, correlated_walks):
        primary, hedge = correlated_walks
        assert estimate(primary, hedge) == estimate(primary.copy(), hedge.copy())

    def test_constant_primary(self, correlated_walks):
        _, hedge = correlated_walks
        params = estimate(np.full(len(hedge), 100.0), hedge)

        assert params.correlation == 0.0
        assert params.ratio == 0.0
        assert 0.0 <= params.confidence <= MAX_CONFIDENCE

    def test_both_constant(self):
        params = estimate([5.0] * 60, [7.0] * 60)

        assert params.correlation == 0.0
        assert params.ratio == 0.0
        assert params.covariance == 0.0
        assert 0.0 <= params.confidence <= MAX_CONFIDENCE
        assert params.residual_std_dev == 0.0

    def test_short_half_life_tracks_recent_regime(self):
        """Correlation flips sign mid-series; a short half-life follows the newest half."""
        rng = np.random.default_rng(7)
        hedge_deltas = rng.choice([-1.0, 1.0], size=100)
        primary_deltas = np.concatenate([hedge_deltas[:50], -hedge_deltas[50:]])

        hedge = np.concatenate([[100.0], 100.0 + np.cumsum(hedge_deltas)])
        primary = np.concatenate([[100.0], 100.0 + np.cumsum(primary_deltas)])

        recent = estimate(primary, hedge, half_life_ms=2)
        flat = estimate(primary, hedge, half_life_ms=1e12)

        assert recent.correlation < -0.9
        assert abs(flat.correlation) < 0.01

    def test_to_dict_keys(self, linear_prices):
        data = estimate(linear_prices, linear_prices).to_dict()
        assert set(data) == {
            "ratio", "correlation", "confidence", "covariance",
            "variance_primary", "variance_hedge", "residual_std_dev", "samples",
        }
