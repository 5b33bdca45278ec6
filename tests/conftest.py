"""
Shared fixtures for syntharb tests.
"""

import numpy as np
import pytest

from syntharb import EngineConfig, RelationshipRecord, RelationshipRegistry
from syntharb.analytics import covariance
from syntharb.analytics.models import HedgeParameters
from syntharb.errors import InsufficientDataError


@pytest.fixture
def registry():
    """Registry with default settings (min_samples=50, history=1000)"""
    return RelationshipRegistry(EngineConfig())


@pytest.fixture
def linear_prices():
    """[1, 2, ..., 60]"""
    return [float(i) for i in range(1, 61)]


@pytest.fixture
def correlated_walks():
    """Two random walks sharing a common driver (hedge leg scaled by 0.5)."""
    rng = np.random.default_rng(42)
    base = rng.normal(0, 1.0, 200)
    primary = 100 + np.cumsum(base + rng.normal(0, 0.2, 200))
    hedge = 50 + np.cumsum(0.5 * base + rng.normal(0, 0.1, 200))
    return primary, hedge


@pytest.fixture
def make_record():
    """Factory for hand-built relationship records."""
    def _make(primary="A", hedge="B", correlation=0.8, confidence=0.8, hedge_ratio=1.0):
        return RelationshipRecord(
            primary_market=primary,
            hedge_market=hedge,
            covariance=hedge_ratio,
            correlation=correlation,
            hedge_ratio=hedge_ratio,
            variance_primary=1.0,
            variance_hedge=1.0,
            residual_std_dev=0.1,
            confidence=confidence,
            samples=60,
            half_life_ms=300_000,
            last_updated=0,
        )
    return _make


@pytest.fixture
def ingest_alternating():
    """Round-robin ingest: one price per market per step, in dict order."""
    def _ingest(registry, series_by_market):
        for step in zip(*series_by_market.values()):
            for market, price in zip(series_by_market.keys(), step):
                registry.ingest(market, float(price))
    return _ingest


@pytest.fixture
def seeded_registry(monkeypatch):
    """
    Registry whose records carry chosen correlation/confidence values.

    Each market ticks a constant price that identifies it; the estimator is
    replaced by a lookup on (primary price, hedge price). Pairs absent from
    the table raise InsufficientDataError and are skipped by the fan-out.
    """
    def _seed(specs):
        markets = sorted({m for pair in specs for m in pair})
        price_of = {m: float(i + 1) for i, m in enumerate(markets)}
        table = {
            (price_of[p], price_of[h]): HedgeParameters(
                ratio=1.0,
                correlation=corr,
                confidence=conf,
                covariance=1.0,
                variance_primary=1.0,
                variance_hedge=1.0,
                residual_std_dev=0.1,
                samples=2,
            )
            for (p, h), (corr, conf) in specs.items()
        }

        def fake_estimate(primary, hedge, half_life_ms, min_samples):
            key = (primary[-1], hedge[-1])
            if key not in table:
                raise InsufficientDataError(min_samples, len(primary))
            return table[key]

        monkeypatch.setattr(covariance, "estimate", fake_estimate)

        registry = RelationshipRegistry(EngineConfig(min_samples=2))
        for _ in range(3):
            for market in markets:
                registry.ingest(market, price_of[market])
        return registry
    return _seed
