"""
Relationship Registry
Keeps directional pair estimates current as prices arrive.

On every ingest for market M:
    append to M's series
    → for each other tracked market with enough samples
    → snapshot both series, estimate (M → other), store

Cost is O(K·N) per tick (K other markets, N buffer size). With all markets
ticking at similar rates this is quadratic in the active market count;
bound it with EngineConfig.pairs_of_interest.
"""

import logging
import threading
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

import pandas as pd
from pydantic import ValidationError

from ..analytics import covariance
from ..config import DEFAULT_MIN_CONFIDENCE, EngineConfig
from ..errors import InputMismatchError, InsufficientDataError
from .buffer import PriceSeriesStore
from .models import EngineStatistics, MarketId, RelationshipRecord

logger = logging.getLogger(__name__)

PairKey = Tuple[MarketId, MarketId]
OnRelationshipCallback = Callable[[RelationshipRecord], None]

RECORD_COLUMNS = [
    "primary_market",
    "hedge_market",
    "covariance",
    "correlation",
    "hedge_ratio",
    "variance_primary",
    "variance_hedge",
    "residual_std_dev",
    "confidence",
    "samples",
    "half_life_ms",
    "last_updated",
]


def _now_ms() -> int:
    return int(time.time() * 1000)


class RelationshipRegistry:
    """
    Owner of all price series and relationship records.

    Construct one per engine and pass it to consumers; there is no
    module-level instance.

    Usage:
        registry = RelationshipRegistry(EngineConfig(min_samples=50))
        registry.ingest("NBA-1Q-LAL", 1.85)
        rel = registry.get_relationship("NBA-1Q-LAL", "NBA-FULL-LAL")
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self._store = PriceSeriesStore(maxlen=self.config.max_history_size)
        self._records: Dict[PairKey, RelationshipRecord] = {}
        self._records_lock = threading.Lock()
        self._on_relationship: List[OnRelationshipCallback] = []
        # One writer per market: append and fan-out run under the same lock
        self._ingest_locks: Dict[MarketId, threading.Lock] = {}
        self._ingest_locks_guard = threading.Lock()
        self._stats_lock = threading.Lock()
        self._stats = self._fresh_stats()

    @staticmethod
    def _fresh_stats() -> Dict[str, Any]:
        return {
            "ticks_ingested": 0,
            "rejected_prices": 0,
            "relationships_computed": 0,
            "pair_errors": 0,
            "start_time": datetime.now()
        }

    # -------------------------------------------------------------------------
    # Ingest
    # -------------------------------------------------------------------------

    def ingest(self, market_id: MarketId, price: float, timestamp_ms: Optional[float] = None) -> None:
        """
        Record a price and refresh every (market_id → other) relationship.

        Never raises. Invalid prices are dropped and logged; per-pair
        estimation failures skip that pair only.
        """
        with self._ingest_lock(market_id):
            try:
                point = self._store.update_price(market_id, price, timestamp_ms)
            except (ValidationError, ValueError, TypeError) as e:
                self._bump("rejected_prices")
                logger.warning("Rejected price %r for %s: %s", price, market_id, e)
                return

            self._bump("ticks_ingested")
            self._update_relationships(market_id, point.timestamp_ms)

    def _ingest_lock(self, market_id: MarketId) -> threading.Lock:
        with self._ingest_locks_guard:
            lock = self._ingest_locks.get(market_id)
            if lock is None:
                lock = self._ingest_locks[market_id] = threading.Lock()
            return lock

    def _bump(self, key: str) -> None:
        with self._stats_lock:
            self._stats[key] += 1

    def _update_relationships(self, market_id: MarketId, timestamp_ms: Optional[float]) -> None:
        min_samples = self.config.min_samples
        primary = self._store.snapshot(market_id)
        if len(primary) < min_samples:
            return

        for other in self._store.markets():
            if other == market_id or not self.config.tracks_pair(market_id, other):
                continue

            hedge = self._store.snapshot(other)
            if len(hedge) < min_samples:
                continue

            try:
                record = self._compute(market_id, other, primary, hedge, timestamp_ms)
            except InsufficientDataError as e:
                self._bump("pair_errors")
                logger.debug("Skipping %s -> %s: %s", market_id, other, e)
                continue
            except (InputMismatchError, ValidationError) as e:
                # Overflowing moments land here as non-finite record fields
                self._bump("pair_errors")
                logger.warning("Skipping %s -> %s: %s", market_id, other, e)
                continue

            with self._records_lock:
                self._records[record.key] = record
            self._bump("relationships_computed")

            for callback in self._on_relationship:
                try:
                    callback(record)
                except Exception:
                    logger.exception("Relationship callback failed for %s -> %s", market_id, other)

    def _compute(
        self,
        primary_market: MarketId,
        hedge_market: MarketId,
        primary: List[float],
        hedge: List[float],
        timestamp_ms: Optional[float]
    ) -> RelationshipRecord:
        if self.config.align_tail:
            n = min(len(primary), len(hedge))
            primary, hedge = primary[-n:], hedge[-n:]

        params = covariance.estimate(
            primary,
            hedge,
            half_life_ms=self.config.half_life_ms,
            min_samples=self.config.min_samples
        )

        return RelationshipRecord(
            primary_market=primary_market,
            hedge_market=hedge_market,
            covariance=params.covariance,
            correlation=params.correlation,
            hedge_ratio=params.ratio,
            variance_primary=params.variance_primary,
            variance_hedge=params.variance_hedge,
            residual_std_dev=params.residual_std_dev,
            confidence=params.confidence,
            samples=params.samples,
            half_life_ms=self.config.half_life_ms,
            last_updated=int(timestamp_ms) if timestamp_ms is not None else _now_ms()
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_relationship(self, primary_market: MarketId, hedge_market: MarketId) -> Optional[RelationshipRecord]:
        with self._records_lock:
            return self._records.get((primary_market, hedge_market))

    def relationships(self) -> List[RelationshipRecord]:
        with self._records_lock:
            return list(self._records.values())

    def get_high_confidence_relationships(
        self,
        min_confidence: float = DEFAULT_MIN_CONFIDENCE
    ) -> List[RelationshipRecord]:
        """Records with confidence ≥ min_confidence AND |correlation| ≥ config.min_correlation"""
        return [
            r for r in self.relationships()
            if r.is_high_confidence(min_confidence, self.config.min_correlation)
        ]

    def markets(self) -> List[MarketId]:
        return self._store.markets()

    def snapshot(self, market_id: MarketId) -> List[float]:
        return self._store.snapshot(market_id)

    def on_relationship(self, callback: OnRelationshipCallback) -> None:
        self._on_relationship.append(callback)

    # -------------------------------------------------------------------------
    # Lifecycle / observability
    # -------------------------------------------------------------------------

    def reset(self) -> None:
        """Drop every series and record"""
        self._store.clear()
        with self._records_lock:
            self._records.clear()
        with self._stats_lock:
            self._stats = self._fresh_stats()
        logger.info("Relationship registry reset")

    def get_statistics(self) -> EngineStatistics:
        relationships = self.relationships()
        total = len(relationships)

        return EngineStatistics(
            total_markets=len(self._store),
            total_relationships=total,
            high_confidence_count=sum(
                1 for r in relationships
                if r.is_high_confidence(DEFAULT_MIN_CONFIDENCE, self.config.min_correlation)
            ),
            avg_correlation=sum(abs(r.correlation) for r in relationships) / total if total else 0.0,
            avg_confidence=sum(r.confidence for r in relationships) / total if total else 0.0,
        )

    def stats(self) -> Dict[str, Any]:
        with self._stats_lock:
            counters = dict(self._stats)
        uptime = (datetime.now() - counters["start_time"]).total_seconds()
        return {
            **counters,
            "uptime_seconds": uptime,
            "buffer": self._store.stats(),
            "relationships": len(self.relationships()),
        }

    def to_dataframe(self) -> pd.DataFrame:
        """One row per ordered pair, sorted by (primary, hedge)"""
        rows = [r.model_dump(include=set(RECORD_COLUMNS)) for r in self.relationships()]
        df = pd.DataFrame(rows, columns=RECORD_COLUMNS)
        if df.empty:
            return df
        return df.sort_values(["primary_market", "hedge_market"]).reset_index(drop=True)
