"""
Price Series Store
Per-market price history feeding the covariance estimator.

Each market keeps its last `maxlen` prices in arrival order. The
estimator always works on a copied snapshot, so a tick landing mid
fan-out never changes the prices a pair estimate was built from.
"""

import threading
from collections import deque
from typing import Deque, Dict, List, Optional

from .models import MarketId, PricePoint


class PriceSeriesStore:
    """
    In-memory ring buffers of recent prices, one per market.

    - Per-market deques with automatic FIFO eviction
    - O(1) append, O(N) snapshot
    - One lock per market: appends to the same market are serialized,
      snapshots are copies taken under that lock

    Usage:
        store = PriceSeriesStore(maxlen=1000)
        store.update_price("NBA-1Q-LAL", 1.85)
        prices = store.snapshot("NBA-1Q-LAL")
    """

    def __init__(self, maxlen: int = 1000):
        if maxlen < 1:
            raise ValueError(f"maxlen must be positive, got {maxlen}")
        self.maxlen = maxlen
        self._data: Dict[MarketId, Deque[PricePoint]] = {}
        self._locks: Dict[MarketId, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        self._count: int = 0

    def _series(self, market_id: MarketId):
        """Lazily create the deque and lock for a market"""
        with self._registry_lock:
            if market_id not in self._data:
                self._data[market_id] = deque(maxlen=self.maxlen)
                self._locks[market_id] = threading.Lock()
            return self._data[market_id], self._locks[market_id]

    def append(self, market_id: MarketId, point: PricePoint) -> None:
        """Add a validated point; the oldest is dropped when full"""
        series, lock = self._series(market_id)
        with lock:
            series.append(point)
        with self._registry_lock:
            self._count += 1

    def update_price(self, market_id: MarketId, price: float, timestamp_ms: Optional[float] = None) -> PricePoint:
        """Validate and append a raw price. Returns the stored point."""
        point = PricePoint(price=price, timestamp_ms=timestamp_ms)
        self.append(market_id, point)
        return point

    def snapshot_points(self, market_id: MarketId) -> List[PricePoint]:
        """Copy of the series (oldest first)"""
        with self._registry_lock:
            series = self._data.get(market_id)
            lock = self._locks.get(market_id)
        if series is None:
            return []
        with lock:
            return list(series)

    def snapshot(self, market_id: MarketId) -> List[float]:
        """Price array for analytics (oldest first)"""
        return [p.price for p in self.snapshot_points(market_id)]

    def latest(self, market_id: MarketId) -> Optional[PricePoint]:
        """Most recent point"""
        points = self.snapshot_points(market_id)
        return points[-1] if points else None

    def markets(self) -> List[MarketId]:
        """List all markets in the store"""
        with self._registry_lock:
            return list(self._data.keys())

    def count(self, market_id: MarketId = None) -> int:
        """Points held for one market, or total appends"""
        if market_id is not None:
            with self._registry_lock:
                series = self._data.get(market_id)
            return len(series) if series is not None else 0
        return self._count

    def clear(self, market_id: MarketId = None) -> None:
        """Drop one market, or everything"""
        with self._registry_lock:
            if market_id is not None:
                self._data.pop(market_id, None)
                self._locks.pop(market_id, None)
            else:
                self._data.clear()
                self._locks.clear()
                self._count = 0

    def __len__(self) -> int:
        return len(self.markets())

    def __contains__(self, market_id: MarketId) -> bool:
        with self._registry_lock:
            return market_id in self._data

    def stats(self) -> dict:
        """Buffer statistics"""
        with self._registry_lock:
            per_market = {m: len(d) for m, d in self._data.items()}
        return {
            "total_points": self._count,
            "markets": len(per_market),
            "capacity": self.maxlen,
            "per_market": per_market,
        }
