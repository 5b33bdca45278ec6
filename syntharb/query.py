"""
Query API
The in-process surface consumed by arbitrage detection and hedge sizing.

Usage:
    api = QueryAPI(RelationshipRegistry(EngineConfig()))
    api.ingest("NBA-1Q-LAL", 1.85, timestamp_ms=1700000000000)
    rel = api.query_relationship("NBA-1Q-LAL", "NBA-FULL-LAL")
    hedges = api.query_high_confidence(0.8)
"""

from typing import List, Optional

from .config import DEFAULT_MIN_CONFIDENCE, EngineConfig
from .core.engine import RelationshipRegistry
from .core.models import EngineStatistics, MarketId, RelationshipRecord


class QueryAPI:
    """Thin facade over one RelationshipRegistry"""

    def __init__(self, registry: Optional[RelationshipRegistry] = None):
        self.registry = registry or RelationshipRegistry()

    @classmethod
    def from_config(cls, config: EngineConfig) -> "QueryAPI":
        return cls(RelationshipRegistry(config))

    def ingest(self, market_id: MarketId, price: float, timestamp_ms: Optional[float] = None) -> None:
        self.registry.ingest(market_id, price, timestamp_ms)

    def query_relationship(self, primary: MarketId, hedge: MarketId) -> Optional[RelationshipRecord]:
        return self.registry.get_relationship(primary, hedge)

    def query_high_confidence(self, min_confidence: float = DEFAULT_MIN_CONFIDENCE) -> List[RelationshipRecord]:
        return self.registry.get_high_confidence_relationships(min_confidence)

    def hedge_ratio(self, primary: MarketId, hedge: MarketId) -> Optional[float]:
        """Current β for sizing the hedge leg, or None if not yet estimated"""
        record = self.registry.get_relationship(primary, hedge)
        return record.hedge_ratio if record is not None else None

    def get_statistics(self) -> EngineStatistics:
        return self.registry.get_statistics()

    def reset(self) -> None:
        self.registry.reset()
