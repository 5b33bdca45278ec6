"""
Core Module
Price storage and relationship maintenance.

Exports:
    Models: PricePoint, RelationshipRecord, EngineStatistics, MarketId
    Buffer: PriceSeriesStore
    Registry: RelationshipRegistry
"""

from .models import (
    MarketId,
    PricePoint,
    RelationshipRecord,
    EngineStatistics,
)

from .buffer import PriceSeriesStore
from .engine import RelationshipRegistry

__all__ = [
    # Models
    "MarketId",
    "PricePoint",
    "RelationshipRecord",
    "EngineStatistics",
    # Buffer
    "PriceSeriesStore",
    # Registry
    "RelationshipRegistry",
]
