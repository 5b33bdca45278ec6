"""
Domain Models
The data contracts shared by the buffer, the registry and query consumers.

After ingestion, the engine only sees these types.
"""

import math
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


MarketId = str


# =============================================================================
# PricePoint — The Core Data Contract
# =============================================================================

class PricePoint(BaseModel):
    """
    A single observed price for one market.

    Arrival order is authoritative. The timestamp is kept for
    observability; decay weights ignore it.

    Fields:
        price: Finite float price
        timestamp_ms: Optional epoch milliseconds supplied by the feed
    """
    model_config = ConfigDict(frozen=True)

    price: float
    timestamp_ms: Optional[float] = None

    @field_validator('price')
    @classmethod
    def finite_price(cls, v):
        """NaN/inf would poison every moment downstream"""
        if not math.isfinite(v):
            raise ValueError(f"Price must be finite, got {v}")
        return v

    @field_validator('timestamp_ms')
    @classmethod
    def finite_timestamp(cls, v):
        if v is not None and not math.isfinite(v):
            raise ValueError(f"Timestamp must be finite, got {v}")
        return v


# =============================================================================
# RelationshipRecord — Directional pair estimate
# =============================================================================

class RelationshipRecord(BaseModel):
    """
    Estimated relationship of primary_market regressed on hedge_market.

    Directional: (A, B) and (B, A) are separate records, each written
    only by its primary market's ingest path.
    """
    model_config = ConfigDict(frozen=True)

    primary_market: MarketId
    hedge_market: MarketId
    covariance: float
    correlation: float = Field(..., ge=-1.0, le=1.0)
    hedge_ratio: float
    variance_primary: float = 0.0
    variance_hedge: float = 0.0
    residual_std_dev: float = Field(..., ge=0.0)
    confidence: float = Field(..., ge=0.0, le=0.99)
    samples: int = 0
    half_life_ms: float
    last_updated: int  # epoch ms

    @computed_field
    @property
    def beta(self) -> float:
        return self.hedge_ratio

    @property
    def key(self) -> tuple:
        return (self.primary_market, self.hedge_market)

    def is_high_confidence(self, min_confidence: float = 0.7, min_correlation: float = 0.7) -> bool:
        """Both thresholds must hold"""
        return self.confidence >= min_confidence and abs(self.correlation) >= min_correlation


# =============================================================================
# API Response Models
# =============================================================================

class EngineStatistics(BaseModel):
    """Aggregate view over all relationship records"""
    total_markets: int = 0
    total_relationships: int = 0
    high_confidence_count: int = 0
    avg_correlation: float = 0.0
    avg_confidence: float = 0.0
