"""
Engine Configuration
Fixed at construction. No hot reload, no file loading.

Usage:
    config = EngineConfig(half_life_ms=60_000, min_samples=30)
    registry = RelationshipRegistry(config)
"""

from typing import FrozenSet, Iterable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# =============================================================================
# Defaults
# =============================================================================

DEFAULT_HALF_LIFE_MS: float = 300_000      # 5 minutes
DEFAULT_MAX_HISTORY_SIZE: int = 1000
DEFAULT_MIN_SAMPLES: int = 50
DEFAULT_MIN_CONFIDENCE: float = 0.7
DEFAULT_MIN_CORRELATION: float = 0.7


class EngineConfig(BaseModel):
    """
    Covariance engine settings.

    Fields:
        half_life_ms: Decay half-life applied per buffer position
        max_history_size: Ring buffer capacity per market
        min_samples: Prices required on both sides before a pair is estimated
        min_correlation: |correlation| floor for the high-confidence query
        align_tail: Align unequal snapshots on their most recent common tail
        pairs_of_interest: Optional allow-list of unordered market pairs
    """
    model_config = ConfigDict(frozen=True)

    half_life_ms: float = Field(default=DEFAULT_HALF_LIFE_MS, gt=0)
    max_history_size: int = Field(default=DEFAULT_MAX_HISTORY_SIZE, ge=2)
    min_samples: int = Field(default=DEFAULT_MIN_SAMPLES, ge=2)
    min_correlation: float = Field(default=DEFAULT_MIN_CORRELATION, ge=0, le=1)
    align_tail: bool = True
    pairs_of_interest: Optional[FrozenSet[FrozenSet[str]]] = None

    @field_validator('pairs_of_interest', mode='before')
    @classmethod
    def normalize_pairs(cls, v):
        """Accept any iterable of 2-tuples, store as unordered pairs"""
        if v is None:
            return None
        pairs = set()
        for pair in v:
            members = frozenset(pair)
            if len(members) != 2:
                raise ValueError(f"Pair must name two distinct markets: {pair!r}")
            pairs.add(members)
        return frozenset(pairs)

    @model_validator(mode='after')
    def check_history_holds_samples(self):
        if self.min_samples > self.max_history_size:
            raise ValueError(
                f"min_samples ({self.min_samples}) exceeds max_history_size ({self.max_history_size})"
            )
        return self

    def tracks_pair(self, market_a: str, market_b: str) -> bool:
        """True if the fan-out policy allows estimating this pair"""
        if self.pairs_of_interest is None:
            return True
        return frozenset((market_a, market_b)) in self.pairs_of_interest

    @classmethod
    def with_pairs(cls, pairs: Iterable[Tuple[str, str]], **kwargs) -> "EngineConfig":
        """Build a config restricted to the given market pairs"""
        return cls(pairs_of_interest=list(pairs), **kwargs)
