"""
syntharb
Real-time cross-market covariance engine for synthetic-arbitrage hedge sizing.

Usage:
    from syntharb import EngineConfig, RelationshipRegistry, QueryAPI

    api = QueryAPI(RelationshipRegistry(EngineConfig()))
    api.ingest("EXCH-A:BTC", 64000.0)
    api.ingest("EXCH-B:BTC", 64012.5)
    api.query_relationship("EXCH-A:BTC", "EXCH-B:BTC")
"""

import logging

from .config import EngineConfig
from .errors import EngineError, InsufficientDataError, InputMismatchError
from .core import (
    MarketId,
    PricePoint,
    RelationshipRecord,
    EngineStatistics,
    PriceSeriesStore,
    RelationshipRegistry,
)
from .analytics import covariance, HedgeParameters
from .query import QueryAPI

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "1.0.0"

__all__ = [
    "EngineConfig",
    "EngineError",
    "InsufficientDataError",
    "InputMismatchError",
    "MarketId",
    "PricePoint",
    "RelationshipRecord",
    "EngineStatistics",
    "PriceSeriesStore",
    "RelationshipRegistry",
    "covariance",
    "HedgeParameters",
    "QueryAPI",
]
