"""
Core layer - stable foundation for the scraping system.

Components:
- models: YearRecord, ConsolidatedEntity, SeriesPoint dataclasses
- errors: Closed set of pipeline error kinds
- http_client: Politeness-queued, retrying HTTP client
- selectors: Text scanning with first/last match policies
- consolidator: Cross-year merge, filter and ordering
- cache: TTL cache with single-flight computation
"""

from .models import (
    YearRecord,
    SeriesPoint,
    ConsolidatedEntity,
    YearError,
    LOCATION_NOT_FOUND,
    LEADER_NOT_FOUND,
)
from .errors import (
    ScraperError,
    FetchError,
    FatalFetchError,
    SoftPaginationStop,
    ElementParseError,
    PersistenceError,
)
from .cache import TTLCache, CacheEntry
from .consolidator import consolidate

__all__ = [
    "YearRecord",
    "SeriesPoint",
    "ConsolidatedEntity",
    "YearError",
    "LOCATION_NOT_FOUND",
    "LEADER_NOT_FOUND",
    "ScraperError",
    "FetchError",
    "FatalFetchError",
    "SoftPaginationStop",
    "ElementParseError",
    "PersistenceError",
    "TTLCache",
    "CacheEntry",
    "consolidate",
]
