"""
Parser strategies for listing extraction.

Parsers handle the extraction phase - converting one listing page
into structured YearRecords.

Strategies:
- RankedListingParser: Heuristic parser for ranked entry listings
"""

from .base import ParserStrategy
from .ranked_listing import RankedListingParser

__all__ = [
    "ParserStrategy",
    "RankedListingParser",
]
