"""
Navigator strategies for listing pagination.

Navigators handle the discovery phase - walking the pages of a
year's listing and collecting parsed records.

Strategies:
- YearNavigator: page 1..N of a year-specific listing
"""

from .base import NavigatorStrategy, ListingSource, parse_years
from .paginated import YearNavigator

__all__ = [
    "NavigatorStrategy",
    "ListingSource",
    "parse_years",
    "YearNavigator",
]
