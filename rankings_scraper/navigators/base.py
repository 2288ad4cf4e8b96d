"""
Base class for navigator strategies.

Navigators walk the pages of a year's listing, handing each page's
markup to a parser and deciding when pagination ends.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import structlog

from rankings_scraper.core.http_client import HttpClient
from rankings_scraper.core.models import YearRecord

logger = structlog.get_logger(__name__)

DEFAULT_YEARS = list(range(2015, 2025))


@dataclass
class ListingSource:
    """Configuration for the ranked listing source."""

    base_url: str = "https://outreach100.com"
    listing_path: str = "largest-churches-in-america"
    detail_path: str = "/churches/"  # Substring identifying entry links

    years: list[int] = field(default_factory=lambda: list(DEFAULT_YEARS))

    # Pagination
    max_pages: int = 10  # Hard cap per year
    page_delay: float = 0.5  # Seconds between requests to the host

    @classmethod
    def from_dict(cls, data: dict) -> "ListingSource":
        """Create from dictionary (e.g., from YAML)."""
        defaults = cls()
        return cls(
            base_url=str(data.get("base_url", defaults.base_url)).rstrip("/"),
            listing_path=str(data.get("listing_path", defaults.listing_path)).strip("/"),
            detail_path=data.get("detail_path", defaults.detail_path),
            years=parse_years(data.get("years", defaults.years)),
            max_pages=int(data.get("max_pages", defaults.max_pages)),
            page_delay=float(data.get("page_delay", defaults.page_delay)),
        )

    def page_url(self, year: int, page: int) -> str:
        """URL of one page of a year's listing; page 1 has no query."""
        url = f"{self.base_url}/{self.listing_path}/{year}"
        if page == 1:
            return url
        return f"{url}?page={page}"

    @property
    def first_year(self) -> int:
        return min(self.years)

    @property
    def last_year(self) -> int:
        return max(self.years)


def parse_years(value) -> list[int]:
    """
    Parse a years setting.

    Accepts a list of ints, a comma-separated string, or a
    ``{start, end}`` mapping (inclusive).

    Raises:
        ValueError: If the value cannot be interpreted
    """
    if isinstance(value, dict):
        try:
            start, end = int(value["start"]), int(value["end"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid years range: {value!r}") from e
        years = list(range(start, end + 1))
    elif isinstance(value, str):
        years = [int(part) for part in value.split(",") if part.strip()]
    elif isinstance(value, (list, tuple)):
        years = [int(part) for part in value]
    else:
        raise ValueError(f"Invalid years setting: {value!r}")

    if not years:
        raise ValueError("At least one year must be configured")

    return years


class NavigatorStrategy(ABC):
    """
    Abstract base class for navigator strategies.

    Navigators collect all records of a single year from the source.
    """

    def __init__(self, source: ListingSource, http_client: HttpClient):
        """
        Initialize navigator.

        Args:
            source: Listing source configuration
            http_client: Shared HTTP client, entered by its owner
        """
        self.source = source
        self.http_client = http_client
        self.logger = logger.bind(navigator=self.__class__.__name__)

    @abstractmethod
    async def scrape_year(self, year: int) -> list[YearRecord]:
        """
        Collect all records of one year.

        Args:
            year: Listing year

        Returns:
            Records from all pages of the year
        """
        pass
