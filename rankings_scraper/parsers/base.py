"""
Base class for parser strategies.

Parsers turn one listing page's markup into structured YearRecords.
"""

from abc import ABC, abstractmethod

import structlog

from rankings_scraper.core.models import YearRecord

logger = structlog.get_logger(__name__)


class ParserStrategy(ABC):
    """
    Abstract base class for parser strategies.

    Implementations must not raise on malformed markup: entries that
    cannot be parsed are skipped and the rest of the page is returned.
    """

    def __init__(self):
        self.logger = logger.bind(parser=self.__class__.__name__)

    @abstractmethod
    def extract(self, markup: str, year: int) -> list[YearRecord]:
        """
        Extract records from one listing page.

        Args:
            markup: Raw HTML of the page
            year: Listing year the page belongs to

        Returns:
            Records sorted ascending by rank (possibly empty)
        """
        pass
