"""
Paginated navigator: year listing → page 1..N.

Fetches pages of one year until a page yields nothing, a later page
fails, or the page cap is reached.
"""

from typing import Optional

import httpx

from rankings_scraper.core.errors import FatalFetchError, SoftPaginationStop
from rankings_scraper.core.http_client import HttpClient
from rankings_scraper.core.models import YearRecord
from rankings_scraper.parsers.base import ParserStrategy
from rankings_scraper.parsers.ranked_listing import RankedListingParser

from .base import ListingSource, NavigatorStrategy


class YearNavigator(NavigatorStrategy):
    """
    Navigator for one year's paginated listing.

    A failure on page 1 loses the whole year (FatalFetchError); a failure
    on any later page just ends pagination.
    """

    def __init__(
        self,
        source: ListingSource,
        http_client: HttpClient,
        parser: Optional[ParserStrategy] = None,
    ):
        super().__init__(source, http_client)
        self.parser = parser or RankedListingParser(detail_path=source.detail_path)

    async def fetch_page(self, year: int, page: int) -> str:
        """
        Fetch raw markup of one listing page.

        Args:
            year: Listing year
            page: 1-based page number

        Returns:
            Page HTML

        Raises:
            FatalFetchError: Page 1 could not be fetched
            SoftPaginationStop: A later page could not be fetched
        """
        url = self.source.page_url(year, page)
        self.logger.info("fetching_page", year=year, page=page, url=url)

        try:
            return await self.http_client.get_text(url)
        except httpx.HTTPError as e:
            if page == 1:
                raise FatalFetchError(year=year, page=page, url=url, cause=e) from e
            raise SoftPaginationStop(year=year, page=page, url=url, cause=e) from e

    async def scrape_year(self, year: int) -> list[YearRecord]:
        records: list[YearRecord] = []

        for page in range(1, self.source.max_pages + 1):
            try:
                html = await self.fetch_page(year, page)
            except SoftPaginationStop as e:
                self.logger.info("pagination_stopped", year=year, page=page, reason=str(e))
                break

            page_records = self.parser.extract(html, year)
            if not page_records:
                self.logger.debug("empty_page", year=year, page=page)
                break

            records.extend(page_records)
        else:
            self.logger.warning("page_cap_reached", year=year, max_pages=self.source.max_pages)

        records.sort(key=lambda record: record.rank)

        self.logger.info("year_scraped", year=year, records=len(records))
        return records
