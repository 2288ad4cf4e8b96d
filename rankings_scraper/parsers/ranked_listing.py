"""
Ranked listing page parser.

The listing has no stable schema, so each entry is located through its
detail link and its fields are recovered with positional and text
heuristics around that link.
"""

from typing import Iterator, Optional

from bs4 import BeautifulSoup, Tag

from rankings_scraper.core.errors import ElementParseError
from rankings_scraper.core.models import (
    LEADER_NOT_FOUND,
    LOCATION_NOT_FOUND,
    MAX_ATTENDANCE,
    MAX_RANK,
    MIN_ATTENDANCE,
    YearRecord,
)
from rankings_scraper.core.selectors import (
    MatchPolicy,
    closest_container,
    element_text,
    first_heading_text,
    iter_descendant_texts,
    make_attendance_picker,
    parse_rank_text,
    pick_leader_name,
    pick_location,
    reduce_matches,
)

from .base import ParserStrategy


class RankedListingParser(ParserStrategy):
    """
    Parser for one page of a yearly ranked listing.

    Extracts per entry:
    - Rank (nearby bare number, else position on the page)
    - Name (link text, else first heading)
    - Location ("City, ST" text, last match)
    - Leader name (text after a hyphen, last match)
    - Attendance estimate (number in range, first match)
    """

    LOCATION_POLICY = MatchPolicy.LAST
    LEADER_POLICY = MatchPolicy.LAST
    ATTENDANCE_POLICY = MatchPolicy.FIRST

    def __init__(self, detail_path: str = "/churches/"):
        """
        Initialize parser.

        Args:
            detail_path: Substring of entry link targets
        """
        super().__init__()
        self.detail_path = detail_path
        self._pick_attendance = make_attendance_picker(MIN_ATTENDANCE, MAX_ATTENDANCE)

    @property
    def link_selector(self) -> str:
        return f'a[href*="{self.detail_path}"]'

    def extract(self, markup: str, year: int) -> list[YearRecord]:
        soup = BeautifulSoup(markup, "lxml")
        anchors = soup.select(self.link_selector)

        records: list[YearRecord] = []
        for index, anchor in enumerate(anchors):
            try:
                record = self._parse_entry(anchor, position=index + 1, year=year)
            except Exception as e:
                error = ElementParseError(year=year, index=index, cause=e)
                self.logger.warning("entry_parse_failed", year=year, error=str(error))
                continue

            if record:
                records.append(record)

        records.sort(key=lambda record: record.rank)

        self.logger.debug(
            "page_parsed",
            year=year,
            candidates=len(anchors),
            records=len(records),
        )

        return records

    def _parse_entry(self, anchor: Tag, position: int, year: int) -> Optional[YearRecord]:
        """
        Build a record from one entry link.

        Args:
            anchor: Entry detail link
            position: 1-based position of the link among all entry links
            year: Listing year

        Returns:
            YearRecord or None if the entry has no name
        """
        container = closest_container(anchor)

        name = element_text(anchor) or first_heading_text(container)
        if not name:
            return None

        rank = self._extract_rank(anchor, container, position)

        location = reduce_matches(
            iter_descendant_texts(container), pick_location, self.LOCATION_POLICY
        )
        leader_name = reduce_matches(
            iter_descendant_texts(container), pick_leader_name, self.LEADER_POLICY
        )
        attendance = reduce_matches(
            iter_descendant_texts(container), self._pick_attendance, self.ATTENDANCE_POLICY
        )

        return YearRecord(
            name=name,
            rank=rank,
            year=year,
            location=location or LOCATION_NOT_FOUND,
            leader_name=leader_name or LEADER_NOT_FOUND,
            attendance_estimate=attendance,
        )

    def _extract_rank(self, anchor: Tag, container: Optional[Tag], position: int) -> int:
        """First bare number near the entry, falling back to its position."""
        for text in self._rank_candidates(anchor, container):
            rank = parse_rank_text(text, MAX_RANK)
            if rank is not None:
                # Zero ends the search but is not a usable rank
                return rank or position
        return position

    @staticmethod
    def _rank_candidates(anchor: Tag, container: Optional[Tag]) -> Iterator[str]:
        if container is not None:
            yield element_text(container.find_previous_sibling())
            yield element_text(container.find(True))
        yield element_text(anchor.find_previous_sibling())
