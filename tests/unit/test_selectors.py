"""Tests for text scanning helpers."""

import pytest
from bs4 import BeautifulSoup

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


def _digits(text):
    return int(text) if text.isdigit() else None


class TestReduceMatches:
    """Tests for reduce_matches policies."""

    def test_first_policy_keeps_earliest(self):
        result = reduce_matches(["a", "1", "b", "2"], _digits, MatchPolicy.FIRST)
        assert result == 1

    def test_last_policy_keeps_latest(self):
        result = reduce_matches(["a", "1", "b", "2", "c"], _digits, MatchPolicy.LAST)
        assert result == 2

    def test_no_match(self):
        assert reduce_matches(["a", "b"], _digits, MatchPolicy.FIRST) is None
        assert reduce_matches(["a", "b"], _digits, MatchPolicy.LAST) is None

    def test_first_policy_stops_consuming(self):
        """FIRST does not evaluate texts after the first hit."""
        seen = []

        def texts():
            for text in ["x", "7", "8"]:
                seen.append(text)
                yield text

        assert reduce_matches(texts(), _digits, MatchPolicy.FIRST) == 7
        assert seen == ["x", "7"]


class TestParseRankText:
    """Tests for parse_rank_text."""

    def test_bare_number(self):
        assert parse_rank_text("42", 100) == 42

    def test_limit_inclusive(self):
        assert parse_rank_text("100", 100) == 100
        assert parse_rank_text("101", 100) is None

    def test_rejects_decorated_numbers(self):
        assert parse_rank_text("#4", 100) is None
        assert parse_rank_text("4.", 100) is None
        assert parse_rank_text("", 100) is None


class TestPickLocation:
    """Tests for the "City, ST" detector."""

    def test_city_state(self):
        assert pick_location("Houston, TX") == "Houston, TX"
        assert pick_location("Grand Rapids,MI") == "Grand Rapids,MI"

    def test_rejects_lowercase_state(self):
        assert pick_location("Houston, Tx") is None

    def test_rejects_digits(self):
        assert pick_location("123 Main St, TX") is None

    def test_rejects_long_text(self):
        assert pick_location("A" * 47 + ", TX") is None


class TestPickLeaderName:
    """Tests for the hyphen-suffix leader heuristic."""

    def test_segment_after_last_hyphen(self):
        assert pick_leader_name("Senior Pastor - Jane Doe") == "Jane Doe"
        assert pick_leader_name("a-b-Carl Lentz") == "Carl Lentz"

    def test_requires_hyphen(self):
        assert pick_leader_name("Jane Doe") is None

    def test_rejects_comma_in_segment(self):
        assert pick_leader_name("Campus - Houston, TX") is None

    def test_rejects_empty_segment(self):
        assert pick_leader_name("Trailing -") is None

    def test_rejects_long_text(self):
        assert pick_leader_name("x" * 95 + " - Jane") is None


class TestAttendancePicker:
    """Tests for the attendance number picker."""

    @pytest.fixture
    def pick(self):
        return make_attendance_picker(1000, 100000)

    def test_number_in_range(self, pick):
        assert pick("Attendance: 45000") == 45000

    def test_range_bounds(self, pick):
        assert pick("1000") == 1000
        assert pick("100000") == 100000
        assert pick("999") is None
        assert pick("100001") is None

    def test_only_first_run_of_text_considered(self, pick):
        """An out-of-range first number hides later numbers in the same text."""
        assert pick("Rank 500 with 12000 people") is None

    def test_ignores_longer_runs(self, pick):
        assert pick("ID 1234567") is None


class TestTreeHelpers:
    """Tests for markup navigation helpers."""

    @pytest.fixture
    def soup(self):
        html = """
        <section id="outer">
            <div id="entry">
                <h3>Heading Name</h3>
                <span><a href="/churches/x">Link</a></span>
                <p>Houston, TX</p>
            </div>
        </section>
        """
        return BeautifulSoup(html, "lxml")

    def test_closest_container_skips_non_container_parents(self, soup):
        anchor = soup.find("a")
        assert closest_container(anchor)["id"] == "entry"

    def test_closest_container_missing(self):
        soup = BeautifulSoup('<p><a href="/churches/x">x</a></p>', "lxml")
        assert closest_container(soup.find("a")) is None

    def test_iter_descendant_texts_document_order(self, soup):
        container = soup.find(id="entry")
        texts = list(iter_descendant_texts(container))
        assert texts == ["Heading Name", "Link", "Link", "Houston, TX"]

    def test_iter_descendant_texts_without_container(self):
        assert list(iter_descendant_texts(None)) == []

    def test_first_heading_text(self, soup):
        assert first_heading_text(soup.find(id="entry")) == "Heading Name"
        assert first_heading_text(None) == ""

    def test_element_text_trims(self, soup):
        assert element_text(soup.find("p")) == "Houston, TX"
        assert element_text(None) == ""
