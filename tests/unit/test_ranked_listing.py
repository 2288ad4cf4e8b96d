"""Tests for the ranked listing parser."""

import pytest

from rankings_scraper.core.models import LEADER_NOT_FOUND, LOCATION_NOT_FOUND
from rankings_scraper.parsers.ranked_listing import RankedListingParser


def _page(body):
    return f"<html><body><main>{body}</main></body></html>"


@pytest.fixture
def parser():
    return RankedListingParser()


class TestBasicExtraction:
    """Tests for well-formed entries."""

    def test_extracts_all_fields(self, parser, make_entry, make_listing):
        html = make_listing([
            make_entry(
                "Lakewood Church",
                rank=1,
                location="Houston, TX",
                leader="Joel Osteen",
                attendance=45000,
            ),
        ])

        records = parser.extract(html, 2024)

        assert len(records) == 1
        record = records[0]
        assert record.name == "Lakewood Church"
        assert record.rank == 1
        assert record.year == 2024
        assert record.location == "Houston, TX"
        assert record.leader_name == "Joel Osteen"
        assert record.attendance_estimate == 45000

    def test_sorted_by_rank(self, parser, make_entry, make_listing):
        html = make_listing([
            make_entry("Gamma Fellowship", rank=3),
            make_entry("Alpha Chapel", rank=1),
            make_entry("Beta Assembly", rank=2),
        ])

        records = parser.extract(html, 2024)

        assert [r.rank for r in records] == [1, 2, 3]
        assert [r.name for r in records] == ["Alpha Chapel", "Beta Assembly", "Gamma Fellowship"]

    def test_missing_fields_use_sentinels(self, parser, make_entry, make_listing):
        records = parser.extract(make_listing([make_entry("Plain Org", rank=5)]), 2024)

        assert records[0].location == LOCATION_NOT_FOUND
        assert records[0].leader_name == LEADER_NOT_FOUND
        assert records[0].attendance_estimate is None

    def test_ignores_other_links(self, parser):
        html = _page('<div><a href="/about">About us</a></div>')
        assert parser.extract(html, 2024) == []

    def test_empty_page(self, parser):
        assert parser.extract("<html><body></body></html>", 2024) == []

    def test_custom_detail_path(self):
        parser = RankedListingParser(detail_path="/orgs/")
        html = _page(
            '<div><span>2</span><a href="/orgs/x">Custom Org</a></div>'
            '<div><span>1</span><a href="/churches/y">Ignored Org</a></div>'
        )

        records = parser.extract(html, 2024)

        assert [r.name for r in records] == ["Custom Org"]


class TestRankExtraction:
    """Tests for rank heuristics and the sequential fallback."""

    def test_container_previous_sibling_first(self, parser):
        html = _page('<span>7</span><div><b>9</b><a href="/churches/a">Alpha</a></div>')

        assert parser.extract(html, 2024)[0].rank == 7

    def test_container_first_descendant(self, parser):
        html = _page('<div><b>9</b><a href="/churches/a">Alpha</a></div>')

        assert parser.extract(html, 2024)[0].rank == 9

    def test_anchor_previous_sibling(self, parser):
        html = _page(
            '<div><em>No.</em><strong>12</strong><a href="/churches/b">Beta</a></div>'
        )

        assert parser.extract(html, 2024)[0].rank == 12

    def test_fallback_to_position(self, parser):
        """Without rank text, rank is the 1-based position among entry links."""
        html = _page(
            '<div><a href="/churches/one">One</a></div>'
            '<div><a href="/churches/two">Two</a></div>'
            '<div><a href="/churches/three">Three</a></div>'
        )

        records = parser.extract(html, 2024)

        assert [(r.name, r.rank) for r in records] == [("One", 1), ("Two", 2), ("Three", 3)]

    def test_fallback_counts_skipped_entries(self, parser):
        """Nameless links still occupy a position."""
        html = _page(
            '<div><a href="/churches/one">One</a></div>'
            '<div><a href="/churches/blank"></a></div>'
            '<div><a href="/churches/three">Three</a></div>'
        )

        records = parser.extract(html, 2024)

        assert [(r.name, r.rank) for r in records] == [("One", 1), ("Three", 3)]

    def test_rank_above_limit_ignored(self, parser):
        html = _page('<div><span>250</span><a href="/churches/big">Big Org</a></div>')

        assert parser.extract(html, 2024)[0].rank == 1

    def test_zero_rank_falls_back_to_position(self, parser):
        """A zero ends the search and the position is used instead."""
        html = _page(
            '<div><a href="/churches/first">First</a></div>'
            '<div><span>0</span><b>5</b><a href="/churches/zero">Zero</a></div>'
        )

        records = parser.extract(html, 2024)

        assert [(r.name, r.rank) for r in records] == [("First", 1), ("Zero", 2)]


class TestFieldHeuristics:
    """Tests for name, location, leader and attendance heuristics."""

    def test_name_from_heading(self, parser):
        html = _page(
            '<div><h2>Heading Org</h2><a href="/churches/h"><img src="logo.png"></a></div>'
        )

        records = parser.extract(html, 2024)

        assert records[0].name == "Heading Org"

    def test_attendance_first_match_wins(self, parser):
        html = _page(
            '<div><a href="/churches/o">Org</a>'
            "<p>Weekly 2500</p><p>Peak 9000</p></div>"
        )

        assert parser.extract(html, 2024)[0].attendance_estimate == 2500

    def test_attendance_skips_out_of_range(self, parser):
        html = _page(
            '<div><a href="/churches/o">Org</a>'
            "<p>Seats 300 people</p><p>Now 750</p><p>Peak 150000</p>"
            "<p>Average 6400</p></div>"
        )

        assert parser.extract(html, 2024)[0].attendance_estimate == 6400

    def test_location_last_match_wins(self, parser):
        html = _page(
            '<div><a href="/churches/o">Org</a>'
            "<p>Austin, TX</p><p>Dallas, TX</p></div>"
        )

        assert parser.extract(html, 2024)[0].location == "Dallas, TX"

    def test_leader_last_match_wins(self, parser):
        html = _page(
            '<div><a href="/churches/o">Org</a>'
            "<p>Founder - Alice Smith</p><p>Lead Pastor - Bob Jones</p></div>"
        )

        assert parser.extract(html, 2024)[0].leader_name == "Bob Jones"

    def test_fields_scoped_to_container(self, parser, make_entry, make_listing):
        html = make_listing([
            make_entry("First Org", rank=1, location="Austin, TX", attendance=3000),
            make_entry("Second Org", rank=2),
        ])

        second = parser.extract(html, 2024)[1]

        assert second.location == LOCATION_NOT_FOUND
        assert second.attendance_estimate is None


class TestParseFailures:
    """Tests for per-entry error isolation."""

    def test_failing_entry_is_skipped(self, make_entry, make_listing):
        class FlakyParser(RankedListingParser):
            def _parse_entry(self, anchor, position, year):
                if position == 1:
                    raise RuntimeError("boom")
                return super()._parse_entry(anchor, position, year)

        html = make_listing([
            make_entry("Broken Org", rank=1),
            make_entry("Working Org", rank=2),
        ])

        records = FlakyParser().extract(html, 2024)

        assert [r.name for r in records] == ["Working Org"]
