"""Shared fixtures: listing markup builders, fake listing host, settings."""

import httpx
import pytest

from rankings_scraper.config.loader import HttpSettings, Settings, StorageSettings
from rankings_scraper.navigators.base import ListingSource

BASE_URL = "https://listings.test"


def _entry(name, rank=None, location=None, leader=None, attendance=None, slug=None):
    slug = slug or name.lower().replace(" ", "")
    parts = []
    if rank is not None:
        parts.append(f'<span class="rank">{rank}</span>')
    parts.append(f'<a href="/churches/{slug}">{name}</a>')
    if location:
        parts.append(f'<p class="location">{location}</p>')
    if leader:
        parts.append(f'<p class="leader">Senior Pastor - {leader}</p>')
    if attendance is not None:
        parts.append(f'<p class="attendance">Attendance: {attendance}</p>')
    return f'<div class="entry">{"".join(parts)}</div>'


def _listing(entries):
    return f"<html><body><main>{''.join(entries)}</main></body></html>"


@pytest.fixture
def make_entry():
    """Build one listing entry's markup."""
    return _entry


@pytest.fixture
def make_listing():
    """Wrap entry markup into a listing page."""
    return _listing


@pytest.fixture
def make_page():
    """Build a listing page from (name, rank) pairs."""

    def build(*entries):
        return _listing(
            _entry(name, rank=rank, location="Houston, TX", attendance=5000 + rank)
            for name, rank in entries
        )

    return build


@pytest.fixture
def make_transport():
    """
    Fake listing host.

    Pages map (year, page) to HTML or an HTTP status code; unknown pages
    answer 404. Requests are recorded in the optional calls list.
    """

    def build(pages, calls=None):
        def handler(request: httpx.Request) -> httpx.Response:
            year = int(request.url.path.rstrip("/").split("/")[-1])
            page = int(request.url.params.get("page", "1"))
            if calls is not None:
                calls.append((year, page, request))

            body = pages.get((year, page))
            if body is None:
                return httpx.Response(404)
            if isinstance(body, int):
                return httpx.Response(body)
            return httpx.Response(200, text=body)

        return httpx.MockTransport(handler)

    return build


@pytest.fixture
def settings(tmp_path):
    """Fast settings: no politeness delay, no retries, temp data file."""
    return Settings(
        source=ListingSource(
            base_url=BASE_URL,
            years=[2021, 2022, 2023],
            page_delay=0,
        ),
        http=HttpSettings(timeout=5, max_retries=1),
        storage=StorageSettings(data_file=str(tmp_path / "data.json")),
    )
