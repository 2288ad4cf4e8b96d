"""
Pipeline orchestrator for the rankings scraper.

Coordinates:
- Per-year scraping through the cache
- Per-year error isolation
- Cross-year consolidation
- Persisting the payload and invalidating the cache
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, Iterable, Optional

import structlog

from .config.loader import Settings
from .core.cache import TTLCache
from .core.consolidator import consolidate
from .core.http_client import HttpClient
from .core.models import ConsolidatedEntity, YearError, YearRecord
from .navigators.paginated import YearNavigator
from .storage import DataStore

logger = structlog.get_logger(__name__)

YEAR_KEY_PREFIX = "year:"
DATASET_KEY = "dataset"

ProgressCallback = Callable[[str], Awaitable[None]]


def year_key(year: int) -> str:
    return f"{YEAR_KEY_PREFIX}{year}"


@dataclass
class ScrapeRun:
    """Result of scraping several years."""

    years: list[int]
    yearly_data: dict[int, list[YearRecord]] = field(default_factory=dict)
    errors: list[YearError] = field(default_factory=list)
    consolidated: list[ConsolidatedEntity] = field(default_factory=list)
    finished_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def years_covered(self) -> list[int]:
        """Requested years that produced at least one record."""
        return [year for year in self.years if self.yearly_data.get(year)]

    def to_payload(self) -> dict:
        """Render the persisted data file schema."""
        return {
            "consolidatedData": [e.to_dict() for e in self.consolidated],
            "yearlyData": {
                str(year): [r.to_dict() for r in records]
                for year, records in self.yearly_data.items()
            },
            "errors": [e.to_dict() for e in self.errors],
            "lastUpdated": self.finished_at.isoformat(),
            "yearsCovered": self.years_covered,
            "totalChurches": len(self.consolidated),
        }


class RankingsPipeline:
    """
    Owner of the HTTP client, cache and data store.

    Constructed once per process and shared by all request handlers.

    Usage:
        async with RankingsPipeline(settings) as pipeline:
            run = await pipeline.scrape_and_save()
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[HttpClient] = None,
        store: Optional[DataStore] = None,
        cache: Optional[TTLCache] = None,
    ):
        """
        Initialize pipeline.

        Args:
            settings: Application settings (defaults if not provided)
            http_client: Shared HTTP client (creates own if not provided)
            store: Data store (uses settings.storage.data_file if not provided)
            cache: Cache instance (creates own if not provided)
        """
        self.settings = settings or Settings()
        self.source = self.settings.source

        self._owns_client = http_client is None
        self.http_client = http_client or HttpClient(
            min_delay=self.source.page_delay,
            timeout=self.settings.http.timeout,
            max_retries=self.settings.http.max_retries,
            user_agent=self.settings.http.user_agent,
        )
        self.store = store or DataStore(self.settings.storage.data_file)
        self.cache = cache or TTLCache()
        self.navigator = YearNavigator(self.source, http_client=self.http_client)

    async def __aenter__(self) -> "RankingsPipeline":
        """Enter async context."""
        if self._owns_client:
            await self.http_client.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context."""
        if self._owns_client:
            await self.http_client.__aexit__(exc_type, exc_val, exc_tb)

    def validate_year(self, year: int) -> None:
        """
        Check year against the configured range.

        Raises:
            ValueError: If year is outside the supported range
        """
        if not self.source.first_year <= year <= self.source.last_year:
            raise ValueError(
                f"Year must be between {self.source.first_year} and {self.source.last_year}"
            )

    async def scrape_year(self, year: int, use_cache: bool = True) -> list[YearRecord]:
        """
        Scrape one year, memoized per year.

        Raises:
            FatalFetchError: First page of the year could not be fetched
        """
        if not use_cache:
            return await self.navigator.scrape_year(year)

        return await self.cache.get_or_compute(
            year_key(year),
            self.settings.cache.year_ttl,
            lambda: self.navigator.scrape_year(year),
        )

    async def scrape_years(
        self,
        years: Optional[Iterable[int]] = None,
        use_cache: bool = True,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ScrapeRun:
        """
        Scrape several years sequentially and consolidate them.

        A failing year is recorded in the run's errors and the remaining
        years are still scraped.

        Args:
            years: Years to scrape (defaults to configured years)
            use_cache: Whether to reuse per-year cache entries
            on_progress: Optional async callback receiving progress lines

        Returns:
            ScrapeRun with per-year data, errors and consolidated entities
        """
        emit = on_progress or _discard_progress
        run = ScrapeRun(years=list(years) if years is not None else list(self.source.years))

        logger.info("starting_scrape", years=run.years, use_cache=use_cache)
        await emit("Starting data scraping...\n\n")

        for year in run.years:
            await emit(f"Scraping {year}...\n")
            try:
                records = await self.scrape_year(year, use_cache=use_cache)
            except Exception as e:
                logger.error("year_failed", year=year, error=str(e))
                run.errors.append(YearError(year=year, error=str(e)))
                await emit(f"Failed to scrape {year}: {e}\n")
                continue

            run.yearly_data[year] = records
            await emit(f"Successfully scraped {len(records)} entries from {year}\n")

        await emit("\nConsolidating data...\n")
        run.consolidated = consolidate(run.yearly_data)
        run.finished_at = datetime.now(timezone.utc)

        logger.info(
            "scrape_complete",
            years_covered=len(run.years_covered),
            errors=len(run.errors),
            entities=len(run.consolidated),
        )
        return run

    async def scrape_and_save(
        self,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ScrapeRun:
        """
        Fresh scrape of all configured years, persisted to the data store.

        The payload is written before the cache is touched, so an
        interrupted run leaves both the file and the cache as they were.

        Raises:
            PersistenceError: Payload could not be written
        """
        emit = on_progress or _discard_progress

        run = await self.scrape_years(use_cache=False, on_progress=on_progress)
        payload = run.to_payload()

        self.store.save(payload)

        self.cache.invalidate(DATASET_KEY)
        for year, records in run.yearly_data.items():
            self.cache.set(year_key(year), records)

        await emit(f"\nData saved to {self.store.path.name}\n")
        await emit(f"Total organizations with multi-year data: {payload['totalChurches']}\n")
        await emit(f"Years covered: {', '.join(str(y) for y in payload['yearsCovered'])}\n")
        if run.errors:
            await emit(f"Errors: {len(run.errors)} years failed\n")
        await emit("\nScraping complete! Data is now persisted.\n")

        return run

    async def load_dataset(self) -> Optional[dict]:
        """
        Persisted payload, memoized for the dataset TTL.

        Returns:
            Payload dict or None if nothing has been saved yet

        Raises:
            PersistenceError: Data file unreadable
        """
        if not self.store.exists():
            return None

        return await self.cache.get_or_compute(
            DATASET_KEY,
            self.settings.cache.dataset_ttl,
            self._read_dataset,
        )

    async def _read_dataset(self) -> Optional[dict]:
        return self.store.load()

    def cached_years(self) -> dict[int, tuple[list[YearRecord], float]]:
        """Valid per-year cache contents as year -> (records, age in seconds)."""
        cached = {}
        for entry, age in self.cache.entries(YEAR_KEY_PREFIX):
            if age >= self.settings.cache.year_ttl:
                continue
            year = int(entry.key[len(YEAR_KEY_PREFIX):])
            cached[year] = (entry.payload, age)
        return cached


async def _discard_progress(line: str) -> None:
    return None
