"""
Data models for the rankings scraper.

Field names follow Python conventions; ``to_dict`` renders the camelCase
shape used by the API and the persisted data file.
"""

from dataclasses import dataclass, field
from typing import Optional

LOCATION_NOT_FOUND = "Location not found"
LEADER_NOT_FOUND = "Leader not found"

MIN_ATTENDANCE = 1000
MAX_ATTENDANCE = 100000
MAX_RANK = 100


@dataclass(frozen=True)
class YearRecord:
    """One organization's entry in one year's listing."""

    name: str
    rank: int
    year: int
    location: str = LOCATION_NOT_FOUND
    leader_name: str = LEADER_NOT_FOUND
    attendance_estimate: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "location": self.location,
            "leaderName": self.leader_name,
            "attendanceEstimate": self.attendance_estimate,
            "rank": self.rank,
            "year": self.year,
        }


@dataclass(frozen=True)
class SeriesPoint:
    """A single yearly observation inside an entity's series."""

    year: int
    rank: int
    attendance_estimate: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "year": self.year,
            "attendanceEstimate": self.attendance_estimate,
            "rank": self.rank,
        }


@dataclass
class ConsolidatedEntity:
    """
    One organization tracked across years.

    ``location`` and ``leader_name`` come from the first record seen for
    the organization; later years only contribute series points.
    """

    name: str
    location: str = LOCATION_NOT_FOUND
    leader_name: str = LEADER_NOT_FOUND
    series: list[SeriesPoint] = field(default_factory=list)

    @property
    def latest(self) -> SeriesPoint:
        """Most recent series point (series must be sorted)."""
        return self.series[-1]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "location": self.location,
            "leaderName": self.leader_name,
            "series": [p.to_dict() for p in self.series],
        }


@dataclass(frozen=True)
class YearError:
    """A year whose scrape failed, as reported in a run's errors list."""

    year: int
    error: str

    def to_dict(self) -> dict:
        return {"year": self.year, "error": self.error}
