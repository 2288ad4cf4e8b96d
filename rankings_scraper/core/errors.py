"""
Error kinds raised by the scraping pipeline.

Each error carries structured context (year, page, cause) so callers can
handle them uniformly instead of parsing messages.
"""

from typing import Optional


class ScraperError(Exception):
    """Base class for all pipeline errors."""


class FetchError(ScraperError):
    """Base class for listing page fetch failures."""

    def __init__(
        self,
        year: int,
        page: int,
        url: str,
        cause: Optional[BaseException] = None,
    ):
        self.year = year
        self.page = page
        self.url = url
        self.cause = cause
        super().__init__(self._describe())

    def _describe(self) -> str:
        reason = describe_cause(self.cause)
        return f"{reason} (year={self.year}, page={self.page})"


class FatalFetchError(FetchError):
    """First page of a year could not be fetched; the year is lost."""


class SoftPaginationStop(FetchError):
    """A later page could not be fetched; pagination for the year ends."""


class ElementParseError(ScraperError):
    """A single listing candidate could not be parsed."""

    def __init__(self, year: int, index: int, cause: BaseException):
        self.year = year
        self.index = index
        self.cause = cause
        super().__init__(
            f"candidate {index} for {year}: {type(cause).__name__}: {cause}"
        )


class PersistenceError(ScraperError):
    """Reading or writing the data file failed."""

    def __init__(self, path: str, operation: str, cause: BaseException):
        self.path = path
        self.operation = operation
        self.cause = cause
        super().__init__(f"failed to {operation} {path}: {cause}")


def describe_cause(cause: Optional[BaseException]) -> str:
    """Short human-readable description of an underlying HTTP failure."""
    if cause is None:
        return "unknown error"

    response = getattr(cause, "response", None)
    if response is not None:
        return f"HTTP {response.status_code}: {response.reason_phrase}"

    return f"{type(cause).__name__}: {cause}" if str(cause) else type(cause).__name__
