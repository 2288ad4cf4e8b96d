"""
Text scanning helpers for loosely-structured listing markup.

Field heuristics scan every descendant element of a container and fold
the candidates with an explicit match policy: some fields keep the first
qualifying value, others keep the last one.
"""

import re
from enum import Enum
from functools import reduce
from typing import Callable, Iterable, Iterator, Optional, TypeVar

from bs4 import Tag

T = TypeVar("T")

CONTAINER_TAGS = ["div", "section", "article"]
HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]

INTEGER_PATTERN = re.compile(r"[0-9]+")
LOCATION_PATTERN = re.compile(r"[A-Za-z\s]+,\s*[A-Z]{2,}")
NUMBER_RUN_PATTERN = re.compile(r"\b(\d{3,6})\b", re.ASCII)


class MatchPolicy(str, Enum):
    """How repeated matches within one scan are combined."""
    FIRST = "first"  # Keep the earliest qualifying value
    LAST = "last"  # Each qualifying value overwrites the previous one


def reduce_matches(
    texts: Iterable[str],
    pick: Callable[[str], Optional[T]],
    policy: MatchPolicy,
) -> Optional[T]:
    """
    Fold candidate texts into a single value.

    Args:
        texts: Candidate texts, in document order
        pick: Returns the field value for a qualifying text, None otherwise
        policy: Combine rule for multiple qualifying texts

    Returns:
        Selected value or None if no text qualifies
    """
    values = (pick(text) for text in texts)

    if policy is MatchPolicy.FIRST:
        return next((v for v in values if v is not None), None)

    return reduce(lambda acc, v: acc if v is None else v, values, None)


def element_text(element: Optional[Tag]) -> str:
    """Trimmed text content of element, empty string if missing."""
    if element is None:
        return ""
    return element.get_text().strip()


def iter_descendant_texts(container: Optional[Tag]) -> Iterator[str]:
    """Lazily yield trimmed text of every descendant element, in document order."""
    if container is None:
        return
    for element in container.find_all(True):
        yield element_text(element)


def closest_container(element: Tag) -> Optional[Tag]:
    """Nearest ancestor acting as a listing entry container."""
    return element.find_parent(CONTAINER_TAGS)


def first_heading_text(container: Optional[Tag]) -> str:
    """Text of the first h1-h6 inside container."""
    if container is None:
        return ""
    return element_text(container.find(HEADING_TAGS))


def parse_rank_text(text: str, max_rank: int) -> Optional[int]:
    """Integer value of text if it is a bare number no larger than max_rank."""
    if not INTEGER_PATTERN.fullmatch(text):
        return None
    value = int(text)
    return value if value <= max_rank else None


def pick_location(text: str) -> Optional[str]:
    """Accept "City, ST"-shaped texts."""
    if LOCATION_PATTERN.fullmatch(text) and len(text) < 50:
        return text
    return None


def pick_leader_name(text: str) -> Optional[str]:
    """Accept the segment after the last hyphen of short texts."""
    if "-" not in text or len(text) >= 100:
        return None
    candidate = text.split("-")[-1].strip()
    if candidate and "," not in candidate and len(candidate) < 50:
        return candidate
    return None


def make_attendance_picker(minimum: int, maximum: int) -> Callable[[str], Optional[int]]:
    """Build a picker for the first 3-6 digit run of a text within range."""

    def pick(text: str) -> Optional[int]:
        match = NUMBER_RUN_PATTERN.search(text)
        if not match:
            return None
        value = int(match.group(1))
        return value if minimum <= value <= maximum else None

    return pick
