"""
Cross-year consolidation of yearly listings.

Groups records by exact organization name, keeps organizations that
appear in enough years and orders them by their most recent rank.
"""

from typing import Mapping, Sequence, Union

import structlog

from .models import ConsolidatedEntity, SeriesPoint, YearRecord

logger = structlog.get_logger(__name__)

MIN_SERIES_LENGTH = 3


def consolidate(
    yearly_data: Mapping[Union[int, str], Sequence[YearRecord]],
    min_series_length: int = MIN_SERIES_LENGTH,
) -> list[ConsolidatedEntity]:
    """
    Merge per-year records into multi-year entities.

    Names are matched exactly (case and whitespace sensitive). The first
    record seen for a name, visiting years in ascending order, supplies the
    entity's location and leader. Every record contributes one series point;
    same-year duplicates are kept.

    Args:
        yearly_data: Mapping of year to that year's records
        min_series_length: Minimum series points for an entity to be kept

    Returns:
        Entities sorted ascending by the rank of their latest series point
    """
    entities: dict[str, ConsolidatedEntity] = {}

    for year_key in sorted(yearly_data, key=int):
        year = int(year_key)
        for record in yearly_data[year_key]:
            entity = entities.get(record.name)
            if entity is None:
                entity = ConsolidatedEntity(
                    name=record.name,
                    location=record.location,
                    leader_name=record.leader_name,
                )
                entities[record.name] = entity

            entity.series.append(
                SeriesPoint(
                    year=year,
                    rank=record.rank,
                    attendance_estimate=record.attendance_estimate,
                )
            )

    result = []
    for entity in entities.values():
        if len(entity.series) < min_series_length:
            continue
        entity.series.sort(key=lambda point: point.year)
        result.append(entity)

    result.sort(key=lambda entity: entity.latest.rank)

    logger.info(
        "consolidation_complete",
        organizations=len(entities),
        kept=len(result),
        years=len(yearly_data),
    )

    return result
