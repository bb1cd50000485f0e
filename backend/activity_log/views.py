"""Derived views over a snapshot of activity records.

Everything here is a pure function of the records passed in; nothing reads
storage.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .schemas import ActivityRecord, AggregateStats, DirectionCounts, EstablishmentStat

_DIRECTION_FIELDS = {"+": "plus", "-": "minus", "=": "equals"}


def _count_direction(counts: DirectionCounts, direction: Optional[str]) -> None:
    field = _DIRECTION_FIELDS.get(direction or "")
    if field:
        setattr(counts, field, getattr(counts, field) + 1)


def _unique_sorted(values: Iterable[Optional[str]]) -> List[str]:
    return sorted({value for value in values if value and value.strip()})


def unique_main_persons(records: Iterable[ActivityRecord]) -> List[str]:
    """Distinct main persons of top-level activities, sorted; details are ignored."""
    return _unique_sorted(record.main_person for record in records)


def unique_establishments(records: Iterable[ActivityRecord]) -> List[str]:
    return _unique_sorted(record.establishment for record in records)


def filter_suggestions(values: Iterable[str], query: Optional[str]) -> List[str]:
    """Case-insensitive substring match used by the autocomplete inputs."""
    values = list(values)
    if not query or not query.strip():
        return values
    needle = query.strip().casefold()
    return [value for value in values if needle in value.casefold()]


def aggregate_stats(records: Iterable[ActivityRecord]) -> AggregateStats:
    stats = AggregateStats()
    for record in records:
        stats.total += 1
        if record.transport_type == "car":
            stats.car_people += record.participants_count or 0
        elif record.transport_type == "walk":
            stats.walk_people += record.participants_count or 0
        _count_direction(stats.directions, record.direction)
    return stats


def establishment_stats(records: Iterable[ActivityRecord]) -> List[EstablishmentStat]:
    """Walking activities grouped by establishment, busiest first.

    Groups with equal event counts keep the order in which they first appear.
    """
    groups: Dict[str, EstablishmentStat] = {}
    for record in records:
        if record.transport_type != "walk" or not (record.establishment and record.establishment.strip()):
            continue
        stat = groups.get(record.establishment)
        if stat is None:
            stat = groups[record.establishment] = EstablishmentStat(establishment=record.establishment)
        stat.events += 1
        stat.people += record.participants_count or 0
        _count_direction(stat.directions, record.direction)
    return sorted(groups.values(), key=lambda stat: stat.events, reverse=True)
