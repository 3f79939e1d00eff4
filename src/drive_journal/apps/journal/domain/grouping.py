"""
Pure rules of the journal: folding drives into a grouped drive, the
classification consensus and day-aligned ranges.

Nothing in here touches the store; the application service feeds these
functions with domain objects read through the repositories.
"""
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from .exceptions import InvalidRequest, NoAffectedRange
from .models import Classification, DateRange, Drive, GroupedDrive


def consensus_classification(values: Iterable[Optional[Classification]]) -> Optional[Classification]:
    """
    Derive the classification a group inherits from its members.

    Args:
        values: Classification of every member, None for unclassified members

    Returns:
        The shared value when every member carries the same classification,
        otherwise None
    """
    values = list(values)
    if not values or any(value is None for value in values):
        return None
    distinct = set(values)
    if len(distinct) != 1:
        return None
    return distinct.pop()


def fold_drives(car_id: int, drives: List[Drive]) -> GroupedDrive:
    """
    Fold member drives into a new (unsaved) grouped drive.

    The start address comes from the member starting first and the end address
    from the member ending last. Members with identical timestamps resolve to
    the order in which they were given.

    Args:
        car_id: Car all members belong to
        drives: Member drives

    Returns:
        GroupedDrive without an id
    """
    if not drives:
        raise InvalidRequest("Cannot group an empty set of drives")

    # sorted() is stable, so ties keep the store order
    ordered = sorted(drives, key=lambda d: d.start_date)
    first = ordered[0]
    last = max(ordered, key=lambda d: d.end_date)

    start_odometers = [d.start_odometer for d in ordered if d.start_odometer is not None]
    end_odometers = [d.end_odometer for d in ordered if d.end_odometer is not None]

    return GroupedDrive(
        car_id=car_id,
        drive_ids=[d.id for d in ordered],
        start_date=first.start_date,
        end_date=last.end_date,
        duration_min=sum(d.duration_min for d in ordered),
        distance=sum(d.distance for d in ordered),
        start_address=first.start_address,
        end_address=last.end_address,
        classification=consensus_classification(d.classification for d in ordered),
        start_odometer=min(start_odometers) if start_odometers else None,
        end_odometer=max(end_odometers) if end_odometers else None,
    )


def as_utc(instant: datetime) -> datetime:
    """Make an instant aware in UTC; naive values are taken to be UTC already."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def start_of_day(instant: datetime) -> datetime:
    """Truncate an instant to midnight UTC of its UTC day."""
    instant = as_utc(instant)
    return datetime(instant.year, instant.month, instant.day, tzinfo=timezone.utc)


def day_range(instants: Iterable[datetime]) -> DateRange:
    """
    Minimal day-aligned range enclosing all instants.

    The lower bound is the start of the earliest day, the upper bound the start
    of the day after the latest instant's day.

    Raises:
        NoAffectedRange: If no instants were given
    """
    # Upstream columns may come back naive while journal columns are aware
    instants = [as_utc(instant) for instant in instants]
    if not instants:
        raise NoAffectedRange("Error retrieving first/last dates of range of drives")
    return DateRange(
        start=start_of_day(min(instants)),
        end=start_of_day(max(instants)) + timedelta(days=1),
    )


def month_range(year: int, month: int) -> DateRange:
    """Half-open range covering one calendar month."""
    if not 1 <= month <= 12:
        raise InvalidRequest(f"Invalid month: {month}", {"month": month})
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, month + 1, 1, tzinfo=timezone.utc)
    return DateRange(start, end)
