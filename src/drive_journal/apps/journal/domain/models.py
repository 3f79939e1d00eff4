"""Domain models for the driving journal."""
from datetime import datetime
from enum import IntEnum
from typing import Dict, List, Optional


class Classification(IntEnum):
    """Classification of a drive. Absence of a value means unclassified."""
    BUSINESS = 1
    PRIVATE = 2

    @classmethod
    def from_name(cls, name: str) -> Optional["Classification"]:
        """Map a request-surface name ("business"/"private") to a value."""
        try:
            return cls[name.strip().upper()]
        except (KeyError, AttributeError):
            return None

    @property
    def label(self) -> str:
        return self.name.lower()


class Drive:
    """Domain model for one completed trip."""

    def __init__(self,
                 id: int,
                 car_id: int,
                 start_date: datetime,
                 end_date: datetime,
                 duration_min: int = 0,
                 distance: float = 0.0,
                 start_address: str = "",
                 end_address: str = "",
                 start_odometer: Optional[int] = None,
                 end_odometer: Optional[int] = None,
                 classification: Optional[Classification] = None,
                 group_id: Optional[int] = None,
                 comment: Optional[str] = None):
        self.id = id
        self.car_id = car_id
        self.start_date = start_date
        self.end_date = end_date
        self.duration_min = duration_min
        self.distance = distance
        self.start_address = start_address
        self.end_address = end_address
        self.start_odometer = start_odometer
        self.end_odometer = end_odometer
        self.classification = classification
        self.group_id = group_id
        self.comment = comment

    def __str__(self) -> str:
        return f"Drive {self.id} ({self.start_date:%Y-%m-%d %H:%M} - {self.end_date:%H:%M})"

    @property
    def is_grouped(self) -> bool:
        return self.group_id is not None


class GroupedDrive:
    """Aggregate standing in for a set of drives of the same car."""

    def __init__(self,
                 car_id: int,
                 drive_ids: List[int],
                 start_date: datetime,
                 end_date: datetime,
                 duration_min: int,
                 distance: float,
                 start_address: str,
                 end_address: str,
                 classification: Optional[Classification] = None,
                 comment: Optional[str] = None,
                 start_odometer: Optional[int] = None,
                 end_odometer: Optional[int] = None,
                 id: Optional[int] = None):
        self.id = id
        self.car_id = car_id
        self.drive_ids = drive_ids
        self.start_date = start_date
        self.end_date = end_date
        self.duration_min = duration_min
        self.distance = distance
        self.start_address = start_address
        self.end_address = end_address
        self.classification = classification
        self.comment = comment
        self.start_odometer = start_odometer
        self.end_odometer = end_odometer

    def __str__(self) -> str:
        return f"GroupedDrive {self.id} ({len(self.drive_ids)} drives)"


class DateRange:
    """Half-open, day-aligned interval ``[start, end)``."""

    def __init__(self, start: datetime, end: datetime):
        self.start = start
        self.end = end

    def __eq__(self, other) -> bool:
        if not isinstance(other, DateRange):
            return NotImplemented
        return self.start == other.start and self.end == other.end

    def __repr__(self) -> str:
        return f"DateRange({self.start.isoformat()}, {self.end.isoformat()})"


class Totals:
    """Duration/distance sums per classification bucket."""

    def __init__(self,
                 business_duration: int = 0,
                 business_distance: float = 0.0,
                 private_duration: int = 0,
                 private_distance: float = 0.0,
                 total_duration: int = 0,
                 total_distance: float = 0.0):
        self.business_duration = business_duration
        self.business_distance = business_distance
        self.private_duration = private_duration
        self.private_distance = private_distance
        self.total_duration = total_duration
        self.total_distance = total_distance

    # Unclassified is the remainder, never an independent sum
    @property
    def unclassified_duration(self) -> int:
        return self.total_duration - (self.business_duration + self.private_duration)

    @property
    def unclassified_distance(self) -> float:
        return self.total_distance - (self.business_distance + self.private_distance)

    @property
    def has_unclassified(self) -> bool:
        return self.unclassified_duration > 0 or self.unclassified_distance > 0

    def to_dict(self) -> Dict:
        return {
            "business": {"duration": self.business_duration, "distance": self.business_distance},
            "private": {"duration": self.private_duration, "distance": self.private_distance},
            "unclassified": {"duration": self.unclassified_duration, "distance": self.unclassified_distance},
            "total": {"duration": self.total_duration, "distance": self.total_distance},
        }


class Day:
    """Drives and grouped drives starting on one (UTC) day."""

    def __init__(self, date: datetime):
        self.date = date
        self.drives: List[Drive] = []
        self.grouped_drives: List[GroupedDrive] = []

    @property
    def is_weekend(self) -> bool:
        return self.date.weekday() >= 5

    def get_grouped_drive(self, group_id: int) -> Optional[GroupedDrive]:
        for grouped_drive in self.grouped_drives:
            if grouped_drive.id == group_id:
                return grouped_drive
        return None


class Car:
    """A vehicle known to the upstream tracker."""

    def __init__(self, id: int, model: Optional[str] = None, name: Optional[str] = None):
        self.id = id
        self.model = model
        self.name = name

    def __str__(self) -> str:
        return self.name or f"Car {self.id}"


class MonthOverview:
    """Everything the monthly dashboard shows."""

    def __init__(self,
                 year: int,
                 month: int,
                 car_id: int,
                 days: List[Day],
                 totals: Totals,
                 cars: List[Car],
                 years: List[int]):
        self.year = year
        self.month = month
        self.car_id = car_id
        self.days = days
        self.totals = totals
        self.cars = cars
        self.years = years
