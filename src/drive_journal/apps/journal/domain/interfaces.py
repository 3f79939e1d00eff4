"""Domain interfaces for the driving journal stores."""
from datetime import datetime
from typing import Dict, List, Optional, Protocol, Tuple

from .models import Car, Classification, Drive, GroupedDrive, Totals


class DriveRepositoryInterface(Protocol):
    """Interface for the drive store adapter."""

    def get_drives(self, car_id: int, start: datetime, end: datetime) -> List[Drive]:
        """
        Get the drives of a car starting within ``[start, end)``.

        Returns:
            Domain drives ordered by start date, latest first
        """
        ...

    def get_drive(self, drive_id: int) -> Optional[Drive]:
        """Get a drive by ID, or None if not found."""
        ...

    def get_drives_by_ids(self, drive_ids: List[int], car_id: Optional[int] = None,
                          for_update: bool = False) -> List[Drive]:
        """Get the given drives ordered by start date, earliest first."""
        ...

    def existing_ids(self, drive_ids: List[int]) -> List[int]:
        """Return the subset of ids that name an existing drive."""
        ...

    def get_extent(self, drive_ids: List[int]) -> Optional[Tuple[datetime, datetime]]:
        """Earliest start and latest end across the drives, or None."""
        ...

    def upsert_classifications(self, drive_ids: List[int], classification: Classification) -> int:
        """Insert or overwrite the classification of every drive id."""
        ...

    def get_totals(self, car_id: int, start: datetime, end: datetime) -> Totals:
        """Sum duration/distance per classification over ``[start, end)``."""
        ...

    def get_route(self, drive_ids: List[int]) -> List[Tuple[float, float]]:
        """Ordered (longitude, latitude) positions recorded during the drives."""
        ...

    def set_comment(self, drive_id: int, comment: Optional[str]) -> None:
        """Store or clear the free-text comment of a drive."""
        ...

    def get_year_span(self) -> Optional[Tuple[int, int]]:
        """First and last year that have drives, or None."""
        ...

    def get_cars(self) -> List[Car]:
        """All cars ordered by id."""
        ...


class GroupedDriveRepositoryInterface(Protocol):
    """Interface for the grouped-drive store adapter."""

    def get_grouped_drives(self, car_id: int, start: datetime, end: datetime) -> List[GroupedDrive]:
        """Get the grouped drives of a car starting within ``[start, end)``."""
        ...

    def get_grouped_drive(self, group_id: int) -> Optional[GroupedDrive]:
        """Get a grouped drive by ID, or None if not found."""
        ...

    def get_member_ids(self, group_ids: List[int]) -> Dict[int, List[int]]:
        """Map each existing group id to its member drive ids."""
        ...

    def get_grouped_member_ids(self, drive_ids: List[int]) -> List[int]:
        """Return the drive ids that already belong to a grouped drive."""
        ...

    def get_extent(self, group_ids: List[int]) -> Optional[Tuple[datetime, datetime]]:
        """Earliest start and latest end across the groups, or None."""
        ...

    def create(self, grouped_drive: GroupedDrive) -> GroupedDrive:
        """Persist a new grouped drive and its member set."""
        ...

    def delete(self, group_ids: List[int]) -> int:
        """Delete the grouped drives; returns how many existed."""
        ...

    def set_classification(self, group_ids: List[int],
                           classification: Optional[Classification]) -> int:
        """Overwrite the stored classification of the groups."""
        ...

    def set_comment(self, group_id: int, comment: Optional[str]) -> int:
        """Store or clear the comment of a grouped drive."""
        ...
