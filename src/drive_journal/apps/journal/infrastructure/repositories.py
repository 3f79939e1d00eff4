from datetime import datetime
from typing import Dict, List, Optional, Tuple

from django.db import DEFAULT_DB_ALIAS
from django.db.models import F, Max, Min, Prefetch, Q, Sum

from ..domain.models import Car as DomainCar
from ..domain.models import Classification, Totals
from ..domain.models import Drive as DomainDrive
from ..domain.models import GroupedDrive as DomainGroupedDrive
from .orm import Car as OrmCar
from .orm import Drive as OrmDrive
from .orm import DriveClassification as OrmClassification
from .orm import DriveComment as OrmComment
from .orm import GroupedDrive as OrmGroupedDrive
from .orm import GroupedDriveMember as OrmGroupedDriveMember
from .orm import Position as OrmPosition
from .transformers import orm_to_domain_car, orm_to_domain_drive, orm_to_domain_grouped_drive


class DriveRepository:
    """Repository for drives, their classifications and comments."""

    def __init__(self, using: str = DEFAULT_DB_ALIAS):
        """
        Args:
            using: Django database alias every query of this repository runs on
        """
        self.using = using

    def _queryset(self):
        return (
            OrmDrive.objects.using(self.using)
            .select_related('start_address', 'end_address', 'start_geofence', 'end_geofence')
            .annotate(
                classification_value=F('journal_classification__classification'),
                grouped_drive_id=F('journal_group_membership__group'),
                comment_text=F('journal_comment__comment'),
            )
            .filter(end_date__isnull=False)
        )

    def get_drives(self, car_id: int, start: datetime, end: datetime) -> List[DomainDrive]:
        """
        Get the drives of a car starting within ``[start, end)``.

        Args:
            car_id: Car to look up
            start: Inclusive lower bound on the start date
            end: Exclusive upper bound on the start date

        Returns:
            Domain drives, latest first
        """
        orm_drives = self._queryset().filter(
            car_id=car_id, start_date__gte=start, start_date__lt=end
        ).order_by('-start_date')
        return [orm_to_domain_drive(drive) for drive in orm_drives]

    def get_drive(self, drive_id: int) -> Optional[DomainDrive]:
        """Get a drive by ID, or None if not found."""
        orm_drive = self._queryset().filter(pk=drive_id).first()
        if orm_drive is None:
            return None
        return orm_to_domain_drive(orm_drive)

    def get_drives_by_ids(self, drive_ids: List[int], car_id: Optional[int] = None,
                          for_update: bool = False) -> List[DomainDrive]:
        """
        Get the given drives, earliest first.

        Args:
            drive_ids: Drives to fetch
            car_id: If given, only drives of this car are returned
            for_update: Lock the drive rows until the surrounding transaction ends

        Returns:
            Domain drives ordered by start date
        """
        if for_update:
            # Row locks cannot be taken on the nullable side of the outer joins
            # used for reading, so lock the plain rows first.
            list(OrmDrive.objects.using(self.using).select_for_update()
                 .filter(pk__in=drive_ids).values_list('pk', flat=True))

        orm_drives = self._queryset().filter(pk__in=drive_ids)
        if car_id is not None:
            orm_drives = orm_drives.filter(car_id=car_id)
        return [orm_to_domain_drive(drive) for drive in orm_drives.order_by('start_date')]

    def existing_ids(self, drive_ids: List[int]) -> List[int]:
        """Return the subset of ids that name an existing drive."""
        return list(OrmDrive.objects.using(self.using).filter(pk__in=drive_ids).values_list('pk', flat=True))

    def get_extent(self, drive_ids: List[int]) -> Optional[Tuple[datetime, datetime]]:
        """Earliest start and latest end across the drives, or None."""
        if not drive_ids:
            return None
        extent = OrmDrive.objects.using(self.using).filter(pk__in=drive_ids).aggregate(
            min_date=Min('start_date'), max_date=Max('end_date')
        )
        if extent['min_date'] is None:
            return None
        return extent['min_date'], extent['max_date'] or extent['min_date']

    def upsert_classifications(self, drive_ids: List[int], classification: Classification) -> int:
        """
        Insert or overwrite the classification of every drive id.

        Returns:
            Number of drives written
        """
        for drive_id in drive_ids:
            OrmClassification.objects.using(self.using).update_or_create(
                drive_id=drive_id,
                defaults={'classification': int(classification)}
            )
        return len(drive_ids)

    def get_totals(self, car_id: int, start: datetime, end: datetime) -> Totals:
        """
        Sum duration and distance of a car's drives over ``[start, end)``.

        Business and private are independent sums; the unclassified bucket is
        the remainder computed by Totals.
        """
        business = Q(journal_classification__classification=int(Classification.BUSINESS))
        private = Q(journal_classification__classification=int(Classification.PRIVATE))

        sums = OrmDrive.objects.using(self.using).filter(
            car_id=car_id, start_date__gte=start, start_date__lt=end, end_date__isnull=False
        ).aggregate(
            business_duration=Sum('duration_min', filter=business, default=0),
            business_distance=Sum('distance', filter=business, default=0.0),
            private_duration=Sum('duration_min', filter=private, default=0),
            private_distance=Sum('distance', filter=private, default=0.0),
            total_duration=Sum('duration_min', default=0),
            total_distance=Sum('distance', default=0.0),
        )
        return Totals(**sums)

    def get_route(self, drive_ids: List[int]) -> List[Tuple[float, float]]:
        """Ordered (longitude, latitude) positions recorded during the drives."""
        windows = Q()
        for drive in OrmDrive.objects.using(self.using).filter(pk__in=drive_ids, end_date__isnull=False).values(
                'car_id', 'start_date', 'end_date'):
            windows |= Q(car_id=drive['car_id'], date__range=(drive['start_date'], drive['end_date']))

        # An empty Q would match every position
        if not windows:
            return []

        positions = OrmPosition.objects.using(self.using).filter(windows).order_by('date')
        return list(positions.values_list('longitude', 'latitude'))

    def set_comment(self, drive_id: int, comment: Optional[str]) -> None:
        """Store the comment of a drive, or remove it when empty."""
        if comment:
            OrmComment.objects.using(self.using).update_or_create(
                drive_id=drive_id, defaults={'comment': comment}
            )
        else:
            OrmComment.objects.using(self.using).filter(drive_id=drive_id).delete()

    def get_year_span(self) -> Optional[Tuple[int, int]]:
        """First and last year that have drives, or None."""
        span = OrmDrive.objects.using(self.using).aggregate(
            min_date=Min('start_date'), max_date=Max('start_date')
        )
        if span['min_date'] is None:
            return None
        return span['min_date'].year, span['max_date'].year

    def get_cars(self) -> List[DomainCar]:
        """All cars ordered by id."""
        return [orm_to_domain_car(car) for car in OrmCar.objects.using(self.using).order_by('pk')]


class GroupedDriveRepository:
    """Repository for grouped drives and their member sets."""

    def __init__(self, using: str = DEFAULT_DB_ALIAS):
        """
        Args:
            using: Django database alias every query of this repository runs on
        """
        self.using = using

    def _queryset(self):
        members = OrmGroupedDriveMember.objects.using(self.using).order_by('pk')
        return (
            OrmGroupedDrive.objects.using(self.using)
            .annotate(
                start_odometer=Min('members__drive__start_km'),
                end_odometer=Max('members__drive__end_km'),
            )
            .prefetch_related(Prefetch('members', queryset=members))
        )

    def get_grouped_drives(self, car_id: int, start: datetime, end: datetime) -> List[DomainGroupedDrive]:
        """
        Get the grouped drives of a car starting within ``[start, end)``.

        Returns:
            Domain grouped drives, latest first
        """
        orm_grouped_drives = self._queryset().filter(
            car_id=car_id, start_date__gte=start, start_date__lt=end
        ).order_by('-start_date')
        return [orm_to_domain_grouped_drive(gd) for gd in orm_grouped_drives]

    def get_grouped_drive(self, group_id: int) -> Optional[DomainGroupedDrive]:
        """Get a grouped drive by ID, or None if not found."""
        orm_grouped_drive = self._queryset().filter(pk=group_id).first()
        if orm_grouped_drive is None:
            return None
        return orm_to_domain_grouped_drive(orm_grouped_drive)

    def get_member_ids(self, group_ids: List[int]) -> Dict[int, List[int]]:
        """
        Map each existing group id to its member drive ids.

        Group ids without a record are absent from the result.
        """
        members: Dict[int, List[int]] = {}
        rows = OrmGroupedDriveMember.objects.using(self.using).filter(
            group_id__in=group_ids
        ).order_by('pk').values_list('group_id', 'drive_id')
        for group_id, drive_id in rows:
            members.setdefault(group_id, []).append(drive_id)
        return members

    def get_grouped_member_ids(self, drive_ids: List[int]) -> List[int]:
        """Return the drive ids that already belong to a grouped drive."""
        return list(OrmGroupedDriveMember.objects.using(self.using).filter(
            drive_id__in=drive_ids
        ).values_list('drive_id', flat=True))

    def get_extent(self, group_ids: List[int]) -> Optional[Tuple[datetime, datetime]]:
        """Earliest start and latest end across the groups, or None."""
        if not group_ids:
            return None
        extent = OrmGroupedDrive.objects.using(self.using).filter(pk__in=group_ids).aggregate(
            min_date=Min('start_date'), max_date=Max('end_date')
        )
        if extent['min_date'] is None:
            return None
        return extent['min_date'], extent['max_date']

    def create(self, grouped_drive: DomainGroupedDrive) -> DomainGroupedDrive:
        """
        Persist a new grouped drive and its member set.

        Returns:
            The grouped drive with its assigned id
        """
        orm_grouped_drive = OrmGroupedDrive.objects.using(self.using).create(
            car_id=grouped_drive.car_id,
            start_date=grouped_drive.start_date,
            end_date=grouped_drive.end_date,
            start_address=grouped_drive.start_address,
            end_address=grouped_drive.end_address,
            distance=grouped_drive.distance,
            duration_min=grouped_drive.duration_min,
            classification=None if grouped_drive.classification is None else int(grouped_drive.classification),
            comment=grouped_drive.comment,
        )
        OrmGroupedDriveMember.objects.using(self.using).bulk_create([
            OrmGroupedDriveMember(group=orm_grouped_drive, drive_id=drive_id)
            for drive_id in grouped_drive.drive_ids
        ])
        grouped_drive.id = orm_grouped_drive.pk
        return grouped_drive

    def delete(self, group_ids: List[int]) -> int:
        """
        Delete grouped drives and their membership rows.

        Returns:
            Number of grouped drives that existed and were deleted
        """
        _, per_model = OrmGroupedDrive.objects.using(self.using).filter(pk__in=group_ids).delete()
        return per_model.get(OrmGroupedDrive._meta.label, 0)

    def set_classification(self, group_ids: List[int],
                           classification: Optional[Classification]) -> int:
        """Overwrite the stored classification of the groups."""
        value = None if classification is None else int(classification)
        return OrmGroupedDrive.objects.using(self.using).filter(pk__in=group_ids).update(classification=value)

    def set_comment(self, group_id: int, comment: Optional[str]) -> int:
        """Store or clear the comment of a grouped drive."""
        return OrmGroupedDrive.objects.using(self.using).filter(pk=group_id).update(comment=comment or None)
