"""Application service for the driving journal."""
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple, Union

from django.db import DEFAULT_DB_ALIAS, DatabaseError, transaction

from ..domain.exceptions import AlreadyGrouped, InvalidRequest, NoAffectedRange, StorageError
from ..domain.grouping import consensus_classification, day_range, fold_drives, month_range, start_of_day
from ..domain.interfaces import DriveRepositoryInterface, GroupedDriveRepositoryInterface
from ..domain.models import (
    Car, Classification, DateRange, Day, Drive, GroupedDrive, MonthOverview, Totals
)

logger = logging.getLogger(__name__)

RawIds = Optional[Iterable[Union[str, int]]]


def parse_ids(raw_ids: RawIds, kind: str = "drive") -> List[int]:
    """
    Parse ids as received from a request into unique positive integers.

    Args:
        raw_ids: Ids as strings or integers; None is treated as empty
        kind: What the ids name, used in the error message

    Returns:
        Ids in first-seen order without duplicates

    Raises:
        InvalidRequest: If any id is not a positive integer
    """
    ids: List[int] = []
    for raw in raw_ids or []:
        try:
            value = int(str(raw).strip())
        except ValueError:
            raise InvalidRequest(f"Invalid {kind} id: {raw!r}", {"kind": kind, "id": raw})
        if value <= 0:
            raise InvalidRequest(f"Invalid {kind} id: {raw!r}", {"kind": kind, "id": raw})
        if value not in ids:
            ids.append(value)
    return ids


def parse_classification(value: Union[str, Classification]) -> Classification:
    """Accept a Classification or its request name ("business"/"private")."""
    if isinstance(value, Classification):
        return value
    classification = Classification.from_name(value) if isinstance(value, str) else None
    if classification is None:
        raise InvalidRequest(f"Unknown classification: {value!r}", {"classification": value})
    return classification


def parse_car_id(value: Union[str, int]) -> int:
    """Parse a car id from a request."""
    [car_id] = parse_ids([value], "car")
    return car_id


class JournalService:
    """Application service classifying, grouping and totalling drives."""

    def __init__(self,
                 drive_repository: DriveRepositoryInterface,
                 grouped_drive_repository: GroupedDriveRepositoryInterface,
                 using: str = DEFAULT_DB_ALIAS):
        """
        Initialize the journal service with its dependencies.

        Args:
            drive_repository: Store adapter for drives and classifications
            grouped_drive_repository: Store adapter for grouped drives
            using: Database alias the repositories run on; every operation
                runs in one transaction on it
        """
        self.drive_repository = drive_repository
        self.grouped_drive_repository = grouped_drive_repository
        self.using = using

    @contextmanager
    def _transaction(self, operation: str):
        """Run a block atomically, surfacing store failures as StorageError."""
        try:
            with transaction.atomic(using=self.using):
                yield
        except DatabaseError as e:
            logger.error(f"Store failure during {operation}: {e}", exc_info=True)
            raise StorageError(f"Store failure during {operation}: {e}", {"operation": operation}) from e

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def classify(self, classification: Union[str, Classification],
                 drive_ids: RawIds = None, group_ids: RawIds = None) -> Optional[DateRange]:
        """
        Tag drives, and the members of grouped drives, as business or private.

        Group ids are expanded to their member drives; an unknown group id
        contributes nothing. Every resolved drive gets its classification
        inserted or overwritten, and the given groups get the value assigned
        directly.

        Returns:
            The affected date range, or None if nothing resolved to a record

        Raises:
            InvalidRequest: If no existing drive is named directly or through a group
            StorageError: If the store fails; nothing is written
        """
        value = parse_classification(classification)
        drive_ids = parse_ids(drive_ids, "drive")
        group_ids = parse_ids(group_ids, "grouped drive")

        if not drive_ids and not group_ids:
            raise InvalidRequest("Attempt to classify drives failed; no drive ids or grouped drive ids specified")

        with self._transaction("classify"):
            resolved = list(drive_ids)
            if group_ids:
                for members in self.grouped_drive_repository.get_member_ids(group_ids).values():
                    resolved.extend(i for i in members if i not in resolved)

            existing = set(self.drive_repository.existing_ids(resolved)) if resolved else set()
            targets = [i for i in resolved if i in existing]
            if not targets:
                raise InvalidRequest(
                    "Attempt to classify drives failed; none of the given ids resolved to a drive",
                    {"drive_ids": drive_ids, "group_ids": group_ids}
                )

            self.drive_repository.upsert_classifications(targets, value)
            if group_ids:
                self.grouped_drive_repository.set_classification(group_ids, value)

            date_range = self._refresh_range(drive_ids, group_ids)

        logger.info(f"Classified {len(targets)} drives as {value.label}")
        return date_range

    def set_group_classification(self, classification: Optional[Union[str, Classification]],
                                 group_ids: RawIds) -> int:
        """
        Overwrite the stored classification of grouped drives directly.

        Member drives are not touched, so the stored value may differ from the
        members' consensus afterwards. None clears the group classification.

        Returns:
            Number of grouped drives updated
        """
        value = None if classification is None else parse_classification(classification)
        group_ids = parse_ids(group_ids, "grouped drive")
        if not group_ids:
            raise InvalidRequest("No grouped drive ids specified")

        with self._transaction("set group classification"):
            updated = self.grouped_drive_repository.set_classification(group_ids, value)

        logger.info(f"Set classification of {updated} grouped drives to {value.label if value else 'none'}")
        return updated

    def recompute_group_consensus(self, group_ids: RawIds) -> Dict[int, Optional[Classification]]:
        """
        Re-derive and store each group's classification from its members.

        Returns:
            The stored value per existing group id
        """
        group_ids = parse_ids(group_ids, "grouped drive")
        if not group_ids:
            raise InvalidRequest("No grouped drive ids specified")

        result: Dict[int, Optional[Classification]] = {}
        with self._transaction("recompute group consensus"):
            for group_id, member_ids in self.grouped_drive_repository.get_member_ids(group_ids).items():
                members = self.drive_repository.get_drives_by_ids(member_ids)
                value = consensus_classification(d.classification for d in members)
                self.grouped_drive_repository.set_classification([group_id], value)
                result[group_id] = value

        return result

    def group(self, car_id: Union[str, int], drive_ids: RawIds) -> Tuple[GroupedDrive, Optional[DateRange]]:
        """
        Merge drives of one car into a new grouped drive.

        Returns:
            The created grouped drive and the date range covering its members

        Raises:
            InvalidRequest: If no ids are given or a drive is unknown or belongs to another car
            AlreadyGrouped: If a drive already belongs to a grouped drive
            StorageError: If the store fails; no group is created
        """
        car_id = parse_car_id(car_id)
        drive_ids = parse_ids(drive_ids, "drive")
        if not drive_ids:
            raise InvalidRequest("Attempt to group drives failed; no drive ids specified")

        with self._transaction("group"):
            drives = self.drive_repository.get_drives_by_ids(drive_ids, car_id=car_id, for_update=True)

            found = {d.id for d in drives}
            missing = [i for i in drive_ids if i not in found]
            if missing:
                raise InvalidRequest(
                    f"Drives {missing} do not exist or do not belong to car {car_id}",
                    {"car_id": car_id, "drive_ids": missing}
                )

            already_grouped = self.grouped_drive_repository.get_grouped_member_ids(drive_ids)
            if already_grouped:
                raise AlreadyGrouped(
                    f"Drives {sorted(already_grouped)} already belong to a grouped drive",
                    {"drive_ids": sorted(already_grouped)}
                )

            grouped_drive = self.grouped_drive_repository.create(fold_drives(car_id, drives))
            date_range = self._refresh_range(drive_ids, [])

        logger.info(f"Grouped drives {grouped_drive.drive_ids} into grouped drive {grouped_drive.id}")
        return grouped_drive, date_range

    def ungroup(self, group_ids: RawIds) -> Optional[DateRange]:
        """
        Delete grouped drives, leaving their member drives untouched.

        The affected range is computed before deleting. Unknown group ids are
        ignored.

        Returns:
            The affected date range, or None if none of the groups existed
        """
        group_ids = parse_ids(group_ids, "grouped drive")
        if not group_ids:
            raise InvalidRequest("Attempt to ungroup drives failed; no group drive ids specified")

        with self._transaction("ungroup"):
            date_range = self._refresh_range([], group_ids)
            deleted = self.grouped_drive_repository.delete(group_ids)

        logger.info(f"Ungrouped {deleted} of {len(group_ids)} grouped drives")
        return date_range

    def set_drive_comment(self, drive_id: Union[str, int], comment: Optional[str]) -> None:
        """Store or clear the comment of a drive."""
        [drive_id] = parse_ids([drive_id], "drive")
        with self._transaction("set drive comment"):
            if not self.drive_repository.existing_ids([drive_id]):
                raise InvalidRequest(f"Drive {drive_id} does not exist", {"drive_id": drive_id})
            self.drive_repository.set_comment(drive_id, comment)

    def set_group_comment(self, group_id: Union[str, int], comment: Optional[str]) -> None:
        """Store or clear the comment of a grouped drive."""
        [group_id] = parse_ids([group_id], "grouped drive")
        with self._transaction("set grouped drive comment"):
            if not self.grouped_drive_repository.set_comment(group_id, comment):
                raise InvalidRequest(f"Grouped drive {group_id} does not exist", {"group_id": group_id})

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def affected_range(self, drive_ids: RawIds = None, group_ids: RawIds = None) -> DateRange:
        """
        Compute the day-aligned range spanned by drives and grouped drives.

        Returns:
            ``[start of first day, start of the day after the last day)``

        Raises:
            NoAffectedRange: If none of the ids resolve to a record
        """
        drive_ids = parse_ids(drive_ids, "drive")
        group_ids = parse_ids(group_ids, "grouped drive")
        with self._transaction("affected range"):
            return self._affected_range(drive_ids, group_ids)

    def _affected_range(self, drive_ids: List[int], group_ids: List[int]) -> DateRange:
        instants: List[datetime] = []
        for extent in (self.drive_repository.get_extent(drive_ids),
                       self.grouped_drive_repository.get_extent(group_ids)):
            if extent is not None:
                instants.extend(extent)
        return day_range(instants)

    def _refresh_range(self, drive_ids: List[int], group_ids: List[int]) -> Optional[DateRange]:
        try:
            return self._affected_range(drive_ids, group_ids)
        except NoAffectedRange:
            logger.warning("The action did not return a useful date range")
            return None

    def totals(self, car_id: Union[str, int], start: datetime, end: datetime) -> Totals:
        """Totals per classification for a car's drives starting in ``[start, end)``."""
        car_id = parse_car_id(car_id)
        with self._transaction("totals"):
            return self.drive_repository.get_totals(car_id, start, end)

    def month_totals(self, year: int, month: int, car_id: Union[str, int]) -> Totals:
        """Totals per classification for one calendar month."""
        date_range = month_range(year, month)
        return self.totals(car_id, date_range.start, date_range.end)

    def get_days(self, start: datetime, end: datetime, car_id: Union[str, int]) -> List[Day]:
        """
        Bucket a car's drives and grouped drives per day.

        Days are ordered latest first; days without drives are omitted.
        """
        car_id = parse_car_id(car_id)
        with self._transaction("get days"):
            drives = self.drive_repository.get_drives(car_id, start, end)
            grouped_drives = self.grouped_drive_repository.get_grouped_drives(car_id, start, end)

        groups_by_day: Dict[datetime, List[GroupedDrive]] = {}
        for grouped_drive in grouped_drives:
            groups_by_day.setdefault(start_of_day(grouped_drive.start_date), []).append(grouped_drive)

        days: List[Day] = []
        for drive in drives:
            date = start_of_day(drive.start_date)
            if not days or days[-1].date != date:
                day = Day(date)
                day.grouped_drives = groups_by_day.get(date, [])
                days.append(day)
            days[-1].drives.append(drive)

        return days

    def get_month(self, year: int, month: int, car_id: Union[str, int]) -> MonthOverview:
        """Collect the monthly dashboard for one car."""
        car_id = parse_car_id(car_id)
        date_range = month_range(year, month)

        days = self.get_days(date_range.start, date_range.end, car_id)
        totals = self.totals(car_id, date_range.start, date_range.end)
        with self._transaction("month overview"):
            cars = self.drive_repository.get_cars()
            span = self.drive_repository.get_year_span()

        if span is None:
            this_year = datetime.now(timezone.utc).year
            span = (this_year, this_year)

        return MonthOverview(
            year=year,
            month=month,
            car_id=car_id,
            days=days,
            totals=totals,
            cars=cars,
            years=list(range(span[0], span[1] + 1)),
        )

    def get_drive(self, drive_id: Union[str, int]) -> Optional[Drive]:
        """Get a drive by ID, or None if not found."""
        [drive_id] = parse_ids([drive_id], "drive")
        with self._transaction("get drive"):
            return self.drive_repository.get_drive(drive_id)

    def get_grouped_drive(self, group_id: Union[str, int]) -> Optional[GroupedDrive]:
        """Get a grouped drive by ID, or None if not found."""
        [group_id] = parse_ids([group_id], "grouped drive")
        with self._transaction("get grouped drive"):
            return self.grouped_drive_repository.get_grouped_drive(group_id)

    def get_route(self, drive_ids: RawIds) -> List[Tuple[float, float]]:
        """Ordered (longitude, latitude) positions of the drives."""
        drive_ids = parse_ids(drive_ids, "drive")
        with self._transaction("get route"):
            return self.drive_repository.get_route(drive_ids)

    def get_group_route(self, group_id: Union[str, int]) -> List[Tuple[float, float]]:
        """Ordered (longitude, latitude) positions of a grouped drive's members."""
        [group_id] = parse_ids([group_id], "grouped drive")
        with self._transaction("get grouped drive route"):
            member_ids = self.grouped_drive_repository.get_member_ids([group_id]).get(group_id, [])
            return self.drive_repository.get_route(member_ids)

    def list_cars(self) -> List[Car]:
        """All cars known to the tracker."""
        with self._transaction("list cars"):
            return self.drive_repository.get_cars()


def get_journal_service(using: str = DEFAULT_DB_ALIAS) -> JournalService:
    """
    Build a journal service whose repositories run on one database alias.

    Args:
        using: Django database alias

    Returns:
        JournalService instance
    """
    from ..infrastructure.repositories import DriveRepository, GroupedDriveRepository
    return JournalService(DriveRepository(using), GroupedDriveRepository(using), using=using)
