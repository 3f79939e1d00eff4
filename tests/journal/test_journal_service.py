from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from django.db import DatabaseError

from drive_journal.apps.journal.application.journal_service import (
    JournalService, parse_car_id, parse_classification, parse_ids
)
from drive_journal.apps.journal.domain.exceptions import (
    AlreadyGrouped, InvalidRequest, NoAffectedRange, StorageError
)
from drive_journal.apps.journal.domain.models import Classification, DateRange
from drive_journal.apps.journal.models import DriveClassification, GroupedDrive, GroupedDriveMember

BUSINESS = Classification.BUSINESS
PRIVATE = Classification.PRIVATE


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


class TestParsing:
    """Tests for request value parsing."""

    def test_parse_ids(self):
        assert parse_ids(["3", 1, " 2 ", "3"]) == [3, 1, 2]
        assert parse_ids(None) == []

    @pytest.mark.parametrize("raw", ["abc", "0", "-4", "1.5", ""])
    def test_parse_ids_invalid(self, raw):
        with pytest.raises(InvalidRequest):
            parse_ids([raw])

    def test_parse_classification(self):
        assert parse_classification("business") is BUSINESS
        assert parse_classification(PRIVATE) is PRIVATE
        with pytest.raises(InvalidRequest):
            parse_classification("leisure")

    def test_parse_car_id(self):
        assert parse_car_id("2") == 2
        with pytest.raises(InvalidRequest):
            parse_car_id("car")


@pytest.mark.django_db
class TestClassify:
    """Tests for classifying drives and grouped drives."""

    def test_classify_drives(self, service, car, make_drive):
        a = make_drive(car, utc(2024, 3, 4, 9), utc(2024, 3, 4, 10))
        b = make_drive(car, utc(2024, 3, 6, 9), utc(2024, 3, 6, 10))

        date_range = service.classify("business", [str(a.pk), str(b.pk)])

        assert date_range == DateRange(utc(2024, 3, 4), utc(2024, 3, 7))
        assert service.get_drive(a.pk).classification is BUSINESS
        assert service.get_drive(b.pk).classification is BUSINESS

    def test_classify_is_idempotent(self, service, car, make_drive):
        a = make_drive(car, utc(2024, 3, 4, 9), utc(2024, 3, 4, 10))

        first = service.classify(PRIVATE, [a.pk])
        second = service.classify(PRIVATE, [a.pk])

        assert first == second
        assert DriveClassification.objects.filter(drive_id=a.pk).count() == 1

    def test_classify_overwrites(self, service, car, make_drive, classify_row):
        a = make_drive(car, utc(2024, 3, 4, 9), utc(2024, 3, 4, 10))
        classify_row(a, BUSINESS)

        service.classify("private", [a.pk])

        assert service.get_drive(a.pk).classification is PRIVATE

    def test_classify_group_expands_members(self, service, car, make_drive):
        a = make_drive(car, utc(2024, 3, 4, 9), utc(2024, 3, 4, 9, 30))
        b = make_drive(car, utc(2024, 3, 4, 9, 35), utc(2024, 3, 4, 10))
        grouped_drive, _ = service.group(car.pk, [a.pk, b.pk])

        date_range = service.classify("business", group_ids=[grouped_drive.id])

        assert date_range == DateRange(utc(2024, 3, 4), utc(2024, 3, 5))
        assert service.get_drive(a.pk).classification is BUSINESS
        assert service.get_drive(b.pk).classification is BUSINESS
        assert service.get_grouped_drive(grouped_drive.id).classification is BUSINESS

    def test_classify_requires_ids(self, service):
        with pytest.raises(InvalidRequest):
            service.classify("business", [], [])

    def test_classify_unknown_ids(self, service, car):
        with pytest.raises(InvalidRequest):
            service.classify("business", ["999"], ["998"])

        assert not DriveClassification.objects.exists()

    def test_classify_invalid_classification(self, service, car, make_drive):
        a = make_drive(car, utc(2024, 3, 4, 9), utc(2024, 3, 4, 10))

        with pytest.raises(InvalidRequest):
            service.classify("leisure", [a.pk])

    def test_set_group_classification_does_not_touch_members(self, service, car, make_drive, classify_row):
        a = make_drive(car, utc(2024, 3, 4, 9), utc(2024, 3, 4, 9, 30))
        b = make_drive(car, utc(2024, 3, 4, 9, 35), utc(2024, 3, 4, 10))
        classify_row(a, BUSINESS)
        grouped_drive, _ = service.group(car.pk, [a.pk, b.pk])

        assert service.set_group_classification("private", [grouped_drive.id]) == 1

        assert service.get_grouped_drive(grouped_drive.id).classification is PRIVATE
        assert service.get_drive(a.pk).classification is BUSINESS
        assert service.get_drive(b.pk).classification is None

    def test_recompute_group_consensus(self, service, car, make_drive):
        a = make_drive(car, utc(2024, 3, 4, 9), utc(2024, 3, 4, 9, 30))
        b = make_drive(car, utc(2024, 3, 4, 9, 35), utc(2024, 3, 4, 10))
        grouped_drive, _ = service.group(car.pk, [a.pk, b.pk])
        service.set_group_classification("business", [grouped_drive.id])

        assert service.recompute_group_consensus([grouped_drive.id]) == {grouped_drive.id: None}

        service.classify("private", [a.pk, b.pk])
        assert service.recompute_group_consensus([grouped_drive.id, 999]) == {grouped_drive.id: PRIVATE}


@pytest.mark.django_db
class TestGrouping:
    """Tests for grouping and ungrouping drives."""

    def test_group_and_ungroup_example(self, service, car, home, office, make_drive, classify_row):
        a = make_drive(car, utc(2024, 3, 4, 9, 0), utc(2024, 3, 4, 9, 30), distance=10.0, start_geofence=home)
        b = make_drive(car, utc(2024, 3, 4, 9, 35), utc(2024, 3, 4, 10, 0), distance=8.0, end_address=office)
        classify_row(b, BUSINESS)

        grouped_drive, date_range = service.group(car.pk, [str(a.pk), str(b.pk)])

        assert date_range == DateRange(utc(2024, 3, 4), utc(2024, 3, 5))
        assert grouped_drive.start_date == utc(2024, 3, 4, 9, 0)
        assert grouped_drive.end_date == utc(2024, 3, 4, 10, 0)
        assert grouped_drive.distance == pytest.approx(18.0)
        assert grouped_drive.duration_min == 55
        assert grouped_drive.start_address == "Home"
        assert grouped_drive.end_address == "Main Street 12, Springfield"
        assert grouped_drive.classification is None

        service.classify("private", group_ids=[grouped_drive.id])
        assert service.ungroup([grouped_drive.id]) == DateRange(utc(2024, 3, 4), utc(2024, 3, 5))

        assert service.get_grouped_drive(grouped_drive.id) is None
        assert service.get_drive(a.pk).classification is PRIVATE
        assert service.get_drive(b.pk).classification is PRIVATE
        assert service.get_drive(a.pk).group_id is None

        totals = service.month_totals(2024, 3, car.pk)
        assert totals.business_duration == 0
        assert totals.private_duration == 55
        assert totals.private_distance == pytest.approx(18.0)
        assert totals.unclassified_duration == 0
        assert totals.has_unclassified is False

    def test_group_round_trip_restores_drives(self, service, car, make_drive):
        a = make_drive(car, utc(2024, 3, 4, 9), utc(2024, 3, 4, 9, 30))
        b = make_drive(car, utc(2024, 3, 4, 9, 35), utc(2024, 3, 4, 10))
        before = service.get_days(utc(2024, 3, 4), utc(2024, 3, 5), car.pk)

        grouped_drive, _ = service.group(car.pk, [a.pk, b.pk])
        service.ungroup([grouped_drive.id])

        after = service.get_days(utc(2024, 3, 4), utc(2024, 3, 5), car.pk)
        assert [d.id for d in after[0].drives] == [d.id for d in before[0].drives]
        assert after[0].grouped_drives == []
        assert not GroupedDriveMember.objects.exists()

    def test_group_requires_ids(self, service, car):
        with pytest.raises(InvalidRequest):
            service.group(car.pk, [])

    def test_group_unknown_drive(self, service, car, make_drive):
        a = make_drive(car, utc(2024, 3, 4, 9), utc(2024, 3, 4, 10))

        with pytest.raises(InvalidRequest):
            service.group(car.pk, [a.pk, 999])

        assert not GroupedDrive.objects.exists()

    def test_group_other_car(self, service, car, other_car, make_drive):
        a = make_drive(car, utc(2024, 3, 4, 9), utc(2024, 3, 4, 10))
        b = make_drive(other_car, utc(2024, 3, 4, 11), utc(2024, 3, 4, 12))

        with pytest.raises(InvalidRequest):
            service.group(car.pk, [a.pk, b.pk])

        assert not GroupedDrive.objects.exists()

    def test_group_already_grouped(self, service, car, make_drive):
        a = make_drive(car, utc(2024, 3, 4, 9), utc(2024, 3, 4, 10))
        b = make_drive(car, utc(2024, 3, 4, 11), utc(2024, 3, 4, 12))
        c = make_drive(car, utc(2024, 3, 4, 13), utc(2024, 3, 4, 14))
        service.group(car.pk, [a.pk, b.pk])

        with pytest.raises(AlreadyGrouped):
            service.group(car.pk, [b.pk, c.pk])

        assert GroupedDrive.objects.count() == 1

    def test_ungroup_unknown(self, service):
        assert service.ungroup(["999"]) is None

    def test_ungroup_requires_ids(self, service):
        with pytest.raises(InvalidRequest):
            service.ungroup([])


@pytest.mark.django_db
class TestQueries:
    """Tests for ranges, totals and the month overview."""

    def test_affected_range_single_drive(self, service, car, make_drive):
        a = make_drive(car, utc(2024, 3, 4, 9), utc(2024, 3, 4, 10))

        assert service.affected_range([a.pk]) == DateRange(utc(2024, 3, 4), utc(2024, 3, 5))

    def test_affected_range_spans_midnight(self, service, car, make_drive):
        a = make_drive(car, utc(2024, 3, 4, 23, 30), utc(2024, 3, 5, 0, 30))

        assert service.affected_range([a.pk]) == DateRange(utc(2024, 3, 4), utc(2024, 3, 6))

    def test_affected_range_nothing_resolves(self, service):
        with pytest.raises(NoAffectedRange):
            service.affected_range([], ["999"])

    def test_totals_invariant(self, service, car, make_drive, classify_row):
        drives = [
            make_drive(car, utc(2024, 3, day, 9), utc(2024, 3, day, 9, 10 * day), distance=float(day))
            for day in range(1, 6)
        ]
        classify_row(drives[0], BUSINESS)
        classify_row(drives[1], PRIVATE)
        classify_row(drives[2], BUSINESS)

        totals = service.totals(car.pk, utc(2024, 3, 1), utc(2024, 4, 1))

        assert totals.business_duration + totals.private_duration + totals.unclassified_duration == \
            totals.total_duration
        assert totals.business_distance + totals.private_distance + totals.unclassified_distance == \
            pytest.approx(totals.total_distance)
        assert totals.unclassified_duration == 40 + 50

    def test_get_days(self, service, car, make_drive):
        a = make_drive(car, utc(2024, 3, 4, 9), utc(2024, 3, 4, 10))
        b = make_drive(car, utc(2024, 3, 4, 18), utc(2024, 3, 4, 19))
        c = make_drive(car, utc(2024, 3, 9, 9), utc(2024, 3, 9, 10))
        d = make_drive(car, utc(2024, 3, 9, 11), utc(2024, 3, 9, 12))
        grouped_drive, _ = service.group(car.pk, [c.pk, d.pk])

        days = service.get_days(utc(2024, 3, 1), utc(2024, 4, 1), car.pk)

        assert [day.date for day in days] == [utc(2024, 3, 9), utc(2024, 3, 4)]
        assert [drive.id for drive in days[1].drives] == [b.pk, a.pk]
        assert days[0].is_weekend is True
        assert days[1].is_weekend is False
        assert days[0].get_grouped_drive(grouped_drive.id).drive_ids == [c.pk, d.pk]
        assert days[1].grouped_drives == []

    def test_get_month(self, service, car, other_car, make_drive):
        make_drive(car, utc(2023, 12, 30, 9), utc(2023, 12, 30, 10))
        make_drive(car, utc(2024, 3, 4, 9), utc(2024, 3, 4, 10), distance=12.5)

        overview = service.get_month(2024, 3, car.pk)

        assert overview.years == [2023, 2024]
        assert [c.id for c in overview.cars] == [1, 2]
        assert [str(c) for c in service.list_cars()] == ["Model 3", "Model Y"]
        assert len(overview.days) == 1
        assert overview.totals.total_distance == pytest.approx(12.5)

    def test_get_month_without_drives(self, service, car):
        overview = service.get_month(2024, 3, car.pk)

        assert overview.days == []
        assert overview.years == [datetime.now(timezone.utc).year]

    def test_comments(self, service, car, make_drive):
        a = make_drive(car, utc(2024, 3, 4, 9), utc(2024, 3, 4, 10))
        grouped_drive, _ = service.group(car.pk, [a.pk])

        service.set_drive_comment(a.pk, "Parking fee")
        service.set_group_comment(grouped_drive.id, "Conference")

        assert service.get_drive(a.pk).comment == "Parking fee"
        assert service.get_grouped_drive(grouped_drive.id).comment == "Conference"

        with pytest.raises(InvalidRequest):
            service.set_drive_comment(999, "x")
        with pytest.raises(InvalidRequest):
            service.set_group_comment(999, "x")


@pytest.mark.django_db
class TestStorageErrors:
    """Tests for store failures."""

    @pytest.fixture
    def failing_service(self):
        drive_repository = MagicMock()
        grouped_drive_repository = MagicMock()
        drive_repository.existing_ids.side_effect = DatabaseError("connection refused")
        drive_repository.get_drives_by_ids.side_effect = DatabaseError("connection refused")
        drive_repository.get_totals.side_effect = DatabaseError("connection refused")
        return JournalService(drive_repository, grouped_drive_repository)

    def test_classify_surfaces_storage_error(self, failing_service):
        with pytest.raises(StorageError) as excinfo:
            failing_service.classify("business", ["1"])

        assert isinstance(excinfo.value.__cause__, DatabaseError)
        assert excinfo.value.details == {"operation": "classify"}

    def test_group_surfaces_storage_error(self, failing_service):
        with pytest.raises(StorageError):
            failing_service.group(1, ["1", "2"])

        failing_service.grouped_drive_repository.create.assert_not_called()

    def test_totals_surfaces_storage_error(self, failing_service):
        with pytest.raises(StorageError):
            failing_service.totals(1, utc(2024, 3, 1), utc(2024, 4, 1))


@pytest.mark.django_db(transaction=True)
class TestAtomicMutations:
    """Tests that a failing step leaves no partial writes behind."""

    def test_failed_member_insert_leaves_no_group(self, service, car, make_drive):
        a = make_drive(car, utc(2024, 3, 4, 9), utc(2024, 3, 4, 9, 30))
        b = make_drive(car, utc(2024, 3, 4, 9, 35), utc(2024, 3, 4, 10))

        with patch("django.db.models.query.QuerySet.bulk_create", side_effect=DatabaseError("disk full")):
            with pytest.raises(StorageError):
                service.group(car.pk, [a.pk, b.pk])

        assert GroupedDrive.objects.count() == 0
        assert GroupedDriveMember.objects.count() == 0
        assert service.get_drive(a.pk).group_id is None

    def test_failed_group_update_keeps_member_classifications(self, service, car, make_drive, classify_row):
        a = make_drive(car, utc(2024, 3, 4, 9), utc(2024, 3, 4, 9, 30))
        b = make_drive(car, utc(2024, 3, 4, 9, 35), utc(2024, 3, 4, 10))
        classify_row(a, BUSINESS)
        grouped_drive, _ = service.group(car.pk, [a.pk, b.pk])

        with patch("django.db.models.query.QuerySet.update", side_effect=DatabaseError("disk full")):
            with pytest.raises(StorageError):
                service.classify("private", group_ids=[grouped_drive.id])

        assert service.get_drive(a.pk).classification is BUSINESS
        assert service.get_drive(b.pk).classification is None


class TestMixedTimestamps:
    """Tests for extents read back with and without time zone."""

    def test_affected_range_with_naive_drive_extent(self):
        drive_repository = MagicMock()
        grouped_drive_repository = MagicMock()
        drive_repository.get_extent.return_value = (datetime(2024, 3, 4, 9, 0), datetime(2024, 3, 4, 10, 0))
        grouped_drive_repository.get_extent.return_value = (utc(2024, 3, 6, 9, 0), utc(2024, 3, 6, 10, 0))
        service = JournalService(drive_repository, grouped_drive_repository)

        with patch("drive_journal.apps.journal.application.journal_service.transaction"):
            date_range = service.affected_range([1], [2])

        assert date_range == DateRange(utc(2024, 3, 4), utc(2024, 3, 7))
