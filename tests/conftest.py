import os

import pytest

# Set environment variables for testing
os.environ["DB_ENGINE"] = "sqlite"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["LOG_DIR"] = "/tmp/drive-journal-test-logs"
os.environ["LOG_USE_COLOR"] = "false"
os.environ["DEFAULT_CAR_ID"] = "1"


@pytest.fixture
def car(db):
    from drive_journal.apps.journal.models import Car
    return Car.objects.create(id=1, model="3", name="Model 3")


@pytest.fixture
def other_car(db):
    from drive_journal.apps.journal.models import Car
    return Car.objects.create(id=2, model="Y", name="Model Y")


@pytest.fixture
def home(db):
    from drive_journal.apps.journal.models import Geofence
    return Geofence.objects.create(name="Home")


@pytest.fixture
def office(db):
    from drive_journal.apps.journal.models import Address
    return Address.objects.create(road="Main Street", house_number="12", city="Springfield")


@pytest.fixture
def make_drive(db):
    """Factory creating upstream drive rows."""
    from drive_journal.apps.journal.models import Drive

    def _make_drive(car, start, end, distance=10.0, duration_min=None, **kwargs):
        if duration_min is None and end is not None:
            duration_min = int((end - start).total_seconds() // 60)
        return Drive.objects.create(
            car=car,
            start_date=start,
            end_date=end,
            distance=distance,
            duration_min=duration_min,
            **kwargs
        )

    return _make_drive


@pytest.fixture
def classify_row(db):
    """Store a classification row directly."""
    from drive_journal.apps.journal.domain.models import Classification
    from drive_journal.apps.journal.models import DriveClassification

    def _classify_row(drive, classification: Classification):
        return DriveClassification.objects.create(drive_id=drive.pk, classification=int(classification))

    return _classify_row


@pytest.fixture
def service(db):
    from drive_journal.apps.journal.application.journal_service import get_journal_service
    return get_journal_service()
