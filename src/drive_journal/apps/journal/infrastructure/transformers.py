from typing import Optional

from ..domain.models import Car as DomainCar
from ..domain.models import Classification
from ..domain.models import Drive as DomainDrive
from ..domain.models import GroupedDrive as DomainGroupedDrive
from .orm import Address as OrmAddress
from .orm import Car as OrmCar
from .orm import Drive as OrmDrive
from .orm import Geofence as OrmGeofence
from .orm import GroupedDrive as OrmGroupedDrive


def format_address(geofence: Optional[OrmGeofence], address: Optional[OrmAddress]) -> str:
    """
    Build the display text of a drive endpoint.

    A named geofence wins; otherwise the address name (or road and house
    number) is joined with the city. Missing parts are skipped.
    """
    if geofence is not None and geofence.name:
        return geofence.name
    if address is None:
        return ""

    street = address.name or " ".join(p for p in (address.road, address.house_number) if p)
    return ", ".join(p for p in (street, address.city) if p)


def to_classification(value: Optional[int]) -> Optional[Classification]:
    """Convert a stored classification integer to the domain enum."""
    if value is None:
        return None
    try:
        return Classification(value)
    except ValueError:
        return None


def _round_km(value: Optional[float]) -> Optional[int]:
    return None if value is None else int(round(value))


def orm_to_domain_drive(orm_drive: OrmDrive) -> DomainDrive:
    """
    Transform an ORM Drive to a domain Drive.

    Args:
        orm_drive: ORM instance from a queryset annotated with
            ``classification_value``, ``grouped_drive_id`` and ``comment_text``

    Returns:
        Domain model instance
    """
    return DomainDrive(
        id=orm_drive.pk,
        car_id=orm_drive.car_id,
        start_date=orm_drive.start_date,
        end_date=orm_drive.end_date,
        duration_min=orm_drive.duration_min or 0,
        distance=orm_drive.distance or 0.0,
        start_address=format_address(orm_drive.start_geofence, orm_drive.start_address),
        end_address=format_address(orm_drive.end_geofence, orm_drive.end_address),
        start_odometer=_round_km(orm_drive.start_km),
        end_odometer=_round_km(orm_drive.end_km),
        classification=to_classification(getattr(orm_drive, 'classification_value', None)),
        group_id=getattr(orm_drive, 'grouped_drive_id', None),
        comment=getattr(orm_drive, 'comment_text', None),
    )


def orm_to_domain_grouped_drive(orm_grouped_drive: OrmGroupedDrive) -> DomainGroupedDrive:
    """
    Transform an ORM GroupedDrive to a domain GroupedDrive.

    Args:
        orm_grouped_drive: ORM instance with prefetched ``members`` and the
            ``start_odometer``/``end_odometer`` annotations

    Returns:
        Domain model instance
    """
    return DomainGroupedDrive(
        id=orm_grouped_drive.pk,
        car_id=orm_grouped_drive.car_id,
        drive_ids=[member.drive_id for member in orm_grouped_drive.members.all()],
        start_date=orm_grouped_drive.start_date,
        end_date=orm_grouped_drive.end_date,
        duration_min=orm_grouped_drive.duration_min,
        distance=orm_grouped_drive.distance,
        start_address=orm_grouped_drive.start_address,
        end_address=orm_grouped_drive.end_address,
        classification=to_classification(orm_grouped_drive.classification),
        comment=orm_grouped_drive.comment,
        start_odometer=_round_km(getattr(orm_grouped_drive, 'start_odometer', None)),
        end_odometer=_round_km(getattr(orm_grouped_drive, 'end_odometer', None)),
    )


def orm_to_domain_car(orm_car: OrmCar) -> DomainCar:
    """Transform an ORM Car to a domain Car."""
    return DomainCar(id=orm_car.pk, model=orm_car.model, name=orm_car.name)
