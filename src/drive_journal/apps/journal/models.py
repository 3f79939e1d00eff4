"""
Journal models.

This file re-exports the ORM models from the infrastructure layer so that
Django's app registry discovers them.
"""

from drive_journal.apps.journal.infrastructure.orm import (
    Address, Car, Drive, DriveClassification, DriveComment, Geofence, GroupedDrive, GroupedDriveMember,
    Position
)

__all__ = [
    'Address',
    'Car',
    'Drive',
    'DriveClassification',
    'DriveComment',
    'Geofence',
    'GroupedDrive',
    'GroupedDriveMember',
    'Position',
]
