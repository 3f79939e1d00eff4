"""API views for the journal app."""
import logging

from django.utils import timezone
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from drive_journal.config import config

from ..application.journal_service import get_journal_service
from ..domain.exceptions import InvalidRequest, JournalError, StorageError
from .serializers import (
    ClassifyRequestSerializer, CommentSerializer, DaySerializer, DriveSerializer, GroupedDriveSerializer,
    GroupRequestSerializer, MonthOverviewSerializer, MonthQuerySerializer, TotalsSerializer,
    UngroupRequestSerializer
)

logger = logging.getLogger(__name__)


def error_response(error: JournalError) -> Response:
    """Map a journal error to an HTTP error response."""
    if isinstance(error, StorageError):
        logger.warning(f"Answering 503, journal store unavailable: {error.message}")
        return Response({'error': error.message}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
    if isinstance(error, InvalidRequest):
        return Response({'error': error.message, 'details': error.details}, status=status.HTTP_400_BAD_REQUEST)
    return Response({'error': error.message}, status=status.HTTP_400_BAD_REQUEST)


def line_string(coordinates) -> dict:
    """Wrap (longitude, latitude) pairs in a GeoJSON FeatureCollection."""
    return {
        'type': 'FeatureCollection',
        'features': [{
            'type': 'Feature',
            'geometry': {
                'type': 'LineString',
                'coordinates': [[lon, lat] for lon, lat in coordinates],
            },
            'properties': {},
        }],
    }


def _displayed_month(validated_data) -> tuple:
    now = timezone.now()
    return (
        validated_data.get('year', now.year),
        validated_data.get('month', now.month),
        validated_data.get('car', config.service.default_car_id),
    )


class JournalViewSet(viewsets.ViewSet):
    """
    Month overview and the classify/group/ungroup actions.

    month:     GET  /journal/month/?year=&month=&car=
    classify:  POST /journal/classify/
    group:     POST /journal/group/
    ungroup:   POST /journal/ungroup/

    Mutations answer with the month totals and the refreshed affected days.
    """

    def get_service(self):
        return get_journal_service()

    @action(detail=False, methods=['get'])
    def month(self, request):
        """Get the monthly dashboard."""
        query = MonthQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        year, month, car_id = _displayed_month(query.validated_data)

        try:
            overview = self.get_service().get_month(year, month, car_id)
        except JournalError as e:
            return error_response(e)

        return Response(MonthOverviewSerializer(overview).data)

    @action(detail=False, methods=['post'])
    def classify(self, request):
        """Classify drives and grouped drives."""
        serializer = ClassifyRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        service = self.get_service()

        try:
            date_range = service.classify(data['classification'], data['drives'], data['grouped_drives'])
        except JournalError as e:
            return error_response(e)

        return self._refreshed(service, date_range, data)

    @action(detail=False, methods=['post'])
    def group(self, request):
        """Merge drives into a grouped drive."""
        serializer = GroupRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        service = self.get_service()
        _, _, car_id = _displayed_month(data)

        try:
            grouped_drive, date_range = service.group(car_id, data['drives'])
        except JournalError as e:
            return error_response(e)

        return self._refreshed(service, date_range, data, grouped_drive=GroupedDriveSerializer(grouped_drive).data)

    @action(detail=False, methods=['post'])
    def ungroup(self, request):
        """Split grouped drives back into their drives."""
        serializer = UngroupRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        service = self.get_service()

        try:
            date_range = service.ungroup(data['grouped_drives'])
        except JournalError as e:
            return error_response(e)

        return self._refreshed(service, date_range, data)

    def _refreshed(self, service, date_range, data, **extra):
        """Build the response of a mutation: month totals and affected days."""
        year, month, car_id = _displayed_month(data)

        try:
            affected_days = []
            if date_range is not None:
                affected_days = service.get_days(date_range.start, date_range.end, car_id)
            totals = service.month_totals(year, month, car_id)
        except JournalError as e:
            return error_response(e)

        return Response({
            'totals': TotalsSerializer(totals).data,
            'affected_days': DaySerializer(affected_days, many=True).data,
            **extra,
        }, status=status.HTTP_200_OK)


class DriveViewSet(viewsets.ViewSet):
    """Drive details, route and comment."""

    def get_service(self):
        return get_journal_service()

    def retrieve(self, request, pk=None):
        try:
            drive = self.get_service().get_drive(pk)
        except JournalError as e:
            return error_response(e)

        if drive is None:
            return Response({'error': f'Drive {pk} not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(DriveSerializer(drive).data)

    @action(detail=True, methods=['get'])
    def route(self, request, pk=None):
        """Get the recorded route of a drive as GeoJSON."""
        try:
            coordinates = self.get_service().get_route([pk])
        except JournalError as e:
            return error_response(e)
        return Response(line_string(coordinates))

    @action(detail=True, methods=['patch'])
    def comment(self, request, pk=None):
        """Set or clear the comment of a drive."""
        serializer = CommentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        service = self.get_service()

        try:
            service.set_drive_comment(pk, serializer.validated_data['comment'])
            drive = service.get_drive(pk)
        except JournalError as e:
            return error_response(e)
        return Response(DriveSerializer(drive).data)


class GroupedDriveViewSet(viewsets.ViewSet):
    """Grouped drive details, route and comment."""

    def get_service(self):
        return get_journal_service()

    def retrieve(self, request, pk=None):
        try:
            grouped_drive = self.get_service().get_grouped_drive(pk)
        except JournalError as e:
            return error_response(e)

        if grouped_drive is None:
            return Response({'error': f'Grouped drive {pk} not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(GroupedDriveSerializer(grouped_drive).data)

    @action(detail=True, methods=['get'])
    def route(self, request, pk=None):
        """Get the recorded route of all member drives as GeoJSON."""
        try:
            coordinates = self.get_service().get_group_route(pk)
        except JournalError as e:
            return error_response(e)
        return Response(line_string(coordinates))

    @action(detail=True, methods=['patch'])
    def comment(self, request, pk=None):
        """Set or clear the comment of a grouped drive."""
        serializer = CommentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        service = self.get_service()

        try:
            service.set_group_comment(pk, serializer.validated_data['comment'])
            grouped_drive = service.get_grouped_drive(pk)
        except JournalError as e:
            return error_response(e)
        return Response(GroupedDriveSerializer(grouped_drive).data)
