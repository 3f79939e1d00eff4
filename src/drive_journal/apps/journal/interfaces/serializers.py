"""Serializers for the journal API endpoints."""
from rest_framework import serializers

from drive_journal.utils.formatting import format_duration


class ClassificationField(serializers.Field):
    """Render a domain Classification as its name, None as null."""

    def to_representation(self, value):
        return value.label if value is not None else None


class DriveSerializer(serializers.Serializer):
    """Serializer for domain drives."""
    id = serializers.IntegerField()
    car_id = serializers.IntegerField()
    start_date = serializers.DateTimeField()
    end_date = serializers.DateTimeField()
    duration_min = serializers.IntegerField()
    duration_string = serializers.SerializerMethodField()
    distance = serializers.FloatField()
    start_address = serializers.CharField()
    end_address = serializers.CharField()
    start_odometer = serializers.IntegerField(allow_null=True)
    end_odometer = serializers.IntegerField(allow_null=True)
    classification = ClassificationField()
    group_id = serializers.IntegerField(allow_null=True)
    comment = serializers.CharField(allow_null=True)

    def get_duration_string(self, obj):
        return format_duration(obj.duration_min)


class GroupedDriveSerializer(serializers.Serializer):
    """Serializer for domain grouped drives."""
    id = serializers.IntegerField()
    car_id = serializers.IntegerField()
    drive_ids = serializers.ListField(child=serializers.IntegerField())
    start_date = serializers.DateTimeField()
    end_date = serializers.DateTimeField()
    duration_min = serializers.IntegerField()
    duration_string = serializers.SerializerMethodField()
    distance = serializers.FloatField()
    start_address = serializers.CharField()
    end_address = serializers.CharField()
    start_odometer = serializers.IntegerField(allow_null=True)
    end_odometer = serializers.IntegerField(allow_null=True)
    classification = ClassificationField()
    comment = serializers.CharField(allow_null=True)

    def get_duration_string(self, obj):
        return format_duration(obj.duration_min)


class DaySerializer(serializers.Serializer):
    """Serializer for one day of drives."""
    date = serializers.DateTimeField()
    is_weekend = serializers.BooleanField()
    drives = DriveSerializer(many=True)
    grouped_drives = GroupedDriveSerializer(many=True)


class TotalsSerializer(serializers.Serializer):
    """Serializer for classification totals."""
    business_duration = serializers.IntegerField()
    business_distance = serializers.FloatField()
    private_duration = serializers.IntegerField()
    private_distance = serializers.FloatField()
    unclassified_duration = serializers.IntegerField()
    unclassified_distance = serializers.FloatField()
    total_duration = serializers.IntegerField()
    total_distance = serializers.FloatField()
    has_unclassified = serializers.BooleanField()


class CarSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    model = serializers.CharField(allow_null=True)
    name = serializers.CharField(allow_null=True)


class MonthOverviewSerializer(serializers.Serializer):
    """Serializer for the monthly dashboard."""
    year = serializers.IntegerField()
    month = serializers.IntegerField()
    car_id = serializers.IntegerField()
    cars = CarSerializer(many=True)
    years = serializers.ListField(child=serializers.IntegerField())
    days = DaySerializer(many=True)
    totals = TotalsSerializer()


# Request serializers

class MonthQuerySerializer(serializers.Serializer):
    """Query parameters selecting the displayed month and car."""
    year = serializers.IntegerField(required=False, min_value=1970, max_value=9999)
    month = serializers.IntegerField(required=False, min_value=1, max_value=12)
    car = serializers.IntegerField(required=False, min_value=1)


class ClassifyRequestSerializer(MonthQuerySerializer):
    classification = serializers.ChoiceField(choices=['business', 'private'])
    drives = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    grouped_drives = serializers.ListField(child=serializers.CharField(), required=False, default=list)


class GroupRequestSerializer(MonthQuerySerializer):
    drives = serializers.ListField(child=serializers.CharField(), allow_empty=False)


class UngroupRequestSerializer(MonthQuerySerializer):
    grouped_drives = serializers.ListField(child=serializers.CharField(), allow_empty=False)


class CommentSerializer(serializers.Serializer):
    comment = serializers.CharField(allow_null=True, allow_blank=True, required=False, default=None)
