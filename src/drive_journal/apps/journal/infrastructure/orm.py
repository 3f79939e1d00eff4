from django.db import models

from ..domain.models import Classification

CLASSIFICATION_CHOICES = [(c.value, c.label) for c in Classification]


# Tables owned by the upstream tracker (TeslaMate). The journal only reads them.

class Car(models.Model):
    """Django ORM model representing a tracked car."""
    model = models.CharField(max_length=255, null=True, blank=True)
    name = models.CharField(max_length=255, null=True, blank=True)

    class Meta:
        db_table = 'cars'
        app_label = 'journal'

    def __str__(self):
        return self.name or f"Car {self.pk}"


class Address(models.Model):
    """Django ORM model representing a geocoded address."""
    name = models.CharField(max_length=255, null=True, blank=True)
    road = models.CharField(max_length=255, null=True, blank=True)
    house_number = models.CharField(max_length=255, null=True, blank=True)
    city = models.CharField(max_length=255, null=True, blank=True)

    class Meta:
        db_table = 'addresses'
        app_label = 'journal'


class Geofence(models.Model):
    """Django ORM model representing a named geofence."""
    name = models.CharField(max_length=255)

    class Meta:
        db_table = 'geofences'
        app_label = 'journal'

    def __str__(self):
        return self.name


class Drive(models.Model):
    """Django ORM model representing a recorded drive."""
    car = models.ForeignKey(Car, db_column='car_id', on_delete=models.CASCADE, related_name='drives')
    start_date = models.DateTimeField()
    end_date = models.DateTimeField(null=True, blank=True)
    duration_min = models.IntegerField(null=True, blank=True)
    distance = models.FloatField(null=True, blank=True)
    start_km = models.FloatField(null=True, blank=True)
    end_km = models.FloatField(null=True, blank=True)
    start_address = models.ForeignKey(Address, db_column='start_address_id', null=True, blank=True,
                                      on_delete=models.SET_NULL, related_name='+')
    end_address = models.ForeignKey(Address, db_column='end_address_id', null=True, blank=True,
                                    on_delete=models.SET_NULL, related_name='+')
    start_geofence = models.ForeignKey(Geofence, db_column='start_geofence_id', null=True, blank=True,
                                       on_delete=models.SET_NULL, related_name='+')
    end_geofence = models.ForeignKey(Geofence, db_column='end_geofence_id', null=True, blank=True,
                                     on_delete=models.SET_NULL, related_name='+')

    class Meta:
        db_table = 'drives'
        app_label = 'journal'

    def __str__(self):
        return f"Drive {self.pk} ({self.start_date})"


class Position(models.Model):
    """Django ORM model representing one recorded GPS position."""
    car = models.ForeignKey(Car, db_column='car_id', on_delete=models.CASCADE, related_name='positions')
    date = models.DateTimeField()
    latitude = models.FloatField()
    longitude = models.FloatField()

    class Meta:
        db_table = 'positions'
        app_label = 'journal'


# Tables owned by the journal

class DriveClassification(models.Model):
    """Business/private tag of one drive; no row means unclassified."""
    drive = models.OneToOneField(Drive, primary_key=True, db_column='drive_id', db_constraint=False,
                                 on_delete=models.DO_NOTHING, related_name='journal_classification')
    classification = models.IntegerField(choices=CLASSIFICATION_CHOICES)

    class Meta:
        db_table = 'tj_classifications'
        app_label = 'journal'

    def __str__(self):
        return f"{self.drive_id}: {self.get_classification_display()}"


class DriveComment(models.Model):
    """Free-text comment of one drive."""
    drive = models.OneToOneField(Drive, primary_key=True, db_column='drive_id', db_constraint=False,
                                 on_delete=models.DO_NOTHING, related_name='journal_comment')
    comment = models.TextField(null=True, blank=True)

    class Meta:
        db_table = 'tj_comments'
        app_label = 'journal'


class GroupedDrive(models.Model):
    """Aggregate record folding several drives into one displayed entry."""
    car = models.ForeignKey(Car, db_column='car_id', db_constraint=False,
                            on_delete=models.DO_NOTHING, related_name='grouped_drives')
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    start_address = models.TextField()
    end_address = models.TextField()
    distance = models.FloatField()
    duration_min = models.IntegerField()
    classification = models.IntegerField(choices=CLASSIFICATION_CHOICES, null=True, blank=True)
    comment = models.TextField(null=True, blank=True)

    class Meta:
        db_table = 'tj_grouped_drives'
        app_label = 'journal'

    def __str__(self):
        return f"GroupedDrive {self.pk} ({self.start_date} - {self.end_date})"


class GroupedDriveMember(models.Model):
    """Membership of one drive in a grouped drive; a drive has at most one."""
    group = models.ForeignKey(GroupedDrive, on_delete=models.CASCADE, related_name='members')
    drive = models.OneToOneField(Drive, db_column='drive_id', db_constraint=False,
                                 on_delete=models.DO_NOTHING, related_name='journal_group_membership')

    class Meta:
        db_table = 'tj_grouped_drive_members'
        app_label = 'journal'

    def __str__(self):
        return f"{self.drive_id} -> {self.group_id}"
