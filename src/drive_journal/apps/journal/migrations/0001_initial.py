# Upstream tracker tables. Against an existing TeslaMate database run
# ``migrate --fake-initial`` so this migration is recorded without creating them.
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Car",
            fields=[
                (
                    "id",
                    models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID"),
                ),
                ("model", models.CharField(blank=True, max_length=255, null=True)),
                ("name", models.CharField(blank=True, max_length=255, null=True)),
            ],
            options={
                "db_table": "cars",
            },
        ),
        migrations.CreateModel(
            name="Address",
            fields=[
                (
                    "id",
                    models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID"),
                ),
                ("name", models.CharField(blank=True, max_length=255, null=True)),
                ("road", models.CharField(blank=True, max_length=255, null=True)),
                ("house_number", models.CharField(blank=True, max_length=255, null=True)),
                ("city", models.CharField(blank=True, max_length=255, null=True)),
            ],
            options={
                "db_table": "addresses",
            },
        ),
        migrations.CreateModel(
            name="Geofence",
            fields=[
                (
                    "id",
                    models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID"),
                ),
                ("name", models.CharField(max_length=255)),
            ],
            options={
                "db_table": "geofences",
            },
        ),
        migrations.CreateModel(
            name="Drive",
            fields=[
                (
                    "id",
                    models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID"),
                ),
                ("start_date", models.DateTimeField()),
                ("end_date", models.DateTimeField(blank=True, null=True)),
                ("duration_min", models.IntegerField(blank=True, null=True)),
                ("distance", models.FloatField(blank=True, null=True)),
                ("start_km", models.FloatField(blank=True, null=True)),
                ("end_km", models.FloatField(blank=True, null=True)),
                (
                    "car",
                    models.ForeignKey(
                        db_column="car_id",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="drives",
                        to="journal.car",
                    ),
                ),
                (
                    "start_address",
                    models.ForeignKey(
                        blank=True,
                        db_column="start_address_id",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="journal.address",
                    ),
                ),
                (
                    "end_address",
                    models.ForeignKey(
                        blank=True,
                        db_column="end_address_id",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="journal.address",
                    ),
                ),
                (
                    "start_geofence",
                    models.ForeignKey(
                        blank=True,
                        db_column="start_geofence_id",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="journal.geofence",
                    ),
                ),
                (
                    "end_geofence",
                    models.ForeignKey(
                        blank=True,
                        db_column="end_geofence_id",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="journal.geofence",
                    ),
                ),
            ],
            options={
                "db_table": "drives",
            },
        ),
        migrations.CreateModel(
            name="Position",
            fields=[
                (
                    "id",
                    models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID"),
                ),
                ("date", models.DateTimeField()),
                ("latitude", models.FloatField()),
                ("longitude", models.FloatField()),
                (
                    "car",
                    models.ForeignKey(
                        db_column="car_id",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="positions",
                        to="journal.car",
                    ),
                ),
            ],
            options={
                "db_table": "positions",
            },
        ),
    ]
