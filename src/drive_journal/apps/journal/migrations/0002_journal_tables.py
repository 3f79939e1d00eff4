from django.db import migrations, models
import django.db.models.deletion


CLASSIFICATION_CHOICES = [(1, "business"), (2, "private")]


class Migration(migrations.Migration):

    dependencies = [
        ("journal", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="DriveClassification",
            fields=[
                (
                    "drive",
                    models.OneToOneField(
                        db_column="drive_id",
                        db_constraint=False,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        primary_key=True,
                        related_name="journal_classification",
                        serialize=False,
                        to="journal.drive",
                    ),
                ),
                ("classification", models.IntegerField(choices=CLASSIFICATION_CHOICES)),
            ],
            options={
                "db_table": "tj_classifications",
            },
        ),
        migrations.CreateModel(
            name="DriveComment",
            fields=[
                (
                    "drive",
                    models.OneToOneField(
                        db_column="drive_id",
                        db_constraint=False,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        primary_key=True,
                        related_name="journal_comment",
                        serialize=False,
                        to="journal.drive",
                    ),
                ),
                ("comment", models.TextField(blank=True, null=True)),
            ],
            options={
                "db_table": "tj_comments",
            },
        ),
        migrations.CreateModel(
            name="GroupedDrive",
            fields=[
                (
                    "id",
                    models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID"),
                ),
                ("start_date", models.DateTimeField()),
                ("end_date", models.DateTimeField()),
                ("start_address", models.TextField()),
                ("end_address", models.TextField()),
                ("distance", models.FloatField()),
                ("duration_min", models.IntegerField()),
                ("classification", models.IntegerField(blank=True, choices=CLASSIFICATION_CHOICES, null=True)),
                ("comment", models.TextField(blank=True, null=True)),
                (
                    "car",
                    models.ForeignKey(
                        db_column="car_id",
                        db_constraint=False,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="grouped_drives",
                        to="journal.car",
                    ),
                ),
            ],
            options={
                "db_table": "tj_grouped_drives",
            },
        ),
        migrations.CreateModel(
            name="GroupedDriveMember",
            fields=[
                (
                    "id",
                    models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID"),
                ),
                (
                    "group",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="members",
                        to="journal.groupeddrive",
                    ),
                ),
                (
                    "drive",
                    models.OneToOneField(
                        db_column="drive_id",
                        db_constraint=False,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="journal_group_membership",
                        to="journal.drive",
                    ),
                ),
            ],
            options={
                "db_table": "tj_grouped_drive_members",
            },
        ),
    ]
