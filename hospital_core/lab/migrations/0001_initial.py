import uuid
from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("patients", "0001_initial"),
        ("doctors", "0001_initial"),
        ("appointments", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="LabTest",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("test_number", models.CharField(max_length=32, unique=True)),
                ("test_name", models.CharField(max_length=255)),
                (
                    "test_type",
                    models.CharField(
                        choices=[
                            ("blood", "Blood"),
                            ("urine", "Urine"),
                            ("imaging", "Imaging"),
                            ("biopsy", "Biopsy"),
                            ("culture", "Culture"),
                            ("other", "Other"),
                        ],
                        max_length=16,
                    ),
                ),
                (
                    "priority",
                    models.CharField(
                        choices=[("routine", "Routine"), ("urgent", "Urgent"), ("stat", "STAT")],
                        default="routine",
                        max_length=16,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("ordered", "Ordered"),
                            ("sample-collected", "Sample collected"),
                            ("in-progress", "In progress"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        db_index=True,
                        default="ordered",
                        max_length=24,
                    ),
                ),
                ("instructions", models.TextField(blank=True)),
                ("results", models.JSONField(blank=True, default=dict)),
                ("normal_range", models.TextField(blank=True)),
                ("findings", models.TextField(blank=True)),
                ("interpretation", models.TextField(blank=True)),
                ("performed_by", models.CharField(blank=True, max_length=255)),
                ("sample_collected_at", models.DateTimeField(blank=True, null=True)),
                ("reported_at", models.DateTimeField(blank=True, null=True)),
                ("cost", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                (
                    "appointment",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="lab_tests",
                        to="appointments.appointment",
                    ),
                ),
                (
                    "doctor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="lab_tests",
                        to="doctors.doctor",
                    ),
                ),
                (
                    "patient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="lab_tests",
                        to="patients.patient",
                    ),
                ),
            ],
            options={
                "db_table": "lab_test",
                "indexes": [
                    models.Index(fields=["patient", "created_at"], name="labtest_patient_created_idx"),
                ],
            },
        ),
    ]
