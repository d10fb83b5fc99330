import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("patients", "0001_initial"),
        ("doctors", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Appointment",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("appointment_date", models.DateField()),
                ("appointment_time", models.TimeField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("scheduled", "Scheduled"),
                            ("confirmed", "Confirmed"),
                            ("in-progress", "In progress"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                            ("no-show", "No show"),
                        ],
                        default="scheduled",
                        max_length=16,
                    ),
                ),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("consultation", "Consultation"),
                            ("follow-up", "Follow-up"),
                            ("emergency", "Emergency"),
                            ("routine-checkup", "Routine checkup"),
                        ],
                        default="consultation",
                        max_length=32,
                    ),
                ),
                ("reason", models.TextField(blank=True)),
                ("symptoms", models.JSONField(blank=True, default=list)),
                ("appointment_number", models.CharField(max_length=32, unique=True)),
                ("queue_token", models.CharField(blank=True, max_length=16)),
                ("diagnosis", models.TextField(blank=True)),
                ("notes", models.TextField(blank=True)),
                ("check_in_time", models.DateTimeField(blank=True, null=True)),
                ("check_out_time", models.DateTimeField(blank=True, null=True)),
                ("cancel_reason", models.TextField(blank=True)),
                (
                    "doctor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="appointments",
                        to="doctors.doctor",
                    ),
                ),
                (
                    "patient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="appointments",
                        to="patients.patient",
                    ),
                ),
            ],
            options={
                "db_table": "appointments_appointment",
                "indexes": [
                    models.Index(fields=["doctor", "appointment_date", "status"], name="appt_doctor_day_status_idx"),
                    models.Index(fields=["patient", "appointment_date"], name="appt_patient_day_idx"),
                ],
            },
        ),
        migrations.AddConstraint(
            model_name="appointment",
            constraint=models.UniqueConstraint(
                condition=models.Q(("status__in", ["cancelled", "no-show"]), _negated=True),
                fields=("doctor", "appointment_date", "appointment_time"),
                name="uq_appointment_active_slot",
            ),
        ),
    ]
