import uuid

import django.db.models.deletion
import hospital_core.doctors.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Doctor",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("full_name", models.CharField(max_length=255)),
                ("specialization", models.CharField(max_length=128)),
                ("licence_number", models.CharField(max_length=64, unique=True)),
                ("department", models.CharField(blank=True, max_length=128)),
                ("qualifications", models.JSONField(blank=True, default=list)),
                ("experience_years", models.PositiveSmallIntegerField(default=0)),
                ("consultation_fee", models.DecimalField(decimal_places=2, default=500, max_digits=10)),
                ("availability", models.JSONField(blank=True, default=hospital_core.doctors.models._empty_week)),
                ("is_available", models.BooleanField(default=True)),
                (
                    "user",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="doctor_profile",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "doctors_doctor",
                "indexes": [
                    models.Index(fields=["specialization"], name="doctor_specialization_idx"),
                ],
            },
        ),
    ]
