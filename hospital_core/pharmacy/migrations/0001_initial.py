import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("patients", "0001_initial"),
        ("doctors", "0001_initial"),
        ("appointments", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Medicine",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("generic_name", models.CharField(blank=True, max_length=255)),
                ("category", models.CharField(blank=True, max_length=128)),
                ("manufacturer", models.CharField(blank=True, max_length=255)),
                ("dosage_form", models.CharField(blank=True, max_length=64)),
                ("strength", models.CharField(blank=True, max_length=64)),
                ("stock", models.PositiveIntegerField(default=0)),
                ("min_stock", models.PositiveIntegerField(default=10)),
                ("price", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("expiry_date", models.DateField(blank=True, null=True)),
                ("description", models.TextField(blank=True)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "db_table": "pharmacy_medicine",
                "indexes": [
                    models.Index(fields=["name"], name="medicine_name_idx"),
                    models.Index(fields=["category"], name="medicine_category_idx"),
                ],
            },
        ),
        migrations.AddConstraint(
            model_name="medicine",
            constraint=models.CheckConstraint(condition=models.Q(("stock__gte", 0)), name="ck_medicine_stock_non_negative"),
        ),
        migrations.CreateModel(
            name="Prescription",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("prescription_number", models.CharField(max_length=32, unique=True)),
                ("diagnosis", models.TextField()),
                ("advice", models.TextField(blank=True)),
                ("lab_tests", models.JSONField(blank=True, default=list)),
                ("follow_up_date", models.DateField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("completed", "Completed"), ("cancelled", "Cancelled")],
                        default="active",
                        max_length=16,
                    ),
                ),
                ("dispensed_at", models.DateTimeField(blank=True, null=True)),
                ("cancel_reason", models.TextField(blank=True)),
                (
                    "appointment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="prescriptions",
                        to="appointments.appointment",
                    ),
                ),
                (
                    "dispensed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="dispensed_prescriptions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "doctor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="prescriptions",
                        to="doctors.doctor",
                    ),
                ),
                (
                    "patient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="prescriptions",
                        to="patients.patient",
                    ),
                ),
            ],
            options={
                "db_table": "pharmacy_prescription",
                "indexes": [
                    models.Index(fields=["patient", "created_at"], name="rx_patient_created_idx"),
                    models.Index(fields=["status"], name="rx_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PrescriptionItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ("dosage", models.CharField(blank=True, max_length=64)),
                ("frequency", models.CharField(blank=True, max_length=64)),
                ("duration", models.CharField(blank=True, max_length=64)),
                ("instructions", models.TextField(blank=True)),
                (
                    "medicine",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="prescription_items",
                        to="pharmacy.medicine",
                    ),
                ),
                (
                    "prescription",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="pharmacy.prescription",
                    ),
                ),
            ],
            options={
                "db_table": "pharmacy_prescription_item",
                "ordering": ["id"],
            },
        ),
        migrations.AddConstraint(
            model_name="prescriptionitem",
            constraint=models.CheckConstraint(condition=models.Q(("quantity__gte", 1)), name="ck_rx_item_quantity_positive"),
        ),
    ]
