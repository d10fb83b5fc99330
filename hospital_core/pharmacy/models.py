# hospital_core/pharmacy/models.py
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q

from hospital_core.common.models import UUIDModel


class Medicine(UUIDModel):
    """
    Stock-keeping unit in the pharmacy.

    `stock` is only changed under a row lock, by dispensation or by an
    administrative adjustment, and can never go below zero (checked in the
    services and by the database).
    """
    name = models.CharField(max_length=255)
    generic_name = models.CharField(max_length=255, blank=True)
    category = models.CharField(max_length=128, blank=True)
    manufacturer = models.CharField(max_length=255, blank=True)
    dosage_form = models.CharField(max_length=64, blank=True)  # tablet, syrup, ...
    strength = models.CharField(max_length=64, blank=True)  # 500mg, ...

    stock = models.PositiveIntegerField(default=0)
    min_stock = models.PositiveIntegerField(default=10)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    expiry_date = models.DateField(null=True, blank=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "pharmacy_medicine"
        constraints = [
            models.CheckConstraint(condition=Q(stock__gte=0), name="ck_medicine_stock_non_negative"),
        ]
        indexes = [
            models.Index(fields=["name"], name="medicine_name_idx"),
            models.Index(fields=["category"], name="medicine_category_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} {self.strength}".strip()

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.min_stock


class PrescriptionStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class Prescription(UUIDModel):
    prescription_number = models.CharField(max_length=32, unique=True)

    patient = models.ForeignKey("patients.Patient", on_delete=models.PROTECT, related_name="prescriptions")
    doctor = models.ForeignKey("doctors.Doctor", on_delete=models.PROTECT, related_name="prescriptions")
    appointment = models.ForeignKey(
        "appointments.Appointment",
        on_delete=models.PROTECT,
        related_name="prescriptions",
    )

    diagnosis = models.TextField()
    advice = models.TextField(blank=True)
    lab_tests = models.JSONField(default=list, blank=True)
    follow_up_date = models.DateField(null=True, blank=True)

    status = models.CharField(
        max_length=16,
        choices=PrescriptionStatus.choices,
        default=PrescriptionStatus.ACTIVE,
    )
    dispensed_at = models.DateTimeField(null=True, blank=True)
    dispensed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="dispensed_prescriptions",
        null=True,
        blank=True,
    )
    cancel_reason = models.TextField(blank=True)

    class Meta:
        db_table = "pharmacy_prescription"
        indexes = [
            models.Index(fields=["patient", "created_at"], name="rx_patient_created_idx"),
            models.Index(fields=["status"], name="rx_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.prescription_number} ({self.status})"


class PrescriptionItem(models.Model):
    prescription = models.ForeignKey(Prescription, on_delete=models.CASCADE, related_name="items")
    medicine = models.ForeignKey(Medicine, on_delete=models.PROTECT, related_name="prescription_items")

    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    dosage = models.CharField(max_length=64, blank=True)
    frequency = models.CharField(max_length=64, blank=True)
    duration = models.CharField(max_length=64, blank=True)
    instructions = models.TextField(blank=True)

    class Meta:
        db_table = "pharmacy_prescription_item"
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(condition=Q(quantity__gte=1), name="ck_rx_item_quantity_positive"),
        ]

    def __str__(self) -> str:
        return f"{self.medicine_id} x{self.quantity}"
