# hospital_core/lab/models.py
from decimal import Decimal

from django.db import models

from hospital_core.common.models import UUIDModel


class LabTestType(models.TextChoices):
    BLOOD = "blood", "Blood"
    URINE = "urine", "Urine"
    IMAGING = "imaging", "Imaging"
    BIOPSY = "biopsy", "Biopsy"
    CULTURE = "culture", "Culture"
    OTHER = "other", "Other"


class LabPriority(models.TextChoices):
    ROUTINE = "routine", "Routine"
    URGENT = "urgent", "Urgent"
    STAT = "stat", "STAT"


class LabTestStatus(models.TextChoices):
    ORDERED = "ordered", "Ordered"
    SAMPLE_COLLECTED = "sample-collected", "Sample collected"
    IN_PROGRESS = "in-progress", "In progress"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class LabTest(UUIDModel):
    test_number = models.CharField(max_length=32, unique=True)

    patient = models.ForeignKey("patients.Patient", on_delete=models.PROTECT, related_name="lab_tests")
    doctor = models.ForeignKey("doctors.Doctor", on_delete=models.PROTECT, related_name="lab_tests")
    appointment = models.ForeignKey(
        "appointments.Appointment",
        on_delete=models.PROTECT,
        related_name="lab_tests",
        null=True,
        blank=True,
    )

    test_name = models.CharField(max_length=255)
    test_type = models.CharField(max_length=16, choices=LabTestType.choices)
    priority = models.CharField(max_length=16, choices=LabPriority.choices, default=LabPriority.ROUTINE)
    status = models.CharField(max_length=24, choices=LabTestStatus.choices, default=LabTestStatus.ORDERED, db_index=True)
    instructions = models.TextField(blank=True)

    results = models.JSONField(default=dict, blank=True)
    normal_range = models.TextField(blank=True)
    findings = models.TextField(blank=True)
    interpretation = models.TextField(blank=True)
    performed_by = models.CharField(max_length=255, blank=True)

    sample_collected_at = models.DateTimeField(null=True, blank=True)
    reported_at = models.DateTimeField(null=True, blank=True)
    cost = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        db_table = "lab_test"
        indexes = [
            models.Index(fields=["patient", "created_at"], name="labtest_patient_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.test_number} {self.test_name} ({self.status})"
