# hospital_core/patients/models.py
from django.conf import settings
from django.db import models

from hospital_core.common.models import UUIDModel


class BloodGroup(models.TextChoices):
    A_POS = "A+", "A+"
    A_NEG = "A-", "A-"
    B_POS = "B+", "B+"
    B_NEG = "B-", "B-"
    AB_POS = "AB+", "AB+"
    AB_NEG = "AB-", "AB-"
    O_POS = "O+", "O+"
    O_NEG = "O-", "O-"


class Patient(UUIDModel):
    """
    Registered patient. `medical_record_number` (PT-<YEAR>-NNNN) is handed out
    by the sequence allocator when the record is created and never changes.
    """
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="patient_profile",
        null=True,
        blank=True,
    )

    full_name = models.CharField(max_length=255)
    phone = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=32, blank=True)

    medical_record_number = models.CharField(max_length=32, unique=True)
    blood_group = models.CharField(max_length=3, choices=BloodGroup.choices, blank=True)
    allergies = models.JSONField(default=list, blank=True)
    chronic_conditions = models.JSONField(default=list, blank=True)
    emergency_contact = models.JSONField(default=dict, blank=True)
    medical_history = models.TextField(blank=True)

    class Meta:
        db_table = "patients_patient"
        indexes = [
            models.Index(fields=["full_name"], name="patient_full_name_idx"),
            models.Index(fields=["phone"], name="patient_phone_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.full_name} ({self.medical_record_number})"
