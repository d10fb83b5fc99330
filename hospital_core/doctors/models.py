# hospital_core/doctors/models.py
from django.conf import settings
from django.db import models

from hospital_core.common.models import UUIDModel


def _empty_week():
    return {day: [] for day in ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")}


class Department(UUIDModel):
    """
    Clinical department. Never hard-deleted: deactivation is refused while
    doctors are still assigned.
    """
    name = models.CharField(max_length=128, unique=True)
    description = models.TextField(blank=True)
    head = models.ForeignKey(
        "doctors.Doctor",
        on_delete=models.SET_NULL,
        related_name="headed_departments",
        null=True,
        blank=True,
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "doctors_department"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Doctor(UUIDModel):
    """
    Bookable practitioner. The row doubles as the booking lock: the slot
    allocator takes SELECT ... FOR UPDATE on it, so bookings for one doctor
    are serialized.
    """
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="doctor_profile",
        null=True,
        blank=True,
    )

    full_name = models.CharField(max_length=255)
    specialization = models.CharField(max_length=128)
    licence_number = models.CharField(max_length=64, unique=True)
    department = models.ForeignKey(
        Department,
        on_delete=models.PROTECT,
        related_name="doctors",
        null=True,
        blank=True,
    )
    qualifications = models.JSONField(default=list, blank=True)
    experience_years = models.PositiveSmallIntegerField(default=0)
    consultation_fee = models.DecimalField(max_digits=10, decimal_places=2, default=500)

    # weekday -> list of "HH:MM-HH:MM" ranges, informational only
    availability = models.JSONField(default=_empty_week, blank=True)
    is_available = models.BooleanField(default=True)

    class Meta:
        db_table = "doctors_doctor"
        indexes = [
            models.Index(fields=["specialization"], name="doctor_specialization_idx"),
        ]

    def __str__(self) -> str:
        return f"Dr. {self.full_name} ({self.specialization})"
