# hospital_core/appointments/models.py
from django.db import models
from django.db.models import Q

from hospital_core.appointments.constants import (
    SLOT_RELEASING_STATUSES,
    AppointmentStatus,
    AppointmentType,
)
from hospital_core.common.models import UUIDModel


class Appointment(UUIDModel):
    patient = models.ForeignKey("patients.Patient", on_delete=models.PROTECT, related_name="appointments")
    doctor = models.ForeignKey("doctors.Doctor", on_delete=models.PROTECT, related_name="appointments")

    appointment_date = models.DateField()
    appointment_time = models.TimeField()

    status = models.CharField(
        max_length=16,
        choices=AppointmentStatus.choices,
        default=AppointmentStatus.SCHEDULED,
    )
    type = models.CharField(
        max_length=32,
        choices=AppointmentType.choices,
        default=AppointmentType.CONSULTATION,
    )

    reason = models.TextField(blank=True)
    symptoms = models.JSONField(default=list, blank=True)

    # Display identifiers, set once at booking.
    appointment_number = models.CharField(max_length=32, unique=True)
    queue_token = models.CharField(max_length=16, blank=True)

    diagnosis = models.TextField(blank=True)
    notes = models.TextField(blank=True)

    check_in_time = models.DateTimeField(null=True, blank=True)
    check_out_time = models.DateTimeField(null=True, blank=True)
    cancel_reason = models.TextField(blank=True)

    class Meta:
        db_table = "appointments_appointment"
        constraints = [
            # Backstop for the locked check in AppointmentService.book.
            models.UniqueConstraint(
                fields=["doctor", "appointment_date", "appointment_time"],
                condition=~Q(status__in=SLOT_RELEASING_STATUSES),
                name="uq_appointment_active_slot",
            ),
        ]
        indexes = [
            models.Index(fields=["doctor", "appointment_date", "status"], name="appt_doctor_day_status_idx"),
            models.Index(fields=["patient", "appointment_date"], name="appt_patient_day_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.appointment_number} {self.appointment_date} {self.appointment_time:%H:%M} ({self.status})"
