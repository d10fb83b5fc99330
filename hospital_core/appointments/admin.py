# hospital_core/appointments/admin.py
from django.contrib import admin

from hospital_core.appointments.models import Appointment


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = (
        "appointment_number",
        "queue_token",
        "patient",
        "doctor",
        "appointment_date",
        "appointment_time",
        "status",
    )
    list_filter = ("status", "type", "appointment_date")
    search_fields = ("appointment_number", "patient__full_name", "doctor__full_name")
    readonly_fields = ("appointment_number", "queue_token", "created_at", "updated_at")
    ordering = ("-appointment_date", "appointment_time")
