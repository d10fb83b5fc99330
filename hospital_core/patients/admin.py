# hospital_core/patients/admin.py
from django.contrib import admin

from hospital_core.patients.models import Patient


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = (
        "full_name",
        "medical_record_number",
        "phone",
        "email",
        "blood_group",
        "created_at",
    )
    list_filter = ("blood_group", "gender")
    search_fields = ("full_name", "medical_record_number", "phone", "email")
    readonly_fields = ("medical_record_number", "created_at", "updated_at")
    ordering = ("-created_at",)
