# hospital_core/lab/admin.py
from django.contrib import admin

from hospital_core.lab.models import LabTest


@admin.register(LabTest)
class LabTestAdmin(admin.ModelAdmin):
    list_display = ("test_number", "test_name", "patient", "doctor", "priority", "status", "created_at")
    list_filter = ("status", "priority", "test_type")
    search_fields = ("test_number", "test_name", "patient__full_name")
    readonly_fields = ("test_number", "created_at", "updated_at")
