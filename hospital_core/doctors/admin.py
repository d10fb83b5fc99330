# hospital_core/doctors/admin.py
from django.contrib import admin

from hospital_core.doctors.models import Department, Doctor


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ("full_name", "specialization", "department", "licence_number", "is_available")
    list_filter = ("specialization", "department", "is_available")
    search_fields = ("full_name", "licence_number", "specialization")
    readonly_fields = ("created_at", "updated_at")


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ("name", "head", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name",)
    readonly_fields = ("created_at", "updated_at")
