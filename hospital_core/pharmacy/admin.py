# hospital_core/pharmacy/admin.py
from django.contrib import admin

from hospital_core.pharmacy.models import Medicine, Prescription, PrescriptionItem


@admin.register(Medicine)
class MedicineAdmin(admin.ModelAdmin):
    list_display = ("name", "strength", "category", "stock", "min_stock", "price", "expiry_date", "is_active")
    list_filter = ("category", "dosage_form", "is_active")
    search_fields = ("name", "generic_name", "manufacturer")
    # stock moves only through the pharmacy services
    readonly_fields = ("stock", "created_at", "updated_at")


class PrescriptionItemInline(admin.TabularInline):
    model = PrescriptionItem
    extra = 0
    readonly_fields = ("medicine", "quantity", "dosage", "frequency", "duration", "instructions")
    can_delete = False


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ("prescription_number", "patient", "doctor", "status", "dispensed_at", "created_at")
    list_filter = ("status",)
    search_fields = ("prescription_number", "patient__full_name", "doctor__full_name")
    readonly_fields = ("prescription_number", "status", "dispensed_at", "dispensed_by", "created_at", "updated_at")
    inlines = [PrescriptionItemInline]
