# hospital_core/billing/admin.py
from django.contrib import admin

from hospital_core.billing.models import Invoice, Payment


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    readonly_fields = ("amount", "method", "reference", "received_at", "recorded_by_user_id")
    can_delete = False


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ("invoice_number", "patient", "status", "total_amount", "amount_paid", "balance_due", "created_at")
    list_filter = ("status", "payment_method")
    search_fields = ("invoice_number", "patient__full_name")
    readonly_fields = ("invoice_number", "amount_paid", "balance_due", "status", "paid_at", "cancelled_at")
    inlines = [PaymentInline]
