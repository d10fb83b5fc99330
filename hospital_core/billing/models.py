# hospital_core/billing/models.py
from __future__ import annotations

from decimal import Decimal

from django.db import models
from django.utils import timezone

from hospital_core.common.models import UUIDModel

ZERO = Decimal("0.00")


class InvoiceStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PARTIAL = "partial", "Partially paid"
    PAID = "paid", "Paid"
    CANCELLED = "cancelled", "Cancelled"


class PaymentMethod(models.TextChoices):
    CASH = "cash", "Cash"
    CARD = "card", "Card"
    INSURANCE = "insurance", "Insurance"
    ONLINE = "online", "Online"


class Invoice(UUIDModel):
    """
    Patient bill. Totals are snapshotted at creation; payments only move
    amount_paid / balance_due / status. Paid and cancelled invoices are closed.
    """
    invoice_number = models.CharField(max_length=32, unique=True)

    patient = models.ForeignKey("patients.Patient", on_delete=models.PROTECT, related_name="invoices")
    appointment = models.ForeignKey(
        "appointments.Appointment",
        on_delete=models.PROTECT,
        related_name="invoices",
        null=True,
        blank=True,
    )

    # free-form line breakdown [{"description", "amount"}], informational
    items = models.JSONField(default=list, blank=True)

    consultation_fee = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    medicine_charges = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    lab_charges = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    room_charges = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    other_charges = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)

    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    balance_due = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)

    status = models.CharField(max_length=16, choices=InvoiceStatus.choices, default=InvoiceStatus.PENDING, db_index=True)
    payment_method = models.CharField(max_length=16, choices=PaymentMethod.choices, blank=True)

    due_date = models.DateField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        db_table = "billing_invoice"
        indexes = [
            models.Index(fields=["patient", "created_at"], name="invoice_patient_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.invoice_number} ({self.status})"

    @property
    def is_closed(self) -> bool:
        return self.status in (InvoiceStatus.PAID, InvoiceStatus.CANCELLED)


class Payment(UUIDModel):
    invoice = models.ForeignKey(Invoice, on_delete=models.PROTECT, related_name="payments")
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    method = models.CharField(max_length=16, choices=PaymentMethod.choices, default=PaymentMethod.CASH)

    reference = models.CharField(max_length=64, blank=True)  # card/online transaction id
    received_at = models.DateTimeField(default=timezone.now)
    recorded_by_user_id = models.IntegerField(null=True, blank=True)

    class Meta:
        db_table = "billing_payment"
        indexes = [
            models.Index(fields=["invoice", "received_at"], name="payment_invoice_received_idx"),
        ]
