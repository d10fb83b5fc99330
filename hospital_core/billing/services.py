# hospital_core/billing/services.py
from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from hospital_core.appointments.models import Appointment
from hospital_core.audit.models import Severity
from hospital_core.audit.services import AuditService
from hospital_core.billing.models import ZERO, Invoice, InvoiceStatus, Payment, PaymentMethod
from hospital_core.common.api.exceptions import ConflictError
from hospital_core.common.sequences import SequenceAllocator
from hospital_core.common.transactions import TransactionContext, run_in_transaction
from hospital_core.patients.models import Patient

CENT = Decimal("0.01")


def _money(value) -> Decimal:
    return Decimal(str(value or "0")).quantize(CENT)


def _lock_invoice(ctx: TransactionContext, invoice_id) -> Invoice:
    invoice = Invoice.objects.using(ctx.using).select_for_update().filter(id=invoice_id).first()
    if invoice is None:
        raise NotFound("Invoice not found")
    return invoice


def _ensure_open(invoice: Invoice) -> None:
    if invoice.is_closed:
        raise ConflictError(f"Invoice is already {invoice.status}", code="invoice_closed")


class InvoiceService:
    @staticmethod
    def create(
        *,
        patient_id: UUID,
        actor_user_id: int | None,
        appointment_id: UUID | None = None,
        items: list | None = None,
        consultation_fee=ZERO,
        medicine_charges=ZERO,
        lab_charges=ZERO,
        room_charges=ZERO,
        other_charges=ZERO,
        discount=ZERO,
        tax_rate=ZERO,
        due_date=None,
        notes: str = "",
    ) -> Invoice:
        charges = {
            "consultation_fee": _money(consultation_fee),
            "medicine_charges": _money(medicine_charges),
            "lab_charges": _money(lab_charges),
            "room_charges": _money(room_charges),
            "other_charges": _money(other_charges),
        }
        if any(v < ZERO for v in charges.values()):
            raise ValidationError({"charges": "Charges must be >= 0."})

        subtotal = sum(charges.values(), ZERO)
        tax_amount = (subtotal * Decimal(str(tax_rate or 0))).quantize(CENT)
        discount_amount = _money(discount)
        total = subtotal + tax_amount - discount_amount
        if total < ZERO:
            raise ValidationError({"discount": "Discount cannot exceed the invoice total."})

        def _create(ctx: TransactionContext) -> Invoice:
            if not Patient.objects.using(ctx.using).filter(id=patient_id).exists():
                raise NotFound("Patient not found")

            if appointment_id:
                appt = Appointment.objects.using(ctx.using).filter(id=appointment_id).first()
                if appt is None:
                    raise NotFound("Appointment not found")
                if appt.patient_id != patient_id:
                    raise ValidationError({"appointment": "Appointment does not belong to this patient."})

            invoice = Invoice.objects.using(ctx.using).create(
                invoice_number=SequenceAllocator.next_number("invoice", using=ctx.using),
                patient_id=patient_id,
                appointment_id=appointment_id,
                items=list(items or []),
                subtotal=subtotal,
                tax_amount=tax_amount,
                discount=discount_amount,
                total_amount=total,
                amount_paid=ZERO,
                balance_due=total,
                status=InvoiceStatus.PENDING,
                due_date=due_date,
                notes=notes or "",
                **charges,
            )

            AuditService.record(
                action="CREATE_INVOICE",
                resource="billing",
                resource_id=invoice.id,
                actor_user_id=actor_user_id,
                changes={"invoice_number": invoice.invoice_number, "total_amount": str(total)},
                severity=Severity.HIGH,
                using=ctx.using,
            )
            return invoice

        return run_in_transaction(_create)

    @staticmethod
    def cancel(*, invoice_id: UUID, actor_user_id: int | None, reason: str = "") -> Invoice:
        def _cancel(ctx: TransactionContext) -> Invoice:
            invoice = _lock_invoice(ctx, invoice_id)
            _ensure_open(invoice)

            previous = invoice.status
            invoice.status = InvoiceStatus.CANCELLED
            invoice.cancelled_at = timezone.now()
            if reason:
                invoice.notes = (invoice.notes + "\n" if invoice.notes else "") + f"Cancelled: {reason}"
            invoice.save(using=ctx.using, update_fields=["status", "cancelled_at", "notes", "updated_at"])

            AuditService.record(
                action="CANCEL_INVOICE",
                resource="billing",
                resource_id=invoice.id,
                actor_user_id=actor_user_id,
                changes={"status": {"from": previous, "to": InvoiceStatus.CANCELLED}},
                severity=Severity.CRITICAL,
                using=ctx.using,
            )
            return invoice

        return run_in_transaction(_cancel)


class PaymentService:
    @staticmethod
    def record_payment(
        *,
        invoice_id: UUID,
        amount: Decimal,
        method: str = PaymentMethod.CASH,
        reference: str = "",
        recorded_by_user_id: int | None = None,
    ) -> Payment:
        amount = _money(amount)
        if amount <= ZERO:
            raise ValidationError({"amount": "Payment amount must be > 0."})

        def _record(ctx: TransactionContext) -> Payment:
            invoice = _lock_invoice(ctx, invoice_id)
            _ensure_open(invoice)

            pay = Payment.objects.using(ctx.using).create(
                invoice=invoice,
                amount=amount,
                method=method,
                reference=reference or "",
                recorded_by_user_id=recorded_by_user_id,
            )

            invoice.amount_paid = (invoice.amount_paid or ZERO) + pay.amount
            balance = (invoice.total_amount or ZERO) - invoice.amount_paid
            invoice.payment_method = method

            if balance <= ZERO:
                invoice.status = InvoiceStatus.PAID
                invoice.paid_at = timezone.now()
                invoice.balance_due = ZERO
            else:
                invoice.status = InvoiceStatus.PARTIAL
                invoice.balance_due = balance

            invoice.save(
                using=ctx.using,
                update_fields=["status", "amount_paid", "balance_due", "payment_method", "paid_at", "updated_at"],
            )

            AuditService.record(
                action="RECORD_PAYMENT",
                resource="billing",
                resource_id=invoice.id,
                actor_user_id=recorded_by_user_id,
                changes={"amount": str(amount), "balance_due": str(invoice.balance_due), "status": invoice.status},
                severity=Severity.CRITICAL,
                using=ctx.using,
            )
            return pay

        return run_in_transaction(_record)
