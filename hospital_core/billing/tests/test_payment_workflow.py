# hospital_core/billing/tests/test_payment_workflow.py
from decimal import Decimal

import pytest
from rest_framework.exceptions import ValidationError

from hospital_core.billing.models import InvoiceStatus
from hospital_core.billing.services import InvoiceService, PaymentService
from hospital_core.common.api.exceptions import ConflictError


@pytest.fixture
def invoice(patient):
    return InvoiceService.create(
        patient_id=patient.id,
        actor_user_id=None,
        consultation_fee=Decimal("500.00"),
        items=[{"description": "Consultation", "amount": "500.00"}],
    )


@pytest.mark.django_db
def test_invoice_totals(patient):
    inv = InvoiceService.create(
        patient_id=patient.id,
        actor_user_id=None,
        consultation_fee=Decimal("400.00"),
        medicine_charges=Decimal("100.00"),
        tax_rate=Decimal("0.18"),
        discount=Decimal("40.00"),
    )
    assert inv.invoice_number.startswith("INV-")
    assert inv.invoice_number.endswith("-0001")
    assert inv.subtotal == Decimal("500.00")
    assert inv.tax_amount == Decimal("90.00")
    assert inv.total_amount == Decimal("550.00")
    assert inv.balance_due == Decimal("550.00")
    assert inv.status == InvoiceStatus.PENDING


@pytest.mark.django_db
def test_discount_larger_than_total_rejected(patient):
    with pytest.raises(ValidationError):
        InvoiceService.create(
            patient_id=patient.id,
            actor_user_id=None,
            consultation_fee=Decimal("100.00"),
            discount=Decimal("150.00"),
        )


@pytest.mark.django_db
def test_payment_partial_then_full_transitions_status(invoice):
    pay1 = PaymentService.record_payment(
        invoice_id=invoice.id,
        amount=Decimal("200.00"),
        method="online",
        reference="UTR-001",
    )
    assert pay1.amount == Decimal("200.00")

    invoice.refresh_from_db()
    assert invoice.status == InvoiceStatus.PARTIAL
    assert invoice.amount_paid == Decimal("200.00")
    assert invoice.balance_due == Decimal("300.00")

    PaymentService.record_payment(invoice_id=invoice.id, amount=Decimal("300.00"), method="cash")

    invoice.refresh_from_db()
    assert invoice.status == InvoiceStatus.PAID
    assert invoice.amount_paid == Decimal("500.00")
    assert invoice.balance_due == Decimal("0.00")
    assert invoice.paid_at is not None
    assert invoice.payments.count() == 2


@pytest.mark.django_db
def test_overpayment_settles_with_zero_balance(invoice):
    PaymentService.record_payment(invoice_id=invoice.id, amount=Decimal("600.00"), method="card")

    invoice.refresh_from_db()
    assert invoice.status == InvoiceStatus.PAID
    assert invoice.balance_due == Decimal("0.00")


@pytest.mark.django_db
@pytest.mark.parametrize("amount", [Decimal("0.00"), Decimal("-5.00")])
def test_payment_negative_or_zero_amount_rejected(invoice, amount):
    with pytest.raises(ValidationError):
        PaymentService.record_payment(invoice_id=invoice.id, amount=amount, method="cash")


@pytest.mark.django_db
def test_paid_invoice_refuses_payments_and_cancel(invoice):
    PaymentService.record_payment(invoice_id=invoice.id, amount=Decimal("500.00"), method="cash")

    with pytest.raises(ConflictError) as exc:
        PaymentService.record_payment(invoice_id=invoice.id, amount=Decimal("1.00"), method="cash")
    assert exc.value.error_code == "invoice_closed"

    with pytest.raises(ConflictError):
        InvoiceService.cancel(invoice_id=invoice.id, actor_user_id=None)


@pytest.mark.django_db
def test_cancelled_invoice_refuses_payments(invoice):
    cancelled = InvoiceService.cancel(invoice_id=invoice.id, actor_user_id=None, reason="Duplicate")
    assert cancelled.status == InvoiceStatus.CANCELLED
    assert "Duplicate" in cancelled.notes

    with pytest.raises(ConflictError):
        PaymentService.record_payment(invoice_id=invoice.id, amount=Decimal("10.00"), method="cash")
