# hospital_core/billing/api/serializers.py
from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from hospital_core.billing.models import Invoice, InvoiceStatus, Payment, PaymentMethod

_money = dict(max_digits=12, decimal_places=2, min_value=Decimal("0.00"), required=False, default=Decimal("0.00"))


class InvoiceCreateSerializer(serializers.Serializer):
    patient = serializers.UUIDField()
    appointment = serializers.UUIDField(required=False, allow_null=True, default=None)
    items = serializers.ListField(child=serializers.DictField(), required=False, default=list)
    consultation_fee = serializers.DecimalField(**_money)
    medicine_charges = serializers.DecimalField(**_money)
    lab_charges = serializers.DecimalField(**_money)
    room_charges = serializers.DecimalField(**_money)
    other_charges = serializers.DecimalField(**_money)
    discount = serializers.DecimalField(**_money)
    tax_rate = serializers.DecimalField(max_digits=5, decimal_places=4, min_value=Decimal("0"), required=False, default=Decimal("0"))
    due_date = serializers.DateField(required=False, allow_null=True, default=None)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class PaymentCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    method = serializers.ChoiceField(choices=PaymentMethod.choices)
    reference = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")


class InvoiceCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class InvoiceListQuerySerializer(serializers.Serializer):
    patient = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=InvoiceStatus.choices, required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = ["id", "invoice", "amount", "method", "reference", "received_at", "recorded_by_user_id"]
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    payments = PaymentSerializer(many=True, read_only=True)

    class Meta:
        model = Invoice
        fields = [
            "id",
            "invoice_number",
            "patient",
            "appointment",
            "items",
            "consultation_fee",
            "medicine_charges",
            "lab_charges",
            "room_charges",
            "other_charges",
            "subtotal",
            "tax_amount",
            "discount",
            "total_amount",
            "amount_paid",
            "balance_due",
            "status",
            "payment_method",
            "due_date",
            "paid_at",
            "cancelled_at",
            "notes",
            "payments",
            "created_at",
        ]
        read_only_fields = fields
