# hospital_core/pharmacy/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from hospital_core.pharmacy.models import Medicine, Prescription, PrescriptionItem, PrescriptionStatus


class MedicineSerializer(serializers.ModelSerializer):
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Medicine
        fields = [
            "id",
            "name",
            "generic_name",
            "category",
            "manufacturer",
            "dosage_form",
            "strength",
            "stock",
            "min_stock",
            "price",
            "expiry_date",
            "description",
            "is_active",
            "is_low_stock",
        ]
        read_only_fields = fields


class MedicineCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    generic_name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    category = serializers.CharField(max_length=128, required=False, allow_blank=True, default="")
    manufacturer = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    dosage_form = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    strength = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    stock = serializers.IntegerField(min_value=0, required=False, default=0)
    min_stock = serializers.IntegerField(min_value=0, required=False, default=10)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, default=0)
    expiry_date = serializers.DateField(required=False, allow_null=True, default=None)
    description = serializers.CharField(required=False, allow_blank=True, default="")


class StockAdjustmentSerializer(serializers.Serializer):
    delta = serializers.IntegerField()
    reason = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_delta(self, value):
        if value == 0:
            raise serializers.ValidationError("delta must be non-zero.")
        return value


class PrescriptionItemInputSerializer(serializers.Serializer):
    medicine = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    dosage = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    frequency = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    duration = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    instructions = serializers.CharField(required=False, allow_blank=True, default="")


class PrescriptionCreateSerializer(serializers.Serializer):
    appointment = serializers.UUIDField()
    patient = serializers.UUIDField()
    # only honoured for administrators; doctors always prescribe as themselves
    doctor = serializers.UUIDField(required=False)
    diagnosis = serializers.CharField()
    items = PrescriptionItemInputSerializer(many=True, allow_empty=False)
    advice = serializers.CharField(required=False, allow_blank=True, default="")
    lab_tests = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    follow_up_date = serializers.DateField(required=False, allow_null=True, default=None)


class PrescriptionCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class PrescriptionListQuerySerializer(serializers.Serializer):
    patient = serializers.UUIDField(required=False)
    doctor = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=PrescriptionStatus.choices, required=False)


class PrescriptionItemSerializer(serializers.ModelSerializer):
    medicine_name = serializers.CharField(source="medicine.name", read_only=True)

    class Meta:
        model = PrescriptionItem
        fields = ["id", "medicine", "medicine_name", "quantity", "dosage", "frequency", "duration", "instructions"]
        read_only_fields = fields


class PrescriptionSerializer(serializers.ModelSerializer):
    items = PrescriptionItemSerializer(many=True, read_only=True)
    dispensed_by_user_id = serializers.IntegerField(source="dispensed_by_id", read_only=True, allow_null=True)

    class Meta:
        model = Prescription
        fields = [
            "id",
            "prescription_number",
            "patient",
            "doctor",
            "appointment",
            "diagnosis",
            "advice",
            "lab_tests",
            "follow_up_date",
            "status",
            "items",
            "dispensed_at",
            "dispensed_by_user_id",
            "cancel_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
