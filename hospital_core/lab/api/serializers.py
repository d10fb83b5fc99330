# hospital_core/lab/api/serializers.py
from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from hospital_core.lab.models import LabPriority, LabTest, LabTestStatus, LabTestType


class LabTestOrderSerializer(serializers.Serializer):
    patient = serializers.UUIDField()
    doctor = serializers.UUIDField()
    appointment = serializers.UUIDField(required=False, allow_null=True, default=None)
    test_name = serializers.CharField(max_length=255)
    test_type = serializers.ChoiceField(choices=LabTestType.choices)
    priority = serializers.ChoiceField(choices=LabPriority.choices, required=False, default=LabPriority.ROUTINE)
    instructions = serializers.CharField(required=False, allow_blank=True, default="")
    cost = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0"), required=False, default=Decimal("0.00"))


class LabSampleSerializer(serializers.Serializer):
    performed_by = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class LabResultsSerializer(serializers.Serializer):
    results = serializers.DictField()
    findings = serializers.CharField(required=False, allow_blank=True, default="")
    interpretation = serializers.CharField(required=False, allow_blank=True, default="")
    normal_range = serializers.CharField(required=False, allow_blank=True, default="")
    performed_by = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class LabTestListQuerySerializer(serializers.Serializer):
    patient = serializers.UUIDField(required=False)
    doctor = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=LabTestStatus.choices, required=False)
    test_type = serializers.ChoiceField(choices=LabTestType.choices, required=False)
    priority = serializers.ChoiceField(choices=LabPriority.choices, required=False)


class LabTestSerializer(serializers.ModelSerializer):
    patient_name = serializers.CharField(source="patient.full_name", read_only=True)

    class Meta:
        model = LabTest
        fields = [
            "id",
            "test_number",
            "patient",
            "patient_name",
            "doctor",
            "appointment",
            "test_name",
            "test_type",
            "priority",
            "status",
            "instructions",
            "results",
            "normal_range",
            "findings",
            "interpretation",
            "performed_by",
            "sample_collected_at",
            "reported_at",
            "cost",
            "created_at",
        ]
        read_only_fields = fields
