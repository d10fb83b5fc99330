# hospital_core/patients/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from hospital_core.patients.models import BloodGroup, Patient


class PatientCreateSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=255)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    gender = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    date_of_birth = serializers.DateField(required=False, allow_null=True)
    blood_group = serializers.ChoiceField(choices=BloodGroup.choices, required=False, allow_blank=True, default="")
    allergies = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    chronic_conditions = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    emergency_contact = serializers.DictField(required=False, default=dict)
    medical_history = serializers.CharField(required=False, allow_blank=True, default="")


class PatientUpdateSerializer(serializers.Serializer):
    """
    Partial update contract (PATCH). The medical record number is not editable.
    """
    full_name = serializers.CharField(max_length=255, required=False)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    gender = serializers.CharField(max_length=32, required=False, allow_blank=True)
    date_of_birth = serializers.DateField(required=False, allow_null=True)
    blood_group = serializers.ChoiceField(choices=BloodGroup.choices, required=False, allow_blank=True)
    allergies = serializers.ListField(child=serializers.CharField(), required=False)
    chronic_conditions = serializers.ListField(child=serializers.CharField(), required=False)
    emergency_contact = serializers.DictField(required=False)
    medical_history = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class PatientSerializer(serializers.ModelSerializer):
    class Meta:
        model = Patient
        fields = [
            "id",
            "medical_record_number",
            "full_name",
            "phone",
            "email",
            "gender",
            "date_of_birth",
            "blood_group",
            "allergies",
            "chronic_conditions",
            "emergency_contact",
            "medical_history",
            "user",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
