# hospital_core/appointments/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from hospital_core.appointments.constants import AppointmentStatus, AppointmentType
from hospital_core.appointments.models import Appointment


class AppointmentCreateSerializer(serializers.Serializer):
    patient = serializers.UUIDField()
    doctor = serializers.UUIDField()
    appointment_date = serializers.DateField()
    appointment_time = serializers.TimeField()
    type = serializers.ChoiceField(choices=AppointmentType.choices, required=False, default=AppointmentType.CONSULTATION)
    reason = serializers.CharField(required=False, allow_blank=True, default="")
    symptoms = serializers.ListField(child=serializers.CharField(), required=False, default=list)


class AppointmentCompleteSerializer(serializers.Serializer):
    diagnosis = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class AppointmentCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class AppointmentListQuerySerializer(serializers.Serializer):
    doctor = serializers.UUIDField(required=False)
    patient = serializers.UUIDField(required=False)
    date = serializers.DateField(required=False)
    status = serializers.ChoiceField(choices=AppointmentStatus.choices, required=False)


class AppointmentSerializer(serializers.ModelSerializer):
    patient_name = serializers.CharField(source="patient.full_name", read_only=True)
    doctor_name = serializers.CharField(source="doctor.full_name", read_only=True)

    class Meta:
        model = Appointment
        fields = [
            "id",
            "appointment_number",
            "queue_token",
            "patient",
            "patient_name",
            "doctor",
            "doctor_name",
            "appointment_date",
            "appointment_time",
            "status",
            "type",
            "reason",
            "symptoms",
            "diagnosis",
            "notes",
            "check_in_time",
            "check_out_time",
            "cancel_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
