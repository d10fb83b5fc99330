# hospital_core/doctors/api/serializers.py
from rest_framework import serializers

from hospital_core.doctors.models import Department, Doctor


class DoctorSerializer(serializers.ModelSerializer):
    department_name = serializers.CharField(source="department.name", read_only=True, default=None)

    class Meta:
        model = Doctor
        fields = [
            "id",
            "full_name",
            "specialization",
            "licence_number",
            "department",
            "department_name",
            "qualifications",
            "experience_years",
            "consultation_fee",
            "availability",
            "is_available",
        ]
        read_only_fields = fields


class DoctorCreateSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=255)
    specialization = serializers.CharField(max_length=128)
    licence_number = serializers.CharField(max_length=64)
    department_id = serializers.UUIDField(required=False, allow_null=True)
    qualifications = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    experience_years = serializers.IntegerField(min_value=0, required=False, default=0)
    consultation_fee = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    availability = serializers.DictField(required=False)
    user_id = serializers.IntegerField(required=False, allow_null=True)


class DoctorUpdateSerializer(serializers.Serializer):
    """
    Partial update contract (PATCH). `is_available` is the booking switch.
    The licence number is not editable.
    """
    full_name = serializers.CharField(max_length=255, required=False)
    specialization = serializers.CharField(max_length=128, required=False)
    department_id = serializers.UUIDField(required=False, allow_null=True)
    qualifications = serializers.ListField(child=serializers.CharField(), required=False)
    experience_years = serializers.IntegerField(min_value=0, required=False)
    consultation_fee = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    availability = serializers.DictField(required=False)
    is_available = serializers.BooleanField(required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class DoctorListQuerySerializer(serializers.Serializer):
    specialization = serializers.CharField(required=False)
    department = serializers.UUIDField(required=False)
    available = serializers.BooleanField(required=False, default=False)


class DayQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)


class DepartmentSerializer(serializers.ModelSerializer):
    head_name = serializers.CharField(source="head.full_name", read_only=True, default=None)
    doctor_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Department
        fields = ["id", "name", "description", "head", "head_name", "is_active", "doctor_count", "created_at"]
        read_only_fields = fields


class DepartmentCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=128)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    head_id = serializers.UUIDField(required=False, allow_null=True)


class DepartmentUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=128, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    head_id = serializers.UUIDField(required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class DepartmentListQuerySerializer(serializers.Serializer):
    is_active = serializers.BooleanField(required=False, allow_null=True, default=None)
