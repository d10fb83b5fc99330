# hospital_core/patients/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.response import Response

from hospital_core.common.api.pagination import paginate
from hospital_core.common.permissions import PatientPermission
from hospital_core.patients.api.serializers import (
    PatientCreateSerializer,
    PatientSerializer,
    PatientUpdateSerializer,
)
from hospital_core.patients.models import Patient
from hospital_core.patients.selectors import get_patient, search_patients
from hospital_core.patients.services import PatientService


@extend_schema(tags=["Patients"])
class PatientViewSet(viewsets.ViewSet):
    permission_classes = [PatientPermission]

    serializer_class = PatientSerializer
    queryset = Patient.objects.none()
    lookup_value_regex = r"[0-9a-fA-F-]{32,36}"

    def list(self, request):
        qs = search_patients(q=request.query_params.get("q"))
        return paginate(request, qs, PatientSerializer)

    def retrieve(self, request, pk=None):
        patient = get_patient(patient_id=pk)
        return Response(PatientSerializer(patient).data, status=status.HTTP_200_OK)

    @extend_schema(request=PatientCreateSerializer, responses={201: PatientSerializer})
    def create(self, request):
        ser = PatientCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        patient = PatientService.create_patient(
            actor_user_id=getattr(request.user, "id", None),
            **ser.validated_data,
        )
        return Response(PatientSerializer(patient).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=PatientUpdateSerializer, responses={200: PatientSerializer})
    def partial_update(self, request, pk=None):
        get_patient(patient_id=pk)

        ser = PatientUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        patient = PatientService.update_patient(
            actor_user_id=getattr(request.user, "id", None),
            patient_id=UUID(str(pk)),
            data=ser.validated_data,
        )
        return Response(PatientSerializer(patient).data, status=status.HTTP_200_OK)
