# hospital_core/appointments/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from hospital_core.appointments.api.serializers import (
    AppointmentCancelSerializer,
    AppointmentCompleteSerializer,
    AppointmentCreateSerializer,
    AppointmentListQuerySerializer,
    AppointmentSerializer,
)
from hospital_core.appointments.models import Appointment
from hospital_core.appointments.selectors import get_appointment, list_appointments
from hospital_core.appointments.services import AppointmentService
from hospital_core.common.api.pagination import paginate
from hospital_core.common.permissions import ROLE_PATIENT, AppointmentPermission, user_roles

UUID_LOOKUP = r"[0-9a-fA-F-]{32,36}"


def _ensure_own_booking(request, patient_id) -> None:
    """A principal whose only role is PATIENT can only book for themselves."""
    if user_roles(request.user) != {ROLE_PATIENT}:
        return
    profile = getattr(request.user, "patient_profile", None)
    if profile is None or profile.id != patient_id:
        raise PermissionDenied("Patients can only book their own appointments.")


@extend_schema(tags=["Appointments"])
class AppointmentViewSet(viewsets.ViewSet):
    permission_classes = [AppointmentPermission]
    serializer_class = AppointmentSerializer
    queryset = Appointment.objects.none()
    lookup_value_regex = UUID_LOOKUP

    def list(self, request):
        q = AppointmentListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)

        qs = list_appointments(
            doctor_id=q.validated_data.get("doctor"),
            patient_id=q.validated_data.get("patient"),
            on=q.validated_data.get("date"),
            status=q.validated_data.get("status"),
        )
        return paginate(request, qs, AppointmentSerializer)

    def retrieve(self, request, pk=None):
        appt = get_appointment(appointment_id=pk)
        return Response(AppointmentSerializer(appt).data, status=status.HTTP_200_OK)

    @extend_schema(request=AppointmentCreateSerializer, responses={201: AppointmentSerializer})
    def create(self, request):
        ser = AppointmentCreateSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        _ensure_own_booking(request, data["patient"])

        appt = AppointmentService.book(
            patient_id=data["patient"],
            doctor_id=data["doctor"],
            appointment_date=data["appointment_date"],
            appointment_time=data["appointment_time"],
            type=data["type"],
            reason=data["reason"],
            symptoms=data["symptoms"],
            actor_user_id=getattr(request.user, "id", None),
        )
        return Response(AppointmentSerializer(get_appointment(appointment_id=appt.id)).data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------
    # Workflow endpoints
    # ------------------------------------------------------------
    @extend_schema(request=None, responses={200: AppointmentSerializer})
    @action(detail=True, methods=["post"], url_path="check_in")
    def check_in(self, request, pk=None):
        appt = AppointmentService.check_in(appointment_id=pk, actor_user_id=getattr(request.user, "id", None))
        return Response(AppointmentSerializer(appt).data, status=status.HTTP_200_OK)

    @extend_schema(request=None, responses={200: AppointmentSerializer})
    @action(detail=True, methods=["post"], url_path="start")
    def start(self, request, pk=None):
        appt = AppointmentService.start(appointment_id=pk, actor_user_id=getattr(request.user, "id", None))
        return Response(AppointmentSerializer(appt).data, status=status.HTTP_200_OK)

    @extend_schema(request=AppointmentCompleteSerializer, responses={200: AppointmentSerializer})
    @action(detail=True, methods=["post"], url_path="complete")
    def complete(self, request, pk=None):
        ser = AppointmentCompleteSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)

        appt = AppointmentService.complete(
            appointment_id=pk,
            actor_user_id=getattr(request.user, "id", None),
            diagnosis=ser.validated_data.get("diagnosis"),
            notes=ser.validated_data.get("notes"),
        )
        return Response(AppointmentSerializer(appt).data, status=status.HTTP_200_OK)

    @extend_schema(request=AppointmentCancelSerializer, responses={200: AppointmentSerializer})
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        ser = AppointmentCancelSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)

        appt = AppointmentService.cancel(
            appointment_id=pk,
            actor_user_id=getattr(request.user, "id", None),
            reason=ser.validated_data["reason"],
        )
        return Response(AppointmentSerializer(appt).data, status=status.HTTP_200_OK)

    @extend_schema(request=None, responses={200: AppointmentSerializer})
    @action(detail=True, methods=["post"], url_path="no_show")
    def no_show(self, request, pk=None):
        appt = AppointmentService.mark_no_show(appointment_id=pk, actor_user_id=getattr(request.user, "id", None))
        return Response(AppointmentSerializer(appt).data, status=status.HTTP_200_OK)
