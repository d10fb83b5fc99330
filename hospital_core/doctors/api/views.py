# hospital_core/doctors/api/views.py
from __future__ import annotations

from django.utils import timezone
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from hospital_core.appointments.api.serializers import AppointmentSerializer
from hospital_core.appointments.selectors import doctor_queue, doctor_schedule
from hospital_core.common.api.pagination import paginate
from hospital_core.common.permissions import DepartmentPermission, DoctorPermission
from hospital_core.doctors.api.serializers import (
    DayQuerySerializer,
    DepartmentCreateSerializer,
    DepartmentListQuerySerializer,
    DepartmentSerializer,
    DepartmentUpdateSerializer,
    DoctorCreateSerializer,
    DoctorListQuerySerializer,
    DoctorSerializer,
    DoctorUpdateSerializer,
)
from hospital_core.doctors.models import Department, Doctor
from hospital_core.doctors.selectors import (
    department_doctors,
    get_department,
    get_doctor,
    list_departments,
    list_doctors,
)
from hospital_core.doctors.services import DepartmentService, DoctorService

_DATE_PARAM = OpenApiParameter(
    name="date",
    type=OpenApiTypes.DATE,
    location=OpenApiParameter.QUERY,
    required=False,
    description="Day to show (YYYY-MM-DD). Defaults to today.",
)


def _day(request):
    q = DayQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return q.validated_data.get("date") or timezone.localdate()


@extend_schema(tags=["Doctors"])
class DoctorViewSet(viewsets.ViewSet):
    permission_classes = [DoctorPermission]
    serializer_class = DoctorSerializer
    queryset = Doctor.objects.none()
    lookup_value_regex = r"[0-9a-fA-F-]{32,36}"

    def list(self, request):
        q = DoctorListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        qs = list_doctors(
            specialization=q.validated_data.get("specialization"),
            department_id=q.validated_data.get("department"),
            available_only=q.validated_data["available"],
        )
        return paginate(request, qs, DoctorSerializer)

    def retrieve(self, request, pk=None):
        return Response(DoctorSerializer(get_doctor(doctor_id=pk)).data, status=status.HTTP_200_OK)

    @extend_schema(request=DoctorCreateSerializer, responses={201: DoctorSerializer})
    def create(self, request):
        ser = DoctorCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        doctor = DoctorService.create_doctor(
            actor_user_id=getattr(request.user, "id", None),
            **ser.validated_data,
        )
        return Response(DoctorSerializer(doctor).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=DoctorUpdateSerializer, responses={200: DoctorSerializer})
    def partial_update(self, request, pk=None):
        doctor = get_doctor(doctor_id=pk)

        ser = DoctorUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)

        doctor = DoctorService.update_doctor(
            actor_user_id=getattr(request.user, "id", None),
            doctor_id=doctor.id,
            data=ser.validated_data,
        )
        return Response(DoctorSerializer(doctor).data, status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        doctor = get_doctor(doctor_id=pk)
        DoctorService.deactivate_doctor(actor_user_id=getattr(request.user, "id", None), doctor_id=doctor.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(parameters=[_DATE_PARAM], responses={200: AppointmentSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="schedule")
    def schedule(self, request, pk=None):
        doctor = get_doctor(doctor_id=pk)
        qs = doctor_schedule(doctor_id=doctor.id, on=_day(request))
        return Response(AppointmentSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(parameters=[_DATE_PARAM], responses={200: AppointmentSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="queue")
    def queue(self, request, pk=None):
        doctor = get_doctor(doctor_id=pk)
        qs = doctor_queue(doctor_id=doctor.id, on=_day(request))
        return Response(AppointmentSerializer(qs, many=True).data, status=status.HTTP_200_OK)


@extend_schema(tags=["Departments"])
class DepartmentViewSet(viewsets.ViewSet):
    permission_classes = [DepartmentPermission]
    serializer_class = DepartmentSerializer
    queryset = Department.objects.none()
    lookup_value_regex = r"[0-9a-fA-F-]{32,36}"

    def list(self, request):
        q = DepartmentListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        return paginate(request, list_departments(is_active=q.validated_data["is_active"]), DepartmentSerializer)

    def retrieve(self, request, pk=None):
        return Response(DepartmentSerializer(get_department(department_id=pk)).data, status=status.HTTP_200_OK)

    @extend_schema(request=DepartmentCreateSerializer, responses={201: DepartmentSerializer})
    def create(self, request):
        ser = DepartmentCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        department = DepartmentService.create_department(
            actor_user_id=getattr(request.user, "id", None),
            **ser.validated_data,
        )
        return Response(
            DepartmentSerializer(get_department(department_id=department.id)).data,
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(request=DepartmentUpdateSerializer, responses={200: DepartmentSerializer})
    def partial_update(self, request, pk=None):
        department = get_department(department_id=pk)

        ser = DepartmentUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)

        DepartmentService.update_department(
            actor_user_id=getattr(request.user, "id", None),
            department_id=department.id,
            data=ser.validated_data,
        )
        return Response(DepartmentSerializer(get_department(department_id=department.id)).data)

    def destroy(self, request, pk=None):
        department = get_department(department_id=pk)
        DepartmentService.deactivate_department(
            actor_user_id=getattr(request.user, "id", None),
            department_id=department.id,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses={200: DoctorSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="doctors")
    def doctors(self, request, pk=None):
        department = get_department(department_id=pk)
        qs = department_doctors(department_id=department.id)
        return Response(DoctorSerializer(qs, many=True).data, status=status.HTTP_200_OK)
