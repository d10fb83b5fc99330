# hospital_core/pharmacy/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from hospital_core.common.api.pagination import paginate
from hospital_core.common.permissions import (
    ROLE_ADMIN,
    MedicinePermission,
    PrescriptionPermission,
    user_roles,
)
from hospital_core.doctors.selectors import doctor_for_user, get_doctor
from hospital_core.pharmacy.api.serializers import (
    MedicineCreateSerializer,
    MedicineSerializer,
    PrescriptionCancelSerializer,
    PrescriptionCreateSerializer,
    PrescriptionListQuerySerializer,
    PrescriptionSerializer,
    StockAdjustmentSerializer,
)
from hospital_core.pharmacy.models import Medicine, Prescription
from hospital_core.pharmacy.selectors import (
    get_medicine,
    get_prescription,
    list_medicines,
    list_prescriptions,
    low_stock_medicines,
)
from hospital_core.pharmacy.services import DispensationService, MedicineService, PrescriptionService

UUID_LOOKUP = r"[0-9a-fA-F-]{32,36}"


def _prescribing_doctor(request, requested_doctor_id):
    doctor = doctor_for_user(request.user)
    if doctor is not None:
        return doctor
    if ROLE_ADMIN in user_roles(request.user) and requested_doctor_id:
        return get_doctor(doctor_id=requested_doctor_id)
    raise PermissionDenied("Only doctors can create prescriptions.")


@extend_schema(tags=["Pharmacy"])
class PrescriptionViewSet(viewsets.ViewSet):
    permission_classes = [PrescriptionPermission]
    serializer_class = PrescriptionSerializer
    queryset = Prescription.objects.none()
    lookup_value_regex = UUID_LOOKUP

    def list(self, request):
        q = PrescriptionListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        qs = list_prescriptions(
            patient_id=q.validated_data.get("patient"),
            doctor_id=q.validated_data.get("doctor"),
            status=q.validated_data.get("status"),
        )
        return paginate(request, qs, PrescriptionSerializer)

    def retrieve(self, request, pk=None):
        return Response(PrescriptionSerializer(get_prescription(prescription_id=pk)).data, status=status.HTTP_200_OK)

    @extend_schema(request=PrescriptionCreateSerializer, responses={201: PrescriptionSerializer})
    def create(self, request):
        ser = PrescriptionCreateSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        doctor = _prescribing_doctor(request, data.get("doctor"))
        rx = PrescriptionService.create(
            doctor_id=doctor.id,
            appointment_id=data["appointment"],
            patient_id=data["patient"],
            diagnosis=data["diagnosis"],
            items=data["items"],
            advice=data["advice"],
            lab_tests=data["lab_tests"],
            follow_up_date=data["follow_up_date"],
            actor_user_id=getattr(request.user, "id", None),
        )
        return Response(PrescriptionSerializer(get_prescription(prescription_id=rx.id)).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: PrescriptionSerializer})
    @action(detail=True, methods=["post"], url_path="dispense")
    def dispense(self, request, pk=None):
        rx = DispensationService.dispense(prescription_id=pk, actor_user_id=getattr(request.user, "id", None))
        return Response(PrescriptionSerializer(get_prescription(prescription_id=rx.id)).data, status=status.HTTP_200_OK)

    @extend_schema(request=PrescriptionCancelSerializer, responses={200: PrescriptionSerializer})
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        ser = PrescriptionCancelSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)
        rx = PrescriptionService.cancel(
            prescription_id=pk,
            actor_user_id=getattr(request.user, "id", None),
            reason=ser.validated_data["reason"],
        )
        return Response(PrescriptionSerializer(get_prescription(prescription_id=rx.id)).data, status=status.HTTP_200_OK)


@extend_schema(tags=["Pharmacy"])
class MedicineViewSet(viewsets.ViewSet):
    permission_classes = [MedicinePermission]
    serializer_class = MedicineSerializer
    queryset = Medicine.objects.none()
    lookup_value_regex = UUID_LOOKUP

    def list(self, request):
        qs = list_medicines(
            q=request.query_params.get("q"),
            category=request.query_params.get("category"),
            active_only=request.query_params.get("include_inactive") not in ("1", "true", "True"),
        )
        return paginate(request, qs, MedicineSerializer)

    def retrieve(self, request, pk=None):
        return Response(MedicineSerializer(get_medicine(medicine_id=pk)).data, status=status.HTTP_200_OK)

    @extend_schema(request=MedicineCreateSerializer, responses={201: MedicineSerializer})
    def create(self, request):
        ser = MedicineCreateSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)
        medicine = MedicineService.create_medicine(actor_user_id=getattr(request.user, "id", None), **ser.validated_data)
        return Response(MedicineSerializer(medicine).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: MedicineSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="low_stock")
    def low_stock(self, request):
        return Response(MedicineSerializer(low_stock_medicines(), many=True).data, status=status.HTTP_200_OK)

    @extend_schema(request=StockAdjustmentSerializer, responses={200: MedicineSerializer})
    @action(detail=True, methods=["post"], url_path="adjust_stock")
    def adjust_stock(self, request, pk=None):
        ser = StockAdjustmentSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)
        medicine = MedicineService.adjust_stock(
            medicine_id=pk,
            delta=ser.validated_data["delta"],
            reason=ser.validated_data["reason"],
            actor_user_id=getattr(request.user, "id", None),
        )
        return Response(MedicineSerializer(medicine).data, status=status.HTTP_200_OK)
