# hospital_core/lab/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from hospital_core.common.api.pagination import paginate
from hospital_core.common.permissions import LabTestPermission
from hospital_core.lab.api.serializers import (
    LabResultsSerializer,
    LabSampleSerializer,
    LabTestListQuerySerializer,
    LabTestOrderSerializer,
    LabTestSerializer,
)
from hospital_core.lab.models import LabTest
from hospital_core.lab.selectors import get_lab_test, list_lab_tests
from hospital_core.lab.services import LabTestService


@extend_schema(tags=["Lab"])
class LabTestViewSet(viewsets.ViewSet):
    permission_classes = [LabTestPermission]
    serializer_class = LabTestSerializer
    queryset = LabTest.objects.none()
    lookup_value_regex = r"[0-9a-fA-F-]{32,36}"

    def list(self, request):
        q = LabTestListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        qs = list_lab_tests(
            patient_id=q.validated_data.get("patient"),
            doctor_id=q.validated_data.get("doctor"),
            status=q.validated_data.get("status"),
            test_type=q.validated_data.get("test_type"),
            priority=q.validated_data.get("priority"),
        )
        return paginate(request, qs, LabTestSerializer)

    def retrieve(self, request, pk=None):
        return Response(LabTestSerializer(get_lab_test(lab_test_id=pk)).data, status=status.HTTP_200_OK)

    @extend_schema(request=LabTestOrderSerializer, responses={201: LabTestSerializer})
    def create(self, request):
        ser = LabTestOrderSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)

        test = LabTestService.order(
            patient_id=data.pop("patient"),
            doctor_id=data.pop("doctor"),
            appointment_id=data.pop("appointment"),
            actor_user_id=getattr(request.user, "id", None),
            **data,
        )
        return Response(LabTestSerializer(get_lab_test(lab_test_id=test.id)).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=LabSampleSerializer, responses={200: LabTestSerializer})
    @action(detail=True, methods=["post"], url_path="collect_sample")
    def collect_sample(self, request, pk=None):
        ser = LabSampleSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)
        test = LabTestService.collect_sample(
            lab_test_id=pk,
            actor_user_id=getattr(request.user, "id", None),
            performed_by=ser.validated_data["performed_by"],
        )
        return Response(LabTestSerializer(test).data, status=status.HTTP_200_OK)

    @extend_schema(request=LabResultsSerializer, responses={200: LabTestSerializer})
    @action(detail=True, methods=["post"], url_path="results")
    def results(self, request, pk=None):
        ser = LabResultsSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)
        test = LabTestService.record_results(
            lab_test_id=pk,
            actor_user_id=getattr(request.user, "id", None),
            **ser.validated_data,
        )
        return Response(LabTestSerializer(test).data, status=status.HTTP_200_OK)

    @extend_schema(request=None, responses={200: LabTestSerializer})
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        test = LabTestService.cancel(lab_test_id=pk, actor_user_id=getattr(request.user, "id", None))
        return Response(LabTestSerializer(test).data, status=status.HTTP_200_OK)
