# hospital_core/billing/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from hospital_core.billing.api.serializers import (
    InvoiceCancelSerializer,
    InvoiceCreateSerializer,
    InvoiceListQuerySerializer,
    InvoiceSerializer,
    PaymentCreateSerializer,
)
from hospital_core.billing.models import Invoice
from hospital_core.billing.selectors import get_invoice, list_invoices
from hospital_core.billing.services import InvoiceService, PaymentService
from hospital_core.common.api.pagination import paginate
from hospital_core.common.permissions import InvoicePermission


@extend_schema(tags=["Billing"])
class InvoiceViewSet(viewsets.ViewSet):
    permission_classes = [InvoicePermission]
    serializer_class = InvoiceSerializer
    queryset = Invoice.objects.none()
    lookup_value_regex = r"[0-9a-fA-F-]{32,36}"

    def list(self, request):
        q = InvoiceListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        qs = list_invoices(
            patient_id=q.validated_data.get("patient"),
            status=q.validated_data.get("status"),
            start_date=q.validated_data.get("start_date"),
            end_date=q.validated_data.get("end_date"),
        )
        return paginate(request, qs, InvoiceSerializer)

    def retrieve(self, request, pk=None):
        return Response(InvoiceSerializer(get_invoice(invoice_id=pk)).data, status=status.HTTP_200_OK)

    @extend_schema(request=InvoiceCreateSerializer, responses={201: InvoiceSerializer})
    def create(self, request):
        ser = InvoiceCreateSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)

        invoice = InvoiceService.create(
            patient_id=data.pop("patient"),
            appointment_id=data.pop("appointment"),
            actor_user_id=getattr(request.user, "id", None),
            **data,
        )
        return Response(InvoiceSerializer(get_invoice(invoice_id=invoice.id)).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=PaymentCreateSerializer, responses={201: InvoiceSerializer})
    @action(detail=True, methods=["post"], url_path="payments")
    def payments(self, request, pk=None):
        ser = PaymentCreateSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)

        PaymentService.record_payment(
            invoice_id=pk,
            amount=ser.validated_data["amount"],
            method=ser.validated_data["method"],
            reference=ser.validated_data["reference"],
            recorded_by_user_id=getattr(request.user, "id", None),
        )
        return Response(InvoiceSerializer(get_invoice(invoice_id=pk)).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=InvoiceCancelSerializer, responses={200: InvoiceSerializer})
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        ser = InvoiceCancelSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)

        InvoiceService.cancel(
            invoice_id=pk,
            actor_user_id=getattr(request.user, "id", None),
            reason=ser.validated_data["reason"],
        )
        return Response(InvoiceSerializer(get_invoice(invoice_id=pk)).data, status=status.HTTP_200_OK)
