# hospital_core/api/urls.py
from __future__ import annotations

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from hospital_core.api.health import health
from hospital_core.appointments.api.views import AppointmentViewSet
from hospital_core.audit.api.views import AuditLogViewSet
from hospital_core.billing.api.views import InvoiceViewSet
from hospital_core.doctors.api.views import DepartmentViewSet, DoctorViewSet
from hospital_core.lab.api.views import LabTestViewSet
from hospital_core.patients.api.views import PatientViewSet
from hospital_core.pharmacy.api.views import MedicineViewSet, PrescriptionViewSet

router = DefaultRouter()

router.register(r"patients", PatientViewSet, basename="patients")
router.register(r"doctors", DoctorViewSet, basename="doctors")
router.register(r"departments", DepartmentViewSet, basename="departments")
router.register(r"appointments", AppointmentViewSet, basename="appointments")
router.register(r"prescriptions", PrescriptionViewSet, basename="prescriptions")
router.register(r"medicines", MedicineViewSet, basename="medicines")
router.register(r"billing/invoices", InvoiceViewSet, basename="billing-invoices")
router.register(r"lab/tests", LabTestViewSet, basename="lab-tests")
router.register(r"audit/logs", AuditLogViewSet, basename="audit-logs")

urlpatterns = [
    path("health/", health, name="health"),
    path("", include(router.urls)),
]
