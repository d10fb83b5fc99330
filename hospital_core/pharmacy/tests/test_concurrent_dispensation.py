# hospital_core/pharmacy/tests/test_concurrent_dispensation.py
"""
Row locks are a no-op on SQLite, so these only run against PostgreSQL
(TEST_DB_ENGINE=postgres).
"""
import datetime as dt
import threading

import pytest
from django.db import connection, connections

from hospital_core.appointments.models import Appointment
from hospital_core.common.api.exceptions import InsufficientStockError, LockTimeoutError
from hospital_core.doctors.models import Doctor
from hospital_core.patients.models import Patient
from hospital_core.pharmacy.models import Medicine, Prescription, PrescriptionItem, PrescriptionStatus
from hospital_core.pharmacy.services import DispensationService

pytestmark = [
    pytest.mark.django_db(transaction=True),
    pytest.mark.skipif(connection.vendor != "postgresql", reason="needs row-level locks (PostgreSQL)"),
]

WORKERS = 8


def _run_concurrently(fn, args_list):
    barrier = threading.Barrier(len(args_list))
    results = [None] * len(args_list)

    def _worker(i, args):
        try:
            barrier.wait()
            results[i] = fn(*args)
        except Exception as exc:  # collected and asserted on by the caller
            results[i] = exc
        finally:
            connections.close_all()

    threads = [threading.Thread(target=_worker, args=(i, a)) for i, a in enumerate(args_list)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return results


@pytest.fixture
def make_prescription():
    doctor = Doctor.objects.create(full_name="Pharmacy Race", specialization="GP", licence_number="LIC-RX-RACE")
    patient = Patient.objects.create(full_name="Stocked Patient", medical_record_number="PT-2026-7000")
    counter = iter(range(1, 60))

    def _make(*lines):
        n = next(counter)
        appt = Appointment.objects.create(
            patient=patient,
            doctor=doctor,
            appointment_date=dt.date(2026, 2, 20),
            appointment_time=dt.time(8, n),
            appointment_number=f"APT-20260220-{n:03d}",
        )
        rx = Prescription.objects.create(
            prescription_number=f"RX-20260220-{n:04d}",
            patient=patient,
            doctor=doctor,
            appointment=appt,
            diagnosis="Race",
        )
        # Line order follows creation order (PrescriptionItem is ordered by id).
        for medicine, quantity in lines:
            PrescriptionItem.objects.create(prescription=rx, medicine=medicine, quantity=quantity)
        return rx

    return _make


def _dispense(prescription_id):
    return DispensationService.dispense(prescription_id=prescription_id)


def test_competing_dispensations_never_oversell(make_prescription):
    stock, qty = 10, 3
    medicine = Medicine.objects.create(name="Contended", stock=stock, min_stock=0)
    prescriptions = [make_prescription((medicine, qty)) for _ in range(WORKERS)]

    results = _run_concurrently(_dispense, [(rx.id,) for rx in prescriptions])

    winners = [r for r in results if isinstance(r, Prescription)]
    short = [r for r in results if isinstance(r, InsufficientStockError)]
    assert len(winners) == stock // qty
    assert len(short) == WORKERS - stock // qty

    medicine.refresh_from_db()
    assert medicine.stock == stock - qty * (stock // qty)
    assert medicine.stock >= 0
    assert Prescription.objects.filter(status=PrescriptionStatus.COMPLETED).count() == stock // qty


def test_opposite_line_orders_do_not_deadlock(make_prescription):
    a = Medicine.objects.create(name="Alpha", stock=100, min_stock=0)
    b = Medicine.objects.create(name="Beta", stock=100, min_stock=0)
    prescriptions = [
        make_prescription((a, 1), (b, 1)) if i % 2 == 0 else make_prescription((b, 1), (a, 1))
        for i in range(WORKERS)
    ]

    results = _run_concurrently(_dispense, [(rx.id,) for rx in prescriptions])

    assert not [r for r in results if isinstance(r, LockTimeoutError)]
    assert all(isinstance(r, Prescription) for r in results), results

    a.refresh_from_db()
    b.refresh_from_db()
    assert a.stock == 100 - WORKERS
    assert b.stock == 100 - WORKERS
