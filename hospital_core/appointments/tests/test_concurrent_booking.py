# hospital_core/appointments/tests/test_concurrent_booking.py
"""
Row locks are a no-op on SQLite, so these only run against PostgreSQL
(TEST_DB_ENGINE=postgres).
"""
import datetime as dt
import threading

import pytest
from django.db import connection, connections

from hospital_core.appointments.constants import AppointmentStatus
from hospital_core.appointments.models import Appointment
from hospital_core.appointments.services import AppointmentService
from hospital_core.common.api.exceptions import ConflictError
from hospital_core.doctors.models import Doctor
from hospital_core.patients.models import Patient

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


def test_same_slot_race_has_exactly_one_winner():
    doctor = Doctor.objects.create(full_name="Race Doctor", specialization="GP", licence_number="LIC-RACE")
    patients = [
        Patient.objects.create(full_name=f"Racer {i}", medical_record_number=f"PT-2026-9{i:03d}")
        for i in range(WORKERS)
    ]
    day, at = dt.date(2026, 2, 20), dt.time(10, 0)

    def _book(patient_id):
        return AppointmentService.book(
            patient_id=patient_id,
            doctor_id=doctor.id,
            appointment_date=day,
            appointment_time=at,
        )

    results = _run_concurrently(_book, [(p.id,) for p in patients])

    winners = [r for r in results if isinstance(r, Appointment)]
    losers = [r for r in results if isinstance(r, ConflictError)]
    assert len(winners) == 1
    assert len(losers) == WORKERS - 1
    assert all(e.error_code == "slot_taken" for e in losers)

    active = Appointment.objects.filter(doctor=doctor, appointment_date=day, appointment_time=at).exclude(
        status=AppointmentStatus.CANCELLED
    )
    assert active.count() == 1
    assert winners[0].queue_token == "Q-001"


def test_different_slots_get_distinct_numbers_and_tokens():
    doctor = Doctor.objects.create(full_name="Busy Doctor", specialization="GP", licence_number="LIC-BUSY")
    patient = Patient.objects.create(full_name="Regular", medical_record_number="PT-2026-8000")
    day = dt.date(2026, 2, 20)

    def _book(minute):
        return AppointmentService.book(
            patient_id=patient.id,
            doctor_id=doctor.id,
            appointment_date=day,
            appointment_time=dt.time(9, minute),
        )

    results = _run_concurrently(_book, [(m,) for m in range(0, WORKERS * 5, 5)])

    assert all(isinstance(r, Appointment) for r in results), results
    assert len({r.appointment_number for r in results}) == WORKERS
    assert sorted(r.queue_token for r in results) == [f"Q-{i:03d}" for i in range(1, WORKERS + 1)]
