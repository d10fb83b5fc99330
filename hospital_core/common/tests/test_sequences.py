# hospital_core/common/tests/test_sequences.py
import datetime as dt

import pytest
from django.db import transaction

from hospital_core.appointments.models import Appointment
from hospital_core.common.models import SequenceCounter
from hospital_core.common.sequences import SequenceAllocator, get_spec, format_number

DAY = dt.date(2026, 2, 20)


@pytest.mark.django_db
def test_formats_per_kind():
    assert SequenceAllocator.next_number("appointment", on=DAY) == "APT-20260220-001"
    assert SequenceAllocator.next_number("invoice", on=DAY) == "INV-20260220-0001"
    assert SequenceAllocator.next_number("prescription", on=DAY) == "RX-20260220-0001"
    assert SequenceAllocator.next_number("lab_test", on=DAY) == "LAB-20260220-0001"
    assert SequenceAllocator.next_number("medical_record", on=DAY) == "PT-2026-0001"


@pytest.mark.django_db
def test_global_counter_keeps_counting_across_days():
    SequenceAllocator.next_number("invoice", on=DAY)
    assert SequenceAllocator.next_number("invoice", on=DAY + dt.timedelta(days=1)) == "INV-20260221-0002"


@pytest.mark.django_db
def test_first_use_seeds_from_existing_rows(patient, doctor):
    for i, at in enumerate((dt.time(9, 0), dt.time(9, 30))):
        Appointment.objects.create(
            patient=patient,
            doctor=doctor,
            appointment_date=DAY,
            appointment_time=at,
            appointment_number=f"legacy-{i}",
        )

    assert SequenceAllocator.next_number("appointment", on=DAY) == "APT-20260220-003"
    assert SequenceCounter.objects.get(key="appointment:20260220").value == 3


@pytest.mark.django_db
def test_rolled_back_allocation_is_reused():
    with pytest.raises(RuntimeError):
        with transaction.atomic():
            SequenceAllocator.next_number("invoice", on=DAY)
            raise RuntimeError("insert failed")

    assert SequenceAllocator.next_number("invoice", on=DAY) == "INV-20260220-0001"


@pytest.mark.django_db(transaction=True)
def test_refuses_to_run_outside_a_transaction():
    with pytest.raises(transaction.TransactionManagementError):
        SequenceAllocator.next_number("invoice", on=DAY)


def test_unknown_kind():
    with pytest.raises(LookupError):
        get_spec("boarding_pass")


def test_format_number_pads():
    assert format_number(get_spec("appointment"), DAY, 7) == "APT-20260220-007"
