# hospital_core/pharmacy/tests/test_stock_constraints.py
import importlib
import warnings

import pytest
from django.db import IntegrityError, transaction
from django.utils.deprecation import RemovedInDjango60Warning

from hospital_core.pharmacy.models import Medicine, PrescriptionItem

pytestmark = pytest.mark.django_db


def test_database_rejects_negative_stock(make_medicine):
    a = make_medicine("Saline", stock=1)

    with pytest.raises(IntegrityError):
        with transaction.atomic():
            Medicine.objects.filter(id=a.id).update(stock=-1)

    a.refresh_from_db()
    assert a.stock == 1


def test_check_constraints_are_declared_with_condition():
    names = {c.name: c for c in Medicine._meta.constraints + PrescriptionItem._meta.constraints}
    assert names["ck_medicine_stock_non_negative"].condition is not None
    assert names["ck_rx_item_quantity_positive"].condition is not None


def test_pharmacy_migration_loads_without_deprecations():
    module = importlib.import_module("hospital_core.pharmacy.migrations.0001_initial")
    with warnings.catch_warnings():
        warnings.simplefilter("error", RemovedInDjango60Warning)
        importlib.reload(module)
