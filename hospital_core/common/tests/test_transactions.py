# hospital_core/common/tests/test_transactions.py
import pytest
from django.db import OperationalError

from hospital_core.common.api.exceptions import LockTimeoutError
from hospital_core.common.transactions import TransactionContext, is_lock_failure, run_in_transaction
from hospital_core.doctors.models import Doctor

pytestmark = pytest.mark.django_db


class FakeDriverError(Exception):
    def __init__(self, sqlstate):
        super().__init__(sqlstate)
        self.sqlstate = sqlstate


def _operational(sqlstate):
    try:
        raise OperationalError("could not obtain lock") from FakeDriverError(sqlstate)
    except OperationalError as exc:
        return exc


def test_commits_and_returns_result():
    def _create(ctx: TransactionContext):
        return Doctor.objects.using(ctx.using).create(full_name="A", specialization="GP", licence_number="L-1")

    doctor = run_in_transaction(_create)
    assert Doctor.objects.filter(id=doctor.id).exists()


def test_failure_rolls_back_every_write():
    def _two_writes(ctx):
        Doctor.objects.using(ctx.using).create(full_name="A", specialization="GP", licence_number="L-1")
        Doctor.objects.using(ctx.using).create(full_name="B", specialization="GP", licence_number="L-2")
        raise ValueError("second step failed")

    with pytest.raises(ValueError):
        run_in_transaction(_two_writes)

    assert Doctor.objects.count() == 0


@pytest.mark.parametrize("sqlstate", ["55P03", "40P01", "40001"])
def test_lock_failures_surface_as_retryable_conflict(sqlstate):
    def _locked(ctx):
        raise _operational(sqlstate)

    with pytest.raises(LockTimeoutError) as exc:
        run_in_transaction(_locked)
    assert exc.value.status_code == 409
    assert exc.value.error_code == "lock_timeout"


def test_other_operational_errors_propagate_unchanged():
    err = _operational("08006")
    assert not is_lock_failure(err)

    def _broken(ctx):
        raise err

    with pytest.raises(OperationalError):
        run_in_transaction(_broken)


def test_on_commit_runs_only_after_commit(django_capture_on_commit_callbacks):
    ran = []

    with django_capture_on_commit_callbacks(execute=True):
        run_in_transaction(lambda ctx: ctx.on_commit(lambda: ran.append("ok")))

        with pytest.raises(RuntimeError):
            def _fails(ctx):
                ctx.on_commit(lambda: ran.append("never"))
                raise RuntimeError("rolled back")

            run_in_transaction(_fails)

    assert ran == ["ok"]
