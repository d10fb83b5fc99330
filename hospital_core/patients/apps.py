from django.apps import AppConfig


class PatientsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "hospital_core.patients"

    def ready(self):
        from hospital_core.common import sequences
        from hospital_core.patients.models import Patient

        sequences.register(
            "medical_record",
            sequences.SequenceSpec(
                prefix="PT",
                width=4,
                datepart="%Y",
                scope=sequences.Scope.GLOBAL,
                existing=lambda on: Patient.objects.all(),
            ),
        )
