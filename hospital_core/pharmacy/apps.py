from django.apps import AppConfig


class PharmacyConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "hospital_core.pharmacy"

    def ready(self):
        from hospital_core.common import sequences
        from hospital_core.pharmacy import subscribers  # noqa: F401
        from hospital_core.pharmacy.models import Prescription

        sequences.register(
            "prescription",
            sequences.SequenceSpec(
                prefix="RX",
                width=4,
                datepart="%Y%m%d",
                scope=sequences.Scope.GLOBAL,
                existing=lambda on: Prescription.objects.all(),
            ),
        )
