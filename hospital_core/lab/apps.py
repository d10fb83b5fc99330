from django.apps import AppConfig


class LabConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "hospital_core.lab"

    def ready(self):
        from hospital_core.common import sequences
        from hospital_core.lab.models import LabTest

        sequences.register(
            "lab_test",
            sequences.SequenceSpec(
                prefix="LAB",
                width=4,
                datepart="%Y%m%d",
                scope=sequences.Scope.GLOBAL,
                existing=lambda on: LabTest.objects.all(),
            ),
        )
