from django.apps import AppConfig


class BillingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "hospital_core.billing"

    def ready(self):
        from hospital_core.billing.models import Invoice
        from hospital_core.common import sequences

        sequences.register(
            "invoice",
            sequences.SequenceSpec(
                prefix="INV",
                width=4,
                datepart="%Y%m%d",
                scope=sequences.Scope.GLOBAL,
                existing=lambda on: Invoice.objects.all(),
            ),
        )
