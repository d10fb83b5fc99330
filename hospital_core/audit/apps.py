from django.apps import AppConfig


class AuditConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "hospital_core.audit"

    def ready(self):
        # setting_changed receiver that drops the cached emitter
        from hospital_core.audit import emitters  # noqa: F401
