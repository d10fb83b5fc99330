from django.apps import AppConfig


class AppointmentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "hospital_core.appointments"

    def ready(self):
        from hospital_core.appointments.models import Appointment
        from hospital_core.common import sequences

        sequences.register(
            "appointment",
            sequences.SequenceSpec(
                prefix="APT",
                width=3,
                datepart="%Y%m%d",
                scope=sequences.Scope.DATE,
                existing=lambda on: Appointment.objects.filter(appointment_date=on),
            ),
        )
