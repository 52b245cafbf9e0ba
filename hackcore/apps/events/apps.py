from django.apps import AppConfig


class EventsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "hackcore.apps.events"
    verbose_name = "Eventos (fases)"
