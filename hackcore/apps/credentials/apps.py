from django.apps import AppConfig


class CredentialsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "hackcore.apps.credentials"
    verbose_name = "Credenciales QR"
