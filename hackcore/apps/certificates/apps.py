from django.apps import AppConfig


class CertificatesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "hackcore.apps.certificates"
    verbose_name = "Certificados"
