# Por defecto se usa la configuración de desarrollo; producción importa prod.py
# vía DJANGO_SETTINGS_MODULE=hackcore.hackcore.settings.prod
from .base import *  # noqa: F401,F403
