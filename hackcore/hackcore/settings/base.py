from pathlib import Path
import os

# === Paths ===
# base.py está en: <root>/hackcore/hackcore/settings/base.py
BASE_DIR = Path(__file__).resolve().parents[3]  # <root>

# === Seguridad / Debug ===
SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "dev-secret-key-change-me")
DEBUG = os.environ.get("DEBUG", "1") == "1"
ALLOWED_HOSTS = os.environ.get("ALLOWED_HOSTS", "127.0.0.1,localhost,testserver").split(",")

# === Apps ===
INSTALLED_APPS = [
    # Django core
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Apps del proyecto
    "hackcore.apps.core",
    "hackcore.apps.notifications",
    "hackcore.apps.events",
    "hackcore.apps.registration",
    "hackcore.apps.submissions",
    "hackcore.apps.scoring",
    "hackcore.apps.judging",
    "hackcore.apps.leaderboard",
    "hackcore.apps.credentials",
    "hackcore.apps.certificates",
]

# === Middleware ===
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

# === URLs raíz del proyecto ===
ROOT_URLCONF = "hackcore.hackcore.urls"

# === Templates (solo admin) ===
TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
                "context_processors": [
                    "django.template.context_processors.debug",
                    "django.template.context_processors.request",
                    "django.contrib.auth.context_processors.auth",
                    "django.contrib.messages.context_processors.messages",
                ],
        },
    },
]

# === WSGI ===
WSGI_APPLICATION = "hackcore.hackcore.wsgi.application"

# === Base de datos (SQLite por defecto) ===
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

# === Password validators ===
AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

# === i18n / tz ===
# Las fases se calculan por día calendario en esta zona horaria.
LANGUAGE_CODE = "es"
TIME_ZONE = os.environ.get("TIME_ZONE", "America/New_York")
USE_I18N = True
USE_TZ = True

# === Static / Media ===
STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

MEDIA_URL = "/media/"
MEDIA_ROOT = BASE_DIR / "media"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# === Auth redirects ===
LOGIN_URL = "/admin/login/"

# === Logging ===
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "hackcore": {
            "handlers": ["console"],
            "level": os.environ.get("HACKCORE_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}

# === Hackathon ===
# Cupos de preselección si el evento no define shortlist_target_count
HACKCORE_DEFAULT_SHORTLIST_COUNT = int(os.environ.get("HACKCORE_DEFAULT_SHORTLIST_COUNT", "5"))
# "strict" = exactamente N (empates en el borde por orden estable)
# "include_ties" = se incluyen todos los empatados con el N-ésimo
HACKCORE_SHORTLIST_TIE_POLICY = os.environ.get("HACKCORE_SHORTLIST_TIE_POLICY", "strict")
# Pesos por defecto de la rúbrica (deben sumar 100)
HACKCORE_DEFAULT_WEIGHTS = (20, 20, 20, 20, 20)
# Colaborador que "dibuja" el certificado y devuelve una referencia (URL/ruta)
HACKCORE_CERTIFICATE_RENDERER = os.environ.get(
    "HACKCORE_CERTIFICATE_RENDERER",
    "hackcore.apps.certificates.rendering.StoragePathRenderer",
)
